from __future__ import annotations

from typing import List

from flask import Blueprint, Response, current_app, g, jsonify, request
from marshmallow import ValidationError

from ...errors import TenantRequired, ValidationFailed
from ...extensions import db
from ...integrations.shopify.client import ShopifyCatalog
from ...models.qr_code import QRCode
from ...schemas.qr_code import CatalogProductSchema, QRCodeDraftSchema, QRCodeSchema, SupplementedQRCodeSchema
from .images import QRCodeImageGenerator
from .store import QRCodeStore
from .supplement import supplement_qr_codes


bp = Blueprint("qrcodes", __name__, url_prefix="/qrcodes")
products_bp = Blueprint("products", __name__, url_prefix="/products")

_draft_schema = QRCodeDraftSchema()
_record_schema = QRCodeSchema()
_supplemented_schema = SupplementedQRCodeSchema()


def _shop() -> str:
    shop = getattr(g, "shop", None)
    if not shop:
        raise TenantRequired()
    return shop


def _store() -> QRCodeStore:
    return QRCodeStore(db.session)


def _images() -> QRCodeImageGenerator:
    return QRCodeImageGenerator.from_config(current_app.config)


def _catalog(shop: str) -> ShopifyCatalog:
    return ShopifyCatalog.from_config(current_app.config, shop)


def _supplemented(rows: List[QRCode], shop: str) -> list:
    out = supplement_qr_codes(
        rows,
        _catalog(shop),
        _images(),
        timeout=float(current_app.config.get("SUPPLEMENT_TIMEOUT", 15)),
    )
    return _supplemented_schema.dump(out, many=True)


def _load_draft(partial: bool = False) -> dict:
    data = request.get_json(silent=True) or {}
    try:
        return _draft_schema.load(data, partial=partial)
    except ValidationError as e:
        # Type errors are reported through the same field-scoped channel as missing fields
        raise ValidationFailed({k: "; ".join(v) if isinstance(v, list) else str(v) for k, v in e.messages.items()})


@bp.get("")
def list_qrcodes():
    shop = _shop()
    rows = _store().list_by_shop(shop)
    return jsonify({"qrcodes": _supplemented(rows, shop)})


@bp.post("")
def create_qrcode():
    shop = _shop()
    draft = _load_draft()
    store = _store()
    qr_id = store.create(shop, draft)
    row = store.get_or_404(qr_id, shop)
    return jsonify({"id": qr_id, "qrcode": _record_schema.dump(row)}), 201


@bp.get("/<int:qr_id>")
def get_qrcode(qr_id: int):
    shop = _shop()
    row = _store().get_or_404(qr_id, shop)
    return jsonify({"qrcode": _supplemented([row], shop)[0]})


@bp.route("/<int:qr_id>", methods=["PATCH", "PUT"])
def update_qrcode(qr_id: int):
    shop = _shop()
    changes = _load_draft(partial=True)
    row = _store().update(qr_id, shop, changes)
    return jsonify({"qrcode": _record_schema.dump(row)})


@bp.delete("/<int:qr_id>")
def delete_qrcode(qr_id: int):
    _store().delete(qr_id, _shop())
    return Response(status=204)


@bp.get("/<int:qr_id>/image")
def qrcode_image(qr_id: int):
    row = _store().get_or_404(qr_id, _shop())
    size = request.args.get("size")
    try:
        box_size = max(1, min(20, int(size))) if size is not None else None
    except ValueError:
        box_size = None
    images = _images()
    png = images.render_png(images.scan_url(row.id), box_size=box_size)
    resp = Response(png, mimetype="image/png")
    resp.headers["Cache-Control"] = "private, max-age=60"
    return resp


@products_bp.get("")
def list_products():
    """Catalog products a merchant can point a new code at."""
    shop = _shop()
    try:
        first = max(1, min(50, int(request.args.get("first", 25))))
    except ValueError:
        first = 25
    products = _catalog(shop).list_products(first)
    return jsonify({"products": CatalogProductSchema().dump(products, many=True)})
