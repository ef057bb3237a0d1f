from __future__ import annotations

import enum
import logging

from flask import Blueprint, jsonify, redirect

from ...errors import DestinationError, QRCodeNotFound
from ...extensions import db
from ..qrcodes.destinations import resolve_destination
from ..qrcodes.store import MAX_QR_ID, QRCodeStore

log = logging.getLogger(__name__)

bp = Blueprint("scan", __name__, url_prefix="/qrcodes")


class ScanStage(str, enum.Enum):
    RECEIVED = "received"
    LOOKED_UP = "looked_up"
    COUNTED = "counted"
    REDIRECTED = "redirected"
    RESOLUTION_FAILED = "resolution_failed"
    FAILED = "failed"


def _parse_id(raw: str) -> int | None:
    raw = (raw or "").strip()
    if not (raw.isascii() and raw.isdigit()):
        return None
    value = int(raw)
    return value if 0 < value <= MAX_QR_ID else None


@bp.get("/<string:raw_id>/scan")
def scan(raw_id: str):
    """Count a physical scan and send the visitor on to the code's destination.

    The scan is recorded before the destination is resolved, so a record with a
    broken destination still shows that someone tried to use it. No retries:
    the scanning device re-scans.
    """
    log.debug("scan %r: %s", raw_id, ScanStage.RECEIVED.value)
    qr_id = _parse_id(raw_id)
    if qr_id is None:
        log.info("scan %r: %s (malformed id)", raw_id, ScanStage.FAILED.value)
        return jsonify({"error": "Malformed QR code id"}), 400

    store = QRCodeStore(db.session)
    row = store.get(qr_id)
    if row is None:
        log.info("scan %s: %s (not found)", qr_id, ScanStage.FAILED.value)
        raise QRCodeNotFound(qr_id)
    log.debug("scan %s: %s", qr_id, ScanStage.LOOKED_UP.value)

    # Resolve from the snapshot that passed lookup; act on the outcome only after counting
    failure: DestinationError | None = None
    try:
        url = resolve_destination(row)
    except DestinationError as e:
        url, failure = None, e

    store.increment_scans(qr_id)
    log.debug("scan %s: %s", qr_id, ScanStage.COUNTED.value)

    if failure is not None:
        log.error("scan %s: %s: %s", qr_id, ScanStage.RESOLUTION_FAILED.value, failure.message)
        return jsonify(failure.to_dict()), failure.status_code

    log.info("scan %s: %s -> %s", qr_id, ScanStage.REDIRECTED.value, url)
    return redirect(url, code=302)
