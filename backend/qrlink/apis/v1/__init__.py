from flask import Blueprint, Flask, g, request, current_app

from ...modules.qrcodes.routes import bp as qrcodes_bp, products_bp


def register_api(app: Flask) -> None:
    api_v1 = Blueprint("api_v1", __name__, url_prefix="/api/v1")

    # Tenant context loader. Every admin request acts on behalf of one shop.
    # Production requires a signed bearer token issued by issue_shop_token().
    # In development (DEBUG=True) an `X-Shop-Domain` header is accepted as well
    # to simplify local testing.
    @api_v1.before_request  # type: ignore
    def _load_current_shop():
        from ...security import verify_shop_token
        shop: str | None = None
        debug_mode = bool(current_app.config.get("DEBUG"))

        # Bearer token takes precedence
        auth = request.headers.get("Authorization") or ""
        if auth.lower().startswith("bearer "):
            token = auth[7:].strip()
            shop = verify_shop_token(
                token,
                secret=current_app.config.get("SECRET_KEY"),
                max_age=int(current_app.config.get("SHOP_TOKEN_MAX_AGE", 86400)),
            )
        elif debug_mode:
            raw = (request.headers.get("X-Shop-Domain") or "").strip().lower()
            shop = raw or None
        g.shop = shop  # type: ignore[attr-defined]

    # Mount feature blueprints
    api_v1.register_blueprint(qrcodes_bp)
    api_v1.register_blueprint(products_bp)

    app.register_blueprint(api_v1)
