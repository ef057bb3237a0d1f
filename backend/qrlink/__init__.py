import logging
from typing import Any, Mapping

from flask import Flask, jsonify
from .config import get_config
from .errors import QRLinkError
from .extensions import db, migrate, cors
from .logging_setup import configure_logging
from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from dotenv import load_dotenv
from werkzeug.middleware.proxy_fix import ProxyFix

log = logging.getLogger(__name__)


def create_app(config_name: str | None = None, overrides: Mapping[str, Any] | None = None) -> Flask:
    app = Flask(__name__)

    # Load config
    # Ensure .env is loaded before reading env vars
    load_dotenv()
    app.config.from_object(get_config(config_name))
    if overrides:
        app.config.update(overrides)

    configure_logging(app)

    # Honor proxy headers so scan redirects and generated URLs see the public host
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1, x_prefix=1)  # type: ignore[assignment]

    # Init extensions
    cors.init_app(app)
    db.init_app(app)
    migrate.init_app(app, db)

    # Make sure the model is registered with the metadata (migrations, create_all)
    from .models import qr_code  # noqa: F401

    # Register blueprints: merchant API under /api/v1, public scan endpoint at the root
    from .apis.v1 import register_api
    from .modules.scan.routes import bp as scan_bp
    register_api(app)
    app.register_blueprint(scan_bp)

    @app.errorhandler(QRLinkError)
    def handle_qrlink_error(err: QRLinkError):
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(OperationalError)
    def handle_store_unavailable(err: OperationalError):
        db.session.rollback()
        log.error("record store unavailable: %s", err.orig if getattr(err, "orig", None) else err)
        return jsonify({"error": "Store unavailable", "retryable": True}), 503

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.get("/db-check")
    def db_check():
        # OperationalError falls through to the 503 handler above
        db.session.execute(text("SELECT 1"))
        return {"db": "ok"}

    return app
