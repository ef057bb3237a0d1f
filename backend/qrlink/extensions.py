from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_cors import CORS
import os

# Flask extensions singletons

db = SQLAlchemy()
migrate = Migrate()

# Admin UI origins allowed to call /api/v1 (comma-separated). In production avoid wildcard.
_allowed = os.getenv("CORS_ALLOW_ORIGINS", "").strip()
_origins = [o.strip() for o in _allowed.split(",") if o.strip()] if _allowed else []
if not _origins:
	# Fallback defaults for local development
	env = os.getenv("FLASK_ENV", "development").lower()
	if env != "production":
		_origins = [
			"http://localhost:3000",
			"http://127.0.0.1:3000",
		]
cors = CORS(resources={r"/api/*": {"origins": _origins}})
