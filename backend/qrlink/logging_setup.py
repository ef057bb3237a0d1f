from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from flask import Flask

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_LOG_FILENAME = "qrlink.log"


def configure_logging(app: Flask) -> Path | None:
    """Configure the ``qrlink`` logger tree.

    Always attaches a stream handler; when LOG_DIR is configured also writes a
    rotating file under LOG_DIR/qrlink.log. Returns the log file path, if any.
    """
    level = getattr(logging, str(app.config.get("LOG_LEVEL") or "INFO").upper(), logging.INFO)
    fmt = logging.Formatter(LOG_FORMAT)

    logger = logging.getLogger("qrlink")
    logger.setLevel(level)

    # avoid duplicate handlers when the factory runs more than once (tests)
    if not any(getattr(h, "_qrlink", False) and not hasattr(h, "baseFilename") for h in logger.handlers):
        stream = logging.StreamHandler()
        stream.setFormatter(fmt)
        stream._qrlink = True  # type: ignore[attr-defined]
        logger.addHandler(stream)

    log_dir = app.config.get("LOG_DIR")
    if not log_dir:
        return None

    root = Path(log_dir).expanduser()
    root.mkdir(parents=True, exist_ok=True)
    log_path = root / _LOG_FILENAME
    if not any(getattr(h, "baseFilename", "") == str(log_path.resolve()) for h in logger.handlers):
        handler = logging.handlers.RotatingFileHandler(log_path, maxBytes=5_000_000, backupCount=3, encoding="utf-8")
        handler.setFormatter(fmt)
        handler.setLevel(level)
        logger.addHandler(handler)

    # also wire werkzeug request logs into the same file
    wz = logging.getLogger("werkzeug")
    for h in logger.handlers:
        if hasattr(h, "baseFilename") and h not in wz.handlers:
            wz.addHandler(h)
    return log_path
