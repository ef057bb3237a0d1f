from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

# Field -> message for every field a record cannot be saved without
REQUIRED_FIELDS = (
    ("title", "Title is required"),
    ("product_id", "Product is required"),
    ("destination", "Destination is required"),
)

# Wire names used in error payloads
ERROR_KEYS = {"title": "title", "product_id": "productId", "destination": "destination"}


def _blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return not value


def validate_qr_code(data: Mapping[str, Any]) -> Optional[Dict[str, str]]:
    """Check a (possibly partial) draft for required fields.

    Returns None when the draft is valid, otherwise a mapping of wire field name
    to reason with one entry per missing field. Whether ``destination`` is a
    known value, or ``product_id`` exists in the catalog, is not checked here.
    """
    errors: Dict[str, str] = {}
    for name, message in REQUIRED_FIELDS:
        if _blank(data.get(name)):
            errors[ERROR_KEYS[name]] = message
    return errors or None
