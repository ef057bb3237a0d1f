from __future__ import annotations

import os
from typing import Optional
from itsdangerous import URLSafeTimedSerializer, BadData, SignatureExpired


def _serializer(secret: str | None = None) -> URLSafeTimedSerializer:
    secret = secret or os.getenv("SECRET_KEY", "change-me")
    # Salt provides namespace isolation for tokens
    return URLSafeTimedSerializer(secret_key=secret, salt="shop-token")


def issue_shop_token(shop: str, *, secret: str | None = None) -> str:
    """Issue a signed token binding a caller to a shop.

    Payload is minimal: {"shop": str}
    """
    return _serializer(secret).dumps({"shop": str(shop)})


def verify_shop_token(token: str, *, secret: str | None = None, max_age: int | None = None) -> Optional[str]:
    """Verify a token and return the shop domain if valid, else None."""
    if max_age is None:
        max_age_default = 60 * 60 * 24
        try:
            max_age = int(os.getenv("SHOP_TOKEN_MAX_AGE", str(max_age_default)))
        except ValueError:
            max_age = max_age_default
    try:
        data = _serializer(secret).loads(token, max_age=max_age)
    except (SignatureExpired, BadData):
        return None
    shop = data.get("shop") if isinstance(data, dict) else None
    return str(shop) if shop else None
