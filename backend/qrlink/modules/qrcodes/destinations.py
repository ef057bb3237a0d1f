from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from ...errors import MissingProductHandle, UnrecognizedVariantId, UnsupportedDestination
from ...models.enums import DESTINATION_CART, DESTINATION_PRODUCT

# Shopify global ids for variants look like gid://shopify/ProductVariant/<digits>
_VARIANT_GID_RE = re.compile(r"gid://shopify/ProductVariant/([0-9]+)")


@dataclass(frozen=True)
class ProductVariantGid:
    """Parsed Shopify product variant global id."""

    variant_id: int

    @classmethod
    def parse(cls, raw: Any) -> "ProductVariantGid":
        if not isinstance(raw, str):
            raise UnrecognizedVariantId(raw)
        match = _VARIANT_GID_RE.fullmatch(raw.strip())
        if not match:
            raise UnrecognizedVariantId(raw)
        return cls(int(match.group(1)))

    def __str__(self) -> str:
        return f"gid://shopify/ProductVariant/{self.variant_id}"


def resolve_destination(qr_code: Any) -> str:
    """Map a record to the URL a scan should land on.

    Pure: only the stored fields are used, never the catalog.
    Raises MissingProductHandle, UnrecognizedVariantId or UnsupportedDestination.
    """
    shop = qr_code.shop
    if qr_code.destination == DESTINATION_PRODUCT:
        handle = (qr_code.product_handle or "").strip()
        if not handle:
            raise MissingProductHandle()
        return f"https://{shop}/products/{handle}"
    if qr_code.destination == DESTINATION_CART:
        gid = ProductVariantGid.parse(qr_code.product_variant_id)
        return f"https://{shop}/cart/{gid.variant_id}:1"
    raise UnsupportedDestination(qr_code.destination)
