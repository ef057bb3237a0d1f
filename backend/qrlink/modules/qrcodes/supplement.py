from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Protocol, Sequence

from ...errors import DestinationError, SupplementTimeout
from ...models.qr_code import QRCode
from .destinations import resolve_destination
from .images import QRCodeImageGenerator

log = logging.getLogger(__name__)


class ProductLookup(Protocol):
    def fetch_product(self, product_id: str): ...


@dataclass(frozen=True)
class SupplementedQRCode:
    """Read-only view of a record merged with live catalog data. Never persisted."""

    id: int
    shop: str
    title: str
    destination: str
    product_id: str
    product_handle: Optional[str]
    product_variant_id: Optional[str]
    scans: int
    created_at: Optional[datetime]
    product_deleted: bool
    product_title: Optional[str]
    product_image: Optional[str]
    product_alt: Optional[str]
    destination_url: Optional[str]
    destination_error: Optional[str]
    image: str


def _merge(row: QRCode, product, image: str) -> SupplementedQRCode:
    try:
        destination_url: Optional[str] = resolve_destination(row)
        destination_error: Optional[str] = None
    except DestinationError as e:
        # Shown to the merchant so the record can be fixed; scans of it still fail loudly
        log.error("qr code %s has an unresolvable destination: %s", row.id, e.message)
        destination_url, destination_error = None, e.message
    return SupplementedQRCode(
        id=int(row.id),
        shop=row.shop,
        title=row.title,
        destination=row.destination,
        product_id=row.product_id,
        product_handle=row.product_handle,
        product_variant_id=row.product_variant_id,
        scans=int(row.scans or 0),
        created_at=row.created_at,
        product_deleted=product is None,
        product_title=product.title if product else None,
        product_image=product.image_url if product else None,
        product_alt=product.image_alt if product else None,
        destination_url=destination_url,
        destination_error=destination_error,
        image=image,
    )


def supplement_qr_codes(
    rows: Sequence[QRCode],
    catalog: ProductLookup,
    images: QRCodeImageGenerator,
    *,
    timeout: float = 15.0,
    max_workers: int = 8,
) -> List[SupplementedQRCode]:
    """Supplement records concurrently, preserving input order.

    Catalog queries (one per distinct product) and code renders all run in a
    worker pool and are joined under a single timeout. Catalog transport errors
    propagate as CatalogUnavailable; exceeding the timeout raises SupplementTimeout.
    """
    if not rows:
        return []
    pool = ThreadPoolExecutor(max_workers=max(2, min(max_workers, 2 * len(rows))), thread_name_prefix="supplement")
    try:
        products: Dict[str, Future] = {}
        renders: List[Future] = []
        for row in rows:
            if row.product_id not in products:
                products[row.product_id] = pool.submit(catalog.fetch_product, row.product_id)
            renders.append(pool.submit(images.image_for, row.id))

        pending = list(products.values()) + renders
        _, not_done = wait(pending, timeout=timeout)
        if not_done:
            for f in not_done:
                f.cancel()
            log.warning("supplementing %d qr code(s) exceeded %.1fs", len(rows), timeout)
            raise SupplementTimeout()

        return [
            _merge(row, products[row.product_id].result(), render.result())
            for row, render in zip(rows, renders)
        ]
    finally:
        pool.shutdown(wait=False, cancel_futures=True)


def supplement_qr_code(
    row: QRCode,
    catalog: ProductLookup,
    images: QRCodeImageGenerator,
    *,
    timeout: float = 15.0,
) -> SupplementedQRCode:
    return supplement_qr_codes([row], catalog, images, timeout=timeout, max_workers=2)[0]
