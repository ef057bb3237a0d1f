from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from ...errors import QRCodeNotFound, ValidationFailed
from ...models.qr_code import QRCode
from .validation import validate_qr_code

log = logging.getLogger(__name__)

# Upper bound of the qr_codes.id column (db.Integer)
MAX_QR_ID = 2**31 - 1


def _in_range(qr_id: int) -> bool:
    return 0 < int(qr_id) <= MAX_QR_ID


class QRCodeStore:
    """CRUD over persisted QR codes.

    Every merchant-facing operation is scoped by shop. Scan paths look records up
    by id alone since a physical scan carries no tenant.
    """

    def __init__(self, session: Session):
        self.session = session

    def _query(self, shop: Optional[str]):
        q = self.session.query(QRCode)
        if shop is not None:
            q = q.filter(QRCode.shop == shop)
        return q

    def create(self, shop: str, draft: Mapping[str, Any]) -> int:
        errors = validate_qr_code(draft)
        if errors:
            raise ValidationFailed(errors)
        row = QRCode(shop=shop, scans=0)
        for name in QRCode.MUTABLE_FIELDS:
            if name in draft:
                setattr(row, name, draft[name])
        self.session.add(row)
        self.session.flush()
        qr_id = int(row.id)
        self.session.commit()
        log.info("created qr code %s for %s", qr_id, shop)
        return qr_id

    def get(self, qr_id: int, shop: Optional[str] = None) -> Optional[QRCode]:
        if not _in_range(qr_id):
            return None
        return self._query(shop).filter(QRCode.id == int(qr_id)).first()

    def get_or_404(self, qr_id: int, shop: Optional[str] = None) -> QRCode:
        row = self.get(qr_id, shop)
        if row is None:
            raise QRCodeNotFound(qr_id)
        return row

    def list_by_shop(self, shop: str) -> List[QRCode]:
        return self._query(shop).order_by(QRCode.id.desc()).all()

    def update(self, qr_id: int, shop: str, fields: Mapping[str, Any]) -> QRCode:
        row = self.get_or_404(qr_id, shop)
        changes: Dict[str, Any] = {k: v for k, v in fields.items() if k in QRCode.MUTABLE_FIELDS}
        merged = {name: getattr(row, name) for name in QRCode.MUTABLE_FIELDS}
        merged.update(changes)
        errors = validate_qr_code(merged)
        if errors:
            raise ValidationFailed(errors)
        for name, value in changes.items():
            setattr(row, name, value)
        self.session.commit()
        return row

    def delete(self, qr_id: int, shop: str) -> None:
        row = self.get_or_404(qr_id, shop)
        self.session.delete(row)
        self.session.commit()
        log.info("deleted qr code %s for %s", qr_id, shop)

    def increment_scans(self, qr_id: int, shop: Optional[str] = None) -> None:
        if not _in_range(qr_id):
            raise QRCodeNotFound(qr_id)
        # Single UPDATE ... SET scans = scans + 1; the database serialises concurrent scans
        stmt = update(QRCode).where(QRCode.id == int(qr_id))
        if shop is not None:
            stmt = stmt.where(QRCode.shop == shop)
        result = self.session.execute(
            stmt.values(scans=QRCode.scans + 1).execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            self.session.rollback()
            raise QRCodeNotFound(qr_id)
        self.session.commit()
