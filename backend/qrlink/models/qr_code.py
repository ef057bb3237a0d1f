from sqlalchemy import func, Index
from ..extensions import db


class QRCode(db.Model):
    __tablename__ = "qr_codes"

    id = db.Column(db.Integer, primary_key=True)
    shop = db.Column(db.String(255), nullable=False)
    title = db.Column(db.String(255), nullable=False)
    destination = db.Column(db.String(20), nullable=False)
    product_id = db.Column(db.String(255), nullable=False)
    product_handle = db.Column(db.String(255))
    product_variant_id = db.Column(db.String(255))
    scans = db.Column(db.Integer, nullable=False, default=0, server_default="0")
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index("idx_qr_codes_shop_id", "shop", "id"),
    )

    # Fields a merchant may change after creation
    MUTABLE_FIELDS = ("title", "destination", "product_id", "product_handle", "product_variant_id")

    def __repr__(self) -> str:
        return f"<QRCode id={self.id} shop={self.shop!r} destination={self.destination!r}>"
