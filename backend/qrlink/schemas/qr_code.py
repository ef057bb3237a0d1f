from marshmallow import Schema, fields, EXCLUDE


class QRCodeDraftSchema(Schema):
    """Incoming create/update payload. Presence rules live in the validator."""

    class Meta:
        unknown = EXCLUDE

    title = fields.Str(allow_none=True)
    destination = fields.Str(allow_none=True)
    product_id = fields.Str(data_key="productId", allow_none=True)
    product_handle = fields.Str(data_key="productHandle", allow_none=True)
    product_variant_id = fields.Str(data_key="productVariantId", allow_none=True)


class QRCodeSchema(Schema):
    id = fields.Int(dump_only=True)
    shop = fields.Str(dump_only=True)
    title = fields.Str()
    destination = fields.Str()
    product_id = fields.Str(data_key="productId")
    product_handle = fields.Str(data_key="productHandle", allow_none=True)
    product_variant_id = fields.Str(data_key="productVariantId", allow_none=True)
    scans = fields.Int(dump_only=True)
    created_at = fields.DateTime(data_key="createdAt", dump_only=True)


class SupplementedQRCodeSchema(QRCodeSchema):
    product_deleted = fields.Bool(data_key="productDeleted", dump_only=True)
    product_title = fields.Str(data_key="productTitle", allow_none=True, dump_only=True)
    product_image = fields.Str(data_key="productImage", allow_none=True, dump_only=True)
    product_alt = fields.Str(data_key="productAlt", allow_none=True, dump_only=True)
    destination_url = fields.Str(data_key="destinationUrl", allow_none=True, dump_only=True)
    destination_error = fields.Str(data_key="destinationError", allow_none=True, dump_only=True)
    image = fields.Str(dump_only=True)


class CatalogProductSchema(Schema):
    id = fields.Str()
    title = fields.Str()
    handle = fields.Str(allow_none=True)
    image_url = fields.Str(data_key="imageUrl", allow_none=True)
    variant_id = fields.Str(data_key="variantId", allow_none=True)
