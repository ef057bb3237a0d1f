# Destinations a QR code can route a scan to. Stored as plain strings; membership
# is enforced when the destination is resolved, not when the record is saved.

DESTINATION_PRODUCT = "product"
DESTINATION_CART = "cart"

DESTINATIONS = (DESTINATION_PRODUCT, DESTINATION_CART)
