from __future__ import annotations

from typing import Any, Dict, Optional


class QRLinkError(Exception):
    """Base for every failure the service reports to a caller."""

    status_code = 500
    retryable = False

    def __init__(self, message: str | None = None):
        self.message = message or (self.__class__.__doc__ or self.__class__.__name__).strip()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.message}
        if self.retryable:
            payload["retryable"] = True
        return payload


class ValidationFailed(QRLinkError):
    """QR code is invalid"""

    status_code = 422

    def __init__(self, errors: Dict[str, str]):
        super().__init__("QR code is invalid")
        self.errors = dict(errors)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, "errors": self.errors}


class QRCodeNotFound(QRLinkError):
    """QR code not found"""

    status_code = 404

    def __init__(self, qr_id: Optional[int] = None):
        super().__init__("QR code not found")
        self.qr_id = qr_id


class DestinationError(QRLinkError):
    """Destination cannot be resolved. Not retryable until the record is corrected."""

    status_code = 422


class UnrecognizedVariantId(DestinationError):
    def __init__(self, raw: object):
        super().__init__(f"Unrecognized product variant ID: {raw!r}")
        self.raw = raw


class MissingProductHandle(DestinationError):
    def __init__(self):
        super().__init__("Product handle is required for product destinations")


class UnsupportedDestination(DestinationError):
    def __init__(self, destination: object):
        super().__init__(f"Unsupported destination: {destination!r}")
        self.destination = destination


class CatalogUnavailable(QRLinkError):
    """Catalog service unavailable"""

    status_code = 502
    retryable = True


class SupplementTimeout(CatalogUnavailable):
    """Timed out waiting for catalog data"""

    status_code = 504


class TenantRequired(QRLinkError):
    """Shop context required"""

    status_code = 401
