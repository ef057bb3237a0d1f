from __future__ import annotations

import base64
import io

import qrcode
from qrcode.constants import ERROR_CORRECT_H, ERROR_CORRECT_L, ERROR_CORRECT_M, ERROR_CORRECT_Q

_ERROR_LEVELS = {
    "L": ERROR_CORRECT_L,
    "M": ERROR_CORRECT_M,
    "Q": ERROR_CORRECT_Q,
    "H": ERROR_CORRECT_H,
}


class QRCodeImageGenerator:
    """Render scannable codes that point back at this service's scan endpoint.

    Stateless after construction; every render builds its own encoder so the
    instance can be shared across threads.
    """

    def __init__(self, base_url: str, *, box_size: int = 10, border: int = 4, error_correction: str = "M"):
        if not base_url:
            raise ValueError("base_url is required to build scan URLs")
        self.base_url = base_url.rstrip("/")
        self.box_size = max(1, min(20, int(box_size)))
        self.border = max(0, int(border))
        self.error_correction = _ERROR_LEVELS.get(str(error_correction).upper(), ERROR_CORRECT_M)

    @classmethod
    def from_config(cls, config) -> "QRCodeImageGenerator":
        return cls(
            config["APP_BASE_URL"],
            box_size=config.get("QR_BOX_SIZE", 10),
            border=config.get("QR_BORDER", 4),
            error_correction=config.get("QR_ERROR_CORRECTION", "M"),
        )

    def scan_url(self, qr_id: int) -> str:
        return f"{self.base_url}/qrcodes/{int(qr_id)}/scan"

    def render_png(self, url: str, *, box_size: int | None = None) -> bytes:
        qr = qrcode.QRCode(
            version=None,
            error_correction=self.error_correction,
            box_size=box_size or self.box_size,
            border=self.border,
        )
        qr.add_data(url)
        qr.make(fit=True)
        img = qr.make_image(fill_color="black", back_color="white")
        buf = io.BytesIO()
        img.save(buf, format="PNG")
        return buf.getvalue()

    def render_data_url(self, url: str) -> str:
        encoded = base64.b64encode(self.render_png(url)).decode("ascii")
        return f"data:image/png;base64,{encoded}"

    def image_for(self, qr_id: int) -> str:
        """Data URL of the code for a record; always encodes the scan endpoint."""
        return self.render_data_url(self.scan_url(qr_id))
