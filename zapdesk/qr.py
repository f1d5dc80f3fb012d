"""QR code rendering for lightning payment requests."""

import base64
import io
import math
from typing import Optional

import qrcode  # type: ignore[import-untyped]
from loguru import logger
from qrcode.exceptions import DataOverflowError  # type: ignore[import-untyped]

from .core.errors import EncodingFailed
from .core.settings import settings

ERROR_CORRECTION = {
    "L": qrcode.constants.ERROR_CORRECT_L,
    "M": qrcode.constants.ERROR_CORRECT_M,
    "Q": qrcode.constants.ERROR_CORRECT_Q,
    "H": qrcode.constants.ERROR_CORRECT_H,
}

# byte-mode capacity of a version 40 symbol
MAX_PAYLOAD_BYTES = {
    "L": 2953,
    "M": 2331,
    "Q": 1663,
    "H": 1273,
}


class QRRenderer:
    """Encodes payment strings as PNG QR codes sized for on-screen display."""

    def __init__(
        self,
        min_size_px: Optional[int] = None,
        border: Optional[int] = None,
        error_correction: Optional[str] = None,
    ):
        self.min_size_px = min_size_px or settings.qr_min_size_px
        self.border = settings.qr_border if border is None else border
        self.error_correction = (error_correction or settings.qr_error_correction).upper()
        if self.error_correction not in ERROR_CORRECTION:
            raise ValueError(f"unknown error correction level {error_correction}")

    @property
    def capacity(self) -> int:
        return MAX_PAYLOAD_BYTES[self.error_correction]

    def _make(self, data: str) -> qrcode.QRCode:
        if not data:
            raise EncodingFailed("nothing to encode")
        size = len(data.encode("utf-8"))
        if size > self.capacity:
            raise EncodingFailed(
                f"payment request of {size} bytes exceeds QR capacity of"
                f" {self.capacity} bytes"
            )
        qr = qrcode.QRCode(
            version=None,
            error_correction=ERROR_CORRECTION[self.error_correction],
            border=self.border,
        )
        qr.add_data(data)
        try:
            qr.make(fit=True)
        except DataOverflowError as e:
            raise EncodingFailed(f"payment request does not fit in a QR code: {e}")
        # scale the modules so that the image including the quiet zone is at
        # least min_size_px wide
        qr.box_size = math.ceil(self.min_size_px / (qr.modules_count + 2 * self.border))
        return qr

    def render_png(self, data: str) -> bytes:
        qr = self._make(data)
        img = qr.make_image(fill_color="black", back_color="white")
        buf = io.BytesIO()
        img.save(buf, format="PNG")
        logger.trace(
            f"Rendered QR version {qr.version} ({qr.modules_count} modules,"
            f" box size {qr.box_size})"
        )
        return buf.getvalue()

    def render(self, data: str) -> str:
        """Return the QR code of `data` as a ``data:image/png;base64,...`` string."""
        b64 = base64.b64encode(self.render_png(data)).decode()
        return f"data:image/png;base64,{b64}"

    def render_ascii(self, data: str) -> str:
        qr = self._make(data)
        out = io.StringIO()
        qr.print_ascii(out=out, invert=True)
        return out.getvalue()


def decode_data_url(data_url: str) -> bytes:
    prefix = "data:image/png;base64,"
    if not data_url.startswith(prefix):
        raise ValueError("not a PNG data URL")
    return base64.b64decode(data_url[len(prefix) :])
