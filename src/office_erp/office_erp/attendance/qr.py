from __future__ import annotations

import base64
import io
import logging

import qrcode
import qrcode.constants
import qrcode.exceptions

from ..core.constants import QR_DEFAULT_ERROR_CORRECTION
from ..core.exceptions import ValidationError
from .model import AttendanceQR

logger = logging.getLogger(__name__)

_ERROR_CORRECTION = {
    "L": qrcode.constants.ERROR_CORRECT_L,
    "M": qrcode.constants.ERROR_CORRECT_M,
    "Q": qrcode.constants.ERROR_CORRECT_Q,
    "H": qrcode.constants.ERROR_CORRECT_H,
}


class AttendanceQRIssuer:
    """Stable per-tenant QR code pointing employees at the check-in page."""

    def __init__(self, attendance_url: str, *, error_correction: str = QR_DEFAULT_ERROR_CORRECTION):
        level = (error_correction or QR_DEFAULT_ERROR_CORRECTION).upper()
        if level not in _ERROR_CORRECTION:
            raise ValueError(f"Unsupported QR error correction level: {error_correction!r}")
        self._attendance_url = attendance_url
        self._level = _ERROR_CORRECTION[level]

    @property
    def attendance_url(self) -> str:
        return self._attendance_url

    def png_bytes(self) -> bytes:
        if not self._attendance_url:
            raise ValidationError("Chưa cấu hình đường dẫn chấm công")
        try:
            qr = qrcode.QRCode(
                version=None,
                error_correction=self._level,
                box_size=10,
                border=2,
            )
            qr.add_data(self._attendance_url)
            qr.make(fit=True)

            img = qr.make_image(fill_color="black", back_color="white")

            buf = io.BytesIO()
            img.save(buf, format="PNG")
            return buf.getvalue()
        except (ValueError, OSError, qrcode.exceptions.DataOverflowError):
            logger.exception("QR rendering failed for %s", self._attendance_url)
            raise ValidationError("Failed to generate QR code")

    def issue(self) -> AttendanceQR:
        encoded = base64.b64encode(self.png_bytes()).decode("ascii")
        return AttendanceQR(qr_code=f"data:image/png;base64,{encoded}", attendance_url=self._attendance_url)
