import base64
import io

import qrcode
from qrcode.constants import ERROR_CORRECT_H, ERROR_CORRECT_L, ERROR_CORRECT_M, ERROR_CORRECT_Q
from qrcode.exceptions import DataOverflowError

from photoqr.services.errors import QREncodingError

ERROR_CORRECTION_LEVELS = {
    "L": ERROR_CORRECT_L,
    "M": ERROR_CORRECT_M,
    "Q": ERROR_CORRECT_Q,
    "H": ERROR_CORRECT_H,
}


def _to_data_url(image_bytes: bytes, mime: str = "image/png") -> str:
    b64 = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime};base64,{b64}"


def render_qr_png(text: str, error_correction: str = "M") -> bytes:
    level = ERROR_CORRECTION_LEVELS.get(error_correction.upper())
    if level is None:
        raise QREncodingError(f"Unknown QR error correction level: {error_correction}")

    try:
        qr = qrcode.QRCode(error_correction=level, box_size=4, border=4)
        qr.add_data(text)
        qr.make(fit=True)
        img = qr.make_image(fill_color="black", back_color="white")
        buf = io.BytesIO()
        img.save(buf, format="PNG")
    except (ValueError, DataOverflowError) as exc:
        raise QREncodingError(f"Could not render QR code: {exc}") from exc
    return buf.getvalue()


def qr_data_url(text: str, error_correction: str = "M") -> str:
    return _to_data_url(render_qr_png(text, error_correction))
