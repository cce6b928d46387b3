"""
QR Code Service

Renders payload strings as PNG QR codes.
"""

import base64
import io

import qrcode
from qrcode.constants import ERROR_CORRECT_Q


def generate_png(payload: str, box_size: int = 20, border: int = 4) -> bytes:
    """
    Render a payload as a PNG QR code.

    Args:
        payload: Text encoded into the symbol.
        box_size: Pixels per module.
        border: Quiet zone width in modules.

    Returns:
        bytes: PNG image.
    """
    qr = qrcode.QRCode(
        version=None,
        error_correction=ERROR_CORRECT_Q,
        box_size=box_size,
        border=border,
    )
    qr.add_data(payload)
    qr.make(fit=True)

    qr_img = qr.make_image(fill_color="black", back_color="white")

    img_buffer = io.BytesIO()
    qr_img.save(img_buffer, format="PNG")
    return img_buffer.getvalue()


def generate_png_base64(payload: str) -> str:
    """Render a payload as a PNG QR code, base64 encoded."""
    return base64.b64encode(generate_png(payload)).decode("ascii")
