"""QR image renderer for KHQR payloads."""
from __future__ import annotations

import base64
import io
from decimal import Decimal
from typing import Any

import qrcode
from PIL import Image, ImageDraw, ImageFont

from .emv import Currency

_HEADER_COLOR = "#E1232E"
_TEXT_COLOR = "#1F2937"
_MUTED_COLOR = "#9CA3AF"


def choose_display_name(
    display_name: str | None = None,
    *,
    store_label: str | None = None,
    merchant_name: str | None = None,
) -> str:
    """Explicit name first, then store label, then merchant name."""

    for candidate in (display_name, store_label, merchant_name):
        if candidate and candidate.strip():
            return candidate.strip()
    return "Merchant"


def format_amount_label(amount: Decimal | None, currency: str | None) -> str:
    if not amount:
        return ""
    code = "USD" if currency in (Currency.USD.value, "USD") else "KHR"
    if code == "KHR":
        return f"{int(amount):,} KHR"
    return f"{amount:,.2f} USD"


def _text_size(draw: ImageDraw.ImageDraw, text: str, font: Any) -> tuple[int, int]:
    left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
    return right - left, bottom - top


def generate_qr_image(data: str, *, display_name: str, amount_label: str = "", width: int = 300) -> Image.Image:
    """Generate a QR card: red header, name and amount, dotted divider, code."""

    qr = qrcode.QRCode(version=None, error_correction=qrcode.constants.ERROR_CORRECT_M, box_size=10, border=2)
    qr.add_data(data)
    qr.make(fit=True)

    qr_size = int(width * 0.8)
    qr_img = qr.make_image(fill_color="black", back_color="white").convert("RGBA").resize((qr_size, qr_size))

    header_height = int(width * 0.2)
    label_height = int(width * 0.3)
    canvas_height = header_height + label_height + qr_size + int(width * 0.1)

    canvas = Image.new("RGBA", (width, canvas_height), color="#FFFFFF")
    draw = ImageDraw.Draw(canvas)
    draw.rectangle([(0, 0), (width, header_height)], fill=_HEADER_COLOR)

    font = ImageFont.load_default()
    padding = int(width * 0.1)
    _, name_height = _text_size(draw, display_name, font)
    draw.text((padding, header_height + padding // 2), display_name, fill=_TEXT_COLOR, font=font)
    if amount_label:
        draw.text((padding, header_height + padding + name_height), amount_label, fill=_TEXT_COLOR, font=font)

    divider_y = header_height + label_height - padding // 2
    for x in range(0, width, 12):
        draw.line([(x, divider_y), (x + 6, divider_y)], fill=_MUTED_COLOR, width=1)

    canvas.paste(qr_img, ((width - qr_size) // 2, header_height + label_height))
    return canvas


def qr_image_to_png_bytes(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def render_qr_payload(
    payload: str,
    *,
    display_name: str,
    amount: Decimal | None = None,
    currency: str | None = None,
    width: int = 300,
) -> dict[str, Any]:
    """Render payload into PNG bytes and base64 string."""

    image = generate_qr_image(
        payload,
        display_name=display_name,
        amount_label=format_amount_label(amount, currency),
        width=width,
    )
    png_bytes = qr_image_to_png_bytes(image)
    return {
        "png_bytes": png_bytes,
        "png_base64": base64.b64encode(png_bytes).decode("ascii"),
    }
