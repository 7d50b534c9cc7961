"""
Customer order links for tables and takeaway orders, and their QR codes.
"""

from __future__ import annotations

import io

import qrcode
from qrcode.constants import ERROR_CORRECT_L

from restopos.core.config import settings


def build_order_url(base_origin: str, target_id: int | str) -> str:
    """``{origin}/scan_qrcode?t={target_id}``"""
    return f"{base_origin.rstrip('/')}/scan_qrcode?t={target_id}"


def table_order_url(table_id: int | str, origin: str | None = None) -> str:
    """Link for a dine-in table; uses the caller's origin when known."""
    return build_order_url(origin or settings.PUBLIC_BASE_URL, table_id)


def takeaway_target_id(table_id: int | None = None) -> int:
    """Table id a takeaway link points at.

    Takeaway orders without a table use TAKEAWAY_DEFAULT_TABLE_ID
    (9 unless configured). A table id of 0 counts as missing.
    """
    return table_id or settings.TAKEAWAY_DEFAULT_TABLE_ID


def takeaway_order_url(table_id: int | None = None) -> str:
    # Always the public takeaway site, whatever origin the request came from.
    return build_order_url(settings.TAKEAWAY_BASE_URL, takeaway_target_id(table_id))


def render_qr_png(data: str, box_size: int = 10, border: int = 2) -> bytes:
    qr = qrcode.QRCode(error_correction=ERROR_CORRECT_L, box_size=box_size, border=border)
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf)
    return buf.getvalue()
