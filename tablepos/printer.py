"""Bill receipt printing on a USB ESC/POS thermal printer."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from tablepos.billing import Bill, ChargeRates, calculate_bill
from tablepos.config import (
    PRINTER_FONT_ENV,
    PRINTER_FONT_PATH,
    PRINTER_FONT_SIZE,
    PRINTER_LEFT_INDENT_PX,
    PRINTER_LINE_CHARS,
    PRINTER_USB_PRODUCT_ID,
    PRINTER_USB_VENDOR_ID,
    PRINTER_WIDTH_PX,
)
from tablepos.constant import WALK_IN_CUSTOMER
from tablepos.models import OrderLineItem, Settings, Table
from tablepos.rendering import format_money, format_rate

# Extra vertical headroom per line to avoid descender clipping on thermal output.
_LINE_EXTRA_PX = 8
_TAIL_SPACER_PX = 60
_LINUX_FONT_FALLBACKS = (
    "/usr/share/fonts/TTF/DejaVuSansMono.ttf",
    "/usr/share/fonts/dejavu/DejaVuSansMono.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSansMono.ttf",
    "/usr/share/fonts/liberation/LiberationMono-Regular.ttf",
)


@dataclass(frozen=True)
class Receipt:
    """Everything printed on one bill."""

    restaurant_name: str
    currency: str
    order_id: str
    table_number: int
    customer_name: str
    printed_at: datetime
    items: tuple[OrderLineItem, ...]
    bill: Bill
    rates: ChargeRates


def build_receipt(table: Table, settings: Settings | None, rates: ChargeRates, now: datetime | None = None) -> Receipt:
    """Build the receipt for a table's saved order using the shared bill math."""
    items = tuple(table.order_items or ())
    settings = settings or Settings()
    return Receipt(
        restaurant_name=settings.restaurant_name,
        currency=settings.currency,
        order_id=table.order_id or "N/A",
        table_number=table.number,
        customer_name=table.customer or WALK_IN_CUSTOMER,
        printed_at=now or datetime.now(),
        items=items,
        bill=calculate_bill(items, rates),
        rates=rates,
    )


def _two_columns(left: str, right: str, width: int) -> str:
    room = width - len(right) - 1
    if room < 1:
        return f"{left} {right}"
    if len(left) > room:
        left = left[: max(1, room - 3)] + "..."
    return f"{left:<{room}} {right}"


def receipt_lines(receipt: Receipt, width: int = PRINTER_LINE_CHARS) -> list[str]:
    """Lay the receipt out as fixed-width text lines."""
    def money(amount: float) -> str:
        return format_money(amount, receipt.currency)

    lines = [
        receipt.restaurant_name.center(width).rstrip(),
        "",
        f"Order: {receipt.order_id}",
        _two_columns(f"Table: {receipt.table_number}", f"{receipt.printed_at:%Y-%m-%d %H:%M}", width),
        f"Customer: {receipt.customer_name}",
        "-" * width,
    ]
    for item in receipt.items:
        lines.append(_two_columns(f"{item.quantity} x {item.menu_item.name}", money(item.menu_item.price * item.quantity), width))
    lines.append("-" * width)
    lines.append(_two_columns("Subtotal", money(receipt.bill.subtotal), width))
    if receipt.rates.service_charge_enabled:
        lines.append(
            _two_columns(
                f"Service ({format_rate(receipt.rates.service_charge_rate)})",
                money(receipt.bill.service_charge),
                width,
            )
        )
    lines.append(_two_columns(f"Tax ({format_rate(receipt.rates.tax_rate)})", money(receipt.bill.tax), width))
    lines.append("=" * width)
    lines.append(_two_columns("TOTAL", money(receipt.bill.total), width))
    lines.append("")
    lines.append("Thank you!".center(width).rstrip())
    return lines


def _font_candidates() -> list[str]:
    override = os.environ.get(PRINTER_FONT_ENV, "").strip()
    ordered = [override, PRINTER_FONT_PATH, *_LINUX_FONT_FALLBACKS]
    return list(dict.fromkeys(path for path in ordered if path))


def resolve_printer_font_path() -> str:
    """First existing font among the env override, the configured font and common Linux monospace fonts."""
    candidates = _font_candidates()
    found = next((path for path in candidates if Path(path).is_file()), None)
    if found is None:
        raise RuntimeError(
            f"No printer font found; point {PRINTER_FONT_ENV} at a .ttf/.otf file. Looked in: {', '.join(candidates)}"
        )
    return found


def check_printer_dependencies() -> tuple[bool, str]:
    """Check whether printer dependencies are importable."""
    try:
        from escpos.printer import Usb  # noqa: F401
        from PIL import ImageFont

        font_path = resolve_printer_font_path()
        ImageFont.truetype(font_path, PRINTER_FONT_SIZE)
    except Exception as exc:
        return (False, f"Printer unavailable: {exc}")
    return (True, "Printer ready")


def _render_line(text: str, font: object) -> object:
    from PIL import Image, ImageDraw

    canvas_height = PRINTER_FONT_SIZE + _LINE_EXTRA_PX
    img = Image.new("1", (PRINTER_WIDTH_PX, canvas_height), color=1)
    draw = ImageDraw.Draw(img)

    bbox = draw.textbbox((0, 0), text or " ", font=font)
    text_height = bbox[3] - bbox[1]
    # Offset by bbox top so descenders are not clipped.
    y = (canvas_height - text_height) // 2 - bbox[1]
    draw.text((PRINTER_LEFT_INDENT_PX, y), text, font=font, fill=0)
    return img


def _render_spacer(height_px: int) -> object:
    from PIL import Image

    return Image.new("1", (PRINTER_WIDTH_PX, max(1, height_px)), color=1)


def print_receipt(receipt: Receipt) -> None:
    """Print the receipt line by line and cut the paper."""
    if not receipt.items:
        raise ValueError("Cannot print a receipt without items")

    try:
        from escpos.printer import Usb
        from PIL import ImageFont
    except Exception as exc:
        raise RuntimeError(f"Printer dependencies unavailable: {exc}") from exc

    printer = Usb(PRINTER_USB_VENDOR_ID, PRINTER_USB_PRODUCT_ID)
    font = ImageFont.truetype(resolve_printer_font_path(), PRINTER_FONT_SIZE)
    for line in receipt_lines(receipt):
        printer.image(_render_line(line, font))
    printer.image(_render_spacer(_TAIL_SPACER_PX))
    printer.cut()
