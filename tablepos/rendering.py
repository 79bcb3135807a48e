"""Rendering helpers for the terminal UI."""

from __future__ import annotations

from typing import Iterable

from rich.text import Text

from tablepos.billing import Bill, ChargeRates
from tablepos.models import OrderLineItem, Table, TableStatus
from tablepos.order_ids import order_display_number


def status_style(status: TableStatus) -> str:
    """Return a consistent badge style for a table status."""
    if status is TableStatus.OCCUPIED:
        return "bold #ffffff on #b23a48"
    if status is TableStatus.RESERVED:
        return "bold #1f1600 on #e0a526"
    return "bold #0b1f0f on #5fbf72"


def format_money(amount: float, currency: str) -> str:
    """Format with thousands separators; whole amounts print without decimals."""
    if float(amount).is_integer():
        return f"{currency} {int(amount):,}"
    return f"{currency} {amount:,.2f}"


def format_rate(rate: float) -> str:
    return f"{rate:g}%"


def format_table_label(table: Table, currency: str) -> Text:
    """One table row: number badge, status, seats, customer and order total."""
    text = Text()
    text.append(f" T{table.number:02d} ", style=status_style(table.status))
    text.append(f" {table.status.value:<9} {table.seats} seats")
    if table.customer:
        text.append(f"  {table.customer}", style="bold")
    if table.order_id:
        text.append(f"  #{order_display_number(table.order_id)}", style="dim")
    if table.order_total is not None and table.has_order_items:
        text.append(f"  {format_money(table.order_total, currency)}", style="green")
    return text


def format_order_lines(items: Iterable[OrderLineItem], currency: str) -> Text:
    text = Text()
    for idx, item in enumerate(items):
        if idx > 0:
            text.append("\n")
        text.append(f"{item.quantity} x {item.menu_item.name}")
        text.append(f"  {format_money(item.menu_item.price * item.quantity, currency)}", style="dim")
    if not text.plain:
        text.append("(no items yet)", style="dim")
    return text


def format_bill(bill: Bill, rates: ChargeRates, currency: str) -> Text:
    text = Text()
    text.append(f"Subtotal        {format_money(bill.subtotal, currency)}\n")
    if rates.service_charge_enabled:
        text.append(f"Service ({format_rate(rates.service_charge_rate)})  {format_money(bill.service_charge, currency)}\n")
    text.append(f"Tax ({format_rate(rates.tax_rate)})      {format_money(bill.tax, currency)}\n")
    text.append(f"Total           {format_money(bill.total, currency)}", style="bold")
    return text


def visible_rows(height: int, fallback: int = 8) -> int:
    """Rows a list widget can show; before layout its height is still zero."""
    return height if height > 0 else fallback


def window_bounds(count: int, rows: int, selected: int | None) -> tuple[int, int]:
    """Slice ``[start, end)`` of ``count`` rows that fits in ``rows`` lines.

    The selected row is kept near the middle of the window.
    """
    rows = max(1, rows)
    if count <= rows:
        return (0, max(0, count))
    start = 0 if selected is None else selected - rows // 2
    start = min(max(0, start), count - rows)
    return (start, start + rows)


def scrolled_list(rows: list[Text], height: int, selected: int | None) -> Text:
    """Join rows into one block, windowed around the selection with ⋮ markers."""
    start, end = window_bounds(len(rows), visible_rows(height), selected)
    text = Text()
    if start > 0:
        text.append("⋮\n", style="dim")
    for idx in range(start, end):
        if idx > start:
            text.append("\n")
        text.append_text(rows[idx])
    if end < len(rows):
        text.append("\n⋮", style="dim")
    return text
