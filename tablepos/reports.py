"""Summary figures for the reports view."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable

from tablepos.models import OrderHistoryRecord, Table, TableStatus


@dataclass(frozen=True)
class ReportSummary:
    day: str | None
    order_count: int
    revenue: float
    orders: tuple[OrderHistoryRecord, ...]


def table_status_counts(tables: Iterable[Table]) -> dict[TableStatus, int]:
    counts = {status: 0 for status in TableStatus}
    for table in tables:
        counts[table.status] += 1
    return counts


def summarize(orders: Iterable[OrderHistoryRecord], day: date | str | None = None) -> ReportSummary:
    """Count and total the orders, optionally only those completed on ``day``."""
    wanted = day.isoformat() if isinstance(day, date) else day
    selected = tuple(order for order in orders if wanted is None or order.order_date == wanted)
    return ReportSummary(
        day=wanted,
        order_count=len(selected),
        revenue=sum((order.total for order in selected), 0.0),
        orders=selected,
    )
