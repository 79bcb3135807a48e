"""Archival of completed orders into the order history."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Iterable

from tablepos.constant import WALK_IN_CUSTOMER
from tablepos.database import PosDatabase
from tablepos.models import HistoryItem, OrderHistoryRecord, OrderLineItem, Table
from tablepos.order_ids import generate_order_id

logger = logging.getLogger(__name__)

COMPLETED = "completed"


class OrderArchive:
    """Turns a finished order into an immutable history record."""

    def __init__(
        self,
        database: PosDatabase,
        order_ids: Callable[..., str] = generate_order_id,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.database = database
        self._order_ids = order_ids
        self._clock = clock

    def archive(self, table: Table, items: Iterable[OrderLineItem], total: float) -> OrderHistoryRecord:
        """Snapshot ``items`` by value and prepend the record to history.

        The record is dated on the day it is archived, not the day the order
        was opened.
        """
        record = OrderHistoryRecord(
            id=table.order_id or self._order_ids(),
            table_number=table.number,
            customer_name=table.customer or WALK_IN_CUSTOMER,
            order_date=self._clock().date().isoformat(),
            status=COMPLETED,
            total=total,
            items=tuple(
                HistoryItem(
                    id=item.id,
                    name=item.menu_item.name,
                    price=item.menu_item.price,
                    quantity=item.quantity,
                )
                for item in items
            ),
        )
        stored = self.database.add_order_history(record)
        logger.info("Archived order %s for table %s total=%s", stored.id, stored.table_number, stored.total)
        return stored

    def get_order_history(self) -> list[OrderHistoryRecord]:
        return self.database.get_order_history()

    def clear_history(self) -> None:
        self.database.clear_order_history()
        logger.info("Order history cleared")

    def orders_on(self, day: date | str) -> list[OrderHistoryRecord]:
        """Orders completed on ``day``; the stored history is not touched."""
        wanted = day.isoformat() if isinstance(day, date) else day
        return [record for record in self.get_order_history() if record.order_date == wanted]
