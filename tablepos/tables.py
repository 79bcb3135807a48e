"""Table lifecycle: Available, Occupied and Reserved, and the order on each table.

Every transition either applies completely and is written to the ``tables``
collection, or is refused up front with ``TransitionRejected`` and changes
nothing. Transitions replace the stored ``Table`` object, so look a table up
again with ``get()`` after changing it.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable
from uuid import uuid4

from tablepos.billing import Bill, ChargeRates, calculate_bill, total
from tablepos.constant import DEFAULT_TABLE_SEATS
from tablepos.database import PersistenceError, PosDatabase
from tablepos.history import OrderArchive
from tablepos.ledger import OrderLedger
from tablepos.models import OrderHistoryRecord, OrderLineItem, Table, TableStatus
from tablepos.order_ids import generate_order_id

logger = logging.getLogger(__name__)


class TransitionRejected(ValueError):
    """The operator asked for something the table's state does not allow."""


class MissingCustomerName(TransitionRejected):
    pass


class TableNotFound(LookupError):
    pass


class TableStateMachine:
    """Owns the tables and applies operator actions to them."""

    def __init__(
        self,
        database: PosDatabase,
        archive: OrderArchive | None = None,
        order_ids: Callable[..., str] = generate_order_id,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.database = database
        self.archive = archive or OrderArchive(database, order_ids=order_ids, clock=clock)
        self._order_ids = order_ids
        self._clock = clock
        self._tables: list[Table] = []
        self.reload()

    # -- queries -----------------------------------------------------------

    @property
    def tables(self) -> list[Table]:
        return list(self._tables)

    def get(self, table_id: str) -> Table:
        for table in self._tables:
            if table.id == table_id:
                return table
        raise TableNotFound(f"No table with id {table_id!r}")

    def rates(self) -> ChargeRates:
        return ChargeRates.from_settings(self.database.get_settings())

    def bill_for(self, table_id: str) -> Bill:
        return calculate_bill(self.get(table_id).order_items or [], self.rates())

    def reload(self) -> None:
        """Load tables and point saved order lines at the current menu.

        Lines whose menu item no longer exists keep the copy saved with the
        table.
        """
        menu_by_id = {item.id: item for item in self.database.get_menu_items()}
        rates = self.rates()
        tables = self.database.get_tables()
        for table in tables:
            if table.order_items is None:
                continue
            table.order_items = [
                replace(line, menu_item=menu_by_id.get(line.menu_item.id, line.menu_item)) for line in table.order_items
            ]
            table.order_total = total(table.order_items, rates)
        self._tables = tables

    # -- internals ---------------------------------------------------------

    def _store(self, tables: list[Table]) -> None:
        previous = self._tables
        self._tables = tables
        try:
            self.database.save_tables(tables)
        except PersistenceError:
            self._tables = previous
            raise

    def _commit(self, updated: Table) -> Table:
        self._store([updated if table.id == updated.id else table for table in self._tables])
        return updated

    def _set_order_items(self, table: Table, items: list[OrderLineItem]) -> None:
        table.order_items = items
        table.order_total = total(items, self.rates())

    @staticmethod
    def _require_customer(customer: str | None) -> str:
        name = (customer or "").strip()
        if not name:
            raise MissingCustomerName("Customer name is required.")
        return name

    @staticmethod
    def _reject(message: str) -> TransitionRejected:
        logger.info("Rejected: %s", message)
        return TransitionRejected(message)

    # -- transitions -------------------------------------------------------

    def add_table(self) -> Table:
        """Create an Available table numbered one above the current highest."""
        number = max((table.number for table in self._tables), default=0) + 1
        table = Table(id=uuid4().hex, number=number, seats=DEFAULT_TABLE_SEATS)
        self._store([*self._tables, table])
        logger.debug("Added table %s", number)
        return table

    def occupy(self, table_id: str, customer: str | None) -> Table:
        table = replace(self.get(table_id))
        table.customer = self._require_customer(customer)
        table.status = TableStatus.OCCUPIED
        table.order_id = self._order_ids(table.number)
        logger.debug("Table %s occupied by %s order=%s", table.number, table.customer, table.order_id)
        return self._commit(table)

    def reserve(self, table_id: str, customer: str | None, now: datetime | None = None) -> Table:
        table = replace(self.get(table_id))
        table.customer = self._require_customer(customer)
        table.status = TableStatus.RESERVED
        table.reservation_time = now or self._clock()
        logger.debug("Table %s reserved for %s", table.number, table.customer)
        return self._commit(table)

    def start_order(self, table_id: str) -> OrderLedger:
        """Mark the table Occupied and return a working ledger for it.

        The ledger is a copy: changes reach the table only through
        ``save_order`` or ``complete_order``.
        """
        table = replace(self.get(table_id))
        table.status = TableStatus.OCCUPIED
        if table.order_items is None:
            self._set_order_items(table, [])
        self._commit(table)
        return OrderLedger(table.order_items)

    def save_order(self, table_id: str, ledger: OrderLedger) -> Table:
        table = replace(self.get(table_id))
        if ledger.is_empty():
            raise self._reject("Please add items to the order before saving.")
        table.status = TableStatus.OCCUPIED
        self._set_order_items(table, ledger.snapshot())
        if not table.order_id:
            table.order_id = self._order_ids(table.number)
        logger.debug("Saved order %s on table %s total=%s", table.order_id, table.number, table.order_total)
        return self._commit(table)

    def complete_order(self, table_id: str, ledger: OrderLedger | None = None) -> OrderHistoryRecord:
        """Archive the order and reset the table to Available.

        Without a ledger the table's saved order is completed, which is what
        the order view does. The table reset is written before the history
        record, and a failed history write restores the table.
        """
        current = self.get(table_id)
        items = ledger.snapshot() if ledger is not None else list(current.order_items or [])
        if not items:
            raise self._reject("Please add items to the order before completing.")

        order_total = total(items, self.rates())
        previous = self._tables
        table = replace(current)
        table.clear_order()
        self._commit(table)
        try:
            return self.archive.archive(current, items, order_total)
        except PersistenceError:
            # Restore the open order; the archive wrote nothing.
            self._store(previous)
            raise

    def cancel_order(self, table_id: str) -> Table:
        """Drop the order without writing history."""
        table = replace(self.get(table_id))
        if table.status is not TableStatus.OCCUPIED:
            raise self._reject(f"Table {table.number} is not occupied.")
        table.clear_order()
        logger.debug("Cancelled order on table %s", table.number)
        return self._commit(table)

    def free(self, table_id: str) -> Table:
        table = replace(self.get(table_id))
        if table.has_order_items:
            raise self._reject(f"Table {table.number} has an open order. Complete or cancel it first.")
        table.clear_order()
        logger.debug("Freed table %s", table.number)
        return self._commit(table)

    def manage(
        self,
        table_id: str,
        *,
        number: int,
        seats: int,
        status: TableStatus | str,
        customer: str | None,
    ) -> Table:
        """Overwrite the operator-editable fields as entered, nothing else."""
        table = replace(self.get(table_id))
        if number <= 0 or seats <= 0:
            raise self._reject("Table number and seats must be positive.")
        if any(other.number == number for other in self._tables if other.id != table_id):
            raise self._reject(f"Table number {number} is already in use.")
        try:
            table.status = TableStatus(status)
        except ValueError:
            raise self._reject(f"Unknown table status {status!r}.") from None
        table.number = number
        table.seats = seats
        table.customer = (customer or "").strip() or None
        return self._commit(table)

    def delete(self, table_id: str) -> None:
        table = self.get(table_id)
        self._store([other for other in self._tables if other.id != table_id])
        logger.debug("Deleted table %s", table.number)
