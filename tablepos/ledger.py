"""Working list of order lines for one table."""

from __future__ import annotations

from typing import Callable, Iterable, Iterator
from uuid import uuid4

from tablepos.models import MenuItem, OrderLineItem


def _new_line_id() -> str:
    return uuid4().hex


class OrderLedger:
    """Ordered order lines with at most one line per menu item.

    Insertion order is kept: the first item added is shown first.
    """

    def __init__(
        self,
        items: Iterable[OrderLineItem] | None = None,
        id_factory: Callable[[], str] = _new_line_id,
    ) -> None:
        self._items: list[OrderLineItem] = [
            OrderLineItem(id=item.id, menu_item=item.menu_item, quantity=item.quantity) for item in items or []
        ]
        self._id_factory = id_factory

    @property
    def items(self) -> tuple[OrderLineItem, ...]:
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[OrderLineItem]:
        return iter(tuple(self._items))

    def is_empty(self) -> bool:
        return not self._items

    def _find(self, menu_item_id: str) -> OrderLineItem | None:
        for item in self._items:
            if item.menu_item.id == menu_item_id:
                return item
        return None

    def add_item(self, menu_item: MenuItem) -> OrderLedger:
        """Add one unit of a menu item, merging into its existing line."""
        existing = self._find(menu_item.id)
        if existing is not None:
            existing.quantity += 1
            return self

        used_ids = {item.id for item in self._items}
        line_id = self._id_factory()
        while line_id in used_ids:
            line_id = self._id_factory()
        self._items.append(OrderLineItem(id=line_id, menu_item=menu_item, quantity=1))
        return self

    def decrement_item(self, menu_item_id: str) -> OrderLedger:
        """Remove one unit; the line goes away when its quantity hits zero."""
        existing = self._find(menu_item_id)
        if existing is None:
            return self
        if existing.quantity > 1:
            existing.quantity -= 1
        else:
            self._items = [item for item in self._items if item is not existing]
        return self

    def quantity_of(self, menu_item_id: str) -> int:
        existing = self._find(menu_item_id)
        return existing.quantity if existing is not None else 0

    def snapshot(self) -> list[OrderLineItem]:
        """Detached copies of the lines, for storing on a table."""
        return [OrderLineItem(id=item.id, menu_item=item.menu_item, quantity=item.quantity) for item in self._items]
