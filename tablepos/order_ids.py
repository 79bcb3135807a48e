"""Order id generation.

Ids are timestamp based, ``ORD-DDMMYY-HHMMSS``. Table-scoped ids append
``-Tnn``. Two ids requested in the same second get ``-2``, ``-3``... so a
single run never hands out the same id twice.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Callable

_TABLE_SUFFIX = re.compile(r"-T\d+(?:-\d+)?$")


class OrderIdGenerator:
    def __init__(self, clock: Callable[[], datetime] = datetime.now) -> None:
        self._clock = clock
        self._issued: set[str] = set()

    def __call__(self, table_number: int | None = None) -> str:
        return self.generate(table_number)

    def generate(self, table_number: int | None = None) -> str:
        now = self._clock()
        base = f"ORD-{now:%d%m%y}-{now:%H%M%S}"
        if table_number is not None:
            base = f"{base}-T{table_number:02d}"

        candidate = base
        attempt = 1
        while candidate in self._issued:
            attempt += 1
            candidate = f"{base}-{attempt}"
        self._issued.add(candidate)
        return candidate


_default_generator = OrderIdGenerator()


def generate_order_id(table_number: int | None = None) -> str:
    """Return a fresh order id from the process-wide generator."""
    return _default_generator.generate(table_number)


def order_display_number(order_id: str) -> str:
    """Strip the ``ORD-`` prefix and the table suffix for on-screen display."""
    return _TABLE_SUFFIX.sub("", order_id.replace("ORD-", "", 1))
