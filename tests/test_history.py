from datetime import date, datetime

import pytest

from tablepos.history import COMPLETED, OrderArchive
from tablepos.models import OrderLineItem, Table, TableStatus


@pytest.fixture
def archive(database, order_ids, clock):
    return OrderArchive(database, order_ids=order_ids, clock=clock)


def _table(**overrides):
    fields = dict(id="t1", number=7, seats=4, status=TableStatus.OCCUPIED, customer="Alice", order_id="ORD-1")
    fields.update(overrides)
    return Table(**fields)


class TestArchive:
    def test_record_copies_lines_by_value(self, archive, mohinga, beer):
        lines = [OrderLineItem(id="a", menu_item=mohinga, quantity=2), OrderLineItem(id="b", menu_item=beer)]

        record = archive.archive(_table(), lines, 6725.0)
        mohinga.price = 1

        assert record.status == COMPLETED
        assert record.total == 6725.0
        assert [(item.name, item.price, item.quantity) for item in record.items] == [
            ("Mohinga", 2500, 2),
            ("Myanmar Beer", 1200, 1),
        ]

    def test_record_is_stamped_and_stored(self, archive, database, mohinga):
        record = archive.archive(_table(), [OrderLineItem(id="a", menu_item=mohinga)], 2712.5)

        assert record.created_at is not None
        assert record.order_date == "2024-12-15"
        assert database.get_order_history() == [record]

    def test_missing_customer_becomes_walk_in(self, archive, mohinga):
        record = archive.archive(_table(customer=None), [OrderLineItem(id="a", menu_item=mohinga)], 0)

        assert record.customer_name == "Walk-in Customer"

    def test_missing_order_id_is_generated(self, archive, mohinga):
        record = archive.archive(_table(order_id=None), [OrderLineItem(id="a", menu_item=mohinga)], 0)

        assert record.id == "ORD-151224-143025"

    def test_newest_record_comes_first(self, archive, mohinga):
        line = [OrderLineItem(id="a", menu_item=mohinga)]
        archive.archive(_table(order_id="first"), line, 1)
        archive.archive(_table(order_id="second"), line, 2)

        assert [record.id for record in archive.get_order_history()] == ["second", "first"]


class TestQueries:
    def test_orders_on_filters_by_completion_day(self, database, mohinga):
        line = [OrderLineItem(id="a", menu_item=mohinga)]
        days = iter([datetime(2024, 12, 14, 22, 0), datetime(2024, 12, 15, 9, 0)])
        archive = OrderArchive(database, clock=lambda: next(days))
        archive.archive(_table(order_id="old"), line, 1)
        archive.archive(_table(order_id="new"), line, 2)

        assert [record.id for record in archive.orders_on(date(2024, 12, 15))] == ["new"]
        assert [record.id for record in archive.orders_on("2024-12-14")] == ["old"]
        assert len(archive.get_order_history()) == 2

    def test_clear_history(self, archive, mohinga):
        archive.archive(_table(), [OrderLineItem(id="a", menu_item=mohinga)], 1)

        archive.clear_history()

        assert archive.get_order_history() == []
