from datetime import date

from tablepos.models import OrderHistoryRecord, Table, TableStatus
from tablepos.reports import summarize, table_status_counts


def _record(order_id, order_date, total):
    return OrderHistoryRecord(
        id=order_id,
        table_number=1,
        customer_name="Alice",
        order_date=order_date,
        status="completed",
        total=total,
    )


ORDERS = [
    _record("c", "2024-12-15", 5425.0),
    _record("b", "2024-12-15", 1000.0),
    _record("a", "2024-12-14", 300.0),
]


class TestSummarize:
    def test_all_orders(self):
        summary = summarize(ORDERS)

        assert summary.day is None
        assert summary.order_count == 3
        assert summary.revenue == 6725.0

    def test_single_day(self):
        summary = summarize(ORDERS, date(2024, 12, 15))

        assert summary.day == "2024-12-15"
        assert summary.order_count == 2
        assert summary.revenue == 6425.0
        assert [order.id for order in summary.orders] == ["c", "b"]

    def test_day_without_orders(self):
        summary = summarize(ORDERS, "2024-01-01")

        assert summary.order_count == 0
        assert summary.revenue == 0


class TestTableStatusCounts:
    def test_every_status_is_reported(self):
        tables = [
            Table(id="1", number=1, seats=2, status=TableStatus.OCCUPIED),
            Table(id="2", number=2, seats=2, status=TableStatus.OCCUPIED),
            Table(id="3", number=3, seats=2),
        ]

        assert table_status_counts(tables) == {
            TableStatus.AVAILABLE: 1,
            TableStatus.OCCUPIED: 2,
            TableStatus.RESERVED: 0,
        }
