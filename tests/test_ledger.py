import itertools

from tablepos.ledger import OrderLedger
from tablepos.models import MenuItem, OrderLineItem


class TestAddItem:
    def test_first_add_creates_a_line(self, mohinga):
        ledger = OrderLedger().add_item(mohinga)

        assert len(ledger) == 1
        assert ledger.items[0].menu_item is mohinga
        assert ledger.items[0].quantity == 1

    def test_repeat_add_merges_into_one_line(self, mohinga):
        ledger = OrderLedger()
        ledger.add_item(mohinga).add_item(mohinga).add_item(mohinga)

        assert len(ledger) == 1
        assert ledger.quantity_of("1") == 3

    def test_lines_keep_insertion_order(self, mohinga, beer):
        ledger = OrderLedger().add_item(beer).add_item(mohinga).add_item(beer)

        assert [line.menu_item.id for line in ledger] == ["6", "1"]

    def test_line_ids_are_unique_even_when_factory_repeats(self, mohinga, beer):
        ids = iter(["a", "a", "b"])
        ledger = OrderLedger(id_factory=lambda: next(ids))

        ledger.add_item(mohinga).add_item(beer)

        assert [line.id for line in ledger] == ["a", "b"]


class TestDecrementItem:
    def test_decrement_lowers_quantity(self, mohinga):
        ledger = OrderLedger().add_item(mohinga).add_item(mohinga)

        ledger.decrement_item("1")

        assert ledger.quantity_of("1") == 1

    def test_decrement_at_one_removes_the_line(self, mohinga, beer):
        ledger = OrderLedger().add_item(mohinga).add_item(beer)

        ledger.decrement_item("1")

        assert [line.menu_item.id for line in ledger] == ["6"]
        assert ledger.quantity_of("1") == 0

    def test_decrement_of_absent_item_is_a_no_op(self, mohinga):
        ledger = OrderLedger().add_item(mohinga)

        ledger.decrement_item("missing")

        assert ledger.quantity_of("1") == 1

    def test_decrement_on_empty_ledger(self):
        ledger = OrderLedger()

        ledger.decrement_item("1")

        assert ledger.is_empty()

    def test_quantities_never_drop_below_one(self, mohinga, beer):
        ledger = OrderLedger()
        steps = [
            (ledger.add_item, mohinga),
            (ledger.add_item, beer),
            (ledger.decrement_item, "1"),
            (ledger.add_item, mohinga),
            (ledger.decrement_item, "6"),
            (ledger.decrement_item, "6"),
            (ledger.add_item, beer),
        ]
        for step, arg in itertools.chain(steps, steps):
            step(arg)
            assert all(line.quantity >= 1 for line in ledger)
            ids = [line.menu_item.id for line in ledger]
            assert len(ids) == len(set(ids))


class TestCopies:
    def test_constructor_copies_lines(self, mohinga):
        saved = [OrderLineItem(id="l1", menu_item=mohinga, quantity=2)]

        ledger = OrderLedger(saved).add_item(mohinga)

        assert saved[0].quantity == 2
        assert ledger.quantity_of("1") == 3

    def test_snapshot_is_detached(self, mohinga):
        ledger = OrderLedger().add_item(mohinga)

        snapshot = ledger.snapshot()
        ledger.add_item(mohinga)

        assert snapshot[0].quantity == 1

    def test_snapshot_shares_the_menu_item(self):
        item = MenuItem(id="9", name="Tea", price=500, category="Beverage")
        ledger = OrderLedger().add_item(item)

        assert ledger.snapshot()[0].menu_item is item
