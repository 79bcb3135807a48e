"""Ordering screen bound to one table."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import Screen
from textual.widgets import Header, Static

from tablepos.billing import calculate_bill
from tablepos.database import PersistenceError
from tablepos.ledger import OrderLedger
from tablepos.models import MenuItem
from tablepos.permissions import Action, PermissionDenied, Session, require
from tablepos.rendering import format_bill, format_money, format_order_lines, scrolled_list
from tablepos.tables import TableStateMachine, TransitionRejected

ALL_CATEGORIES = "all"


class OrderingScreen(Screen[str | None]):
    """Add and remove menu items for a table, then save or complete.

    Dismisses with a status message for the table grid, or None when the
    operator backs out without saving.
    """

    CSS = """
    #ordering-layout {
        height: 1fr;
    }

    #menu-pane {
        width: 3fr;
        border: round $secondary;
        padding: 1;
    }

    #ticket-pane {
        width: 2fr;
        border: round $primary;
        padding: 1;
    }

    #category-bar {
        border: heavy $secondary;
        padding: 0 1;
        margin-bottom: 1;
        height: 3;
    }

    #menu-list, #ticket-lines {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #ticket-bill {
        height: auto;
        margin-top: 1;
    }

    #ordering-status {
        height: auto;
        color: #ffb3b3;
    }

    .pane-title {
        text-style: bold;
        margin-bottom: 1;
    }
    """

    BINDINGS = [
        ("up", "move(-1)", "Previous item"),
        ("down", "move(1)", "Next item"),
        ("tab", "cycle_category", "Category"),
        ("enter", "add_selected", "Add"),
        ("plus", "add_selected", "Add"),
        ("minus", "remove_selected", "Remove"),
        ("backspace", "remove_selected", "Remove"),
        Binding("ctrl+s", "save_order", "Save", priority=True),
        Binding("ctrl+d", "complete_order", "Complete", priority=True),
        ("escape", "back", "Back"),
    ]

    def __init__(
        self,
        machine: TableStateMachine,
        session: Session,
        table_id: str,
        ledger: OrderLedger,
        menu_items: list[MenuItem],
        currency: str,
    ) -> None:
        super().__init__()
        self.machine = machine
        self.session = session
        self.table_id = table_id
        self.ledger = ledger
        self.menu_items = menu_items
        self.currency = currency
        self.categories = [ALL_CATEGORIES, *dict.fromkeys(item.category for item in menu_items)]
        self.category_index = 0
        self.selected_index = 0
        self.system_status = ""

    def compose(self) -> ComposeResult:
        table = self.machine.get(self.table_id)
        yield Header()
        with Horizontal(id="ordering-layout"):
            with Vertical(id="menu-pane"):
                yield Static(id="category-bar")
                yield Static(id="menu-list")
            with Vertical(id="ticket-pane"):
                yield Static(f"Table {table.number} ({table.seats} seats)", classes="pane-title")
                yield Static(id="ticket-lines")
                yield Static(id="ticket-bill")
                yield Static(id="ordering-status")

    def on_mount(self) -> None:
        self._refresh_all()

    def _filtered_menu(self) -> list[MenuItem]:
        category = self.categories[self.category_index]
        if category == ALL_CATEGORIES:
            return self.menu_items
        return [item for item in self.menu_items if item.category == category]

    def _selected_item(self) -> MenuItem | None:
        items = self._filtered_menu()
        if not items:
            return None
        return items[min(self.selected_index, len(items) - 1)]

    def action_move(self, delta: int) -> None:
        items = self._filtered_menu()
        if not items:
            return
        self.selected_index = (self.selected_index + delta) % len(items)
        self._refresh_menu()

    def action_cycle_category(self) -> None:
        self.category_index = (self.category_index + 1) % len(self.categories)
        self.selected_index = 0
        self._refresh_all()

    def action_add_selected(self) -> None:
        item = self._selected_item()
        if item is None:
            return
        self.ledger.add_item(item)
        self._refresh_all()

    def action_remove_selected(self) -> None:
        item = self._selected_item()
        if item is None:
            return
        self.ledger.decrement_item(item.id)
        self._refresh_all()

    def action_save_order(self) -> None:
        try:
            require(self.session.permissions, Action.SAVE_ORDER)
            table = self.machine.save_order(self.table_id, self.ledger)
        except (TransitionRejected, PermissionDenied, PersistenceError) as exc:
            self._show_status(str(exc))
            return
        total = format_money(table.order_total or 0, self.currency)
        self.dismiss(f"Order saved for table {table.number}. Total: {total}")

    def action_complete_order(self) -> None:
        try:
            require(self.session.permissions, Action.COMPLETE_ORDER)
            record = self.machine.complete_order(self.table_id, self.ledger)
        except (TransitionRejected, PermissionDenied, PersistenceError) as exc:
            self._show_status(str(exc))
            return
        self.dismiss(f"Order {record.id} completed. Total: {format_money(record.total, self.currency)}")

    def action_back(self) -> None:
        self.dismiss(None)

    def _show_status(self, message: str) -> None:
        self.system_status = message
        self.query_one("#ordering-status", Static).update(Text(message))

    def _refresh_all(self) -> None:
        self._refresh_menu()
        self._refresh_ticket()

    def _refresh_menu(self) -> None:
        bar = Text()
        for idx, category in enumerate(self.categories):
            if idx > 0:
                bar.append("  ")
            style = "bold reverse" if idx == self.category_index else "dim"
            bar.append(category.title() if category == ALL_CATEGORIES else category, style=style)
        self.query_one("#category-bar", Static).update(bar)

        items = self._filtered_menu()
        if not items:
            self.query_one("#menu-list", Static).update("No menu items")
            return
        if self.selected_index >= len(items):
            self.selected_index = 0

        rows = []
        for idx, item in enumerate(items):
            row = Text("➤ " if idx == self.selected_index else "  ")
            row.append(item.name)
            row.append(f"  {format_money(item.price, self.currency)}", style="dim")
            quantity = self.ledger.quantity_of(item.id)
            if quantity:
                row.append(f"  x{quantity}", style="bold green")
            rows.append(row)
        menu_list = self.query_one("#menu-list", Static)
        menu_list.update(scrolled_list(rows, menu_list.size.height, self.selected_index))

    def _refresh_ticket(self) -> None:
        rates = self.machine.rates()
        self.query_one("#ticket-lines", Static).update(format_order_lines(self.ledger, self.currency))
        bill = calculate_bill(self.ledger, rates)
        self.query_one("#ticket-bill", Static).update(format_bill(bill, rates, self.currency))
