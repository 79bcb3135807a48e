"""Reports modal: table occupancy and completed-order totals."""

from __future__ import annotations

from datetime import date

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import Static

from tablepos.database import PersistenceError
from tablepos.history import OrderArchive
from tablepos.models import Table
from tablepos.permissions import Action, PermissionDenied, Session, require
from tablepos.reports import summarize, table_status_counts
from tablepos.rendering import format_money, status_style

_MAX_LISTED_ORDERS = 12


class ReportsModal(ModalScreen[None]):
    BINDINGS = [
        ("escape", "close", "Close"),
        ("q", "close", "Close"),
        ("t", "toggle_today", "Today / all"),
        ("ctrl+x", "clear_history", "Clear history"),
    ]

    CSS = """
    ReportsModal {
        align: center middle;
        background: $background 60%;
    }

    #reports-dialog {
        width: 72;
        height: auto;
        max-height: 90%;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #reports-title {
        text-style: bold;
        margin-bottom: 1;
    }

    #reports-help {
        margin-top: 1;
        color: $text-muted;
    }
    """

    def __init__(self, archive: OrderArchive, tables: list[Table], session: Session, currency: str) -> None:
        super().__init__()
        self.archive = archive
        self.tables = tables
        self.session = session
        self.currency = currency
        self.today_only = False
        self.confirm_clear = False
        self.system_status = ""

    def compose(self) -> ComposeResult:
        with Container(id="reports-dialog"):
            yield Static("Reports", id="reports-title")
            yield Static(id="reports-body")
            yield Static("t today/all. Ctrl+X clear history. Esc/q close.", id="reports-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def action_close(self) -> None:
        self.dismiss()

    def action_toggle_today(self) -> None:
        self.today_only = not self.today_only
        self.confirm_clear = False
        self._refresh_content()

    def action_clear_history(self) -> None:
        try:
            require(self.session.permissions, Action.CLEAR_HISTORY)
        except PermissionDenied as exc:
            self.system_status = str(exc)
            self._refresh_content()
            return

        if not self.confirm_clear:
            self.confirm_clear = True
            self.system_status = "Press Ctrl+X again to delete all order history."
            self._refresh_content()
            return

        self.confirm_clear = False
        try:
            self.archive.clear_history()
        except PersistenceError as exc:
            self.system_status = str(exc)
        else:
            self.system_status = "Order history cleared."
        self._refresh_content()

    def _refresh_content(self) -> None:
        summary = summarize(self.archive.get_order_history(), date.today() if self.today_only else None)

        content = Text()
        for status, count in table_status_counts(self.tables).items():
            content.append(f" {status.value} ", style=status_style(status))
            content.append(f" {count}   ")
        content.append("\n\n")
        content.append(f"Orders ({summary.day or 'all dates'}): {summary.order_count}\n", style="bold")
        content.append(f"Revenue: {format_money(summary.revenue, self.currency)}\n\n", style="bold")

        for order in summary.orders[:_MAX_LISTED_ORDERS]:
            content.append(
                f"{order.id}  T{order.table_number:02d}  {order.customer_name:<16.16}  "
                f"{order.order_date}  {format_money(order.total, self.currency)}\n"
            )
        hidden = summary.order_count - _MAX_LISTED_ORDERS
        if hidden > 0:
            content.append(f"... {hidden} more\n", style="dim")

        if self.system_status:
            content.append(f"\n{self.system_status}", style="#ffb3b3")
        self.query_one("#reports-body", Static).update(content)
