"""Main Textual app class."""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.css.query import NoMatches
from textual.reactive import reactive
from textual.widgets import Header, Static

from tablepos.backup import read_backup, write_backup
from tablepos.config import backup_dir
from tablepos.database import InvalidBackup, PersistenceError, PosDatabase
from tablepos.form_modal import FormModal
from tablepos.forms import (
    IMPORT_FIELDS,
    LOGIN_FIELDS,
    FormError,
    FormField,
    parse_import_form,
    parse_settings_form,
    parse_table_form,
    settings_fields,
    table_fields,
)
from tablepos.menu_modal import MenuModal
from tablepos.models import Settings, Table
from tablepos.ordering_screen import OrderingScreen
from tablepos.permissions import (
    SIGNED_OUT,
    Action,
    PermissionDenied,
    Session,
    authenticate,
    require,
    visible_sections,
)
from tablepos.printer import build_receipt, check_printer_dependencies, print_receipt
from tablepos.rendering import format_bill, format_money, format_order_lines, format_table_label, scrolled_list
from tablepos.reports_modal import ReportsModal
from tablepos.tables import TableNotFound, TableStateMachine, TransitionRejected

logger = logging.getLogger(__name__)

# Faults shown to the operator instead of crashing the app.
_OPERATOR_FAULTS = (TransitionRejected, PermissionDenied, PersistenceError, TableNotFound, FormError, InvalidBackup)

_SECTION_HELP = {
    "reports": "h reports",
    "manage": "m menu",
    "settings": "s settings  ^E export  ^O import",
}


class PosApp(App):
    """A Textual app for running tables and their orders."""

    TITLE = "Table POS"

    CSS = """
    Screen {
        layout: vertical;
    }

    #main-layout {
        height: 1fr;
    }

    #tables-pane {
        width: 3fr;
        border: round $primary;
        padding: 1;
    }

    #detail-pane {
        width: 2fr;
        border: round $secondary;
        padding: 1;
    }

    #tables-list {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #order-detail {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #status-bar {
        border: heavy $secondary;
        padding: 0 1;
        margin-top: 1;
        height: 5;
    }

    .pane-title {
        text-style: bold;
        margin-bottom: 1;
    }
    """

    selected_index = reactive(0)

    BINDINGS = [
        ("up", "move(-1)", "Previous table"),
        ("down", "move(1)", "Next table"),
        ("k", "move(-1)", "Previous table"),
        ("j", "move(1)", "Next table"),
        ("enter", "start_order", "Order"),
        ("o", "occupy", "Occupy"),
        ("r", "reserve", "Reserve"),
        ("f", "free", "Free"),
        ("c", "cancel_order", "Cancel order"),
        ("d", "complete_order", "Complete"),
        ("p", "print_receipt", "Print"),
        ("a", "add_table", "Add table"),
        ("e", "edit_table", "Edit table"),
        ("x", "delete_table", "Delete table"),
        ("h", "reports", "Reports"),
        ("m", "menu", "Menu"),
        ("s", "settings", "Settings"),
        ("ctrl+e", "export_backup", "Export"),
        ("ctrl+o", "import_backup", "Import"),
        ("l", "sign_out", "Sign out"),
        Binding("ctrl+q", "quit", "Quit", priority=True),
    ]

    def __init__(self, database: PosDatabase) -> None:
        super().__init__()
        self.database = database
        self.session: Session = SIGNED_OUT
        self.machine = TableStateMachine(database)
        self.system_status = ""
        self._pending_delete: str | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main-layout"):
            with Vertical(id="tables-pane"):
                yield Static("Tables", classes="pane-title")
                yield Static(id="tables-list")
            with Vertical(id="detail-pane"):
                yield Static("Order", classes="pane-title")
                yield Static(id="order-detail")
                yield Static(id="status-bar")

    def on_mount(self) -> None:
        _, msg = check_printer_dependencies()
        self.system_status = msg
        logger.debug("on_mount printer_status=%r", msg)
        self._refresh_all()
        self._prompt_sign_in()

    # -- session -----------------------------------------------------------

    def _prompt_sign_in(self) -> None:
        def on_close(values: dict[str, str] | None) -> None:
            if values is None:
                self.exit()
                return
            self._set_status(f"Signed in as {self.session.user_name}.")

        self.push_screen(FormModal("Sign in", LOGIN_FIELDS, self._sign_in), on_close)

    def _sign_in(self, values: dict[str, str]) -> str | None:
        session = authenticate(
            self.database.get_users(),
            self.database.get_roles(),
            values["login"].strip(),
            values["password"],
        )
        if session is None:
            logger.info("Failed sign-in for %r", values["login"])
            return "Invalid name or password."
        self.session = session
        self.sub_title = f"{session.user_name} ({session.role_name})"
        logger.info("Signed in %s as %s", session.user_name, session.role_name)
        return None

    def action_sign_out(self) -> None:
        logger.info("Signed out %s", self.session.user_name)
        self.session = SIGNED_OUT
        self.sub_title = ""
        self._pending_delete = None
        self._set_status("Signed out.")
        self._prompt_sign_in()

    # -- helpers -----------------------------------------------------------

    def _settings(self) -> Settings:
        return self.database.get_settings() or Settings()

    def _selected_table(self) -> Table | None:
        tables = self.machine.tables
        if not tables:
            return None
        self.selected_index = min(self.selected_index, len(tables) - 1)
        return tables[self.selected_index]

    def _set_status(self, message: str) -> None:
        self.system_status = message
        self._refresh_all()

    def _allowed(self, action: Action) -> bool:
        try:
            require(self.session.permissions, action)
        except PermissionDenied as exc:
            self._set_status(str(exc))
            return False
        return True

    def _section_open(self, section: str, action: Action) -> bool:
        if section not in visible_sections(self.session.permissions):
            self._set_status(str(PermissionDenied(action)))
            return False
        return True

    def _run(self, action: Action, operation: Callable[[], object], done: str | None = None) -> bool:
        """Check the permission, run one transition and report the outcome."""
        try:
            require(self.session.permissions, action)
            operation()
        except _OPERATOR_FAULTS as exc:
            self._set_status(str(exc))
            return False
        if done:
            self._set_status(done)
        else:
            self._refresh_all()
        return True

    def _open_form(
        self,
        action: Action,
        title: str,
        fields: Sequence[FormField],
        apply: Callable[[dict[str, str]], str],
    ) -> None:
        """Collect values in a form; ``apply`` acts on them and returns a status message.

        Faults raised by ``apply`` keep the form open with the message shown.
        """
        if not self._allowed(action):
            return
        outcome: list[str] = []

        def submit(values: dict[str, str]) -> str | None:
            try:
                require(self.session.permissions, action)
                outcome.append(apply(values))
            except _OPERATOR_FAULTS as exc:
                return str(exc)
            return None

        def on_close(values: dict[str, str] | None) -> None:
            self._set_status("Cancelled." if values is None else outcome[-1])

        self.push_screen(FormModal(title, fields, submit), on_close)

    # -- table actions -----------------------------------------------------

    def action_move(self, delta: int) -> None:
        tables = self.machine.tables
        if not tables:
            return
        self._pending_delete = None
        self.selected_index = (self.selected_index + delta) % len(tables)
        self._refresh_all()

    def action_add_table(self) -> None:
        def add() -> None:
            table = self.machine.add_table()
            self.selected_index = len(self.machine.tables) - 1
            self.system_status = f"Added table {table.number}."

        self._run(Action.ADD_TABLE, add)

    def action_edit_table(self) -> None:
        table = self._selected_table()
        if table is None:
            return

        def apply(values: dict[str, str]) -> str:
            updated = self.machine.manage(table.id, **parse_table_form(values))
            return f"Table {updated.number} updated."

        self._open_form(Action.MANAGE_TABLE, f"Edit table {table.number}", table_fields(table), apply)

    def action_delete_table(self) -> None:
        table = self._selected_table()
        if table is None:
            return
        if self._pending_delete != table.id:
            self._pending_delete = table.id
            self._set_status(f"Press x again to delete table {table.number}.")
            return
        self._pending_delete = None
        self._run(Action.DELETE_TABLE, lambda: self.machine.delete(table.id), f"Deleted table {table.number}.")

    def _customer_form(self, action: Action, verb: str, table: Table, apply: Callable[[str], object]) -> None:
        def run(values: dict[str, str]) -> str:
            apply(values["customer"])
            return f"Table {table.number} {verb}."

        fields = [FormField("customer", "Customer name")]
        self._open_form(action, f"{verb.title()} table {table.number}", fields, run)

    def action_occupy(self) -> None:
        table = self._selected_table()
        if table is None:
            return
        self._customer_form(Action.OCCUPY, "occupied", table, lambda name: self.machine.occupy(table.id, name))

    def action_reserve(self) -> None:
        table = self._selected_table()
        if table is None:
            return
        self._customer_form(Action.RESERVE, "reserved", table, lambda name: self.machine.reserve(table.id, name))

    def action_free(self) -> None:
        table = self._selected_table()
        if table is None:
            return
        self._run(Action.FREE, lambda: self.machine.free(table.id), f"Table {table.number} is available.")

    def action_cancel_order(self) -> None:
        table = self._selected_table()
        if table is None:
            return
        self._run(
            Action.CANCEL_ORDER,
            lambda: self.machine.cancel_order(table.id),
            f"Order on table {table.number} cancelled.",
        )

    def action_complete_order(self) -> None:
        table = self._selected_table()
        if table is None:
            return
        currency = self._settings().currency

        def complete() -> None:
            record = self.machine.complete_order(table.id)
            self.system_status = f"Order {record.id} completed. Total: {format_money(record.total, currency)}"

        self._run(Action.COMPLETE_ORDER, complete)

    def action_start_order(self) -> None:
        table = self._selected_table()
        if table is None:
            return
        try:
            require(self.session.permissions, Action.START_ORDER)
            ledger = self.machine.start_order(table.id)
        except _OPERATOR_FAULTS as exc:
            self._set_status(str(exc))
            return

        def on_done(message: str | None) -> None:
            self._set_status(message or f"Back from table {table.number}; unsaved changes discarded.")

        screen = OrderingScreen(
            self.machine,
            self.session,
            table.id,
            ledger,
            self.database.get_menu_items(),
            self._settings().currency,
        )
        self._refresh_all()
        self.push_screen(screen, on_done)

    def action_print_receipt(self) -> None:
        table = self._selected_table()
        if table is None or not self._allowed(Action.PRINT_RECEIPT):
            return
        if not table.has_order_items:
            self._set_status("No order items to print.")
            return

        receipt = build_receipt(table, self.database.get_settings(), self.machine.rates())
        try:
            print_receipt(receipt)
        except Exception as exc:
            logger.error("Printing order %s failed: %r", receipt.order_id, exc)
            self._set_status(f"Print failed: {exc}")
            return
        self._set_status(f"Printed receipt for table {table.number}.")

    # -- other sections ----------------------------------------------------

    def action_reports(self) -> None:
        if not self._section_open("reports", Action.VIEW_REPORTS) or not self._allowed(Action.VIEW_REPORTS):
            return
        modal = ReportsModal(self.machine.archive, self.machine.tables, self.session, self._settings().currency)
        self.push_screen(modal, lambda _: self._refresh_all())

    def action_menu(self) -> None:
        if not self._section_open("manage", Action.VIEW_MENU) or not self._allowed(Action.VIEW_MENU):
            return
        modal = MenuModal(self.database, self.session, self._settings().currency, self.machine.reload)
        self.push_screen(modal, lambda _: self._refresh_all())

    def action_settings(self) -> None:
        if not self._section_open("settings", Action.EDIT_SETTINGS):
            return

        def apply(values: dict[str, str]) -> str:
            self.database.update_settings(parse_settings_form(values))
            self.machine.reload()
            return "Settings saved."

        self._open_form(Action.EDIT_SETTINGS, "Settings", settings_fields(self._settings()), apply)

    def action_export_backup(self) -> None:
        if not self._allowed(Action.BACKUP_DATA):
            return
        try:
            path = write_backup(self.database, backup_dir())
        except OSError as exc:
            logger.error("Backup export failed: %r", exc)
            self._set_status(f"Export failed: {exc}")
            return
        self._set_status(f"Backup written to {path}.")

    def action_import_backup(self) -> None:
        def apply(values: dict[str, str]) -> str:
            read_backup(self.database, parse_import_form(values))
            self.machine.reload()
            self.selected_index = 0
            return "Backup imported."

        self._open_form(Action.BACKUP_DATA, "Import backup", IMPORT_FIELDS, apply)

    # -- rendering ---------------------------------------------------------

    def _refresh_all(self) -> None:
        self._refresh_tables()
        self._refresh_detail()

    def _refresh_tables(self) -> None:
        try:
            tables_widget = self.query_one("#tables-list", Static)
        except NoMatches:
            return
        tables = self.machine.tables
        if not tables:
            tables_widget.update("(no tables, press a to add one)")
            return

        currency = self._settings().currency
        selected = min(self.selected_index, len(tables) - 1)
        rows = []
        for idx, table in enumerate(tables):
            row = Text("➤ " if idx == selected else "  ")
            row.append_text(format_table_label(table, currency))
            rows.append(row)
        tables_widget.update(scrolled_list(rows, tables_widget.size.height, selected))

    def _help_text(self) -> str:
        sections = [_SECTION_HELP[name] for name in visible_sections(self.session.permissions) if name in _SECTION_HELP]
        return (
            "Enter order  o occupy  r reserve  f free  c cancel  d complete  p print\n"
            "a add  e edit  x delete  l sign out  Ctrl+Q quit\n"
            f"{'  '.join(sections)}"
        )

    def _refresh_detail(self) -> None:
        try:
            detail = self.query_one("#order-detail", Static)
            status_bar = self.query_one("#status-bar", Static)
        except NoMatches:
            return

        status_bar.update(Text(f"{self._help_text()}\n{self.system_status or 'Ready'}"))

        table = self._selected_table()
        if table is None:
            detail.update("")
            return

        settings = self._settings()
        content = Text()
        content.append(f"Table {table.number}", style="bold")
        content.append(f"  {table.status.value}\n")
        if table.customer:
            content.append(f"Customer: {table.customer}\n")
        if table.reservation_time is not None:
            content.append(f"Reserved: {table.reservation_time:%Y-%m-%d %H:%M}\n")
        if table.order_id:
            content.append(f"Order: {table.order_id}\n")
        content.append("\n")
        content.append_text(format_order_lines(table.order_items or [], settings.currency))
        if table.has_order_items:
            content.append("\n\n")
            content.append_text(format_bill(self.machine.bill_for(table.id), self.machine.rates(), settings.currency))
        detail.update(content)
