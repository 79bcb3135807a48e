"""Menu management modal: menu items and categories."""

from __future__ import annotations

from typing import Callable

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import Static

from tablepos.database import PersistenceError, PosDatabase
from tablepos.form_modal import FormModal
from tablepos.forms import (
    CATEGORY_FIELDS,
    FormError,
    menu_item_fields,
    parse_category_form,
    parse_menu_item_form,
)
from tablepos.models import MenuItem
from tablepos.permissions import Action, PermissionDenied, Session, require
from tablepos.rendering import format_money, scrolled_list


class MenuModal(ModalScreen[None]):
    """Browse the menu and, with menu_manage, edit it."""

    BINDINGS = [
        ("escape", "close", "Close"),
        ("q", "close", "Close"),
        ("up", "move(-1)", "Previous"),
        ("down", "move(1)", "Next"),
        ("k", "move(-1)", "Previous"),
        ("j", "move(1)", "Next"),
        ("a", "add_item", "Add item"),
        ("enter", "edit_item", "Edit item"),
        ("x", "delete_item", "Delete item"),
        ("g", "add_category", "Add category"),
        ("r", "remove_category", "Remove category"),
    ]

    CSS = """
    MenuModal {
        align: center middle;
        background: $background 60%;
    }

    #menu-dialog {
        width: 80;
        height: 90%;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #menu-title {
        text-style: bold;
        margin-bottom: 1;
    }

    #menu-categories {
        margin-bottom: 1;
        color: $text-muted;
    }

    #menu-items {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #menu-status {
        height: auto;
        color: #ffb3b3;
    }

    #menu-help {
        margin-top: 1;
        color: $text-muted;
    }
    """

    def __init__(self, database: PosDatabase, session: Session, currency: str, on_change: Callable[[], None]) -> None:
        super().__init__()
        self.database = database
        self.session = session
        self.currency = currency
        self.on_change = on_change
        self.items: list[MenuItem] = database.get_menu_items()
        self.cursor_index = 0
        self.pending_delete: str | None = None
        self.system_status = ""

    def compose(self) -> ComposeResult:
        with Container(id="menu-dialog"):
            yield Static("Menu", id="menu-title")
            yield Static(id="menu-categories")
            yield Static(id="menu-items")
            yield Static(id="menu-status")
            yield Static(
                "a add. Enter edit. x delete. g add category. r remove category. Esc/q close.",
                id="menu-help",
            )

    def on_mount(self) -> None:
        self._refresh_content()

    # -- helpers -----------------------------------------------------------

    def _set_status(self, message: str) -> None:
        self.system_status = message
        self._refresh_content()

    def _may_edit(self) -> bool:
        try:
            require(self.session.permissions, Action.MANAGE_MENU)
        except PermissionDenied as exc:
            self._set_status(str(exc))
            return False
        return True

    def _selected(self) -> MenuItem | None:
        if not self.items:
            return None
        self.cursor_index = min(self.cursor_index, len(self.items) - 1)
        return self.items[self.cursor_index]

    def _changed(self, message: str) -> None:
        self.items = self.database.get_menu_items()
        self.on_change()
        self._set_status(message)

    def _open_form(self, title: str, fields, apply: Callable[[dict[str, str]], str]) -> None:
        """Show a form; ``apply`` saves the values and returns a status message."""
        outcome: list[str] = []

        def submit(values: dict[str, str]) -> str | None:
            try:
                outcome.append(apply(values))
            except (FormError, PersistenceError) as exc:
                return str(exc)
            return None

        def on_close(values: dict[str, str] | None) -> None:
            if values is None:
                self._set_status("Cancelled.")
            else:
                self._changed(outcome[-1])

        self.app.push_screen(FormModal(title, fields, submit), on_close)

    # -- actions -----------------------------------------------------------

    def action_close(self) -> None:
        self.dismiss()

    def action_move(self, delta: int) -> None:
        if not self.items:
            return
        self.pending_delete = None
        self.cursor_index = (self.cursor_index + delta) % len(self.items)
        self._refresh_content()

    def action_add_item(self) -> None:
        if not self._may_edit():
            return
        categories = self.database.get_categories()

        def apply(values: dict[str, str]) -> str:
            item = self.database.add_menu_item(**parse_menu_item_form(values, self.database.get_categories()))
            return f"Added {item.name}."

        self._open_form("Add menu item", menu_item_fields(None, categories[0] if categories else ""), apply)

    def action_edit_item(self) -> None:
        item = self._selected()
        if item is None or not self._may_edit():
            return

        def apply(values: dict[str, str]) -> str:
            fields = parse_menu_item_form(values, self.database.get_categories())
            if not self.database.update_menu_item(MenuItem(id=item.id, image=item.image, **fields)):
                raise FormError(f"{item.name} is no longer on the menu.")
            return f"Updated {fields['name']}."

        self._open_form(f"Edit {item.name}", menu_item_fields(item), apply)

    def action_delete_item(self) -> None:
        item = self._selected()
        if item is None or not self._may_edit():
            return
        if self.pending_delete != item.id:
            self.pending_delete = item.id
            self._set_status(f"Press x again to delete {item.name}.")
            return
        self.pending_delete = None
        try:
            self.database.delete_menu_item(item.id)
        except PersistenceError as exc:
            self._set_status(str(exc))
            return
        self._changed(f"Deleted {item.name}.")

    def action_add_category(self) -> None:
        if not self._may_edit():
            return

        def apply(values: dict[str, str]) -> str:
            name = parse_category_form(values)
            self.database.add_category(name)
            return f"Category {name} added."

        self._open_form("Add category", CATEGORY_FIELDS, apply)

    def action_remove_category(self) -> None:
        if not self._may_edit():
            return

        def apply(values: dict[str, str]) -> str:
            name = parse_category_form(values)
            if name not in self.database.get_categories():
                raise FormError(f"No category named {name!r}.")
            self.database.delete_category(name)
            return f"Category {name} removed."

        self._open_form("Remove category", CATEGORY_FIELDS, apply)

    # -- rendering ---------------------------------------------------------

    def _refresh_content(self) -> None:
        categories = self.database.get_categories()
        self.query_one("#menu-categories", Static).update(
            Text("Categories: " + (", ".join(categories) or "(none)"))
        )

        items_widget = self.query_one("#menu-items", Static)
        selected = self._selected()
        if selected is None:
            items_widget.update("(no menu items, press a to add one)")
        else:
            rows = []
            for idx, item in enumerate(self.items):
                row = Text("➤ " if idx == self.cursor_index else "  ")
                row.append(f"{item.name:<24.24}", style="bold" if idx == self.cursor_index else "")
                row.append(f" {item.category:<14.14}", style="dim")
                row.append(f" {format_money(item.price, self.currency)}")
                rows.append(row)
            items_widget.update(scrolled_list(rows, items_widget.size.height, self.cursor_index))

        self.query_one("#menu-status", Static).update(self.system_status)
