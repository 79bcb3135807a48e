"""Text form modal screen used for every operator edit."""

from __future__ import annotations

from typing import Callable, Sequence

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

from tablepos.forms import FormField

_MAX_VALUE_LENGTH = 60

# Receives the entered values; returns an error message to keep the form open.
Submit = Callable[[dict[str, str]], str | None]


class FormModal(ModalScreen[dict[str, str] | None]):
    """Edit a few text fields, one at a time.

    Dismisses with the entered values, or None when cancelled. With a
    ``submit`` callback the form only closes once the callback accepts the
    values.
    """

    CSS = """
    FormModal {
        align: center middle;
        background: $background 60%;
    }

    #form-dialog {
        width: 64;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #form-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #form-fields {
        border: heavy $secondary;
        padding: 0 1;
        color: white;
        margin-bottom: 1;
    }

    #form-error {
        color: #ffb3b3;
        margin-bottom: 1;
    }

    #form-help {
        color: #dddddd;
    }
    """

    def __init__(self, title: str, fields: Sequence[FormField], submit: Submit | None = None) -> None:
        super().__init__()
        self.title_text = title
        self.fields = list(fields)
        self.values = [field.value for field in self.fields]
        self.submit = submit
        self.cursor_index = 0
        self.error = ""

    def compose(self) -> ComposeResult:
        with Container(id="form-dialog"):
            yield Static(self.title_text, id="form-title")
            yield Static(id="form-fields")
            yield Static(id="form-error")
            yield Static(
                "Tab/↑/↓ field. Enter next/confirm. Ctrl+S confirm. Esc/Ctrl+C cancel.",
                id="form-help",
            )

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        key = event.key
        event.stop()

        if key in {"escape", "ctrl+c"}:
            self.dismiss(None)
            return

        if key == "ctrl+s" or (key == "enter" and self.cursor_index == len(self.fields) - 1):
            self._confirm()
            return

        if key in {"enter", "tab", "down"}:
            self._move(1)
            return

        if key in {"shift+tab", "up"}:
            self._move(-1)
            return

        current = self.values[self.cursor_index]
        if key == "backspace":
            self.values[self.cursor_index] = current[:-1]
        elif event.is_printable and event.character and len(current) < _MAX_VALUE_LENGTH:
            self.values[self.cursor_index] = current + event.character
        else:
            return
        self.error = ""
        self._refresh_content()

    def _move(self, delta: int) -> None:
        self.cursor_index = (self.cursor_index + delta) % len(self.fields)
        self._refresh_content()

    def _confirm(self) -> None:
        values = {field.key: value for field, value in zip(self.fields, self.values)}
        if self.submit is not None:
            error = self.submit(values)
            if error:
                self.error = error
                self._refresh_content()
                return
        self.dismiss(values)

    def _refresh_content(self) -> None:
        width = max(len(field.label) for field in self.fields)
        content = Text()
        for idx, (field, value) in enumerate(zip(self.fields, self.values)):
            if idx > 0:
                content.append("\n")
            selected = idx == self.cursor_index
            shown = "*" * len(value) if field.secret else value
            content.append("➤ " if selected else "  ")
            content.append(f"{field.label:<{width}}  ", style="bold" if selected else "")
            content.append(f"{shown}|" if selected else shown)
        self.query_one("#form-fields", Static).update(content)
        self.query_one("#form-error", Static).update(self.error)
