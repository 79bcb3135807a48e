"""Field definitions and parsing for the operator edit forms.

Forms collect plain text. The parsers here turn that text into the values
the database and the table state machine accept, raising ``FormError`` with
an operator-facing message when a field does not make sense.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable

from tablepos.constant import SUPPORTED_CURRENCIES
from tablepos.models import MenuItem, Settings, Table, TableStatus

_YES = {"y", "yes", "true", "on", "1"}
_NO = {"n", "no", "false", "off", "0"}


class FormError(ValueError):
    pass


@dataclass(frozen=True)
class FormField:
    key: str
    label: str
    value: str = ""
    secret: bool = False


def _number_text(value: float | None) -> str:
    if value is None:
        return ""
    return str(int(value)) if float(value).is_integer() else str(value)


def _number(text: str, label: str) -> float:
    try:
        value = float(text.strip())
    except ValueError:
        raise FormError(f"{label} must be a number.") from None
    if not math.isfinite(value):
        raise FormError(f"{label} must be a number.")
    return int(value) if value.is_integer() else value


def _positive_int(text: str, label: str) -> int:
    try:
        value = int(text.strip())
    except ValueError:
        raise FormError(f"{label} must be a whole number.") from None
    if value <= 0:
        raise FormError(f"{label} must be positive.")
    return value


def _rate(text: str, label: str) -> float:
    value = _number(text, label)
    if not 0 <= value <= 100:
        raise FormError(f"{label} must be between 0 and 100.")
    return value


def _flag(text: str, label: str) -> bool:
    lowered = text.strip().lower()
    if lowered in _YES:
        return True
    if lowered in _NO:
        return False
    raise FormError(f"{label} must be yes or no.")


def _required(text: str, label: str) -> str:
    value = text.strip()
    if not value:
        raise FormError(f"{label} is required.")
    return value


# -- login ---------------------------------------------------------------

LOGIN_FIELDS = (
    FormField("login", "Name or email"),
    FormField("password", "Password", secret=True),
)


# -- settings ------------------------------------------------------------


def settings_fields(settings: Settings) -> list[FormField]:
    return [
        FormField("restaurantName", "Restaurant", settings.restaurant_name),
        FormField("currency", "Currency", settings.currency),
        FormField("taxRate", "Tax rate %", _number_text(settings.tax_rate)),
        FormField("serviceCharge", "Service charge %", _number_text(settings.service_charge)),
        FormField("serviceChargeEnabled", "Service charge on (y/n)", "yes" if settings.service_charge_enabled else "no"),
    ]


def parse_settings_form(values: dict[str, str]) -> dict[str, Any]:
    """Return the camelCase changes to merge into the stored settings."""
    currency = _required(values["currency"], "Currency").upper()
    if currency not in SUPPORTED_CURRENCIES:
        raise FormError(f"Currency must be one of {', '.join(SUPPORTED_CURRENCIES)}.")
    return {
        "restaurantName": _required(values["restaurantName"], "Restaurant"),
        "currency": currency,
        "taxRate": _rate(values["taxRate"], "Tax rate"),
        "serviceCharge": _rate(values["serviceCharge"], "Service charge"),
        "serviceChargeEnabled": _flag(values["serviceChargeEnabled"], "Service charge on"),
    }


# -- menu ----------------------------------------------------------------


def menu_item_fields(item: MenuItem | None, default_category: str = "") -> list[FormField]:
    if item is None:
        return [
            FormField("name", "Name"),
            FormField("price", "Price"),
            FormField("category", "Category", default_category),
            FormField("description", "Description"),
        ]
    return [
        FormField("name", "Name", item.name),
        FormField("price", "Price", _number_text(item.price)),
        FormField("category", "Category", item.category),
        FormField("description", "Description", item.description),
    ]


def parse_menu_item_form(values: dict[str, str], categories: Iterable[str]) -> dict[str, Any]:
    """Return ``name``, ``price``, ``category`` and ``description`` keyword values.

    The category must already exist; it is matched case-insensitively and
    returned with its stored spelling.
    """
    price = _number(values["price"], "Price")
    if price < 0:
        raise FormError("Price cannot be negative.")
    wanted = _required(values["category"], "Category")
    category = next((name for name in categories if name.lower() == wanted.lower()), None)
    if category is None:
        raise FormError(f"Unknown category {wanted!r}. Add it first.")
    return {
        "name": _required(values["name"], "Name"),
        "price": price,
        "category": category,
        "description": values.get("description", "").strip(),
    }


CATEGORY_FIELDS = (FormField("name", "Category"),)


def parse_category_form(values: dict[str, str]) -> str:
    return _required(values["name"], "Category")


# -- tables --------------------------------------------------------------


def table_fields(table: Table) -> list[FormField]:
    return [
        FormField("number", "Number", str(table.number)),
        FormField("seats", "Seats", str(table.seats)),
        FormField("status", "Status", table.status.value),
        FormField("customer", "Customer", table.customer or ""),
    ]


def parse_table_form(values: dict[str, str]) -> dict[str, Any]:
    """Return keyword arguments for ``TableStateMachine.manage``."""
    status_text = values["status"].strip().lower()
    try:
        status = TableStatus(status_text)
    except ValueError:
        choices = ", ".join(option.value for option in TableStatus)
        raise FormError(f"Status must be one of {choices}.") from None
    return {
        "number": _positive_int(values["number"], "Number"),
        "seats": _positive_int(values["seats"], "Seats"),
        "status": status,
        "customer": values.get("customer", "").strip() or None,
    }


# -- backup --------------------------------------------------------------

IMPORT_FIELDS = (FormField("path", "Backup file"),)


def parse_import_form(values: dict[str, str]) -> str:
    return _required(values["path"], "Backup file")
