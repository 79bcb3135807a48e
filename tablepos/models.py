"""Domain models for tablepos.

Every model converts to and from the camelCase JSON documents kept in the
key-value store, so a backup written by one install can be read by another.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from tablepos.constant import DEFAULT_SETTINGS


class TableStatus(str, enum.Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    RESERVED = "reserved"


def _parse_timestamp(value: Any) -> datetime | None:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


@dataclass
class MenuItem:
    """A priced dish or drink the operator can add to an order."""

    id: str
    name: str
    price: float
    category: str
    description: str = ""
    image: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "category": self.category,
            "description": self.description,
        }
        if self.image is not None:
            data["image"] = self.image
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MenuItem:
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            price=data["price"],
            category=str(data.get("category", "")),
            description=str(data.get("description") or ""),
            image=data.get("image"),
        )


@dataclass
class OrderLineItem:
    """One menu item and its quantity inside a table's order.

    The line holds the menu item itself, not a copy of its price, so bills
    always use the price currently on the menu.
    """

    id: str
    menu_item: MenuItem
    quantity: int = 1

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "menuItem": self.menu_item.to_dict(), "quantity": self.quantity}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OrderLineItem:
        return cls(
            id=str(data["id"]),
            menu_item=MenuItem.from_dict(data["menuItem"]),
            quantity=int(data["quantity"]),
        )


@dataclass
class Table:
    """A physical table and whatever order is currently attached to it."""

    id: str
    number: int
    seats: int
    status: TableStatus = TableStatus.AVAILABLE
    customer: str | None = None
    order_id: str | None = None
    order_items: list[OrderLineItem] | None = None
    order_total: float | None = None
    reservation_time: datetime | None = None

    @property
    def has_order_items(self) -> bool:
        return bool(self.order_items)

    def clear_order(self) -> None:
        """Return the table to Available and drop every order field."""
        self.status = TableStatus.AVAILABLE
        self.customer = None
        self.order_id = None
        self.order_items = None
        self.order_total = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "number": self.number,
            "seats": self.seats,
            "status": self.status.value,
        }
        if self.customer is not None:
            data["customer"] = self.customer
        if self.order_id is not None:
            data["orderId"] = self.order_id
        if self.order_items is not None:
            data["orderItems"] = [item.to_dict() for item in self.order_items]
        if self.order_total is not None:
            data["orderTotal"] = self.order_total
        if self.reservation_time is not None:
            data["reservationTime"] = self.reservation_time.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Table:
        raw_items = data.get("orderItems")
        return cls(
            id=str(data["id"]),
            number=int(data["number"]),
            seats=int(data["seats"]),
            status=TableStatus(data.get("status", TableStatus.AVAILABLE.value)),
            customer=data.get("customer") or None,
            order_id=data.get("orderId") or None,
            order_items=[OrderLineItem.from_dict(item) for item in raw_items] if raw_items is not None else None,
            order_total=data.get("orderTotal"),
            reservation_time=_parse_timestamp(data.get("reservationTime")),
        )


@dataclass(frozen=True)
class HistoryItem:
    """A by-value copy of an order line taken when the order completed."""

    id: str
    name: str
    price: float
    quantity: int

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "price": self.price, "quantity": self.quantity}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HistoryItem:
        return cls(id=str(data["id"]), name=str(data["name"]), price=data["price"], quantity=int(data["quantity"]))


@dataclass(frozen=True)
class OrderHistoryRecord:
    """Completed order, immutable once written."""

    id: str
    table_number: int
    customer_name: str
    order_date: str
    status: str
    total: float
    items: tuple[HistoryItem, ...] = ()
    created_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "tableNumber": self.table_number,
            "customerName": self.customer_name,
            "orderDate": self.order_date,
            "status": self.status,
            "total": self.total,
            "items": [item.to_dict() for item in self.items],
        }
        if self.created_at is not None:
            data["createdAt"] = self.created_at
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OrderHistoryRecord:
        return cls(
            id=str(data["id"]),
            table_number=int(data["tableNumber"]),
            customer_name=str(data["customerName"]),
            order_date=str(data["orderDate"]),
            status=str(data["status"]),
            total=data["total"],
            items=tuple(HistoryItem.from_dict(item) for item in data.get("items") or []),
            created_at=data.get("createdAt"),
        )


@dataclass
class Settings:
    """Restaurant-wide settings. Rates are percentages."""

    restaurant_name: str = str(DEFAULT_SETTINGS["restaurantName"])
    currency: str = str(DEFAULT_SETTINGS["currency"])
    tax_rate: float = DEFAULT_SETTINGS["taxRate"]  # type: ignore[assignment]
    service_charge: float = DEFAULT_SETTINGS["serviceCharge"]  # type: ignore[assignment]
    service_charge_enabled: bool = bool(DEFAULT_SETTINGS["serviceChargeEnabled"])
    theme: str = str(DEFAULT_SETTINGS["theme"])
    language: str = str(DEFAULT_SETTINGS["language"])
    description: str | None = None
    logo: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    _KEYS = {
        "restaurantName": "restaurant_name",
        "currency": "currency",
        "taxRate": "tax_rate",
        "serviceCharge": "service_charge",
        "serviceChargeEnabled": "service_charge_enabled",
        "theme": "theme",
        "language": "language",
        "description": "description",
        "logo": "logo",
    }

    def to_dict(self) -> dict[str, Any]:
        data = dict(self.extra)
        for key, attr in self._KEYS.items():
            value = getattr(self, attr)
            if value is not None:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Settings:
        known = {attr: data[key] for key, attr in cls._KEYS.items() if key in data}
        extra = {key: value for key, value in data.items() if key not in cls._KEYS}
        return cls(**known, extra=extra)
