"""Collection-level access to the POS data kept in a key-value store."""

from __future__ import annotations

import json
import logging
import sqlite3
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Callable, TypeVar
from uuid import uuid4

from tablepos.constant import (
    BACKUP_VERSION,
    DEFAULT_CATEGORIES,
    DEFAULT_MENU_ITEMS,
    DEFAULT_ROLES,
    DEFAULT_SETTINGS,
    DEFAULT_TABLES,
    REQUIRED_BACKUP_COLLECTIONS,
    STORAGE_KEYS,
)
from tablepos.models import MenuItem, OrderHistoryRecord, Settings, Table
from tablepos.permissions import Role, User
from tablepos.persistence import KeyValueStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Faults that make one collection unreadable without affecting the others.
_READ_FAULTS = (sqlite3.Error, ValueError, TypeError, KeyError, AttributeError)


class PersistenceError(RuntimeError):
    """A collection could not be written."""


class InvalidBackup(ValueError):
    """An import payload is missing one of the core collections."""


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class PosDatabase:
    """Typed read/modify/write access to each stored collection."""

    def __init__(self, store: KeyValueStore, seed: bool = True) -> None:
        self.store = store
        if seed:
            self.insert_default_data()

    # -- low level ---------------------------------------------------------

    def _load(self, name: str, default: Any) -> Any:
        key = STORAGE_KEYS[name]
        try:
            value = self.store.load(key)
        except _READ_FAULTS as exc:
            logger.error("Could not read %s (%s): %s", name, key, exc)
            return default
        return default if value is None else value

    def _load_records(self, name: str, parse: Callable[[dict[str, Any]], T]) -> list[T]:
        raw = self._load(name, [])
        try:
            return [parse(entry) for entry in raw]
        except _READ_FAULTS as exc:
            logger.error("Discarding malformed %s collection: %s", name, exc)
            return []

    def _save(self, name: str, value: Any) -> None:
        key = STORAGE_KEYS[name]
        try:
            self.store.save(key, value)
        except sqlite3.Error as exc:
            logger.error("Could not write %s (%s): %s", name, key, exc)
            raise PersistenceError(f"Could not save {name}: {exc}") from exc

    def insert_default_data(self) -> None:
        """Seed every collection that has never been written."""
        defaults: dict[str, Any] = {
            "settings": DEFAULT_SETTINGS,
            "categories": DEFAULT_CATEGORIES,
            "tables": DEFAULT_TABLES,
            "menuItems": DEFAULT_MENU_ITEMS,
            "orderHistory": [],
            "roles": DEFAULT_ROLES,
            "users": [],
        }
        for name, value in defaults.items():
            try:
                missing = self.store.load(STORAGE_KEYS[name]) is None
            except _READ_FAULTS as exc:
                # Leave a corrupt collection in place; reads fall back to defaults.
                logger.error("Skipping seed of unreadable %s: %s", name, exc)
                continue
            if missing:
                self._save(name, value)

    # -- settings ----------------------------------------------------------

    def get_settings(self) -> Settings | None:
        raw = self._load("settings", None)
        if raw is None:
            return None
        try:
            return Settings.from_dict(raw)
        except _READ_FAULTS as exc:
            logger.error("Discarding malformed settings: %s", exc)
            return None

    def update_settings(self, changes: dict[str, Any]) -> Settings:
        """Merge camelCase ``changes`` over the stored settings."""
        current = self.get_settings()
        merged = (current.to_dict() if current is not None else dict(DEFAULT_SETTINGS)) | changes
        self._save("settings", merged)
        return Settings.from_dict(merged)

    # -- tables ------------------------------------------------------------

    def get_tables(self) -> list[Table]:
        return self._load_records("tables", Table.from_dict)

    def save_tables(self, tables: list[Table]) -> None:
        self._save("tables", [table.to_dict() for table in tables])

    # -- menu --------------------------------------------------------------

    def get_menu_items(self) -> list[MenuItem]:
        return self._load_records("menuItems", MenuItem.from_dict)

    def add_menu_item(
        self,
        name: str,
        price: float,
        category: str,
        description: str = "",
        image: str | None = None,
    ) -> MenuItem:
        item = MenuItem(id=uuid4().hex, name=name, price=price, category=category, description=description, image=image)
        items = self.get_menu_items()
        items.append(item)
        self._save("menuItems", [entry.to_dict() for entry in items])
        return item

    def update_menu_item(self, item: MenuItem) -> bool:
        items = self.get_menu_items()
        for idx, entry in enumerate(items):
            if entry.id == item.id:
                items[idx] = item
                self._save("menuItems", [entry.to_dict() for entry in items])
                return True
        return False

    def delete_menu_item(self, item_id: str) -> None:
        items = [entry for entry in self.get_menu_items() if entry.id != item_id]
        self._save("menuItems", [entry.to_dict() for entry in items])

    def get_categories(self) -> list[str]:
        raw = self._load("categories", [])
        if not isinstance(raw, list):
            logger.error("Discarding malformed categories collection")
            return []
        return [str(name) for name in raw]

    def add_category(self, name: str) -> None:
        """Add a category; the list stays unique and sorted."""
        categories = self.get_categories()
        if name in categories:
            return
        categories.append(name)
        categories.sort()
        self._save("categories", categories)

    def delete_category(self, name: str) -> None:
        self._save("categories", [category for category in self.get_categories() if category != name])

    # -- order history -----------------------------------------------------

    @staticmethod
    def _parse_history(entry: dict[str, Any]) -> OrderHistoryRecord:
        items = entry.get("items")
        if isinstance(items, str):
            entry = {**entry, "items": json.loads(items)}
        return OrderHistoryRecord.from_dict(entry)

    def get_order_history(self) -> list[OrderHistoryRecord]:
        """Completed orders, newest first."""
        return self._load_records("orderHistory", self._parse_history)

    def add_order_history(self, record: OrderHistoryRecord) -> OrderHistoryRecord:
        stored = replace(record, created_at=record.created_at or _utc_now_iso())
        document = stored.to_dict()
        document["items"] = json.dumps(document["items"])
        history = self._load("orderHistory", [])
        self._save("orderHistory", [document, *history])
        return stored

    def clear_order_history(self) -> None:
        self._save("orderHistory", [])

    # -- users and roles ---------------------------------------------------

    def get_roles(self) -> list[Role]:
        return self._load_records("roles", Role.from_dict)

    def save_roles(self, roles: list[Role]) -> None:
        self._save("roles", [role.to_dict() for role in roles])

    def get_users(self) -> list[User]:
        return self._load_records("users", User.from_dict)

    def save_users(self, users: list[User]) -> None:
        self._save("users", [user.to_dict() for user in users])

    # -- backup ------------------------------------------------------------

    def export_database(self) -> dict[str, Any]:
        """Bundle every collection into one JSON-serialisable document."""
        payload: dict[str, Any] = {
            "settings": self._load("settings", None),
            "tables": self._load("tables", []),
            "menuItems": self._load("menuItems", []),
            "categories": self._load("categories", []),
            "orderHistory": self._load("orderHistory", []),
            "users": self._load("users", []),
            "roles": self._load("roles", []),
        }
        payload["exportDate"] = _utc_now_iso()
        payload["version"] = BACKUP_VERSION
        return payload

    def import_database(self, payload: dict[str, Any]) -> None:
        """Replace stored collections with the ones in ``payload``.

        Every collection is validated before anything is written, so a bad
        backup leaves the current data untouched.
        """
        missing = [name for name in REQUIRED_BACKUP_COLLECTIONS if payload.get(name) is None]
        if missing:
            raise InvalidBackup(f"Backup is missing: {', '.join(missing)}")

        parsers: dict[str, Callable[[dict[str, Any]], Any]] = {
            "tables": Table.from_dict,
            "menuItems": MenuItem.from_dict,
            "orderHistory": self._parse_history,
            "users": User.from_dict,
            "roles": Role.from_dict,
        }
        try:
            Settings.from_dict(payload["settings"])
            for name, parse in parsers.items():
                for entry in payload.get(name) or []:
                    parse(entry)
        except _READ_FAULTS as exc:
            raise InvalidBackup(f"Backup contains malformed records: {exc}") from exc

        for name in STORAGE_KEYS:
            if name in payload:
                self._save(name, payload[name])
        logger.info("Imported backup exported at %s", payload.get("exportDate"))
