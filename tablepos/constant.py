"""Editable seed data and storage keys."""

from __future__ import annotations

STORAGE_KEYS: dict[str, str] = {
    "settings": "restaurant_pos_settings",
    "tables": "restaurant_pos_tables",
    "menuItems": "restaurant_pos_menu_items",
    "categories": "restaurant_pos_categories",
    "orderHistory": "restaurant_pos_order_history",
    "users": "restaurant_pos_users",
    "roles": "restaurant_pos_roles",
}

# Collections an imported backup must carry to be accepted.
REQUIRED_BACKUP_COLLECTIONS: tuple[str, ...] = ("settings", "tables", "menuItems", "categories")

BACKUP_VERSION = "1.0"

WALK_IN_CUSTOMER = "Walk-in Customer"

DEFAULT_TABLE_SEATS = 4

DEFAULT_SETTINGS: dict[str, object] = {
    "id": 1,
    "restaurantName": "Restaurant POS",
    "description": "Professional Point of Sale System",
    "currency": "MMK",
    "taxRate": 5,
    "serviceCharge": 0,
    "serviceChargeEnabled": False,
    "theme": "light",
    "language": "en",
}

DEFAULT_CATEGORIES: list[str] = ["Appetizers", "Beverage", "Dessert", "Main Course", "Pasta", "Pizza"]

DEFAULT_TABLES: list[dict[str, object]] = [
    {"id": "1", "number": 1, "seats": 2, "status": "available"},
    {"id": "2", "number": 2, "seats": 4, "status": "available"},
    {"id": "3", "number": 3, "seats": 6, "status": "available"},
    {"id": "4", "number": 4, "seats": 2, "status": "available"},
    {"id": "5", "number": 5, "seats": 4, "status": "available"},
    {"id": "6", "number": 6, "seats": 8, "status": "available"},
    {"id": "7", "number": 7, "seats": 2, "status": "available"},
    {"id": "8", "number": 8, "seats": 4, "status": "available"},
]

DEFAULT_MENU_ITEMS: list[dict[str, object]] = [
    {"id": "1", "name": "Mohinga", "price": 2500, "category": "Appetizers", "description": "Traditional fish noodle soup"},
    {"id": "2", "name": "Samosa Thoke", "price": 2000, "category": "Appetizers", "description": "Samosa salad with chickpeas"},
    {"id": "3", "name": "Shan Noodles", "price": 3500, "category": "Main Course", "description": "Traditional Shan style noodles"},
    {"id": "4", "name": "Tea Leaf Salad", "price": 2800, "category": "Appetizers", "description": "Traditional Myanmar tea leaf salad"},
    {"id": "5", "name": "Coconut Rice", "price": 1500, "category": "Main Course", "description": "Fragrant coconut rice with curry"},
    {"id": "6", "name": "Myanmar Beer", "price": 1200, "category": "Beverage", "description": "Local Myanmar beer"},
]

# Permission values per built-in role; see tablepos.permissions.Permission.
DEFAULT_ROLES: list[dict[str, object]] = [
    {
        "id": "admin",
        "name": "Admin",
        "permissions": [
            "pos_view",
            "pos_create_order",
            "pos_complete_order",
            "pos_cancel_order",
            "table_manage",
            "menu_view",
            "menu_manage",
            "reports_view",
            "reports_export",
            "settings_manage",
            "users_manage",
        ],
    },
    {
        "id": "cashier",
        "name": "Cashier",
        "permissions": ["pos_view", "pos_create_order", "pos_complete_order", "pos_cancel_order", "reports_view"],
    },
    {
        "id": "waiter",
        "name": "Waiter",
        "permissions": ["pos_view", "pos_create_order"],
    },
]

DEFAULT_ADMIN_LOGINS: tuple[str, ...] = ("admin", "admin@restaurant.com")
DEFAULT_ADMIN_PASSWORD = "admin"

SUPPORTED_CURRENCIES: tuple[str, ...] = ("MMK", "USD", "EUR", "GBP")
