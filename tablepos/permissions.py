"""Roles, permissions and the authorization check wrapped around actions."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Iterable

from tablepos.constant import DEFAULT_ADMIN_LOGINS, DEFAULT_ADMIN_PASSWORD, DEFAULT_ROLES


class Permission(str, enum.Enum):
    POS_VIEW = "pos_view"
    POS_CREATE_ORDER = "pos_create_order"
    POS_COMPLETE_ORDER = "pos_complete_order"
    POS_CANCEL_ORDER = "pos_cancel_order"
    TABLE_MANAGE = "table_manage"
    MENU_VIEW = "menu_view"
    MENU_MANAGE = "menu_manage"
    REPORTS_VIEW = "reports_view"
    REPORTS_EXPORT = "reports_export"
    SETTINGS_MANAGE = "settings_manage"
    USERS_MANAGE = "users_manage"


class Action(str, enum.Enum):
    OCCUPY = "occupy"
    RESERVE = "reserve"
    START_ORDER = "start_order"
    SAVE_ORDER = "save_order"
    COMPLETE_ORDER = "complete_order"
    CANCEL_ORDER = "cancel_order"
    FREE = "free"
    MANAGE_TABLE = "manage_table"
    ADD_TABLE = "add_table"
    DELETE_TABLE = "delete_table"
    PRINT_RECEIPT = "print_receipt"
    VIEW_REPORTS = "view_reports"
    CLEAR_HISTORY = "clear_history"
    VIEW_MENU = "view_menu"
    MANAGE_MENU = "manage_menu"
    EDIT_SETTINGS = "edit_settings"
    BACKUP_DATA = "backup_data"


ACTION_PERMISSIONS: dict[Action, Permission] = {
    Action.OCCUPY: Permission.POS_CREATE_ORDER,
    Action.RESERVE: Permission.POS_CREATE_ORDER,
    Action.START_ORDER: Permission.POS_CREATE_ORDER,
    Action.SAVE_ORDER: Permission.POS_CREATE_ORDER,
    Action.COMPLETE_ORDER: Permission.POS_COMPLETE_ORDER,
    Action.CANCEL_ORDER: Permission.POS_CANCEL_ORDER,
    Action.FREE: Permission.POS_CREATE_ORDER,
    Action.MANAGE_TABLE: Permission.TABLE_MANAGE,
    Action.ADD_TABLE: Permission.TABLE_MANAGE,
    Action.DELETE_TABLE: Permission.TABLE_MANAGE,
    Action.PRINT_RECEIPT: Permission.POS_VIEW,
    Action.VIEW_REPORTS: Permission.REPORTS_VIEW,
    Action.CLEAR_HISTORY: Permission.REPORTS_EXPORT,
    Action.VIEW_MENU: Permission.MENU_VIEW,
    Action.MANAGE_MENU: Permission.MENU_MANAGE,
    Action.EDIT_SETTINGS: Permission.SETTINGS_MANAGE,
    Action.BACKUP_DATA: Permission.SETTINGS_MANAGE,
}


class PermissionDenied(Exception):
    def __init__(self, action: Action) -> None:
        self.action = action
        super().__init__(f"Not permitted: {action.value.replace('_', ' ')}")


def parse_permissions(values: Iterable[str]) -> frozenset[Permission]:
    """Convert stored permission strings, dropping ones this build does not know."""
    known = {permission.value for permission in Permission}
    return frozenset(Permission(value) for value in values if value in known)


@dataclass(frozen=True)
class Role:
    id: str
    name: str
    permissions: frozenset[Permission] = frozenset()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "permissions": sorted(permission.value for permission in self.permissions),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Role:
        return cls(id=str(data["id"]), name=str(data["name"]), permissions=parse_permissions(data.get("permissions", [])))


@dataclass(frozen=True)
class User:
    id: str
    name: str
    email: str
    role_id: str
    password: str
    is_active: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "roleId": self.role_id,
            "password": self.password,
            "isActive": self.is_active,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> User:
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            email=str(data.get("email", "")),
            role_id=str(data["roleId"]),
            password=str(data["password"]),
            is_active=bool(data.get("isActive", True)),
        )


@dataclass(frozen=True)
class Session:
    """The signed-in operator and what they may do."""

    user_name: str
    role_name: str
    permissions: frozenset[Permission] = field(default_factory=frozenset)


BUILTIN_ROLES: tuple[Role, ...] = tuple(Role.from_dict(role) for role in DEFAULT_ROLES)

# Nobody is signed in; every action is refused.
SIGNED_OUT = Session(user_name="", role_name="")


def is_allowed(permissions: Iterable[Permission], action: Action) -> bool:
    return ACTION_PERMISSIONS[action] in set(permissions)


def require(permissions: Iterable[Permission], action: Action) -> None:
    """Raise PermissionDenied unless ``permissions`` cover ``action``."""
    if not is_allowed(permissions, action):
        raise PermissionDenied(action)


def role_by_name(roles: Iterable[Role], name: str) -> Role | None:
    lowered = name.lower()
    for role in roles:
        if role.name.lower() == lowered:
            return role
    return None


def session_for_role(roles: Iterable[Role], role_name: str, user_name: str = "Operator") -> Session:
    """Build a session for a role name; an unknown role gets no permissions."""
    role = role_by_name(roles, role_name)
    if role is None:
        return Session(user_name=user_name, role_name=role_name)
    return Session(user_name=user_name, role_name=role.name, permissions=role.permissions)


def authenticate(users: Iterable[User], roles: Iterable[Role], login: str, password: str) -> Session | None:
    """Check credentials against the built-in admin and the stored users.

    Users match by name or email, case-insensitively. Inactive users are
    refused.
    """
    roles = list(roles) or list(BUILTIN_ROLES)
    if login in DEFAULT_ADMIN_LOGINS and password == DEFAULT_ADMIN_PASSWORD:
        return session_for_role(roles, "Admin", user_name="Admin User")

    lowered = login.lower()
    for user in users:
        if lowered not in {user.name.lower(), user.email.lower()}:
            continue
        if user.password != password or not user.is_active:
            return None
        role = next((role for role in roles if role.id == user.role_id), None)
        if role is None:
            return Session(user_name=user.name, role_name="Unknown Role")
        return Session(user_name=user.name, role_name=role.name, permissions=role.permissions)
    return None


def visible_sections(permissions: Iterable[Permission]) -> list[str]:
    """Navigation sections an operator can open."""
    granted = set(permissions)
    sections = ["pos"]
    if Permission.REPORTS_VIEW in granted:
        sections.append("reports")
    if Permission.MENU_VIEW in granted:
        sections.append("manage")
    sections.append("settings")
    return sections
