import pytest

from tablepos.permissions import (
    ACTION_PERMISSIONS,
    BUILTIN_ROLES,
    Action,
    Permission,
    PermissionDenied,
    SIGNED_OUT,
    Role,
    User,
    authenticate,
    is_allowed,
    parse_permissions,
    require,
    session_for_role,
    visible_sections,
)


@pytest.fixture
def users():
    return [
        User(id="u1", name="Mya", email="mya@example.com", role_id="cashier", password="secret"),
        User(id="u2", name="Ko Ko", email="koko@example.com", role_id="waiter", password="pw", is_active=False),
        User(id="u3", name="Thida", email="thida@example.com", role_id="gone", password="pw"),
    ]


class TestAuthorization:
    def test_every_action_has_a_permission(self):
        assert set(ACTION_PERMISSIONS) == set(Action)

    def test_admin_may_do_everything(self):
        admin = session_for_role(BUILTIN_ROLES, "Admin")

        assert all(is_allowed(admin.permissions, action) for action in Action)

    def test_waiter_cannot_complete_or_cancel(self):
        waiter = session_for_role(BUILTIN_ROLES, "waiter")

        assert is_allowed(waiter.permissions, Action.OCCUPY)
        assert not is_allowed(waiter.permissions, Action.COMPLETE_ORDER)
        assert not is_allowed(waiter.permissions, Action.CANCEL_ORDER)

    def test_cashier_cannot_manage_tables_or_clear_history(self):
        cashier = session_for_role(BUILTIN_ROLES, "Cashier")

        assert is_allowed(cashier.permissions, Action.VIEW_REPORTS)
        assert not is_allowed(cashier.permissions, Action.ADD_TABLE)
        assert not is_allowed(cashier.permissions, Action.CLEAR_HISTORY)

    def test_require_raises_permission_denied(self):
        with pytest.raises(PermissionDenied, match="Not permitted: delete table") as excinfo:
            require(frozenset({Permission.POS_VIEW}), Action.DELETE_TABLE)

        assert excinfo.value.action is Action.DELETE_TABLE

    def test_unknown_role_gets_no_permissions(self):
        session = session_for_role(BUILTIN_ROLES, "Janitor")

        assert session.role_name == "Janitor"
        assert session.permissions == frozenset()

    def test_unknown_permission_strings_are_dropped(self):
        assert parse_permissions(["pos_view", "fly_drone"]) == frozenset({Permission.POS_VIEW})


class TestAuthenticate:
    def test_builtin_admin(self, users):
        session = authenticate(users, BUILTIN_ROLES, "admin", "admin")

        assert session.user_name == "Admin User"
        assert session.role_name == "Admin"
        assert Permission.USERS_MANAGE in session.permissions

    def test_user_by_email_case_insensitive(self, users):
        session = authenticate(users, BUILTIN_ROLES, "MYA@example.com", "secret")

        assert session.user_name == "Mya"
        assert session.role_name == "Cashier"

    def test_wrong_password(self, users):
        assert authenticate(users, BUILTIN_ROLES, "mya", "nope") is None

    def test_inactive_user(self, users):
        assert authenticate(users, BUILTIN_ROLES, "Ko Ko", "pw") is None

    def test_unknown_login(self, users):
        assert authenticate(users, BUILTIN_ROLES, "nobody", "pw") is None

    def test_user_with_missing_role(self, users):
        session = authenticate(users, BUILTIN_ROLES, "thida", "pw")

        assert session.role_name == "Unknown Role"
        assert session.permissions == frozenset()

    def test_empty_role_list_falls_back_to_builtin(self, users):
        assert authenticate(users, [], "mya", "secret").role_name == "Cashier"


class TestVisibleSections:
    def test_admin_sees_everything(self):
        admin = next(role for role in BUILTIN_ROLES if role.name == "Admin")

        assert visible_sections(admin.permissions) == ["pos", "reports", "manage", "settings"]

    def test_waiter_sees_pos_and_settings(self):
        waiter = next(role for role in BUILTIN_ROLES if role.name == "Waiter")

        assert visible_sections(waiter.permissions) == ["pos", "settings"]

    def test_menu_view_unlocks_manage(self):
        role = Role(id="r", name="Menu", permissions=frozenset({Permission.MENU_VIEW}))

        assert visible_sections(role.permissions) == ["pos", "manage", "settings"]


class TestSignedOut:
    def test_signed_out_session_is_refused_everything(self):
        assert not any(is_allowed(SIGNED_OUT.permissions, action) for action in Action)
        assert visible_sections(SIGNED_OUT.permissions) == ["pos", "settings"]

    def test_only_admin_may_edit_settings_and_menu(self):
        cashier = session_for_role(BUILTIN_ROLES, "Cashier")
        admin = session_for_role(BUILTIN_ROLES, "Admin")

        for action in (Action.EDIT_SETTINGS, Action.MANAGE_MENU, Action.BACKUP_DATA, Action.VIEW_MENU):
            assert is_allowed(admin.permissions, action)
            assert not is_allowed(cashier.permissions, action)
