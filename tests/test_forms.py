import pytest

from tablepos.forms import (
    FormError,
    menu_item_fields,
    parse_category_form,
    parse_import_form,
    parse_menu_item_form,
    parse_settings_form,
    parse_table_form,
    settings_fields,
    table_fields,
)
from tablepos.models import MenuItem, Settings, Table, TableStatus

CATEGORIES = ["Appetizers", "Beverage", "Main Course"]


def _values(fields, **overrides):
    values = {field.key: field.value for field in fields}
    values.update(overrides)
    return values


class TestSettingsForm:
    def test_prefilled_fields_parse_back_to_the_same_settings(self):
        settings = Settings(tax_rate=8.5, service_charge=10, service_charge_enabled=True)

        changes = parse_settings_form(_values(settings_fields(settings)))

        assert changes == {
            "restaurantName": "Restaurant POS",
            "currency": "MMK",
            "taxRate": 8.5,
            "serviceCharge": 10,
            "serviceChargeEnabled": True,
        }

    def test_changes_merge_into_stored_settings(self, database):
        values = _values(settings_fields(database.get_settings()), taxRate="7", serviceChargeEnabled="y")

        database.update_settings(parse_settings_form(values))

        settings = database.get_settings()
        assert settings.tax_rate == 7
        assert settings.service_charge_enabled is True

    def test_currency_is_normalised(self):
        values = _values(settings_fields(Settings()), currency=" usd ")

        assert parse_settings_form(values)["currency"] == "USD"

    @pytest.mark.parametrize(
        "field,text,message",
        [
            ("taxRate", "abc", "Tax rate must be a number"),
            ("taxRate", "120", "between 0 and 100"),
            ("serviceCharge", "-1", "between 0 and 100"),
            ("taxRate", "nan", "must be a number"),
            ("serviceChargeEnabled", "maybe", "yes or no"),
            ("currency", "JPY", "Currency must be one of"),
            ("restaurantName", "  ", "Restaurant is required"),
        ],
    )
    def test_invalid_values(self, field, text, message):
        values = _values(settings_fields(Settings()), **{field: text})

        with pytest.raises(FormError, match=message):
            parse_settings_form(values)


class TestMenuItemForm:
    def test_new_item(self):
        values = _values(menu_item_fields(None, "Beverage"), name=" Lime Juice ", price="900")

        assert parse_menu_item_form(values, CATEGORIES) == {
            "name": "Lime Juice",
            "price": 900,
            "category": "Beverage",
            "description": "",
        }

    def test_edit_prefills_current_values(self):
        item = MenuItem(id="1", name="Mohinga", price=2500.5, category="Appetizers", description="Soup")

        values = _values(menu_item_fields(item))

        assert values == {"name": "Mohinga", "price": "2500.5", "category": "Appetizers", "description": "Soup"}

    def test_category_matches_case_insensitively(self):
        values = _values(menu_item_fields(None), name="Tea", price="500", category="beverage")

        assert parse_menu_item_form(values, CATEGORIES)["category"] == "Beverage"

    def test_unknown_category(self):
        values = _values(menu_item_fields(None), name="Tea", price="500", category="Drinks")

        with pytest.raises(FormError, match="Add it first"):
            parse_menu_item_form(values, CATEGORIES)

    @pytest.mark.parametrize("price", ["", "free", "-5", "inf"])
    def test_bad_price(self, price):
        values = _values(menu_item_fields(None, "Beverage"), name="Tea", price=price)

        with pytest.raises(FormError):
            parse_menu_item_form(values, CATEGORIES)

    def test_added_item_reaches_the_menu(self, database):
        values = _values(menu_item_fields(None, "Dessert"), name="Falooda", price="1800")

        item = database.add_menu_item(**parse_menu_item_form(values, database.get_categories()))

        assert item in database.get_menu_items()


class TestTableForm:
    def test_parses_into_manage_arguments(self, machine):
        values = _values(table_fields(machine.get("2")), number="12", status="Reserved", customer=" Dan ")

        table = machine.manage("2", **parse_table_form(values))

        assert table.number == 12
        assert table.status is TableStatus.RESERVED
        assert table.customer == "Dan"

    def test_blank_customer_becomes_none(self):
        values = _values(table_fields(Table(id="1", number=1, seats=2)))

        assert parse_table_form(values)["customer"] is None

    @pytest.mark.parametrize(
        "field,text,message",
        [
            ("number", "two", "whole number"),
            ("seats", "0", "must be positive"),
            ("status", "closed", "Status must be one of"),
        ],
    )
    def test_invalid_values(self, field, text, message):
        values = _values(table_fields(Table(id="1", number=1, seats=2)), **{field: text})

        with pytest.raises(FormError, match=message):
            parse_table_form(values)


class TestSingleFieldForms:
    def test_category_is_required(self):
        with pytest.raises(FormError):
            parse_category_form({"name": " "})

        assert parse_category_form({"name": " Noodles "}) == "Noodles"

    def test_import_path_is_required(self):
        with pytest.raises(FormError):
            parse_import_form({"path": ""})


class TestNumberDisplay:
    def test_large_prices_are_not_shown_in_exponent_form(self):
        item = MenuItem(id="1", name="Banquet", price=1250000, category="Main Course")

        assert _values(menu_item_fields(item))["price"] == "1250000"
