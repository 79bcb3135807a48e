import pytest

from tablepos.billing import (
    FALLBACK_SERVICE_CHARGE_RATE,
    FALLBACK_TAX_RATE,
    ChargeRates,
    calculate_bill,
    service_charge,
    subtotal,
    tax,
    total,
)
from tablepos.ledger import OrderLedger
from tablepos.models import MenuItem, Settings

NO_SERVICE = ChargeRates(tax_rate=8.5, service_charge_rate=10, service_charge_enabled=False)
WITH_SERVICE = ChargeRates(tax_rate=8.5, service_charge_rate=10, service_charge_enabled=True)


def _ledger(*entries):
    ledger = OrderLedger()
    for item, quantity in entries:
        for _ in range(quantity):
            ledger.add_item(item)
    return ledger


class TestCalculateBill:
    def test_empty_order_is_all_zero(self):
        bill = calculate_bill([], WITH_SERVICE)

        assert bill.subtotal == 0
        assert bill.service_charge == 0
        assert bill.tax == 0
        assert bill.total == 0

    def test_two_of_one_item_without_service_charge(self, mohinga):
        bill = calculate_bill(_ledger((mohinga, 2)), NO_SERVICE)

        assert bill.subtotal == 5000
        assert bill.service_charge == 0
        assert bill.tax == 425
        assert bill.total == 5425

    def test_service_charge_added_when_enabled(self, mohinga):
        bill = calculate_bill(_ledger((mohinga, 2)), WITH_SERVICE)

        assert bill.service_charge == 500
        assert bill.tax == 425
        assert bill.total == 5925

    def test_tax_applies_regardless_of_service_toggle(self, mohinga):
        ledger = _ledger((mohinga, 1))

        assert tax(ledger, NO_SERVICE) == tax(ledger, WITH_SERVICE) == 212.5

    @pytest.mark.parametrize(
        "rates",
        [
            NO_SERVICE,
            WITH_SERVICE,
            ChargeRates(tax_rate=0, service_charge_rate=12.5, service_charge_enabled=True),
            ChargeRates(tax_rate=7.25, service_charge_rate=0, service_charge_enabled=True),
        ],
    )
    def test_total_matches_component_sum(self, rates, mohinga, beer):
        ledger = _ledger((mohinga, 3), (beer, 2))
        base = subtotal(ledger)
        expected_charge = base * rates.service_charge_rate / 100 if rates.service_charge_enabled else 0
        expected = base + expected_charge + base * rates.tax_rate / 100

        assert total(ledger, rates) == expected
        assert service_charge(ledger, rates) == expected_charge

    def test_values_are_not_rounded(self):
        item = MenuItem(id="x", name="Tea", price=333, category="Beverage")
        rates = ChargeRates(tax_rate=3.3333, service_charge_rate=0, service_charge_enabled=False)

        bill = calculate_bill(_ledger((item, 1)), rates)

        assert bill.tax == 333 * 3.3333 / 100
        assert bill.total == 333 + 333 * 3.3333 / 100

    def test_negative_prices_pass_through(self):
        refund = MenuItem(id="r", name="Voucher", price=-1000, category="Other")

        assert subtotal(_ledger((refund, 2))) == -2000

    def test_price_is_read_from_the_live_menu_item(self, mohinga):
        ledger = _ledger((mohinga, 2))
        mohinga.price = 3000

        assert subtotal(ledger) == 6000


class TestChargeRates:
    def test_from_settings(self):
        settings = Settings(tax_rate=5, service_charge=12, service_charge_enabled=True)

        rates = ChargeRates.from_settings(settings)

        assert rates == ChargeRates(tax_rate=5, service_charge_rate=12, service_charge_enabled=True)

    def test_fallback_when_settings_missing(self):
        rates = ChargeRates.from_settings(None)

        assert rates.tax_rate == FALLBACK_TAX_RATE
        assert rates.service_charge_rate == FALLBACK_SERVICE_CHARGE_RATE
        assert rates.service_charge_enabled is True


class TestComponentHelpers:
    def test_bill_is_built_from_the_component_helpers(self, mohinga, beer):
        ledger = _ledger((mohinga, 1), (beer, 3))

        bill = calculate_bill(ledger, WITH_SERVICE)

        assert bill.subtotal == subtotal(ledger)
        assert bill.service_charge == service_charge(ledger, WITH_SERVICE)
        assert bill.tax == tax(ledger, WITH_SERVICE)
        assert bill.total == total(ledger, WITH_SERVICE)

    def test_helpers_accept_one_shot_iterables(self, mohinga):
        lines = OrderLedger().add_item(mohinga).snapshot()

        assert calculate_bill(iter(lines), NO_SERVICE).total == 2712.5
