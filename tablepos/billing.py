"""Bill calculation shared by the ordering screen, receipts and history."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from tablepos.models import OrderLineItem, Settings

# Rates used when no settings could be loaded.
FALLBACK_TAX_RATE = 8.5
FALLBACK_SERVICE_CHARGE_RATE = 10.0


@dataclass(frozen=True)
class ChargeRates:
    """Percentage rates applied on top of an order subtotal."""

    tax_rate: float
    service_charge_rate: float
    service_charge_enabled: bool

    @classmethod
    def from_settings(cls, settings: Settings | None) -> ChargeRates:
        if settings is None:
            return cls(
                tax_rate=FALLBACK_TAX_RATE,
                service_charge_rate=FALLBACK_SERVICE_CHARGE_RATE,
                service_charge_enabled=True,
            )
        return cls(
            tax_rate=settings.tax_rate,
            service_charge_rate=settings.service_charge,
            service_charge_enabled=settings.service_charge_enabled,
        )


@dataclass(frozen=True)
class Bill:
    subtotal: float
    service_charge: float
    tax: float
    total: float


def subtotal(items: Iterable[OrderLineItem]) -> float:
    """Sum of live menu price times quantity over all lines."""
    return sum((item.menu_item.price * item.quantity for item in items), 0.0)


def service_charge(items: Iterable[OrderLineItem], rates: ChargeRates) -> float:
    if not rates.service_charge_enabled:
        return 0.0
    return subtotal(items) * rates.service_charge_rate / 100


def tax(items: Iterable[OrderLineItem], rates: ChargeRates) -> float:
    """Tax on the subtotal. Applied whether or not service charge is on."""
    return subtotal(items) * rates.tax_rate / 100


def total(items: Iterable[OrderLineItem], rates: ChargeRates) -> float:
    return calculate_bill(items, rates).total


def calculate_bill(items: Iterable[OrderLineItem], rates: ChargeRates) -> Bill:
    """Compute every bill component for the lines.

    Nothing is rounded here; currency formatting belongs to the display layer.
    """
    lines = list(items)
    base = subtotal(lines)
    charge = service_charge(lines, rates)
    tax_amount = tax(lines, rates)
    return Bill(subtotal=base, service_charge=charge, tax=tax_amount, total=base + charge + tax_amount)
