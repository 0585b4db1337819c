"""
Order totals.

    total = subtotal + tax + shipping

    tax       = subtotal × tax rate, rounded half-up to cents
    shipping  = selected rate's total cost, or the flat fallback:
                free above $50, $9.99 otherwise
"""

from __future__ import annotations

from decimal import Decimal

from stitchcart._types import ZERO, round_cents
from stitchcart.checkout._types import OrderTotals
from stitchcart.shipping import ShippingRate

TAX_RATE = Decimal("0.08")
FREE_SHIPPING_THRESHOLD = Decimal("50")
FLAT_SHIPPING = Decimal("9.99")


def tax_for(subtotal: Decimal, tax_rate: Decimal = TAX_RATE) -> Decimal:
    return round_cents(subtotal * tax_rate)


def shipping_for(subtotal: Decimal, rate: ShippingRate | None = None) -> Decimal:
    if rate is not None:
        return rate.total_cost
    return ZERO if subtotal > FREE_SHIPPING_THRESHOLD else FLAT_SHIPPING


def calculate_totals(
    subtotal: Decimal,
    rate: ShippingRate | None = None,
    *,
    tax_rate: Decimal = TAX_RATE,
) -> OrderTotals:
    """
    Example:
        calculate_totals(Decimal("40.00"))
        # OrderTotals(subtotal=40.00, tax=3.20, shipping=9.99, total=53.19)
    """
    subtotal = round_cents(subtotal)
    tax = tax_for(subtotal, tax_rate)
    shipping = shipping_for(subtotal, rate)
    return OrderTotals(
        subtotal=subtotal,
        tax=tax,
        shipping=shipping,
        total=subtotal + tax + shipping,
    )


__all__ = (
    "TAX_RATE",
    "FREE_SHIPPING_THRESHOLD",
    "FLAT_SHIPPING",
    "tax_for",
    "shipping_for",
    "calculate_totals",
)
