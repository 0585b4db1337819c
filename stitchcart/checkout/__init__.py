"""
Checkout — three-step wizard from shipping address to a paid order.

    from stitchcart import checkout as Co

    flow = Co.CheckoutFlow(cart, catalog, shipping, payments)
    flow.shipper.email = "ada@example.com"
    ...
    await flow.next()            # SHIPPING → PAYMENT, one shipping rate call
    await flow.next()            # PAYMENT → REVIEW
    await flow.place_order()     # Ok(OrderSummary) or Error(CheckoutError)

    Co.calculate_totals(Decimal("40"))   # 40.00 + 3.20 tax + 9.99 shipping = 53.19
"""

from stitchcart.checkout._types import (
    Step,
    Phase,
    COUNTRY_CODES,
    country_code,
    REQUIRED_SHIPPER_FIELDS,
    ShipperForm,
    CardForm,
    OrderTotals,
    ShippingSnapshot,
    PaymentSnapshot,
    OrderLine,
    OrderSummary,
    CheckoutErrorKind,
    CheckoutError,
    CheckoutErrors,
)
from stitchcart.checkout._totals import (
    TAX_RATE,
    FREE_SHIPPING_THRESHOLD,
    FLAT_SHIPPING,
    tax_for,
    shipping_for,
    calculate_totals,
)
from stitchcart.checkout._flow import NAVIGATE_DELAY, Navigate, CheckoutFlow

__all__ = (
    # Types
    "Step",
    "Phase",
    "COUNTRY_CODES",
    "country_code",
    "REQUIRED_SHIPPER_FIELDS",
    "ShipperForm",
    "CardForm",
    "OrderTotals",
    "ShippingSnapshot",
    "PaymentSnapshot",
    "OrderLine",
    "OrderSummary",
    "CheckoutErrorKind",
    "CheckoutError",
    "CheckoutErrors",
    # Totals
    "TAX_RATE",
    "FREE_SHIPPING_THRESHOLD",
    "FLAT_SHIPPING",
    "tax_for",
    "shipping_for",
    "calculate_totals",
    # Flow
    "NAVIGATE_DELAY",
    "Navigate",
    "CheckoutFlow",
)
