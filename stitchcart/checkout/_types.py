"""
Checkout types — wizard steps, form state, totals and the local order summary.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from decimal import Decimal
from enum import Enum, IntEnum, auto

from stitchcart.catalog import ProductId
from stitchcart.payments import BillingAddress, PaymentMethod
from stitchcart.pricing import Customization, PricingBreakdown
from stitchcart.shipping import ShippingAddress


class Step(IntEnum):
    SHIPPING = 1
    PAYMENT = 2
    REVIEW = 3


class Phase(Enum):
    """What the wizard is doing right now, orthogonal to Step."""

    EDITING = auto()
    CALCULATING_SHIPPING = auto()
    PROCESSING = auto()
    COMPLETE = auto()


# ═══════════════════════════════════════════════════════════════════════════════
# Forms
# ═══════════════════════════════════════════════════════════════════════════════

COUNTRY_CODES = {
    "united states": "US",
    "united states of america": "US",
    "usa": "US",
}


def country_code(country: str) -> str:
    """`United States` → `US`; two-letter codes pass through upper-cased."""
    name = country.strip()
    if len(name) == 2:
        return name.upper()
    return COUNTRY_CODES.get(name.lower(), name)


REQUIRED_SHIPPER_FIELDS = (
    "first_name",
    "last_name",
    "email",
    "phone",
    "address",
    "city",
    "state",
    "zip_code",
)


@dataclass(slots=True)
class ShipperForm:
    """Step-1 input. Mutable: the caller edits it field by field."""

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    apartment: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    country: str = "United States"
    notes: str = ""

    def missing(self) -> list[str]:
        return [name for name in REQUIRED_SHIPPER_FIELDS if not getattr(self, name).strip()]

    @property
    def is_complete(self) -> bool:
        return not self.missing()

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def shipping_address(self) -> ShippingAddress:
        return ShippingAddress(
            street1=self.address,
            street2=self.apartment,
            city=self.city,
            state=self.state,
            postal_code=self.zip_code,
            country=country_code(self.country),
        )

    def billing_address(self) -> BillingAddress:
        return BillingAddress(
            line1=self.address,
            line2=self.apartment,
            city=self.city,
            state=self.state,
            postal_code=self.zip_code,
            country=country_code(self.country),
        )


@dataclass(slots=True)
class CardForm:
    """
    Card fields shown for the Stripe method.

    The fields only gate the step. What reaches Stripe is `payment_token`,
    produced by client-side tokenization.
    """

    card_number: str = ""
    expiry_date: str = ""
    cvv: str = ""
    card_name: str = ""
    payment_token: str | None = None

    @property
    def is_complete(self) -> bool:
        return all(
            getattr(self, f.name).strip()
            for f in fields(self)
            if f.name != "payment_token"
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Order summary
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class OrderTotals:
    subtotal: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal


@dataclass(frozen=True, slots=True)
class ShippingSnapshot:
    service_name: str
    service_code: str
    carrier: str
    cost: Decimal
    estimated_delivery_days: int | None = None
    estimated_delivery_date: datetime | None = None


@dataclass(frozen=True, slots=True)
class PaymentSnapshot:
    method: PaymentMethod
    payment_id: str | None
    payer_email: str | None = None
    payer_name: str | None = None


@dataclass(frozen=True, slots=True)
class OrderLine:
    product_id: ProductId
    product_name: str
    quantity: int
    pricing: PricingBreakdown
    customization: Customization | None = None

    @property
    def line_total(self) -> Decimal:
        return self.pricing.total_price * self.quantity


@dataclass(frozen=True, slots=True)
class OrderSummary:
    """Local, non-authoritative record shown after a successful payment."""

    id: str
    order_number: str
    lines: tuple[OrderLine, ...]
    totals: OrderTotals
    customer_email: str
    customer_name: str
    shipping_address: ShippingAddress
    payment: PaymentSnapshot
    created_at: datetime
    shipping: ShippingSnapshot | None = None
    notes: str = ""
    metadata: dict[str, str] = field(default_factory=dict)


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


class CheckoutErrorKind(Enum):
    INCOMPLETE_STEP = auto()
    INVALID_STEP = auto()
    EMPTY_CART = auto()
    BUSY = auto()
    PAYMENT_FAILED = auto()
    PAYMENT_CANCELLED = auto()
    CANCELLED = auto()
    UNEXPECTED = auto()


@dataclass(frozen=True, slots=True)
class CheckoutError:
    kind: CheckoutErrorKind
    message: str


class CheckoutErrors:
    @staticmethod
    def incomplete(missing: list[str]) -> CheckoutError:
        labels = ", ".join(name.replace("_", " ") for name in missing)
        return CheckoutError(CheckoutErrorKind.INCOMPLETE_STEP, f"Please fill in: {labels}")

    @staticmethod
    def card_incomplete() -> CheckoutError:
        return CheckoutError(CheckoutErrorKind.INCOMPLETE_STEP, "Please enter your card details")

    @staticmethod
    def invalid_step(step: Step) -> CheckoutError:
        return CheckoutError(CheckoutErrorKind.INVALID_STEP, f"Not allowed from step {step.name.lower()}")

    @staticmethod
    def empty_cart() -> CheckoutError:
        return CheckoutError(CheckoutErrorKind.EMPTY_CART, "Your cart is empty")

    @staticmethod
    def busy(what: str) -> CheckoutError:
        return CheckoutError(CheckoutErrorKind.BUSY, f"{what} already in progress")

    @staticmethod
    def cancelled(what: str) -> CheckoutError:
        return CheckoutError(CheckoutErrorKind.CANCELLED, f"{what} was cancelled")

    @staticmethod
    def unexpected(exc: Exception) -> CheckoutError:
        return CheckoutError(CheckoutErrorKind.UNEXPECTED, str(exc) or "Something went wrong. Please try again.")


__all__ = (
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
)
