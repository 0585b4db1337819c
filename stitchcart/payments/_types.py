"""
Payment types — one request shape in, one result shape out.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum, auto
from typing import Protocol

from kungfu import Result


# ═══════════════════════════════════════════════════════════════════════════════
# Request
# ═══════════════════════════════════════════════════════════════════════════════


class PaymentMethod(Enum):
    STRIPE = "stripe"
    PAYPAL = "paypal"
    GOOGLE = "google"


@dataclass(frozen=True, slots=True)
class BillingAddress:
    line1: str
    city: str
    state: str
    postal_code: str
    country: str
    line2: str = ""


@dataclass(frozen=True, slots=True)
class LineItem:
    name: str
    quantity: int
    price: Decimal
    currency: str = "USD"


@dataclass(frozen=True, slots=True)
class PaymentData:
    """
    Provider-neutral payment request. Amount is in major units (dollars).

    payment_token is a client-side tokenized card (Stripe PaymentMethod id);
    raw card numbers never reach this layer.
    """

    amount: Decimal
    currency: str
    customer_email: str
    customer_name: str
    description: str
    billing_address: BillingAddress
    items: tuple[LineItem, ...] = ()
    metadata: Mapping[str, str] = field(default_factory=dict)
    payment_token: str | None = None
    idempotency_key: str | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Result
# ═══════════════════════════════════════════════════════════════════════════════


class PaymentStatus(Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"
    REQUIRES_ACTION = "requires_action"


@dataclass(frozen=True, slots=True)
class PaymentResult:
    """
    Uniform outcome of process_payment.

    CANCELLED (payer abandoned) is reported apart from FAILED.
    """

    status: PaymentStatus
    method: PaymentMethod | None
    payment_id: str | None = None
    order_id: str | None = None
    payer_email: str | None = None
    payer_name: str | None = None
    error: str | None = None
    client_secret: str | None = None

    @property
    def success(self) -> bool:
        return self.status is PaymentStatus.SUCCEEDED

    @property
    def cancelled(self) -> bool:
        return self.status is PaymentStatus.CANCELLED

    @property
    def requires_action(self) -> bool:
        return self.status is PaymentStatus.REQUIRES_ACTION


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


class PaymentErrorKind(Enum):
    VALIDATION = auto()
    DECLINED = auto()
    CANCELLED = auto()
    REQUIRES_ACTION = auto()
    UNAVAILABLE = auto()
    PROVIDER = auto()
    NETWORK = auto()


@dataclass(frozen=True, slots=True)
class PaymentError:
    kind: PaymentErrorKind
    message: str
    client_secret: str | None = None


class PaymentErrors:
    @staticmethod
    def validation(errors: list[str]) -> PaymentError:
        return PaymentError(PaymentErrorKind.VALIDATION, ", ".join(errors))

    @staticmethod
    def declined(msg: str) -> PaymentError:
        return PaymentError(PaymentErrorKind.DECLINED, msg)

    @staticmethod
    def cancelled(msg: str = "Payment was cancelled") -> PaymentError:
        return PaymentError(PaymentErrorKind.CANCELLED, msg)

    @staticmethod
    def requires_action(msg: str, client_secret: str | None = None) -> PaymentError:
        return PaymentError(PaymentErrorKind.REQUIRES_ACTION, msg, client_secret)

    @staticmethod
    def unavailable(msg: str) -> PaymentError:
        return PaymentError(PaymentErrorKind.UNAVAILABLE, msg)

    @staticmethod
    def provider(msg: str) -> PaymentError:
        return PaymentError(PaymentErrorKind.PROVIDER, msg)

    @staticmethod
    def network(msg: str) -> PaymentError:
        return PaymentError(PaymentErrorKind.NETWORK, msg)


# ═══════════════════════════════════════════════════════════════════════════════
# Provider Protocol
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PaymentIntent:
    """Provider-side handle created before capture (PaymentIntent / PayPal order)."""

    id: str
    method: PaymentMethod
    status: str = ""
    client_secret: str | None = None
    approval_url: str | None = None


class PaymentProvider(Protocol):
    """
    Two-phase payment integration.

    create_intent registers the payment with the provider;
    capture completes it. Expected failures come back as Error(PaymentError).
    """

    @property
    def method(self) -> PaymentMethod: ...

    async def create_intent(self, data: PaymentData) -> Result[PaymentIntent, PaymentError]: ...

    async def capture(
        self,
        intent: PaymentIntent,
        data: PaymentData,
    ) -> Result[PaymentResult, PaymentError]: ...


__all__ = (
    "PaymentMethod",
    "BillingAddress",
    "LineItem",
    "PaymentData",
    "PaymentStatus",
    "PaymentResult",
    "PaymentErrorKind",
    "PaymentError",
    "PaymentErrors",
    "PaymentIntent",
    "PaymentProvider",
)
