"""Shared infrastructure for tests."""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from kungfu import Ok

from stitchcart.catalog import Catalog, Product, ProductId
from stitchcart.payments import (
    BillingAddress,
    LineItem,
    PaymentData,
    PaymentIntent,
    PaymentMethod,
    PaymentResult,
    PaymentStatus,
)


def run[T](coro: Coroutine[object, object, T]) -> T:
    return asyncio.run(coro)


# Clocks
@dataclass(slots=True)
class FakeClock:
    now: datetime = field(default_factory=lambda: datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc))

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


@dataclass(slots=True)
class FakeMonotonic:
    now: float = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


async def no_sleep(_: float) -> None:
    return None


# Catalog
def make_catalog() -> Catalog:
    return Catalog([
        Product(ProductId.of(5), "Classic Tee", Decimal("20.00")),
        Product(ProductId.of(7), "Trucker Hat", Decimal("15.50"), weight_oz=Decimal("4")),
        Product(ProductId.of("hoodie"), "Heavy Hoodie", Decimal("45.00")),
    ])


# Payments
def make_payment_data(**overrides) -> PaymentData:
    values = dict(
        amount=Decimal("53.19"),
        currency="USD",
        customer_email="ada@example.com",
        customer_name="Ada Lovelace",
        description="Order MAY-123456",
        billing_address=BillingAddress(
            line1="1 Analytical Way",
            city="Austin",
            state="TX",
            postal_code="78701",
            country="US",
        ),
        items=(LineItem("Classic Tee", 2, Decimal("20.00")),),
        metadata={"order_id": "ord_abc123"},
        idempotency_key="ord_abc123",
    )
    values.update(overrides)
    return PaymentData(**values)


class FakeProvider:
    """PaymentProvider double: scripted captures, optional gate before intent creation."""

    def __init__(
        self,
        method: PaymentMethod = PaymentMethod.PAYPAL,
        captures: list | None = None,
        gate: asyncio.Event | None = None,
    ) -> None:
        self._method = method
        self._captures = list(captures or [])
        self._gate = gate
        self.seen: list[PaymentData] = []
        self.started = asyncio.Event()

    @property
    def method(self) -> PaymentMethod:
        return self._method

    async def create_intent(self, data: PaymentData):
        self.seen.append(data)
        self.started.set()
        if self._gate is not None:
            await self._gate.wait()
        return Ok(PaymentIntent(f"intent-{len(self.seen)}", self._method))

    async def capture(self, intent: PaymentIntent, data: PaymentData):
        if self._captures:
            return self._captures.pop(0)
        return Ok(PaymentResult(
            PaymentStatus.SUCCEEDED,
            self._method,
            payment_id=f"pay-{intent.id}",
            payer_email=data.customer_email,
            payer_name=data.customer_name,
        ))
