"""
Checkout flow — the three-step wizard driving shipping, payment and order summary.

    SHIPPING ──next()──▶ PAYMENT ──next()──▶ REVIEW ──place_order()──▶ COMPLETE
        ▲   (one rate call)  │  ◀──previous()──┘            │
        └────previous()──────┘                               └─ failure: back to PAYMENT

Shipping and payment each run as their own task so cancel() can abort
them. Only one of each is ever in flight.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Awaitable, Callable
from datetime import timedelta
from decimal import Decimal

from kungfu import Error, Ok, Result

from stitchcart._types import Clock, Sleep, utcnow
from stitchcart.cart import Cart, CartItem
from stitchcart.catalog import Catalog
from stitchcart.checkout._totals import TAX_RATE, calculate_totals
from stitchcart.checkout._types import (
    CardForm,
    CheckoutError,
    CheckoutErrorKind,
    CheckoutErrors,
    OrderLine,
    OrderSummary,
    OrderTotals,
    PaymentSnapshot,
    Phase,
    ShipperForm,
    ShippingSnapshot,
    Step,
)
from stitchcart.lift import from_awaitable
from stitchcart.payments import LineItem, PaymentData, PaymentDispatcher, PaymentMethod
from stitchcart.pricing import DEFAULT_POLICY, Policy, item_price, pricing_breakdown
from stitchcart.shipping import (
    FallbackRates,
    ShippingItem,
    ShippingRate,
    ShippingRateClient,
    Weight,
    fallback_quote,
)

logger = logging.getLogger(__name__)

NAVIGATE_DELAY = 3.0
"""Seconds between a successful order and navigation away."""

type Navigate = Callable[[OrderSummary], Awaitable[None]]


def _cancelled_from_outside() -> bool:
    task = asyncio.current_task()
    return task is not None and task.cancelling() > 0


def _order_number(clock: Clock) -> str:
    millis = int(clock().timestamp() * 1000)
    return f"MAY-{str(millis)[-6:]}"


class CheckoutFlow:
    """
    Stateful checkout for one cart.

    Example:
        flow = CheckoutFlow(cart, catalog, shipping, payments, navigate=go_to_orders)
        flow.shipper.first_name = "Ada"
        ...
        await flow.next()                     # fetches rates, lands on PAYMENT
        flow.select_payment_method(PaymentMethod.PAYPAL)
        await flow.next()                     # REVIEW
        match await flow.place_order():
            case Ok(summary): print(summary.order_number)
            case Error(err): print(flow.error)
    """

    def __init__(
        self,
        cart: Cart,
        catalog: Catalog,
        shipping: ShippingRateClient,
        payments: PaymentDispatcher,
        *,
        currency: str = "USD",
        tax_rate: Decimal = TAX_RATE,
        policy: Policy = DEFAULT_POLICY,
        navigate: Navigate | None = None,
        navigate_delay: float = NAVIGATE_DELAY,
        sleep: Sleep = asyncio.sleep,
        clock: Clock = utcnow,
        inline_fallback: FallbackRates = FallbackRates.STANDARD_AND_EXPRESS,
    ) -> None:
        self.cart = cart
        self.catalog = catalog
        self._shipping = shipping
        self._payments = payments
        self._currency = currency
        self._tax_rate = tax_rate
        self._policy = policy
        self._navigate = navigate
        self._navigate_delay = navigate_delay
        self._sleep = sleep
        self._clock = clock
        self._inline_fallback = inline_fallback

        self.step = Step.SHIPPING
        self.phase = Phase.EDITING
        self.shipper = ShipperForm()
        self.card = CardForm()
        self.payment_method = PaymentMethod.STRIPE
        self.rates: tuple[ShippingRate, ...] = ()
        self.selected_rate: ShippingRate | None = None
        self.note: str | None = None
        self.error: str | None = None
        self.order: OrderSummary | None = None

        self._shipping_task: asyncio.Task[None] | None = None
        self._payment_task: asyncio.Task[Result[OrderSummary, CheckoutError]] | None = None
        self._navigation_task: asyncio.Task[None] | None = None

    # ───────────────────────────────────────────────────────────────────────────
    # State
    # ───────────────────────────────────────────────────────────────────────────

    @property
    def is_calculating_shipping(self) -> bool:
        return self._shipping_task is not None

    @property
    def is_processing(self) -> bool:
        return self._payment_task is not None

    @property
    def navigation(self) -> asyncio.Task[None] | None:
        """Pending post-order navigation, if any."""
        return self._navigation_task

    def _step_error(self, step: Step) -> CheckoutError | None:
        match step:
            case Step.SHIPPING:
                missing = self.shipper.missing()
                return CheckoutErrors.incomplete(missing) if missing else None
            case Step.PAYMENT:
                if self.payment_method is PaymentMethod.STRIPE and not self.card.is_complete:
                    return CheckoutErrors.card_incomplete()
                return None
            case Step.REVIEW:
                return None

    def can_proceed(self, step: Step | None = None) -> bool:
        """Card fields matter only for Stripe; hosted methods need nothing local."""
        return self._step_error(self.step if step is None else step) is None

    def select_payment_method(self, method: PaymentMethod | str) -> PaymentMethod:
        self.payment_method = PaymentMethod(method)
        self.error = None
        return self.payment_method

    def select_rate(self, service_code: str) -> bool:
        for rate in self.rates:
            if rate.service_code == service_code:
                self.selected_rate = rate
                return True
        return False

    # ───────────────────────────────────────────────────────────────────────────
    # Pricing
    # ───────────────────────────────────────────────────────────────────────────

    def _line(self, item: CartItem) -> OrderLine:
        product = self.catalog.find(item.product_id)
        return OrderLine(
            product_id=item.product_id,
            product_name=product.title if product is not None else f"Product {item.product_id}",
            quantity=item.quantity,
            pricing=pricing_breakdown(item, self.catalog, self._policy),
            customization=item.customization,
        )

    def order_lines(self) -> tuple[OrderLine, ...]:
        return tuple(self._line(item) for item in self.cart.items)

    def totals(self) -> OrderTotals:
        subtotal = sum((line.line_total for line in self.order_lines()), Decimal("0"))
        return calculate_totals(subtotal, self.selected_rate, tax_rate=self._tax_rate)

    # ───────────────────────────────────────────────────────────────────────────
    # Navigation
    # ───────────────────────────────────────────────────────────────────────────

    async def next(self) -> Result[Step, CheckoutError]:
        """
        Advance one step.

        Leaving SHIPPING waits for exactly one rate call; the step only
        changes once it resolved, with real or estimated rates.
        """
        if self._shipping_task is not None:
            return Error(CheckoutErrors.busy("Shipping calculation"))
        if self._payment_task is not None:
            return Error(CheckoutErrors.busy("Payment"))
        if self.step is Step.REVIEW:
            return Error(CheckoutErrors.invalid_step(self.step))
        if (err := self._step_error(self.step)) is not None:
            self.error = err.message
            return Error(err)

        self.error = None
        if self.step is Step.SHIPPING:
            match await self._calculate_shipping():
                case Error(err):
                    self.error = err.message
                    return Error(err)
                case Ok(_):
                    pass

        self.step = Step(self.step + 1)
        return Ok(self.step)

    def previous(self) -> Result[Step, CheckoutError]:
        """Step back. Never refetches shipping rates."""
        if self._payment_task is not None:
            return Error(CheckoutErrors.busy("Payment"))
        if self.step is Step.SHIPPING or self.phase is Phase.COMPLETE:
            return Error(CheckoutErrors.invalid_step(self.step))
        self.step = Step(self.step - 1)
        self.error = None
        return Ok(self.step)

    # ───────────────────────────────────────────────────────────────────────────
    # Shipping
    # ───────────────────────────────────────────────────────────────────────────

    def _shipping_item(self, item: CartItem) -> ShippingItem:
        product = self.catalog.find(item.product_id)
        weight = Weight(product.weight_oz) if product is not None and product.weight_oz else None
        return ShippingItem(
            id=str(item.product_id),
            name=product.title if product is not None else f"Product {item.product_id}",
            quantity=item.quantity,
            price=item_price(item, self.catalog, self._policy),
            weight=weight,
        )

    async def _fetch_rates(self) -> None:
        address = self.shipper.shipping_address()
        items = [self._shipping_item(item) for item in self.cart.items]
        response = await self._shipping.calculate_shipping_rates(address, items)

        if response.success and response.data is not None:
            quote = response.data
        else:
            logger.warning(
                "shipping service answered without rates (%s), offering estimated rates",
                response.message or response.error or "no message",
            )
            quote = fallback_quote(self._inline_fallback)

        self.rates = quote.rates
        self.selected_rate = quote.default_rate()
        self.note = (
            f"Note: {quote.warning.rstrip('.')}. Showing available options."
            if quote.warning
            else None
        )

    async def _calculate_shipping(self) -> Result[None, CheckoutError]:
        task = asyncio.create_task(self._fetch_rates())
        self._shipping_task = task
        self.phase = Phase.CALCULATING_SHIPPING
        try:
            return await from_awaitable(lambda: task, on_error=self._crashed)
        except asyncio.CancelledError:
            if _cancelled_from_outside():
                raise
            return Error(CheckoutErrors.cancelled("Shipping calculation"))
        finally:
            self._shipping_task = None
            self.phase = Phase.EDITING

    # ───────────────────────────────────────────────────────────────────────────
    # Order placement
    # ───────────────────────────────────────────────────────────────────────────

    def _payment_data(
        self,
        order_id: str,
        order_number: str,
        lines: tuple[OrderLine, ...],
        totals: OrderTotals,
    ) -> PaymentData:
        metadata = {
            "order_id": order_id,
            "order_number": order_number,
            "phone": self.shipper.phone,
        }
        if self.shipper.notes:
            metadata["notes"] = self.shipper.notes
        return PaymentData(
            amount=totals.total,
            currency=self._currency,
            customer_email=self.shipper.email.strip(),
            customer_name=self.shipper.full_name,
            description=f"Order {order_number}",
            billing_address=self.shipper.billing_address(),
            items=tuple(
                LineItem(line.product_name, line.quantity, line.pricing.total_price, self._currency)
                for line in lines
            ),
            metadata=metadata,
            payment_token=self.card.payment_token if self.payment_method is PaymentMethod.STRIPE else None,
            idempotency_key=order_id,
        )

    def _shipping_snapshot(self) -> ShippingSnapshot | None:
        rate = self.selected_rate
        if rate is None:
            return None
        days = rate.estimated_delivery_days
        return ShippingSnapshot(
            service_name=rate.service_name,
            service_code=rate.service_code,
            carrier=rate.carrier,
            cost=rate.total_cost,
            estimated_delivery_days=days,
            estimated_delivery_date=self._clock() + timedelta(days=days) if days else None,
        )

    async def _submit(self) -> Result[OrderSummary, CheckoutError]:
        order_id = f"ord_{uuid.uuid4().hex[:12]}"
        order_number = _order_number(self._clock)
        lines = self.order_lines()
        totals = self.totals()
        data = self._payment_data(order_id, order_number, lines, totals)

        result = await self._payments.process_payment(self.payment_method, data)

        if result.cancelled:
            return Error(CheckoutError(CheckoutErrorKind.PAYMENT_CANCELLED, result.error or "Payment was cancelled"))
        if result.requires_action:
            return Error(CheckoutError(
                CheckoutErrorKind.PAYMENT_FAILED,
                result.error or "Payment requires additional authentication",
            ))
        if not result.success:
            return Error(CheckoutError(CheckoutErrorKind.PAYMENT_FAILED, result.error or "Payment failed"))

        return Ok(OrderSummary(
            id=order_id,
            order_number=order_number,
            lines=lines,
            totals=totals,
            customer_email=data.customer_email,
            customer_name=data.customer_name,
            shipping_address=self.shipper.shipping_address(),
            payment=PaymentSnapshot(
                method=self.payment_method,
                payment_id=result.payment_id,
                payer_email=result.payer_email,
                payer_name=result.payer_name,
            ),
            created_at=self._clock(),
            shipping=self._shipping_snapshot(),
            notes=self.shipper.notes,
            metadata=dict(data.metadata),
        ))

    async def place_order(self) -> Result[OrderSummary, CheckoutError]:
        """
        Pay and synthesize the local order summary.

        Success clears the cart, then schedules navigation after a delay.
        Failure, cancellation or a crash leaves the cart and forms intact,
        moves back to PAYMENT and sets `error`. To retry, go forward with
        next() to REVIEW and call place_order() again.
        """
        if self.order is not None:
            return Ok(self.order)
        if self._payment_task is not None:
            return Error(CheckoutErrors.busy("Payment"))
        if self._shipping_task is not None:
            return Error(CheckoutErrors.busy("Shipping calculation"))
        if self.step is not Step.REVIEW:
            return Error(CheckoutErrors.invalid_step(self.step))
        if self.cart.is_empty:
            return self._fail(CheckoutErrors.empty_cart())
        for step in (Step.SHIPPING, Step.PAYMENT):
            if (err := self._step_error(step)) is not None:
                return self._fail(err)

        self.error = None
        task = asyncio.create_task(self._submit())
        self._payment_task = task
        self.phase = Phase.PROCESSING
        try:
            outcome = await from_awaitable(lambda: task, on_error=self._crashed)
        except asyncio.CancelledError:
            self.phase = Phase.EDITING
            if _cancelled_from_outside():
                raise
            return self._fail(CheckoutErrors.cancelled("Payment"))
        finally:
            self._payment_task = None

        match outcome:
            case Ok(Ok(summary)):
                return await self._complete(summary)
            case Ok(Error(err)) | Error(err):
                return self._fail(err)

    async def _complete(self, summary: OrderSummary) -> Result[OrderSummary, CheckoutError]:
        self.order = summary
        self.phase = Phase.COMPLETE
        logger.info("order %s paid (%s)", summary.order_number, summary.payment.method.value)

        match await from_awaitable(self.cart.clear, on_error=lambda e: e):
            case Error(exc):
                logger.error("order %s paid but the cart could not be cleared: %s", summary.order_number, exc)
            case Ok(_):
                pass

        if self._navigate is not None:
            self._navigation_task = asyncio.create_task(self._navigate_later(summary))
        return Ok(summary)

    async def _navigate_later(self, summary: OrderSummary) -> None:
        await self._sleep(self._navigate_delay)
        await self._navigate(summary)

    def _fail(self, err: CheckoutError) -> Result[OrderSummary, CheckoutError]:
        self.step = Step.PAYMENT
        self.phase = Phase.EDITING
        self.error = err.message
        logger.info("order not placed (%s): %s", err.kind.name, err.message)
        return Error(err)

    def _crashed(self, exc: Exception) -> CheckoutError:
        logger.exception("checkout step crashed", exc_info=exc)
        return CheckoutErrors.unexpected(exc)

    # ───────────────────────────────────────────────────────────────────────────
    # Cancellation
    # ───────────────────────────────────────────────────────────────────────────

    def cancel(self) -> None:
        """Abort whatever is in flight: rate call, payment or pending navigation."""
        for task in (self._shipping_task, self._payment_task, self._navigation_task):
            if task is not None and not task.done():
                task.cancel()


__all__ = (
    "NAVIGATE_DELAY",
    "Navigate",
    "CheckoutFlow",
)
