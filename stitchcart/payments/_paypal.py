"""
PayPal payments through the Orders v2 REST API.

    POST /v1/oauth2/token                     client-credentials token
    POST /v2/checkout/orders                  create (intent=CAPTURE)
    POST /v2/checkout/orders/{id}/capture     capture after payer approval

The payer approves the order at its approval link between the two calls.
An `approve` callback does that step: it sends the payer to the link and
resolves once PayPal hands control back. Without one, capture answers
REQUIRES_ACTION carrying the link.

Every mutating call carries a PayPal-Request-Id so retries are safe.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Awaitable, Callable
from decimal import Decimal
from typing import Any

import httpx
from kungfu import Error, Ok, Result

from stitchcart._types import ZERO, round_cents
from stitchcart.lift import from_awaitable
from stitchcart.payments._types import (
    PaymentData,
    PaymentError,
    PaymentErrors,
    PaymentIntent,
    PaymentMethod,
    PaymentResult,
    PaymentStatus,
)
from stitchcart.payments._validate import validate_paypal_data

logger = logging.getLogger(__name__)

ZERO_DECIMAL_CURRENCIES = frozenset({"JPY"})
DECLINED_MESSAGE = "Payment was declined by PayPal"
NOT_APPROVED_MESSAGE = "PayPal payment was not approved"
APPROVAL_REQUIRED_MESSAGE = "Approve the payment in PayPal to continue"
APPROVAL_RELS = ("approve", "payer-action")

type Approver = Callable[[PaymentIntent], Awaitable[bool]]
"""Takes the payer through approval. False when they back out."""


# ═══════════════════════════════════════════════════════════════════════════════
# Wire mapping
# ═══════════════════════════════════════════════════════════════════════════════


def _money(amount: Decimal, currency: str) -> dict[str, str]:
    if currency in ZERO_DECIMAL_CURRENCIES:
        value = f"{amount.quantize(Decimal('1')):f}"
    else:
        value = f"{round_cents(amount):f}"
    return {"currency_code": currency, "value": value}


def order_to_wire(data: PaymentData) -> dict[str, Any]:
    currency = data.currency.upper()
    amount = round_cents(data.amount)
    unit: dict[str, Any] = {
        "description": data.description[:127],
        "amount": _money(amount, currency),
    }

    reference = data.metadata.get("order_id")
    if reference:
        unit["reference_id"] = reference
        unit["custom_id"] = reference

    if data.items:
        item_total = sum((round_cents(i.price) * i.quantity for i in data.items), ZERO)
        breakdown: dict[str, Any] = {"item_total": _money(item_total, currency)}
        # tax and shipping are not itemized; the remainder keeps the breakdown balanced
        remainder = amount - item_total
        if remainder > 0:
            breakdown["handling"] = _money(remainder, currency)
        elif remainder < 0:
            breakdown["discount"] = _money(-remainder, currency)
        unit["amount"]["breakdown"] = breakdown
        unit["items"] = [
            {
                "name": i.name[:127],
                "quantity": str(i.quantity),
                "unit_amount": _money(round_cents(i.price), currency),
            }
            for i in data.items
        ]

    return {"intent": "CAPTURE", "purchase_units": [unit]}


def order_from_wire(body: dict[str, Any]) -> PaymentIntent:
    approval_url = next(
        (
            link.get("href")
            for link in body.get("links") or []
            if isinstance(link, dict) and link.get("rel") in APPROVAL_RELS
        ),
        None,
    )
    return PaymentIntent(
        id=str(body["id"]),
        method=PaymentMethod.PAYPAL,
        status=str(body.get("status") or ""),
        approval_url=approval_url,
    )


def capture_from_wire(
    order_id: str,
    body: dict[str, Any],
    data: PaymentData,
) -> Result[PaymentResult, PaymentError]:
    status = body.get("status")
    if status == "VOIDED":
        return Error(PaymentErrors.cancelled())
    if status != "COMPLETED":
        return Error(PaymentErrors.declined(DECLINED_MESSAGE))

    captures = [
        c
        for unit in body.get("purchase_units") or []
        for c in (unit.get("payments") or {}).get("captures") or []
    ]
    if captures and captures[0].get("status") == "DECLINED":
        return Error(PaymentErrors.declined(DECLINED_MESSAGE))

    payer = body.get("payer") or {}
    name = payer.get("name") or {}
    payer_name = " ".join(p for p in (name.get("given_name"), name.get("surname")) if p)

    return Ok(
        PaymentResult(
            status=PaymentStatus.SUCCEEDED,
            method=PaymentMethod.PAYPAL,
            payment_id=captures[0].get("id") if captures else order_id,
            order_id=order_id,
            payer_email=payer.get("email_address") or data.customer_email,
            payer_name=payer_name or data.customer_name,
        )
    )


def _issue(response: httpx.Response) -> tuple[str | None, str | None]:
    """(first issue code, message) from a PayPal error body."""
    try:
        body = response.json()
    except ValueError:
        return None, None
    if not isinstance(body, dict):
        return None, None
    details = body.get("details") or [{}]
    first = details[0] if isinstance(details[0], dict) else {}
    return first.get("issue"), body.get("message")


def _paypal_error(exc: Exception) -> PaymentError:
    match exc:
        case httpx.HTTPStatusError(response=response):
            issue, message = _issue(response)
            if issue in ("ORDER_NOT_APPROVED", "PAYER_ACTION_REQUIRED"):
                return PaymentErrors.cancelled(NOT_APPROVED_MESSAGE)
            if issue in ("INSTRUMENT_DECLINED", "TRANSACTION_REFUSED"):
                return PaymentErrors.declined(DECLINED_MESSAGE)
            logger.warning("paypal answered %s: %s", response.status_code, issue or message)
            return PaymentErrors.provider(message or "PayPal payment processing failed")
        case httpx.HTTPError():
            return PaymentErrors.network("Could not reach PayPal. Please try again.")
        case _:
            logger.exception("unexpected error talking to paypal", exc_info=exc)
            return PaymentErrors.provider("PayPal payment processing failed")


# ═══════════════════════════════════════════════════════════════════════════════
# Provider
# ═══════════════════════════════════════════════════════════════════════════════


class PayPalProvider:
    """
    PaymentProvider over PayPal Orders v2.

    `http` must point at the PayPal API host (sandbox or live).

    Example:
        async def approve(order: PaymentIntent) -> bool:
            return await browser.open_and_wait(order.approval_url)

        paypal = PayPalProvider(
            httpx.AsyncClient(base_url="https://api-m.sandbox.paypal.com"),
            client_id, client_secret,
            approve=approve,
        )
        result = await PaymentDispatcher([paypal]).process_payment(PaymentMethod.PAYPAL, data)
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        client_id: str,
        client_secret: str,
        *,
        approve: Approver | None = None,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self._http = http
        self._client_id = client_id
        self._client_secret = client_secret
        self._approve = approve
        self._monotonic = monotonic
        self._token: str | None = None
        self._token_expires_at = 0.0

    @property
    def method(self) -> PaymentMethod:
        return PaymentMethod.PAYPAL

    async def _access_token(self) -> str:
        if self._token is not None and self._monotonic() < self._token_expires_at:
            return self._token
        response = await self._http.post(
            "/v1/oauth2/token",
            data={"grant_type": "client_credentials"},
            auth=(self._client_id, self._client_secret),
        )
        response.raise_for_status()
        body = response.json()
        self._token = str(body["access_token"])
        # refresh a minute early
        self._token_expires_at = self._monotonic() + float(body.get("expires_in", 0)) - 60
        return self._token

    async def _post(self, path: str, payload: dict[str, Any] | None, request_id: str) -> dict[str, Any]:
        token = await self._access_token()
        response = await self._http.post(
            path,
            json=payload if payload is not None else {},
            headers={
                "Authorization": f"Bearer {token}",
                "PayPal-Request-Id": request_id,
                "Prefer": "return=representation",
            },
        )
        response.raise_for_status()
        return response.json()

    async def create_order(self, data: PaymentData) -> Result[PaymentIntent, PaymentError]:
        """Validate, then create an order. Invalid data never reaches the network."""
        errors = validate_paypal_data(data)
        if errors:
            return Error(PaymentErrors.validation(errors))

        request_id = data.idempotency_key or uuid.uuid4().hex
        result = await from_awaitable(
            lambda: self._post("/v2/checkout/orders", order_to_wire(data), request_id),
            on_error=_paypal_error,
        )

        match result:
            case Ok(body):
                logger.info("paypal order %s created", body.get("id"))
                return Ok(order_from_wire(body))
            case Error(err):
                return Error(err)

    async def approve_order(self, order: PaymentIntent) -> Result[PaymentIntent, PaymentError]:
        """Hand the order to the payer. Already approved orders pass through."""
        if order.status == "APPROVED":
            return Ok(order)
        if self._approve is None:
            return Error(PaymentErrors.requires_action(APPROVAL_REQUIRED_MESSAGE, order.approval_url))
        if not await self._approve(order):
            logger.info("paypal order %s not approved by payer", order.id)
            return Error(PaymentErrors.cancelled(NOT_APPROVED_MESSAGE))
        return Ok(order)

    async def capture_payment(
        self,
        order_id: str,
        data: PaymentData,
    ) -> Result[PaymentResult, PaymentError]:
        request_id = f"{data.idempotency_key}-capture" if data.idempotency_key else uuid.uuid4().hex
        result = await from_awaitable(
            lambda: self._post(f"/v2/checkout/orders/{order_id}/capture", None, request_id),
            on_error=_paypal_error,
        )

        match result:
            case Ok(body):
                return capture_from_wire(order_id, body, data)
            case Error(err):
                return Error(err)

    async def create_intent(self, data: PaymentData) -> Result[PaymentIntent, PaymentError]:
        return await self.create_order(data)

    async def capture(
        self,
        intent: PaymentIntent,
        data: PaymentData,
    ) -> Result[PaymentResult, PaymentError]:
        """Payer approval, then capture."""
        match await self.approve_order(intent):
            case Ok(order):
                return await self.capture_payment(order.id, data)
            case Error(err):
                return Error(err)


__all__ = (
    "Approver",
    "PayPalProvider",
    "order_to_wire",
    "order_from_wire",
    "capture_from_wire",
)
