"""
Card payments through the official Stripe SDK.

The SDK is synchronous; calls run in a worker thread so the event loop
stays free. Amounts go to Stripe as integer cents.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import stripe
from kungfu import Error, Ok, Result

from stitchcart._types import to_cents
from stitchcart.lift import from_awaitable
from stitchcart.payments._types import (
    PaymentData,
    PaymentError,
    PaymentErrorKind,
    PaymentErrors,
    PaymentIntent,
    PaymentMethod,
    PaymentResult,
    PaymentStatus,
)

logger = logging.getLogger(__name__)


def _stripe_error(exc: Exception) -> PaymentError:
    match exc:
        case stripe.CardError():
            return PaymentErrors.declined(exc.user_message or "Your card was declined")
        case stripe.APIConnectionError():
            return PaymentErrors.network("Could not reach the card processor. Please try again.")
        case stripe.StripeError():
            return PaymentErrors.provider(exc.user_message or "Card payment failed")
        case _:
            logger.exception("unexpected error from card processor", exc_info=exc)
            return PaymentErrors.provider("Card payment failed")


def intent_params(data: PaymentData) -> dict[str, Any]:
    """PaymentIntent create params for a payment request."""
    metadata = {"customer_name": data.customer_name, **dict(data.metadata)}
    billing = data.billing_address
    return {
        "amount": to_cents(data.amount),
        "currency": data.currency.lower(),
        "description": data.description,
        "receipt_email": data.customer_email,
        "metadata": metadata,
        "shipping": {
            "name": data.customer_name,
            "address": {
                "line1": billing.line1,
                "line2": billing.line2 or None,
                "city": billing.city,
                "state": billing.state,
                "postal_code": billing.postal_code,
                "country": billing.country,
            },
        },
        "automatic_payment_methods": {"enabled": True, "allow_redirects": "never"},
    }


class StripeProvider:
    """
    PaymentProvider over Stripe PaymentIntents.

    create_intent  → PaymentIntent (amount in cents)
    capture        → confirm with the tokenized card when one is given,
                     otherwise hand the client_secret back for client-side
                     confirmation (REQUIRES_ACTION).
    """

    def __init__(self, client: stripe.StripeClient) -> None:
        self._intents = client.v1.payment_intents

    @property
    def method(self) -> PaymentMethod:
        return PaymentMethod.STRIPE

    async def create_intent(self, data: PaymentData) -> Result[PaymentIntent, PaymentError]:
        params = intent_params(data)
        options: dict[str, Any] = {}
        if data.idempotency_key:
            options["idempotency_key"] = f"{data.idempotency_key}:create"

        result = await from_awaitable(
            lambda: asyncio.to_thread(self._intents.create, params=params, options=options),
            on_error=_stripe_error,
        )

        match result:
            case Ok(intent):
                logger.info("payment intent %s created (%s cents)", intent.id, params["amount"])
                return Ok(
                    PaymentIntent(
                        id=intent.id,
                        method=PaymentMethod.STRIPE,
                        status=intent.status,
                        client_secret=intent.client_secret,
                    )
                )
            case Error(err):
                return Error(err)

    async def capture(
        self,
        intent: PaymentIntent,
        data: PaymentData,
    ) -> Result[PaymentResult, PaymentError]:
        if data.payment_token is None:
            return Ok(
                PaymentResult(
                    status=PaymentStatus.REQUIRES_ACTION,
                    method=PaymentMethod.STRIPE,
                    payment_id=intent.id,
                    client_secret=intent.client_secret,
                )
            )

        options: dict[str, Any] = {}
        if data.idempotency_key:
            options["idempotency_key"] = f"{data.idempotency_key}:confirm"

        result = await from_awaitable(
            lambda: asyncio.to_thread(
                self._intents.confirm,
                intent.id,
                params={"payment_method": data.payment_token},
                options=options,
            ),
            on_error=_stripe_error,
        )

        match result:
            case Ok(confirmed):
                return self._outcome(confirmed, data)
            case Error(err):
                return Error(err)

    def _outcome(self, confirmed: Any, data: PaymentData) -> Result[PaymentResult, PaymentError]:
        match confirmed.status:
            case "succeeded":
                return Ok(
                    PaymentResult(
                        status=PaymentStatus.SUCCEEDED,
                        method=PaymentMethod.STRIPE,
                        payment_id=confirmed.id,
                        payer_email=data.customer_email,
                        payer_name=data.customer_name,
                    )
                )
            case "requires_action" | "requires_confirmation":
                return Error(
                    PaymentError(
                        PaymentErrorKind.REQUIRES_ACTION,
                        "Additional authentication is required",
                        client_secret=confirmed.client_secret,
                    )
                )
            case "canceled":
                return Error(PaymentErrors.cancelled())
            case "requires_payment_method":
                return Error(PaymentErrors.declined("Your card was declined"))
            case status:
                return Error(PaymentErrors.provider(f"Payment not completed (status: {status})"))


__all__ = ("StripeProvider", "intent_params")
