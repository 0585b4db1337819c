"""
Payment dispatcher — select provider, validate, create, capture, normalize.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from kungfu import Error, Ok

from stitchcart.lift import from_awaitable
from stitchcart.payments._types import (
    PaymentData,
    PaymentError,
    PaymentErrorKind,
    PaymentErrors,
    PaymentMethod,
    PaymentProvider,
    PaymentResult,
    PaymentStatus,
)
from stitchcart.payments._validate import validate_payment_data

logger = logging.getLogger(__name__)

UNSUPPORTED_METHOD = "Unsupported payment method"


def result_from_error(method: PaymentMethod | None, err: PaymentError) -> PaymentResult:
    match err.kind:
        case PaymentErrorKind.CANCELLED:
            status = PaymentStatus.CANCELLED
        case PaymentErrorKind.REQUIRES_ACTION:
            status = PaymentStatus.REQUIRES_ACTION
        case _:
            status = PaymentStatus.FAILED
    return PaymentResult(
        status=status,
        method=method,
        error=err.message,
        client_secret=err.client_secret,
    )


class PaymentDispatcher:
    """
    Routes a payment to the provider registered for its method.

    process_payment never raises: validation problems, provider failures
    and unexpected exceptions all come back as a PaymentResult.

    Example:
        payments = PaymentDispatcher([StripeProvider(client), GooglePayProvider()])
        result = await payments.process_payment(PaymentMethod.STRIPE, data)
        if result.success: ...
    """

    def __init__(self, providers: Iterable[PaymentProvider]) -> None:
        self._providers: dict[PaymentMethod, PaymentProvider] = {p.method: p for p in providers}

    @property
    def methods(self) -> tuple[PaymentMethod, ...]:
        return tuple(self._providers)

    def supports(self, method: PaymentMethod) -> bool:
        return method in self._providers

    async def process_payment(
        self,
        method: PaymentMethod | str,
        data: PaymentData,
    ) -> PaymentResult:
        try:
            method = PaymentMethod(method)
        except ValueError:
            return PaymentResult(PaymentStatus.FAILED, None, error=UNSUPPORTED_METHOD)

        provider = self._providers.get(method)
        if provider is None:
            return PaymentResult(PaymentStatus.FAILED, method, error=UNSUPPORTED_METHOD)

        errors = validate_payment_data(data)
        if errors:
            return result_from_error(method, PaymentErrors.validation(errors))

        def crashed(exc: Exception) -> PaymentError:
            logger.exception("%s payment crashed", method.value, exc_info=exc)
            return PaymentErrors.provider(str(exc) or "Payment processing failed")

        outcome = await from_awaitable(lambda: self._run(provider, data), on_error=crashed)

        match outcome:
            case Ok(result):
                logger.info("%s payment finished: %s", method.value, result.status.value)
                return result
            case Error(err):
                return result_from_error(method, err)

    async def _run(self, provider: PaymentProvider, data: PaymentData) -> PaymentResult:
        match await provider.create_intent(data):
            case Error(err):
                return result_from_error(provider.method, err)
            case Ok(intent):
                pass

        match await provider.capture(intent, data):
            case Ok(result):
                return result
            case Error(err):
                return result_from_error(provider.method, err)


__all__ = (
    "UNSUPPORTED_METHOD",
    "result_from_error",
    "PaymentDispatcher",
)
