"""
Google Pay placeholder.
"""

from __future__ import annotations

from kungfu import Error, Result

from stitchcart.payments._types import (
    PaymentData,
    PaymentError,
    PaymentErrors,
    PaymentIntent,
    PaymentMethod,
    PaymentResult,
)

NOT_AVAILABLE = "Google Pay is not available yet. Please pay by card or PayPal."


class GooglePayProvider:
    """Selectable in checkout, always answers "not available"."""

    @property
    def method(self) -> PaymentMethod:
        return PaymentMethod.GOOGLE

    async def create_intent(self, data: PaymentData) -> Result[PaymentIntent, PaymentError]:
        return Error(PaymentErrors.unavailable(NOT_AVAILABLE))

    async def capture(
        self,
        intent: PaymentIntent,
        data: PaymentData,
    ) -> Result[PaymentResult, PaymentError]:
        return Error(PaymentErrors.unavailable(NOT_AVAILABLE))


__all__ = ("GooglePayProvider", "NOT_AVAILABLE")
