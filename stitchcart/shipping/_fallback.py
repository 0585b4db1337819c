"""
Fallback rates used when real carrier quotes are unavailable.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum, auto

from stitchcart.shipping._types import ShippingQuote, ShippingQuoteResponse, ShippingRate


STANDARD_RATE = ShippingRate.priced(
    "Standard Shipping", "standard", Decimal("9.99"), "USPS", estimated_delivery_days=5
)
EXPRESS_RATE = ShippingRate.priced(
    "Express Shipping", "express", Decimal("24.99"), "USPS", estimated_delivery_days=2
)

ESTIMATED_WARNING = "Using estimated rates. Actual shipping cost may vary."
ESTIMATED_MESSAGE = "Shipping rates calculated (estimated)"


class FallbackRates(Enum):
    """
    Which synthetic rates to offer.

    STANDARD_ONLY: the rate client's answer to a failed request.
    STANDARD_AND_EXPRESS: offered by checkout when the backend answers
                          but reports success=false.
    """

    STANDARD_ONLY = auto()
    STANDARD_AND_EXPRESS = auto()


def fallback_quote(variant: FallbackRates = FallbackRates.STANDARD_ONLY) -> ShippingQuote:
    rates = (STANDARD_RATE,)
    if variant is FallbackRates.STANDARD_AND_EXPRESS:
        rates = (STANDARD_RATE, EXPRESS_RATE)
    return ShippingQuote(rates=rates, recommended_rate=STANDARD_RATE, warning=ESTIMATED_WARNING)


def fallback_response(variant: FallbackRates = FallbackRates.STANDARD_ONLY) -> ShippingQuoteResponse:
    return ShippingQuoteResponse(
        success=True,
        data=fallback_quote(variant),
        message=ESTIMATED_MESSAGE,
        estimated=True,
    )


__all__ = (
    "STANDARD_RATE",
    "EXPRESS_RATE",
    "ESTIMATED_WARNING",
    "ESTIMATED_MESSAGE",
    "FallbackRates",
    "fallback_quote",
    "fallback_response",
)
