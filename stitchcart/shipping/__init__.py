"""
Shipping — carrier quotes with graceful degradation.

    from stitchcart import shipping as Sh

    client = Sh.ShippingRateClient(http)
    response = await client.calculate_shipping_rates(address, items)
    if response.estimated:
        print(response.data.warning)

Failures never raise; they come back as Sh.fallback_response().
"""

from stitchcart.shipping._types import (
    ShippingAddress,
    WeightUnit,
    Weight,
    DEFAULT_ITEM_WEIGHT,
    ShippingItem,
    ShippingRate,
    ShippingQuote,
    ShippingQuoteResponse,
    ShippingErrorKind,
    ShippingError,
)
from stitchcart.shipping._fallback import (
    STANDARD_RATE,
    EXPRESS_RATE,
    ESTIMATED_WARNING,
    ESTIMATED_MESSAGE,
    FallbackRates,
    fallback_quote,
    fallback_response,
)
from stitchcart.shipping._client import (
    RATES_PATH,
    request_to_wire,
    rate_from_wire,
    response_from_wire,
    ShippingRateClient,
)

__all__ = (
    # Types
    "ShippingAddress",
    "WeightUnit",
    "Weight",
    "DEFAULT_ITEM_WEIGHT",
    "ShippingItem",
    "ShippingRate",
    "ShippingQuote",
    "ShippingQuoteResponse",
    "ShippingErrorKind",
    "ShippingError",
    # Fallback
    "STANDARD_RATE",
    "EXPRESS_RATE",
    "ESTIMATED_WARNING",
    "ESTIMATED_MESSAGE",
    "FallbackRates",
    "fallback_quote",
    "fallback_response",
    # Client
    "RATES_PATH",
    "request_to_wire",
    "rate_from_wire",
    "response_from_wire",
    "ShippingRateClient",
)
