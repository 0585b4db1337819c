"""
Shipping rate client — one POST per quote, fallback on any failure.

Wire format is camelCase:

    POST /shipping/rates
    {"address": {"street1", "street2", "city", "state", "postalCode", "country"},
     "items": [{"name", "quantity", "price", "weight": {"value", "units"}}]}

    → {"success", "data": {"rates", "recommendedRate", "warning"}, "message"}
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any

import httpx
from kungfu import Error, Ok

from stitchcart._types import to_money
from stitchcart.lift import from_awaitable
from stitchcart.shipping._fallback import FallbackRates, fallback_response
from stitchcart.shipping._types import (
    ShippingAddress,
    ShippingError,
    ShippingErrorKind,
    ShippingItem,
    ShippingQuote,
    ShippingQuoteResponse,
    ShippingRate,
)

logger = logging.getLogger(__name__)

RATES_PATH = "/shipping/rates"


# ═══════════════════════════════════════════════════════════════════════════════
# Wire mapping
# ═══════════════════════════════════════════════════════════════════════════════


def _json_number(value: Decimal) -> float | int:
    return int(value) if value == value.to_integral_value() else float(value)


def request_to_wire(address: ShippingAddress, items: Iterable[ShippingItem]) -> dict[str, Any]:
    return {
        "address": {
            "street1": address.street1,
            "street2": address.street2 or "",
            "city": address.city,
            "state": address.state,
            "postalCode": address.postal_code,
            "country": address.country or "US",
        },
        "items": [
            {
                "name": item.name,
                "quantity": item.quantity,
                "price": _json_number(item.price),
                "weight": {
                    "value": _json_number(item.effective_weight.value),
                    "units": item.effective_weight.units.value,
                },
            }
            for item in items
        ],
    }


def rate_from_wire(raw: Mapping[str, Any]) -> ShippingRate:
    days = raw.get("estimatedDeliveryDays")
    return ShippingRate(
        service_name=str(raw["serviceName"]),
        service_code=str(raw["serviceCode"]),
        shipment_cost=to_money(raw.get("shipmentCost")),
        other_cost=to_money(raw.get("otherCost")),
        total_cost=to_money(raw.get("totalCost")),
        carrier=str(raw.get("carrier") or ""),
        estimated_delivery_days=int(days) if days is not None else None,
    )


def response_from_wire(body: Mapping[str, Any]) -> ShippingQuoteResponse:
    """Parse a response body. Raises KeyError/TypeError/ValueError when malformed."""
    data = body.get("data")
    quote = None
    if data is not None:
        recommended = data.get("recommendedRate")
        quote = ShippingQuote(
            rates=tuple(rate_from_wire(r) for r in data.get("rates") or ()),
            recommended_rate=rate_from_wire(recommended) if recommended else None,
            warning=data.get("warning"),
        )
    return ShippingQuoteResponse(
        success=bool(body.get("success")),
        data=quote,
        message=body.get("message"),
        error=body.get("error"),
    )


def _to_error(exc: Exception) -> ShippingError:
    match exc:
        case httpx.HTTPStatusError(response=response):
            return ShippingError(ShippingErrorKind.HTTP_STATUS, str(exc), response.status_code)
        case httpx.HTTPError():
            return ShippingError(ShippingErrorKind.TRANSPORT, str(exc))
        case _:
            return ShippingError(ShippingErrorKind.MALFORMED, f"{type(exc).__name__}: {exc}")


# ═══════════════════════════════════════════════════════════════════════════════
# Client
# ═══════════════════════════════════════════════════════════════════════════════


class ShippingRateClient:
    """
    Carrier quotes through the backend.

    Never raises for transport, status or parse failures: those are
    logged and answered with the fallback quote. No retry, no caching.

    Example:
        rates = ShippingRateClient(http)
        response = await rates.calculate_shipping_rates(address, items)
        rate = response.data.default_rate()
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        *,
        path: str = RATES_PATH,
        fallback: FallbackRates = FallbackRates.STANDARD_ONLY,
    ) -> None:
        self._http = http
        self._path = path
        self._fallback = fallback

    async def _post(self, payload: dict[str, Any]) -> ShippingQuoteResponse:
        response = await self._http.post(self._path, json=payload)
        response.raise_for_status()
        return response_from_wire(response.json())

    async def calculate_shipping_rates(
        self,
        address: ShippingAddress,
        items: Iterable[ShippingItem],
    ) -> ShippingQuoteResponse:
        payload = request_to_wire(address, items)

        result = await from_awaitable(lambda: self._post(payload), on_error=_to_error)

        match result:
            case Ok(response):
                return response
            case Error(err):
                logger.warning(
                    "shipping rates unavailable (%s%s), using estimated rates",
                    err.kind.name,
                    f" {err.status}" if err.status is not None else "",
                )
                return fallback_response(self._fallback)


__all__ = (
    "RATES_PATH",
    "request_to_wire",
    "rate_from_wire",
    "response_from_wire",
    "ShippingRateClient",
)
