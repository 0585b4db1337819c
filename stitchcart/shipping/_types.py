"""
Shipping types — addresses, parcels and carrier quotes.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum, auto


# ═══════════════════════════════════════════════════════════════════════════════
# Request
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ShippingAddress:
    street1: str
    city: str
    state: str
    postal_code: str
    country: str = "US"
    street2: str = ""


class WeightUnit(Enum):
    OUNCES = "ounces"
    POUNDS = "pounds"
    GRAMS = "grams"


@dataclass(frozen=True, slots=True)
class Weight:
    value: Decimal
    units: WeightUnit = WeightUnit.OUNCES


DEFAULT_ITEM_WEIGHT = Weight(Decimal("8"), WeightUnit.OUNCES)


@dataclass(frozen=True, slots=True)
class ShippingItem:
    id: str
    name: str
    quantity: int
    price: Decimal
    weight: Weight | None = None

    @property
    def effective_weight(self) -> Weight:
        return self.weight if self.weight is not None else DEFAULT_ITEM_WEIGHT


# ═══════════════════════════════════════════════════════════════════════════════
# Response
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ShippingRate:
    service_name: str
    service_code: str
    shipment_cost: Decimal
    other_cost: Decimal
    total_cost: Decimal
    carrier: str
    estimated_delivery_days: int | None = None

    @classmethod
    def priced(
        cls,
        service_name: str,
        service_code: str,
        shipment_cost: Decimal,
        carrier: str,
        estimated_delivery_days: int | None = None,
        other_cost: Decimal = Decimal("0"),
    ) -> ShippingRate:
        """Rate whose total is shipment + other."""
        return cls(
            service_name=service_name,
            service_code=service_code,
            shipment_cost=shipment_cost,
            other_cost=other_cost,
            total_cost=shipment_cost + other_cost,
            carrier=carrier,
            estimated_delivery_days=estimated_delivery_days,
        )


@dataclass(frozen=True, slots=True)
class ShippingQuote:
    rates: tuple[ShippingRate, ...]
    recommended_rate: ShippingRate | None = None
    warning: str | None = None

    def default_rate(self) -> ShippingRate | None:
        """Recommended rate, else the first one."""
        if self.recommended_rate is not None:
            return self.recommended_rate
        return self.rates[0] if self.rates else None


@dataclass(frozen=True, slots=True)
class ShippingQuoteResponse:
    """
    Outcome of one rate request.

    estimated=True marks a locally synthesized fallback.
    """

    success: bool
    data: ShippingQuote | None = None
    message: str | None = None
    error: str | None = None
    estimated: bool = False


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


class ShippingErrorKind(Enum):
    TRANSPORT = auto()
    HTTP_STATUS = auto()
    MALFORMED = auto()


@dataclass(frozen=True, slots=True)
class ShippingError:
    kind: ShippingErrorKind
    message: str
    status: int | None = None


__all__ = (
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
)
