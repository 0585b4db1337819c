"""
Pricing calculator — effective unit price of a cart line.

    unit = base product price
         + Σ per design: material cost (if measurable) + single-selects + threads + upgrades

Pure: inputs are never mutated and the same inputs give the same price.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from decimal import Decimal
from typing import Protocol

from stitchcart._types import ZERO, to_money
from stitchcart.catalog import CUSTOM_EMBROIDERY_ID, Catalog, ProductId
from stitchcart.pricing._policy import DEFAULT_POLICY, LegacyDesignCost, Policy
from stitchcart.pricing._types import (
    Customization,
    MultipleDesigns,
    PricingBreakdown,
    SingleDesign,
)
from stitchcart.pricing.material import material_cost

logger = logging.getLogger(__name__)


class Line(Protocol):
    """Anything priced like a cart line."""

    @property
    def product_id(self) -> ProductId: ...

    @property
    def customization(self) -> Customization | None: ...


class QuantifiedLine(Line, Protocol):
    @property
    def quantity(self) -> int: ...


_NOTHING = PricingBreakdown(ZERO, ZERO, ZERO, ZERO)


def _custom_embroidery(custom: Customization) -> PricingBreakdown | None:
    data = custom.embroidery_data
    if data is None:
        return None
    total = max(to_money(data.total_price), ZERO)
    material = data.material_costs.total if data.material_costs is not None else ZERO
    return PricingBreakdown(
        base_product_price=ZERO,
        embroidery_price=material,
        embroidery_options_price=to_money(data.options_price),
        total_price=total,
    )


def pricing_breakdown(
    item: Line,
    catalog: Catalog,
    policy: Policy = DEFAULT_POLICY,
) -> PricingBreakdown:
    """
    Split a line's unit price into base, embroidery (material) and options.

    Unknown products price at 0 and are logged; nothing here raises
    for missing optional style data.
    """
    custom = item.customization

    if item.product_id == CUSTOM_EMBROIDERY_ID and custom is not None:
        breakdown = _custom_embroidery(custom)
        if breakdown is not None:
            return breakdown

    product = catalog.find(item.product_id)
    if product is None:
        logger.warning("no catalog entry for product %s, pricing at 0", item.product_id)
        return _NOTHING

    embroidery = ZERO
    options = ZERO

    match custom.selection if custom is not None else None:
        case MultipleDesigns(designs=designs):
            for design in designs:
                if design.total_price:
                    embroidery += to_money(design.total_price)
                    continue
                embroidery += material_cost(design.dimensions)
                options += design.selected_styles.options_price()
        case SingleDesign(selected_styles=styles, dimensions=dimensions):
            options += styles.options_price()
            if policy.legacy_design_cost is LegacyDesignCost.INCLUDE_MATERIAL and dimensions is not None:
                embroidery += material_cost(dimensions)
        case None:
            pass

    return PricingBreakdown(
        base_product_price=product.price,
        embroidery_price=embroidery,
        embroidery_options_price=options,
        total_price=max(product.price + embroidery + options, ZERO),
    )


def item_price(item: Line, catalog: Catalog, policy: Policy = DEFAULT_POLICY) -> Decimal:
    """Non-negative unit price of a line."""
    return pricing_breakdown(item, catalog, policy).total_price


def line_total(item: QuantifiedLine, catalog: Catalog, policy: Policy = DEFAULT_POLICY) -> Decimal:
    return item_price(item, catalog, policy) * item.quantity


def subtotal(
    items: Iterable[QuantifiedLine],
    catalog: Catalog,
    policy: Policy = DEFAULT_POLICY,
) -> Decimal:
    return sum((line_total(i, catalog, policy) for i in items), ZERO)


__all__ = (
    "Line",
    "QuantifiedLine",
    "pricing_breakdown",
    "item_price",
    "line_total",
    "subtotal",
)
