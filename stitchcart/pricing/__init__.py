"""
Pricing — unit price of customized cart lines.

    from stitchcart import pricing as P

    price = P.item_price(item, catalog)
    parts = P.pricing_breakdown(item, catalog)

    # price legacy single designs with material cost too
    P.item_price(item, catalog, P.Policy().with_legacy_design_cost(P.INCLUDE_MATERIAL))
"""

from stitchcart.pricing._types import (
    StyleOption,
    SelectedStyles,
    Dimensions,
    Position,
    Placement,
    PLACEMENT_POSITIONS,
    position_for,
    Design,
    PlacedDesign,
    SingleDesign,
    MultipleDesigns,
    DesignSelection,
    ReviewStatus,
    MaterialCosts,
    EmbroideryData,
    Customization,
    PricingBreakdown,
)
from stitchcart.pricing._policy import (
    LegacyDesignCost,
    SKIP_MATERIAL,
    INCLUDE_MATERIAL,
    Policy,
    DEFAULT_POLICY,
)
from stitchcart.pricing._calc import (
    Line,
    QuantifiedLine,
    pricing_breakdown,
    item_price,
    line_total,
    subtotal,
)
from stitchcart.pricing import material

__all__ = (
    # Types
    "StyleOption",
    "SelectedStyles",
    "Dimensions",
    "Position",
    "Placement",
    "PLACEMENT_POSITIONS",
    "position_for",
    "Design",
    "PlacedDesign",
    "SingleDesign",
    "MultipleDesigns",
    "DesignSelection",
    "ReviewStatus",
    "MaterialCosts",
    "EmbroideryData",
    "Customization",
    "PricingBreakdown",
    # Policy
    "LegacyDesignCost",
    "SKIP_MATERIAL",
    "INCLUDE_MATERIAL",
    "Policy",
    "DEFAULT_POLICY",
    # Calculator
    "Line",
    "QuantifiedLine",
    "pricing_breakdown",
    "item_price",
    "line_total",
    "subtotal",
    "material",
)
