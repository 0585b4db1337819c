"""
Pricing policy — behavior configuration.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum, auto


class LegacyDesignCost(Enum):
    """
    How a single-design (legacy) customization is priced.

    SKIP_MATERIAL: styles only, material cost is never added.
                   This is what carts priced before multi-design
                   support were charged, so it stays the default.

    INCLUDE_MATERIAL: add material cost from the design dimensions,
                      same as every placed design of a multi-design item.
    """

    SKIP_MATERIAL = auto()
    INCLUDE_MATERIAL = auto()


SKIP_MATERIAL = LegacyDesignCost.SKIP_MATERIAL
INCLUDE_MATERIAL = LegacyDesignCost.INCLUDE_MATERIAL


@dataclass(frozen=True, slots=True)
class Policy:
    """
    Pricing policy configuration.

    Example:
        policy = Policy().with_legacy_design_cost(INCLUDE_MATERIAL)
    """

    legacy_design_cost: LegacyDesignCost = LegacyDesignCost.SKIP_MATERIAL

    def with_legacy_design_cost(self, mode: LegacyDesignCost) -> Policy:
        return replace(self, legacy_design_cost=mode)


DEFAULT_POLICY = Policy()


__all__ = (
    "LegacyDesignCost",
    "SKIP_MATERIAL",
    "INCLUDE_MATERIAL",
    "Policy",
    "DEFAULT_POLICY",
)
