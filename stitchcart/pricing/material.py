"""
Material pricing — what a patch of given size consumes.

Area materials:   width * height / (roll width * roll length) * cost * waste
Thread:           stitches / 1_000_000 * cost * waste
Bobbin:           stitches / length * (cost / 144) * waste

Each component is rounded half-up to cents, then summed and rounded again.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from stitchcart._types import ZERO, round_cents, to_money
from stitchcart.pricing._types import Dimensions, MaterialCosts, StyleOption


@dataclass(frozen=True, slots=True)
class Material:
    name: str
    cost: Decimal
    width: Decimal
    length: Decimal
    waste_factor: Decimal


FABRIC = Material("Fabric", Decimal("34"), Decimal("30"), Decimal("36"), Decimal("1.5"))
PATCH_ATTACH = Material("Patch Attach", Decimal("100"), Decimal("9"), Decimal("360"), Decimal("1.5"))
THREAD = Material("Thread", Decimal("4"), Decimal("0"), Decimal("5000"), Decimal("1.2"))
BOBBIN = Material("Bobbin", Decimal("50"), Decimal("0"), Decimal("35000"), Decimal("1.2"))
CUT_AWAY = Material("Cut-Away Stabilizer", Decimal("180"), Decimal("18"), Decimal("3600"), Decimal("1.5"))
WASH_AWAY = Material("Wash-Away Stabilizer", Decimal("60"), Decimal("15"), Decimal("900"), Decimal("1.5"))

MATERIALS = (FABRIC, PATCH_ATTACH, THREAD, BOBBIN, CUT_AWAY, WASH_AWAY)

STITCHES_PER_SQUARE_INCH = 1000


def _dec(value: float | int | Decimal) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def _area_cost(area: Decimal, m: Material) -> Decimal:
    # multiply before dividing so exact halves round half-up
    return round_cents(area * m.cost * m.waste_factor / (m.width * m.length))


def estimate_stitch_count(width: float, height: float) -> int:
    """Rough estimate for basic designs."""
    area = _dec(width) * _dec(height)
    return int((area * STITCHES_PER_SQUARE_INCH).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def calculate_material_costs(
    width: float,
    height: float,
    stitch_count: int | None = None,
) -> MaterialCosts:
    if width < 0 or height < 0:
        raise ValueError("patch dimensions must be non-negative")
    if stitch_count is None:
        stitch_count = estimate_stitch_count(width, height)

    area = _dec(width) * _dec(height)
    stitches = Decimal(stitch_count)

    fabric = _area_cost(area, FABRIC)
    patch_attach = _area_cost(area, PATCH_ATTACH)
    thread = round_cents(stitches * THREAD.cost * THREAD.waste_factor / Decimal(1_000_000))
    bobbin = round_cents(
        stitches * BOBBIN.cost * BOBBIN.waste_factor / (BOBBIN.length * Decimal(144))
    )
    cut_away = _area_cost(area, CUT_AWAY)
    wash_away = _area_cost(area, WASH_AWAY)

    return MaterialCosts(
        fabric=fabric,
        patch_attach=patch_attach,
        thread=thread,
        bobbin=bobbin,
        cut_away_stabilizer=cut_away,
        wash_away_stabilizer=wash_away,
        total=round_cents(fabric + patch_attach + thread + bobbin + cut_away + wash_away),
    )


def material_cost(dimensions: Dimensions) -> Decimal:
    """Total material cost, 0 for unmeasurable dimensions."""
    if not dimensions.is_measurable:
        return ZERO
    return calculate_material_costs(dimensions.width, dimensions.height).total


@dataclass(frozen=True, slots=True)
class MaterialQuote:
    material_costs: MaterialCosts
    options_price: Decimal
    total_price: Decimal


def calculate_total_price(
    width: float,
    height: float,
    options: Iterable[StyleOption],
) -> MaterialQuote:
    """Material costs plus selected option prices for a stand-alone patch."""
    costs = calculate_material_costs(width, height)
    options_price = sum((to_money(o.price) for o in options), ZERO)
    return MaterialQuote(
        material_costs=costs,
        options_price=options_price,
        total_price=round_cents(costs.total + options_price),
    )


def format_price(price: Decimal | float | str) -> str:
    return f"${round_cents(to_money(price)):.2f}"


__all__ = (
    "Material",
    "MATERIALS",
    "STITCHES_PER_SQUARE_INCH",
    "estimate_stitch_count",
    "calculate_material_costs",
    "material_cost",
    "MaterialQuote",
    "calculate_total_price",
    "format_price",
)
