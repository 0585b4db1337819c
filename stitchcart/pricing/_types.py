"""
Pricing types — embroidery customization records.

A customization selects exactly one of:
    SingleDesign      one uploaded design, styles chosen at item level
    MultipleDesigns   several placed designs, each with its own styles
"""

from dataclasses import dataclass, field, replace
from decimal import Decimal
from enum import Enum
from typing import Literal

from stitchcart._types import ZERO, to_money


# ═══════════════════════════════════════════════════════════════════════════════
# Styles
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class StyleOption:
    """One selectable embroidery option. Price is coerced, garbage → 0."""

    id: int | str
    name: str
    price: Decimal = ZERO

    def __post_init__(self) -> None:
        object.__setattr__(self, "price", to_money(self.price))


@dataclass(frozen=True, slots=True)
class SelectedStyles:
    """
    Style choices for one design.

    Single-select categories hold at most one option;
    threads and upgrades hold any number.
    """

    coverage: StyleOption | None = None
    material: StyleOption | None = None
    border: StyleOption | None = None
    backing: StyleOption | None = None
    cutting: StyleOption | None = None
    threads: tuple[StyleOption, ...] = ()
    upgrades: tuple[StyleOption, ...] = ()

    def single_selects(self) -> tuple[StyleOption, ...]:
        return tuple(
            o
            for o in (self.coverage, self.material, self.border, self.backing, self.cutting)
            if o is not None
        )

    def options(self) -> tuple[StyleOption, ...]:
        return (*self.single_selects(), *self.threads, *self.upgrades)

    def options_price(self) -> Decimal:
        return sum((o.price for o in self.options()), ZERO)


# ═══════════════════════════════════════════════════════════════════════════════
# Geometry
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Dimensions:
    """Patch size in inches."""

    width: float
    height: float

    @property
    def is_measurable(self) -> bool:
        return self.width > 0 and self.height > 0


@dataclass(frozen=True, slots=True)
class Position:
    x: float
    y: float


class Placement(Enum):
    FRONT = "front"
    BACK = "back"
    LEFT_CHEST = "left-chest"
    RIGHT_CHEST = "right-chest"
    SLEEVE = "sleeve"
    MANUAL = "manual"


PLACEMENT_POSITIONS: dict[Placement, Position] = {
    Placement.FRONT: Position(150, 120),
    Placement.BACK: Position(150, 120),
    Placement.LEFT_CHEST: Position(100, 120),
    Placement.RIGHT_CHEST: Position(200, 120),
    Placement.SLEEVE: Position(50, 200),
}


def position_for(placement: Placement, current: Position | None = None) -> Position:
    """
    Canvas position for a placement.

    MANUAL keeps the dragged position (origin when there is none yet).
    """
    if placement is Placement.MANUAL:
        return current if current is not None else Position(0, 0)
    return PLACEMENT_POSITIONS[placement]


# ═══════════════════════════════════════════════════════════════════════════════
# Designs
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Design:
    """Uploaded artwork metadata."""

    name: str
    size: int
    preview: str = ""


@dataclass(frozen=True, slots=True)
class PlacedDesign:
    """One design on a multi-design item."""

    id: str
    name: str
    dimensions: Dimensions
    selected_styles: SelectedStyles = field(default_factory=SelectedStyles)
    placement: Placement = Placement.FRONT
    position: Position = field(default_factory=lambda: PLACEMENT_POSITIONS[Placement.FRONT])
    scale: float = 1.0
    rotation: float = 0.0
    notes: str = ""
    total_price: Decimal | None = None
    """Precomputed price; when set it replaces material + styles."""

    def with_placement(self, placement: Placement) -> "PlacedDesign":
        return replace(self, placement=placement, position=position_for(placement, self.position))

    def dragged_to(self, position: Position) -> "PlacedDesign":
        return replace(self, placement=Placement.MANUAL, position=position)


@dataclass(frozen=True, slots=True)
class SingleDesign:
    design: Design
    selected_styles: SelectedStyles = field(default_factory=SelectedStyles)
    dimensions: Dimensions | None = None
    kind: Literal["single"] = "single"


@dataclass(frozen=True, slots=True)
class MultipleDesigns:
    designs: tuple[PlacedDesign, ...]
    kind: Literal["multiple"] = "multiple"

    def __post_init__(self) -> None:
        if not self.designs:
            raise ValueError("MultipleDesigns needs at least one design")


type DesignSelection = SingleDesign | MultipleDesigns


# ═══════════════════════════════════════════════════════════════════════════════
# Embroidery Data
# ═══════════════════════════════════════════════════════════════════════════════


class ReviewStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass(frozen=True, slots=True)
class MaterialCosts:
    fabric: Decimal
    patch_attach: Decimal
    thread: Decimal
    bobbin: Decimal
    cut_away_stabilizer: Decimal
    wash_away_stabilizer: Decimal
    total: Decimal


@dataclass(frozen=True, slots=True)
class EmbroideryData:
    """Derived pricing of a stand-alone custom embroidery request."""

    material_costs: MaterialCosts | None
    options_price: Decimal
    total_price: Decimal
    review_status: ReviewStatus = ReviewStatus.PENDING


# ═══════════════════════════════════════════════════════════════════════════════
# Customization
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Customization:
    """
    Immutable customization attached to a cart line.

    Changing placement recomputes position unless the placement is MANUAL.
    """

    selection: SingleDesign | MultipleDesigns
    placement: Placement = Placement.FRONT
    position: Position = field(default_factory=lambda: PLACEMENT_POSITIONS[Placement.FRONT])
    scale: float = 1.0
    rotation: float = 0.0
    size: str = ""
    color: str = ""
    notes: str = ""
    embroidery_data: EmbroideryData | None = None

    @property
    def designs(self) -> tuple[PlacedDesign, ...]:
        match self.selection:
            case MultipleDesigns(designs=designs):
                return designs
            case _:
                return ()

    def with_placement(self, placement: Placement) -> "Customization":
        return replace(self, placement=placement, position=position_for(placement, self.position))

    def dragged_to(self, position: Position) -> "Customization":
        return replace(self, placement=Placement.MANUAL, position=position)


# ═══════════════════════════════════════════════════════════════════════════════
# Breakdown
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PricingBreakdown:
    """Derived unit price parts. Never persisted with the cart."""

    base_product_price: Decimal
    embroidery_price: Decimal
    embroidery_options_price: Decimal
    total_price: Decimal


__all__ = (
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
)
