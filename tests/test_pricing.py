from decimal import Decimal

import pytest

from stitchcart import pricing as P
from stitchcart.cart import CartItem
from stitchcart.catalog import CUSTOM_EMBROIDERY_ID
from stitchcart.pricing import material as M

from tests._infra import make_catalog

catalog = make_catalog()


def opt(name: str, price) -> P.StyleOption:
    return P.StyleOption(id=name, name=name, price=price)


def single(styles: P.SelectedStyles, dimensions: P.Dimensions | None = None) -> P.Customization:
    return P.Customization(
        selection=P.SingleDesign(P.Design("logo.png", 2048), styles, dimensions),
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Style options
# ═══════════════════════════════════════════════════════════════════════════════


def test_style_option_price_is_coerced() -> None:
    assert opt("a", 2.5).price == Decimal("2.5")
    assert opt("b", "3.10").price == Decimal("3.10")
    assert opt("c", None).price == Decimal("0")
    assert opt("d", "n/a").price == Decimal("0")
    assert opt("e", float("nan")).price == Decimal("0")


@pytest.mark.parametrize("pid", ["5", 5])
def test_uncustomized_price_equals_product_price(pid) -> None:
    item = CartItem(pid, 2)
    assert P.item_price(item, catalog) == Decimal("20.00")
    assert P.line_total(item, catalog) == Decimal("40.00")


def test_single_selects_are_summed() -> None:
    styles = P.SelectedStyles(
        coverage=opt("full", "3.00"),
        material=opt("twill", "1.50"),
        border=opt("merrow", "2.00"),
        backing=opt("iron-on", "0.75"),
        cutting=opt("laser", "1.25"),
    )
    item = CartItem("5", 1, single(styles))
    assert P.item_price(item, catalog) == Decimal("28.50")


def test_threads_and_upgrades_count_once_in_any_order() -> None:
    threads = (opt("red", "0.50"), opt("gold", "1.00"), opt("silver", "1.00"))
    upgrades = (opt("3d-puff", "4.00"), opt("glow", "2.25"))

    forward = CartItem("5", 1, single(P.SelectedStyles(threads=threads, upgrades=upgrades)))
    backward = CartItem("5", 1, single(P.SelectedStyles(threads=threads[::-1], upgrades=upgrades[::-1])))

    assert P.item_price(forward, catalog) == Decimal("28.75")
    assert P.item_price(backward, catalog) == P.item_price(forward, catalog)


def test_pricing_is_idempotent() -> None:
    item = CartItem("5", 3, single(P.SelectedStyles(coverage=opt("full", "3.00"))))
    first = P.pricing_breakdown(item, catalog)
    second = P.pricing_breakdown(item, catalog)
    assert first == second
    assert item.customization.selection.selected_styles.coverage.price == Decimal("3.00")


def test_unknown_product_prices_at_zero() -> None:
    assert P.item_price(CartItem("999", 1), catalog) == Decimal("0")


# ═══════════════════════════════════════════════════════════════════════════════
# Designs
# ═══════════════════════════════════════════════════════════════════════════════


def test_multi_design_adds_material_and_styles() -> None:
    designs = P.MultipleDesigns((
        P.PlacedDesign("d1", "front logo", P.Dimensions(2, 3), P.SelectedStyles(coverage=opt("full", "3.00"))),
        P.PlacedDesign("d2", "sleeve text", P.Dimensions(0, 0), P.SelectedStyles(threads=(opt("red", "0.50"),))),
    ))
    item = CartItem("5", 1, P.Customization(selection=designs))

    parts = P.pricing_breakdown(item, catalog)

    assert parts.base_product_price == Decimal("20.00")
    assert parts.embroidery_price == Decimal("0.73")
    assert parts.embroidery_options_price == Decimal("3.50")
    assert parts.total_price == Decimal("24.23")


def test_precomputed_design_total_is_used_as_is() -> None:
    designs = P.MultipleDesigns((
        P.PlacedDesign(
            "d1", "logo", P.Dimensions(2, 3),
            P.SelectedStyles(coverage=opt("full", "3.00")),
            total_price=Decimal("12.00"),
        ),
    ))
    item = CartItem("5", 1, P.Customization(selection=designs))
    assert P.item_price(item, catalog) == Decimal("32.00")


def test_legacy_single_design_skips_material_by_default() -> None:
    item = CartItem("5", 1, single(P.SelectedStyles(), P.Dimensions(2, 3)))

    assert P.item_price(item, catalog) == Decimal("20.00")

    policy = P.Policy().with_legacy_design_cost(P.INCLUDE_MATERIAL)
    assert P.item_price(item, catalog, policy) == Decimal("20.73")


def test_custom_embroidery_prices_from_embroidery_data() -> None:
    costs = M.calculate_material_costs(2, 3)
    custom = P.Customization(
        selection=P.SingleDesign(P.Design("patch.png", 100)),
        embroidery_data=P.EmbroideryData(
            material_costs=costs,
            options_price=Decimal("4.00"),
            total_price=Decimal("4.73"),
        ),
    )
    parts = P.pricing_breakdown(CartItem(CUSTOM_EMBROIDERY_ID, 1, custom), catalog)

    assert parts.base_product_price == Decimal("0")
    assert parts.embroidery_price == Decimal("0.73")
    assert parts.embroidery_options_price == Decimal("4.00")
    assert parts.total_price == Decimal("4.73")


def test_subtotal_sums_line_totals() -> None:
    items = [CartItem("5", 2), CartItem("7", 1)]
    assert P.subtotal(items, catalog) == Decimal("55.50")


# ═══════════════════════════════════════════════════════════════════════════════
# Placement
# ═══════════════════════════════════════════════════════════════════════════════


def test_placement_recomputes_position() -> None:
    custom = single(P.SelectedStyles())
    moved = custom.with_placement(P.Placement.LEFT_CHEST)
    assert moved.position == P.Position(100, 120)
    assert moved.with_placement(P.Placement.SLEEVE).position == P.Position(50, 200)


def test_manual_placement_keeps_dragged_position() -> None:
    custom = single(P.SelectedStyles()).dragged_to(P.Position(42, 17))
    assert custom.placement is P.Placement.MANUAL
    assert custom.with_placement(P.Placement.MANUAL).position == P.Position(42, 17)
    assert custom.with_placement(P.Placement.BACK).position == P.Position(150, 120)


def test_multiple_designs_needs_at_least_one() -> None:
    with pytest.raises(ValueError):
        P.MultipleDesigns(())


# ═══════════════════════════════════════════════════════════════════════════════
# Material
# ═══════════════════════════════════════════════════════════════════════════════


def test_material_costs_for_two_by_three_patch() -> None:
    costs = M.calculate_material_costs(2, 3)

    assert costs.fabric == Decimal("0.28")
    assert costs.patch_attach == Decimal("0.28")
    assert costs.thread == Decimal("0.03")
    assert costs.bobbin == Decimal("0.07")
    assert costs.cut_away_stabilizer == Decimal("0.03")
    assert costs.wash_away_stabilizer == Decimal("0.04")
    assert costs.total == Decimal("0.73")


def test_stitch_count_is_estimated_from_area() -> None:
    assert M.estimate_stitch_count(2, 3) == 6000
    assert M.estimate_stitch_count(0.5, 0.5) == 250
    assert M.calculate_material_costs(2, 3, stitch_count=6000) == M.calculate_material_costs(2, 3)


def test_unmeasurable_dimensions_cost_nothing() -> None:
    assert M.material_cost(P.Dimensions(0, 3)) == Decimal("0")


def test_negative_dimensions_raise() -> None:
    with pytest.raises(ValueError):
        M.calculate_material_costs(-1, 2)


def test_total_price_adds_options() -> None:
    quote = M.calculate_total_price(2, 3, [opt("full", "3.00"), opt("gold", 1)])
    assert quote.options_price == Decimal("4.00")
    assert quote.total_price == Decimal("4.73")
    assert M.format_price(quote.total_price) == "$4.73"
