import json

import httpx
import pytest
from kungfu import Error, Ok

from stitchcart import pricing as P
from stitchcart.cart import (
    CART_KEY,
    IN_STOCK,
    ApiStockValidator,
    Cart,
    CartErrorKind,
    CartItem,
    StockCheck,
)
from stitchcart.catalog import ProductId
from stitchcart.storage import MemoryStorage

from tests._infra import run
from tests.fake_backend import BASE_URL, FakeBackend


def logo() -> P.Customization:
    return P.Customization(
        selection=P.SingleDesign(
            P.Design("logo.png", 2048),
            P.SelectedStyles(coverage=P.StyleOption("full", "Full", "3.00")),
        ),
        placement=P.Placement.LEFT_CHEST,
        position=P.Position(100, 120),
    )


def test_uncustomized_adds_merge() -> None:
    async def main() -> Cart:
        cart = Cart(MemoryStorage())
        await cart.add("5", 2)
        await cart.add(5, 1)
        return cart

    cart = run(main())
    assert cart.items == (CartItem("5", 3),)
    assert cart.count == 3


def test_customized_lines_never_merge() -> None:
    async def main() -> Cart:
        cart = Cart(MemoryStorage())
        await cart.add("5", 1)
        await cart.add("5", 1, logo())
        await cart.add("5", 1, logo())
        await cart.add("5", 1)
        return cart

    cart = run(main())
    assert [i.quantity for i in cart.items] == [2, 1, 1]
    assert [i.is_customized for i in cart.items] == [False, True, True]


def test_invalid_quantity_is_rejected() -> None:
    async def main():
        cart = Cart(MemoryStorage())
        return cart, await cart.add("5", 0)

    cart, result = run(main())
    match result:
        case Error(err):
            assert err.kind is CartErrorKind.INVALID_QUANTITY
        case Ok(_):
            pytest.fail("zero quantity accepted")
    assert cart.is_empty


def test_cart_item_validates_quantity() -> None:
    with pytest.raises(ValueError):
        CartItem("5", 0)
    with pytest.raises(TypeError):
        CartItem("5", True)


def test_remove_and_update() -> None:
    async def main():
        cart = Cart(MemoryStorage())
        await cart.add("5", 1)
        await cart.add("5", 1, logo())
        await cart.add("7", 4)
        updated = await cart.update("5", 3)
        removed = await cart.remove("7")
        missing = await cart.update("7", 1)
        return cart, updated, removed, missing

    cart, updated, removed, missing = run(main())

    match updated:
        case Ok(lines):
            assert [line.quantity for line in lines] == [3, 3]
        case Error(err):
            pytest.fail(err.message)
    assert removed == 1
    match missing:
        case Error(err):
            assert err.kind is CartErrorKind.NOT_IN_CART
        case Ok(_):
            pytest.fail("updated a product that is not in the cart")
    assert {i.product_id for i in cart.items} == {ProductId.of(5)}


def test_cart_round_trips_through_storage() -> None:
    storage = MemoryStorage()

    async def main() -> Cart:
        cart = Cart(storage)
        await cart.add("5", 2)
        await cart.add("hoodie", 1, logo())
        return await Cart.load(storage)

    restored = run(main())
    assert restored.items[0] == CartItem("5", 2)
    assert restored.items[1].customization == logo()
    assert isinstance(json.loads(storage.snapshot()[CART_KEY]), list)


def test_corrupt_cart_loads_empty() -> None:
    storage = MemoryStorage({CART_KEY: '[{"quantity": "lots"}]'})
    assert run(Cart.load(storage)).is_empty


def test_clear_persists_empty_cart() -> None:
    storage = MemoryStorage()

    async def main() -> Cart:
        cart = Cart(storage)
        await cart.add("5", 2)
        await cart.clear()
        return await Cart.load(storage)

    assert run(main()).is_empty
    assert json.loads(storage.snapshot()[CART_KEY]) == []


# ═══════════════════════════════════════════════════════════════════════════════
# Stock
# ═══════════════════════════════════════════════════════════════════════════════


def test_stock_validator_can_reject_add() -> None:
    async def only_two(product_id: ProductId, quantity: int) -> StockCheck:
        return IN_STOCK if quantity <= 2 else StockCheck(False, "Only 2 items available in stock")

    async def main():
        cart = Cart(MemoryStorage(), stock=only_two)
        ok = await cart.add("5", 2)
        too_many = await cart.add("5", 3)
        return cart, ok, too_many

    cart, ok, too_many = run(main())
    assert isinstance(ok, Ok)
    match too_many:
        case Error(err):
            assert err.kind is CartErrorKind.OUT_OF_STOCK
            assert err.message == "Only 2 items available in stock"
        case Ok(_):
            pytest.fail("stock check ignored")
    assert cart.count == 2


def test_api_stock_validator_messages() -> None:
    backend = FakeBackend(stock={"5": 3, "7": 0})

    async def main() -> list[StockCheck]:
        async with httpx.AsyncClient(transport=backend.transport(), base_url=BASE_URL) as http:
            check = ApiStockValidator(http)
            return [
                await check(ProductId.of(5), 2),
                await check(ProductId.of(5), 4),
                await check(ProductId.of(7), 1),
                await check(ProductId.of(404), 1),
            ]

    enough, short, empty, unknown = run(main())
    assert enough == IN_STOCK
    assert short.message == "Only 3 items available in stock"
    assert empty.message == "This product is out of stock"
    assert unknown == StockCheck(False, "Unable to verify stock availability")
