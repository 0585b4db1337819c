"""
Cart — persisted list of cart lines.

Every mutation writes the whole cart back under CART_KEY.
"""

from __future__ import annotations

import logging

from kungfu import Error, Ok, Result

from stitchcart.cart._types import (
    CART_KEY,
    CartError,
    CartErrors,
    CartItem,
    StockValidator,
)
from stitchcart.catalog import ProductId
from stitchcart.pricing import Customization
from stitchcart.storage import JsonCodec, Storage

logger = logging.getLogger(__name__)

_codec: JsonCodec[list[CartItem]] = JsonCodec(list[CartItem])


class Cart:
    """
    Shopping cart over a Storage backend.

    Example:
        cart = await Cart.load(storage)
        await cart.add("5", 2)
        await cart.add("5", 1, customization)  # separate line, never merged
    """

    def __init__(
        self,
        storage: Storage,
        items: list[CartItem] | None = None,
        *,
        key: str = CART_KEY,
        stock: StockValidator | None = None,
    ) -> None:
        self._storage = storage
        self._items: list[CartItem] = list(items or [])
        self._key = key
        self._stock = stock

    @classmethod
    async def load(
        cls,
        storage: Storage,
        *,
        key: str = CART_KEY,
        stock: StockValidator | None = None,
    ) -> Cart:
        """Restore from storage; a missing or corrupt document yields an empty cart."""
        items = await _codec.load(storage, key) or []
        return cls(storage, items, key=key, stock=stock)

    @property
    def items(self) -> tuple[CartItem, ...]:
        return tuple(self._items)

    @property
    def count(self) -> int:
        """Total units across lines."""
        return sum(i.quantity for i in self._items)

    @property
    def is_empty(self) -> bool:
        return not self._items

    async def _check_stock(self, product_id: ProductId, quantity: int) -> CartError | None:
        if self._stock is None:
            return None
        check = await self._stock(product_id, quantity)
        if check.valid:
            return None
        return CartErrors.out_of_stock(check.message)

    async def _save(self) -> None:
        await _codec.save(self._storage, self._key, self._items)

    async def add(
        self,
        product_id: ProductId | str | int,
        quantity: int = 1,
        customization: Customization | None = None,
    ) -> Result[CartItem, CartError]:
        """
        Add a line.

        Customized lines are always appended; an uncustomized add merges
        into the existing uncustomized line of the same product.
        """
        pid = ProductId.of(product_id)
        if quantity < 1:
            return Error(CartErrors.invalid_quantity(quantity))
        if (err := await self._check_stock(pid, quantity)) is not None:
            return Error(err)

        for index, line in enumerate(self._items):
            if line.merges_with(pid, customization):
                merged = line.with_quantity(line.quantity + quantity)
                self._items[index] = merged
                await self._save()
                return Ok(merged)

        item = CartItem(pid, quantity, customization)
        self._items.append(item)
        await self._save()
        return Ok(item)

    async def remove(self, product_id: ProductId | str | int) -> int:
        """Drop every line of a product. Returns lines removed."""
        pid = ProductId.of(product_id)
        before = len(self._items)
        self._items = [i for i in self._items if i.product_id != pid]
        removed = before - len(self._items)
        if removed:
            await self._save()
        return removed

    async def update(
        self,
        product_id: ProductId | str | int,
        quantity: int,
    ) -> Result[tuple[CartItem, ...], CartError]:
        """Set quantity on every line of a product."""
        pid = ProductId.of(product_id)
        if quantity < 1:
            return Error(CartErrors.invalid_quantity(quantity))
        if not any(i.product_id == pid for i in self._items):
            return Error(CartErrors.not_in_cart(pid))
        if (err := await self._check_stock(pid, quantity)) is not None:
            return Error(err)

        self._items = [
            i.with_quantity(quantity) if i.product_id == pid else i
            for i in self._items
        ]
        await self._save()
        return Ok(tuple(i for i in self._items if i.product_id == pid))

    async def clear(self) -> None:
        self._items = []
        await self._save()
        logger.debug("cart cleared")


__all__ = ("Cart",)
