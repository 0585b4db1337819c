"""
Cart types.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace
from enum import Enum, auto

from stitchcart.catalog import ProductId
from stitchcart.pricing import Customization


CART_KEY = "mayhem_cart_v1"
"""Storage key of the serialized cart."""


# ═══════════════════════════════════════════════════════════════════════════════
# Cart Item
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CartItem:
    """
    One cart line.

    product_id accepts str | int and is normalized here, once.
    """

    product_id: ProductId
    quantity: int = 1
    customization: Customization | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "product_id", ProductId.of(self.product_id))
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise TypeError("quantity must be an int")
        if self.quantity < 1:
            raise ValueError(f"quantity must be positive, got {self.quantity}")

    @property
    def is_customized(self) -> bool:
        return self.customization is not None

    def merges_with(self, product_id: ProductId, customization: Customization | None) -> bool:
        """Only uncustomized lines of the same product merge."""
        return (
            customization is None
            and self.customization is None
            and self.product_id == product_id
        )

    def with_quantity(self, quantity: int) -> CartItem:
        return replace(self, quantity=quantity)


# ═══════════════════════════════════════════════════════════════════════════════
# Stock
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class StockCheck:
    valid: bool
    message: str | None = None


IN_STOCK = StockCheck(valid=True)

type StockValidator = Callable[[ProductId, int], Awaitable[StockCheck]]
"""Async check that `quantity` of a product can be ordered."""


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


class CartErrorKind(Enum):
    OUT_OF_STOCK = auto()
    INVALID_QUANTITY = auto()
    NOT_IN_CART = auto()


@dataclass(frozen=True, slots=True)
class CartError:
    kind: CartErrorKind
    message: str


class CartErrors:
    @staticmethod
    def out_of_stock(msg: str | None) -> CartError:
        return CartError(CartErrorKind.OUT_OF_STOCK, msg or "This product is out of stock")

    @staticmethod
    def invalid_quantity(qty: int) -> CartError:
        return CartError(CartErrorKind.INVALID_QUANTITY, f"Quantity must be at least 1, got {qty}")

    @staticmethod
    def not_in_cart(product_id: ProductId) -> CartError:
        return CartError(CartErrorKind.NOT_IN_CART, f"Product {product_id} is not in the cart")


__all__ = (
    "CART_KEY",
    "CartItem",
    "StockCheck",
    "IN_STOCK",
    "StockValidator",
    "CartErrorKind",
    "CartError",
    "CartErrors",
)
