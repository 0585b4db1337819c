"""
Cart — persisted cart lines with merge rules and optional stock checks.

    from stitchcart import cart as Ca

    cart = await Ca.Cart.load(storage, stock=Ca.ApiStockValidator(http))
    match await cart.add("5", 2):
        case Ok(line): ...
        case Error(e): print(e.message)
"""

from stitchcart.cart._types import (
    CART_KEY,
    CartItem,
    StockCheck,
    IN_STOCK,
    StockValidator,
    CartErrorKind,
    CartError,
    CartErrors,
)
from stitchcart.cart._cart import Cart
from stitchcart.cart._stock import ApiStockValidator

__all__ = (
    "CART_KEY",
    "CartItem",
    "StockCheck",
    "IN_STOCK",
    "StockValidator",
    "CartErrorKind",
    "CartError",
    "CartErrors",
    "Cart",
    "ApiStockValidator",
)
