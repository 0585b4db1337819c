"""
Catalog — products the cart can hold.

    from stitchcart import catalog as Cat

    catalog = Cat.Catalog([Cat.Product(Cat.ProductId.of(5), "Trucker Cap", Decimal("20"))])
    catalog.find("5")  # same product as catalog.find(5)
"""

from stitchcart.catalog._types import (
    ProductId,
    CUSTOM_EMBROIDERY_ID,
    Product,
    Catalog,
)

__all__ = (
    "ProductId",
    "CUSTOM_EMBROIDERY_ID",
    "Product",
    "Catalog",
)
