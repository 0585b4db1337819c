"""
Catalog types — normalized product identity and product records.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from decimal import Decimal


# ═══════════════════════════════════════════════════════════════════════════════
# Product Identity
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ProductId:
    """
    Canonical product identifier.

    Numeric ids arrive as ints from the API and as strings from
    persisted carts and URLs. Both forms normalize to the same value:

        ProductId.of(5) == ProductId.of("5") == ProductId.of(" 05 ")
    """

    value: str

    @classmethod
    def of(cls, raw: ProductId | str | int) -> ProductId:
        if isinstance(raw, ProductId):
            return raw
        if isinstance(raw, bool):
            raise TypeError("product id cannot be a bool")
        if isinstance(raw, int):
            return cls(str(raw))
        if isinstance(raw, str):
            text = raw.strip()
            if not text:
                raise ValueError("product id cannot be empty")
            if text.isascii() and text.isdigit():
                return cls(str(int(text)))
            return cls(text)
        raise TypeError(f"unsupported product id type: {type(raw).__name__}")

    @property
    def is_numeric(self) -> bool:
        return self.value.isdigit()

    def __str__(self) -> str:
        return self.value


CUSTOM_EMBROIDERY_ID = ProductId("custom-embroidery")
"""Pseudo-product priced entirely from its embroidery data."""


# ═══════════════════════════════════════════════════════════════════════════════
# Product
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Product:
    id: ProductId
    title: str
    price: Decimal
    image: str | None = None
    weight_oz: Decimal | None = None

    def __post_init__(self) -> None:
        if self.price < 0:
            raise ValueError(f"product {self.id} has negative price")


# ═══════════════════════════════════════════════════════════════════════════════
# Catalog
# ═══════════════════════════════════════════════════════════════════════════════


class Catalog(Mapping[ProductId, Product]):
    """
    Read-only product lookup.

    Lookups accept raw ids (str | int) as well as ProductId.
    """

    __slots__ = ("_products",)

    def __init__(self, products: Iterable[Product] = ()) -> None:
        self._products: dict[ProductId, Product] = {p.id: p for p in products}

    def __getitem__(self, key: ProductId) -> Product:
        return self._products[ProductId.of(key)]

    def __iter__(self) -> Iterator[ProductId]:
        return iter(self._products)

    def __len__(self) -> int:
        return len(self._products)

    def find(self, product_id: ProductId | str | int) -> Product | None:
        """Product or None. Never raises for well-formed ids."""
        return self._products.get(ProductId.of(product_id))


__all__ = (
    "ProductId",
    "CUSTOM_EMBROIDERY_ID",
    "Product",
    "Catalog",
)
