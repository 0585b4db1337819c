"""
Stock validation against the product API.
"""

from __future__ import annotations

import logging

import httpx

from stitchcart.cart._types import IN_STOCK, StockCheck
from stitchcart.catalog import ProductId

logger = logging.getLogger(__name__)


class ApiStockValidator:
    """
    StockValidator backed by `GET /products/{id}`.

    Stock is the sum of `variants[].stock`. Any lookup failure rejects
    the change rather than overselling.
    """

    def __init__(self, http: httpx.AsyncClient, path: str = "/products/{id}") -> None:
        self._http = http
        self._path = path

    async def __call__(self, product_id: ProductId, quantity: int) -> StockCheck:
        try:
            response = await self._http.get(self._path.format(id=product_id.value))
            response.raise_for_status()
            product = response.json().get("data") or {}
            variants = product.get("variants") or []
            total = sum(int(v.get("stock") or 0) for v in variants)
        except (httpx.HTTPError, ValueError, TypeError, AttributeError) as exc:
            logger.warning("stock lookup for %s failed: %s", product_id, exc)
            return StockCheck(False, "Unable to verify stock availability")

        if total == 0:
            return StockCheck(False, "This product is out of stock")
        if total < quantity:
            return StockCheck(False, f"Only {total} items available in stock")
        return IN_STOCK


__all__ = ("ApiStockValidator",)
