"""
JSON codec — typed (de)serialization of dataclasses stored under one key.
"""

from __future__ import annotations

import logging
from typing import Any

from kungfu import Error, Ok, Result
from pydantic import TypeAdapter, ValidationError

from stitchcart.storage._types import Storage, StorageError, StorageErrorKind

logger = logging.getLogger(__name__)


class JsonCodec[T]:
    """
    pydantic TypeAdapter over a dataclass (or container of dataclasses).

    Corrupt documents are reported as StorageError, never raised.

    Example:
        codec = JsonCodec[list[CartItem]](list[CartItem])
        items = await codec.load(storage, "mayhem_cart_v1") or []
    """

    def __init__(self, tp: Any) -> None:
        self._adapter: TypeAdapter[T] = TypeAdapter(tp)

    def encode(self, value: T) -> str:
        return self._adapter.dump_json(value).decode()

    def decode(self, raw: str, key: str = "") -> Result[T, StorageError]:
        try:
            return Ok(self._adapter.validate_json(raw))
        except ValidationError as exc:
            return Error(
                StorageError(
                    kind=StorageErrorKind.CORRUPT,
                    key=key,
                    message=f"{exc.error_count()} validation error(s)",
                )
            )

    def to_python(self, value: T) -> Any:
        """JSON-compatible dict/list form."""
        return self._adapter.dump_python(value, mode="json")

    async def load(self, storage: Storage, key: str) -> T | None:
        """Read and decode key; missing or corrupt → None."""
        raw = await storage.get(key)
        if raw is None:
            return None
        match self.decode(raw, key):
            case Ok(value):
                return value
            case Error(err):
                logger.warning("discarding corrupt %r in %s storage: %s", key, storage.name, err.message)
                return None

    async def save(self, storage: Storage, key: str, value: T) -> None:
        await storage.set(key, self.encode(value))


__all__ = ("JsonCodec",)
