"""
Storage types — durable string key/value seam for client-side state.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Protocol, runtime_checkable


# ═══════════════════════════════════════════════════════════════════════════════
# Storage Protocol
# ═══════════════════════════════════════════════════════════════════════════════


@runtime_checkable
class Storage(Protocol):
    """
    Async string key/value store.

    Values are opaque strings (JSON documents in practice).
    Implementations: MemoryStorage, SQLAlchemyStorage.
    """

    @property
    def name(self) -> str:
        """Backend name for logging."""
        ...

    async def get(self, key: str) -> str | None:
        """Get value, None if missing."""
        ...

    async def set(self, key: str, value: str) -> None:
        """Insert or replace value."""
        ...

    async def delete(self, key: str) -> bool:
        """Delete key. Returns True if it existed."""
        ...

    async def keys(self, prefix: str = "") -> list[str]:
        """Keys starting with prefix, sorted."""
        ...

    async def close(self) -> None:
        """Release backend resources."""
        ...


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


class StorageErrorKind(Enum):
    BACKEND = auto()
    CORRUPT = auto()


@dataclass(frozen=True, slots=True)
class StorageError:
    kind: StorageErrorKind
    key: str
    message: str


# ═══════════════════════════════════════════════════════════════════════════════
# Memory Storage
# ═══════════════════════════════════════════════════════════════════════════════


class MemoryStorage:
    """
    In-process storage.

    Good for tests and single-process demos.
    """

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    @property
    def name(self) -> str:
        return "memory"

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    async def keys(self, prefix: str = "") -> list[str]:
        return sorted(k for k in self._data if k.startswith(prefix))

    async def close(self) -> None:
        pass

    def snapshot(self) -> dict[str, str]:
        """Copy of raw contents."""
        return dict(self._data)


__all__ = (
    "Storage",
    "StorageErrorKind",
    "StorageError",
    "MemoryStorage",
)
