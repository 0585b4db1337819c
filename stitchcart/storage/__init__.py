"""
Storage — durable key/value seam for the cart and the session store.

    from stitchcart import storage as St

    memory = St.MemoryStorage()
    durable = await St.SQLAlchemyStorage.create("sqlite+aiosqlite:///state.db")

Both satisfy St.Storage: async get / set / delete / keys / close over strings.
"""

from stitchcart.storage._types import (
    Storage,
    StorageError,
    StorageErrorKind,
    MemoryStorage,
)
from stitchcart.storage._sqlalchemy import SQLAlchemyStorage
from stitchcart.storage._codec import JsonCodec

__all__ = (
    "Storage",
    "StorageError",
    "StorageErrorKind",
    "MemoryStorage",
    "SQLAlchemyStorage",
    "JsonCodec",
)
