"""
SQLAlchemy storage — one key/value table behind the Storage protocol.

Usage:
    storage = await SQLAlchemyStorage.create("sqlite+aiosqlite:///state.db")
    await storage.set("mayhem_cart_v1", "[]")
    ...
    await storage.close()
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Text, delete, select
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# Table
# ═══════════════════════════════════════════════════════════════════════════════


class Base(DeclarativeBase):
    pass


class KeyValueRow(Base):
    __tablename__ = "client_state"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


# ═══════════════════════════════════════════════════════════════════════════════
# Storage
# ═══════════════════════════════════════════════════════════════════════════════


class SQLAlchemyStorage:
    """Storage over any async SQLAlchemy engine."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        engine: AsyncEngine | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._engine = engine

    @classmethod
    async def create(cls, url: str = "sqlite+aiosqlite:///:memory:") -> SQLAlchemyStorage:
        """Create engine, ensure the table exists, return storage owning the engine."""
        engine = create_async_engine(url, echo=False)

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        logger.info("storage ready: %s", engine.url.render_as_string(hide_password=True))
        return cls(async_sessionmaker(engine, expire_on_commit=False), engine)

    @property
    def name(self) -> str:
        return "sqlalchemy"

    async def get(self, key: str) -> str | None:
        async with self._session_factory() as session:
            row = await session.get(KeyValueRow, key)
            return row.value if row is not None else None

    async def set(self, key: str, value: str) -> None:
        async with self._session_factory() as session:
            row = await session.get(KeyValueRow, key)
            now = datetime.now(timezone.utc).replace(tzinfo=None)
            if row is None:
                session.add(KeyValueRow(key=key, value=value, updated_at=now))
            else:
                row.value = value
                row.updated_at = now
            await session.commit()

    async def delete(self, key: str) -> bool:
        async with self._session_factory() as session:
            result = await session.execute(
                delete(KeyValueRow).where(KeyValueRow.key == key)
            )
            await session.commit()
            return (result.rowcount or 0) > 0

    async def keys(self, prefix: str = "") -> list[str]:
        async with self._session_factory() as session:
            stmt = select(KeyValueRow.key).order_by(KeyValueRow.key)
            if prefix:
                stmt = stmt.where(KeyValueRow.key.startswith(prefix, autoescape=True))
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()


__all__ = (
    "Base",
    "KeyValueRow",
    "SQLAlchemyStorage",
)
