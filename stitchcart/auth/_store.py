"""
Multi-account session store.

One persisted document holds a customer slot, an employee slot and a
pointer to the current one. Slots never touch each other.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from dataclasses import replace

from kungfu import Error, Ok

from stitchcart._types import Clock, utcnow
from stitchcart.auth._types import (
    LEGACY_AUTH_KEY,
    MULTI_AUTH_KEY,
    SESSION_TIMEOUT,
    AccountAuthData,
    AccountInfo,
    AccountKind,
    MultiAccountAuthData,
)
from stitchcart.auth._wire import legacy_from_wire
from stitchcart.lift import from_awaitable
from stitchcart.storage import JsonCodec, Storage

logger = logging.getLogger(__name__)

type Revoker = Callable[[AccountAuthData], Awaitable[None]]
"""Remote session invalidation for one account."""

_codec: JsonCodec[MultiAccountAuthData] = JsonCodec(MultiAccountAuthData)


class MultiAccountStore:
    """
    Parallel customer / employee sessions over a Storage backend.

    All read-modify-write cycles hold one lock, so concurrent callers
    never lose each other's updates.

    Example:
        store = await MultiAccountStore.open(storage)   # migrates legacy data
        await store.store_account_auth_data(AccountKind.EMPLOYEE, auth)
        await store.switch_account(AccountKind.CUSTOMER)
    """

    def __init__(
        self,
        storage: Storage,
        *,
        clock: Clock = utcnow,
        key: str = MULTI_AUTH_KEY,
        legacy_key: str = LEGACY_AUTH_KEY,
    ) -> None:
        self._storage = storage
        self._clock = clock
        self._key = key
        self._legacy_key = legacy_key
        self._lock = asyncio.Lock()

    @classmethod
    async def open(cls, storage: Storage, **kwargs) -> MultiAccountStore:
        store = cls(storage, **kwargs)
        await store.migrate_legacy()
        return store

    # ───────────────────────────────────────────────────────────────────────────
    # Persistence
    # ───────────────────────────────────────────────────────────────────────────

    async def _read(self) -> MultiAccountAuthData:
        return await _codec.load(self._storage, self._key) or MultiAccountAuthData()

    async def _write(self, data: MultiAccountAuthData) -> None:
        await _codec.save(self._storage, self._key, data)

    def _fresh(self, data: AccountAuthData | None) -> bool:
        return data is not None and data.is_fresh(self._clock(), SESSION_TIMEOUT)

    # ───────────────────────────────────────────────────────────────────────────
    # Slots
    # ───────────────────────────────────────────────────────────────────────────

    async def store_account_auth_data(self, kind: AccountKind, data: AccountAuthData) -> None:
        """Upsert one slot and make it current."""
        data = replace(data, user=replace(data.user, account_kind=kind))
        async with self._lock:
            doc = await self._read()
            await self._write(doc.with_slot(kind, data).pointing_at(kind))
        logger.info("stored %s session for user %s", kind.value, data.user.id)

    async def get_account_auth_data(self, kind: AccountKind) -> AccountAuthData | None:
        return (await self._read()).slot(kind)

    async def get_current_account_data(self) -> AccountAuthData | None:
        doc = await self._read()
        if doc.current_account is None:
            return None
        return doc.slot(doc.current_account)

    async def current_account(self) -> AccountKind | None:
        return (await self._read()).current_account

    async def set_current_account(self, kind: AccountKind | None) -> None:
        """Move the pointer, no checks."""
        async with self._lock:
            doc = await self._read()
            await self._write(doc.pointing_at(kind))

    async def is_account_authenticated(self, kind: AccountKind) -> bool:
        return self._fresh(await self.get_account_auth_data(kind))

    async def is_current_account_authenticated(self) -> bool:
        return self._fresh(await self.get_current_account_data())

    async def available_accounts(self) -> list[AccountKind]:
        doc = await self._read()
        return [k for k in AccountKind if self._fresh(doc.slot(k))]

    async def switch_account(self, kind: AccountKind) -> bool:
        """Point at `kind` if that slot is authenticated. Slots are untouched."""
        async with self._lock:
            doc = await self._read()
            if not self._fresh(doc.slot(kind)):
                return False
            await self._write(doc.pointing_at(kind))
        logger.info("switched to %s account", kind.value)
        return True

    async def account_for_token(self, access_token: str) -> AccountKind | None:
        """Which slot holds `access_token`, if any."""
        doc = await self._read()
        for kind in AccountKind:
            data = doc.slot(kind)
            if data is not None and data.session.access_token == access_token:
                return kind
        return None

    async def touch(self, kind: AccountKind | None = None) -> None:
        """Bump last activity of `kind` (default: current). Other slot untouched."""
        async with self._lock:
            doc = await self._read()
            kind = kind if kind is not None else doc.current_account
            data = doc.slot(kind) if kind is not None else None
            if kind is None or data is None:
                return
            await self._write(doc.with_slot(kind, data.touched(self._clock())))

    async def rotate_access_token(self, access_token: str) -> bool:
        """Replace the current account's access token after a refresh."""
        async with self._lock:
            doc = await self._read()
            kind = doc.current_account
            current = doc.slot(kind) if kind is not None else None
            if kind is None or current is None:
                return False
            session = replace(current.session, access_token=access_token, last_activity=self._clock())
            await self._write(doc.with_slot(kind, replace(current, session=session)))
        return True

    # ───────────────────────────────────────────────────────────────────────────
    # Logout
    # ───────────────────────────────────────────────────────────────────────────

    async def logout_account(self, kind: AccountKind, revoke: Revoker | None = None) -> bool:
        """
        Remove one slot.

        Remote invalidation is best effort: its failure is logged and the
        slot is cleared anyway. If the slot was current, the pointer falls
        back to the other slot when that one is still authenticated.
        """
        data = await self.get_account_auth_data(kind)
        if data is None:
            return True

        if revoke is not None:
            match await from_awaitable(lambda: revoke(data), on_error=lambda e: e):
                case Error(exc):
                    logger.warning("remote logout for %s failed, clearing locally: %s", kind.value, exc)
                case Ok(_):
                    pass

        async with self._lock:
            doc = (await self._read()).with_slot(kind, None)
            if doc.current_account is kind:
                fallback = kind.other if self._fresh(doc.slot(kind.other)) else None
                doc = doc.pointing_at(fallback)
            await self._write(doc)
        logger.info("logged out %s account", kind.value)
        return True

    async def logout_current_account(self, revoke: Revoker | None = None) -> bool:
        kind = await self.current_account()
        if kind is None:
            return True
        return await self.logout_account(kind, revoke)

    async def logout_all(self) -> None:
        """Wipe both slots and the pointer."""
        async with self._lock:
            await self._storage.delete(self._key)

    clear_all_accounts = logout_all

    # ───────────────────────────────────────────────────────────────────────────
    # Display
    # ───────────────────────────────────────────────────────────────────────────

    async def account_info(self, kind: AccountKind) -> AccountInfo | None:
        doc = await self._read()
        data = doc.slot(kind)
        if data is None:
            return None
        return AccountInfo(
            kind=kind,
            user=data.user,
            is_authenticated=self._fresh(data),
            is_current=doc.current_account is kind,
        )

    async def all_account_info(self) -> list[AccountInfo]:
        infos = [await self.account_info(k) for k in AccountKind]
        return [i for i in infos if i is not None]

    # ───────────────────────────────────────────────────────────────────────────
    # Migration
    # ───────────────────────────────────────────────────────────────────────────

    async def migrate_legacy(self) -> AccountKind | None:
        """
        Move an old single-account document into its slot.

        Classified by role; the legacy key is deleted afterwards.
        A second run finds nothing to do.
        """
        raw = await self._storage.get(self._legacy_key)
        if raw is None:
            return None

        try:
            legacy = legacy_from_wire(json.loads(raw), self._clock())
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning("unreadable legacy auth document left in place: %s", exc)
            return None
        if legacy is None:
            return None

        kind = legacy.user.account_kind
        await self.store_account_auth_data(kind, legacy)
        await self._storage.delete(self._legacy_key)
        logger.info("migrated legacy auth document into %s slot", kind.value)
        return kind


__all__ = (
    "Revoker",
    "MultiAccountStore",
)
