"""
Auth types — per-kind account slots and the current-account pointer.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import Enum, auto


MULTI_AUTH_KEY = "mayhem_multi_auth"
LEGACY_AUTH_KEY = "mayhem_auth"

SESSION_TIMEOUT = timedelta(days=30)
"""Inactivity after which a slot no longer counts as authenticated."""


class AccountKind(Enum):
    CUSTOMER = "customer"
    EMPLOYEE = "employee"

    @classmethod
    def for_role(cls, role: str | None) -> AccountKind:
        """`customer` role → CUSTOMER, any staff role → EMPLOYEE."""
        return cls.CUSTOMER if (role or "customer") == "customer" else cls.EMPLOYEE

    @property
    def other(self) -> AccountKind:
        return AccountKind.EMPLOYEE if self is AccountKind.CUSTOMER else AccountKind.CUSTOMER


# ═══════════════════════════════════════════════════════════════════════════════
# Slots
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class StoredUser:
    id: int | str
    email: str
    role: str
    account_kind: AccountKind
    first_name: str | None = None
    last_name: str | None = None
    is_email_verified: bool = False
    last_login_at: datetime | None = None
    created_at: datetime | None = None
    avatar: str | None = None

    @property
    def display_name(self) -> str:
        name = " ".join(p for p in (self.first_name, self.last_name) if p)
        return name or self.email


@dataclass(frozen=True, slots=True)
class StoredSession:
    session_id: str
    access_token: str
    refresh_token: str | None
    last_activity: datetime


@dataclass(frozen=True, slots=True)
class AccountAuthData:
    user: StoredUser
    session: StoredSession

    def is_fresh(self, now: datetime, timeout: timedelta = SESSION_TIMEOUT) -> bool:
        return now - self.session.last_activity < timeout

    def touched(self, now: datetime) -> AccountAuthData:
        return replace(self, session=replace(self.session, last_activity=now))


@dataclass(frozen=True, slots=True)
class MultiAccountAuthData:
    """The whole persisted document."""

    customer: AccountAuthData | None = None
    employee: AccountAuthData | None = None
    current_account: AccountKind | None = None

    def slot(self, kind: AccountKind) -> AccountAuthData | None:
        return self.customer if kind is AccountKind.CUSTOMER else self.employee

    def with_slot(self, kind: AccountKind, data: AccountAuthData | None) -> MultiAccountAuthData:
        if kind is AccountKind.CUSTOMER:
            return replace(self, customer=data)
        return replace(self, employee=data)

    def pointing_at(self, kind: AccountKind | None) -> MultiAccountAuthData:
        return replace(self, current_account=kind)


@dataclass(frozen=True, slots=True)
class AccountInfo:
    kind: AccountKind
    user: StoredUser | None
    is_authenticated: bool
    is_current: bool


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


class AuthErrorKind(Enum):
    INVALID_CREDENTIALS = auto()
    NOT_AUTHENTICATED = auto()
    REFRESH_LIMITED = auto()
    REJECTED = auto()
    NETWORK = auto()
    MALFORMED = auto()


@dataclass(frozen=True, slots=True)
class AuthError:
    kind: AuthErrorKind
    message: str
    status: int | None = None


__all__ = (
    "MULTI_AUTH_KEY",
    "LEGACY_AUTH_KEY",
    "SESSION_TIMEOUT",
    "AccountKind",
    "StoredUser",
    "StoredSession",
    "AccountAuthData",
    "MultiAccountAuthData",
    "AccountInfo",
    "AuthErrorKind",
    "AuthError",
)
