"""
camelCase wire records → auth types.

Used for API responses and for the legacy single-account document.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from stitchcart.auth._types import AccountAuthData, AccountKind, StoredSession, StoredUser


def parse_timestamp(value: Any) -> datetime | None:
    if not value:
        return None
    if isinstance(value, datetime):
        moment = value
    else:
        try:
            moment = datetime.fromisoformat(str(value))
        except ValueError:
            return None
    return moment if moment.tzinfo is not None else moment.replace(tzinfo=timezone.utc)


def user_from_wire(raw: Mapping[str, Any], kind: AccountKind | None = None) -> StoredUser:
    role = str(raw.get("role") or "customer")
    return StoredUser(
        id=raw["id"],
        email=str(raw["email"]),
        role=role,
        account_kind=kind if kind is not None else AccountKind.for_role(role),
        first_name=raw.get("firstName"),
        last_name=raw.get("lastName"),
        is_email_verified=bool(raw.get("isEmailVerified", False)),
        last_login_at=parse_timestamp(raw.get("lastLoginAt")),
        created_at=parse_timestamp(raw.get("createdAt")),
        avatar=raw.get("avatar"),
    )


def session_from_wire(raw: Mapping[str, Any], now: datetime) -> StoredSession:
    """Session fields from a login payload or a stored session record."""
    return StoredSession(
        session_id=str(raw.get("sessionId") or ""),
        access_token=str(raw["accessToken"]),
        refresh_token=raw.get("refreshToken"),
        last_activity=parse_timestamp(raw.get("lastActivity")) or now,
    )


def legacy_from_wire(raw: Any, now: datetime) -> AccountAuthData | None:
    """
    Old single-account document `{user, session}`.

    Returns None when the document lacks either part.
    """
    if not isinstance(raw, Mapping):
        return None
    user, session = raw.get("user"), raw.get("session")
    if not isinstance(user, Mapping) or not isinstance(session, Mapping):
        return None
    return AccountAuthData(user=user_from_wire(user), session=session_from_wire(session, now))


__all__ = (
    "parse_timestamp",
    "user_from_wire",
    "session_from_wire",
    "legacy_from_wire",
)
