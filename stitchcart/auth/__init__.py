"""
Auth — parallel customer and employee sessions with guarded token refresh.

    from stitchcart import auth as Au

    store = await Au.MultiAccountStore.open(storage)      # migrates legacy data
    hooks = Au.SessionHooks(store)
    http = httpx.AsyncClient(base_url=url, event_hooks=hooks.event_hooks())
    client = Au.AuthClient(http, store)

    await client.login("ada@example.com", "secret")      # lands in its role's slot
    await store.switch_account(Au.AccountKind.EMPLOYEE)
    await client.logout()                                 # falls back to the other slot

A slot counts as authenticated while its last activity is under 30 days old.
"""

from stitchcart.auth._types import (
    MULTI_AUTH_KEY,
    LEGACY_AUTH_KEY,
    SESSION_TIMEOUT,
    AccountKind,
    StoredUser,
    StoredSession,
    AccountAuthData,
    MultiAccountAuthData,
    AccountInfo,
    AuthErrorKind,
    AuthError,
)
from stitchcart.auth._wire import (
    parse_timestamp,
    user_from_wire,
    session_from_wire,
    legacy_from_wire,
)
from stitchcart.auth._store import Revoker, MultiAccountStore
from stitchcart.auth._guard import RefreshGuard
from stitchcart.auth._client import (
    LOGIN_PATH,
    REGISTER_PATH,
    REFRESH_PATH,
    LOGOUT_PATH,
    PROFILE_PATH,
    SessionHooks,
    AuthClient,
)

__all__ = (
    # Types
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
    # Wire
    "parse_timestamp",
    "user_from_wire",
    "session_from_wire",
    "legacy_from_wire",
    # Store
    "Revoker",
    "MultiAccountStore",
    # Client
    "RefreshGuard",
    "LOGIN_PATH",
    "REGISTER_PATH",
    "REFRESH_PATH",
    "LOGOUT_PATH",
    "PROFILE_PATH",
    "SessionHooks",
    "AuthClient",
)
