"""
Auth client — login, refresh and logout over the shared HTTP client.

Every request except sign-in carries the current account's bearer token
through httpx event hooks, and every successful authenticated response
bumps the activity of the account whose token it carried. A 401 triggers one guarded refresh and a retry;
a failed refresh hands the 401 back and never logs anybody out.

    POST /auth/login     {email, password}         → {success, data: {user, sessionId, accessToken, refreshToken}}
    POST /auth/register  {email, password, ...}    → same shape, tokens optional
    POST /auth/refresh   {refreshToken}            → {success, data: {accessToken}}
    POST /auth/logout                              (bearer of the account being logged out)
    GET  /auth/profile                             → {success, data: {user}}
    PUT  /auth/profile   {firstName, ...}          → {success, data: {user}}
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import replace
from typing import Any

import httpx
from kungfu import Error, Ok, Result

from stitchcart._types import Clock, utcnow
from stitchcart.auth._guard import RefreshGuard
from stitchcart.auth._store import MultiAccountStore
from stitchcart.auth._types import (
    AccountAuthData,
    AccountKind,
    AuthError,
    AuthErrorKind,
    StoredUser,
)
from stitchcart.auth._wire import session_from_wire, user_from_wire
from stitchcart.lift import from_awaitable

logger = logging.getLogger(__name__)

LOGIN_PATH = "/auth/login"
REGISTER_PATH = "/auth/register"
REFRESH_PATH = "/auth/refresh"
LOGOUT_PATH = "/auth/logout"
PROFILE_PATH = "/auth/profile"

_SIGN_IN_PATHS = (LOGIN_PATH, REGISTER_PATH)
_NO_REFRESH_PATHS = (*_SIGN_IN_PATHS, REFRESH_PATH)


def _bearer(data: AccountAuthData) -> dict[str, str]:
    return {"Authorization": f"Bearer {data.session.access_token}"}


def _token_of(request: httpx.Request) -> str | None:
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    return token if scheme == "Bearer" and token else None


def _network_error(exc: Exception) -> AuthError:
    return AuthError(AuthErrorKind.NETWORK, f"{type(exc).__name__}: {exc}")


def _body(response: httpx.Response) -> Mapping[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, Mapping) else {}


def _rejection(response: httpx.Response, default: str) -> AuthError:
    message = _body(response).get("message") or default
    if response.status_code == 401:
        return AuthError(AuthErrorKind.INVALID_CREDENTIALS, str(message), 401)
    return AuthError(AuthErrorKind.REJECTED, str(message), response.status_code)


# ═══════════════════════════════════════════════════════════════════════════════
# Hooks
# ═══════════════════════════════════════════════════════════════════════════════


class SessionHooks:
    """
    httpx event hooks bound to a MultiAccountStore.

    Example:
        hooks = SessionHooks(store)
        http = httpx.AsyncClient(base_url=url, event_hooks=hooks.event_hooks())
    """

    def __init__(self, store: MultiAccountStore) -> None:
        self._store = store

    async def on_request(self, request: httpx.Request) -> None:
        # Explicit headers win (remote logout uses the slot's own token).
        # Sign-in carries no bearer: it belongs to no account yet.
        if "Authorization" in request.headers or request.url.path.endswith(_SIGN_IN_PATHS):
            return
        current = await self._store.get_current_account_data()
        if current is not None:
            request.headers.update(_bearer(current))

    async def on_response(self, response: httpx.Response) -> None:
        if not response.is_success:
            return
        token = _token_of(response.request)
        if token is None:
            return
        # Only the account whose token went out is active.
        kind = await self._store.account_for_token(token)
        if kind is not None:
            await self._store.touch(kind)

    def event_hooks(self) -> dict[str, list]:
        return {"request": [self.on_request], "response": [self.on_response]}


# ═══════════════════════════════════════════════════════════════════════════════
# Client
# ═══════════════════════════════════════════════════════════════════════════════


class AuthClient:
    """
    Account operations plus the refresh-and-retry request path.

    Example:
        auth = AuthClient(http, store)
        match await auth.login("ada@example.com", "secret"):
            case Ok(data):
                print(data.user.display_name)
            case Error(err):
                print(err.message)

        response = await auth.request("GET", "/orders")
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        store: MultiAccountStore,
        *,
        guard: RefreshGuard | None = None,
        clock: Clock = utcnow,
    ) -> None:
        self._http = http
        self._store = store
        self._guard = guard or RefreshGuard()
        self._clock = clock

    @property
    def store(self) -> MultiAccountStore:
        return self._store

    # ───────────────────────────────────────────────────────────────────────────
    # Requests
    # ───────────────────────────────────────────────────────────────────────────

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """
        Send with the current bearer. One refresh and retry on 401.

        Transport errors propagate like any httpx call.
        """
        response = await self._http.request(method, url, **kwargs)
        if response.status_code != 401 or url.endswith(_NO_REFRESH_PATHS):
            return response

        match await self.refresh():
            case Ok(_):
                await response.aclose()
                return await self._http.request(method, url, **kwargs)
            case Error(err):
                logger.warning("token refresh failed (%s), keeping session: %s", err.kind.name, err.message)
                return response

    async def refresh(self) -> Result[str, AuthError]:
        """Exchange the refresh token for a new access token."""
        if not self._guard.try_acquire():
            return Error(AuthError(AuthErrorKind.REFRESH_LIMITED, "Too many refresh attempts"))

        current = await self._store.get_current_account_data()
        if current is None:
            return Error(AuthError(AuthErrorKind.NOT_AUTHENTICATED, "No active session"))

        result = await from_awaitable(
            lambda: self._http.post(
                REFRESH_PATH,
                json={"refreshToken": current.session.refresh_token},
                headers=_bearer(current),
            ),
            on_error=_network_error,
        )
        match result:
            case Error(err):
                return Error(err)
            case Ok(response):
                pass

        body = _body(response)
        data = body.get("data")
        token = data.get("accessToken") if isinstance(data, Mapping) else None
        if not response.is_success or not body.get("success") or not token:
            return Error(_rejection(response, "Session refresh was rejected"))

        self._guard.reset()
        await self._store.rotate_access_token(str(token))
        logger.debug("access token refreshed")
        return Ok(str(token))

    # ───────────────────────────────────────────────────────────────────────────
    # Login / register
    # ───────────────────────────────────────────────────────────────────────────

    async def _sign_in(self, path: str, payload: dict[str, Any]) -> Result[AccountAuthData | None, AuthError]:
        result = await from_awaitable(
            lambda: self._http.post(path, json=payload),
            on_error=_network_error,
        )
        match result:
            case Error(err):
                return Error(err)
            case Ok(response):
                pass

        body = _body(response)
        if not response.is_success or not body.get("success"):
            return Error(_rejection(response, "Authentication failed"))

        data = body.get("data")
        if not isinstance(data, Mapping) or not isinstance(data.get("user"), Mapping):
            return Error(AuthError(AuthErrorKind.MALFORMED, "Missing user in response", response.status_code))
        if not data.get("accessToken"):
            return Ok(None)

        user = user_from_wire(data["user"])
        auth = AccountAuthData(user=user, session=session_from_wire(data, self._clock()))
        await self._store.store_account_auth_data(user.account_kind, auth)
        return Ok(await self._store.get_account_auth_data(user.account_kind))

    async def login(self, email: str, password: str) -> Result[AccountAuthData, AuthError]:
        """Sign in; the account lands in the slot its role belongs to and becomes current."""
        match await self._sign_in(LOGIN_PATH, {"email": email, "password": password}):
            case Ok(None):
                return Error(AuthError(AuthErrorKind.MALFORMED, "Missing access token in response"))
            case Ok(data):
                return Ok(data)
            case Error(err):
                return Error(err)

    async def register(
        self,
        email: str,
        password: str,
        *,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> Result[AccountAuthData | None, AuthError]:
        """Create a customer account. Ok(None) when no session is issued yet."""
        payload: dict[str, Any] = {"email": email, "password": password}
        if first_name is not None:
            payload["firstName"] = first_name
        if last_name is not None:
            payload["lastName"] = last_name
        return await self._sign_in(REGISTER_PATH, payload)

    # ───────────────────────────────────────────────────────────────────────────
    # Logout
    # ───────────────────────────────────────────────────────────────────────────

    async def _revoke(self, data: AccountAuthData) -> None:
        response = await self._http.post(LOGOUT_PATH, headers=_bearer(data))
        response.raise_for_status()

    async def logout(self, kind: AccountKind | None = None) -> bool:
        """Log out `kind` (default: current). Remote revoke is best effort."""
        if kind is None:
            return await self._store.logout_current_account(revoke=self._revoke)
        return await self._store.logout_account(kind, revoke=self._revoke)

    async def logout_all(self) -> None:
        for kind in AccountKind:
            await self._store.logout_account(kind, revoke=self._revoke)
        await self._store.logout_all()

    # ───────────────────────────────────────────────────────────────────────────
    # Profile
    # ───────────────────────────────────────────────────────────────────────────

    async def _profile_call(self, method: str, **kwargs: Any) -> Result[StoredUser, AuthError]:
        current = await self._store.get_current_account_data()
        if current is None:
            return Error(AuthError(AuthErrorKind.NOT_AUTHENTICATED, "No active session"))

        result = await from_awaitable(
            lambda: self.request(method, PROFILE_PATH, **kwargs),
            on_error=_network_error,
        )
        match result:
            case Error(err):
                return Error(err)
            case Ok(response):
                pass

        body = _body(response)
        if not response.is_success or not body.get("success"):
            return Error(_rejection(response, "Profile request failed"))

        data = body.get("data")
        raw = data.get("user", data) if isinstance(data, Mapping) else None
        if not isinstance(raw, Mapping):
            return Error(AuthError(AuthErrorKind.MALFORMED, "Missing user in response", response.status_code))

        kind = current.user.account_kind
        user = user_from_wire(raw, kind)
        # Re-read: the request may have rotated the token.
        latest = await self._store.get_account_auth_data(kind)
        if latest is not None:
            await self._store.store_account_auth_data(kind, replace(latest, user=user))
        return Ok(user)

    async def get_profile(self) -> Result[StoredUser, AuthError]:
        return await self._profile_call("GET")

    async def update_profile(self, changes: Mapping[str, Any]) -> Result[StoredUser, AuthError]:
        """PUT camelCase `changes` and keep the returned user in the slot."""
        return await self._profile_call("PUT", json=dict(changes))


__all__ = (
    "LOGIN_PATH",
    "REGISTER_PATH",
    "REFRESH_PATH",
    "LOGOUT_PATH",
    "PROFILE_PATH",
    "SessionHooks",
    "AuthClient",
)
