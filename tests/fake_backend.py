"""
In-process API double served through httpx.ASGITransport.

    backend = FakeBackend()
    http = httpx.AsyncClient(transport=backend.transport(), base_url=BASE_URL)
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any

import httpx
from fastapi import APIRouter, Body, FastAPI, Header
from fastapi.responses import JSONResponse

BASE_URL = "http://test/api/v1"

RATES = [
    {
        "serviceName": "USPS Priority Mail",
        "serviceCode": "usps_priority_mail",
        "shipmentCost": 7.5,
        "otherCost": 0.5,
        "totalCost": 8.0,
        "carrier": "USPS",
        "estimatedDeliveryDays": 3,
    },
    {
        "serviceName": "UPS Ground",
        "serviceCode": "ups_ground",
        "shipmentCost": 11.25,
        "otherCost": 0,
        "totalCost": 11.25,
        "carrier": "UPS",
        "estimatedDeliveryDays": 5,
    },
]


def _user(user_id: int, email: str, role: str, first: str, last: str) -> dict[str, Any]:
    return {
        "id": user_id,
        "email": email,
        "role": role,
        "firstName": first,
        "lastName": last,
        "isEmailVerified": True,
        "createdAt": "2025-11-02T10:00:00Z",
    }


@dataclass
class FakeBackend:
    passwords: dict[str, str] = field(default_factory=lambda: {
        "ada@example.com": "secret",
        "grace@mayhem.test": "staff-pass",
    })
    users: dict[str, dict[str, Any]] = field(default_factory=lambda: {
        "ada@example.com": _user(1, "ada@example.com", "customer", "Ada", "Lovelace"),
        "grace@mayhem.test": _user(2, "grace@mayhem.test", "employee", "Grace", "Hopper"),
    })
    stock: dict[str, int] = field(default_factory=lambda: {"5": 10, "7": 0})

    shipping_mode: str = "ok"  # ok | unsuccessful | error | warning
    refresh_ok: bool = True
    logout_fails: bool = False

    tokens: dict[str, str] = field(default_factory=dict)  # access token -> email
    calls: list[tuple[str, str]] = field(default_factory=list)
    shipping_payloads: list[dict[str, Any]] = field(default_factory=list)
    logged_out: list[str] = field(default_factory=list)
    _ids: itertools.count = field(default_factory=lambda: itertools.count(1))

    # ───────────────────────────────────────────────────────────────────────────

    def issue(self, email: str) -> str:
        token = f"access-{next(self._ids)}"
        self.tokens[token] = email
        return token

    def expire_all(self) -> None:
        self.tokens.clear()

    def owner(self, authorization: str | None) -> str | None:
        if not authorization or not authorization.startswith("Bearer "):
            return None
        return self.tokens.get(authorization.removeprefix("Bearer "))

    def count(self, method: str, path: str) -> int:
        return self.calls.count((method, path))

    # ───────────────────────────────────────────────────────────────────────────

    def app(self) -> FastAPI:
        router = APIRouter(prefix="/api/v1")
        def unauthorized() -> JSONResponse:
            return JSONResponse(status_code=401, content={"success": False, "message": "Unauthorized"})

        def session_payload(email: str) -> dict[str, Any]:
            return {
                "user": self.users[email],
                "sessionId": f"sess-{next(self._ids)}",
                "accessToken": self.issue(email),
                "refreshToken": f"refresh-{email}",
            }

        @router.post("/auth/login")
        async def login(payload: dict[str, Any] = Body(...)):
            self.calls.append(("POST", "/auth/login"))
            email = payload.get("email")
            if self.passwords.get(email) != payload.get("password"):
                return JSONResponse(
                    status_code=401,
                    content={"success": False, "message": "Invalid email or password"},
                )
            return {"success": True, "data": session_payload(email)}

        @router.post("/auth/register")
        async def register(payload: dict[str, Any] = Body(...)):
            self.calls.append(("POST", "/auth/register"))
            email = payload["email"]
            if email in self.users:
                return JSONResponse(
                    status_code=409,
                    content={"success": False, "message": "Email already registered"},
                )
            self.passwords[email] = payload["password"]
            self.users[email] = _user(
                100 + len(self.users), email, "customer",
                payload.get("firstName", ""), payload.get("lastName", ""),
            )
            return JSONResponse(status_code=201, content={"success": True, "data": session_payload(email)})

        @router.post("/auth/refresh")
        async def refresh(payload: dict[str, Any] = Body(...)):
            self.calls.append(("POST", "/auth/refresh"))
            token = payload.get("refreshToken") or ""
            if not self.refresh_ok or not token.startswith("refresh-"):
                return JSONResponse(
                    status_code=401,
                    content={"success": False, "message": "Refresh token expired"},
                )
            return {"success": True, "data": {"accessToken": self.issue(token.removeprefix("refresh-"))}}

        @router.post("/auth/logout")
        async def logout(authorization: str | None = Header(default=None)):
            self.calls.append(("POST", "/auth/logout"))
            if self.logout_fails:
                return JSONResponse(status_code=503, content={"success": False, "message": "Down"})
            self.logged_out.append(authorization or "")
            return {"success": True}

        @router.get("/auth/profile")
        async def get_profile(authorization: str | None = Header(default=None)):
            self.calls.append(("GET", "/auth/profile"))
            email = self.owner(authorization)
            if email is None:
                return unauthorized()
            return {"success": True, "data": {"user": self.users[email]}}

        @router.put("/auth/profile")
        async def put_profile(
            payload: dict[str, Any] = Body(...),
            authorization: str | None = Header(default=None),
        ):
            self.calls.append(("PUT", "/auth/profile"))
            email = self.owner(authorization)
            if email is None:
                return unauthorized()
            allowed = {k: v for k, v in payload.items() if k in ("firstName", "lastName", "avatar")}
            self.users[email] = {**self.users[email], **allowed}
            return {"success": True, "data": {"user": self.users[email]}}

        @router.post("/shipping/rates")
        async def shipping_rates(payload: dict[str, Any] = Body(...)):
            self.calls.append(("POST", "/shipping/rates"))
            self.shipping_payloads.append(payload)
            match self.shipping_mode:
                case "error":
                    return JSONResponse(status_code=500, content={"success": False, "message": "Boom"})
                case "unsuccessful":
                    return {"success": False, "message": "No carrier serves this address"}
                case "warning":
                    return {
                        "success": True,
                        "data": {
                            "rates": RATES[:1],
                            "recommendedRate": RATES[0],
                            "warning": "Some carriers unavailable",
                        },
                    }
                case _:
                    return {"success": True, "data": {"rates": RATES, "recommendedRate": RATES[1]}}

        @router.get("/products/{product_id}")
        async def product(product_id: str):
            self.calls.append(("GET", f"/products/{product_id}"))
            if product_id not in self.stock:
                return JSONResponse(status_code=404, content={"success": False, "message": "Not found"})
            return {
                "success": True,
                "data": {
                    "id": product_id,
                    "variants": [{"stock": self.stock[product_id]}],
                },
            }

        app = FastAPI()
        app.include_router(router)
        return app

    def transport(self) -> httpx.ASGITransport:
        return httpx.ASGITransport(app=self.app())


__all__ = (
    "BASE_URL",
    "RATES",
    "FakeBackend",
)
