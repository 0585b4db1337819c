"""Shared infrastructure for examples."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable, Coroutine
from decimal import Decimal

import httpx

from stitchcart.catalog import Catalog, Product, ProductId
from stitchcart.payments import PaymentIntent


# Catalog
def demo_catalog() -> Catalog:
    return Catalog([
        Product(ProductId.of(5), "Classic Tee", Decimal("20.00")),
        Product(ProductId.of(7), "Trucker Hat", Decimal("15.50"), weight_oz=Decimal("4")),
    ])


# Fake API
USERS = {
    "ada@example.com": {"id": 1, "email": "ada@example.com", "role": "customer", "firstName": "Ada"},
    "grace@mayhem.test": {"id": 2, "email": "grace@mayhem.test", "role": "manager", "firstName": "Grace"},
}


def fake_api(request: httpx.Request) -> httpx.Response:
    """Just enough of the shop API for the demos."""
    path = request.url.path.removeprefix("/api/v1")
    match path:
        case "/auth/login":
            email = json.loads(request.content)["email"]
            return httpx.Response(200, json={"success": True, "data": {
                "user": USERS[email],
                "sessionId": f"sess-{email}",
                "accessToken": f"token-{email}",
                "refreshToken": f"refresh-{email}",
            }})
        case "/auth/logout":
            return httpx.Response(200, json={"success": True})
        case "/shipping/rates":
            rate = {
                "serviceName": "UPS Ground",
                "serviceCode": "ups_ground",
                "shipmentCost": 11.25,
                "otherCost": 0,
                "totalCost": 11.25,
                "carrier": "UPS",
                "estimatedDeliveryDays": 5,
            }
            return httpx.Response(200, json={"success": True, "data": {"rates": [rate]}})
    return httpx.Response(404, json={"success": False, "message": "Not found"})


# PayPal
PAYPAL_URL = "https://api-m.sandbox.paypal.com"


def fake_paypal(request: httpx.Request) -> httpx.Response:
    """Orders v2 happy path: token, create, capture."""
    match request.url.path:
        case "/v1/oauth2/token":
            return httpx.Response(200, json={"access_token": "demo-token", "expires_in": 3600})
        case "/v2/checkout/orders":
            return httpx.Response(201, json={
                "id": "PP-DEMO-1",
                "status": "CREATED",
                "links": [{"rel": "approve", "href": "https://www.sandbox.paypal.com/checkoutnow?token=PP-DEMO-1"}],
            })
        case "/v2/checkout/orders/PP-DEMO-1/capture":
            return httpx.Response(201, json={
                "id": "PP-DEMO-1",
                "status": "COMPLETED",
                "payer": {"email_address": "ada.com", "name": {"given_name": "Ada", "surname": "Lovelace"}},
                "purchase_units": [{"payments": {"captures": [{"id": "CAP-DEMO-1", "status": "COMPLETED"}]}}],
            })
    return httpx.Response(404, json={"message": "Not found"})


async def approve_in_browser(order: PaymentIntent) -> bool:
    """Stands in for the PayPal popup: show the link, approve after a beat."""
    print(f"  → approve at {order.approval_url}")
    await asyncio.sleep(0.01)
    return True


# Helpers
def banner(title: str) -> None:
    print(f"\n{'─' * 50}\n{title}\n{'─' * 50}")


def run(main: Callable[[], Coroutine[object, object, None]]) -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    asyncio.run(main())
