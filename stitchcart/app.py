"""
Storefront — composition root.

Builds every client from one Settings value and hands them out together:

    storefront = await open_storefront(Settings.from_env(), catalog=catalog)
    try:
        await storefront.auth.login(email, password)
        await storefront.cart.add("5", 2)
        flow = storefront.checkout()
        ...
    finally:
        await storefront.aclose()
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

import httpx
import stripe

from stitchcart.auth import AuthClient, MultiAccountStore, SessionHooks
from stitchcart.cart import ApiStockValidator, Cart
from stitchcart.catalog import Catalog
from stitchcart.checkout import CheckoutFlow
from stitchcart.config import Settings
from stitchcart.payments import (
    Approver,
    GooglePayProvider,
    PaymentDispatcher,
    PaymentProvider,
    PayPalProvider,
    StripeProvider,
)
from stitchcart.shipping import ShippingRateClient
from stitchcart.storage import MemoryStorage, SQLAlchemyStorage, Storage

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Storefront:
    settings: Settings
    storage: Storage
    sessions: MultiAccountStore
    http: httpx.AsyncClient
    auth: AuthClient
    shipping: ShippingRateClient
    payments: PaymentDispatcher
    catalog: Catalog
    cart: Cart
    _owned: list[Any] = field(default_factory=list, repr=False)

    def checkout(self, **kwargs: Any) -> CheckoutFlow:
        """A fresh checkout over the shared cart, priced in the configured currency."""
        kwargs.setdefault("currency", self.settings.currency)
        kwargs.setdefault("tax_rate", self.settings.tax_rate)
        return CheckoutFlow(self.cart, self.catalog, self.shipping, self.payments, **kwargs)

    async def aclose(self) -> None:
        """Close HTTP clients and any storage engine opened here."""
        for resource in reversed(self._owned):
            match resource:
                case httpx.AsyncClient():
                    await resource.aclose()
                case _:
                    await resource.close()
        self._owned.clear()


def default_providers(
    settings: Settings,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    owned: list[Any] | None = None,
    paypal_approver: Approver | None = None,
) -> list[PaymentProvider]:
    """
    Stripe and PayPal when configured; Google Pay always (as unavailable).

    `paypal_approver` takes the payer through PayPal approval; without it
    PayPal payments stop at REQUIRES_ACTION with the approval link.
    """
    providers: list[PaymentProvider] = []
    if settings.stripe_enabled:
        providers.append(StripeProvider(stripe.StripeClient(settings.stripe_secret_key)))
    if settings.paypal_enabled:
        paypal_http = httpx.AsyncClient(
            base_url=settings.paypal_base_url,
            timeout=settings.http_timeout,
            transport=transport,
        )
        if owned is not None:
            owned.append(paypal_http)
        providers.append(
            PayPalProvider(
                paypal_http,
                settings.paypal_client_id,
                settings.paypal_client_secret,
                approve=paypal_approver,
            )
        )
    providers.append(GooglePayProvider())
    return providers


async def open_storefront(
    settings: Settings | None = None,
    *,
    catalog: Catalog | None = None,
    storage: Storage | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    providers: Iterable[PaymentProvider] | None = None,
    check_stock: bool = False,
    paypal_approver: Approver | None = None,
) -> Storefront:
    """
    Wire a Storefront.

    `storage` defaults to SQLAlchemy at settings.storage_url, or memory when
    that is empty. `transport` replaces the network for the API client
    (tests pass an httpx.MockTransport or ASGITransport).
    """
    settings = settings or Settings()
    owned: list[Any] = []

    if storage is None:
        if settings.storage_url:
            storage = await SQLAlchemyStorage.create(settings.storage_url)
            owned.append(storage)
        else:
            storage = MemoryStorage()

    sessions = await MultiAccountStore.open(storage)
    http = httpx.AsyncClient(
        base_url=settings.api_base_url,
        timeout=settings.http_timeout,
        transport=transport,
        event_hooks=SessionHooks(sessions).event_hooks(),
    )
    owned.append(http)

    if providers is None:
        providers = default_providers(settings, owned=owned, paypal_approver=paypal_approver)

    payments = PaymentDispatcher(providers)
    cart = await Cart.load(storage, stock=ApiStockValidator(http) if check_stock else None)

    logger.info(
        "storefront ready: api=%s storage=%s payments=%s",
        settings.api_base_url,
        storage.name,
        ",".join(m.value for m in payments.methods),
    )
    return Storefront(
        settings=settings,
        storage=storage,
        sessions=sessions,
        http=http,
        auth=AuthClient(http, sessions),
        shipping=ShippingRateClient(http),
        payments=payments,
        catalog=catalog if catalog is not None else Catalog(),
        cart=cart,
        _owned=owned,
    )


__all__ = (
    "Storefront",
    "default_providers",
    "open_storefront",
)
