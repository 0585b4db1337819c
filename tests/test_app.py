from decimal import Decimal

import pytest
from kungfu import Error, Ok

from stitchcart import Settings, open_storefront
from stitchcart import payments as Pay
from stitchcart.auth import AccountKind
from stitchcart.cart import CartErrorKind
from stitchcart.checkout import Phase

from tests._infra import FakeClock, FakeProvider, make_catalog, no_sleep, run
from tests.fake_backend import BASE_URL, FakeBackend

SETTINGS = Settings(api_base_url=BASE_URL)


def test_storefront_login_to_order() -> None:
    backend = FakeBackend()
    provider = FakeProvider()

    async def main():
        storefront = await open_storefront(
            SETTINGS,
            catalog=make_catalog(),
            transport=backend.transport(),
            providers=[provider],
        )
        try:
            await storefront.auth.login("ada@example.com", "secret")
            await storefront.cart.add("5", 1)
            await storefront.cart.add("7", 2)

            flow = storefront.checkout(sleep=no_sleep, clock=FakeClock())
            flow.shipper.first_name = "Ada"
            flow.shipper.last_name = "Lovelace"
            flow.shipper.email = "ada@example.com"
            flow.shipper.phone = "555-0100"
            flow.shipper.address = "1 Analytical Way"
            flow.shipper.city = "Austin"
            flow.shipper.state = "TX"
            flow.shipper.zip_code = "78701"
            await flow.next()
            flow.select_payment_method(Pay.PaymentMethod.PAYPAL)
            await flow.next()
            result = await flow.place_order()
            return result, flow, await storefront.sessions.current_account()
        finally:
            await storefront.aclose()

    result, flow, current = run(main())

    match result:
        case Ok(summary):
            # 20.00 + 2 × 15.50, 8% tax, UPS Ground
            assert summary.totals.subtotal == Decimal("51.00")
            assert summary.totals.tax == Decimal("4.08")
            assert summary.totals.total == Decimal("66.33")
        case Error(err):
            pytest.fail(err.message)
    assert flow.phase is Phase.COMPLETE
    assert current is AccountKind.CUSTOMER

    payload = backend.shipping_payloads[0]
    assert payload["items"][1]["weight"] == {"value": 4, "units": "ounces"}


def test_cart_and_sessions_survive_restart(tmp_path) -> None:
    backend = FakeBackend()
    settings = Settings(api_base_url=BASE_URL, storage_url=f"sqlite+aiosqlite:///{tmp_path / 'shop.db'}")

    async def first() -> None:
        storefront = await open_storefront(settings, transport=backend.transport(), providers=[])
        try:
            await storefront.auth.login("grace@mayhem.test", "staff-pass")
            await storefront.cart.add("hoodie", 3)
        finally:
            await storefront.aclose()

    async def second():
        storefront = await open_storefront(settings, transport=backend.transport(), providers=[])
        try:
            return storefront.cart.count, await storefront.sessions.current_account()
        finally:
            await storefront.aclose()

    run(first())
    assert run(second()) == (3, AccountKind.EMPLOYEE)


def test_stock_checked_against_api_when_enabled() -> None:
    backend = FakeBackend()

    async def main():
        storefront = await open_storefront(
            SETTINGS, transport=backend.transport(), providers=[], check_stock=True,
        )
        try:
            return await storefront.cart.add("7", 1), storefront.cart.is_empty
        finally:
            await storefront.aclose()

    result, empty = run(main())
    match result:
        case Error(err):
            assert err.kind is CartErrorKind.OUT_OF_STOCK
            assert err.message == "This product is out of stock"
        case Ok(_):
            pytest.fail("added an out-of-stock product")
    assert empty


def test_default_providers_follow_settings() -> None:
    settings = Settings(
        api_base_url=BASE_URL,
        stripe_secret_key="sk_test_123",
        paypal_client_id="id",
        paypal_client_secret="secret",
    )

    async def main():
        storefront = await open_storefront(settings, transport=FakeBackend().transport())
        try:
            return storefront.payments.methods, len(storefront._owned)
        finally:
            await storefront.aclose()

    methods, owned = run(main())
    assert methods == (Pay.PaymentMethod.STRIPE, Pay.PaymentMethod.PAYPAL, Pay.PaymentMethod.GOOGLE)
    # API client and PayPal client
    assert owned == 2


def test_checkout_uses_configured_currency_and_tax() -> None:
    settings = Settings(api_base_url=BASE_URL, currency="EUR", tax_rate=Decimal("0.20"))

    async def main():
        storefront = await open_storefront(
            settings, catalog=make_catalog(), transport=FakeBackend().transport(), providers=[],
        )
        try:
            await storefront.cart.add("5", 1)
            return storefront.checkout().totals()
        finally:
            await storefront.aclose()

    totals = run(main())
    assert totals.tax == Decimal("4.00")
    assert totals.total == Decimal("33.99")
