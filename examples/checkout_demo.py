"""
Checkout — cart to paid order in three steps.

    SHIPPING → PAYMENT → REVIEW → place_order()
"""

import httpx
from kungfu import Ok, Error

from stitchcart import Settings, open_storefront
from stitchcart import pricing as P
from stitchcart.payments import PaymentMethod, PayPalProvider
from examples._infra import PAYPAL_URL, approve_in_browser, banner, demo_catalog, fake_api, fake_paypal, run


async def go_to_orders(summary) -> None:
    print(f"  → navigating to order {summary.order_number}")


async def main() -> None:
    paypal_http = httpx.AsyncClient(base_url=PAYPAL_URL, transport=httpx.MockTransport(fake_paypal))
    paypal = PayPalProvider(paypal_http, "demo-client", "demo-secret", approve=approve_in_browser)
    storefront = await open_storefront(
        Settings(api_base_url="http://shop.local/api/v1"),
        catalog=demo_catalog(),
        transport=httpx.MockTransport(fake_api),
        providers=[paypal],
    )
    try:
        banner("Cart")
        logo = P.Customization(
            selection=P.SingleDesign(
                P.Design("logo.png", 2048),
                P.SelectedStyles(coverage=P.StyleOption("full", "Full coverage", "3.00")),
            ),
        ).with_placement(P.Placement.LEFT_CHEST)
        await storefront.cart.add("5", 2)
        await storefront.cart.add("7", 1, logo)
        for item in storefront.cart.items:
            price = P.item_price(item, storefront.catalog)
            print(f"  {item.product_id} x{item.quantity} @ {price}")

        banner("Checkout")
        flow = storefront.checkout(navigate=go_to_orders, navigate_delay=0.1)
        flow.shipper.first_name = "Ada"
        flow.shipper.last_name = "Lovelace"
        flow.shipper.email = "ada@example.com"
        flow.shipper.phone = "555-0100"
        flow.shipper.address = "1 Analytical Way"
        flow.shipper.city = "Austin"
        flow.shipper.state = "TX"
        flow.shipper.zip_code = "78701"

        await flow.next()
        print(f"  shipping: {flow.selected_rate.service_name} ${flow.selected_rate.total_cost}")
        flow.select_payment_method(PaymentMethod.PAYPAL)
        await flow.next()

        totals = flow.totals()
        print(f"  subtotal {totals.subtotal} + tax {totals.tax} + shipping {totals.shipping} = {totals.total}")

        match await flow.place_order():
            case Ok(summary):
                print(f"\n✓ Order {summary.order_number} paid ({summary.payment.payment_id})")
                print(f"  cart empty: {storefront.cart.is_empty}")
                await flow.navigation
            case Error(e):
                print(f"\n✗ {e.message}")
    finally:
        await storefront.aclose()
        await paypal_http.aclose()


if __name__ == "__main__":
    run(main)
