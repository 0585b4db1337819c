"""
Accounts — customer and employee sessions side by side.

One login per role; switching only moves the current pointer.
"""

import httpx
from kungfu import Ok, Error

from stitchcart import Settings, open_storefront
from stitchcart.auth import AccountKind
from examples._infra import banner, fake_api, run


async def main() -> None:
    storefront = await open_storefront(
        Settings(api_base_url="http://shop.local/api/v1"),
        transport=httpx.MockTransport(fake_api),
        providers=[],
    )
    try:
        banner("Login")
        for email in ("ada@example.com", "grace@mayhem.test"):
            match await storefront.auth.login(email, "secret"):
                case Ok(data):
                    print(f"  ✓ {data.user.display_name} → {data.user.account_kind.value} slot")
                case Error(e):
                    print(f"  ✗ {e.message}")

        banner("Switch")
        await storefront.sessions.switch_account(AccountKind.CUSTOMER)
        for info in await storefront.sessions.all_account_info():
            marker = "*" if info.is_current else " "
            print(f"  {marker} {info.kind.value}: {info.user.email}")

        banner("Logout customer")
        await storefront.auth.logout(AccountKind.CUSTOMER)
        print(f"  current: {await storefront.sessions.current_account()}")
    finally:
        await storefront.aclose()


if __name__ == "__main__":
    run(main)
