"""
stitchcart — checkout core for a custom-embroidery storefront.

    from stitchcart import pricing as P     # Line prices, material costs
    from stitchcart import cart as Ca       # Persisted cart
    from stitchcart import shipping as Sh   # Carrier quotes with fallback
    from stitchcart import payments as Pay  # Stripe / PayPal / Google Pay dispatch
    from stitchcart import checkout as Co   # Three-step wizard
    from stitchcart import auth as Au       # Customer + employee sessions

    storefront = await stitchcart.open_storefront(stitchcart.Settings.from_env())
"""

from stitchcart import lift
from stitchcart import storage
from stitchcart import catalog
from stitchcart import pricing
from stitchcart import cart
from stitchcart import shipping
from stitchcart import payments
from stitchcart import auth
from stitchcart import checkout
from stitchcart._types import (
    Lazy,
    Pure,
    Money,
    Clock,
    Sleep,
)
from stitchcart.config import Settings
from stitchcart.app import Storefront, open_storefront

__version__ = "0.1.0"

__all__ = (
    "lift",
    "storage",
    "catalog",
    "pricing",
    "cart",
    "shipping",
    "payments",
    "auth",
    "checkout",
    "Lazy",
    "Pure",
    "Money",
    "Clock",
    "Sleep",
    "Settings",
    "Storefront",
    "open_storefront",
)
