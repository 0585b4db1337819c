"""
Payment data validation. Runs before any provider call.
"""

from __future__ import annotations

import re
from decimal import Decimal

from stitchcart._types import round_cents
from stitchcart.payments._types import PaymentData

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MINIMUM_AMOUNT = Decimal("0.50")
SUPPORTED_CURRENCIES = ("USD", "EUR", "GBP", "CAD", "AUD", "JPY", "CHF", "NOK", "DKK", "SEK")


def _blank(value: str | None) -> bool:
    return not value or not value.strip()


def is_valid_email(email: str | None) -> bool:
    return bool(email) and EMAIL_RE.match(email or "") is not None


def is_currency_supported(currency: str) -> bool:
    return currency.upper() in SUPPORTED_CURRENCIES


def _customer_errors(data: PaymentData, *, check_minimum: bool) -> list[str]:
    errors: list[str] = []
    if not data.amount or data.amount <= 0:
        errors.append("Amount must be greater than 0")
    if check_minimum and data.amount < MINIMUM_AMOUNT:
        errors.append("Minimum amount is $0.50")
    if not data.currency or len(data.currency) != 3:
        errors.append("Valid currency code is required")
    if not is_valid_email(data.customer_email):
        errors.append("Valid customer email is required")
    if _blank(data.customer_name):
        errors.append("Customer name is required")
    if _blank(data.description):
        errors.append("Payment description is required")
    return errors


def validate_paypal_data(data: PaymentData) -> list[str]:
    """PayPal needs no billing address."""
    return _customer_errors(data, check_minimum=False)


def validate_payment_data(data: PaymentData) -> list[str]:
    """All problems, in display order. Empty list means valid."""
    errors = _customer_errors(data, check_minimum=True)

    billing = data.billing_address
    if _blank(billing.line1):
        errors.append("Billing address line 1 is required")
    if _blank(billing.city):
        errors.append("Billing city is required")
    if _blank(billing.state):
        errors.append("Billing state is required")
    if _blank(billing.postal_code):
        errors.append("Billing postal code is required")
    if _blank(billing.country):
        errors.append("Billing country is required")
    return errors


def format_amount(amount: Decimal, currency: str) -> str:
    """`$53.19` for USD, `53.19 EUR` otherwise."""
    rounded = round_cents(amount)
    if currency.upper() == "USD":
        return f"${rounded:,.2f}"
    return f"{rounded:,.2f} {currency.upper()}"


__all__ = (
    "EMAIL_RE",
    "MINIMUM_AMOUNT",
    "SUPPORTED_CURRENCIES",
    "is_valid_email",
    "is_currency_supported",
    "validate_paypal_data",
    "validate_payment_data",
    "format_amount",
)
