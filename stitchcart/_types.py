"""
Core types for stitchcart.

Re-exports from kungfu + money helpers shared by every subpackage.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Never

# Re-export from kungfu
from kungfu import Result, Ok, Error, LazyCoroResult

# ═══════════════════════════════════════════════════════════════════════════════
# Lazy Computation Aliases
# ═══════════════════════════════════════════════════════════════════════════════

type Lazy[T, E] = LazyCoroResult[T, E]
"""Lazy async computation that may fail."""

type Pure[T] = Lazy[T, Never]
"""Lazy computation that cannot fail."""

# ═══════════════════════════════════════════════════════════════════════════════
# Money
# ═══════════════════════════════════════════════════════════════════════════════

type Money = Decimal
"""Amount in major currency units (dollars)."""

ZERO = Decimal("0")
CENT = Decimal("0.01")


def to_money(value: object) -> Decimal:
    """
    Coerce a loosely typed price into Decimal.

    None, empty strings, non-numeric strings and non-finite numbers become 0.
    Floats go through str() so 9.99 stays 9.99.
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, (float, str)):
        try:
            amount = Decimal(str(value).strip() or "0")
        except InvalidOperation:
            return ZERO
    else:
        return ZERO
    return amount if amount.is_finite() else ZERO


def round_cents(amount: Decimal) -> Decimal:
    """Round half-up to cents."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def to_cents(amount: Decimal) -> int:
    """Dollars → integer minor units."""
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


# ═══════════════════════════════════════════════════════════════════════════════
# Clock
# ═══════════════════════════════════════════════════════════════════════════════

type Clock = Callable[[], datetime]
"""Injectable wall clock (timezone-aware UTC)."""

type Sleep = Callable[[float], Awaitable[None]]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    # Re-exports from kungfu
    "Result",
    "Ok",
    "Error",
    "LazyCoroResult",
    # Type aliases
    "Lazy",
    "Pure",
    "Money",
    "Clock",
    "Sleep",
    # Money helpers
    "ZERO",
    "CENT",
    "to_money",
    "round_cents",
    "to_cents",
    "utcnow",
)
