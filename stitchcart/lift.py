"""
Lift — Helpers for lifting values and raising awaitables into LazyCoroResult.

Re-exports from combinators.lift with stitchcart naming on top.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

# Re-export from combinators.lift
from combinators.lift import (
    catching_async,
    fail,
    from_result,
    pure,
)

from stitchcart._types import Lazy


def from_awaitable[T, E](
    awaitable_fn: Callable[[], Awaitable[T]],
    on_error: Callable[[Exception], E],
) -> Lazy[T, E]:
    """
    Create LazyCoroResult from async function.

    Alias for catching_async. Exceptions become Error(on_error(exc));
    cancellation is not an Exception and propagates untouched.

    Example:
        result = await from_awaitable(
            lambda: http.post("/shipping/rates", json=payload),
            on_error=lambda e: ShippingError(ShippingErrorKind.TRANSPORT, str(e)),
        )
    """
    return catching_async(awaitable_fn, on_error=on_error)


__all__ = (
    # From combinators.lift
    "pure",
    "fail",
    "from_result",
    "catching_async",
    # Stitchcart additions
    "from_awaitable",
)
