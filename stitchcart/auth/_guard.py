"""
Refresh guard — caps token refresh attempts per time window.
"""

from __future__ import annotations

import time
from collections.abc import Callable


class RefreshGuard:
    """
    At most `max_attempts` refreshes inside a sliding `window` (seconds).

    When the cap is hit the counter resets, so the next 401 after that
    gets a fresh budget. A successful refresh also resets it.

    Example:
        guard = RefreshGuard()
        if guard.try_acquire():
            ...  # POST /auth/refresh
    """

    def __init__(
        self,
        max_attempts: int = 3,
        window: float = 30.0,
        *,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.max_attempts = max_attempts
        self.window = window
        self._monotonic = monotonic
        self._count = 0
        self._last: float | None = None

    @property
    def attempts(self) -> int:
        return self._count

    def try_acquire(self) -> bool:
        now = self._monotonic()
        if self._last is not None and now - self._last > self.window:
            self._count = 0
        if self._count >= self.max_attempts:
            self._count = 0
            return False
        self._count += 1
        self._last = now
        return True

    def reset(self) -> None:
        self._count = 0


__all__ = ("RefreshGuard",)
