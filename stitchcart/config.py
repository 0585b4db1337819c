"""
Settings — environment-driven configuration.

    settings = Settings.from_env()            # reads .env, then os.environ
    storefront = await open_storefront(settings)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_API_BASE_URL = "http://localhost:5001/api/v1"


def _get_env(*keys: str, default: str | None = None) -> str | None:
    for k in keys:
        v = os.getenv(k)
        if v is not None and str(v).strip() != "":
            return v.strip()
    return default


def _get_float(*keys: str, default: float) -> float:
    v = _get_env(*keys, default=None)
    if v is None:
        return default
    return float(v)


def _get_decimal(*keys: str, default: str) -> Decimal:
    v = _get_env(*keys, default=default) or default
    try:
        return Decimal(v)
    except InvalidOperation as exc:
        raise ValueError(f"{keys[0]} must be a decimal number, got {v!r}") from exc


@dataclass(frozen=True, slots=True)
class Settings:
    api_base_url: str = DEFAULT_API_BASE_URL
    http_timeout: float = 30.0
    currency: str = "USD"
    tax_rate: Decimal = Decimal("0.08")
    storage_url: str = ""
    stripe_secret_key: str = ""
    paypal_client_id: str = ""
    paypal_client_secret: str = ""
    paypal_mode: str = "sandbox"

    @property
    def paypal_base_url(self) -> str:
        if self.paypal_mode == "live":
            return "https://api-m.paypal.com"
        return "https://api-m.sandbox.paypal.com"

    @property
    def stripe_enabled(self) -> bool:
        return bool(self.stripe_secret_key)

    @property
    def paypal_enabled(self) -> bool:
        return bool(self.paypal_client_id and self.paypal_client_secret)

    @classmethod
    def from_env(cls, dotenv_path: str | Path | None = None) -> Settings:
        """Load `.env` (without overriding real env vars) and read settings."""
        load_dotenv(dotenv_path=dotenv_path)

        mode = (_get_env("PAYPAL_MODE", default="sandbox") or "sandbox").lower()
        if mode not in ("sandbox", "live"):
            raise ValueError(f"PAYPAL_MODE must be 'sandbox' or 'live', got {mode!r}")

        return cls(
            api_base_url=_get_env("API_BASE_URL", "VITE_API_URL", default=DEFAULT_API_BASE_URL)
            or DEFAULT_API_BASE_URL,
            http_timeout=_get_float("HTTP_TIMEOUT", default=30.0),
            currency=(_get_env("CURRENCY", default="USD") or "USD").upper(),
            tax_rate=_get_decimal("TAX_RATE", default="0.08"),
            storage_url=_get_env("STORAGE_URL", "DATABASE_URL", default="") or "",
            stripe_secret_key=_get_env("STRIPE_SECRET_KEY", default="") or "",
            paypal_client_id=_get_env("PAYPAL_CLIENT_ID", default="") or "",
            paypal_client_secret=_get_env("PAYPAL_CLIENT_SECRET", default="") or "",
            paypal_mode=mode,
        )


__all__ = ("Settings",)
