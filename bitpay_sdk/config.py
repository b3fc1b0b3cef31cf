"""Client settings for the BitPay SDK.

Reads environment variables with sensible defaults; keyword overrides passed
to ``load_settings`` win over the environment.
"""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from bitpay_sdk.errors import ConfigurationError

NETWORKS: Dict[str, str] = {
    "livenet": "https://bitpay.com",
    "testnet": "https://test.bitpay.com",
}

DEFAULT_ACCEPT_VERSION = "2.0.0"


def _float_env(key: str, default: float) -> float:
    """Parse a float env var with fallback."""
    val = os.environ.get(key)
    if val is None:
        return default
    try:
        return float(val)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    """Immutable client configuration."""

    api_url: str = ""
    network: str = ""
    timeout: float = 30.0
    accept_version: str = DEFAULT_ACCEPT_VERSION
    plugin_info: str = ""

    def base_url(self) -> str:
        """Effective API host: explicit ``api_url`` first, then ``network``."""
        url = self.api_url.strip()
        if url:
            return url.rstrip("/")
        if self.network:
            try:
                return NETWORKS[self.network.lower()]
            except KeyError:
                raise ConfigurationError(
                    f"unknown network {self.network!r}; expected one of {sorted(NETWORKS)}"
                ) from None
        raise ConfigurationError(
            "no API url set: pass base_url or set BITPAY_API_URL / BITPAY_NETWORK"
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_settings(
    api_url: Optional[str] = None,
    **overrides: Any,
) -> Settings:
    """Load settings from the environment with optional overrides.

    Args:
        api_url: Override the API host (scheme included)
        **overrides: Additional field overrides

    Returns:
        Settings instance
    """
    settings = Settings(
        api_url=os.environ.get("BITPAY_API_URL", ""),
        network=os.environ.get("BITPAY_NETWORK", ""),
        timeout=_float_env("BITPAY_TIMEOUT", 30.0),
        accept_version=os.environ.get("BITPAY_ACCEPT_VERSION", DEFAULT_ACCEPT_VERSION),
        plugin_info=os.environ.get("BITPAY_PLUGIN_INFO", ""),
    )

    if api_url is not None:
        settings = Settings(**{**settings.to_dict(), "api_url": api_url})

    if overrides:
        current = settings.to_dict()
        current.update(overrides)
        settings = Settings(**current)

    return settings
