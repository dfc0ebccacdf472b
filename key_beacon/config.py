"""Environment-driven settings.

Values are read with os.getenv at the point of use, so a changed environment
is picked up by the next request without restarting the process.
"""
from __future__ import annotations

import os

__all__ = [
    "ENV_PUBLIC_KEY",
    "ENV_PUBLIC_KEY_BASE64",
    "ENV_PUBLIC_KEY_FILE",
    "ENV_FALLBACK_KEY",
    "TESLA_AUTH_URL",
    "PARTNER_SCOPE",
    "fallback_key_enabled",
    "get_partner_timeout_from_env",
]

ENV_PUBLIC_KEY = "TESLA_PUBLIC_KEY"
ENV_PUBLIC_KEY_BASE64 = "TESLA_PUBLIC_KEY_BASE64"
ENV_PUBLIC_KEY_FILE = "TESLA_PUBLIC_KEY_FILE"
ENV_FALLBACK_KEY = "KEY_BEACON_FALLBACK_KEY"

TESLA_AUTH_URL = "https://fleet-auth.prd.vn.cloud.tesla.com/oauth2/v3/token"
PARTNER_SCOPE = (
    "openid user_data vehicle_device_data vehicle_cmds vehicle_charging_cmds "
    "energy_device_data energy_cmds offline_access"
)

_FALSY = {"0", "false", "no", "off"}


def fallback_key_enabled() -> bool:
    """Return False when KEY_BEACON_FALLBACK_KEY is set to a falsy value."""
    raw = os.getenv(ENV_FALLBACK_KEY, "1")
    return raw.strip().lower() not in _FALSY


def get_partner_timeout_from_env() -> float | None:
    """Return PARTNER_TIMEOUT_S in seconds, or None (wait forever) if unset."""
    raw = os.getenv("PARTNER_TIMEOUT_S")
    if raw is None or not raw.strip():
        return None
    try:
        val = float(raw)
    except ValueError as e:
        raise ValueError("PARTNER_TIMEOUT_S must be a number") from e
    if val <= 0:
        raise ValueError("PARTNER_TIMEOUT_S must be positive")
    return val
