from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from urllib.parse import urlencode

__all__ = [
    "REGION_URLS",
    "DEFAULT_AUDIENCE",
    "region_base_url",
    "register_url",
    "verify_url",
]

REGION_URLS: Mapping[str, str] = MappingProxyType(
    {
        "na": "https://fleet-api.prd.na.vn.cloud.tesla.com",
        "eu": "https://fleet-api.prd.eu.vn.cloud.tesla.com",
    }
)

# Partner tokens are minted for the North American audience.
DEFAULT_AUDIENCE = REGION_URLS["na"]


def region_base_url(region: object) -> str | None:
    """Return the base URL for a region code, or None if it is unknown."""
    if not isinstance(region, str):
        return None
    return REGION_URLS.get(region)


def register_url(base_url: str) -> str:
    return f"{base_url}/api/1/partner_accounts"


def verify_url(base_url: str, domain: str) -> str:
    return f"{base_url}/api/1/partner_accounts/public_key?{urlencode({'domain': domain})}"
