from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Any, Literal

import httpx

from ..config import PARTNER_SCOPE, TESLA_AUTH_URL, get_partner_timeout_from_env
from ..domain.outcomes import RegionFailure, RegionOutcome, RegionSuccess
from ..domain.regions import DEFAULT_AUDIENCE, region_base_url, register_url, verify_url
from ..logging_conf import get_logger

__all__ = [
    "PartnerAPIError",
    "request_partner_token",
    "register_domain",
    "verify_domain",
]

logger = get_logger("service.partner_api")

Action = Literal["register", "verify"]


class PartnerAPIError(RuntimeError):
    """A partner call for one region could not produce a usable result."""

    def __init__(self, region: str, message: str) -> None:
        super().__init__(message)
        self.region = region


def _json_or_empty(response: httpx.Response) -> Any:
    """Parse a response body as JSON; anything unparseable becomes {}."""
    try:
        return response.json()
    except ValueError:
        return {}


def _partner_error_reason(data: Any) -> str:
    if isinstance(data, dict):
        reason = data.get("error") or data.get("msg")
        if reason:
            return str(reason)
    return "Unknown"


def _client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=get_partner_timeout_from_env())


async def request_partner_token(client_id: str, client_secret: str) -> tuple[int, Any]:
    """Exchange client credentials for a partner token.

    Returns the upstream status code and JSON body unchanged, so a rejected
    credential surfaces to the caller as the partner reported it.
    """
    form = {
        "grant_type": "client_credentials",
        "client_id": client_id,
        "client_secret": client_secret,
        "scope": PARTNER_SCOPE,
        "audience": DEFAULT_AUDIENCE,
    }
    async with _client() as client:
        r = await client.post(TESLA_AUTH_URL, data=form)
    logger.info(
        "partner.token",
        extra={"event": "partner_token", "status_code": r.status_code},
    )
    return r.status_code, _json_or_empty(r)


async def _call_region(
    client: httpx.AsyncClient, action: Action, region: str, *, token: str, domain: str
) -> RegionSuccess:
    """Issue one register/verify call. Raises on any failure."""
    base_url = region_base_url(region)
    if base_url is None:
        raise PartnerAPIError(region, f"Invalid region: {region}")

    headers = {"Authorization": f"Bearer {token}", "Content-Type": "application/json"}
    if action == "register":
        url = register_url(base_url)
        r = await client.post(url, headers=headers, json={"domain": domain})
    else:
        url = verify_url(base_url, domain)
        r = await client.get(url, headers=headers)

    data = _json_or_empty(r)
    if not r.is_success:
        raise PartnerAPIError(region, f"API error for {region}: {_partner_error_reason(data)}")
    return RegionSuccess(region=region, url=url, data=data)


def _to_failure(region: str, exc: Exception) -> RegionFailure:
    if isinstance(exc, PartnerAPIError):
        message = str(exc)
    elif isinstance(exc, httpx.HTTPError):
        message = f"Request failed for {region}: {str(exc) or type(exc).__name__}"
    else:
        message = f"Request failed for {region}: {exc!r}"
    return RegionFailure(region=region, error=message)


async def _fan_out(
    action: Action, *, token: str, domain: str, regions: Sequence[Any]
) -> list[RegionOutcome]:
    """Run one call per region concurrently and wait for all of them.

    - One outcome per requested region, in request order
    - A failure in one region never cancels or alters another
    """
    # Entries arrive straight from the request body; tag outcomes by their text form.
    labels = [rg if isinstance(rg, str) else str(rg) for rg in regions]
    async with _client() as client:
        tasks = [_call_region(client, action, rg, token=token, domain=domain) for rg in labels]
        results = await asyncio.gather(*tasks, return_exceptions=True)

    outcomes: list[RegionOutcome] = []
    for region, res in zip(labels, results):
        if isinstance(res, RegionSuccess):
            outcomes.append(res)
            continue
        if not isinstance(res, Exception):
            raise res
        failure = _to_failure(region, res)
        logger.warning(
            "partner.region_failed",
            extra={
                "event": "partner_region_failed",
                "action": action,
                "region": region,
                "error": failure.error,
            },
        )
        outcomes.append(failure)

    logger.info(
        f"partner.{action}",
        extra={
            "event": f"partner_{action}",
            "domain": domain,
            "requested": len(regions),
            "succeeded": sum(1 for o in outcomes if isinstance(o, RegionSuccess)),
        },
    )
    return outcomes


async def register_domain(token: str, domain: str, regions: Sequence[Any]) -> list[RegionOutcome]:
    """Register `domain` with the partner API in every requested region."""
    return await _fan_out("register", token=token, domain=domain, regions=regions)


async def verify_domain(token: str, domain: str, regions: Sequence[Any]) -> list[RegionOutcome]:
    """Ask each requested region whether `domain` has a registered public key."""
    return await _fan_out("verify", token=token, domain=domain, regions=regions)
