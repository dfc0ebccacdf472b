"""Unit tests for the partner API client."""

from __future__ import annotations

import asyncio
import json
from urllib.parse import parse_qs

import httpx
import pytest
from respx import MockRouter

from key_beacon.config import PARTNER_SCOPE, TESLA_AUTH_URL
from key_beacon.domain.outcomes import RegionFailure, RegionSuccess
from key_beacon.domain.regions import REGION_URLS
from key_beacon.service.partner_api import (
    register_domain,
    request_partner_token,
    verify_domain,
)

NA_HOST = "fleet-api.prd.na.vn.cloud.tesla.com"
EU_HOST = "fleet-api.prd.eu.vn.cloud.tesla.com"
REGISTER_PATH = "/api/1/partner_accounts"
VERIFY_PATH = "/api/1/partner_accounts/public_key"
TOKEN = "partner-token"
DOMAIN = "example.com"


@pytest.mark.asyncio
async def test_register_domain_all_regions_succeed(respx_mock: MockRouter) -> None:
    """Both regions are called with the bearer token and the domain body."""
    na = respx_mock.post(host=NA_HOST, path=REGISTER_PATH).mock(
        return_value=httpx.Response(200, json={"response": {"domain": DOMAIN}})
    )
    eu = respx_mock.post(host=EU_HOST, path=REGISTER_PATH).mock(
        return_value=httpx.Response(200, json={"response": {"domain": DOMAIN}})
    )

    outcomes = await register_domain(TOKEN, DOMAIN, ["na", "eu"])

    assert [o.region for o in outcomes] == ["na", "eu"]
    assert all(isinstance(o, RegionSuccess) for o in outcomes)
    assert outcomes[0].url == f"{REGION_URLS['na']}{REGISTER_PATH}"
    assert outcomes[1].data == {"response": {"domain": DOMAIN}}
    for route in (na, eu):
        request = route.calls.last.request
        assert request.headers["Authorization"] == f"Bearer {TOKEN}"
        assert json.loads(request.content) == {"domain": DOMAIN}


@pytest.mark.asyncio
async def test_verify_domain_one_region_fails(respx_mock: MockRouter) -> None:
    """An upstream error in one region leaves the other region's success intact."""
    na = respx_mock.get(host=NA_HOST, path=VERIFY_PATH).mock(
        return_value=httpx.Response(200, json={"response": {"public_key": "04ab"}})
    )
    respx_mock.get(host=EU_HOST, path=VERIFY_PATH).mock(
        return_value=httpx.Response(404, json={"error": "domain not found"})
    )

    outcomes = await verify_domain(TOKEN, DOMAIN, ["na", "eu"])

    assert len(outcomes) == 2
    assert isinstance(outcomes[0], RegionSuccess)
    assert outcomes[0].data == {"response": {"public_key": "04ab"}}
    assert outcomes[1] == RegionFailure(region="eu", error="API error for eu: domain not found")

    request = na.calls.last.request
    assert request.method == "GET"
    assert request.url.params["domain"] == DOMAIN
    assert request.headers["Authorization"] == f"Bearer {TOKEN}"


@pytest.mark.asyncio
async def test_partner_error_without_message_or_json(respx_mock: MockRouter) -> None:
    respx_mock.post(host=NA_HOST, path=REGISTER_PATH).mock(
        return_value=httpx.Response(500, text="<html>oops</html>")
    )

    outcomes = await register_domain(TOKEN, DOMAIN, ["na"])

    assert outcomes == [RegionFailure(region="na", error="API error for na: Unknown")]


@pytest.mark.asyncio
async def test_partner_error_uses_msg_field(respx_mock: MockRouter) -> None:
    respx_mock.post(host=NA_HOST, path=REGISTER_PATH).mock(
        return_value=httpx.Response(400, json={"msg": "bad domain"})
    )

    outcomes = await register_domain(TOKEN, DOMAIN, ["na"])

    assert outcomes[0].error == "API error for na: bad domain"


@pytest.mark.asyncio
async def test_invalid_region_is_a_per_region_failure(respx_mock: MockRouter) -> None:
    respx_mock.post(host=NA_HOST, path=REGISTER_PATH).mock(
        return_value=httpx.Response(200, json={})
    )

    outcomes = await register_domain(TOKEN, DOMAIN, ["na", "ap"])

    assert isinstance(outcomes[0], RegionSuccess)
    assert outcomes[1] == RegionFailure(region="ap", error="Invalid region: ap")


@pytest.mark.asyncio
async def test_transport_error_is_a_per_region_failure(respx_mock: MockRouter) -> None:
    respx_mock.get(host=NA_HOST, path=VERIFY_PATH).mock(
        side_effect=httpx.ConnectError("connection refused")
    )
    respx_mock.get(host=EU_HOST, path=VERIFY_PATH).mock(
        return_value=httpx.Response(200, json={"response": {}})
    )

    outcomes = await verify_domain(TOKEN, DOMAIN, ["na", "eu"])

    assert outcomes[0] == RegionFailure(region="na", error="Request failed for na: connection refused")
    assert outcomes[1].status == "fulfilled"


@pytest.mark.asyncio
async def test_request_partner_token_posts_form(respx_mock: MockRouter) -> None:
    route = respx_mock.post(TESLA_AUTH_URL).mock(
        return_value=httpx.Response(200, json={"access_token": "abc", "expires_in": 28800})
    )

    status_code, data = await request_partner_token("cid", "secret")

    assert status_code == 200
    assert data["access_token"] == "abc"
    request = route.calls.last.request
    assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
    form = parse_qs(request.content.decode())
    assert form == {
        "grant_type": ["client_credentials"],
        "client_id": ["cid"],
        "client_secret": ["secret"],
        "scope": [PARTNER_SCOPE],
        "audience": [REGION_URLS["na"]],
    }


@pytest.mark.asyncio
async def test_request_partner_token_proxies_error_status(respx_mock: MockRouter) -> None:
    respx_mock.post(TESLA_AUTH_URL).mock(return_value=httpx.Response(401, text="denied"))

    status_code, data = await request_partner_token("cid", "wrong")

    assert status_code == 401
    assert data == {}


@pytest.mark.asyncio
async def test_regions_are_called_concurrently(respx_mock: MockRouter) -> None:
    """The na call only completes once the eu call has been issued."""
    eu_in_flight = asyncio.Event()

    async def na_reply(request: httpx.Request) -> httpx.Response:
        await asyncio.wait_for(eu_in_flight.wait(), timeout=2.0)
        return httpx.Response(200, json={"region": "na"})

    def eu_reply(request: httpx.Request) -> httpx.Response:
        eu_in_flight.set()
        return httpx.Response(200, json={"region": "eu"})

    respx_mock.post(host=NA_HOST, path=REGISTER_PATH).mock(side_effect=na_reply)
    respx_mock.post(host=EU_HOST, path=REGISTER_PATH).mock(side_effect=eu_reply)

    outcomes = await register_domain(TOKEN, DOMAIN, ["na", "eu"])

    assert [o.status for o in outcomes] == ["fulfilled", "fulfilled"]
    assert [o.region for o in outcomes] == ["na", "eu"]
    assert [o.data for o in outcomes] == [{"region": "na"}, {"region": "eu"}]
