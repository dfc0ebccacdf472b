from __future__ import annotations

import json
from typing import Any

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, Response
from pydantic import BaseModel, ValidationError

from ..domain.keys import resolve_public_key_from_env
from ..domain.outcomes import RegionOutcome
from ..logging_conf import get_logger
from ..page import render_index_html
from ..service import partner_api
from .models import DomainRequest, TokenRequest

router = APIRouter()
logger = get_logger("api")

PUBLIC_KEY_PATH = "/.well-known/appspecific/com.tesla.3p.public-key.pem"

MISSING_CREDENTIALS = "clientId and clientSecret are required"
MISSING_DOMAIN_FIELDS = "Domain, token, and regions are required"


async def _read_json_object(request: Request) -> dict[str, Any]:
    """Return the request body as a dict.

    An empty body or a JSON value that is not an object reads as {} so that
    the field checks below report what is missing.
    """
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        body = json.loads(raw)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid JSON body")
    return body if isinstance(body, dict) else {}


async def _parse(request: Request, model: type[BaseModel], missing: str) -> Any:
    body = await _read_json_object(request)
    try:
        return model.model_validate(body)
    except ValidationError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=missing)


@router.get("/", response_class=HTMLResponse, summary="Configuration helper page")
@router.get("/index.html", response_class=HTMLResponse, include_in_schema=False)
async def index() -> HTMLResponse:
    return HTMLResponse(render_index_html(resolve_public_key_from_env()))


@router.get(PUBLIC_KEY_PATH, summary="Partner public key (PEM)")
async def public_key() -> Response:
    """Serve the resolved key verbatim, or 404 when none is configured."""
    pem = resolve_public_key_from_env()
    if not pem:
        return PlainTextResponse("Public key not found", status_code=status.HTTP_404_NOT_FOUND)
    return Response(content=pem, media_type="application/x-pem-file")


@router.post("/get-token", summary="Exchange client credentials for a partner token")
async def get_token(request: Request) -> JSONResponse:
    req: TokenRequest = await _parse(request, TokenRequest, MISSING_CREDENTIALS)
    if not req.clientId or not req.clientSecret:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=MISSING_CREDENTIALS)
    status_code, data = await partner_api.request_partner_token(req.clientId, req.clientSecret)
    return JSONResponse(status_code=status_code, content=data)


async def _domain_request(request: Request) -> DomainRequest:
    req: DomainRequest = await _parse(request, DomainRequest, MISSING_DOMAIN_FIELDS)
    if not req.domain or not req.token or not req.regions:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=MISSING_DOMAIN_FIELDS)
    return req


@router.post(
    "/register",
    response_model=list[RegionOutcome],
    summary="Register a domain in one or more regions",
)
async def register(request: Request) -> list[RegionOutcome]:
    """Fan out one registration per region; failures are reported per region."""
    req = await _domain_request(request)
    return await partner_api.register_domain(req.token, req.domain, req.regions)


@router.post(
    "/verify",
    response_model=list[RegionOutcome],
    summary="Verify a domain registration in one or more regions",
)
async def verify(request: Request) -> list[RegionOutcome]:
    req = await _domain_request(request)
    return await partner_api.verify_domain(req.token, req.domain, req.regions)
