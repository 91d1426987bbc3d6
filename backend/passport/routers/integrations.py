"""Integrations router - cached proxies for UK government property data.

Every response carries permissive CORS headers so browser clients on other
origins can call these endpoints directly.
"""

import logging
from typing import Any, Awaitable, Callable, Optional

import httpx
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from passport.core.config import get_settings
from passport.core.database import get_db
from passport.schemas.base import first_error_message
from passport.schemas.integrations import CrimeRequest, EpcRequest, FloodRequest, HmlrRequest
from passport.services.integrations import GovernmentDataService, LookupResult, UpstreamError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/integrations", tags=["integrations"])

ALLOWED_HEADERS = "authorization, x-client-info, apikey, content-type"
ALLOWED_METHODS = "POST, OPTIONS"

LOOKUPS: dict[str, type[BaseModel]] = {
    "epc": EpcRequest,
    "hmlr": HmlrRequest,
    "flood": FloodRequest,
    "crime": CrimeRequest,
}


def get_http_transport() -> Optional[httpx.AsyncBaseTransport]:
    """Transport for upstream calls; None uses the default network transport."""
    return None


def cors_headers(request: Request) -> dict[str, str]:
    return {
        "Access-Control-Allow-Origin": request.headers.get("origin") or "*",
        "Access-Control-Allow-Headers": ALLOWED_HEADERS,
        "Access-Control-Allow-Methods": ALLOWED_METHODS,
    }


async def _read_body(request: Request) -> dict[str, Any]:
    """JSON object body; anything unparseable counts as empty."""
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


async def _proxy(
    request: Request,
    provider: str,
    db: AsyncSession,
    transport: Optional[httpx.AsyncBaseTransport],
) -> JSONResponse:
    headers = cors_headers(request)
    schema = LOOKUPS[provider]

    try:
        params = schema.model_validate(await _read_body(request))
    except ValidationError as e:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "error": f"Validation error: {first_error_message(e.errors())}"},
            headers=headers,
        )

    service = GovernmentDataService(db, get_settings(), transport=transport)
    lookup: Callable[[BaseModel], Awaitable[LookupResult]] = getattr(service, provider)
    try:
        result = await lookup(params)
    except UpstreamError as e:
        return JSONResponse(
            status_code=e.status_code,
            content={"success": False, "error": str(e)},
            headers=headers,
        )
    except Exception as e:
        logger.exception(f"[{provider.upper()}] Lookup failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "error": str(e) or "Internal server error"},
            headers=headers,
        )

    return JSONResponse(
        content={"success": True, "data": result.data, "cached": result.cached},
        headers=headers,
    )


@router.options("/{provider}")
async def preflight(provider: str, request: Request):
    if provider not in LOOKUPS:
        raise LookupError("Unknown integration")
    return Response(status_code=status.HTTP_204_NO_CONTENT, headers=cors_headers(request))


@router.post("/epc")
async def epc_lookup(
    request: Request,
    db: AsyncSession = Depends(get_db),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_http_transport),
):
    """Energy Performance Certificate search by uprn, postcode or address."""
    return await _proxy(request, "epc", db, transport)


@router.post("/hmlr")
async def hmlr_lookup(
    request: Request,
    db: AsyncSession = Depends(get_db),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_http_transport),
):
    """HM Land Registry title and price history."""
    return await _proxy(request, "hmlr", db, transport)


@router.post("/flood")
async def flood_lookup(
    request: Request,
    db: AsyncSession = Depends(get_db),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_http_transport),
):
    return await _proxy(request, "flood", db, transport)


@router.post("/crime")
async def crime_lookup(
    request: Request,
    db: AsyncSession = Depends(get_db),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_http_transport),
):
    return await _proxy(request, "crime", db, transport)
