"""
Government open-data proxies (EPC, HM Land Registry, flood risk, crime).

Each lookup checks api_cache first, then calls the upstream API and caches
the transformed response. EPC and HMLR serve mock data when no API key is
configured; HMLR, flood and crime also fall back to mock data when the
upstream call fails.
"""

import base64
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from passport.core.config import Settings
from passport.models.enums import ApiProvider
from passport.schemas.integrations import CrimeRequest, EpcRequest, FloodRequest, HmlrRequest
from passport.services.api_cache import generate_cache_key, get_cached_data, set_cached_data

logger = logging.getLogger(__name__)

EPC_API_URL = "https://epc.opendatacommunities.org/api/v1/domestic/search"
HMLR_API_BASE_URL = "https://use-land-property-data.service.gov.uk/api/v1"
FLOOD_API_URL = "https://environment.data.gov.uk/flood-monitoring/id/floods"
CRIME_API_URL = "https://data.police.uk/api/crimes-street/all-crime"

EPC_TTL_HOURS = 24 * 7
EPC_ERROR_TTL_HOURS = 1
HMLR_TTL_HOURS = 24 * 30
FLOOD_TTL_HOURS = 24 * 30
CRIME_TTL_HOURS = 24 * 7


class UpstreamError(Exception):
    """Non-2xx response from an upstream API."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class LookupResult:
    data: Any
    cached: bool = False


def _iso_now() -> str:
    return datetime.utcnow().isoformat() + "Z"


def _round_coordinate(value: float) -> float:
    return round(value, 4)


class GovernmentDataService:
    """Cached lookups against UK government data APIs."""

    def __init__(
        self,
        db: AsyncSession,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.db = db
        self.settings = settings
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=self.transport,
            timeout=self.settings.integration_timeout_seconds,
            headers={"Accept": "application/json"},
        )

    async def _cached(self, provider: ApiProvider, cache_key: str) -> Optional[LookupResult]:
        payload = await get_cached_data(self.db, provider, cache_key)
        if payload is None:
            return None
        logger.info(f"[{provider.value.upper()}] Cache hit {cache_key}")
        return LookupResult(payload, cached=True)

    # ------------------------------------------------------------------
    # EPC register
    # ------------------------------------------------------------------

    async def epc(self, params: EpcRequest) -> LookupResult:
        """Energy Performance Certificates. Upstream errors are cached briefly and raised."""
        lookup = params.model_dump(exclude_none=True)
        cache_key = generate_cache_key(ApiProvider.EPC, lookup)

        hit = await self._cached(ApiProvider.EPC, cache_key)
        if hit:
            return hit

        if not self.settings.epc_api_key:
            mock = {"message": "EPC API key not configured. Using mock data.", "data": []}
            await set_cached_data(self.db, ApiProvider.EPC, cache_key, mock, EPC_TTL_HOURS)
            return LookupResult(mock)

        token = base64.b64encode(f"{self.settings.epc_api_key}:".encode()).decode()
        async with self._client() as client:
            response = await client.get(
                EPC_API_URL,
                params=lookup,
                headers={"Authorization": f"Basic {token}"},
            )

        if response.is_error:
            message = f"EPC API error: {response.status_code} {response.reason_phrase}"
            logger.warning(f"[EPC] {message}")
            await set_cached_data(
                self.db, ApiProvider.EPC, cache_key, {}, EPC_ERROR_TTL_HOURS, error_message=message
            )
            raise UpstreamError(message, response.status_code)

        data = response.json()
        await set_cached_data(self.db, ApiProvider.EPC, cache_key, data, EPC_TTL_HOURS)
        return LookupResult(data)

    # ------------------------------------------------------------------
    # HM Land Registry
    # ------------------------------------------------------------------

    def _hmlr_request(self, params: HmlrRequest) -> tuple[str, dict[str, str]]:
        if params.title_number:
            return f"{HMLR_API_BASE_URL}/titles/{params.title_number}", {}
        if params.uprn:
            return f"{HMLR_API_BASE_URL}/titles", {"uprn": params.uprn}
        return f"{HMLR_API_BASE_URL}/titles", {"postcode": params.postcode}

    async def hmlr(self, params: HmlrRequest) -> LookupResult:
        """Title register lookup by title number, UPRN or postcode (in that order)."""
        cache_key = generate_cache_key(ApiProvider.HMLR, params.model_dump(exclude_none=True))

        hit = await self._cached(ApiProvider.HMLR, cache_key)
        if hit:
            return hit

        if not self.settings.hmlr_api_key:
            mock = {
                "message": "HMLR API key not configured. Using mock data.",
                "title_number": params.title_number or None,
                "tenure": "freehold",
                "price_history": [],
            }
            await set_cached_data(self.db, ApiProvider.HMLR, cache_key, mock, HMLR_TTL_HOURS)
            return LookupResult(mock)

        url, query = self._hmlr_request(params)
        try:
            async with self._client() as client:
                response = await client.get(
                    url,
                    params=query,
                    headers={"Authorization": f"Bearer {self.settings.hmlr_api_key}"},
                )
            if response.is_error:
                raise UpstreamError(f"HMLR API error: {response.status_code}", response.status_code)
            data = response.json()
            result = {
                "title_number": params.title_number or data.get("title_number"),
                "tenure": data.get("tenure") or "unknown",
                "price_history": data.get("price_history") or [],
                "last_updated": _iso_now(),
                "raw_data": data,
            }
        except (httpx.HTTPError, UpstreamError, ValueError) as e:
            logger.warning(f"[HMLR] Falling back to mock data: {e}")
            result = {
                "title_number": params.title_number or None,
                "tenure": "freehold",
                "price_history": [],
                "message": "HMLR API error. Using mock data.",
                "last_updated": _iso_now(),
            }

        await set_cached_data(self.db, ApiProvider.HMLR, cache_key, result, HMLR_TTL_HOURS)
        return LookupResult(result)

    # ------------------------------------------------------------------
    # Environment Agency flood monitoring
    # ------------------------------------------------------------------

    async def flood(self, params: FloodRequest) -> LookupResult:
        cache_key = generate_cache_key(
            ApiProvider.FLOOD,
            {
                "latitude": _round_coordinate(params.latitude),
                "longitude": _round_coordinate(params.longitude),
                "uprn": params.uprn,
            },
        )

        hit = await self._cached(ApiProvider.FLOOD, cache_key)
        if hit:
            return hit

        coordinates = {"latitude": params.latitude, "longitude": params.longitude}
        try:
            async with self._client() as client:
                response = await client.get(
                    FLOOD_API_URL,
                    params={"lat": str(params.latitude), "lon": str(params.longitude)},
                )
            if response.is_error:
                raise UpstreamError(f"Flood API error: {response.status_code}", response.status_code)
            result = {
                # risk_level is fixed at "low"; the flood feed is passed through as risk_details
                "risk_level": "low",
                "risk_details": response.json(),
                "coordinates": coordinates,
                "last_updated": _iso_now(),
            }
        except (httpx.HTTPError, UpstreamError, ValueError) as e:
            logger.warning(f"[FLOOD] Falling back to mock data: {e}")
            result = {
                "risk_level": "low",
                "risk_details": {"message": "Flood API not configured. Using mock data."},
                "coordinates": coordinates,
                "last_updated": _iso_now(),
            }

        await set_cached_data(self.db, ApiProvider.FLOOD, cache_key, result, FLOOD_TTL_HOURS)
        return LookupResult(result)

    # ------------------------------------------------------------------
    # Police.uk street crime
    # ------------------------------------------------------------------

    async def crime(self, params: CrimeRequest) -> LookupResult:
        """Street-level crimes for a month (defaults to the current month)."""
        date = params.date or datetime.utcnow().strftime("%Y-%m")
        cache_key = generate_cache_key(
            ApiProvider.CRIME,
            {
                "latitude": _round_coordinate(params.latitude),
                "longitude": _round_coordinate(params.longitude),
                "date": date,
            },
        )

        hit = await self._cached(ApiProvider.CRIME, cache_key)
        if hit:
            return hit

        coordinates = {"latitude": params.latitude, "longitude": params.longitude}
        query = {"lat": str(params.latitude), "lng": str(params.longitude)}
        if params.date:
            query["date"] = params.date

        try:
            async with self._client() as client:
                response = await client.get(CRIME_API_URL, params=query)
            if response.is_error:
                raise UpstreamError(f"Crime API error: {response.status_code}", response.status_code)
            crimes = response.json()
            breakdown: dict[str, int] = {}
            for crime in crimes:
                category = crime.get("category")
                breakdown[category] = breakdown.get(category, 0) + 1
            result = {
                "total_crimes": len(crimes),
                "category_breakdown": breakdown,
                "coordinates": coordinates,
                "date": date,
                "raw_data": crimes,
                "last_updated": _iso_now(),
            }
        except (httpx.HTTPError, UpstreamError, ValueError, AttributeError) as e:
            logger.warning(f"[CRIME] Falling back to mock data: {e}")
            result = {
                "total_crimes": 0,
                "category_breakdown": {},
                "coordinates": coordinates,
                "date": date,
                "message": "Crime API error. Using mock data.",
                "last_updated": _iso_now(),
            }

        await set_cached_data(self.db, ApiProvider.CRIME, cache_key, result, CRIME_TTL_HOURS)
        return LookupResult(result)
