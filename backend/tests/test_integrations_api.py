import httpx
import pytest
from sqlalchemy import select

from passport.core.config import get_settings
from passport.models.api_cache import ApiCacheEntry


@pytest.fixture
def epc_key(monkeypatch):
    monkeypatch.setattr(get_settings(), "epc_api_key", "epc-key")


async def test_epc_requires_a_lookup_key(client):
    r = await client.post("/v1/integrations/epc", json={})

    assert r.status_code == 400
    assert r.json() == {
        "success": False,
        "error": "Validation error: At least one of uprn, postcode, or address must be provided",
    }
    assert r.headers["access-control-allow-origin"] == "*"


async def test_epc_mock_data_is_cached(client, upstream, monkeypatch):
    monkeypatch.setattr(get_settings(), "epc_api_key", None)

    first = await client.post("/v1/integrations/epc", json={"postcode": "YO1 7HH"})
    second = await client.post("/v1/integrations/epc", json={"postcode": "YO1 7HH"})

    assert first.json()["cached"] is False
    assert first.json()["data"]["data"] == []
    assert second.json()["cached"] is True
    assert upstream.requests == []


async def test_epc_calls_upstream_with_basic_auth(client, upstream, epc_key):
    upstream.handler = lambda request: httpx.Response(200, json={"rows": [{"current-energy-rating": "C"}]})

    r = await client.post("/v1/integrations/epc", json={"uprn": "100"})

    assert r.json() == {"success": True, "data": {"rows": [{"current-energy-rating": "C"}]}, "cached": False}
    request = upstream.requests[0]
    assert request.url.params["uprn"] == "100"
    assert request.headers["authorization"].startswith("Basic ")


async def test_epc_upstream_error_status_passes_through(client, upstream, session_factory, epc_key):
    upstream.handler = lambda request: httpx.Response(429)

    r = await client.post("/v1/integrations/epc", json={"address": "1 Rose Lane"})

    assert r.status_code == 429
    assert r.json()["error"] == "EPC API error: 429 Too Many Requests"

    async with session_factory() as check:
        entry = (await check.execute(select(ApiCacheEntry))).scalar_one()
    assert entry.error_message == "EPC API error: 429 Too Many Requests"

    # error rows are never served from cache
    retry = await client.post("/v1/integrations/epc", json={"address": "1 Rose Lane"})
    assert retry.status_code == 429
    assert len(upstream.requests) == 2


async def test_flood_falls_back_when_upstream_fails(client, upstream):
    r = await client.post("/v1/integrations/flood", json={"latitude": 53.96, "longitude": -1.08})

    body = r.json()
    assert r.status_code == 200
    assert body["data"]["risk_level"] == "low"
    assert body["data"]["risk_details"]["message"] == "Flood API not configured. Using mock data."
    assert len(upstream.requests) == 1


async def test_flood_rejects_string_coordinates(client):
    r = await client.post("/v1/integrations/flood", json={"latitude": "53.9", "longitude": -1.08})

    assert r.status_code == 400
    assert r.json()["error"].startswith("Validation error: latitude")


async def test_crime_groups_by_category(client, upstream):
    upstream.handler = lambda request: httpx.Response(200, json=[
        {"category": "burglary"},
        {"category": "burglary"},
        {"category": "anti-social-behaviour"},
    ])

    r = await client.post(
        "/v1/integrations/crime",
        json={"latitude": 53.96, "longitude": -1.08, "date": "2024-05"},
    )

    data = r.json()["data"]
    assert data["total_crimes"] == 3
    assert data["category_breakdown"] == {"burglary": 2, "anti-social-behaviour": 1}
    assert data["date"] == "2024-05"
    assert upstream.requests[0].url.params["date"] == "2024-05"


async def test_unparseable_body_counts_as_empty(client):
    r = await client.post(
        "/v1/integrations/hmlr",
        content=b"not json",
        headers={"content-type": "application/json"},
    )

    assert r.status_code == 400
    assert r.json()["error"] == (
        "Validation error: At least one of title_number, uprn, or postcode must be provided"
    )


async def test_preflight(client):
    r = await client.options("/v1/integrations/crime")

    assert r.status_code == 204
    assert r.headers["access-control-allow-methods"] == "POST, OPTIONS"
    assert "content-type" in r.headers["access-control-allow-headers"]


@pytest.fixture
def hmlr_key(monkeypatch):
    monkeypatch.setattr(get_settings(), "hmlr_api_key", "hmlr-key")


async def test_hmlr_mock_data_without_key(client, upstream, monkeypatch):
    monkeypatch.setattr(get_settings(), "hmlr_api_key", None)

    first = await client.post("/v1/integrations/hmlr", json={"title_number": "NYK123"})
    second = await client.post("/v1/integrations/hmlr", json={"title_number": "NYK123"})

    assert first.json()["data"] == {
        "message": "HMLR API key not configured. Using mock data.",
        "title_number": "NYK123",
        "tenure": "freehold",
        "price_history": [],
    }
    assert first.json()["cached"] is False
    assert second.json()["cached"] is True
    assert upstream.requests == []


async def test_hmlr_title_number_takes_precedence(client, upstream, hmlr_key):
    upstream.handler = lambda request: httpx.Response(200, json={
        "tenure": "leasehold",
        "price_history": [{"price": 250000, "date": "2019-06-01"}],
    })

    r = await client.post("/v1/integrations/hmlr", json={"title_number": "NYK123", "uprn": "100"})

    data = r.json()["data"]
    assert data["title_number"] == "NYK123"
    assert data["tenure"] == "leasehold"
    assert data["price_history"] == [{"price": 250000, "date": "2019-06-01"}]
    assert data["raw_data"]["tenure"] == "leasehold"
    assert "last_updated" in data
    request = upstream.requests[0]
    assert request.url.path == "/api/v1/titles/NYK123"
    assert request.url.query == b""
    assert request.headers["authorization"] == "Bearer hmlr-key"


async def test_hmlr_uprn_before_postcode(client, upstream, hmlr_key):
    upstream.handler = lambda request: httpx.Response(200, json={"title_number": "YWE9"})

    r = await client.post("/v1/integrations/hmlr", json={"uprn": "100", "postcode": "YO1 7HH"})

    data = r.json()["data"]
    assert data["title_number"] == "YWE9"
    assert data["tenure"] == "unknown"
    assert data["price_history"] == []
    request = upstream.requests[0]
    assert request.url.path == "/api/v1/titles"
    assert dict(request.url.params) == {"uprn": "100"}


async def test_hmlr_postcode_lookup(client, upstream, hmlr_key):
    upstream.handler = lambda request: httpx.Response(200, json={})

    await client.post("/v1/integrations/hmlr", json={"postcode": "YO1 7HH"})

    assert dict(upstream.requests[0].url.params) == {"postcode": "YO1 7HH"}


async def test_hmlr_upstream_failure_falls_back(client, upstream, hmlr_key):
    r = await client.post("/v1/integrations/hmlr", json={"title_number": "NYK123"})

    body = r.json()
    assert r.status_code == 200
    assert body["success"] is True
    assert body["data"]["message"] == "HMLR API error. Using mock data."
    assert body["data"]["title_number"] == "NYK123"
    assert body["data"]["tenure"] == "freehold"
    assert len(upstream.requests) == 1
