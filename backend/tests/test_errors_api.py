import httpx
import pytest

from conftest import create_property, create_user, login_as
from passport.main import app
from passport.services.storage import get_storage_service


@pytest.fixture
async def lenient_client(client):
    """Client that returns the 500 response instead of re-raising the app error."""
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def test_null_for_required_property_field_is_rejected(client, db):
    owner = await create_user(db)
    prop = await create_property(db, owner)
    login_as(owner)

    r = await client.patch(f"/v1/properties/{prop.id}", json={"display_address": None})

    assert r.status_code == 400
    assert r.json() == {"success": False, "error": "display_address cannot be null"}


async def test_null_flag_severity_is_rejected(client, db):
    owner = await create_user(db)
    prop = await create_property(db, owner)
    login_as(owner)
    flag = (await client.post(
        f"/v1/properties/{prop.id}/flags",
        json={"flag_type": "risk", "description": "Cracked lintel"},
    )).json()

    r = await client.patch(f"/v1/properties/{prop.id}/flags/{flag['id']}", json={"severity": None})

    assert r.status_code == 400
    assert r.json()["error"] == "severity cannot be null"


async def test_nullable_fields_can_still_be_cleared(client, db):
    user = await create_user(db)
    login_as(user)
    task = (await client.post(
        "/v1/tasks", json={"title": "Renew insurance", "description": "Before exchange"}
    )).json()

    cleared = await client.patch(f"/v1/tasks/{task['id']}", json={"description": None})
    refused = await client.patch(f"/v1/tasks/{task['id']}", json={"title": None})

    assert cleared.status_code == 200
    assert cleared.json()["description"] is None
    assert refused.json()["error"] == "title cannot be null"


async def test_profile_role_cannot_be_nulled(client, db):
    user = await create_user(db)
    login_as(user)

    r = await client.patch("/v1/auth/profile", json={"primary_role": None})

    assert r.status_code == 400
    assert r.json()["error"] == "primary_role cannot be null"


async def test_unexpected_error_uses_envelope(lenient_client, db):
    user = await create_user(db)
    login_as(user)

    def broken_storage():
        raise RuntimeError("credentials file missing")

    app.dependency_overrides[get_storage_service] = broken_storage

    r = await lenient_client.get("/v1/dashboard")

    assert r.status_code == 500
    assert r.json() == {"success": False, "error": "Internal server error"}


async def test_key_error_is_not_reported_as_missing(lenient_client, db):
    user = await create_user(db)
    login_as(user)

    def misconfigured_storage():
        raise KeyError("photos_bucket")

    app.dependency_overrides[get_storage_service] = misconfigured_storage

    r = await lenient_client.get("/v1/dashboard")

    assert r.status_code == 500
    assert r.json()["error"] == "Internal server error"
