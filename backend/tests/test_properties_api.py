from sqlalchemy import select

from conftest import create_property, create_user, grant, login_as, logout
from passport.models.audit import ActivityLog
from passport.models.enums import AuditAction, PrimaryRole, PropertyPermission
from passport.models.event import PropertyEvent
from passport.models.media import Media


async def test_agent_creates_draft_property_and_becomes_owner(client, db, session_factory):
    agent = await create_user(db, role=PrimaryRole.AGENT)
    login_as(agent)

    r = await client.post("/v1/properties", json={
        "title": "Rose Cottage",
        "display_address": "1 Rose Lane, York",
        "uprn": "",
        "tags": "period, garden ,",
    })

    assert r.status_code == 201, r.text
    body = r.json()
    assert body["status"] == "draft"
    assert body["uprn"] is None
    assert body["tags"] == ["period", "garden"]
    assert body["public_slug"] is None

    detail = await client.get(f"/v1/properties/{body['id']}")
    assert detail.json()["roles"] == ["owner", "editor"]
    assert detail.json()["can_edit"] is True

    async with session_factory() as check:
        audit = (await check.execute(select(ActivityLog))).scalars().all()
        events = (await check.execute(select(PropertyEvent))).scalars().all()
    assert [a.action for a in audit] == [AuditAction.PROPERTY_CREATED]
    assert [e.event_type for e in events] == ["property_created"]


async def test_consumer_without_ownership_cannot_create(client, db):
    consumer = await create_user(db)
    login_as(consumer)

    r = await client.post("/v1/properties", json={"title": "Flat", "display_address": "9 Quay St, Hull"})

    assert r.status_code == 403
    assert r.json() == {"success": False, "error": "You do not have permission to create properties"}


async def test_create_validation_error_uses_envelope(client, db):
    agent = await create_user(db, role=PrimaryRole.AGENT)
    login_as(agent)

    r = await client.post("/v1/properties", json={"title": "Flat", "display_address": "ab"})

    assert r.status_code == 400
    assert r.json()["success"] is False
    assert "display_address" in r.json()["error"]


async def test_viewer_can_read_but_not_edit(client, db):
    owner = await create_user(db)
    viewer = await create_user(db)
    prop = await create_property(db, owner)
    await grant(db, prop, viewer, permission=PropertyPermission.VIEWER)
    login_as(viewer)

    assert (await client.get(f"/v1/properties/{prop.id}")).status_code == 200
    r = await client.patch(f"/v1/properties/{prop.id}", json={"tenure": "freehold"})

    assert r.status_code == 403
    assert r.json()["error"] == "You do not have permission to edit this property"


async def test_expired_grant_loses_access(client, db):
    owner = await create_user(db)
    former_buyer = await create_user(db)
    prop = await create_property(db, owner)
    await grant(db, prop, former_buyer, permission=PropertyPermission.EDITOR, expires_in_days=-1)
    login_as(former_buyer)

    r = await client.get(f"/v1/properties/{prop.id}")

    assert r.status_code == 403
    listed = await client.get("/v1/properties")
    assert listed.json() == []


async def test_owner_updates_property(client, db):
    owner = await create_user(db)
    prop = await create_property(db, owner)
    login_as(owner)

    r = await client.patch(f"/v1/properties/{prop.id}", json={"tenure": "leasehold", "epc_rating": "c"})

    assert r.status_code == 200
    assert r.json()["tenure"] == "leasehold"
    assert r.json()["epc_rating"] == "C"


async def test_publish_generates_slug_once(client, db):
    owner = await create_user(db)
    prop = await create_property(db, owner, display_address="7 Castle Hill, Lincoln")
    login_as(owner)

    first = await client.put(f"/v1/properties/{prop.id}/visibility", json={"public_visibility": True})
    slug = first.json()["public_slug"]
    assert slug.startswith("7-castle-hill-lincoln-")

    await client.put(f"/v1/properties/{prop.id}/visibility", json={"public_visibility": False})
    again = await client.put(f"/v1/properties/{prop.id}/visibility", json={"public_visibility": True})
    assert again.json()["public_slug"] == slug


async def test_public_passport_is_anonymous(client, db):
    owner = await create_user(db)
    prop = await create_property(
        db, owner, public_visibility=True, public_slug="7-castle-hill-abc12345", uprn="10001",
    )
    db.add(Media(
        property_id=prop.id,
        title="Front",
        storage_bucket="property-photos",
        storage_path=f"{prop.id}/x/front.jpg",
        mime_type="image/jpeg",
        size_bytes=10,
    ))
    await db.commit()
    logout()

    r = await client.get("/v1/public/7-castle-hill-abc12345")

    assert r.status_code == 200, r.text
    body = r.json()
    assert body["uprn"] == "10001"
    assert body["featured_image"].startswith("https://storage.test/property-photos/")
    assert body["gallery"] == [body["featured_image"]]
    assert body["documents"] == []


async def test_public_passport_hidden_when_not_visible(client, db):
    owner = await create_user(db)
    await create_property(db, owner, public_visibility=False, public_slug="hidden-house-1234abcd")
    logout()

    r = await client.get("/v1/public/hidden-house-1234abcd")

    assert r.status_code == 404
    assert r.json()["error"] == "Property not found"


async def test_public_passport_without_photos_uses_placeholder(client, db):
    owner = await create_user(db)
    await create_property(db, owner, public_visibility=True, public_slug="bare-house-0000ffff")

    r = await client.get("/v1/public/bare-house-0000ffff")

    assert r.json()["featured_image"] == "/placeholder.svg"


async def test_access_check(client, db):
    owner = await create_user(db)
    stranger = await create_user(db)
    prop = await create_property(db, owner)

    logout()
    anonymous = await client.get(f"/v1/properties/{prop.id}/access")
    assert anonymous.status_code == 401

    login_as(stranger)
    forbidden = await client.get(f"/v1/properties/{prop.id}/access")
    assert forbidden.status_code == 403
    assert forbidden.json()["access"] is False

    login_as(owner)
    granted = await client.get(f"/v1/properties/{prop.id}/access")
    assert granted.status_code == 200
    assert granted.json()["roles"] == ["owner", "editor"]
