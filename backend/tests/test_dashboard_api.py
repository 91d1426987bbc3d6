from conftest import create_property, create_user, grant, login_as
from passport.models.enums import FlagSeverity, FlagStatus, FlagType, PropertyPermission
from passport.models.event import PropertyEvent
from passport.models.flag import PropertyFlag


async def test_owner_dashboard(client, db):
    owner = await create_user(db)
    prop = await create_property(db, owner)
    db.add(PropertyFlag(
        property_id=prop.id,
        created_by_user_id=owner.id,
        flag_type=FlagType.RISK,
        severity=FlagSeverity.HIGH,
        status=FlagStatus.OPEN,
        description="Subsidence",
    ))
    await db.commit()
    login_as(owner)

    body = (await client.get("/v1/dashboard")).json()

    assert body["role"] == "owner"
    assert body["capabilities"]["documents"] is True
    assert body["capabilities"]["admin_panel"] is False
    assert body["stats"] == {
        "owned_properties": 1,
        "accessible_properties": 1,
        "unresolved_flags": 1,
        "total_documents": 0,
    }
    listed = body["properties"][0]
    assert listed["statuses"] == ["owner"]
    assert listed["permission"] == "editor"
    assert listed["image_url"] == "/placeholder.svg"


async def test_buyer_dashboard_hides_evidence_panels(client, db):
    owner = await create_user(db)
    buyer = await create_user(db)
    prop = await create_property(db, owner)
    await grant(db, prop, buyer, permission=PropertyPermission.VIEWER, expires_in_days=5)
    login_as(buyer)

    body = (await client.get("/v1/dashboard")).json()

    assert body["role"] == "buyer"
    assert body["capabilities"]["documents"] is False
    assert body["capabilities"]["issues"] is False
    assert body["stats"]["owned_properties"] == 0
    assert body["stats"]["accessible_properties"] == 1
    assert body["properties"][0]["access_expires_at"] is not None


async def test_expired_grant_drops_property_from_dashboard(client, db):
    owner = await create_user(db)
    former_viewer = await create_user(db)
    prop = await create_property(db, owner, display_address="9 Secret Rd, Leeds")
    await grant(db, prop, former_viewer, permission=PropertyPermission.VIEWER, expires_in_days=-3)
    db.add(PropertyEvent(property_id=prop.id, actor_user_id=owner.id, event_type="document_uploaded"))
    await db.commit()
    login_as(former_viewer)

    body = (await client.get("/v1/dashboard")).json()

    assert body["stats"]["accessible_properties"] == 0
    assert body["properties"] == []
    assert body["activity"] == []
    assert (await client.get(f"/v1/properties/{prop.id}")).status_code == 403
