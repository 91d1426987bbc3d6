from sqlalchemy import select

from conftest import create_property, create_user, grant, login_as
from passport.models.enums import PropertyPermission
from passport.models.event import PropertyEvent


async def raise_flag(client, prop, **fields):
    payload = {"flag_type": "risk", "severity": "high", "description": "Damp in the cellar"}
    payload.update(fields)
    r = await client.post(f"/v1/properties/{prop.id}/flags", json=payload)
    assert r.status_code == 201, r.text
    return r.json()


async def test_viewer_can_raise_but_not_resolve(client, db):
    owner = await create_user(db)
    viewer = await create_user(db)
    prop = await create_property(db, owner)
    await grant(db, prop, viewer)
    login_as(viewer)

    flag = await raise_flag(client, prop)
    assert flag["status"] == "open"

    edited = await client.patch(
        f"/v1/properties/{prop.id}/flags/{flag['id']}",
        json={"description": "Damp in the cellar and kitchen"},
    )
    assert edited.json()["description"] == "Damp in the cellar and kitchen"

    r = await client.patch(f"/v1/properties/{prop.id}/flags/{flag['id']}", json={"status": "resolved"})
    assert r.status_code == 403
    assert r.json()["error"] == "Only editors can resolve or dismiss flags"


async def test_owner_resolves_and_reopens(client, db, session_factory):
    owner = await create_user(db)
    prop = await create_property(db, owner)
    login_as(owner)
    flag = await raise_flag(client, prop)

    resolved = await client.patch(f"/v1/properties/{prop.id}/flags/{flag['id']}", json={"status": "resolved"})
    body = resolved.json()
    assert body["resolved_at"] is not None
    assert body["resolved_by_user_id"] == str(owner.id)

    reopened = await client.patch(f"/v1/properties/{prop.id}/flags/{flag['id']}", json={"status": "open"})
    assert reopened.json()["resolved_at"] is None

    async with session_factory() as check:
        types = (await check.execute(
            select(PropertyEvent.event_type).order_by(PropertyEvent.created_at)
        )).scalars().all()
    assert types == ["flag_added", "flag_resolved", "flag_added"]


async def test_outsider_cannot_flag_private_property(client, db):
    owner = await create_user(db)
    outsider = await create_user(db)
    prop = await create_property(db, owner)
    login_as(outsider)

    r = await client.post(
        f"/v1/properties/{prop.id}/flags",
        json={"flag_type": "risk", "description": "Looks wrong"},
    )

    assert r.status_code == 403
    assert r.json()["error"] == "You do not have permission to create flags for this property"


async def test_anyone_can_flag_public_property(client, db):
    owner = await create_user(db)
    outsider = await create_user(db)
    prop = await create_property(db, owner, public_visibility=True)
    login_as(outsider)

    flag = await raise_flag(client, prop, flag_type="data_quality", severity="low")

    assert flag["created_by_user_id"] == str(outsider.id)


async def test_deleted_flags_disappear(client, db):
    owner = await create_user(db)
    editor = await create_user(db)
    prop = await create_property(db, owner)
    await grant(db, prop, editor, permission=PropertyPermission.EDITOR)
    login_as(owner)
    flag = await raise_flag(client, prop)

    login_as(editor)
    r = await client.delete(f"/v1/properties/{prop.id}/flags/{flag['id']}")
    assert r.json() == {"success": True}

    assert (await client.get(f"/v1/properties/{prop.id}/flags")).json() == []
    missing = await client.patch(f"/v1/properties/{prop.id}/flags/{flag['id']}", json={"severity": "low"})
    assert missing.status_code == 404
    assert missing.json()["error"] == "Flag not found"
