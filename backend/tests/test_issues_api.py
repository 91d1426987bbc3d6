from sqlalchemy import select

from conftest import create_property, create_user, grant, login_as
from passport.models.enums import FlagStatus, FlagType
from passport.models.event import PropertyEvent
from passport.models.flag import PropertyFlag


async def test_issue_is_stored_as_flag(client, db, session_factory):
    owner = await create_user(db)
    prop = await create_property(db, owner)
    login_as(owner)

    r = await client.post(
        f"/v1/properties/{prop.id}/issues",
        json={
            "title": "Boiler service",
            "category": "safety",
            "severity": "high",
            "description": "Annual gas safety check",
            "due_date": "2025-03-01",
        },
    )

    assert r.status_code == 201, r.text
    issue = r.json()
    assert issue["title"] == "Boiler service"
    assert issue["description"] == "Annual gas safety check"
    assert issue["due_date"] == "2025-03-01"
    assert issue["category"] == "safety"
    assert issue["status"] == "open"

    async with session_factory() as check:
        flag = (await check.execute(select(PropertyFlag))).scalar_one()
    assert flag.flag_type == FlagType.RISK
    assert flag.description == "Boiler service\n\nAnnual gas safety check\n\nDue: 2025-03-01"


async def test_update_keeps_unchanged_parts(client, db):
    owner = await create_user(db)
    prop = await create_property(db, owner)
    login_as(owner)
    created = (await client.post(
        f"/v1/properties/{prop.id}/issues",
        json={"title": "Gutter", "description": "Blocked at the back", "due_date": "2025-04-01"},
    )).json()

    r = await client.patch(
        f"/v1/properties/{prop.id}/issues/{created['id']}",
        json={"title": "Gutters", "category": "structural"},
    )

    issue = r.json()
    assert issue["title"] == "Gutters"
    assert issue["description"] == "Blocked at the back"
    assert issue["due_date"] == "2025-04-01"
    assert issue["category"] == "safety"


async def test_status_change_sets_resolution(client, db, session_factory):
    owner = await create_user(db)
    prop = await create_property(db, owner)
    login_as(owner)
    created = (await client.post(f"/v1/properties/{prop.id}/issues", json={"title": "Fence"})).json()

    progress = await client.post(
        f"/v1/properties/{prop.id}/issues/{created['id']}/status", json={"status": "in_progress"}
    )
    assert progress.json()["status"] == "in_progress"

    closed = await client.post(
        f"/v1/properties/{prop.id}/issues/{created['id']}/status", json={"status": "closed"}
    )
    assert closed.json()["status"] == "closed"

    async with session_factory() as check:
        flag = (await check.execute(select(PropertyFlag))).scalar_one()
    assert flag.status == FlagStatus.DISMISSED
    assert flag.resolved_by_user_id == owner.id


async def test_viewer_cannot_create_issue_but_can_comment(client, db, session_factory):
    owner = await create_user(db)
    viewer = await create_user(db)
    prop = await create_property(db, owner)
    await grant(db, prop, viewer)
    login_as(owner)
    created = (await client.post(f"/v1/properties/{prop.id}/issues", json={"title": "Roof"})).json()

    login_as(viewer)
    denied = await client.post(f"/v1/properties/{prop.id}/issues", json={"title": "Window"})
    assert denied.status_code == 403
    assert denied.json()["error"] == "You do not have permission to create issues for this property"

    r = await client.post(
        f"/v1/properties/{prop.id}/issues/{created['id']}/comments",
        json={"comment": "Roofer booked for Tuesday"},
    )
    assert r.status_code == 201

    async with session_factory() as check:
        event = (await check.execute(
            select(PropertyEvent).where(PropertyEvent.event_type == "flag_comment")
        )).scalar_one()
    assert event.event_payload == {"issueId": created["id"], "comment": "Roofer booked for Tuesday"}


async def test_empty_title_rejected(client, db):
    owner = await create_user(db)
    prop = await create_property(db, owner)
    login_as(owner)

    r = await client.post(f"/v1/properties/{prop.id}/issues", json={"title": ""})

    assert r.status_code == 400
    assert r.json()["error"] == "Title is required"
