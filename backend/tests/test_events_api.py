from conftest import create_property, create_user, grant, login_as


async def test_notes_are_recorded_by_category(client, db):
    owner = await create_user(db)
    prop = await create_property(db, owner)
    login_as(owner)

    legal = await client.post(
        f"/v1/properties/{prop.id}/notes",
        json={"title": "Searches back", "category": "legal", "description": "Local authority search clear"},
    )
    doc = await client.post(
        f"/v1/properties/{prop.id}/notes",
        json={"title": "Gas certificate filed", "category": "doc"},
    )

    assert legal.status_code == 201
    assert legal.json()["event_type"] == "note_added"
    assert legal.json()["event_payload"]["message"] == "Local authority search clear"
    assert doc.json()["event_type"] == "document_uploaded"
    assert doc.json()["event_payload"]["message"] == "Gas certificate filed"


async def test_timeline_is_newest_first(client, db):
    owner = await create_user(db)
    prop = await create_property(db, owner)
    login_as(owner)
    await client.post(f"/v1/properties/{prop.id}/notes", json={"title": "Keys cut"})

    timeline = (await client.get(f"/v1/properties/{prop.id}/timeline")).json()

    assert [entry["kind"] for entry in timeline] == ["event", "property"]
    assert timeline[0]["title"] == "Keys cut"
    assert timeline[-1]["title"] == "Passport created"


async def test_comments_are_filtered_by_target(client, db):
    owner = await create_user(db)
    prop = await create_property(db, owner)
    login_as(owner)

    for target_id, message in (("doc-1", "Signed copy?"), ("doc-2", "Expired"), ("doc-1", "Chasing")):
        r = await client.post(
            f"/v1/properties/{prop.id}/comments",
            json={"target_type": "document", "target_id": target_id, "message": message},
        )
        assert r.status_code == 201

    r = await client.get(
        f"/v1/properties/{prop.id}/comments",
        params={"target_type": "document", "target_id": "doc-1"},
    )

    assert [entry["title"] for entry in r.json()] == ["Chasing", "Signed copy?"]


async def test_viewer_cannot_write_events(client, db):
    owner = await create_user(db)
    viewer = await create_user(db)
    prop = await create_property(db, owner)
    await grant(db, prop, viewer)
    login_as(viewer)

    note = await client.post(f"/v1/properties/{prop.id}/notes", json={"title": "Hello"})
    event = await client.post(f"/v1/properties/{prop.id}/events", json={"event_type": "custom"})
    comment = await client.post(
        f"/v1/properties/{prop.id}/comments",
        json={"target_type": "flag", "target_id": "f1", "message": "Hi"},
    )

    assert note.status_code == 403
    assert note.json()["error"] == "You do not have permission to edit this property"
    assert event.json()["error"] == "No permission"
    assert comment.json()["error"] == "No permission to comment"

    assert (await client.get(f"/v1/properties/{prop.id}/events")).json() == []
