from conftest import create_property, create_user, login_as


async def test_follow_and_unfollow(client, db):
    owner = await create_user(db)
    follower = await create_user(db)
    prop = await create_property(db, owner, public_visibility=True)
    login_as(follower)

    added = await client.post("/v1/watchlist", json={"property_id": str(prop.id), "notes": "Nice garden"})
    assert added.status_code == 201
    assert added.json()["address"] == "1 Rose Lane, York, YO1 7HH"

    again = await client.post(
        "/v1/watchlist",
        json={"property_id": str(prop.id), "notes": "Second viewing", "alert_on_changes": False},
    )
    assert again.json()["id"] == added.json()["id"]

    listed = (await client.get("/v1/watchlist")).json()
    assert len(listed) == 1
    assert listed[0]["notes"] == "Second viewing"
    assert listed[0]["alert_on_changes"] is False

    patched = await client.patch(f"/v1/watchlist/{prop.id}", json={"alert_on_changes": True})
    assert patched.json()["alert_on_changes"] is True
    assert patched.json()["notes"] == "Second viewing"

    assert (await client.delete(f"/v1/watchlist/{prop.id}")).json() == {"success": True}
    missing = await client.delete(f"/v1/watchlist/{prop.id}")
    assert missing.status_code == 404
    assert missing.json()["error"] == "Watchlist entry not found"


async def test_cannot_follow_private_property(client, db):
    owner = await create_user(db)
    stranger = await create_user(db)
    prop = await create_property(db, owner)
    login_as(stranger)

    r = await client.post("/v1/watchlist", json={"property_id": str(prop.id)})

    assert r.status_code == 403
    assert r.json()["error"] == "You do not have permission to view this property"
