from conftest import create_property, create_user, grant, login_as
from passport.models.enums import PrimaryRole, PropertyPermission


async def test_anonymous_search_sees_public_only(client, db):
    owner = await create_user(db)
    public = await create_property(db, owner, public_visibility=True, public_slug="1-rose-lane-abc12345")
    await create_property(db, owner, display_address="2 Rose Lane, York")

    r = await client.get("/v1/search", params={"q": "rose"})

    body = r.json()
    assert body["ok"] is True
    assert [result["id"] for result in body["results"]] == [str(public.id)]
    assert body["results"][0]["slug"] == "1-rose-lane-abc12345"
    assert body["results"][0]["image_url"] == "/placeholder.svg"


async def test_filters_narrow_results(client, db):
    owner = await create_user(db)
    big = await create_property(db, owner, bedrooms=4, epc_rating="B", price=450000)
    await create_property(db, owner, bedrooms=2, epc_rating="E", price=210000)
    login_as(owner)

    by_bedrooms = (await client.get("/v1/search", params={"bedrooms": 3})).json()["results"]
    by_epc = (await client.get("/v1/search", params={"max_epc": "c"})).json()["results"]
    by_price = (await client.get("/v1/search", params={"min_price": 300000})).json()["results"]

    assert [result["id"] for result in by_bedrooms] == [str(big.id)]
    assert [result["id"] for result in by_epc] == [str(big.id)]
    assert [result["id"] for result in by_price] == [str(big.id)]


async def test_buyer_does_not_see_granted_private_passports(client, db):
    owner = await create_user(db)
    buyer = await create_user(db)
    prop = await create_property(db, owner)
    await grant(db, prop, buyer, permission=PropertyPermission.VIEWER)
    login_as(buyer)

    results = (await client.get("/v1/search")).json()["results"]

    assert results == []


async def test_agent_sees_granted_private_passports(client, db):
    owner = await create_user(db)
    agent = await create_user(db, role=PrimaryRole.AGENT)
    prop = await create_property(db, owner)
    await grant(db, prop, agent, permission=PropertyPermission.VIEWER)
    login_as(agent)

    results = (await client.get("/v1/search")).json()["results"]

    assert [result["id"] for result in results] == [str(prop.id)]


async def test_invalid_epc_filter(client):
    r = await client.get("/v1/search", params={"min_epc": "Z"})

    assert r.status_code == 400
    assert r.json()["error"].startswith("min_epc:")
