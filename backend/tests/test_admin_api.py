import csv
import io

from conftest import create_property, create_user, login_as
from passport.models.enums import AuditAction, PrimaryRole
from passport.services.audit import AuditService


async def test_non_admin_is_refused(client, db):
    user = await create_user(db)
    login_as(user)

    r = await client.get("/v1/admin/stats")

    assert r.status_code == 403
    assert r.json()["success"] is False


async def test_stats_and_users(client, db):
    admin = await create_user(db, role=PrimaryRole.ADMIN)
    owner = await create_user(db)
    await create_property(db, owner)
    await create_property(db, owner)
    login_as(admin)

    stats = (await client.get("/v1/admin/stats")).json()
    assert stats["properties"] == {"total": 2, "by_status": {"draft": 2}}
    assert stats["users"]["by_role"] == {"admin": 1, "consumer": 1}

    users = (await client.get("/v1/admin/users")).json()
    counts = {row["email"]: row["properties_count"] for row in users["users"]}
    assert users["total"] == 2
    assert counts[owner.email] == 2
    assert counts[admin.email] == 0


async def test_audit_log_filters_and_csv(client, db):
    admin = await create_user(db, role=PrimaryRole.ADMIN)
    owner = await create_user(db)
    prop = await create_property(db, owner)
    audit = AuditService(db)
    await audit.log(AuditAction.PROPERTY_CREATED, "property", prop.id, owner.id, {"title": "Rose Cottage"})
    await audit.log(AuditAction.PROFILE_UPDATED, "user", owner.id, owner.id, {"fields": ["full_name"]})
    await db.commit()
    login_as(admin)

    filtered = (await client.get("/v1/admin/audit", params={"resource_type": "property"})).json()
    assert [entry["action"] for entry in filtered["entries"]] == ["property_created"]
    assert filtered["page_size"] == 100

    exported = await client.get("/v1/admin/audit", params={"format": "csv"})
    assert exported.headers["content-type"].startswith("text/csv")
    assert "audit-log.csv" in exported.headers["content-disposition"]
    rows = list(csv.reader(io.StringIO(exported.text)))
    assert rows[0][:3] == ["created_at", "action", "resource_type"]
    assert {row[1] for row in rows[1:]} == {"property_created", "profile_updated"}


async def test_api_usage(client, db):
    admin = await create_user(db, role=PrimaryRole.ADMIN)
    login_as(admin)
    await client.post("/v1/integrations/flood", json={"latitude": 51.5, "longitude": -0.12})

    usage = (await client.get("/v1/admin/api-usage")).json()

    assert usage["providers"][0]["provider"] == "flood"
    assert usage["providers"][0]["cached_entries"] == 1
    assert usage["providers"][0]["errors"] == 0
