from datetime import datetime, timedelta

from sqlalchemy import select

from conftest import create_property, create_user, login_as
from passport.models.audit import ActivityLog
from passport.models.enums import AuditAction, InvitationStatus, PropertyPermission
from passport.models.invitation import Invitation
from passport.models.stakeholder import PropertyStakeholder


async def send(client, prop, email, **fields):
    payload = {"email": email}
    payload.update(fields)
    r = await client.post(f"/v1/properties/{prop.id}/invitations", json=payload)
    assert r.status_code == 201, r.text
    return r.json()


async def test_invite_and_accept(client, db, session_factory):
    owner = await create_user(db)
    invitee = await create_user(db, email="new.buyer@example.com")
    prop = await create_property(db, owner)
    login_as(owner)

    created = await send(
        client, prop, "New.Buyer@Example.com",
        property_status="buyer", property_permission="viewer",
    )
    assert created["email"] == "new.buyer@example.com"
    assert created["status"] == "pending"
    assert created["token"]

    login_as(invitee)
    mine = (await client.get("/v1/invitations/mine")).json()
    assert [inv["id"] for inv in mine] == [created["id"]]
    assert "token" not in mine[0]

    r = await client.post("/v1/invitations/accept", json={"token": created["token"]})
    assert r.json() == {"success": True}

    async with session_factory() as check:
        invitation = (await check.execute(select(Invitation))).scalar_one()
        row = (await check.execute(select(PropertyStakeholder))).scalar_one()
        actions = (await check.execute(select(ActivityLog.action))).scalars().all()
    assert invitation.status == InvitationStatus.ACCEPTED
    assert invitation.accepted_at is not None
    assert row.user_id == invitee.id
    assert row.status.value == "buyer"
    assert row.permission == PropertyPermission.VIEWER
    assert AuditAction.INVITE_ACCEPTED in actions

    again = await client.post("/v1/invitations/accept", json={"token": created["token"]})
    assert again.status_code == 400
    assert again.json()["error"] == "Invitation is no longer valid"


async def test_accept_requires_matching_email(client, db):
    owner = await create_user(db)
    stranger = await create_user(db)
    prop = await create_property(db, owner)
    login_as(owner)
    created = await send(client, prop, "someone.else@example.com")

    login_as(stranger)
    r = await client.post("/v1/invitations/accept", json={"token": created["token"]})

    assert r.status_code == 403
    assert r.json()["error"] == "This invitation was sent to a different email address"


async def test_expired_invitation_is_marked(client, db, session_factory):
    owner = await create_user(db)
    invitee = await create_user(db)
    prop = await create_property(db, owner)
    db.add(Invitation(
        email=invitee.email,
        property_id=prop.id,
        invited_by_user_id=owner.id,
        role="viewer",
        property_permission=PropertyPermission.VIEWER,
        status=InvitationStatus.PENDING,
        token="stale-token",
        expires_at=datetime.utcnow() - timedelta(hours=1),
    ))
    await db.commit()
    login_as(invitee)

    assert (await client.get("/v1/invitations/mine")).json() == []

    r = await client.post("/v1/invitations/accept", json={"token": "stale-token"})
    assert r.status_code == 400
    assert r.json()["error"] == "Invitation has expired"

    async with session_factory() as check:
        invitation = (await check.execute(select(Invitation))).scalar_one()
        grants = (await check.execute(select(PropertyStakeholder))).scalars().all()
    assert invitation.status == InvitationStatus.EXPIRED
    assert grants == []


async def test_unknown_token(client, db):
    user = await create_user(db)
    login_as(user)

    r = await client.post("/v1/invitations/accept", json={"token": "missing"})

    assert r.status_code == 404
    assert r.json()["error"] == "Invitation not found"


async def test_cancel_then_resend(client, db):
    owner = await create_user(db)
    prop = await create_property(db, owner)
    login_as(owner)
    created = await send(client, prop, "friend@example.com")

    cancelled = await client.post(f"/v1/invitations/{created['id']}/cancel")
    assert cancelled.json() == {"success": True}

    listed = (await client.get(f"/v1/properties/{prop.id}/invitations")).json()
    assert listed[0]["status"] == "revoked"

    resent = await client.post(f"/v1/invitations/{created['id']}/resend")
    body = resent.json()
    assert body["status"] == "pending"


async def test_only_owner_can_invite(client, db):
    owner = await create_user(db)
    outsider = await create_user(db)
    prop = await create_property(db, owner)
    login_as(outsider)

    r = await client.post(
        f"/v1/properties/{prop.id}/invitations",
        json={"email": "friend@example.com"},
    )

    assert r.status_code == 403
    assert r.json()["error"] == "You do not have permission to invite people to this property"
