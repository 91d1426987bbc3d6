"""Invitations router - invite people onto a property by email."""

import uuid
from datetime import datetime, timedelta
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from passport.core.database import get_db
from passport.core.security import get_current_user
from passport.models.enums import AuditAction, InvitationStatus
from passport.models.invitation import Invitation
from passport.models.user import User
from passport.policies.roles import UserSession, can_invite
from passport.schemas.base import ActionResult
from passport.schemas.invitation import (
    InvitationAccept,
    InvitationCreate,
    InvitationCreated,
    InvitationResponse,
)
from passport.services.access import get_property
from passport.services.audit import AuditService, client_ip
from passport.services.events import record_event
from passport.services.stakeholders import effective_grant, upsert_stakeholder

router = APIRouter(tags=["invitations"])

INVITATION_TTL = timedelta(days=7)
INVITE_DENIED = "You do not have permission to invite people to this property"


async def _get_managed_invitation(db: AsyncSession, session: UserSession, invitation_id: UUID) -> Invitation:
    result = await db.execute(select(Invitation).where(Invitation.id == invitation_id))
    invitation = result.scalar_one_or_none()
    if invitation is None:
        raise LookupError("Invitation not found")
    if not can_invite(session, invitation.property_id):
        raise PermissionError(INVITE_DENIED)
    return invitation


@router.post(
    "/properties/{property_id}/invitations",
    response_model=InvitationCreated,
    status_code=status.HTTP_201_CREATED,
)
async def send_invitation(
    request: Request,
    property_id: UUID,
    data: InvitationCreate,
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
):
    """Create a pending invitation valid for seven days.

    Delivery of the token is out of band; the inviter receives it here.
    """
    prop = await get_property(db, property_id)
    if not can_invite(current_user, prop.id):
        raise PermissionError(INVITE_DENIED)

    invitation = Invitation(
        email=data.email,
        property_id=prop.id,
        invited_by_user_id=current_user.id,
        role=data.role,
        property_permission=data.property_permission,
        property_status=data.property_status,
        status=InvitationStatus.PENDING,
        token=str(uuid.uuid4()),
        expires_at=datetime.utcnow() + INVITATION_TTL,
    )
    db.add(invitation)
    await db.flush()

    await AuditService(db).log_invite_sent(
        invitation_id=invitation.id,
        property_id=prop.id,
        user_id=current_user.id,
        email=invitation.email,
        ip_address=client_ip(request),
    )
    await db.commit()
    await db.refresh(invitation)
    return InvitationCreated.model_validate(invitation)


@router.get("/properties/{property_id}/invitations", response_model=List[InvitationResponse])
async def list_property_invitations(
    property_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
):
    prop = await get_property(db, property_id)
    if not can_invite(current_user, prop.id):
        raise PermissionError(INVITE_DENIED)

    result = await db.execute(
        select(Invitation)
        .where(Invitation.property_id == prop.id)
        .order_by(Invitation.created_at.desc())
    )
    return [InvitationResponse.model_validate(inv) for inv in result.scalars()]


@router.get("/invitations/mine", response_model=List[InvitationResponse])
async def list_my_invitations(
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
):
    """Pending, unexpired invitations addressed to the caller's email."""
    result = await db.execute(
        select(Invitation)
        .where(
            Invitation.email == current_user.email.lower(),
            Invitation.status == InvitationStatus.PENDING,
            Invitation.expires_at > datetime.utcnow(),
        )
        .order_by(Invitation.created_at.desc())
    )
    return [InvitationResponse.model_validate(inv) for inv in result.scalars()]


@router.post("/invitations/{invitation_id}/resend", response_model=InvitationResponse)
async def resend_invitation(
    invitation_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
):
    invitation = await _get_managed_invitation(db, current_user, invitation_id)
    invitation.expires_at = datetime.utcnow() + INVITATION_TTL
    invitation.status = InvitationStatus.PENDING
    await db.commit()
    await db.refresh(invitation)
    return InvitationResponse.model_validate(invitation)


@router.post("/invitations/{invitation_id}/cancel", response_model=ActionResult)
async def cancel_invitation(
    request: Request,
    invitation_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
):
    invitation = await _get_managed_invitation(db, current_user, invitation_id)
    invitation.status = InvitationStatus.REVOKED

    await AuditService(db).log(
        action=AuditAction.INVITE_REVOKED,
        resource_type="invitation",
        resource_id=invitation.id,
        user_id=current_user.id,
        details={"email": invitation.email, "property_id": str(invitation.property_id)},
        ip_address=client_ip(request),
    )
    await db.commit()
    return ActionResult()


@router.post("/invitations/accept", response_model=ActionResult)
async def accept_invitation(
    request: Request,
    data: InvitationAccept,
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
):
    """Turn a pending invitation into a stakeholder grant for the caller."""
    result = await db.execute(select(Invitation).where(Invitation.token == data.token))
    invitation = result.scalar_one_or_none()
    if invitation is None:
        raise LookupError("Invitation not found")
    if invitation.status != InvitationStatus.PENDING:
        raise ValueError("Invitation is no longer valid")

    if invitation.expires_at <= datetime.utcnow():
        invitation.status = InvitationStatus.EXPIRED
        await db.commit()
        raise ValueError("Invitation has expired")

    if invitation.email.lower() != current_user.email.lower():
        raise PermissionError("This invitation was sent to a different email address")

    user = await db.get(User, current_user.id)
    status_, permission = effective_grant(user, invitation.property_status, invitation.property_permission)
    await upsert_stakeholder(
        db,
        invitation.property_id,
        current_user.id,
        status_,
        permission,
        granted_by=invitation.invited_by_user_id,
    )

    invitation.status = InvitationStatus.ACCEPTED
    invitation.accepted_at = datetime.utcnow()
    await AuditService(db).log_invite_accepted(
        invitation_id=invitation.id,
        property_id=invitation.property_id,
        user_id=current_user.id,
        email=invitation.email,
        ip_address=client_ip(request),
    )
    await db.commit()

    await record_event(
        db, invitation.property_id, current_user.id, "updated",
        {
            "action": "invite_accepted",
            "invitation_id": str(invitation.id),
            "status": status_.value if status_ else None,
            "permission": permission.value,
        },
    )
    return ActionResult()
