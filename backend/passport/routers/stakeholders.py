"""Stakeholders router - who can see and edit a property, and until when."""

from datetime import datetime
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Request
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from passport.core.database import get_db
from passport.core.security import get_current_user
from passport.models.enums import AuditAction, InvitationStatus
from passport.models.invitation import Invitation
from passport.models.stakeholder import PropertyStakeholder
from passport.models.user import User
from passport.policies.roles import (
    ROLE_PRIORITY,
    UserSession,
    can_invite,
    days_remaining,
    format_expiry_date,
    get_access_status,
    sort_roles,
)
from passport.schemas.base import ActionResult
from passport.schemas.stakeholder import GrantAccess, RevokeAccess, StakeholderResponse
from passport.services.access import get_property, viewable_property
from passport.services.audit import AuditService, client_ip
from passport.services.events import record_event
from passport.services.stakeholders import (
    effective_grant,
    find_user_by_email,
    remove_stakeholder,
    revoke_stakeholder,
    upsert_stakeholder,
)

router = APIRouter(prefix="/properties/{property_id}/stakeholders", tags=["stakeholders"])

MANAGE_ACCESS_DENIED = "You do not have permission to manage access for this property"


@router.get("", response_model=List[StakeholderResponse])
async def list_stakeholders(
    property_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
):
    """Live grants with expiry state, highest-ranked role first."""
    await viewable_property(db, current_user, property_id)
    now = datetime.utcnow()

    result = await db.execute(
        select(PropertyStakeholder, User)
        .join(User, PropertyStakeholder.user_id == User.id)
        .where(
            PropertyStakeholder.property_id == property_id,
            PropertyStakeholder.deleted_at.is_(None),
        )
    )

    stakeholders = []
    for row, user in result.all():
        roles = [role.value for role in (row.status, row.permission) if role is not None]
        stakeholders.append(
            StakeholderResponse(
                id=row.id,
                user_id=user.id,
                email=user.email,
                full_name=user.full_name,
                status=row.status,
                permission=row.permission,
                roles=sort_roles(roles),
                granted_at=row.granted_at,
                expires_at=row.expires_at,
                access_status=get_access_status(row.expires_at, now),
                expiry_label=format_expiry_date(row.expires_at, now),
                days_remaining=days_remaining(row.expires_at, now),
                notes=row.notes,
            )
        )

    stakeholders.sort(key=lambda s: ROLE_PRIORITY.get(s.roles[0], 999) if s.roles else 999)
    return stakeholders


@router.post("", response_model=ActionResult)
async def grant_access(
    request: Request,
    property_id: UUID,
    data: GrantAccess,
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
):
    prop = await get_property(db, property_id)
    if not can_invite(current_user, prop.id):
        raise PermissionError(MANAGE_ACCESS_DENIED)

    target = await find_user_by_email(db, data.email)
    status, permission = effective_grant(target, data.status, data.permission)

    await upsert_stakeholder(
        db,
        prop.id,
        target.id,
        status,
        permission,
        granted_by=current_user.id,
        expires_at=data.expires_at,
        notes=data.notes,
    )
    await AuditService(db).log_access_granted(
        property_id=prop.id,
        user_id=current_user.id,
        target_user_id=target.id,
        status=status.value if status else None,
        permission=permission.value,
        ip_address=client_ip(request),
    )
    await db.commit()

    await record_event(
        db, prop.id, current_user.id, "updated",
        {
            "action": "access_granted",
            "status": status.value if status else None,
            "permission": permission.value,
            "granted_to_user_id": str(target.id),
            "granted_to_name": target.full_name,
            "expires_at": data.expires_at.isoformat() if data.expires_at else None,
            "notes": data.notes or None,
        },
    )
    return ActionResult()


@router.post("/revoke", response_model=ActionResult)
async def revoke_access(
    request: Request,
    property_id: UUID,
    data: RevokeAccess,
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
):
    prop = await get_property(db, property_id)
    if not can_invite(current_user, prop.id):
        raise PermissionError(MANAGE_ACCESS_DENIED)

    await revoke_stakeholder(db, prop.id, data.user_id, data.status, data.permission)
    await AuditService(db).log_access_revoked(
        property_id=prop.id,
        user_id=current_user.id,
        target_user_id=data.user_id,
        status=data.status.value if data.status else None,
        permission=data.permission.value if data.permission else None,
        ip_address=client_ip(request),
    )
    await db.commit()

    await record_event(
        db, prop.id, current_user.id, "updated",
        {
            "action": "access_revoked",
            "status": data.status.value if data.status else None,
            "permission": data.permission.value if data.permission else None,
            "revoked_from_user_id": str(data.user_id),
        },
    )
    return ActionResult()


@router.delete("/{user_id}", response_model=ActionResult)
async def remove_property_stakeholder(
    request: Request,
    property_id: UUID,
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
):
    """Remove every grant a user holds on the property and revoke their pending invitations."""
    prop = await get_property(db, property_id)
    if not can_invite(current_user, prop.id):
        raise PermissionError(MANAGE_ACCESS_DENIED)

    removed = await remove_stakeholder(db, prop.id, user_id)
    if not removed:
        raise LookupError("Stakeholder not found")

    target = await db.get(User, user_id)
    if target is not None:
        await db.execute(
            update(Invitation)
            .where(
                Invitation.property_id == prop.id,
                Invitation.email == target.email.lower(),
                Invitation.status == InvitationStatus.PENDING,
            )
            .values(status=InvitationStatus.REVOKED)
        )

    await AuditService(db).log(
        action=AuditAction.STAKEHOLDER_REMOVED,
        resource_type="property",
        resource_id=prop.id,
        user_id=current_user.id,
        details={"target_user_id": str(user_id)},
        ip_address=client_ip(request),
    )
    await db.commit()
    return ActionResult()
