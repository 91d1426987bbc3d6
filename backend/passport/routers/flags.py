"""Flags router - raise, review and resolve concerns about a property."""

from datetime import datetime
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from passport.core.database import get_db
from passport.core.security import get_current_user
from passport.models.enums import FlagStatus
from passport.models.flag import PropertyFlag
from passport.policies.roles import UserSession, can_edit_property, can_view_property
from passport.schemas.base import ActionResult
from passport.schemas.flag import FlagCreate, FlagResponse, FlagUpdate
from passport.services.access import get_property, viewable_property
from passport.services.events import record_event

router = APIRouter(prefix="/properties/{property_id}/flags", tags=["flags"])

CLOSED_STATUSES = (FlagStatus.RESOLVED, FlagStatus.DISMISSED)


async def _get_flag(db: AsyncSession, property_id: UUID, flag_id: UUID) -> PropertyFlag:
    result = await db.execute(
        select(PropertyFlag).where(
            PropertyFlag.id == flag_id,
            PropertyFlag.property_id == property_id,
            PropertyFlag.deleted_at.is_(None),
        )
    )
    flag = result.scalar_one_or_none()
    if flag is None:
        raise LookupError("Flag not found")
    return flag


@router.post("", response_model=FlagResponse, status_code=status.HTTP_201_CREATED)
async def create_flag(
    property_id: UUID,
    data: FlagCreate,
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
):
    """Anyone who can view a property may flag it."""
    prop = await get_property(db, property_id)
    if not can_view_property(current_user, prop.id, is_public=prop.public_visibility):
        raise PermissionError("You do not have permission to create flags for this property")

    flag = PropertyFlag(
        property_id=prop.id,
        created_by_user_id=current_user.id,
        flag_type=data.flag_type,
        severity=data.severity,
        description=data.description,
        status=FlagStatus.OPEN,
    )
    db.add(flag)
    await db.commit()
    await db.refresh(flag)

    await record_event(
        db, prop.id, current_user.id, "flag_added",
        {"flag_id": str(flag.id), "flag_type": flag.flag_type.value, "severity": flag.severity.value},
    )
    return FlagResponse.model_validate(flag)


@router.get("", response_model=List[FlagResponse])
async def list_flags(
    property_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
):
    prop = await viewable_property(db, current_user, property_id)
    result = await db.execute(
        select(PropertyFlag)
        .where(PropertyFlag.property_id == prop.id, PropertyFlag.deleted_at.is_(None))
        .order_by(PropertyFlag.created_at.desc())
    )
    return [FlagResponse.model_validate(flag) for flag in result.scalars()]


@router.patch("/{flag_id}", response_model=FlagResponse)
async def update_flag(
    property_id: UUID,
    flag_id: UUID,
    data: FlagUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
):
    """Editors and the flag's creator may update it; only editors close it."""
    flag = await _get_flag(db, property_id, flag_id)
    can_edit = can_edit_property(current_user, flag.property_id)
    is_creator = flag.created_by_user_id == current_user.id

    if not (can_edit or is_creator):
        raise PermissionError("You do not have permission to update this flag")
    if data.status in CLOSED_STATUSES and not can_edit:
        raise PermissionError("Only editors can resolve or dismiss flags")

    old_status = flag.status
    update_data = data.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(flag, field, value)

    if data.status in CLOSED_STATUSES:
        flag.resolved_at = datetime.utcnow()
        flag.resolved_by_user_id = current_user.id
    elif data.status == FlagStatus.OPEN:
        flag.resolved_at = None
        flag.resolved_by_user_id = None

    await db.commit()
    await db.refresh(flag)

    if data.status is not None and data.status != old_status:
        await record_event(
            db, flag.property_id, current_user.id,
            "flag_resolved" if data.status == FlagStatus.RESOLVED else "flag_added",
            {"flag_id": str(flag.id), "old_status": old_status.value, "new_status": data.status.value},
        )
    return FlagResponse.model_validate(flag)


@router.delete("/{flag_id}", response_model=ActionResult)
async def delete_flag(
    property_id: UUID,
    flag_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
):
    flag = await _get_flag(db, property_id, flag_id)
    if not (can_edit_property(current_user, flag.property_id) or flag.created_by_user_id == current_user.id):
        raise PermissionError("You do not have permission to delete this flag")

    flag.deleted_at = datetime.utcnow()
    await db.commit()
    return ActionResult()
