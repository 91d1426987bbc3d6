"""Issues router - a task-style view over property flags."""

from datetime import datetime
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from passport.core.database import get_db
from passport.core.security import get_current_user
from passport.models.enums import FlagSeverity, FlagStatus
from passport.models.flag import PropertyFlag
from passport.policies.roles import UserSession, can_edit_property, is_admin
from passport.schemas.base import ActionResult
from passport.schemas.flag import (
    IssueComment,
    IssueCreate,
    IssueResponse,
    IssueStatusChange,
    IssueUpdate,
)
from passport.services.access import get_property, viewable_property
from passport.services.events import record_event
from passport.services.issues import (
    category_to_flag_type,
    compose_description,
    flag_to_issue,
    status_to_flag_status,
)

router = APIRouter(prefix="/properties/{property_id}/issues", tags=["issues"])


async def _get_issue_flag(db: AsyncSession, property_id: UUID, issue_id: UUID) -> PropertyFlag:
    result = await db.execute(
        select(PropertyFlag).where(
            PropertyFlag.id == issue_id,
            PropertyFlag.property_id == property_id,
            PropertyFlag.deleted_at.is_(None),
        )
    )
    flag = result.scalar_one_or_none()
    if flag is None:
        raise LookupError("Issue not found")
    return flag


def _can_manage(session: UserSession, flag: PropertyFlag) -> bool:
    return (
        can_edit_property(session, flag.property_id)
        or flag.created_by_user_id == session.id
        or is_admin(session)
    )


@router.get("", response_model=List[IssueResponse])
async def list_issues(
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
    return [IssueResponse.model_validate(flag_to_issue(flag)) for flag in result.scalars()]


@router.post("", response_model=IssueResponse, status_code=status.HTTP_201_CREATED)
async def create_issue(
    property_id: UUID,
    data: IssueCreate,
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
):
    prop = await get_property(db, property_id)
    if not (can_edit_property(current_user, prop.id) or is_admin(current_user)):
        raise PermissionError("You do not have permission to create issues for this property")

    flag = PropertyFlag(
        property_id=prop.id,
        created_by_user_id=current_user.id,
        flag_type=category_to_flag_type(data.category),
        severity=FlagSeverity(data.severity.value),
        status=FlagStatus.OPEN,
        description=compose_description(
            data.title,
            data.description,
            data.due_date.isoformat() if data.due_date else None,
        ),
    )
    db.add(flag)
    await db.commit()
    await db.refresh(flag)

    await record_event(
        db, prop.id, current_user.id, "flag_added",
        {"title": data.title, "category": data.category.value, "severity": data.severity.value},
    )
    return IssueResponse.model_validate(flag_to_issue(flag))


@router.patch("/{issue_id}", response_model=IssueResponse)
async def update_issue(
    property_id: UUID,
    issue_id: UUID,
    data: IssueUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
):
    """Merge the changes into the issue's current title/description/due date."""
    flag = await _get_issue_flag(db, property_id, issue_id)
    if not _can_manage(current_user, flag):
        raise PermissionError("You do not have permission to update this issue")

    current = flag_to_issue(flag)
    changes = data.model_dump(exclude_unset=True)

    title = changes.get("title") or current.title
    description = changes["description"] if "description" in changes else current.description
    if "due_date" in changes:
        due_date = data.due_date.isoformat() if data.due_date else None
    else:
        due_date = current.due_date

    if data.severity is not None:
        flag.severity = FlagSeverity(data.severity.value)
    if data.category is not None:
        flag.flag_type = category_to_flag_type(data.category)
    flag.description = compose_description(title, description, due_date)

    await db.commit()
    await db.refresh(flag)

    issue = flag_to_issue(flag)
    await record_event(
        db, flag.property_id, current_user.id, "flag_updated",
        {"issueId": str(flag.id), "title": issue.title, "severity": issue.severity.value},
    )
    return IssueResponse.model_validate(issue)


@router.post("/{issue_id}/status", response_model=IssueResponse)
async def change_issue_status(
    property_id: UUID,
    issue_id: UUID,
    data: IssueStatusChange,
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
):
    flag = await _get_issue_flag(db, property_id, issue_id)
    if not _can_manage(current_user, flag):
        raise PermissionError("You do not have permission to change this issue")

    flag.status = status_to_flag_status(data.status)
    if flag.status in (FlagStatus.RESOLVED, FlagStatus.DISMISSED):
        flag.resolved_at = datetime.utcnow()
        flag.resolved_by_user_id = current_user.id
    else:
        flag.resolved_at = None
        flag.resolved_by_user_id = None

    await db.commit()
    await db.refresh(flag)

    await record_event(
        db, flag.property_id, current_user.id, "flag_updated",
        {"issueId": str(flag.id), "status": data.status.value},
    )
    return IssueResponse.model_validate(flag_to_issue(flag))


@router.delete("/{issue_id}", response_model=ActionResult)
async def delete_issue(
    property_id: UUID,
    issue_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
):
    flag = await _get_issue_flag(db, property_id, issue_id)
    if not _can_manage(current_user, flag):
        raise PermissionError("You do not have permission to delete this issue")

    flag.deleted_at = datetime.utcnow()
    await db.commit()
    return ActionResult()


@router.post("/{issue_id}/comments", response_model=ActionResult, status_code=status.HTTP_201_CREATED)
async def add_issue_comment(
    property_id: UUID,
    issue_id: UUID,
    data: IssueComment,
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
):
    prop = await viewable_property(db, current_user, property_id)
    flag = await _get_issue_flag(db, prop.id, issue_id)

    event = await record_event(
        db, prop.id, current_user.id, "flag_comment",
        {"issueId": str(flag.id), "comment": data.comment},
    )
    if event is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to add comment",
        )
    return ActionResult()
