"""Admin router - system-wide stats, users, audit trail and API usage."""

import csv
import io
import json
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from passport.core.database import get_db
from passport.core.security import require_admin
from passport.models.api_cache import ApiCacheEntry
from passport.models.audit import ActivityLog
from passport.models.document import Document
from passport.models.enums import AuditAction, FlagStatus
from passport.models.flag import PropertyFlag
from passport.models.media import Media
from passport.models.property import Property
from passport.models.user import User
from passport.policies.roles import UserSession

router = APIRouter(prefix="/admin", tags=["admin"])

AUDIT_PAGE_SIZE = 100
AUDIT_CSV_COLUMNS = ["created_at", "action", "resource_type", "resource_id", "actor_user_id", "ip_address", "details"]


@router.get("/stats")
async def get_admin_stats(
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(require_admin),
):
    """Counts across the whole system.

    Returns:
    - live properties by lifecycle status
    - users by primary role
    - live documents and media files
    - open or in-review flags
    """
    properties = await db.execute(
        select(Property.status, func.count(Property.id))
        .where(Property.deleted_at.is_(None))
        .group_by(Property.status)
    )
    users = await db.execute(
        select(User.primary_role, func.count(User.id)).group_by(User.primary_role)
    )
    documents = await db.execute(
        select(func.count(Document.id)).where(Document.deleted_at.is_(None))
    )
    media = await db.execute(
        select(func.count(Media.id)).where(Media.deleted_at.is_(None))
    )
    open_flags = await db.execute(
        select(func.count(PropertyFlag.id)).where(
            PropertyFlag.status.in_([FlagStatus.OPEN, FlagStatus.IN_REVIEW]),
            PropertyFlag.deleted_at.is_(None),
        )
    )

    properties_by_status = {status.value: count for status, count in properties.all()}
    users_by_role = {role.value: count for role, count in users.all()}
    return {
        "properties": {"total": sum(properties_by_status.values()), "by_status": properties_by_status},
        "users": {"total": sum(users_by_role.values()), "by_role": users_by_role},
        "documents": documents.scalar() or 0,
        "media": media.scalar() or 0,
        "open_flags": open_flags.scalar() or 0,
    }


@router.get("/users")
async def list_users(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(require_admin),
):
    properties_count = (
        select(func.count(Property.id))
        .where(Property.created_by_user_id == User.id, Property.deleted_at.is_(None))
        .correlate(User)
        .scalar_subquery()
    )
    total = (await db.execute(select(func.count(User.id)))).scalar() or 0
    result = await db.execute(
        select(User, properties_count.label("properties_count"))
        .order_by(User.created_at.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    return {
        "page": page,
        "page_size": page_size,
        "total": total,
        "users": [
            {
                "id": user.id,
                "email": user.email,
                "full_name": user.full_name,
                "primary_role": user.primary_role.value,
                "created_at": user.created_at,
                "properties_count": count or 0,
            }
            for user, count in result.all()
        ],
    }


def _audit_csv(rows: list[ActivityLog]) -> StreamingResponse:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(AUDIT_CSV_COLUMNS)
    for row in rows:
        writer.writerow([
            row.created_at.isoformat() if row.created_at else "",
            row.action.value,
            row.resource_type,
            row.resource_id or "",
            row.actor_user_id or "",
            row.ip_address or "",
            json.dumps(row.details or {}, default=str),
        ])
    buffer.seek(0)
    return StreamingResponse(
        iter([buffer.getvalue()]),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=audit-log.csv"},
    )


@router.get("/audit")
async def list_audit_log(
    page: int = Query(default=1, ge=1),
    user_id: Optional[UUID] = None,
    resource_type: Optional[str] = None,
    action: Optional[AuditAction] = None,
    format: str = Query(default="json", pattern="^(json|csv)$"),
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(require_admin),
):
    """Activity log, newest first, 100 entries per page. `format=csv` exports the page."""
    stmt = select(ActivityLog)
    if user_id:
        stmt = stmt.where(ActivityLog.actor_user_id == user_id)
    if resource_type:
        stmt = stmt.where(ActivityLog.resource_type == resource_type)
    if action:
        stmt = stmt.where(ActivityLog.action == action)

    result = await db.execute(
        stmt.order_by(ActivityLog.created_at.desc())
        .offset((page - 1) * AUDIT_PAGE_SIZE)
        .limit(AUDIT_PAGE_SIZE)
    )
    rows = list(result.scalars())

    if format == "csv":
        return _audit_csv(rows)

    return {
        "page": page,
        "page_size": AUDIT_PAGE_SIZE,
        "entries": [
            {
                "id": row.id,
                "action": row.action.value,
                "resource_type": row.resource_type,
                "resource_id": row.resource_id,
                "actor_user_id": row.actor_user_id,
                "details": row.details,
                "ip_address": row.ip_address,
                "created_at": row.created_at,
            }
            for row in rows
        ],
    }


@router.get("/api-usage")
async def get_api_usage(
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(require_admin),
):
    """Cached upstream lookups per provider, with error counts and last fetch."""
    result = await db.execute(
        select(
            ApiCacheEntry.api_provider,
            func.count(ApiCacheEntry.id),
            func.count(ApiCacheEntry.error_message),
            func.max(ApiCacheEntry.fetched_at),
        ).group_by(ApiCacheEntry.api_provider)
    )
    return {
        "providers": [
            {
                "provider": provider.value,
                "cached_entries": entries,
                "errors": errors,
                "last_fetched_at": last_fetched,
            }
            for provider, entries, errors, last_fetched in result.all()
        ]
    }
