"""Grant and revoke stakeholder rows on a property."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from passport.models.enums import PrimaryRole, PropertyPermission, PropertyStatus
from passport.models.stakeholder import PropertyStakeholder
from passport.models.user import User


def effective_grant(
    target: User,
    status: Optional[PropertyStatus],
    permission: PropertyPermission,
) -> tuple[Optional[PropertyStatus], PropertyPermission]:
    """Status applies to consumers only; an owner is never a mere viewer."""
    effective_status = status if target.primary_role == PrimaryRole.CONSUMER else None
    if effective_status == PropertyStatus.OWNER and permission == PropertyPermission.VIEWER:
        permission = PropertyPermission.EDITOR
    return effective_status, permission


async def find_user_by_email(db: AsyncSession, email: str) -> User:
    result = await db.execute(select(User).where(User.email == email.lower()))
    user = result.scalar_one_or_none()
    if user is None:
        raise LookupError("User not found for that email")
    return user


async def upsert_stakeholder(
    db: AsyncSession,
    property_id: UUID,
    user_id: UUID,
    status: Optional[PropertyStatus],
    permission: Optional[PropertyPermission],
    granted_by: Optional[UUID],
    expires_at: Optional[datetime] = None,
    notes: Optional[str] = None,
) -> PropertyStakeholder:
    """Insert or refresh the (property, user, status) row. Soft-deleted rows are revived."""
    status_clause = (
        PropertyStakeholder.status.is_(None)
        if status is None
        else PropertyStakeholder.status == status
    )
    result = await db.execute(
        select(PropertyStakeholder).where(
            PropertyStakeholder.property_id == property_id,
            PropertyStakeholder.user_id == user_id,
            status_clause,
        )
    )
    row = result.scalars().first()
    if row is None:
        row = PropertyStakeholder(property_id=property_id, user_id=user_id, status=status)
        db.add(row)

    row.permission = permission
    row.granted_by_user_id = granted_by
    row.granted_at = datetime.utcnow()
    row.expires_at = expires_at
    row.notes = notes
    row.deleted_at = None
    await db.flush()
    return row


async def revoke_stakeholder(
    db: AsyncSession,
    property_id: UUID,
    user_id: UUID,
    status: Optional[PropertyStatus],
    permission: Optional[PropertyPermission],
) -> int:
    """Revoke a status (soft-deleting its rows) or a bare permission.

    Clearing a permission soft-deletes any row left with neither status nor
    permission. Returns the number of rows touched.
    """
    if status is None and permission is None:
        raise ValueError("Missing status or permission to revoke")

    now = datetime.utcnow()
    result = await db.execute(
        select(PropertyStakeholder).where(
            PropertyStakeholder.property_id == property_id,
            PropertyStakeholder.user_id == user_id,
            PropertyStakeholder.deleted_at.is_(None),
        )
    )
    touched = 0
    for row in result.scalars():
        if status is not None:
            if row.status == status:
                row.deleted_at = now
                touched += 1
            continue
        if row.permission == permission:
            row.permission = None
            if row.status is None:
                row.deleted_at = now
            touched += 1

    await db.flush()
    return touched


async def remove_stakeholder(db: AsyncSession, property_id: UUID, user_id: UUID) -> int:
    """Soft-delete every live row the user holds on the property."""
    now = datetime.utcnow()
    result = await db.execute(
        select(PropertyStakeholder).where(
            PropertyStakeholder.property_id == property_id,
            PropertyStakeholder.user_id == user_id,
            PropertyStakeholder.deleted_at.is_(None),
        )
    )
    rows = list(result.scalars())
    for row in rows:
        row.deleted_at = now
    await db.flush()
    return len(rows)
