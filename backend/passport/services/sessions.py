"""Build a UserSession (account + live property roles) from the database."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from passport.models.enums import PrimaryRole, PropertyPermission, PropertyStatus
from passport.models.property import Property
from passport.models.stakeholder import PropertyStakeholder
from passport.models.user import User
from passport.policies.roles import PropertyRole, UserSession


def merge_role(
    roles: dict[UUID, PropertyRole],
    property_id: UUID,
    status: Optional[PropertyStatus],
    permission: Optional[PropertyPermission],
) -> None:
    """Fold one grant into the per-property role map.

    Statuses accumulate without duplicates; editor always wins over viewer.
    """
    entry = roles.setdefault(property_id, PropertyRole())
    if status is not None and status not in entry.status:
        entry.status.append(status)
    if permission == PropertyPermission.EDITOR:
        entry.permission = PropertyPermission.EDITOR
    elif permission == PropertyPermission.VIEWER and entry.permission is None:
        entry.permission = PropertyPermission.VIEWER


async def build_user_session(
    db: AsyncSession,
    user: User,
    now: Optional[datetime] = None,
) -> UserSession:
    now = now or datetime.utcnow()
    roles: dict[UUID, PropertyRole] = {}

    result = await db.execute(
        select(PropertyStakeholder).where(
            PropertyStakeholder.user_id == user.id,
            PropertyStakeholder.deleted_at.is_(None),
            or_(
                PropertyStakeholder.expires_at.is_(None),
                PropertyStakeholder.expires_at > now,
            ),
        )
    )
    for row in result.scalars():
        merge_role(roles, row.property_id, row.status, row.permission)

    # Creators always own what they created
    created = await db.execute(
        select(Property.id).where(
            Property.created_by_user_id == user.id,
            Property.deleted_at.is_(None),
        )
    )
    for property_id in created.scalars():
        merge_role(roles, property_id, PropertyStatus.OWNER, PropertyPermission.EDITOR)

    return UserSession(
        id=user.id,
        email=user.email,
        full_name=user.full_name,
        primary_role=user.primary_role,
        property_roles=roles,
        is_admin=user.primary_role == PrimaryRole.ADMIN,
    )
