"""Property-level access checks applied at every action boundary."""

from datetime import datetime
from typing import Any, Iterable, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from passport.models.property import Property
from passport.policies.roles import (
    UserSession,
    can_edit_property,
    can_view_property,
    has_property_role,
    is_admin,
    roles_on_property,
)


async def get_property(db: AsyncSession, property_id: UUID) -> Property:
    """Load a live (not soft-deleted) property or raise LookupError."""
    result = await db.execute(
        select(Property).where(Property.id == property_id, Property.deleted_at.is_(None))
    )
    prop = result.scalar_one_or_none()
    if prop is None:
        raise LookupError("Property not found")
    return prop


def require_view(session: Optional[UserSession], prop: Property) -> None:
    if not can_view_property(session, prop.id, is_public=prop.public_visibility):
        raise PermissionError("You do not have permission to view this property")


def require_edit(
    session: Optional[UserSession],
    property_id: UUID,
    message: str = "You do not have permission to edit this property",
) -> None:
    if not can_edit_property(session, property_id):
        raise PermissionError(message)


def require_role(
    session: Optional[UserSession],
    property_id: UUID,
    allowed_roles: Iterable[str],
    message: str,
) -> None:
    if not has_property_role(session, property_id, allowed_roles):
        raise PermissionError(message)


async def viewable_property(db: AsyncSession, session: Optional[UserSession], property_id: UUID) -> Property:
    prop = await get_property(db, property_id)
    require_view(session, prop)
    return prop


async def editable_property(
    db: AsyncSession,
    session: Optional[UserSession],
    property_id: UUID,
    message: str = "You do not have permission to edit this property",
) -> Property:
    prop = await get_property(db, property_id)
    require_edit(session, prop.id, message)
    return prop


def property_access_summary(
    session: Optional[UserSession],
    prop: Optional[Property],
    now: Optional[datetime] = None,
) -> tuple[int, dict[str, Any]]:
    """Status code and body for the property access check."""
    timestamp = (now or datetime.utcnow()).isoformat() + "Z"

    def body(access: bool, message: str, status_code: int, roles: Optional[list[str]] = None):
        return status_code, {
            "access": access,
            "message": message,
            "roles": roles or [],
            "status": status_code,
            "timestamp": timestamp,
        }

    if session is None:
        return body(False, "Unauthorized", 401)
    if prop is None:
        return body(False, "Property not found", 404)

    allowed = is_admin(session) or can_view_property(session, prop.id, is_public=prop.public_visibility)
    if not allowed:
        return body(False, "Forbidden", 403)
    return body(True, "Access granted", 200, roles_on_property(session, prop.id))
