"""Auth router - the caller's session and self-service profile."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from passport.core.database import get_db
from passport.core.security import get_current_user
from passport.models.enums import AuditAction
from passport.models.user import User
from passport.policies.dashboard import resolve_dashboard_role
from passport.policies.roles import UserSession
from passport.schemas.auth import (
    ProfileResponse,
    ProfileUpdate,
    PropertyRoleResponse,
    SessionResponse,
)
from passport.services.audit import AuditService, client_ip

router = APIRouter(prefix="/auth", tags=["auth"])


def session_response(session: UserSession) -> SessionResponse:
    return SessionResponse(
        id=session.id,
        email=session.email,
        full_name=session.full_name,
        primary_role=session.primary_role,
        is_admin=session.is_admin,
        property_roles={
            property_id: PropertyRoleResponse(status=role.status, permission=role.permission)
            for property_id, role in session.property_roles.items()
        },
        dashboard_role=resolve_dashboard_role(session).value,
    )


@router.get("/me", response_model=SessionResponse)
async def get_me(current_user: UserSession = Depends(get_current_user)):
    """Current account with live (unexpired) property roles."""
    return session_response(current_user)


@router.patch("/profile", response_model=ProfileResponse)
async def update_profile(
    request: Request,
    data: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
):
    user = await db.get(User, current_user.id)
    if user is None:
        raise LookupError("User not found")

    changes = data.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(user, field, value)

    await AuditService(db).log(
        action=AuditAction.PROFILE_UPDATED,
        resource_type="user",
        resource_id=user.id,
        user_id=user.id,
        details={"fields": sorted(changes)},
        ip_address=client_ip(request),
    )
    await db.commit()
    await db.refresh(user)
    return ProfileResponse.model_validate(user)
