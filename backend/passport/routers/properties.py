"""Properties router - create, browse and publish property passports."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from passport.core.database import get_db
from passport.core.security import get_current_user, get_optional_user
from passport.models.enums import AuditAction, PropertyLifecycle
from passport.models.property import Property
from passport.policies.roles import UserSession, can_edit_property, roles_on_property
from passport.schemas.property import (
    PropertyCreate,
    PropertyDetailResponse,
    PropertyResponse,
    PropertyUpdate,
    VisibilityUpdate,
)
from passport.services.access import (
    editable_property,
    get_property,
    property_access_summary,
    viewable_property,
)
from passport.services.audit import AuditService, client_ip
from passport.services.events import record_event
from passport.services.properties import can_create_property, ensure_public_slug, visible_properties

router = APIRouter(prefix="/properties", tags=["properties"])


@router.post("", response_model=PropertyResponse, status_code=status.HTTP_201_CREATED)
async def create_property(
    request: Request,
    data: PropertyCreate,
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
):
    """Create a draft passport. The creator becomes its owner."""
    if not can_create_property(current_user):
        raise PermissionError("You do not have permission to create properties")

    prop = Property(
        created_by_user_id=current_user.id,
        status=PropertyLifecycle.DRAFT,
        **data.model_dump(),
    )
    ensure_public_slug(prop)
    db.add(prop)
    await db.flush()

    audit = AuditService(db)
    await audit.log(
        action=AuditAction.PROPERTY_CREATED,
        resource_type="property",
        resource_id=prop.id,
        user_id=current_user.id,
        details={"display_address": prop.display_address},
        ip_address=client_ip(request),
    )
    await db.commit()
    await db.refresh(prop)

    await record_event(
        db, prop.id, current_user.id, "property_created",
        {"title": prop.title, "display_address": prop.display_address},
    )
    return PropertyResponse.model_validate(prop)


@router.get("", response_model=List[PropertyResponse])
async def list_properties(
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
):
    """Properties the caller can see: their own, shared with them, and public ones."""
    result = await db.execute(visible_properties(current_user).order_by(Property.updated_at.desc()))
    return [PropertyResponse.model_validate(prop) for prop in result.scalars()]


@router.get("/{property_id}", response_model=PropertyDetailResponse)
async def get_property_detail(
    property_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: Optional[UserSession] = Depends(get_optional_user),
):
    prop = await viewable_property(db, current_user, property_id)
    detail = PropertyDetailResponse.model_validate(prop)
    detail.roles = roles_on_property(current_user, prop.id)
    detail.can_edit = can_edit_property(current_user, prop.id)
    return detail


@router.patch("/{property_id}", response_model=PropertyResponse)
async def update_property(
    request: Request,
    property_id: UUID,
    data: PropertyUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
):
    """Partial update. Requires edit permission."""
    prop = await editable_property(db, current_user, property_id)

    update_data = data.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(prop, field, value)

    audit = AuditService(db)
    await audit.log(
        action=AuditAction.PROPERTY_UPDATED,
        resource_type="property",
        resource_id=prop.id,
        user_id=current_user.id,
        details={"fields": sorted(update_data)},
        ip_address=client_ip(request),
    )
    await db.commit()
    await db.refresh(prop)

    await record_event(db, prop.id, current_user.id, "property_updated", {"fields": sorted(update_data)})
    return PropertyResponse.model_validate(prop)


@router.put("/{property_id}/visibility", response_model=PropertyResponse)
async def set_public_visibility(
    request: Request,
    property_id: UUID,
    data: VisibilityUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
):
    """Publish or unpublish the public passport page.

    The slug is generated on first publish and kept afterwards so shared
    links survive unpublish/republish.
    """
    prop = await editable_property(db, current_user, property_id)
    prop.public_visibility = data.public_visibility
    ensure_public_slug(prop)

    audit = AuditService(db)
    await audit.log_visibility_changed(
        property_id=prop.id,
        user_id=current_user.id,
        visible=prop.public_visibility,
        slug=prop.public_slug,
        ip_address=client_ip(request),
    )
    await db.commit()
    await db.refresh(prop)

    await record_event(
        db, prop.id, current_user.id, "updated",
        {"action": "visibility_changed", "public_visibility": prop.public_visibility},
    )
    return PropertyResponse.model_validate(prop)


@router.get("/{property_id}/access")
async def check_property_access(
    property_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: Optional[UserSession] = Depends(get_optional_user),
):
    """Check whether the caller may open a property, and with which roles."""
    prop = None
    if current_user is not None:
        try:
            prop = await get_property(db, property_id)
        except LookupError:
            prop = None
    status_code, body = property_access_summary(current_user, prop)
    return JSONResponse(status_code=status_code, content=body)
