"""Invitation schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import EmailStr, Field, field_validator

from passport.models.enums import InvitationStatus, PropertyPermission, PropertyStatus
from passport.schemas.base import BaseSchema, IDMixin


class InvitationCreate(BaseSchema):
    """Invite an email address onto a property."""

    email: EmailStr
    role: str = Field("viewer", min_length=1, max_length=32)
    property_permission: PropertyPermission = PropertyPermission.VIEWER
    property_status: Optional[PropertyStatus] = None

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v):
        return v.lower()


class InvitationAccept(BaseSchema):
    token: str = Field(..., min_length=1, max_length=64)


class InvitationResponse(BaseSchema, IDMixin):
    email: str
    property_id: UUID
    invited_by_user_id: Optional[UUID] = None
    role: str
    property_permission: PropertyPermission
    property_status: Optional[PropertyStatus] = None
    status: InvitationStatus
    expires_at: datetime
    accepted_at: Optional[datetime] = None
    created_at: datetime


class InvitationCreated(InvitationResponse):
    """Returned to the inviter only: carries the acceptance token."""

    token: str
