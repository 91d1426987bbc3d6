"""Stakeholder (property access) schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import EmailStr, Field, model_validator

from passport.models.enums import PropertyPermission, PropertyStatus
from passport.policies.roles import AccessStatus
from passport.schemas.base import BaseSchema


class GrantAccess(BaseSchema):
    """Grant a user status and/or permission on a property."""

    email: EmailStr
    status: Optional[PropertyStatus] = None
    permission: PropertyPermission = PropertyPermission.VIEWER
    expires_at: Optional[datetime] = None
    notes: Optional[str] = Field(None, max_length=1000)


class RevokeAccess(BaseSchema):
    user_id: UUID
    status: Optional[PropertyStatus] = None
    permission: Optional[PropertyPermission] = None

    @model_validator(mode="after")
    def require_target(self):
        if self.status is None and self.permission is None:
            raise ValueError("Missing status or permission to revoke")
        return self


class StakeholderResponse(BaseSchema):
    """One stakeholder grant with its display state."""

    id: UUID
    user_id: UUID
    email: str
    full_name: str | None = None
    status: PropertyStatus | None = None
    permission: PropertyPermission | None = None
    roles: list[str] = Field(default_factory=list)
    granted_at: datetime
    expires_at: datetime | None = None
    access_status: AccessStatus
    expiry_label: str
    days_remaining: int | None = None
    notes: str | None = None
