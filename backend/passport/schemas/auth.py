"""Auth and profile schemas."""

from typing import Optional
from uuid import UUID

from pydantic import Field, field_validator

from passport.models.enums import PrimaryRole, PropertyPermission, PropertyStatus
from passport.schemas.base import BaseSchema, PartialUpdate


class PropertyRoleResponse(BaseSchema):
    status: list[PropertyStatus] = Field(default_factory=list)
    permission: PropertyPermission | None = None


class SessionResponse(BaseSchema):
    """The caller's account and live property roles."""

    id: UUID
    email: str
    full_name: str | None = None
    primary_role: PrimaryRole
    is_admin: bool = False
    property_roles: dict[UUID, PropertyRoleResponse] = Field(default_factory=dict)
    dashboard_role: str


class ProfileUpdate(PartialUpdate):
    """Self-service profile update."""

    NOT_NULL = ("primary_role",)

    full_name: Optional[str] = Field(None, min_length=1, max_length=255)
    organisation: Optional[str] = Field(None, max_length=255)
    primary_role: Optional[PrimaryRole] = None
    avatar_url: Optional[str] = Field(None, max_length=1024)

    @field_validator("primary_role")
    @classmethod
    def no_self_admin(cls, v):
        if v == PrimaryRole.ADMIN:
            raise ValueError("Admin role cannot be self-assigned")
        return v


class ProfileResponse(BaseSchema):
    id: UUID
    email: str
    full_name: str | None = None
    organisation: str | None = None
    avatar_url: str | None = None
    primary_role: PrimaryRole
