"""Flag and issue schemas."""

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import Field, field_validator

from passport.models.enums import FlagSeverity, FlagStatus, FlagType
from passport.schemas.base import BaseSchema, IDMixin, PartialUpdate, TimestampMixin
from passport.services.issues import IssueCategory, IssueSeverity, IssueStatus


class FlagCreate(BaseSchema):
    flag_type: FlagType
    severity: FlagSeverity = FlagSeverity.MEDIUM
    description: str = Field(..., min_length=1, max_length=1000)


class FlagUpdate(PartialUpdate):
    """Partial flag update. Resolving or dismissing needs editor rights."""

    NOT_NULL = ("flag_type", "severity", "status", "description")

    flag_type: Optional[FlagType] = None
    severity: Optional[FlagSeverity] = None
    status: Optional[FlagStatus] = None
    description: Optional[str] = Field(None, min_length=1, max_length=1000)


class FlagResponse(BaseSchema, IDMixin, TimestampMixin):
    property_id: UUID
    created_by_user_id: Optional[UUID] = None
    flag_type: FlagType
    severity: FlagSeverity
    status: FlagStatus
    description: str
    resolved_at: Optional[datetime] = None
    resolved_by_user_id: Optional[UUID] = None


class IssueCreate(BaseSchema):
    title: str = Field(..., max_length=200)
    category: IssueCategory = IssueCategory.GENERAL
    severity: IssueSeverity = IssueSeverity.MEDIUM
    description: Optional[str] = Field(None, max_length=2000)
    due_date: Optional[date] = None

    @field_validator("title")
    @classmethod
    def require_title(cls, v):
        if not v:
            raise ValueError("Title is required")
        return v


class IssueUpdate(BaseSchema):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    category: Optional[IssueCategory] = None
    severity: Optional[IssueSeverity] = None
    description: Optional[str] = Field(None, max_length=2000)
    due_date: Optional[date] = None


class IssueStatusChange(BaseSchema):
    status: IssueStatus


class IssueComment(BaseSchema):
    comment: str = Field(..., max_length=2000)

    @field_validator("comment")
    @classmethod
    def require_comment(cls, v):
        if not v:
            raise ValueError("Comment is required")
        return v


class IssueResponse(BaseSchema):
    id: UUID
    property_id: UUID
    title: str
    description: Optional[str] = None
    severity: IssueSeverity
    status: IssueStatus
    category: IssueCategory
    created_at: datetime
    updated_at: datetime
    created_by: Optional[UUID] = None
    due_date: Optional[str] = None
