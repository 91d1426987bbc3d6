"""Event, comment and timeline schemas."""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import Field

from passport.schemas.base import BaseSchema


class EventCreate(BaseSchema):
    event_type: str = Field(..., min_length=1, max_length=64)
    payload: dict[str, Any] = Field(default_factory=dict)


class NoteCreate(BaseSchema):
    """Free-text note filed under a category."""

    title: str = Field(..., min_length=1, max_length=255)
    category: str = Field("general", max_length=32)
    description: Optional[str] = Field(None, max_length=5000)


class CommentCreate(BaseSchema):
    target_type: str = Field(..., min_length=1, max_length=50)
    target_id: str = Field(..., min_length=1, max_length=100)
    message: str = Field(..., min_length=1, max_length=5000)


class EventResponse(BaseSchema):
    id: UUID
    property_id: UUID
    actor_user_id: Optional[UUID] = None
    event_type: str
    event_payload: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime


class TimelineEntryResponse(BaseSchema):
    id: str
    kind: str
    title: str
    occurred_at: datetime
    actor_user_id: Optional[UUID] = None
    details: dict[str, Any] = Field(default_factory=dict)
