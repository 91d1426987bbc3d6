"""Task schemas."""

from datetime import date
from typing import Optional
from uuid import UUID

from pydantic import Field

from passport.models.enums import TaskPriority, TaskStatus
from passport.schemas.base import BaseSchema, IDMixin, PartialUpdate, TimestampMixin


class TaskCreate(BaseSchema):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    property_id: Optional[UUID] = None
    assigned_to_user_id: Optional[UUID] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[date] = None


class TaskUpdate(PartialUpdate):
    NOT_NULL = ("title", "priority", "status")

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    assigned_to_user_id: Optional[UUID] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[date] = None


class TaskResponse(BaseSchema, IDMixin, TimestampMixin):
    property_id: Optional[UUID] = None
    created_by_user_id: UUID
    assigned_to_user_id: Optional[UUID] = None
    title: str
    description: Optional[str] = None
    priority: TaskPriority
    status: TaskStatus
    due_date: Optional[date] = None
