"""Watchlist schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from passport.schemas.base import BaseSchema, IDMixin, PartialUpdate


class WatchlistAdd(BaseSchema):
    property_id: UUID
    notes: Optional[str] = Field(None, max_length=500)
    alert_on_changes: bool = True


class WatchlistUpdate(PartialUpdate):
    NOT_NULL = ("alert_on_changes",)

    notes: Optional[str] = Field(None, max_length=500)
    alert_on_changes: Optional[bool] = None


class WatchlistResponse(BaseSchema, IDMixin):
    property_id: UUID
    notes: Optional[str] = None
    alert_on_changes: bool
    created_at: datetime
    address: Optional[str] = None
