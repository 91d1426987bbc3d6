"""Search schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from passport.schemas.base import BaseSchema


class SearchFilters(BaseModel):
    """Optional result filters. Unset filters are ignored."""

    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[int] = Field(None, ge=0)
    property_type: Optional[str] = None
    tenure: Optional[str] = None
    min_price: Optional[int] = Field(None, ge=0)
    max_price: Optional[int] = Field(None, ge=0)
    min_epc: Optional[str] = Field(None, pattern=r"^[A-Ga-g]$")
    max_epc: Optional[str] = Field(None, pattern=r"^[A-Ga-g]$")
    has_documents: Optional[bool] = None
    has_media: Optional[bool] = None
    has_issues: Optional[bool] = None


class SearchResult(BaseSchema):
    id: UUID
    address: str
    slug: Optional[str] = None
    image_url: Optional[str] = None
    completion: Optional[int] = None
    epc_rating: Optional[str] = None
    flagged_issue_count: Optional[int] = None
    updated_at: datetime


class SearchResponse(BaseSchema):
    ok: bool = True
    results: list[SearchResult] = Field(default_factory=list)
