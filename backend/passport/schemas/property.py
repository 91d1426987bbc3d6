"""Property schemas."""

from datetime import datetime
from typing import Optional, Union
from uuid import UUID

from pydantic import Field, field_validator

from passport.schemas.base import BaseSchema, IDMixin, PartialUpdate, TimestampMixin
from passport.models.enums import DocumentType, PropertyLifecycle

EPC_RATINGS = ("A", "B", "C", "D", "E", "F", "G")


def _split_tags(value: Union[str, list[str], None]) -> list[str]:
    """Tags arrive either as a list or as a comma separated string."""
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [tag.strip() for tag in value if tag and tag.strip()]


class PropertyCreate(BaseSchema):
    """Create a new property passport."""

    title: str = Field(..., min_length=1, max_length=255)
    display_address: str = Field(..., min_length=3, max_length=500)
    property_type: Optional[str] = Field(None, max_length=50)
    uprn: Optional[str] = Field(None, max_length=32)
    tenure: Optional[str] = Field(None, max_length=50)
    tags: list[str] = Field(default_factory=list)
    description: Optional[str] = None
    public_visibility: bool = False

    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[int] = Field(None, ge=0)
    price: Optional[int] = Field(None, ge=0)
    epc_rating: Optional[str] = None

    @field_validator("tags", mode="before")
    @classmethod
    def parse_tags(cls, v):
        return _split_tags(v)

    @field_validator("uprn", "property_type", "tenure", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("epc_rating")
    @classmethod
    def validate_epc_rating(cls, v):
        if v is None:
            return v
        v = v.upper()
        if v not in EPC_RATINGS:
            raise ValueError("EPC rating must be between A and G")
        return v


class PropertyUpdate(PartialUpdate):
    """Partial update of a property."""

    NOT_NULL = ("display_address", "tags", "status")

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    display_address: Optional[str] = Field(None, min_length=3, max_length=500)
    property_type: Optional[str] = Field(None, max_length=50)
    uprn: Optional[str] = Field(None, max_length=32)
    tenure: Optional[str] = Field(None, max_length=50)
    tags: Optional[list[str]] = None
    description: Optional[str] = None
    status: Optional[PropertyLifecycle] = None

    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[int] = Field(None, ge=0)
    price: Optional[int] = Field(None, ge=0)
    epc_rating: Optional[str] = None

    @field_validator("tags", mode="before")
    @classmethod
    def parse_tags(cls, v):
        if v is None:
            return None
        return _split_tags(v)

    @field_validator("epc_rating")
    @classmethod
    def validate_epc_rating(cls, v):
        if v is None:
            return v
        v = v.upper()
        if v not in EPC_RATINGS:
            raise ValueError("EPC rating must be between A and G")
        return v


class VisibilityUpdate(BaseSchema):
    public_visibility: bool


class PropertyResponse(BaseSchema, IDMixin, TimestampMixin):
    """Property response."""

    created_by_user_id: Optional[UUID] = None
    title: Optional[str] = None
    display_address: str
    uprn: Optional[str] = None
    property_type: Optional[str] = None
    tenure: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    description: Optional[str] = None
    status: PropertyLifecycle
    public_visibility: bool
    public_slug: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    price: Optional[int] = None
    epc_rating: Optional[str] = None


class PropertyDetailResponse(PropertyResponse):
    """Property with the caller's roles on it."""

    roles: list[str] = Field(default_factory=list)
    can_edit: bool = False


class PublicDocument(BaseSchema):
    id: UUID
    title: str
    document_type: DocumentType
    url: Optional[str] = None


class PublicPassportResponse(BaseSchema):
    """Anonymous view of a public property passport."""

    id: UUID
    title: Optional[str] = None
    address: str
    uprn: Optional[str] = None
    property_type: Optional[str] = None
    tenure: Optional[str] = None
    status: PropertyLifecycle
    featured_image: str
    gallery: list[str] = Field(default_factory=list)
    documents: list[PublicDocument] = Field(default_factory=list)
    updated_at: Optional[datetime] = None
