"""Document and media schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field, field_validator

from passport.models.enums import DocumentStatus, DocumentType, MediaType
from passport.schemas.base import BaseSchema, IDMixin, TimestampMixin


class DocumentResponse(BaseSchema, IDMixin, TimestampMixin):
    """Document row plus a short-lived download URL."""

    property_id: UUID
    title: str
    description: Optional[str] = None
    document_type: DocumentType
    mime_type: str
    size_bytes: int
    checksum: Optional[str] = None
    version: int
    status: DocumentStatus
    uploaded_by_user_id: Optional[UUID] = None
    url: Optional[str] = None


class MediaResponse(BaseSchema, IDMixin, TimestampMixin):
    property_id: UUID
    media_type: MediaType
    title: str
    description: Optional[str] = None
    mime_type: str
    size_bytes: int
    status: DocumentStatus
    uploaded_by_user_id: Optional[UUID] = None
    url: Optional[str] = None


class UploadResult(BaseSchema):
    success: bool = True
    id: UUID
    storage_path: str
    uploaded_at: datetime


class DocumentUpload(BaseSchema):
    """Form fields accompanying a document file."""

    title: Optional[str] = Field(None, max_length=255, validate_default=True)
    document_type: DocumentType
    description: Optional[str] = None
    version: int = Field(1, ge=1)

    @field_validator("title")
    @classmethod
    def require_title(cls, v):
        if not v:
            raise ValueError("Title is required")
        return v

    @field_validator("version", mode="before")
    @classmethod
    def default_version(cls, v):
        if v is None or v == "":
            return 1
        return v


UPLOADABLE_MEDIA_TYPES = (MediaType.PHOTO, MediaType.FLOORPLAN, MediaType.OTHER)


class MediaUpload(BaseSchema):
    media_type: MediaType = MediaType.PHOTO
    description: Optional[str] = Field(None, max_length=1000)

    @field_validator("media_type")
    @classmethod
    def uploadable_type(cls, v):
        if v not in UPLOADABLE_MEDIA_TYPES:
            raise ValueError("Media type must be photo, floorplan or other")
        return v
