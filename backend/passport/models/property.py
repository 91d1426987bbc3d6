"""Property model."""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum as SQLEnum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from passport.core.database import Base, JSONType
from passport.models.enums import PropertyLifecycle, enum_values

if TYPE_CHECKING:
    from passport.models.stakeholder import PropertyStakeholder
    from passport.models.document import Document
    from passport.models.media import Media
    from passport.models.flag import PropertyFlag
    from passport.models.event import PropertyEvent


class Property(Base):
    """A UK property passport: the anchor row every piece of evidence hangs off."""

    __tablename__ = "properties"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    created_by_user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    display_address: Mapped[str] = mapped_column(String(500), nullable=False)
    uprn: Mapped[Optional[str]] = mapped_column(String(32), nullable=True, index=True)
    property_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    tenure: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    tags: Mapped[list[str]] = mapped_column(JSONType, default=list, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    status: Mapped[PropertyLifecycle] = mapped_column(
        SQLEnum(PropertyLifecycle, name="property_lifecycle", values_callable=enum_values),
        default=PropertyLifecycle.DRAFT,
        nullable=False,
    )

    # Public passport
    public_visibility: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    public_slug: Mapped[Optional[str]] = mapped_column(String(255), unique=True, nullable=True)

    # Location
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    # Listing details used by search filters
    bedrooms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    bathrooms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    price: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # whole pounds
    epc_rating: Mapped[Optional[str]] = mapped_column(String(2), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Relationships
    stakeholders: Mapped[list["PropertyStakeholder"]] = relationship(
        "PropertyStakeholder", back_populates="property", cascade="all, delete-orphan"
    )
    documents: Mapped[list["Document"]] = relationship(
        "Document", back_populates="property", cascade="all, delete-orphan"
    )
    media: Mapped[list["Media"]] = relationship(
        "Media", back_populates="property", cascade="all, delete-orphan"
    )
    flags: Mapped[list["PropertyFlag"]] = relationship(
        "PropertyFlag", back_populates="property", cascade="all, delete-orphan"
    )
    events: Mapped[list["PropertyEvent"]] = relationship(
        "PropertyEvent", back_populates="property", cascade="all, delete-orphan"
    )
