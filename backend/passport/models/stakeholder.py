"""PropertyStakeholder model."""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, Enum as SQLEnum, ForeignKey, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from passport.core.database import Base
from passport.models.enums import PropertyPermission, PropertyStatus, enum_values

if TYPE_CHECKING:
    from passport.models.property import Property
    from passport.models.user import User


class PropertyStakeholder(Base):
    """A user's status and/or permission on a property.

    One row per (property, user, status). A row with no status carries a bare
    permission grant (e.g. a conveyancer with editor access).
    """

    __tablename__ = "property_stakeholders"
    __table_args__ = (
        UniqueConstraint("property_id", "user_id", "status", name="uq_stakeholder_property_user_status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    status: Mapped[Optional[PropertyStatus]] = mapped_column(
        SQLEnum(PropertyStatus, name="property_status", values_callable=enum_values),
        nullable=True,
    )
    permission: Mapped[Optional[PropertyPermission]] = mapped_column(
        SQLEnum(PropertyPermission, name="property_permission", values_callable=enum_values),
        nullable=True,
    )

    granted_by_user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    granted_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Relationships
    property: Mapped["Property"] = relationship("Property", back_populates="stakeholders")
    user: Mapped["User"] = relationship(
        "User", back_populates="stakeholder_roles", foreign_keys=[user_id]
    )
