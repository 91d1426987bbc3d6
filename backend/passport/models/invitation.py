"""Invitation model."""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Enum as SQLEnum, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from passport.core.database import Base
from passport.models.enums import (
    InvitationStatus,
    PropertyPermission,
    PropertyStatus,
    enum_values,
)


class Invitation(Base):
    """Pending grant of property access to an email address."""

    __tablename__ = "invitations"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    invited_by_user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    role: Mapped[str] = mapped_column(String(32), nullable=False)
    property_permission: Mapped[PropertyPermission] = mapped_column(
        SQLEnum(PropertyPermission, name="invitation_permission", values_callable=enum_values),
        nullable=False,
    )
    property_status: Mapped[Optional[PropertyStatus]] = mapped_column(
        SQLEnum(PropertyStatus, name="invitation_property_status", values_callable=enum_values),
        nullable=True,
    )

    status: Mapped[InvitationStatus] = mapped_column(
        SQLEnum(InvitationStatus, name="invitation_status", values_callable=enum_values),
        default=InvitationStatus.PENDING,
        nullable=False,
    )
    token: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    accepted_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
