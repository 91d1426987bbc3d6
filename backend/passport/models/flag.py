"""PropertyFlag model."""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, Enum as SQLEnum, ForeignKey, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from passport.core.database import Base
from passport.models.enums import FlagSeverity, FlagStatus, FlagType, enum_values

if TYPE_CHECKING:
    from passport.models.property import Property


class PropertyFlag(Base):
    """A raised concern about a property (data quality, risk, compliance...).

    Issues are a presentation of flags; see passport.services.issues.
    """

    __tablename__ = "property_flags"

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
    created_by_user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    flag_type: Mapped[FlagType] = mapped_column(
        SQLEnum(FlagType, name="flag_type", values_callable=enum_values),
        nullable=False,
    )
    severity: Mapped[FlagSeverity] = mapped_column(
        SQLEnum(FlagSeverity, name="flag_severity", values_callable=enum_values),
        default=FlagSeverity.MEDIUM,
        nullable=False,
    )
    status: Mapped[FlagStatus] = mapped_column(
        SQLEnum(FlagStatus, name="flag_status", values_callable=enum_values),
        default=FlagStatus.OPEN,
        nullable=False,
        index=True,
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)

    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    resolved_by_user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    property: Mapped["Property"] = relationship("Property", back_populates="flags")
