"""User model."""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import String, DateTime, Enum as SQLEnum, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from passport.core.database import Base
from passport.models.enums import PrimaryRole, enum_values

if TYPE_CHECKING:
    from passport.models.stakeholder import PropertyStakeholder
    from passport.models.watchlist import WatchlistEntry


class User(Base):
    """User account linked to Firebase Auth."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    firebase_uid: Mapped[str] = mapped_column(
        String(128),
        unique=True,
        nullable=False,
        index=True,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )
    full_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    organisation: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    avatar_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)

    primary_role: Mapped[PrimaryRole] = mapped_column(
        SQLEnum(PrimaryRole, name="primary_role", values_callable=enum_values),
        default=PrimaryRole.CONSUMER,
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Relationships
    stakeholder_roles: Mapped[list["PropertyStakeholder"]] = relationship(
        "PropertyStakeholder",
        back_populates="user",
        foreign_keys="PropertyStakeholder.user_id",
        cascade="all, delete-orphan",
    )
    watchlist: Mapped[list["WatchlistEntry"]] = relationship(
        "WatchlistEntry", back_populates="user", cascade="all, delete-orphan"
    )
