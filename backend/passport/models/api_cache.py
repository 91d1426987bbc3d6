"""ApiCacheEntry model."""

import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import DateTime, Enum as SQLEnum, ForeignKey, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from passport.core.database import Base, JSONType
from passport.models.enums import ApiProvider, enum_values


class ApiCacheEntry(Base):
    """Cached response from a government data API, valid until expires_at."""

    __tablename__ = "api_cache"
    __table_args__ = (
        UniqueConstraint("api_provider", "cache_key", name="uq_api_cache_provider_key"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    property_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("properties.id", ondelete="SET NULL"),
        nullable=True,
    )

    api_provider: Mapped[ApiProvider] = mapped_column(
        SQLEnum(ApiProvider, name="api_provider", values_callable=enum_values),
        nullable=False,
    )
    cache_key: Mapped[str] = mapped_column(String(512), nullable=False)
    payload: Mapped[Any] = mapped_column(JSONType, nullable=False)
    response_size_bytes: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    fetched_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
