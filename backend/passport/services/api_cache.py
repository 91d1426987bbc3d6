"""TTL cache for government data API responses, stored in api_cache."""

import json
import logging
from datetime import datetime, timedelta
from typing import Any, Mapping, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from passport.models.api_cache import ApiCacheEntry
from passport.models.enums import ApiProvider

logger = logging.getLogger(__name__)


def generate_cache_key(provider: ApiProvider, params: Mapping[str, Any]) -> str:
    """``provider:k1:v1|k2:v2`` with keys sorted; unset params are skipped."""
    parts = [f"{key}:{params[key]}" for key in sorted(params) if params[key] is not None]
    return f"{provider.value}:{'|'.join(parts)}"


async def get_cached_data(
    db: AsyncSession,
    provider: ApiProvider,
    cache_key: str,
    now: Optional[datetime] = None,
) -> Optional[Any]:
    """Payload of an unexpired, error-free entry, or None."""
    now = now or datetime.utcnow()
    result = await db.execute(
        select(ApiCacheEntry.payload).where(
            ApiCacheEntry.api_provider == provider,
            ApiCacheEntry.cache_key == cache_key,
            ApiCacheEntry.expires_at > now,
            ApiCacheEntry.error_message.is_(None),
        )
    )
    return result.scalar_one_or_none()


async def set_cached_data(
    db: AsyncSession,
    provider: ApiProvider,
    cache_key: str,
    payload: Any,
    ttl_hours: float,
    property_id: Optional[UUID] = None,
    error_message: Optional[str] = None,
    now: Optional[datetime] = None,
) -> ApiCacheEntry:
    """Insert or overwrite the entry for (provider, cache_key) and commit."""
    now = now or datetime.utcnow()
    result = await db.execute(
        select(ApiCacheEntry).where(
            ApiCacheEntry.api_provider == provider,
            ApiCacheEntry.cache_key == cache_key,
        )
    )
    entry = result.scalar_one_or_none()
    if entry is None:
        entry = ApiCacheEntry(api_provider=provider, cache_key=cache_key)
        db.add(entry)

    entry.payload = payload
    entry.property_id = property_id
    entry.error_message = error_message
    entry.fetched_at = now
    entry.expires_at = now + timedelta(hours=ttl_hours)
    entry.response_size_bytes = len(json.dumps(payload))

    await db.commit()
    logger.debug(f"[API_CACHE] Stored {cache_key} for {ttl_hours}h")
    return entry
