"""In-process cache and batch helpers for signed storage URLs."""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from passport.services.storage import StorageService

logger = logging.getLogger(__name__)

CACHE_TTL_SECONDS = 3600
DEFAULT_CONCURRENCY = 10
PLACEHOLDER_IMAGE = "/placeholder.svg"


@dataclass
class _CachedUrl:
    url: str
    expires_at: float


class SignedUrlCache:
    """Signed URLs keyed by ``bucket:path``; an entry lives for one hour."""

    def __init__(self, ttl_seconds: int = CACHE_TTL_SECONDS, clock: Callable[[], float] = time.time):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, _CachedUrl] = {}

    @staticmethod
    def key(bucket: str, path: str) -> str:
        return f"{bucket}:{path}"

    def get(self, bucket: str, path: str) -> Optional[str]:
        key = self.key(bucket, path)
        cached = self._entries.get(key)
        if cached and cached.expires_at > self._clock():
            return cached.url
        # Drop expired entry
        if cached:
            del self._entries[key]
        return None

    def set(self, bucket: str, path: str, url: str) -> None:
        self._entries[self.key(bucket, path)] = _CachedUrl(url, self._clock() + self.ttl_seconds)

    def clear(self, bucket: str, path: str) -> None:
        self._entries.pop(self.key(bucket, path), None)

    def clear_all(self) -> None:
        self._entries.clear()

    def stats(self) -> dict:
        return {"size": len(self._entries), "keys": list(self._entries)}


signed_url_cache = SignedUrlCache()


async def get_signed_url(
    storage: StorageService,
    bucket: str,
    path: Optional[str],
    expires_in: int = CACHE_TTL_SECONDS,
    cache: SignedUrlCache = signed_url_cache,
) -> Optional[str]:
    """Cache-first signed URL. None when the path is empty or signing fails."""
    if not path:
        return None

    cached = cache.get(bucket, path)
    if cached:
        return cached

    try:
        url = await storage.get_download_url(bucket, path, expires_in)
    except Exception as e:
        logger.error(f"[SIGNED_URL] Failed to sign {bucket}/{path}: {e}")
        return None

    if url:
        cache.set(bucket, path, url)
    return url


async def get_batch_signed_urls(
    storage: StorageService,
    bucket: str,
    paths: Sequence[str],
    expires_in: int = CACHE_TTL_SECONDS,
    concurrency_limit: int = DEFAULT_CONCURRENCY,
    cache: SignedUrlCache = signed_url_cache,
) -> list[Optional[str]]:
    """Sign many paths, at most ``concurrency_limit`` at a time, preserving order."""
    results: list[Optional[str]] = []
    for start in range(0, len(paths), concurrency_limit):
        batch = paths[start:start + concurrency_limit]
        settled = await asyncio.gather(
            *(get_signed_url(storage, bucket, path, expires_in, cache) for path in batch),
            return_exceptions=True,
        )
        results.extend(None if isinstance(item, BaseException) else item for item in settled)
    return results


async def signed_urls_for(
    storage: StorageService,
    rows: Sequence,
    expires_in: int = CACHE_TTL_SECONDS,
    concurrency_limit: int = DEFAULT_CONCURRENCY,
) -> dict:
    """Signed URL per row id for rows carrying storage_bucket and storage_path."""
    by_bucket: dict[str, list] = {}
    for row in rows:
        by_bucket.setdefault(row.storage_bucket, []).append(row)

    urls = {}
    for bucket, items in by_bucket.items():
        signed = await get_batch_signed_urls(
            storage, bucket, [row.storage_path for row in items], expires_in, concurrency_limit
        )
        urls.update({row.id: url for row, url in zip(items, signed)})
    return urls
