import pytest

from conftest import FakeStorageProvider
from passport.services.signed_urls import SignedUrlCache, get_batch_signed_urls, get_signed_url
from passport.services.storage import StorageService


class CountingProvider(FakeStorageProvider):
    def __init__(self, failing=()):
        super().__init__()
        self.calls = 0
        self.failing = set(failing)

    async def generate_signed_url(self, bucket, object_path, ttl_seconds):
        self.calls += 1
        if object_path in self.failing:
            raise RuntimeError("signing failed")
        return await super().generate_signed_url(bucket, object_path, ttl_seconds)


class Clock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_cache_entry_expires_after_ttl():
    clock = Clock()
    cache = SignedUrlCache(ttl_seconds=60, clock=clock)
    cache.set("photos", "a.jpg", "https://signed/a")

    assert cache.get("photos", "a.jpg") == "https://signed/a"
    clock.now += 61
    assert cache.get("photos", "a.jpg") is None
    assert cache.stats()["size"] == 0


async def test_get_signed_url_is_cache_first():
    provider = CountingProvider()
    storage = StorageService(provider)
    cache = SignedUrlCache()

    first = await get_signed_url(storage, "photos", "p/1.jpg", cache=cache)
    second = await get_signed_url(storage, "photos", "p/1.jpg", cache=cache)

    assert first == second
    assert provider.calls == 1


async def test_get_signed_url_empty_path_or_failure_is_none():
    storage = StorageService(CountingProvider(failing={"broken.jpg"}))
    cache = SignedUrlCache()

    assert await get_signed_url(storage, "photos", None, cache=cache) is None
    assert await get_signed_url(storage, "photos", "broken.jpg", cache=cache) is None
    assert cache.stats()["size"] == 0


@pytest.mark.parametrize("limit", [1, 2, 10])
async def test_batch_preserves_order_and_nulls_failures(limit):
    storage = StorageService(CountingProvider(failing={"b.jpg"}))
    paths = ["a.jpg", "b.jpg", "c.jpg"]

    urls = await get_batch_signed_urls(storage, "photos", paths, concurrency_limit=limit, cache=SignedUrlCache())

    assert urls[0].startswith("https://storage.test/photos/a.jpg")
    assert urls[1] is None
    assert urls[2].startswith("https://storage.test/photos/c.jpg")
