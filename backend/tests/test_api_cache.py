from datetime import datetime, timedelta

from passport.models.enums import ApiProvider
from passport.services.api_cache import generate_cache_key, get_cached_data, set_cached_data


def test_cache_key_sorts_params_and_skips_unset():
    key = generate_cache_key(ApiProvider.EPC, {"uprn": None, "postcode": "YO1 7HH", "address": "1 Rose Lane"})

    assert key == "epc:address:1 Rose Lane|postcode:YO1 7HH"


async def test_set_then_get_until_expiry(db):
    now = datetime(2025, 1, 1, 9, 0)
    await set_cached_data(db, ApiProvider.FLOOD, "flood:k", {"risk_level": "low"}, 2, now=now)

    assert await get_cached_data(db, ApiProvider.FLOOD, "flood:k", now=now + timedelta(hours=1)) == {"risk_level": "low"}
    assert await get_cached_data(db, ApiProvider.FLOOD, "flood:k", now=now + timedelta(hours=3)) is None


async def test_error_entries_are_never_served(db):
    await set_cached_data(db, ApiProvider.EPC, "epc:k", {}, 1, error_message="EPC API error: 500 Server Error")

    assert await get_cached_data(db, ApiProvider.EPC, "epc:k") is None


async def test_set_overwrites_existing_entry(db):
    await set_cached_data(db, ApiProvider.CRIME, "crime:k", {"total_crimes": 1}, 1)
    entry = await set_cached_data(db, ApiProvider.CRIME, "crime:k", {"total_crimes": 2}, 1)

    assert entry.response_size_bytes == len('{"total_crimes": 2}')
    assert await get_cached_data(db, ApiProvider.CRIME, "crime:k") == {"total_crimes": 2}
