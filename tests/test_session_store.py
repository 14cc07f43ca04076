"""Tests for the memory and SQLite key-value stores."""

from datetime import timedelta

import pytest

from guardian_modules.session_store import MemoryStore
from guardian_modules.sqlite_store import SQLiteStore


@pytest.fixture(params=["memory", "sqlite"])
async def any_store(request, clock, tmp_path):
    if request.param == "memory":
        store = MemoryStore(clock=clock)
    else:
        store = SQLiteStore(str(tmp_path / "guardian.db"), clock=clock)
    await store.initialize()
    yield store
    await store.close()


async def test_get_missing_key(any_store):
    assert await any_store.get("nope") is None


async def test_set_and_get(any_store):
    await any_store.set("k", "v", timedelta(seconds=10))
    assert await any_store.get("k") == "v"


async def test_value_expires(any_store, clock):
    await any_store.set("k", "v", timedelta(seconds=10))
    clock.advance(11)
    assert await any_store.get("k") is None


async def test_value_without_expiration_persists(any_store, clock):
    await any_store.set("k", "v")
    clock.advance(10_000)
    assert await any_store.get("k") == "v"


async def test_incr_counts_and_keeps_original_window(any_store, clock):
    assert await any_store.incr("c", timedelta(seconds=60)) == 1
    clock.advance(40)
    assert await any_store.incr("c", timedelta(seconds=60)) == 2
    clock.advance(30)
    # window started 70 s ago, so the counter starts over
    assert await any_store.incr("c", timedelta(seconds=60)) == 1


async def test_keys(any_store, clock):
    await any_store.set("guardian_rate_a", "1", timedelta(seconds=5))
    await any_store.set("guardian_rate_b", "1", timedelta(seconds=50))
    await any_store.set("other", "1")
    clock.advance(10)

    assert await any_store.keys("guardian_rate_*") == ["guardian_rate_b"]


async def test_json_helpers(any_store):
    await any_store.set_json("j", {"count": 2, "items": [1, 2]})
    assert await any_store.get_json("j") == {"count": 2, "items": [1, 2]}

    await any_store.set("broken", "{not json")
    assert await any_store.get_json("broken", []) == []
    assert await any_store.get_json("missing", {"d": 1}) == {"d": 1}


def test_memory_purge_expired(clock):
    store = MemoryStore(clock=clock)
    store.data.update({"a": "1", "b": "2"})
    store.expiry.update({"a": clock() + 5, "b": clock() + 50})

    clock.advance(10)

    assert store.purge_expired() == 1
    assert list(store.data) == ["b"]
