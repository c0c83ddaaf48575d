from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from pymongo.errors import PyMongoError

from socorro.infrastructure.cache import (
    InMemoryCacheStore,
    MongoCacheStore,
    NullCacheStore,
    cache_key,
)


class _Clock:
    def __init__(self) -> None:
        self.now = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class _DeleteResult:
    def __init__(self, deleted_count: int) -> None:
        self.deleted_count = deleted_count


class _FakeCacheCollection:
    def __init__(self) -> None:
        self.documents: Dict[str, Dict[str, Any]] = {}
        self.indexes: list[tuple[Any, Dict[str, Any]]] = []

    def create_index(self, keys: Any, **kwargs: Any) -> str:
        self.indexes.append((keys, kwargs))
        return kwargs.get("name", "idx")

    def find_one(self, query: Dict[str, Any]) -> Dict[str, Any] | None:
        document = self.documents.get(query["_id"])
        return dict(document) if document else None

    def replace_one(self, query: Dict[str, Any], document: Dict[str, Any], upsert: bool = False) -> None:
        assert upsert
        self.documents[query["_id"]] = dict(document)

    def delete_one(self, query: Dict[str, Any]) -> None:
        self.documents.pop(query["_id"], None)

    def delete_many(self, query: Dict[str, Any]) -> _DeleteResult:
        limit = query["expires_at"]["$lt"]
        doomed = [key for key, doc in self.documents.items() if doc["expires_at"] < limit]
        for key in doomed:
            del self.documents[key]
        return _DeleteResult(len(doomed))


class _BrokenCollection(_FakeCacheCollection):
    def find_one(self, query: Dict[str, Any]) -> Dict[str, Any] | None:
        raise PyMongoError("conexão recusada")

    def replace_one(self, *args: Any, **kwargs: Any) -> None:
        raise PyMongoError("conexão recusada")


def test_cache_key_is_stable_and_case_insensitive() -> None:
    assert cache_key("geocode", "Manhattan, NYC") == cache_key("geocode", "manhattan, nyc")
    assert cache_key("geocode", "Miami") != cache_key("reverse", "Miami")
    assert cache_key("geocode", "Miami").startswith("geocode:")


def test_in_memory_entry_expires_and_is_deleted_on_read() -> None:
    clock = _Clock()
    cache = InMemoryCacheStore(clock=clock)
    cache.set("k", {"value": 1}, ttl_seconds=60)

    assert cache.get("k") == {"value": 1}

    clock.advance(seconds=61)

    assert cache.get("k") is None
    assert len(cache) == 0


def test_in_memory_set_overwrites_previous_value() -> None:
    cache = InMemoryCacheStore(clock=_Clock())
    cache.set("k", "first", ttl_seconds=60)
    cache.set("k", "second", ttl_seconds=60)

    assert cache.get("k") == "second"


def test_in_memory_clear_expired_counts_removed_entries() -> None:
    clock = _Clock()
    cache = InMemoryCacheStore(clock=clock)
    cache.set("short", 1, ttl_seconds=10)
    cache.set("long", 2, ttl_seconds=3600)

    clock.advance(minutes=1)

    assert cache.clear_expired() == 1
    assert cache.get("long") == 2


def test_null_cache_never_hits() -> None:
    cache = NullCacheStore()
    cache.set("k", 1, ttl_seconds=60)

    assert cache.get("k") is None
    assert cache.clear_expired() == 0


def test_mongo_cache_creates_ttl_index_and_round_trips_value() -> None:
    collection = _FakeCacheCollection()
    cache = MongoCacheStore(collection, clock=_Clock())

    cache.set("k", {"lat": 1.0}, ttl_seconds=60)

    assert collection.indexes[0][1]["expireAfterSeconds"] == 0
    assert cache.get("k") == {"lat": 1.0}
    assert collection.documents["k"]["created_at"] < collection.documents["k"]["expires_at"]


def test_mongo_cache_expired_read_is_a_miss_and_removes_document() -> None:
    clock = _Clock()
    collection = _FakeCacheCollection()
    cache = MongoCacheStore(collection, clock=clock, ensure_indexes=False)
    cache.set("k", "v", ttl_seconds=30)

    clock.advance(seconds=31)

    assert cache.get("k") is None
    assert "k" not in collection.documents


def test_mongo_cache_accepts_naive_datetimes_from_driver() -> None:
    clock = _Clock()
    collection = _FakeCacheCollection()
    cache = MongoCacheStore(collection, clock=clock, ensure_indexes=False)
    collection.documents["k"] = {
        "_id": "k",
        "value": "v",
        "expires_at": (clock.now + timedelta(minutes=5)).replace(tzinfo=None),
        "created_at": clock.now.replace(tzinfo=None),
    }

    assert cache.get("k") == "v"


def test_mongo_cache_clear_expired() -> None:
    clock = _Clock()
    collection = _FakeCacheCollection()
    cache = MongoCacheStore(collection, clock=clock, ensure_indexes=False)
    cache.set("old", 1, ttl_seconds=10)
    cache.set("new", 2, ttl_seconds=600)

    clock.advance(minutes=1)

    assert cache.clear_expired() == 1
    assert list(collection.documents) == ["new"]


def test_mongo_cache_errors_degrade_to_miss() -> None:
    cache = MongoCacheStore(_BrokenCollection(), clock=_Clock(), ensure_indexes=False)

    cache.set("k", 1, ttl_seconds=60)

    assert cache.get("k") is None
