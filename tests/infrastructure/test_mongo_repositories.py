from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, Iterator

from socorro.domain.entities import (
    Coordinates,
    Disaster,
    OfficialUpdate,
    SocialMediaPost,
    SocialMediaReport,
)
from socorro.domain.repositories import DisasterQuery
from socorro.infrastructure.repositories import (
    MongoDisasterRepository,
    MongoOfficialUpdateRepository,
    MongoSocialMediaReportRepository,
)

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def _matches(document: Dict[str, Any], criteria: Dict[str, Any]) -> bool:
    for field, expected in criteria.items():
        value = document.get(field)
        if isinstance(expected, dict) and "$gte" in expected:
            if value is None or value < expected["$gte"]:
                return False
        elif isinstance(value, list):
            if expected not in value:
                return False
        elif value != expected:
            return False
    return True


class _Cursor:
    def __init__(self, documents: Iterable[Dict[str, Any]]) -> None:
        self._documents = list(documents)

    def sort(self, field: str, direction: int) -> "_Cursor":
        self._documents.sort(key=lambda doc: doc.get(field), reverse=direction < 0)
        return self

    def skip(self, offset: int) -> "_Cursor":
        self._documents = self._documents[offset:]
        return self

    def limit(self, limit: int) -> "_Cursor":
        self._documents = self._documents[:limit]
        return self

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        return iter(self._documents)


class _DeleteResult:
    def __init__(self, deleted_count: int) -> None:
        self.deleted_count = deleted_count


class _FakeCollection:
    def __init__(self) -> None:
        self.documents: list[Dict[str, Any]] = []
        self.indexes: list[str] = []

    def create_index(self, keys: Any, **options: Any) -> str:
        self.indexes.append(options["name"])
        return options["name"]

    def insert_one(self, document: Dict[str, Any]) -> None:
        self.documents.append(dict(document))

    def find_one(self, criteria: Dict[str, Any]) -> Dict[str, Any] | None:
        return next((doc for doc in self.documents if _matches(doc, criteria)), None)

    def find(self, criteria: Dict[str, Any]) -> _Cursor:
        return _Cursor(doc for doc in self.documents if _matches(doc, criteria))

    def count_documents(self, criteria: Dict[str, Any]) -> int:
        return sum(1 for doc in self.documents if _matches(doc, criteria))

    def replace_one(self, criteria: Dict[str, Any], document: Dict[str, Any], upsert: bool = False) -> None:
        for index, existing in enumerate(self.documents):
            if _matches(existing, criteria):
                self.documents[index] = dict(document)
                return
        if upsert:
            self.documents.append(dict(document))

    def delete_many(self, criteria: Dict[str, Any]) -> _DeleteResult:
        kept = [doc for doc in self.documents if not _matches(doc, criteria)]
        removed = len(self.documents) - len(kept)
        self.documents = kept
        return _DeleteResult(removed)


def _report(post_id: str, *, priority: int, processed_at: datetime) -> SocialMediaReport:
    return SocialMediaReport(
        post=SocialMediaPost(
            id=post_id,
            platform="twitter",
            content="Need water in Brooklyn",
            author="someone",
            created_at=processed_at,
        ),
        disaster_id="d1",
        priority_score=priority,
        sentiment="negative",
        category="food_water",
        coordinates=Coordinates(lat=40.6782, lng=-73.9442),
        processed_at=processed_at,
    )


def test_disaster_repository_stores_geojson_location_and_filters_by_tag() -> None:
    collection = _FakeCollection()
    repository = MongoDisasterRepository(collection)
    flood = Disaster.new(
        title="NYC Flood",
        description="Heavy flooding",
        owner_id="netrunnerX",
        coordinates=Coordinates(lat=40.7831, lng=-73.9712),
        tags=("flood", "urgent"),
        now=NOW,
    )
    fire = Disaster.new(
        title="Wildfire",
        description="Hills burning",
        owner_id="reliefAdmin",
        tags=("wildfire",),
        now=NOW + timedelta(hours=1),
    )
    repository.add(flood)
    repository.add(fire)

    assert "disaster_location" in collection.indexes
    assert collection.documents[0]["location"] == {
        "type": "Point",
        "coordinates": [-73.9712, 40.7831],
    }
    items, total = repository.search(DisasterQuery(tag="flood"), offset=0, limit=10)
    assert total == 1
    assert items[0].id == flood.id
    assert items[0].coordinates == Coordinates(lat=40.7831, lng=-73.9712)


def test_social_reports_are_upserted_by_post_and_platform() -> None:
    collection = _FakeCollection()
    repository = MongoSocialMediaReportRepository(collection)

    repository.upsert_many([_report("1", priority=4, processed_at=NOW)])
    repository.upsert_many([_report("1", priority=7, processed_at=NOW + timedelta(minutes=1))])
    repository.upsert_many([_report("2", priority=2, processed_at=NOW)])

    assert len(collection.documents) == 2
    prioritized = repository.list(min_priority=5)
    assert [report.post_id for report in prioritized] == ["1"]
    assert prioritized[0].coordinates == Coordinates(lat=40.6782, lng=-73.9442)
    assert repository.delete_for_disaster("d1") == 2


def test_official_updates_are_keyed_by_url() -> None:
    collection = _FakeCollection()
    repository = MongoOfficialUpdateRepository(collection)
    update = OfficialUpdate(
        id="fema_0",
        source="FEMA",
        title="Flood warning",
        content="Evacuate low areas",
        url="https://www.fema.gov/news/1",
        published_at=NOW,
        fetched_at=NOW,
        disaster_id="d1",
    )

    repository.upsert_many([update, update])

    assert len(collection.documents) == 1
    assert repository.list(source="FEMA", published_since=NOW - timedelta(hours=1))[0].title == (
        "Flood warning"
    )
