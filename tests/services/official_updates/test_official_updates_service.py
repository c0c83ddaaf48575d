from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Sequence

from socorro.domain.entities import Disaster, OfficialUpdate
from socorro.domain.ports import UpdateSource
from socorro.infrastructure.cache import InMemoryCacheStore
from socorro.infrastructure.repositories import InMemoryOfficialUpdateRepository
from socorro.services.official_updates import OfficialUpdatesService, keywords_for

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


class _StaticSource(UpdateSource):
    name = "FEMA"
    url = "https://www.fema.gov/disaster/current"

    def __init__(self) -> None:
        self.calls = 0

    def fetch(self, keywords: Sequence[str]) -> list[OfficialUpdate]:
        self.calls += 1
        return [
            OfficialUpdate(
                id="fema_0",
                source=self.name,
                title="Flood assistance approved",
                content="Apply for housing help",
                url="https://www.fema.gov/news/0",
                published_at=NOW - timedelta(hours=5),
                fetched_at=NOW,
            ),
            OfficialUpdate(
                id="fema_1",
                source=self.name,
                title="Flood warning extended",
                content="Avoid low-lying roads",
                url="https://www.fema.gov/news/1",
                published_at=NOW - timedelta(hours=1),
                fetched_at=NOW,
            ),
            OfficialUpdate(
                id="fema_2",
                source=self.name,
                title="Wildfire smoke",
                content="Stay indoors",
                url="https://www.fema.gov/news/2",
                published_at=NOW,
                fetched_at=NOW,
            ),
        ]


class _BrokenSource(UpdateSource):
    name = "Red Cross"

    def fetch(self, keywords: Sequence[str]) -> list[OfficialUpdate]:
        raise ConnectionError("site fora do ar")


def _service(
    cache: InMemoryCacheStore, *sources: UpdateSource
) -> tuple[OfficialUpdatesService, InMemoryOfficialUpdateRepository]:
    repository = InMemoryOfficialUpdateRepository()
    return OfficialUpdatesService(cache, repository, sources, clock=lambda: NOW), repository


def test_keywords_combine_tags_title_terms_and_location_parts() -> None:
    disaster = Disaster.new(
        title="Brooklyn Flood Emergency",
        description="",
        owner_id="netrunnerX",
        location_name="Brooklyn, NYC",
        tags=("flood",),
    )

    assert keywords_for(disaster) == ["flood", "emergency", "Brooklyn", "NYC"]


def test_second_fetch_hits_cache_with_identical_result() -> None:
    source = _StaticSource()
    service, _ = _service(InMemoryCacheStore(clock=lambda: NOW), source)

    first = service.fetch("d1", ["flood"])
    second = service.fetch("d1", ["flood"])

    assert source.calls == 1
    assert second.to_mapping() == first.to_mapping()


def test_fetch_filters_sorts_and_tags_updates_with_disaster() -> None:
    service, repository = _service(InMemoryCacheStore(clock=lambda: NOW), _StaticSource())

    feed = service.fetch("d1", ["flood"])

    assert [update.id for update in feed.updates] == ["fema_1", "fema_0"]
    assert all(update.disaster_id == "d1" for update in feed.updates)
    assert feed.source == "official_sources"
    assert feed.to_mapping()["summary"]["source_count"] == 1
    assert len(repository.list(disaster_id="d1")) == 2


def test_failing_sources_use_mock_updates_without_caching() -> None:
    cache = InMemoryCacheStore(clock=lambda: NOW)
    service, _ = _service(cache, _BrokenSource())

    feed = service.fetch("d1", ["flood"])

    assert feed.degraded is True
    assert feed.source == "mock"
    assert [update.id for update in feed.updates] == ["fema_mock_1", "nws_mock_1"]
    assert len(cache) == 0


def test_updates_for_serves_recent_rows_from_database() -> None:
    source = _StaticSource()
    service, _ = _service(InMemoryCacheStore(clock=lambda: NOW), source)
    disaster = Disaster.new(
        title="Queens Flood", description="", owner_id="netrunnerX", tags=("flood",)
    )

    fresh = service.updates_for(disaster)
    stored = service.updates_for(disaster, limit=1)

    assert fresh.source == "official_sources"
    assert stored.source == "database"
    assert [update.id for update in stored.updates] == ["fema_1"]
    assert source.calls == 1


def test_recent_updates_and_stats() -> None:
    service, _ = _service(InMemoryCacheStore(clock=lambda: NOW), _StaticSource())
    service.fetch("d1", [])

    recent = service.recent(hours=2)
    stats = service.stats()

    assert [update.id for update in recent] == ["fema_2", "fema_1"]
    assert stats["total_updates"] == 3
    assert stats["source_breakdown"] == [{"source": "FEMA", "count": 3}]
    assert service.available_sources() == [
        {"name": "FEMA", "url": "https://www.fema.gov/disaster/current"}
    ]
