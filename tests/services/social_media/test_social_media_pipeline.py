from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Sequence

from socorro.domain.entities import Coordinates, Disaster, SocialMediaPost
from socorro.domain.ports import Notifier, SocialMediaSource
from socorro.infrastructure.cache import InMemoryCacheStore
from socorro.infrastructure.repositories import InMemorySocialMediaReportRepository
from socorro.services.geocoding import GeocodingService
from socorro.services.social_media import SocialMediaService

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


class _StaticSource(SocialMediaSource):
    name = "static"

    def __init__(self, *contents: str) -> None:
        self.calls = 0
        self._contents = contents

    def search(
        self, keywords: Sequence[str], location: Optional[Coordinates] = None
    ) -> list[SocialMediaPost]:
        self.calls += 1
        return [
            SocialMediaPost(
                id=f"post-{index}",
                platform="twitter",
                content=content,
                author="reporter",
                created_at=NOW,
            )
            for index, content in enumerate(self._contents)
        ]


class _BrokenSource(SocialMediaSource):
    name = "broken"

    def search(
        self, keywords: Sequence[str], location: Optional[Coordinates] = None
    ) -> list[SocialMediaPost]:
        raise ConnectionError("rede indisponível")


class _RecordingNotifier(Notifier):
    def __init__(self) -> None:
        self.events: list[tuple[str, Mapping[str, Any], Optional[str]]] = []

    def publish(
        self, event: str, payload: Mapping[str, Any], topic: Optional[str] = None
    ) -> None:
        self.events.append((event, payload, topic))


def _service(
    cache: InMemoryCacheStore,
    *sources: SocialMediaSource,
    notifier: Optional[Notifier] = None,
) -> tuple[SocialMediaService, InMemorySocialMediaReportRepository]:
    repository = InMemorySocialMediaReportRepository()
    geocoding = GeocodingService(InMemoryCacheStore(clock=lambda: NOW))
    service = SocialMediaService(
        cache, repository, geocoding, sources, notifier=notifier, clock=lambda: NOW
    )
    return service, repository


def test_posts_are_classified_geocoded_and_persisted() -> None:
    source = _StaticSource("Trapped near Oak Street, need help")
    service, repository = _service(InMemoryCacheStore(clock=lambda: NOW), source)

    feed = service.fetch("d1", ["flood"])

    report = feed.reports[0]
    assert feed.source == "static"
    assert report.priority_score == 9
    assert report.category == "rescue"
    assert report.sentiment == "negative"
    assert report.location_extracted == "Oak Street"
    assert report.coordinates is not None
    assert repository.list(disaster_id="d1")[0].post_id == "post-0"


def test_second_fetch_is_served_from_cache() -> None:
    source = _StaticSource("Need water")
    service, _ = _service(InMemoryCacheStore(clock=lambda: NOW), source)

    first = service.fetch("d1", ["flood"])
    second = service.fetch("d1", ["flood"])

    assert source.calls == 1
    assert second.to_mapping() == first.to_mapping()


def test_all_sources_failing_degrades_to_mock_without_caching() -> None:
    cache = InMemoryCacheStore(clock=lambda: NOW)
    service, _ = _service(cache, _BrokenSource())

    feed = service.fetch("d1", ["emergency"])

    assert feed.degraded is True
    assert feed.source == "mock"
    assert [report.post_id for report in feed.reports] == ["mock_1", "mock_3"]
    assert len(cache) == 0


def test_without_sources_mock_results_are_cached() -> None:
    cache = InMemoryCacheStore(clock=lambda: NOW)
    service, _ = _service(cache)

    feed = service.fetch("d1", ["shelter"])

    assert feed.degraded is False
    assert service.source_names == ["mock"]
    assert len(cache) == 1


def test_reports_for_reuses_recent_rows_and_broadcasts_fresh_fetches() -> None:
    notifier = _RecordingNotifier()
    source = _StaticSource("SOS trapped", "Volunteers available")
    service, _ = _service(InMemoryCacheStore(clock=lambda: NOW), source, notifier=notifier)
    disaster = Disaster.new(
        title="NYC Flood", description="", owner_id="netrunnerX", tags=("flood",), now=NOW
    )

    fresh = service.reports_for(disaster)
    stored = service.reports_for(disaster, limit=1)

    assert fresh.source == "static"
    assert stored.source == "database"
    assert len(stored.reports) == 1
    assert source.calls == 1
    assert len(notifier.events) == 1
    event, payload, topic = notifier.events[0]
    assert event == "social_media_updated"
    assert topic == disaster.id
    assert payload["totalCount"] == 2


def test_priority_reports_and_stats() -> None:
    source = _StaticSource("SOS trapped", "Volunteers available")
    service, _ = _service(InMemoryCacheStore(clock=lambda: NOW), source)
    service.fetch("d1", [])

    urgent = service.priority_reports(min_priority=5)
    stats = service.stats()

    assert [report.post_id for report in urgent] == ["post-0"]
    assert stats["total_reports"] == 2
    assert stats["platform_breakdown"] == [{"platform": "twitter", "count": 2}]
    assert stats["reports_last_24h"] == 2


def test_limited_feed_reports_the_full_count_found() -> None:
    source = _StaticSource("SOS trapped", "Volunteers available", "Need water")
    service, _ = _service(InMemoryCacheStore(clock=lambda: NOW), source)
    disaster = Disaster.new(
        title="NYC Flood", description="", owner_id="netrunnerX", tags=("flood",), now=NOW
    )

    feed = service.reports_for(disaster, refresh=True, limit=1)
    mapping = feed.to_mapping()

    assert len(mapping["reports"]) == 1
    assert mapping["total_found"] == 3
