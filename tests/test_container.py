from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from socorro.container import build_container
from socorro.infrastructure import (
    InMemoryCacheStore,
    MongoCacheStore,
    MongoClientFactory,
    MongoSettings,
    NullCacheStore,
)
from socorro.infrastructure.repositories import (
    InMemoryDisasterRepository,
    MongoDisasterRepository,
    MongoSocialMediaReportRepository,
)
from socorro.settings import Settings


class _FakeFactory(MongoClientFactory):
    def __init__(self) -> None:
        super().__init__(MongoSettings())
        self.requested: list[str] = []
        self.closed = False

    def collection(self, name: str):
        self.requested.append(name)
        return MagicMock(name=name)

    def close(self) -> None:
        self.closed = True


def test_default_settings_run_in_memory_with_mocks():
    container = build_container(Settings())

    assert isinstance(container.repositories.disasters, InMemoryDisasterRepository)
    assert isinstance(container.cache, InMemoryCacheStore)
    assert container.mongo is None
    assert container.geocoding.provider_names == ["mock"]
    assert container.social_media.source_names == ["mock"]
    assert container.ai.source == "mock"
    assert container.clients == []


def test_mongo_backends_use_the_factory_collections():
    factory = _FakeFactory()

    container = build_container(
        Settings(storage_backend="mongo", cache_backend="mongo"), factory=factory
    )

    assert isinstance(container.repositories.disasters, MongoDisasterRepository)
    assert isinstance(container.repositories.social_reports, MongoSocialMediaReportRepository)
    assert isinstance(container.cache, MongoCacheStore)
    assert set(factory.requested) == {
        "disasters",
        "resources",
        "reports",
        "social_media_reports",
        "official_updates",
        "image_verifications",
        "cache",
    }

    container.close()

    assert factory.closed is True


def test_live_clients_follow_configured_credentials():
    settings = Settings(
        google_maps_api_key="g-key",
        nominatim_enabled=True,
        twitter_bearer_token="t-token",
        official_updates_scraping=True,
        official_updates_rss_feeds=("NWS Alerts|https://alerts.weather.gov/feed.xml",),
        cache_backend="none",
    )

    container = build_container(settings)

    assert container.geocoding.provider_names == ["google", "nominatim"]
    assert container.social_media.source_names == ["twitter"]
    assert [source["name"] for source in container.official_updates.available_sources()] == [
        "FEMA",
        "Red Cross",
        "National Weather Service",
        "NWS Alerts",
    ]
    assert isinstance(container.cache, NullCacheStore)
    assert len(container.clients) == 7
    container.close()


def test_unknown_backends_are_rejected():
    with pytest.raises(ValueError, match="storage backend"):
        build_container(Settings(storage_backend="sqlite"))
    with pytest.raises(ValueError, match="cache backend"):
        build_container(Settings(cache_backend="redis"))
