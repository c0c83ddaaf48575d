"""Container de dependências da aplicação.

Reúne repositórios, cache, clientes externos e serviços de domínio a partir
de um único ``Settings``. Provedores reais só entram quando suas
credenciais estão configuradas; os simulados cobrem o restante.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from socorro.domain.ports import CacheStore, Geocoder, SocialMediaSource, UpdateSource
from socorro.domain.repositories import (
    DisasterRepository,
    ImageVerificationRepository,
    OfficialUpdateRepository,
    ReportRepository,
    ResourceRepository,
    SocialMediaReportRepository,
)
from socorro.infrastructure import (
    InMemoryCacheStore,
    MongoCacheStore,
    MongoClientFactory,
    NullCacheStore,
)
from socorro.infrastructure.repositories import (
    InMemoryDisasterRepository,
    InMemoryImageVerificationRepository,
    InMemoryOfficialUpdateRepository,
    InMemoryReportRepository,
    InMemoryResourceRepository,
    InMemorySocialMediaReportRepository,
    MongoDisasterRepository,
    MongoImageVerificationRepository,
    MongoOfficialUpdateRepository,
    MongoReportRepository,
    MongoResourceRepository,
    MongoSocialMediaReportRepository,
)
from socorro.services.ai import AIService, GeminiClient
from socorro.services.disasters import DisastersService
from socorro.services.geocoding import (
    GeocodingService,
    GoogleGeocoder,
    MapboxGeocoder,
    NominatimGeocoder,
)
from socorro.services.image_verification import ImageVerificationService
from socorro.services.official_updates import (
    OfficialUpdatesService,
    RssUpdateSource,
    build_scraped_sources,
)
from socorro.services.realtime import WebSocketBroadcaster
from socorro.services.resources import ResourcesService
from socorro.services.social_media import BlueskySource, SocialMediaService, TwitterSource
from socorro.settings import Settings, get_settings
from socorro.web import Authenticator, RateLimiters

log = logging.getLogger(__name__)


@dataclass
class Repositories:
    """Repositórios de todas as coleções persistidas."""

    disasters: DisasterRepository
    resources: ResourceRepository
    reports: ReportRepository
    social_reports: SocialMediaReportRepository
    official_updates: OfficialUpdateRepository
    verifications: ImageVerificationRepository


@dataclass
class SocorroContainer:
    """Container exposto às rotas, à CLI e aos testes."""

    settings: Settings
    repositories: Repositories
    cache: CacheStore
    broadcaster: WebSocketBroadcaster
    authenticator: Authenticator
    rate_limiters: RateLimiters
    ai: AIService
    geocoding: GeocodingService
    social_media: SocialMediaService
    official_updates: OfficialUpdatesService
    image_verification: ImageVerificationService
    disasters: DisastersService
    resources: ResourcesService
    #: Conexão com o Mongo quando ``STORAGE_BACKEND`` ou ``CACHE_BACKEND`` a exigem.
    mongo: Optional[MongoClientFactory] = field(default=None, repr=False)
    #: Clientes HTTP criados pelo container e encerrados em ``close``.
    clients: list[Any] = field(default_factory=list, repr=False)

    def close(self) -> None:
        for client in self.clients:
            client.close()
        if self.mongo is not None:
            self.mongo.close()


def build_repositories(settings: Settings, factory: Optional[MongoClientFactory]) -> Repositories:
    if settings.storage_backend == "mongo":
        assert factory is not None
        collection = factory.collection
        return Repositories(
            disasters=MongoDisasterRepository(collection("disasters")),
            resources=MongoResourceRepository(collection("resources")),
            reports=MongoReportRepository(collection("reports")),
            social_reports=MongoSocialMediaReportRepository(collection("social_media_reports")),
            official_updates=MongoOfficialUpdateRepository(collection("official_updates")),
            verifications=MongoImageVerificationRepository(collection("image_verifications")),
        )
    if settings.storage_backend != "memory":
        raise ValueError(f"Unsupported storage backend: {settings.storage_backend}")
    return Repositories(
        disasters=InMemoryDisasterRepository(),
        resources=InMemoryResourceRepository(),
        reports=InMemoryReportRepository(),
        social_reports=InMemorySocialMediaReportRepository(),
        official_updates=InMemoryOfficialUpdateRepository(),
        verifications=InMemoryImageVerificationRepository(),
    )


def build_cache(settings: Settings, factory: Optional[MongoClientFactory]) -> CacheStore:
    backend = settings.cache_backend
    if backend == "mongo":
        assert factory is not None
        return MongoCacheStore(factory.collection("cache"))
    if backend == "memory":
        return InMemoryCacheStore()
    if backend == "none":
        log.warning("cache desativado (CACHE_BACKEND=none)")
        return NullCacheStore()
    raise ValueError(f"Unsupported cache backend: {backend}")


def build_geocoders(settings: Settings) -> list[Geocoder]:
    """Provedores na ordem de prioridade google → mapbox → nominatim."""

    retry = {"max_attempts": settings.retry_max_attempts, "base_delay": settings.retry_base_delay}
    geocoders: list[Geocoder] = []
    if settings.google_maps_api_key:
        geocoders.append(GoogleGeocoder(settings.google_maps_api_key, **retry))
    if settings.mapbox_access_token:
        geocoders.append(MapboxGeocoder(settings.mapbox_access_token, **retry))
    if settings.nominatim_enabled:
        geocoders.append(NominatimGeocoder(**retry))
    return geocoders


def build_social_sources(settings: Settings) -> list[SocialMediaSource]:
    retry = {"max_attempts": settings.retry_max_attempts, "base_delay": settings.retry_base_delay}
    sources: list[SocialMediaSource] = []
    if settings.twitter_bearer_token:
        sources.append(TwitterSource(settings.twitter_bearer_token, **retry))
    if settings.bluesky_identifier and settings.bluesky_password:
        sources.append(
            BlueskySource(settings.bluesky_identifier, settings.bluesky_password, **retry)
        )
    return sources


def build_update_sources(settings: Settings) -> list[UpdateSource]:
    retry = {"max_attempts": settings.retry_max_attempts, "base_delay": settings.retry_base_delay}
    sources: list[UpdateSource] = []
    if settings.official_updates_scraping:
        sources.extend(build_scraped_sources(**retry))
    for entry in settings.official_updates_rss_feeds:
        sources.append(RssUpdateSource.from_setting(entry, **retry))
    return sources


def build_container(
    settings: Optional[Settings] = None,
    *,
    factory: Optional[MongoClientFactory] = None,
) -> SocorroContainer:
    """Monta o container a partir da configuração informada (ou do ambiente)."""

    settings = settings or get_settings()
    needs_mongo = settings.storage_backend == "mongo" or settings.cache_backend == "mongo"
    if needs_mongo and factory is None:
        factory = MongoClientFactory()

    repositories = build_repositories(settings, factory)
    cache = build_cache(settings, factory)
    broadcaster = WebSocketBroadcaster()

    language_model = None
    if settings.gemini_api_key:
        language_model = GeminiClient(
            settings.gemini_api_key,
            text_model=settings.gemini_text_model,
            vision_model=settings.gemini_vision_model,
            max_attempts=settings.retry_max_attempts,
            base_delay=settings.retry_base_delay,
        )
    ai = AIService(cache, language_model)

    geocoders = build_geocoders(settings)
    social_sources = build_social_sources(settings)
    update_sources = build_update_sources(settings)
    geocoding = GeocodingService(cache, geocoders, ai_service=ai)

    container = SocorroContainer(
        settings=settings,
        repositories=repositories,
        cache=cache,
        broadcaster=broadcaster,
        authenticator=Authenticator(),
        rate_limiters=RateLimiters.from_settings(settings.rate_limits),
        ai=ai,
        geocoding=geocoding,
        social_media=SocialMediaService(
            cache,
            repositories.social_reports,
            geocoding,
            social_sources,
            notifier=broadcaster,
        ),
        official_updates=OfficialUpdatesService(
            cache, repositories.official_updates, update_sources
        ),
        image_verification=ImageVerificationService(
            ai, repositories.verifications, repositories.reports, broadcaster
        ),
        disasters=DisastersService(
            repositories.disasters,
            broadcaster,
            resources=repositories.resources,
            reports=repositories.reports,
            social_reports=repositories.social_reports,
            official_updates=repositories.official_updates,
            verifications=repositories.verifications,
        ),
        resources=ResourcesService(repositories.resources, broadcaster),
        mongo=factory,
        clients=[
            client
            for client in (language_model, *geocoders, *social_sources, *update_sources)
            if client is not None
        ],
    )
    log.info(
        "container pronto: armazenamento=%s cache=%s geocodificação=%s redes=%s fontes oficiais=%d ia=%s",
        settings.storage_backend,
        settings.cache_backend,
        geocoding.provider_names,
        container.social_media.source_names,
        len(update_sources),
        ai.source,
    )
    return container


__all__ = [
    "Repositories",
    "SocorroContainer",
    "build_cache",
    "build_container",
    "build_geocoders",
    "build_repositories",
    "build_social_sources",
    "build_update_sources",
]
