"""Pipeline de postagens em redes sociais: coleta, classificação e persistência."""
from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional, Sequence

from socorro.domain.entities import (
    Coordinates,
    Disaster,
    SocialMediaPost,
    SocialMediaReport,
    utcnow,
)
from socorro.domain.ports import CacheStore, Notifier, SocialMediaSource
from socorro.domain.repositories import SocialMediaReportRepository
from socorro.extraction import extract_location_mentions
from socorro.infrastructure.cache import cache_key
from socorro.services.geocoding import GeocodingService
from socorro.services.pipeline import gather_all, through_cache

from .classifier import ReportClassifier
from .sources import MockSocialMediaSource

log = logging.getLogger(__name__)

SOCIAL_MEDIA_TTL_SECONDS = 10 * 60
RECENT_WINDOW = timedelta(minutes=10)
BROADCAST_LIMIT = 5
DISASTER_TITLE_KEYWORDS = ("flood", "fire", "earthquake", "storm", "emergency", "disaster")


def keywords_for(disaster: Disaster) -> list[str]:
    """Palavras-chave de busca: tags do desastre e termos de tipo no título."""

    keywords = list(disaster.tags)
    for word in disaster.title.lower().split():
        if word in DISASTER_TITLE_KEYWORDS and word not in keywords:
            keywords.append(word)
    return keywords


@dataclass
class SocialMediaFeed:
    disaster_id: str
    reports: list[SocialMediaReport] = field(default_factory=list)
    source: str = "mock"
    fetched_at: datetime = field(default_factory=utcnow)
    degraded: bool = False
    #: Total encontrado antes de qualquer corte por `limit`.
    total_found: Optional[int] = None

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "SocialMediaFeed":
        return cls(
            disaster_id=str(data["disaster_id"]),
            reports=[SocialMediaReport.from_mapping(item) for item in data.get("reports") or ()],
            source=str(data.get("source", "mock")),
            fetched_at=datetime.fromisoformat(data["fetched_at"]),
            degraded=bool(data.get("degraded", False)),
            total_found=data.get("total_found"),
        )

    def to_mapping(self, limit: Optional[int] = None) -> Dict[str, Any]:
        reports = self.reports if limit is None else self.reports[:limit]
        return {
            "disaster_id": self.disaster_id,
            "reports": [report.to_mapping() for report in reports],
            "source": self.source,
            "fetched_at": self.fetched_at.isoformat(),
            "degraded": self.degraded,
            "total_found": len(self.reports) if self.total_found is None else self.total_found,
        }


class SocialMediaService:
    """Consulta as fontes configuradas e mantém as postagens classificadas.

    Todas as fontes reais são consultadas e seus resultados concatenados.
    Sem fontes configuradas, ou quando todas falham, a fonte simulada é
    usada; no segundo caso o resultado é ``degraded`` e não vai ao cache.
    """

    def __init__(
        self,
        cache: CacheStore,
        repository: SocialMediaReportRepository,
        geocoding: GeocodingService,
        sources: Sequence[SocialMediaSource] = (),
        *,
        fallback: Optional[SocialMediaSource] = None,
        classifier: Optional[ReportClassifier] = None,
        notifier: Optional[Notifier] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._cache = cache
        self._repository = repository
        self._geocoding = geocoding
        self._sources = tuple(sources)
        self._fallback = fallback or MockSocialMediaSource(clock=clock)
        self._classifier = classifier or ReportClassifier()
        self._notifier = notifier
        self._clock = clock

    @property
    def source_names(self) -> list[str]:
        return [source.name for source in self._sources] or [self._fallback.name]

    def fetch(
        self,
        disaster_id: str,
        keywords: Sequence[str],
        location: Optional[Coordinates] = None,
    ) -> SocialMediaFeed:
        """Busca, classifica e persiste postagens, passando pelo cache."""

        def produce() -> SocialMediaFeed:
            posts, source, degraded = self._collect(keywords, location)
            reports = [self._process(post, disaster_id) for post in posts]
            if reports:
                stored = self._repository.upsert_many(reports)
                log.info("%d postagens gravadas para o desastre %s", stored, disaster_id)
            return SocialMediaFeed(
                disaster_id=disaster_id,
                reports=reports,
                source=source,
                fetched_at=self._clock(),
                degraded=degraded,
            )

        return through_cache(
            self._cache,
            cache_key("social_media", disaster_id, *keywords),
            SOCIAL_MEDIA_TTL_SECONDS,
            produce,
            encode=lambda feed: feed.to_mapping(),
            decode=SocialMediaFeed.from_mapping,
            cacheable=lambda feed: not feed.degraded,
        )

    def reports_for(
        self, disaster: Disaster, *, refresh: bool = False, limit: int = 50
    ) -> SocialMediaFeed:
        """Postagens do desastre; reaproveita as gravadas nos últimos 10 minutos."""

        if not refresh:
            recent = self._repository.list(
                disaster_id=disaster.id,
                since=self._clock() - RECENT_WINDOW,
                limit=limit,
            )
            if recent:
                return SocialMediaFeed(
                    disaster_id=disaster.id,
                    reports=recent,
                    source="database",
                    fetched_at=recent[0].processed_at,
                )
        feed = self.fetch(disaster.id, keywords_for(disaster), disaster.coordinates)
        if self._notifier is not None and feed.reports:
            self._notifier.publish(
                "social_media_updated",
                {
                    "disasterId": disaster.id,
                    "reports": [report.to_mapping() for report in feed.reports[:BROADCAST_LIMIT]],
                    "totalCount": len(feed.reports),
                    "source": feed.source,
                    "fetchedAt": feed.fetched_at.isoformat(),
                },
                topic=disaster.id,
            )
        return replace(feed, reports=feed.reports[:limit], total_found=len(feed.reports))

    def priority_reports(
        self, *, min_priority: int = 5, limit: int = 20
    ) -> list[SocialMediaReport]:
        return self._repository.list(min_priority=min_priority, limit=limit)

    def stats(self) -> Dict[str, Any]:
        reports = self._repository.list()
        now = self._clock()
        platforms = Counter(report.platform for report in reports)
        sentiments = Counter(report.sentiment for report in reports)
        categories = Counter(report.category for report in reports)
        return {
            "total_reports": len(reports),
            "platform_breakdown": [
                {"platform": name, "count": count} for name, count in platforms.items()
            ],
            "sentiment_breakdown": [
                {"sentiment": name, "count": count} for name, count in sentiments.items()
            ],
            "category_breakdown": [
                {"category": name, "count": count} for name, count in categories.items()
            ],
            "reports_last_24h": sum(
                1 for report in reports if report.post.created_at >= now - timedelta(hours=24)
            ),
            "last_updated": now.isoformat(),
        }

    def _collect(
        self, keywords: Sequence[str], location: Optional[Coordinates]
    ) -> tuple[list[SocialMediaPost], str, bool]:
        if not self._sources:
            return self._fallback.search(keywords, location), self._fallback.name, False
        posts, succeeded, _ = gather_all(
            self._sources,
            lambda source: source.search(keywords, location),
            action="social_media",
        )
        if succeeded:
            return posts, "+".join(source.name for source in self._sources), False
        log.warning("todas as redes sociais falharam; usando postagens simuladas")
        return self._fallback.search(keywords, location), self._fallback.name, True

    def _process(self, post: SocialMediaPost, disaster_id: str) -> SocialMediaReport:
        classification = self._classifier.classify(post.content)
        locations = extract_location_mentions(post.content)
        coordinates: Optional[Coordinates] = None
        if locations:
            try:
                coordinates = self._geocoding.geocode(locations[0]).coordinates
            except ValueError as exc:
                log.warning("falha ao geocodificar %r: %s", locations[0], exc)
        return SocialMediaReport(
            post=post,
            disaster_id=disaster_id,
            priority_score=classification.priority_score,
            sentiment=classification.sentiment,
            category=classification.category,
            location_extracted=locations[0] if locations else None,
            all_locations=tuple(locations),
            coordinates=coordinates,
            processed_at=self._clock(),
        )


__all__ = [
    "DISASTER_TITLE_KEYWORDS",
    "SOCIAL_MEDIA_TTL_SECONDS",
    "SocialMediaFeed",
    "SocialMediaService",
    "keywords_for",
]
