"""Pipeline de comunicados oficiais com cache de uma hora."""
from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional, Sequence

from socorro.domain.entities import Disaster, OfficialUpdate, utcnow
from socorro.domain.ports import CacheStore, UpdateSource
from socorro.domain.repositories import OfficialUpdateRepository
from socorro.infrastructure.cache import cache_key
from socorro.services.pipeline import gather_all, through_cache

from .sources import MockUpdateSource, matches_keywords

log = logging.getLogger(__name__)

OFFICIAL_UPDATES_TTL_SECONDS = 60 * 60
RECENT_WINDOW = timedelta(hours=1)
RELEVANT_TITLE_KEYWORDS = (
    "flood",
    "fire",
    "earthquake",
    "storm",
    "emergency",
    "disaster",
    "hurricane",
    "tornado",
)


def keywords_for(disaster: Disaster) -> list[str]:
    """Tags, termos de tipo presentes no título e partes do nome do local."""

    keywords = list(disaster.tags)
    for word in disaster.title.lower().split():
        if word in RELEVANT_TITLE_KEYWORDS and word not in keywords:
            keywords.append(word)
    if disaster.location_name:
        keywords.extend(
            part.strip() for part in disaster.location_name.split(",") if part.strip()
        )
    return keywords


@dataclass
class OfficialUpdatesFeed:
    disaster_id: str
    updates: list[OfficialUpdate] = field(default_factory=list)
    source: str = "mock"
    fetched_at: datetime = field(default_factory=utcnow)
    degraded: bool = False

    @property
    def by_source(self) -> Dict[str, list[OfficialUpdate]]:
        grouped: Dict[str, list[OfficialUpdate]] = {}
        for update in self.updates:
            grouped.setdefault(update.source, []).append(update)
        return grouped

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "OfficialUpdatesFeed":
        return cls(
            disaster_id=str(data["disaster_id"]),
            updates=[OfficialUpdate.from_mapping(item) for item in data.get("updates") or ()],
            source=str(data.get("source", "mock")),
            fetched_at=datetime.fromisoformat(data["fetched_at"]),
            degraded=bool(data.get("degraded", False)),
        )

    def to_mapping(self) -> Dict[str, Any]:
        grouped = self.by_source
        return {
            "disaster_id": self.disaster_id,
            "updates": [update.to_mapping() for update in self.updates],
            "source": self.source,
            "fetched_at": self.fetched_at.isoformat(),
            "degraded": self.degraded,
            "total_found": len(self.updates),
            "updates_by_source": {
                name: [update.to_mapping() for update in items]
                for name, items in grouped.items()
            },
            "available_sources": list(grouped),
            "summary": {
                "total_updates": len(self.updates),
                "source_count": len(grouped),
                "latest_update": (
                    self.updates[0].published_at.isoformat() if self.updates else None
                ),
            },
        }


class OfficialUpdatesService:
    """Agrega os comunicados de todas as fontes habilitadas."""

    def __init__(
        self,
        cache: CacheStore,
        repository: OfficialUpdateRepository,
        sources: Sequence[UpdateSource] = (),
        *,
        fallback: Optional[UpdateSource] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._cache = cache
        self._repository = repository
        self._sources = tuple(sources)
        self._fallback = fallback or MockUpdateSource(clock=clock)
        self._clock = clock

    def available_sources(self) -> list[Dict[str, Any]]:
        sources = self._sources or (self._fallback,)
        return [
            {"name": source.name, "url": getattr(source, "url", None)} for source in sources
        ]

    def fetch(self, disaster_id: str, keywords: Sequence[str]) -> OfficialUpdatesFeed:
        def produce() -> OfficialUpdatesFeed:
            updates, source, degraded = self._collect(keywords)
            updates = [
                replace(update, disaster_id=disaster_id)
                for update in updates
                if matches_keywords(update, keywords)
            ]
            updates.sort(key=lambda update: update.published_at, reverse=True)
            if updates:
                stored = self._repository.upsert_many(updates)
                log.info("%d comunicados gravados para o desastre %s", stored, disaster_id)
            return OfficialUpdatesFeed(
                disaster_id=disaster_id,
                updates=updates,
                source=source,
                fetched_at=self._clock(),
                degraded=degraded,
            )

        return through_cache(
            self._cache,
            cache_key("official_updates", disaster_id, *keywords),
            OFFICIAL_UPDATES_TTL_SECONDS,
            produce,
            encode=OfficialUpdatesFeed.to_mapping,
            decode=OfficialUpdatesFeed.from_mapping,
            cacheable=lambda feed: not feed.degraded,
        )

    def updates_for(
        self, disaster: Disaster, *, refresh: bool = False, limit: int = 20
    ) -> OfficialUpdatesFeed:
        """Comunicados do desastre; reaproveita os gravados na última hora."""

        if not refresh:
            recent = self._repository.list(
                disaster_id=disaster.id,
                fetched_since=self._clock() - RECENT_WINDOW,
                limit=limit,
            )
            if recent:
                return OfficialUpdatesFeed(
                    disaster_id=disaster.id,
                    updates=recent,
                    source="database",
                    fetched_at=recent[0].fetched_at,
                )
        feed = self.fetch(disaster.id, keywords_for(disaster))
        return replace(feed, updates=feed.updates[:limit])

    def recent(
        self, *, hours: int = 24, source: Optional[str] = None, limit: int = 50
    ) -> list[OfficialUpdate]:
        return self._repository.list(
            source=source,
            published_since=self._clock() - timedelta(hours=hours),
            limit=limit,
        )

    def stats(self) -> Dict[str, Any]:
        updates = self._repository.list()
        now = self._clock()
        per_source = Counter(update.source for update in updates)
        return {
            "total_updates": len(updates),
            "source_breakdown": [
                {"source": name, "count": count} for name, count in per_source.items()
            ],
            "updates_last_24h": sum(
                1 for update in updates if update.published_at >= now - timedelta(hours=24)
            ),
            "last_updated": now.isoformat(),
        }

    def _collect(self, keywords: Sequence[str]) -> tuple[list[OfficialUpdate], str, bool]:
        if not self._sources:
            return self._fallback.fetch(keywords), self._fallback.name, False
        updates, succeeded, _ = gather_all(
            self._sources, lambda source: source.fetch(keywords), action="official_updates"
        )
        if succeeded:
            return updates, "official_sources", False
        log.warning("todas as fontes oficiais falharam; usando comunicados simulados")
        return self._fallback.fetch(keywords), self._fallback.name, True


__all__ = [
    "OFFICIAL_UPDATES_TTL_SECONDS",
    "OfficialUpdatesFeed",
    "OfficialUpdatesService",
    "keywords_for",
]
