"""Repositórios em memória usados em desenvolvimento e nos testes."""
from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime
from typing import Dict, Iterable, Optional, Tuple

from socorro.domain.entities import (
    Disaster,
    ImageVerification,
    OfficialUpdate,
    Report,
    Resource,
    SocialMediaReport,
    utcnow,
)
from socorro.domain.repositories import (
    DisasterQuery,
    DisasterRepository,
    ImageVerificationRepository,
    OfficialUpdateRepository,
    ReportRepository,
    ResourceRepository,
    SocialMediaReportRepository,
)


def matches_disaster_query(disaster: Disaster, query: DisasterQuery) -> bool:
    """Aplica os filtros da listagem de desastres a um registro."""

    if query.tag and query.tag.lower() not in {tag.lower() for tag in disaster.tags}:
        return False
    if query.owner_id and disaster.owner_id != query.owner_id:
        return False
    if query.search:
        needle = query.search.lower()
        haystack = (disaster.title, disaster.description, disaster.location_name or "")
        if not any(needle in value.lower() for value in haystack):
            return False
    return True


class InMemoryDisasterRepository(DisasterRepository):
    def __init__(self) -> None:
        self._items: Dict[str, Disaster] = {}
        self._lock = threading.Lock()

    def add(self, disaster: Disaster) -> None:
        with self._lock:
            if disaster.id in self._items:
                raise ValueError(f"disaster {disaster.id} already exists")
            self._items[disaster.id] = disaster

    def get(self, disaster_id: str) -> Optional[Disaster]:
        return self._items.get(disaster_id)

    def update(self, disaster: Disaster) -> None:
        with self._lock:
            self._items[disaster.id] = disaster

    def delete(self, disaster_id: str) -> bool:
        with self._lock:
            return self._items.pop(disaster_id, None) is not None

    def search(
        self, query: DisasterQuery, *, offset: int, limit: int
    ) -> tuple[list[Disaster], int]:
        matched = [item for item in self._items.values() if matches_disaster_query(item, query)]
        matched.sort(key=lambda item: item.created_at, reverse=True)
        return matched[offset : offset + limit], len(matched)


class InMemoryResourceRepository(ResourceRepository):
    def __init__(self) -> None:
        self._items: Dict[str, Resource] = {}
        self._lock = threading.Lock()

    def add(self, resource: Resource) -> None:
        with self._lock:
            self._items[resource.id] = resource

    def list(
        self,
        *,
        disaster_id: Optional[str] = None,
        resource_type: Optional[str] = None,
    ) -> Iterable[Resource]:
        items = [
            item
            for item in self._items.values()
            if (disaster_id is None or item.disaster_id == disaster_id)
            and (resource_type is None or item.type == resource_type)
        ]
        items.sort(key=lambda item: item.created_at, reverse=True)
        return items

    def delete_for_disaster(self, disaster_id: str) -> int:
        with self._lock:
            doomed = [key for key, item in self._items.items() if item.disaster_id == disaster_id]
            for key in doomed:
                del self._items[key]
        return len(doomed)


class InMemoryReportRepository(ReportRepository):
    def __init__(self) -> None:
        self._items: Dict[str, Report] = {}
        self._lock = threading.Lock()

    def add(self, report: Report) -> None:
        with self._lock:
            self._items[report.id] = report

    def get(self, report_id: str) -> Optional[Report]:
        return self._items.get(report_id)

    def update_status(self, report_id: str, status: str) -> bool:
        with self._lock:
            report = self._items.get(report_id)
            if report is None:
                return False
            self._items[report_id] = replace(
                report, verification_status=status, updated_at=utcnow()
            )
        return True

    def delete_for_disaster(self, disaster_id: str) -> int:
        with self._lock:
            doomed = [key for key, item in self._items.items() if item.disaster_id == disaster_id]
            for key in doomed:
                del self._items[key]
        return len(doomed)


class InMemorySocialMediaReportRepository(SocialMediaReportRepository):
    def __init__(self) -> None:
        self._items: Dict[Tuple[str, str], SocialMediaReport] = {}
        self._lock = threading.Lock()

    def upsert_many(self, reports: Iterable[SocialMediaReport]) -> int:
        count = 0
        with self._lock:
            for report in reports:
                self._items[(report.post_id, report.platform)] = report
                count += 1
        return count

    def list(
        self,
        *,
        disaster_id: Optional[str] = None,
        since: Optional[datetime] = None,
        min_priority: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> list[SocialMediaReport]:
        items = [
            item
            for item in self._items.values()
            if (disaster_id is None or item.disaster_id == disaster_id)
            and (since is None or item.processed_at >= since)
            and (min_priority is None or item.priority_score >= min_priority)
        ]
        if min_priority is not None:
            items.sort(key=lambda item: (item.priority_score, item.processed_at), reverse=True)
        else:
            items.sort(key=lambda item: item.processed_at, reverse=True)
        return items[:limit] if limit is not None else items

    def delete_for_disaster(self, disaster_id: str) -> int:
        with self._lock:
            doomed = [key for key, item in self._items.items() if item.disaster_id == disaster_id]
            for key in doomed:
                del self._items[key]
        return len(doomed)


class InMemoryOfficialUpdateRepository(OfficialUpdateRepository):
    def __init__(self) -> None:
        self._items: Dict[str, OfficialUpdate] = {}
        self._lock = threading.Lock()

    def upsert_many(self, updates: Iterable[OfficialUpdate]) -> int:
        count = 0
        with self._lock:
            for update in updates:
                self._items[update.url] = update
                count += 1
        return count

    def list(
        self,
        *,
        disaster_id: Optional[str] = None,
        source: Optional[str] = None,
        fetched_since: Optional[datetime] = None,
        published_since: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> list[OfficialUpdate]:
        items = [
            item
            for item in self._items.values()
            if (disaster_id is None or item.disaster_id == disaster_id)
            and (source is None or item.source == source)
            and (fetched_since is None or item.fetched_at >= fetched_since)
            and (published_since is None or item.published_at >= published_since)
        ]
        items.sort(key=lambda item: item.published_at, reverse=True)
        return items[:limit] if limit is not None else items

    def delete_for_disaster(self, disaster_id: str) -> int:
        with self._lock:
            doomed = [key for key, item in self._items.items() if item.disaster_id == disaster_id]
            for key in doomed:
                del self._items[key]
        return len(doomed)


class InMemoryImageVerificationRepository(ImageVerificationRepository):
    def __init__(self) -> None:
        self._items: Dict[Tuple[str, str], ImageVerification] = {}
        self._lock = threading.Lock()

    def upsert(self, verification: ImageVerification) -> None:
        with self._lock:
            self._items[(verification.disaster_id, verification.image_url)] = verification

    def list(self, *, disaster_id: Optional[str] = None) -> Iterable[ImageVerification]:
        return [
            item
            for item in self._items.values()
            if disaster_id is None or item.disaster_id == disaster_id
        ]

    def delete_for_disaster(self, disaster_id: str) -> int:
        with self._lock:
            doomed = [key for key in self._items if key[0] == disaster_id]
            for key in doomed:
                del self._items[key]
        return len(doomed)


__all__ = [
    "InMemoryDisasterRepository",
    "InMemoryImageVerificationRepository",
    "InMemoryOfficialUpdateRepository",
    "InMemoryReportRepository",
    "InMemoryResourceRepository",
    "InMemorySocialMediaReportRepository",
    "matches_disaster_query",
]
