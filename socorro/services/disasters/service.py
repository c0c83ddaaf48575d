"""Casos de uso de desastres: cadastro, consulta, edição e remoção em cascata."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, Mapping, Optional

from socorro.domain.entities import Coordinates, Disaster, User, utcnow
from socorro.domain.ports import Notifier
from socorro.domain.repositories import (
    DisasterQuery,
    DisasterRepository,
    ImageVerificationRepository,
    OfficialUpdateRepository,
    ReportRepository,
    ResourceRepository,
    SocialMediaReportRepository,
)
from socorro.logging_config import log_disaster_action

log = logging.getLogger(__name__)

VALID_TAGS = (
    "flood",
    "earthquake",
    "hurricane",
    "tornado",
    "wildfire",
    "tsunami",
    "volcano",
    "landslide",
    "drought",
    "blizzard",
    "heatwave",
    "storm",
    "emergency",
    "urgent",
    "medical",
    "shelter",
    "food",
    "water",
    "rescue",
    "evacuation",
)
MAX_PAGE_SIZE = 100
UPDATABLE_FIELDS = ("title", "description", "location_name", "tags", "coordinates")


def validate_tags(tags: Iterable[str]) -> tuple[str, ...]:
    """Normaliza e remove etiquetas repetidas; valores fora da lista levantam ``ValueError``."""

    normalized = tuple(tag.strip().lower() for tag in tags)
    for tag in normalized:
        if not tag or tag not in VALID_TAGS:
            raise ValueError("Invalid tags provided")
    return tuple(dict.fromkeys(normalized))


def ensure_can_modify(user: User, disaster: Disaster) -> None:
    """Somente o dono do registro ou um administrador pode alterá-lo."""

    if disaster.owner_id and disaster.owner_id != user.id and not user.is_admin:
        log.warning(
            "usuário %s tentou modificar o desastre %s de %s",
            user.id,
            disaster.id,
            disaster.owner_id,
        )
        raise PermissionError("You can only modify resources you own.")


@dataclass(frozen=True)
class Pagination:
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    def to_mapping(self) -> Dict[str, Any]:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "totalPages": self.total_pages,
            "hasNext": self.page < self.total_pages,
            "hasPrev": self.page > 1,
        }


class DisastersService:
    """Orquestra o repositório de desastres e os dados dependentes."""

    def __init__(
        self,
        disasters: DisasterRepository,
        notifier: Notifier,
        *,
        resources: Optional[ResourceRepository] = None,
        reports: Optional[ReportRepository] = None,
        social_reports: Optional[SocialMediaReportRepository] = None,
        official_updates: Optional[OfficialUpdateRepository] = None,
        verifications: Optional[ImageVerificationRepository] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._disasters = disasters
        self._notifier = notifier
        self._dependents = tuple(
            repository
            for repository in (
                resources,
                reports,
                social_reports,
                official_updates,
                verifications,
            )
            if repository is not None
        )
        self._clock = clock

    def list(
        self, query: DisasterQuery, *, page: int = 1, limit: int = 10
    ) -> tuple[list[Disaster], Pagination]:
        page = max(1, page)
        limit = min(MAX_PAGE_SIZE, max(1, limit))
        offset = (page - 1) * limit
        items, total = self._disasters.search(query, offset=offset, limit=limit)
        return items, Pagination(page=page, limit=limit, total=total)

    def get(self, disaster_id: str) -> Disaster:
        disaster = self._disasters.get(disaster_id)
        if disaster is None:
            raise LookupError("Disaster not found")
        return disaster

    def create(
        self,
        user: User,
        *,
        title: str,
        description: str = "",
        location_name: Optional[str] = None,
        tags: Iterable[str] = (),
        coordinates: Optional[Coordinates] = None,
    ) -> Disaster:
        disaster = Disaster.new(
            title=title,
            description=description,
            owner_id=user.id,
            location_name=location_name,
            coordinates=coordinates,
            tags=validate_tags(tags),
            now=self._clock(),
        )
        self._disasters.add(disaster)
        log_disaster_action("create", disaster.id, user.id, title=title)
        self._notifier.publish(
            "disaster_updated",
            {"action": "create", "disaster": disaster.to_mapping(), "userId": user.id},
        )
        return disaster

    def update(self, disaster_id: str, user: User, changes: Mapping[str, Any]) -> Disaster:
        """Aplica ``changes`` (apenas campos editáveis) e registra a auditoria."""

        current = self.get(disaster_id)
        ensure_can_modify(user, current)
        unknown = set(changes) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Unsupported fields: {', '.join(sorted(unknown))}")
        normalized = dict(changes)
        if "tags" in normalized:
            normalized["tags"] = validate_tags(normalized["tags"] or ())
        updated = current.with_changes(normalized, user.id, now=self._clock())
        self._disasters.update(updated)
        log_disaster_action("update", disaster_id, user.id, changes=list(normalized))
        self._notifier.publish(
            "disaster_updated",
            {"action": "update", "disaster": updated.to_mapping(), "userId": user.id},
        )
        return updated

    def delete(self, disaster_id: str, user: User) -> None:
        current = self.get(disaster_id)
        ensure_can_modify(user, current)
        removed = 0
        for repository in self._dependents:
            removed += repository.delete_for_disaster(disaster_id)
        self._disasters.delete(disaster_id)
        log_disaster_action("delete", disaster_id, user.id, dependents_removed=removed)
        self._notifier.publish(
            "disaster_updated",
            {"action": "delete", "disasterId": disaster_id, "userId": user.id},
        )


__all__ = [
    "DisastersService",
    "Pagination",
    "UPDATABLE_FIELDS",
    "VALID_TAGS",
    "ensure_can_modify",
    "validate_tags",
]
