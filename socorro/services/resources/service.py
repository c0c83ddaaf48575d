"""Consulta geoespacial e cadastro de recursos de apoio."""
from __future__ import annotations

import logging
import time
from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Sequence

from socorro.domain.entities import (
    AVAILABILITY_STATUSES,
    RESOURCE_TYPES,
    Coordinates,
    Disaster,
    Resource,
)
from socorro.domain.ports import Notifier
from socorro.domain.repositories import ResourceRepository
from socorro.logging_config import log_geospatial_query

log = logging.getLogger(__name__)

DEFAULT_RADIUS_KM = 10.0
BROADCAST_LIMIT = 10


@dataclass(frozen=True)
class LocatedResource:
    """Recurso acompanhado da distância (km) até o centro da consulta."""

    resource: Resource
    distance_km: Optional[float] = None

    def to_mapping(self) -> Dict[str, Any]:
        payload = self.resource.to_mapping()
        if self.distance_km is not None:
            payload["distance_km"] = round(self.distance_km, 2)
        return payload


@dataclass(frozen=True)
class ResourceSearch:
    resources: list[LocatedResource]
    center: Optional[Coordinates]
    radius_km: float

    @property
    def geospatial(self) -> bool:
        return self.center is not None


def within_radius(
    resources: Iterable[Resource], center: Coordinates, radius_km: float
) -> list[LocatedResource]:
    """Filtra por distância haversine e ordena do mais próximo ao mais distante."""

    located = []
    for resource in resources:
        if resource.coordinates is None:
            continue
        distance = center.distance_km(resource.coordinates)
        if distance <= radius_km:
            located.append(LocatedResource(resource=resource, distance_km=distance))
    located.sort(key=lambda item: item.distance_km)
    return located


class ResourcesService:
    def __init__(self, resources: ResourceRepository, notifier: Notifier) -> None:
        self._resources = resources
        self._notifier = notifier

    def for_disaster(
        self,
        disaster: Disaster,
        *,
        center: Optional[Coordinates] = None,
        radius_km: float = DEFAULT_RADIUS_KM,
        resource_type: Optional[str] = None,
        limit: int = 50,
    ) -> ResourceSearch:
        """Recursos do desastre, filtrados pelo raio quando há um centro.

        Sem ``center`` explícito usa a localização do próprio desastre.
        """

        started = time.perf_counter()
        center = center or disaster.coordinates
        candidates = self._resources.list(disaster_id=disaster.id, resource_type=resource_type)
        if center is None:
            located = [LocatedResource(resource=item) for item in candidates]
        else:
            located = within_radius(candidates, center, radius_km)
            log_geospatial_query(
                "resources_within_radius",
                center.to_mapping(),
                radius_km,
                len(located),
                int((time.perf_counter() - started) * 1000),
            )
        self._broadcast(disaster, located)
        return ResourceSearch(resources=located[:limit], center=center, radius_km=radius_km)

    def nearby(
        self,
        center: Coordinates,
        *,
        radius_km: float = DEFAULT_RADIUS_KM,
        resource_type: Optional[str] = None,
        limit: int = 50,
    ) -> list[LocatedResource]:
        started = time.perf_counter()
        located = within_radius(
            self._resources.list(resource_type=resource_type), center, radius_km
        )
        log_geospatial_query(
            "nearby_resources",
            center.to_mapping(),
            radius_km,
            len(located),
            int((time.perf_counter() - started) * 1000),
        )
        return located[:limit]

    def types(self) -> list[Dict[str, Any]]:
        counts = Counter(resource.type for resource in self._resources.list())
        return [{"type": name, "count": count} for name, count in sorted(counts.items())]

    def create(self, disaster: Disaster, **fields: Any) -> Resource:
        resource_type = fields.get("type")
        if resource_type not in RESOURCE_TYPES:
            raise ValueError(f"Invalid resource type: {resource_type}")
        status = fields.get("availability_status", "available")
        if status not in AVAILABILITY_STATUSES:
            raise ValueError(f"Invalid availability status: {status}")
        resource = Resource.new(disaster.id, **fields)
        self._resources.add(resource)
        log.info("recurso %s (%s) criado para %s", resource.id, resource.type, disaster.id)
        self._broadcast(disaster, list(self._resources.list(disaster_id=disaster.id)))
        return resource

    def _broadcast(self, disaster: Disaster, items: Sequence[Any]) -> None:
        """Envia à sala do desastre os primeiros recursos e o total encontrado."""

        self._notifier.publish(
            "resources_updated",
            {
                "disasterId": disaster.id,
                "resources": [item.to_mapping() for item in items[:BROADCAST_LIMIT]],
                "totalCount": len(items),
            },
            topic=disaster.id,
        )


__all__ = [
    "DEFAULT_RADIUS_KM",
    "LocatedResource",
    "ResourceSearch",
    "ResourcesService",
    "within_radius",
]
