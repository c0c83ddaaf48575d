"""Repositórios de desastres, recursos e relatos com persistência em MongoDB."""
from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Dict, Iterable, Optional

from pymongo.collection import Collection

from socorro.domain.entities import Disaster, Report, Resource, utcnow
from socorro.domain.repositories import (
    DisasterQuery,
    DisasterRepository,
    ReportRepository,
    ResourceRepository,
)

from .indexes import ensure_indexes


def _with_location(document: Dict[str, Any], entity: Any) -> Dict[str, Any]:
    """Substitui ``coordinates`` por um ponto GeoJSON indexável."""

    coordinates = document.pop("coordinates", None)
    if coordinates is not None:
        document["location"] = entity.coordinates.to_geojson()
    return document


class MongoDisasterRepository(DisasterRepository):
    """Gerencia a persistência de :class:`Disaster` em coleções MongoDB."""

    def __init__(self, collection: Collection, *, create_indexes: bool = True) -> None:
        self._collection: Collection = collection
        """Coleção MongoDB onde os desastres são armazenados."""

        if create_indexes:
            ensure_indexes(collection, "disasters")

    def add(self, disaster: Disaster) -> None:
        self._collection.insert_one(self._serialize(disaster))

    def get(self, disaster_id: str) -> Optional[Disaster]:
        data = self._collection.find_one({"_id": disaster_id})
        if not data:
            return None
        return Disaster.from_mapping(data)

    def update(self, disaster: Disaster) -> None:
        self._collection.replace_one(
            {"_id": disaster.id}, self._serialize(disaster), upsert=False
        )

    def delete(self, disaster_id: str) -> bool:
        result = self._collection.delete_one({"_id": disaster_id})
        return bool(getattr(result, "deleted_count", 0))

    def search(
        self, query: DisasterQuery, *, offset: int, limit: int
    ) -> tuple[list[Disaster], int]:
        criteria = self._build_criteria(query)
        total = self._collection.count_documents(criteria)
        cursor = (
            self._collection.find(criteria)
            .sort("created_at", -1)
            .skip(offset)
            .limit(limit)
        )
        return [Disaster.from_mapping(data) for data in cursor], total

    @staticmethod
    def _build_criteria(query: DisasterQuery) -> Dict[str, Any]:
        """Traduz os filtros da listagem para uma consulta MongoDB."""

        criteria: Dict[str, Any] = {}
        if query.tag:
            criteria["tags"] = query.tag.lower()
        if query.owner_id:
            criteria["owner_id"] = query.owner_id
        if query.search:
            pattern = {"$regex": re.escape(query.search), "$options": "i"}
            criteria["$or"] = [
                {"title": pattern},
                {"description": pattern},
                {"location_name": pattern},
            ]
        return criteria

    @staticmethod
    def _serialize(disaster: Disaster) -> Dict[str, Any]:
        document = disaster.to_mapping()
        document["_id"] = document.pop("id")
        document["created_at"] = disaster.created_at
        document["updated_at"] = disaster.updated_at
        return _with_location(document, disaster)


class MongoResourceRepository(ResourceRepository):
    def __init__(self, collection: Collection, *, create_indexes: bool = True) -> None:
        self._collection: Collection = collection
        if create_indexes:
            ensure_indexes(collection, "resources")

    def add(self, resource: Resource) -> None:
        document = resource.to_mapping()
        document["_id"] = document.pop("id")
        document["created_at"] = resource.created_at
        document["updated_at"] = resource.updated_at
        self._collection.insert_one(_with_location(document, resource))

    def list(
        self,
        *,
        disaster_id: Optional[str] = None,
        resource_type: Optional[str] = None,
    ) -> Iterable[Resource]:
        criteria: Dict[str, Any] = {}
        if disaster_id is not None:
            criteria["disaster_id"] = disaster_id
        if resource_type is not None:
            criteria["type"] = resource_type
        cursor = self._collection.find(criteria).sort("created_at", -1)
        return [Resource.from_mapping(data) for data in cursor]

    def delete_for_disaster(self, disaster_id: str) -> int:
        result = self._collection.delete_many({"disaster_id": disaster_id})
        return int(getattr(result, "deleted_count", 0) or 0)


class MongoReportRepository(ReportRepository):
    def __init__(self, collection: Collection, *, create_indexes: bool = True) -> None:
        self._collection: Collection = collection
        if create_indexes:
            ensure_indexes(collection, "reports")

    def add(self, report: Report) -> None:
        document = report.to_mapping()
        document["_id"] = document.pop("id")
        document["created_at"] = report.created_at
        document["updated_at"] = report.updated_at
        self._collection.insert_one(document)

    def get(self, report_id: str) -> Optional[Report]:
        data = self._collection.find_one({"_id": report_id})
        return Report.from_mapping(data) if data else None

    def update_status(self, report_id: str, status: str) -> bool:
        now: datetime = utcnow()
        result = self._collection.update_one(
            {"_id": report_id},
            {"$set": {"verification_status": status, "updated_at": now}},
        )
        return bool(getattr(result, "matched_count", 0))

    def delete_for_disaster(self, disaster_id: str) -> int:
        result = self._collection.delete_many({"disaster_id": disaster_id})
        return int(getattr(result, "deleted_count", 0) or 0)


__all__ = [
    "MongoDisasterRepository",
    "MongoReportRepository",
    "MongoResourceRepository",
]
