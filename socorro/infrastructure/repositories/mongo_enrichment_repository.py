"""Repositórios MongoDB dos dados agregados de fontes externas."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, Optional

from pymongo.collection import Collection

from socorro.domain.entities import ImageVerification, OfficialUpdate, SocialMediaReport
from socorro.domain.repositories import (
    ImageVerificationRepository,
    OfficialUpdateRepository,
    SocialMediaReportRepository,
)

from .indexes import ensure_indexes


class MongoSocialMediaReportRepository(SocialMediaReportRepository):
    """Persiste postagens classificadas usando ``(post_id, platform)`` como chave."""

    def __init__(self, collection: Collection, *, create_indexes: bool = True) -> None:
        self._collection: Collection = collection
        if create_indexes:
            ensure_indexes(collection, "social_media_reports")

    def upsert_many(self, reports: Iterable[SocialMediaReport]) -> int:
        count = 0
        for report in reports:
            self._collection.replace_one(
                {"post_id": report.post_id, "platform": report.platform},
                self._serialize(report),
                upsert=True,
            )
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
        criteria: Dict[str, Any] = {}
        if disaster_id is not None:
            criteria["disaster_id"] = disaster_id
        if since is not None:
            criteria["processed_at"] = {"$gte": since}
        if min_priority is not None:
            criteria["priority_score"] = {"$gte": min_priority}
        sort_field = "priority_score" if min_priority is not None else "processed_at"
        cursor = self._collection.find(criteria).sort(sort_field, -1)
        if limit is not None:
            cursor = cursor.limit(limit)
        return [SocialMediaReport.from_mapping(data) for data in cursor]

    def delete_for_disaster(self, disaster_id: str) -> int:
        result = self._collection.delete_many({"disaster_id": disaster_id})
        return int(getattr(result, "deleted_count", 0) or 0)

    @staticmethod
    def _serialize(report: SocialMediaReport) -> Dict[str, Any]:
        document = report.to_mapping()
        document.pop("id", None)
        document.pop("coordinates", None)
        if report.coordinates is not None:
            document["location"] = report.coordinates.to_geojson()
        document["created_at"] = report.post.created_at
        document["processed_at"] = report.processed_at
        return document


class MongoOfficialUpdateRepository(OfficialUpdateRepository):
    """Persiste comunicados oficiais usando a ``url`` como chave natural."""

    def __init__(self, collection: Collection, *, create_indexes: bool = True) -> None:
        self._collection: Collection = collection
        if create_indexes:
            ensure_indexes(collection, "official_updates")

    def upsert_many(self, updates: Iterable[OfficialUpdate]) -> int:
        count = 0
        for update in updates:
            document = update.to_mapping()
            document["published_at"] = update.published_at
            document["fetched_at"] = update.fetched_at
            self._collection.replace_one({"url": update.url}, document, upsert=True)
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
        criteria: Dict[str, Any] = {}
        if disaster_id is not None:
            criteria["disaster_id"] = disaster_id
        if source is not None:
            criteria["source"] = source
        if fetched_since is not None:
            criteria["fetched_at"] = {"$gte": fetched_since}
        if published_since is not None:
            criteria["published_at"] = {"$gte": published_since}
        cursor = self._collection.find(criteria).sort("published_at", -1)
        if limit is not None:
            cursor = cursor.limit(limit)
        return [OfficialUpdate.from_mapping(data) for data in cursor]

    def delete_for_disaster(self, disaster_id: str) -> int:
        result = self._collection.delete_many({"disaster_id": disaster_id})
        return int(getattr(result, "deleted_count", 0) or 0)


class MongoImageVerificationRepository(ImageVerificationRepository):
    def __init__(self, collection: Collection, *, create_indexes: bool = True) -> None:
        self._collection: Collection = collection
        if create_indexes:
            ensure_indexes(collection, "image_verifications")

    def upsert(self, verification: ImageVerification) -> None:
        document = verification.to_mapping()
        document["verified_at"] = verification.verified_at
        self._collection.replace_one(
            {"disaster_id": verification.disaster_id, "image_url": verification.image_url},
            document,
            upsert=True,
        )

    def list(self, *, disaster_id: Optional[str] = None) -> Iterable[ImageVerification]:
        criteria = {"disaster_id": disaster_id} if disaster_id is not None else {}
        return [ImageVerification.from_mapping(data) for data in self._collection.find(criteria)]

    def delete_for_disaster(self, disaster_id: str) -> int:
        result = self._collection.delete_many({"disaster_id": disaster_id})
        return int(getattr(result, "deleted_count", 0) or 0)


__all__ = [
    "MongoImageVerificationRepository",
    "MongoOfficialUpdateRepository",
    "MongoSocialMediaReportRepository",
]
