"""Utilitários para criação dos índices das coleções da plataforma."""
from __future__ import annotations

from typing import Any, Mapping

from pymongo.collection import Collection

IndexDefinition = tuple[list[tuple[str, Any]], dict[str, object]]

INDEXES: Mapping[str, tuple[IndexDefinition, ...]] = {
    "disasters": (
        ([("location", "2dsphere")], {"name": "disaster_location", "sparse": True}),
        ([("tags", 1)], {"name": "disaster_tags"}),
        ([("owner_id", 1)], {"name": "disaster_owner"}),
        ([("created_at", -1)], {"name": "disaster_created_at"}),
    ),
    "resources": (
        ([("location", "2dsphere")], {"name": "resource_location", "sparse": True}),
        ([("disaster_id", 1)], {"name": "resource_disaster"}),
        ([("type", 1)], {"name": "resource_type"}),
    ),
    "reports": (
        ([("disaster_id", 1)], {"name": "report_disaster"}),
        ([("verification_status", 1)], {"name": "report_status"}),
    ),
    "social_media_reports": (
        (
            [("post_id", 1), ("platform", 1)],
            {"name": "social_post_platform_unique", "unique": True},
        ),
        ([("disaster_id", 1), ("processed_at", -1)], {"name": "social_disaster_recent"}),
        ([("priority_score", -1)], {"name": "social_priority"}),
    ),
    "official_updates": (
        ([("url", 1)], {"name": "official_update_url_unique", "unique": True}),
        ([("disaster_id", 1), ("fetched_at", -1)], {"name": "official_disaster_recent"}),
        ([("published_at", -1)], {"name": "official_published_at"}),
    ),
    "image_verifications": (
        (
            [("disaster_id", 1), ("image_url", 1)],
            {"name": "verification_disaster_image_unique", "unique": True},
        ),
    ),
}


def ensure_indexes(collection: Collection, name: str) -> None:
    """Garante que os índices declarados para ``name`` existam na coleção."""

    for keys, options in INDEXES.get(name, ()):
        collection.create_index(keys, background=True, **options)


__all__ = ["INDEXES", "ensure_indexes"]
