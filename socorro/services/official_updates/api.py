"""Rotas REST de comunicados oficiais."""
from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, FastAPI, Query

from socorro.container import SocorroContainer
from socorro.domain.entities import User
from socorro.web import domain_errors, success

log = logging.getLogger(__name__)


def include_routes(
    app: FastAPI, container: SocorroContainer, *, prefix: str = "/api"
) -> None:
    """Registra as rotas de comunicados oficiais na aplicação."""

    auth = container.authenticator
    limiters = container.rate_limiters
    service = container.official_updates
    router = APIRouter(
        prefix=prefix,
        tags=["Comunicados oficiais"],
        dependencies=[Depends(limiters.general.dependency)],
    )

    @router.get(
        "/disasters/{disaster_id}/official-updates",
        dependencies=[Depends(limiters.external_api.dependency)],
    )
    def disaster_official_updates(
        disaster_id: UUID,
        refresh: bool = Query(False),
        limit: int = Query(20, ge=1, le=100),
        user: User = Depends(auth.require("read")),
    ) -> Dict[str, Any]:
        with domain_errors():
            disaster = container.disasters.get(str(disaster_id))
        feed = service.updates_for(disaster, refresh=refresh, limit=limit)
        log.info(
            "%d comunicados do desastre %s entregues a %s (fonte %s)",
            len(feed.updates),
            disaster.id,
            user.id,
            feed.source,
        )
        return success(feed.to_mapping(), "Official updates fetched successfully")

    @router.get("/official-updates/sources")
    def official_sources(user: User = Depends(auth.require("read"))) -> Dict[str, Any]:
        sources = service.available_sources()
        return success(
            {"sources": sources, "totalSources": len(sources)},
            "Official update sources fetched successfully",
        )

    @router.get("/official-updates/recent")
    def recent_updates(
        hours: int = Query(24, ge=1, le=168),
        source: Optional[str] = Query(None, max_length=100),
        limit: int = Query(50, ge=1, le=100),
        user: User = Depends(auth.require("read")),
    ) -> Dict[str, Any]:
        updates = service.recent(hours=hours, source=source, limit=limit)
        per_source = Counter(update.source for update in updates)
        return success(
            {
                "updates": [update.to_mapping() for update in updates],
                "filters": {"hours": hours, "source": source, "limit": limit},
                "summary": {
                    "totalUpdates": len(updates),
                    "timeRange": f"{hours} hours",
                    "updatesBySource": dict(per_source),
                },
            },
            "Recent official updates fetched successfully",
        )

    @router.get("/official-updates/stats")
    def official_updates_stats(user: User = Depends(auth.require("read"))) -> Dict[str, Any]:
        return success(service.stats(), "Official updates statistics fetched successfully")

    app.include_router(router)


__all__ = ["include_routes"]
