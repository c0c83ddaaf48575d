"""Rotas REST de monitoramento de redes sociais."""
from __future__ import annotations

import logging
from typing import Any, Dict
from uuid import UUID

from fastapi import APIRouter, Depends, FastAPI, Query

from socorro.container import SocorroContainer
from socorro.domain.entities import User
from socorro.web import domain_errors, success

log = logging.getLogger(__name__)


def include_routes(
    app: FastAPI, container: SocorroContainer, *, prefix: str = "/api"
) -> None:
    """Registra as rotas de redes sociais na aplicação."""

    auth = container.authenticator
    limiters = container.rate_limiters
    service = container.social_media
    router = APIRouter(
        prefix=prefix,
        tags=["Redes sociais"],
        dependencies=[Depends(limiters.general.dependency)],
    )

    @router.get(
        "/disasters/{disaster_id}/social-media",
        dependencies=[Depends(limiters.social_media.dependency)],
    )
    def disaster_social_media(
        disaster_id: UUID,
        refresh: bool = Query(False),
        limit: int = Query(50, ge=1, le=100),
        user: User = Depends(auth.require("read")),
    ) -> Dict[str, Any]:
        with domain_errors():
            disaster = container.disasters.get(str(disaster_id))
        feed = service.reports_for(disaster, refresh=refresh, limit=limit)
        log.info(
            "%d postagens do desastre %s entregues a %s (fonte %s)",
            len(feed.reports),
            disaster.id,
            user.id,
            feed.source,
        )
        return success(feed.to_mapping(), "Social media reports fetched successfully")

    @router.get("/social-media/priority")
    def priority_reports(
        min_priority: int = Query(5, ge=1, le=10),
        limit: int = Query(20, ge=1, le=100),
        user: User = Depends(auth.require("read")),
    ) -> Dict[str, Any]:
        reports = service.priority_reports(min_priority=min_priority, limit=limit)
        return success(
            {
                "reports": [report.to_mapping() for report in reports],
                "filters": {"min_priority": min_priority, "limit": limit},
                "totalFound": len(reports),
            },
            "Priority social media reports fetched successfully",
        )

    @router.get("/social-media/stats")
    def social_media_stats(user: User = Depends(auth.require("read"))) -> Dict[str, Any]:
        return success(service.stats(), "Social media statistics fetched successfully")

    app.include_router(router)


__all__ = ["include_routes"]
