"""Rotas REST de recursos de apoio."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, FastAPI, Query
from pydantic import BaseModel, Field

from socorro.container import SocorroContainer
from socorro.domain.entities import Coordinates, User
from socorro.web import ValidationError, domain_errors, success

from .service import DEFAULT_RADIUS_KM

log = logging.getLogger(__name__)


class ResourcePayload(BaseModel):
    """Payload de cadastro de recurso."""

    name: str = Field(min_length=1, max_length=200)
    #: Um de ``RESOURCE_TYPES`` (``shelter``, ``hospital``...).
    type: str
    location_name: Optional[str] = Field(default=None, max_length=100)
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)
    description: Optional[str] = Field(default=None, max_length=1000)
    capacity: Optional[int] = Field(default=None, ge=0)
    contact_info: Optional[Dict[str, Any]] = None
    availability_status: str = "available"

    def to_fields(self) -> Dict[str, Any]:
        fields = self.model_dump(exclude={"lat", "lng"})
        fields["coordinates"] = Coordinates(lat=self.lat, lng=self.lng)
        return fields


def _center(lat: Optional[float], lng: Optional[float]) -> Optional[Coordinates]:
    if lat is None and lng is None:
        return None
    if lat is None or lng is None:
        raise ValidationError("Both lat and lng are required for a geospatial query")
    return Coordinates(lat=lat, lng=lng)


def include_routes(
    app: FastAPI, container: SocorroContainer, *, prefix: str = "/api"
) -> None:
    """Registra as rotas de recursos na aplicação."""

    auth = container.authenticator
    limiters = container.rate_limiters
    service = container.resources
    router = APIRouter(
        prefix=prefix,
        tags=["Recursos"],
        dependencies=[Depends(limiters.general.dependency)],
    )

    @router.get("/disasters/{disaster_id}/resources")
    def disaster_resources(
        disaster_id: UUID,
        lat: Optional[float] = Query(None, ge=-90, le=90),
        lng: Optional[float] = Query(None, ge=-180, le=180),
        radius: float = Query(DEFAULT_RADIUS_KM, ge=1, le=100),
        type: Optional[str] = Query(None, max_length=50),
        limit: int = Query(50, ge=1, le=100),
        user: User = Depends(auth.require("read")),
    ) -> Dict[str, Any]:
        center = _center(lat, lng)
        with domain_errors():
            disaster = container.disasters.get(str(disaster_id))
        search = service.for_disaster(
            disaster, center=center, radius_km=radius, resource_type=type, limit=limit
        )
        filters = {
            "type": type,
            "radius": radius,
            "coordinates": center.to_mapping() if center else None,
        }
        return success(
            {
                "resources": [item.to_mapping() for item in search.resources],
                "disaster": {"id": disaster.id, "title": disaster.title},
                "filters": filters,
                "totalFound": len(search.resources),
                "geospatial_query": search.geospatial,
            },
            "Resources fetched successfully",
        )

    @router.post("/disasters/{disaster_id}/resources", status_code=201)
    def create_resource(
        disaster_id: UUID,
        payload: ResourcePayload,
        user: User = Depends(auth.require("create")),
    ) -> Dict[str, Any]:
        with domain_errors():
            disaster = container.disasters.get(str(disaster_id))
            resource = service.create(disaster, **payload.to_fields())
        log.info("%s cadastrou o recurso %s", user.id, resource.id)
        return success(resource.to_mapping(), "Resource created successfully")

    @router.get("/resources/nearby")
    def nearby_resources(
        lat: float = Query(..., ge=-90, le=90),
        lng: float = Query(..., ge=-180, le=180),
        radius: float = Query(DEFAULT_RADIUS_KM, ge=1, le=50),
        type: Optional[str] = Query(None, max_length=50),
        limit: int = Query(20, ge=1, le=100),
        user: User = Depends(auth.require("read")),
    ) -> Dict[str, Any]:
        center = Coordinates(lat=lat, lng=lng)
        located = service.nearby(center, radius_km=radius, resource_type=type, limit=limit)
        return success(
            {
                "resources": [item.to_mapping() for item in located],
                "center": center.to_mapping(),
                "filters": {"type": type, "radius": radius},
                "totalFound": len(located),
            },
            "Nearby resources fetched successfully",
        )

    @router.get("/resources/types")
    def resource_types(user: User = Depends(auth.require("read"))) -> Dict[str, Any]:
        types = service.types()
        return success(
            {"types": types, "totalTypes": len(types)},
            "Resource types fetched successfully",
        )

    app.include_router(router)


__all__ = ["ResourcePayload", "include_routes"]
