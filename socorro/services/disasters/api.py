"""Rotas REST de desastres."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, FastAPI, Query
from pydantic import BaseModel, Field, model_validator

from socorro.container import SocorroContainer
from socorro.domain.entities import Coordinates, User
from socorro.domain.repositories import DisasterQuery
from socorro.web import domain_errors, success

log = logging.getLogger(__name__)


class LocatedPayload(BaseModel):
    """Campos ``lat``/``lng`` opcionais, mas sempre informados em par."""

    lat: Optional[float] = Field(default=None, ge=-90, le=90)
    lng: Optional[float] = Field(default=None, ge=-180, le=180)

    @model_validator(mode="after")
    def _both_or_neither(self) -> "LocatedPayload":
        if (self.lat is None) != (self.lng is None):
            raise ValueError("lat and lng must be provided together")
        return self

    def coordinates(self) -> Optional[Coordinates]:
        if self.lat is None or self.lng is None:
            return None
        return Coordinates(lat=self.lat, lng=self.lng)


class DisasterPayload(LocatedPayload):
    """Payload de criação de desastre."""

    title: str = Field(min_length=3, max_length=200)
    description: str = Field(default="", max_length=2000)
    location_name: Optional[str] = Field(default=None, max_length=100)
    #: Etiquetas da lista aceita (``flood``, ``urgent``...).
    tags: list[str] = Field(default_factory=list)


class DisasterUpdatePayload(LocatedPayload):
    """Payload de edição; apenas os campos enviados são alterados."""

    title: Optional[str] = Field(default=None, min_length=3, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)
    location_name: Optional[str] = Field(default=None, max_length=100)
    tags: Optional[list[str]] = None

    def to_changes(self) -> Dict[str, Any]:
        changes = self.model_dump(exclude_unset=True, exclude_none=True, exclude={"lat", "lng"})
        coordinates = self.coordinates()
        if coordinates is not None:
            changes["coordinates"] = coordinates
        return changes


def include_routes(
    app: FastAPI, container: SocorroContainer, *, prefix: str = "/api"
) -> None:
    """Registra as rotas de desastres na aplicação."""

    auth = container.authenticator
    limiters = container.rate_limiters
    service = container.disasters
    router = APIRouter(
        prefix=prefix,
        tags=["Desastres"],
        dependencies=[Depends(limiters.general.dependency)],
    )

    @router.get("/disasters")
    def list_disasters(
        page: int = Query(1, ge=1),
        limit: int = Query(10, ge=1, le=100),
        tag: Optional[str] = Query(None, max_length=50),
        owner_id: Optional[str] = Query(None, max_length=100),
        search: Optional[str] = Query(None, max_length=200),
        user: User = Depends(auth.require("read")),
    ) -> Dict[str, Any]:
        query = DisasterQuery(tag=tag.lower() if tag else None, owner_id=owner_id, search=search)
        disasters, pagination = service.list(query, page=page, limit=limit)
        log.info("%s listou %d desastres (página %d)", user.id, len(disasters), page)
        return success(
            {
                "disasters": [disaster.to_mapping() for disaster in disasters],
                "pagination": pagination.to_mapping(),
            },
            "Disasters fetched successfully",
        )

    @router.get("/disasters/{disaster_id}")
    def get_disaster(
        disaster_id: UUID, user: User = Depends(auth.require("read"))
    ) -> Dict[str, Any]:
        with domain_errors():
            disaster = service.get(str(disaster_id))
        return success(disaster.to_mapping(), "Disaster fetched successfully")

    @router.post(
        "/disasters",
        status_code=201,
        dependencies=[Depends(limiters.create_disaster.dependency)],
    )
    def create_disaster(
        payload: DisasterPayload, user: User = Depends(auth.require("create"))
    ) -> Dict[str, Any]:
        with domain_errors():
            disaster = service.create(
                user,
                title=payload.title,
                description=payload.description,
                location_name=payload.location_name,
                tags=payload.tags,
                coordinates=payload.coordinates(),
            )
        return success(disaster.to_mapping(), "Disaster created successfully")

    @router.put("/disasters/{disaster_id}")
    def update_disaster(
        disaster_id: UUID,
        payload: DisasterUpdatePayload,
        user: User = Depends(auth.require("update")),
    ) -> Dict[str, Any]:
        with domain_errors():
            disaster = service.update(str(disaster_id), user, payload.to_changes())
        return success(disaster.to_mapping(), "Disaster updated successfully")

    @router.delete("/disasters/{disaster_id}")
    def delete_disaster(
        disaster_id: UUID, user: User = Depends(auth.require("delete"))
    ) -> Dict[str, Any]:
        with domain_errors():
            service.delete(str(disaster_id), user)
        return success(None, "Disaster deleted successfully")

    app.include_router(router)


__all__ = ["DisasterPayload", "DisasterUpdatePayload", "include_routes"]
