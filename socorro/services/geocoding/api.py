"""Rotas REST de geocodificação."""
from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, FastAPI, Query
from pydantic import BaseModel, Field, model_validator

from socorro.container import SocorroContainer
from socorro.domain.entities import User
from socorro.web import domain_errors, success

log = logging.getLogger(__name__)


class GeocodePayload(BaseModel):
    """Texto livre e/ou nome de lugar a geocodificar."""

    description: Optional[str] = Field(default=None, min_length=1, max_length=2000)
    location_name: Optional[str] = Field(default=None, min_length=1, max_length=100)

    @model_validator(mode="after")
    def _requires_input(self) -> "GeocodePayload":
        if not self.description and not self.location_name:
            raise ValueError("Either description or location_name is required")
        return self


class BatchGeocodePayload(BaseModel):
    locations: list[str] = Field(min_length=1, max_length=10)

    @model_validator(mode="after")
    def _location_bounds(self) -> "BatchGeocodePayload":
        for location in self.locations:
            if not 1 <= len(location.strip()) <= 100:
                raise ValueError("Each location must be 1-100 characters")
        return self


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


def include_routes(
    app: FastAPI, container: SocorroContainer, *, prefix: str = "/api"
) -> None:
    """Registra as rotas de geocodificação na aplicação."""

    auth = container.authenticator
    limiters = container.rate_limiters
    service = container.geocoding
    router = APIRouter(
        prefix=prefix,
        tags=["Geocodificação"],
        dependencies=[
            Depends(limiters.general.dependency),
            Depends(limiters.geocoding.dependency),
        ],
    )

    @router.post("/geocode")
    def geocode(
        payload: GeocodePayload, user: User = Depends(auth.require("read"))
    ) -> Dict[str, Any]:
        started = time.perf_counter()
        with domain_errors():
            report = service.geocode_text(payload.description, payload.location_name)
        successful = report.successful
        elapsed = _elapsed_ms(started)
        log.info(
            "geocodificação de %s: %d/%d lugares em %dms",
            user.id,
            len(successful),
            len(report.outcomes),
            elapsed,
        )
        locations = [outcome.to_mapping() for outcome in report.outcomes]
        message = (
            f"Successfully processed {len(successful)} location(s)"
            if successful
            else "No locations could be geocoded"
        )
        return success(
            {
                "locations": locations,
                "summary": {
                    "total_locations_found": report.total_locations,
                    "successful_geocodings": len(successful),
                    "failed_geocodings": len(report.outcomes) - len(successful),
                    "response_time_ms": elapsed,
                },
                "processing_steps": report.steps,
                "primary_location": successful[0].to_mapping() if successful else None,
            },
            message,
        )

    @router.get("/geocode/reverse")
    def reverse_geocode(
        lat: float = Query(...),
        lng: float = Query(...),
        user: User = Depends(auth.require("read")),
    ) -> Dict[str, Any]:
        started = time.perf_counter()
        with domain_errors():
            result = service.reverse(lat, lng)
        elapsed = _elapsed_ms(started)
        log.info("geocodificação reversa de %s (%s, %s) via %s", user.id, lat, lng, result.source)
        return success(
            {
                "coordinates": {"lat": lat, "lng": lng},
                **result.to_mapping(),
                "response_time_ms": elapsed,
            },
            "Reverse geocoding completed successfully",
        )

    @router.post("/geocode/batch")
    def batch_geocode(
        payload: BatchGeocodePayload, user: User = Depends(auth.require("read"))
    ) -> Dict[str, Any]:
        started = time.perf_counter()
        outcomes = service.geocode_many(location.strip() for location in payload.locations)
        succeeded = sum(1 for outcome in outcomes if outcome.success)
        elapsed = _elapsed_ms(started)
        log.info("lote de geocodificação de %s: %d/%d", user.id, succeeded, len(outcomes))
        return success(
            {
                "results": [outcome.to_mapping() for outcome in outcomes],
                "summary": {
                    "total_locations": len(outcomes),
                    "successful": succeeded,
                    "failed": len(outcomes) - succeeded,
                    "response_time_ms": elapsed,
                },
            },
            f"Batch geocoding completed: {succeeded}/{len(outcomes)} successful",
        )

    app.include_router(router)


__all__ = ["BatchGeocodePayload", "GeocodePayload", "include_routes"]
