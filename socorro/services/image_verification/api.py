"""Rotas REST de verificação de imagens."""
from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, FastAPI
from pydantic import BaseModel, Field

from socorro.container import SocorroContainer
from socorro.domain.entities import User
from socorro.web import domain_errors, success

from .service import MAX_BATCH_IMAGES, BatchImage

log = logging.getLogger(__name__)

_IMAGE_URL_PATTERN = r"^https?://\S+$"


class VerifyImagePayload(BaseModel):
    image_url: str = Field(pattern=_IMAGE_URL_PATTERN, max_length=2048)
    report_id: Optional[UUID] = None
    description: Optional[str] = Field(default=None, max_length=500)


class BatchImagePayload(BaseModel):
    image_url: str = Field(pattern=_IMAGE_URL_PATTERN, max_length=2048)
    disaster_id: UUID
    report_id: Optional[UUID] = None

    def to_domain(self) -> BatchImage:
        return BatchImage(
            image_url=self.image_url,
            disaster_id=str(self.disaster_id),
            report_id=str(self.report_id) if self.report_id else None,
        )


class BatchVerifyPayload(BaseModel):
    images: list[BatchImagePayload] = Field(min_length=1, max_length=MAX_BATCH_IMAGES)


def include_routes(
    app: FastAPI, container: SocorroContainer, *, prefix: str = "/api"
) -> None:
    """Registra as rotas de verificação de imagens na aplicação."""

    auth = container.authenticator
    limiters = container.rate_limiters
    service = container.image_verification
    router = APIRouter(
        prefix=prefix,
        tags=["Verificação de imagens"],
        dependencies=[Depends(limiters.general.dependency)],
    )

    @router.post(
        "/disasters/{disaster_id}/verify-image",
        dependencies=[Depends(limiters.image_verification.dependency)],
    )
    def verify_image(
        disaster_id: UUID,
        payload: VerifyImagePayload,
        user: User = Depends(auth.require("verify_images")),
    ) -> Dict[str, Any]:
        with domain_errors():
            disaster = container.disasters.get(str(disaster_id))
        outcome = service.verify(
            disaster.id,
            payload.image_url,
            verified_by=user.id,
            report_id=str(payload.report_id) if payload.report_id else None,
            description=payload.description,
        )
        verification = outcome.verification
        analysis = verification.analysis
        return success(
            {
                "verification": {
                    "status": verification.status,
                    "confidence": analysis.confidence,
                    "is_authentic": analysis.is_authentic,
                    "disaster_type": analysis.disaster_type,
                    "reasoning": analysis.reasoning,
                    "manipulation_signs": list(analysis.manipulation_signs),
                    "verified_by": verification.verified_by,
                    "verified_at": verification.verified_at.isoformat(),
                },
                "image_url": verification.image_url,
                "disaster": {"id": disaster.id, "title": disaster.title},
                "report_id": verification.report_id,
                "processing": {
                    "response_time_ms": outcome.response_time_ms,
                    "ai_source": analysis.source,
                },
            },
            outcome.message,
        )

    @router.post(
        "/verify-image/batch",
        dependencies=[Depends(limiters.image_verification.dependency)],
    )
    def verify_batch(
        payload: BatchVerifyPayload,
        user: User = Depends(auth.require("verify_images")),
    ) -> Dict[str, Any]:
        started = time.perf_counter()
        with domain_errors():
            results = service.verify_batch(image.to_domain() for image in payload.images)
        succeeded = sum(1 for result in results if result["success"])
        elapsed = int((time.perf_counter() - started) * 1000)
        log.info("lote de verificação de %s: %d/%d imagens", user.id, succeeded, len(results))
        return success(
            {
                "results": results,
                "summary": {
                    "total_images": len(results),
                    "successful_verifications": succeeded,
                    "failed_verifications": len(results) - succeeded,
                    "response_time_ms": elapsed,
                },
            },
            f"Batch verification completed: {succeeded}/{len(results)} successful",
        )

    @router.get("/verify-image/stats")
    def verification_stats(user: User = Depends(auth.require("read"))) -> Dict[str, Any]:
        return success(service.stats(), "Image verification statistics fetched successfully")

    app.include_router(router)


__all__ = ["BatchVerifyPayload", "VerifyImagePayload", "include_routes"]
