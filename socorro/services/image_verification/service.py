"""Verificação de autenticidade de imagens enviadas para um desastre."""
from __future__ import annotations

import logging
import time
from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, Optional

from socorro.domain.entities import ImageVerification, utcnow
from socorro.domain.ports import Notifier
from socorro.domain.repositories import ImageVerificationRepository, ReportRepository
from socorro.services.ai import AIService

log = logging.getLogger(__name__)

MAX_BATCH_IMAGES = 5

STATUS_MESSAGES = {
    "verified": "Image verified as authentic",
    "rejected": "Image verification failed - potential issues detected",
    "pending": "Image verification pending - requires manual review",
}


@dataclass(frozen=True)
class BatchImage:
    image_url: str
    disaster_id: str
    report_id: Optional[str] = None


@dataclass(frozen=True)
class VerificationOutcome:
    verification: ImageVerification
    response_time_ms: int

    @property
    def message(self) -> str:
        return STATUS_MESSAGES[self.verification.status]


class ImageVerificationService:
    """Consulta o modelo, registra o parecer e atualiza o relato vinculado."""

    def __init__(
        self,
        ai_service: AIService,
        verifications: ImageVerificationRepository,
        reports: ReportRepository,
        notifier: Notifier,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._ai = ai_service
        self._verifications = verifications
        self._reports = reports
        self._notifier = notifier
        self._clock = clock

    def verify(
        self,
        disaster_id: str,
        image_url: str,
        *,
        verified_by: str,
        report_id: Optional[str] = None,
        description: Optional[str] = None,
    ) -> VerificationOutcome:
        started = time.perf_counter()
        analysis = self._ai.verify_image(image_url, description)
        elapsed = int((time.perf_counter() - started) * 1000)
        verification = ImageVerification(
            disaster_id=disaster_id,
            image_url=image_url,
            analysis=analysis,
            report_id=report_id,
            verified_by=verified_by,
            verified_at=self._clock(),
        )
        self._verifications.upsert(verification)

        if report_id:
            report = self._reports.get(report_id)
            if report is not None and report.disaster_id == disaster_id:
                self._reports.update_status(report_id, verification.status)
            else:
                log.warning("relato %s não pertence ao desastre %s", report_id, disaster_id)

        log.info(
            "imagem %s verificada: %s (confiança %d, fonte %s)",
            image_url,
            verification.status,
            analysis.confidence,
            analysis.source,
        )
        self._notifier.publish(
            "image_verified",
            {
                "disasterId": disaster_id,
                "imageUrl": image_url,
                "verificationStatus": verification.status,
                "confidence": analysis.confidence,
                "verifiedBy": verified_by,
            },
            topic=disaster_id,
        )
        return VerificationOutcome(verification=verification, response_time_ms=elapsed)

    def verify_batch(self, images: Iterable[BatchImage]) -> list[Dict[str, Any]]:
        """Verifica até cinco imagens; falhas individuais não interrompem o lote."""

        images = list(images)
        if not 1 <= len(images) <= MAX_BATCH_IMAGES:
            raise ValueError("Images must be an array of 1-5 items")
        results: list[Dict[str, Any]] = []
        for image in images:
            entry: Dict[str, Any] = {
                "image_url": image.image_url,
                "disaster_id": image.disaster_id,
                "report_id": image.report_id,
            }
            try:
                analysis = self._ai.verify_image(image.image_url)
            except Exception as exc:
                log.warning("falha ao verificar %s: %s", image.image_url, exc)
                entry.update(success=False, error=str(exc))
            else:
                entry.update(
                    success=True,
                    verification={"status": analysis.status, **analysis.to_mapping()},
                )
            results.append(entry)
        return results

    def stats(self) -> Dict[str, Any]:
        counts = Counter(item.status for item in self._verifications.list())
        statistics = {status: counts.get(status, 0) for status in STATUS_MESSAGES}
        total = sum(statistics.values())
        rate = None
        if total:
            rate = {
                f"{status}_percentage": round(count / total * 100)
                for status, count in statistics.items()
            }
        return {
            "statistics": statistics,
            "total_verifications": total,
            "verification_rate": rate,
            "last_updated": self._clock().isoformat(),
        }


__all__ = [
    "BatchImage",
    "ImageVerificationService",
    "MAX_BATCH_IMAGES",
    "STATUS_MESSAGES",
    "VerificationOutcome",
]
