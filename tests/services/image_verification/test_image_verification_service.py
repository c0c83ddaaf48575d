from __future__ import annotations

import random
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

import pytest

from socorro.domain.entities import ImageAnalysis, LocationExtraction, Report
from socorro.domain.ports import LanguageModel, Notifier
from socorro.infrastructure.cache import InMemoryCacheStore
from socorro.infrastructure.repositories import (
    InMemoryImageVerificationRepository,
    InMemoryReportRepository,
)
from socorro.services.ai import AIService, MockLanguageModel
from socorro.services.image_verification import BatchImage, ImageVerificationService

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


class _UrlJudge(LanguageModel):
    """Marca como manipulada qualquer URL contendo "edited"."""

    name = "gemini"

    def extract_locations(self, text: str) -> LocationExtraction:
        return LocationExtraction(locations=(), source=self.name)

    def verify_image(self, image_url: str, context: Optional[str] = None) -> ImageAnalysis:
        if "edited" in image_url:
            return ImageAnalysis(is_authentic=False, confidence=88, source=self.name)
        if "blurry" in image_url:
            return ImageAnalysis(is_authentic=True, confidence=60, source=self.name)
        return ImageAnalysis(
            is_authentic=True, confidence=92, disaster_type="flood", source=self.name
        )


class _RecordingNotifier(Notifier):
    def __init__(self) -> None:
        self.events: list[tuple[str, Mapping[str, Any], Optional[str]]] = []

    def publish(
        self, event: str, payload: Mapping[str, Any], topic: Optional[str] = None
    ) -> None:
        self.events.append((event, payload, topic))


def _service(
    model: Optional[LanguageModel] = None,
) -> tuple[ImageVerificationService, InMemoryReportRepository, _RecordingNotifier]:
    reports = InMemoryReportRepository()
    notifier = _RecordingNotifier()
    ai = AIService(
        InMemoryCacheStore(clock=lambda: NOW),
        model or _UrlJudge(),
        fallback=MockLanguageModel(rng=random.Random(5)),
    )
    service = ImageVerificationService(
        ai, InMemoryImageVerificationRepository(), reports, notifier, clock=lambda: NOW
    )
    return service, reports, notifier


def test_verified_image_updates_linked_report_and_broadcasts() -> None:
    service, reports, notifier = _service()
    reports.add(Report(id="r1", disaster_id="d1", user_id="citizen1", content="Water rising"))

    outcome = service.verify(
        "d1", "https://images.example.com/flood.jpg", verified_by="netrunnerX", report_id="r1"
    )

    assert outcome.verification.status == "verified"
    assert outcome.message == "Image verified as authentic"
    assert outcome.verification.verified_at == NOW
    assert reports.get("r1").verification_status == "verified"
    event, payload, topic = notifier.events[0]
    assert (event, topic) == ("image_verified", "d1")
    assert payload["verificationStatus"] == "verified"
    assert payload["verifiedBy"] == "netrunnerX"


@pytest.mark.parametrize(
    "url,status",
    [
        ("https://images.example.com/edited.jpg", "rejected"),
        ("https://images.example.com/blurry.jpg", "pending"),
    ],
)
def test_status_follows_authenticity_and_confidence(url: str, status: str) -> None:
    service, _, _ = _service()

    outcome = service.verify("d1", url, verified_by="netrunnerX")

    assert outcome.verification.status == status


def test_report_from_another_disaster_is_left_untouched() -> None:
    service, reports, _ = _service()
    reports.add(Report(id="r2", disaster_id="other", user_id="citizen1", content="Smoke"))

    service.verify(
        "d1", "https://images.example.com/edited.jpg", verified_by="netrunnerX", report_id="r2"
    )

    assert reports.get("r2").verification_status == "pending"


@pytest.mark.parametrize("count", [0, 6])
def test_batch_size_must_be_between_one_and_five(count: int) -> None:
    service, _, _ = _service()
    images = [
        BatchImage(image_url=f"https://images.example.com/{index}.jpg", disaster_id="d1")
        for index in range(count)
    ]

    with pytest.raises(ValueError, match="1-5"):
        service.verify_batch(images)


def test_batch_reports_each_image_without_persisting() -> None:
    service, _, notifier = _service()

    results = service.verify_batch(
        [
            BatchImage(image_url="https://images.example.com/flood.jpg", disaster_id="d1"),
            BatchImage(image_url="https://images.example.com/edited.jpg", disaster_id="d1"),
        ]
    )

    assert [result["success"] for result in results] == [True, True]
    assert [result["verification"]["status"] for result in results] == ["verified", "rejected"]
    assert service.stats()["total_verifications"] == 0
    assert notifier.events == []


def test_stats_count_statuses_and_percentages() -> None:
    service, _, _ = _service()
    service.verify("d1", "https://images.example.com/flood.jpg", verified_by="netrunnerX")
    service.verify("d1", "https://images.example.com/edited.jpg", verified_by="netrunnerX")

    stats = service.stats()

    assert stats["statistics"] == {"verified": 1, "rejected": 1, "pending": 0}
    assert stats["total_verifications"] == 2
    assert stats["verification_rate"]["verified_percentage"] == 50
    assert stats["last_updated"] == NOW.isoformat()


def test_stats_without_verifications_have_no_rate() -> None:
    service, _, _ = _service()

    assert service.stats()["verification_rate"] is None
