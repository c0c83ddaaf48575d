"""Cliente do Google Gemini e modelo simulado equivalente."""
from __future__ import annotations

import base64
import json
import logging
import random
import re
import time
from typing import Any, Callable, Dict, Optional

import httpx

from socorro.domain.entities import ImageAnalysis, LocationExtraction
from socorro.domain.ports import LanguageModel
from socorro.extraction import extract_place_names
from socorro.infrastructure.retry import retry_with_backoff
from socorro.logging_config import log_external_call

log = logging.getLogger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

LOCATION_PROMPT = """Extract location names from the following disaster description. Return only the location names as a JSON array, without any additional text or explanation. If no locations are found, return an empty array.

Description: "{description}"

Example response format: ["Manhattan, NYC", "Brooklyn Bridge", "Central Park"]"""

IMAGE_PROMPT = """Analyze this image for signs of disaster or emergency situation. Determine if the image appears to be authentic and related to a real disaster/emergency. Look for signs of manipulation, inconsistencies, or if it appears to be from a movie/game/simulation.
{context}
Return your analysis as JSON with the following structure:
{{
  "isAuthentic": boolean,
  "confidence": number (0-100),
  "disasterType": string or null,
  "reasoning": string,
  "manipulationSigns": array of strings
}}"""

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)
_BULLET_RE = re.compile(r"^(?:[-*•]\s*|\d+\.\s*)")


class GeminiResponseError(RuntimeError):
    """A API respondeu sem candidatos utilizáveis."""


def _strip_fences(text: str) -> str:
    return _FENCE_RE.sub("", text.strip()).strip()


def parse_location_text(text: str) -> list[str]:
    """Interpreta respostas fora do formato JSON como uma lista por linha."""

    locations: list[str] = []
    for line in text.splitlines():
        cleaned = _BULLET_RE.sub("", line.strip()).strip().strip('"')
        if 2 < len(cleaned) < 100:
            locations.append(cleaned)
    return locations[:10]


def parse_location_response(text: str) -> list[str]:
    try:
        parsed = json.loads(_strip_fences(text))
    except ValueError:
        return parse_location_text(text)
    if isinstance(parsed, list):
        return [str(item).strip() for item in parsed if str(item).strip()]
    return parse_location_text(text)


def parse_image_response(text: str) -> ImageAnalysis:
    """Converte a resposta do modelo em :class:`ImageAnalysis`.

    Quando o texto não é JSON, considera autêntica a imagem cuja análise
    não mencione "fake" nem "manipulated", com confiança fixa de 70.
    """

    try:
        parsed = json.loads(_strip_fences(text))
    except ValueError:
        parsed = None
    if isinstance(parsed, dict):
        data = dict(parsed)
        data["source"] = "gemini"
        return ImageAnalysis.from_mapping(data)
    lowered = text.lower()
    return ImageAnalysis(
        is_authentic="fake" not in lowered and "manipulated" not in lowered,
        confidence=70,
        disaster_type=None,
        reasoning=text.strip(),
        manipulation_signs=(),
        source="gemini",
    )


class GeminiClient(LanguageModel):
    """Acessa a API ``generateContent`` do Gemini via ``httpx``."""

    name = "gemini"

    def __init__(
        self,
        api_key: str,
        *,
        text_model: str = "gemini-pro",
        vision_model: str = "gemini-pro-vision",
        base_url: str = GEMINI_BASE_URL,
        client: httpx.Client | None = None,
        text_timeout: float = 10.0,
        vision_timeout: float = 15.0,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._api_key = api_key
        self._text_model = text_model
        self._vision_model = vision_model
        self._base_url = base_url.rstrip("/")
        self._client: httpx.Client = client or httpx.Client()
        self._owns_client: bool = client is None
        self._text_timeout = text_timeout
        self._vision_timeout = vision_timeout
        self._max_attempts = max_attempts
        self._base_delay = base_delay
        self._sleep = sleep

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def extract_locations(self, text: str) -> LocationExtraction:
        started = time.perf_counter()
        try:
            body = {
                "contents": [{"parts": [{"text": LOCATION_PROMPT.format(description=text)}]}],
                "generationConfig": _generation_config(256),
            }
            answer = self._generate(self._text_model, body, self._text_timeout)
            locations = parse_location_response(answer)
        except Exception as exc:
            log_external_call("Gemini", "extractLocation", False, _elapsed(started), error=str(exc))
            raise
        log_external_call(
            "Gemini", "extractLocation", True, _elapsed(started), locations_found=len(locations)
        )
        return LocationExtraction(locations=tuple(locations), source=self.name)

    def verify_image(self, image_url: str, context: Optional[str] = None) -> ImageAnalysis:
        started = time.perf_counter()
        try:
            mime_type, data = self._download_image(image_url)
            prompt = IMAGE_PROMPT.format(
                context=f"\nContext provided by the reporter: {context}\n" if context else ""
            )
            body = {
                "contents": [
                    {
                        "parts": [
                            {"text": prompt},
                            {"inline_data": {"mime_type": mime_type, "data": data}},
                        ]
                    }
                ],
                "generationConfig": _generation_config(512),
            }
            answer = self._generate(self._vision_model, body, self._vision_timeout)
            analysis = parse_image_response(answer)
        except Exception as exc:
            log_external_call("Gemini", "verifyImage", False, _elapsed(started), error=str(exc))
            raise
        log_external_call(
            "Gemini",
            "verifyImage",
            True,
            _elapsed(started),
            is_authentic=analysis.is_authentic,
            confidence=analysis.confidence,
        )
        return analysis

    def _generate(self, model: str, body: Dict[str, Any], timeout: float) -> str:
        url = f"{self._base_url}/models/{model}:generateContent"

        def call() -> Dict[str, Any]:
            response = self._client.post(
                url, params={"key": self._api_key}, json=body, timeout=timeout
            )
            response.raise_for_status()
            return response.json()

        payload = retry_with_backoff(
            call, self._max_attempts, self._base_delay, sleep=self._sleep
        )
        try:
            return str(payload["candidates"][0]["content"]["parts"][0]["text"]).strip()
        except (KeyError, IndexError, TypeError) as exc:
            raise GeminiResponseError("No valid response from API") from exc

    def _download_image(self, image_url: str) -> tuple[str, str]:
        def call() -> httpx.Response:
            response = self._client.get(
                image_url, timeout=self._vision_timeout, follow_redirects=True
            )
            response.raise_for_status()
            return response

        response = retry_with_backoff(
            call, self._max_attempts, self._base_delay, sleep=self._sleep
        )
        mime_type = response.headers.get("content-type", "image/jpeg").split(";")[0]
        return mime_type, base64.b64encode(response.content).decode("ascii")


_MOCK_DISASTER_TYPES = ("flood", "fire", "earthquake", "storm", "accident")
_SUSPICIOUS_URL_MARKERS = ("fake", "test", "mock")


class MockLanguageModel(LanguageModel):
    """Simula o Gemini com expressões regulares e regras sobre a URL."""

    name = "mock"

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def extract_locations(self, text: str) -> LocationExtraction:
        locations = extract_place_names(text)
        log_external_call("Gemini", "extractLocation", True, 0, locations_found=len(locations), source="mock")
        return LocationExtraction(locations=tuple(locations), source=self.name)

    def verify_image(self, image_url: str, context: Optional[str] = None) -> ImageAnalysis:
        lowered = image_url.lower()
        is_authentic = not any(marker in lowered for marker in _SUSPICIOUS_URL_MARKERS)
        confidence = self._rng.randint(70, 99)
        disaster_type = self._rng.choice(_MOCK_DISASTER_TYPES)
        if is_authentic:
            reasoning = (
                f"Image appears to show genuine {disaster_type} damage and conditions "
                "consistent with disaster scenarios."
            )
            signs: tuple[str, ...] = ()
        else:
            reasoning = "Image shows signs of potential manipulation or inconsistencies."
            signs = ("Inconsistent lighting", "Unusual artifacts")
        log_external_call("Gemini", "verifyImage", True, 0, is_authentic=is_authentic, source="mock")
        return ImageAnalysis(
            is_authentic=is_authentic,
            confidence=confidence,
            disaster_type=disaster_type if is_authentic else None,
            reasoning=reasoning,
            manipulation_signs=signs,
            source=self.name,
        )


def _generation_config(max_tokens: int) -> Dict[str, Any]:
    return {"temperature": 0.1, "topK": 1, "topP": 1, "maxOutputTokens": max_tokens}


def _elapsed(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


__all__ = [
    "GEMINI_BASE_URL",
    "GeminiClient",
    "GeminiResponseError",
    "MockLanguageModel",
    "parse_image_response",
    "parse_location_response",
    "parse_location_text",
]
