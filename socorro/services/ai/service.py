"""Pipeline de IA: extração de lugares e verificação de imagens com cache."""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from socorro.domain.entities import ImageAnalysis, LocationExtraction
from socorro.domain.ports import CacheStore, LanguageModel
from socorro.infrastructure.cache import cache_key
from socorro.services.pipeline import through_cache

from .gemini import MockLanguageModel

log = logging.getLogger(__name__)

LOCATION_TTL_SECONDS = 60 * 60
IMAGE_TTL_SECONDS = 60 * 60


class AIService:
    """Encapsula o modelo configurado com cache e contingência simulada."""

    def __init__(
        self,
        cache: CacheStore,
        model: Optional[LanguageModel] = None,
        *,
        fallback: Optional[LanguageModel] = None,
    ) -> None:
        self._cache = cache
        self._fallback = fallback or MockLanguageModel()
        self._model = model or self._fallback

    @property
    def source(self) -> str:
        return self._model.name

    def extract_locations(self, text: str) -> LocationExtraction:
        def produce() -> LocationExtraction:
            if self._model is self._fallback:
                return self._fallback.extract_locations(text)
            try:
                return self._model.extract_locations(text)
            except Exception as exc:
                log.warning("extração de lugares degradada para o modelo simulado: %s", exc)
                return replace(self._fallback.extract_locations(text), degraded=True)

        return through_cache(
            self._cache,
            cache_key("gemini_location", text),
            LOCATION_TTL_SECONDS,
            produce,
            encode=LocationExtraction.to_mapping,
            decode=LocationExtraction.from_mapping,
            cacheable=lambda result: not result.degraded,
        )

    def verify_image(self, image_url: str, context: Optional[str] = None) -> ImageAnalysis:
        def produce() -> ImageAnalysis:
            if self._model is self._fallback:
                return self._fallback.verify_image(image_url, context)
            try:
                return self._model.verify_image(image_url, context)
            except Exception as exc:
                log.warning("verificação de imagem degradada para o modelo simulado: %s", exc)
                return replace(self._fallback.verify_image(image_url, context), degraded=True)

        return through_cache(
            self._cache,
            cache_key("gemini_verify", image_url, context or ""),
            IMAGE_TTL_SECONDS,
            produce,
            encode=ImageAnalysis.to_mapping,
            decode=ImageAnalysis.from_mapping,
            cacheable=lambda result: not result.degraded,
        )


__all__ = ["AIService", "IMAGE_TTL_SECONDS", "LOCATION_TTL_SECONDS"]
