"""Pipeline de geocodificação com cache e provedores por prioridade."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Sequence

from socorro.domain.entities import (
    GeocodeResult,
    LocationExtraction,
    ReverseGeocodeResult,
    is_valid_coordinates,
)
from socorro.domain.ports import CacheStore, Geocoder
from socorro.infrastructure.cache import cache_key
from socorro.services.ai import AIService
from socorro.services.pipeline import first_success, through_cache

from .providers import MockGeocoder

log = logging.getLogger(__name__)

GEOCODE_TTL_SECONDS = 24 * 60 * 60
MAX_LOCATIONS_PER_REQUEST = 5


@dataclass(frozen=True)
class GeocodeOutcome:
    """Resultado individual de um lote: sucesso com ``result`` ou ``error``."""

    location_name: str
    result: Optional[GeocodeResult] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.result is not None

    def to_mapping(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"location_name": self.location_name, "success": self.success}
        if self.result is not None:
            payload.update(self.result.to_mapping())
        else:
            payload["error"] = self.error
        return payload


@dataclass
class TextGeocoding:
    """Resumo do fluxo texto → lugares → coordenadas."""

    extraction: Optional[LocationExtraction]
    outcomes: list[GeocodeOutcome] = field(default_factory=list)
    steps: list[Dict[str, Any]] = field(default_factory=list)
    total_locations: int = 0

    @property
    def successful(self) -> list[GeocodeOutcome]:
        return [outcome for outcome in self.outcomes if outcome.success]


class GeocodingService:
    """Tenta os provedores configurados na ordem recebida (google → mapbox → nominatim).

    O primeiro resultado válido vence. Sem provedores configurados o
    geocodificador simulado é a fonte oficial e seu resultado é armazenado
    em cache; quando todos os provedores falham o resultado simulado é
    marcado como ``degraded`` e não é armazenado.
    """

    def __init__(
        self,
        cache: CacheStore,
        providers: Sequence[Geocoder] = (),
        *,
        fallback: Optional[Geocoder] = None,
        ai_service: Optional[AIService] = None,
    ) -> None:
        self._cache = cache
        self._providers = tuple(providers)
        self._fallback = fallback or MockGeocoder()
        self._ai_service = ai_service

    @property
    def source(self) -> str:
        return self._providers[0].name if self._providers else self._fallback.name

    @property
    def provider_names(self) -> list[str]:
        return [provider.name for provider in self._providers] or [self._fallback.name]

    def geocode(self, location_name: str) -> GeocodeResult:
        name = (location_name or "").strip()
        if not name:
            raise ValueError("location name is required")

        def produce() -> GeocodeResult:
            if not self._providers:
                return self._fallback.geocode(name)
            result = first_success(
                self._providers, lambda provider: provider.geocode(name), action="geocode"
            )
            if result is None:
                log.warning("todos os provedores falharam para %r; usando simulação", name)
                return self._fallback.geocode(name).as_degraded()
            return result

        return through_cache(
            self._cache,
            cache_key("geocode", name.lower()),
            GEOCODE_TTL_SECONDS,
            produce,
            encode=GeocodeResult.to_mapping,
            decode=GeocodeResult.from_mapping,
            cacheable=lambda result: not result.degraded,
        )

    def reverse(self, lat: float, lng: float) -> ReverseGeocodeResult:
        """Geocodificação reversa; coordenadas inválidas levantam ``ValueError``."""

        if not is_valid_coordinates(lat, lng):
            raise ValueError("Invalid coordinates provided")
        lat, lng = float(lat), float(lng)

        def produce() -> ReverseGeocodeResult:
            if not self._providers:
                return self._fallback.reverse(lat, lng)
            result = first_success(
                self._providers, lambda provider: provider.reverse(lat, lng), action="reverse"
            )
            if result is None:
                return self._fallback.reverse(lat, lng).as_degraded()
            return result

        return through_cache(
            self._cache,
            cache_key("reverse_geocode", round(lat, 6), round(lng, 6)),
            GEOCODE_TTL_SECONDS,
            produce,
            encode=ReverseGeocodeResult.to_mapping,
            decode=ReverseGeocodeResult.from_mapping,
            cacheable=lambda result: not result.degraded,
        )

    def geocode_many(self, location_names: Iterable[str]) -> list[GeocodeOutcome]:
        outcomes: list[GeocodeOutcome] = []
        for name in location_names:
            try:
                outcomes.append(GeocodeOutcome(location_name=name, result=self.geocode(name)))
            except ValueError as exc:
                outcomes.append(GeocodeOutcome(location_name=name, error=str(exc)))
        return outcomes

    def geocode_text(
        self,
        description: Optional[str] = None,
        location_name: Optional[str] = None,
    ) -> TextGeocoding:
        """Extrai lugares de ``description`` e geocodifica até cinco deles."""

        if not description and not location_name:
            raise ValueError("Either description or location_name is required")

        started = time.perf_counter()
        candidates: list[str] = []
        report = TextGeocoding(extraction=None)

        if description:
            if self._ai_service is None:
                raise RuntimeError("AI service not configured for location extraction")
            extraction = self._ai_service.extract_locations(description)
            report.extraction = extraction
            candidates.extend(extraction.locations)
            found = len(extraction.locations)
            report.steps.append(
                {
                    "step": "location_extraction",
                    "success": found > 0,
                    "source": extraction.source,
                    "locations_found": list(extraction.locations),
                    "message": (
                        f"Found {found} location(s) in description"
                        if found
                        else "No locations found in description"
                    ),
                }
            )

        if location_name:
            candidates.append(location_name)
            report.steps.append(
                {
                    "step": "direct_location",
                    "success": True,
                    "location": location_name,
                    "message": "Using provided location name",
                }
            )

        report.total_locations = len(candidates)
        for outcome in self.geocode_many(candidates[:MAX_LOCATIONS_PER_REQUEST]):
            report.outcomes.append(outcome)
            if outcome.result is not None:
                report.steps.append(
                    {
                        "step": "geocoding",
                        "success": True,
                        "location": outcome.location_name,
                        "coordinates": outcome.result.coordinates.to_mapping(),
                        "formatted_address": outcome.result.formatted_address,
                        "source": outcome.result.source,
                        "message": f"Successfully geocoded {outcome.location_name}",
                    }
                )
            else:
                report.steps.append(
                    {
                        "step": "geocoding",
                        "success": False,
                        "location": outcome.location_name,
                        "error": outcome.error,
                        "message": f"Failed to geocode {outcome.location_name}",
                    }
                )
        log.info(
            "geocodificação de texto: %d lugares, %d resolvidos em %dms",
            report.total_locations,
            len(report.successful),
            int((time.perf_counter() - started) * 1000),
        )
        return report


__all__ = [
    "GEOCODE_TTL_SECONDS",
    "GeocodeOutcome",
    "GeocodingService",
    "MAX_LOCATIONS_PER_REQUEST",
    "TextGeocoding",
]
