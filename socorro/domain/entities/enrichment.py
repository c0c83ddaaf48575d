"""Registros normalizados produzidos pelas fontes externas de enriquecimento.

Todos os registros são serializáveis em JSON via ``to_mapping`` para que
possam ser armazenados no cache e reconstruídos com ``from_mapping``.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Tuple

from .coordinates import Coordinates
from .disaster import _parse_datetime, utcnow

SENTIMENTS = ("negative", "positive", "neutral")
CATEGORIES = (
    "medical",
    "shelter",
    "food_water",
    "rescue",
    "information",
    "volunteer",
    "infrastructure",
    "general",
)


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


@dataclass(frozen=True)
class AddressComponents:
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    zip_code: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "AddressComponents":
        data = data or {}
        return cls(
            city=data.get("city"),
            state=data.get("state"),
            country=data.get("country"),
            zip_code=data.get("zipCode") or data.get("zip_code"),
        )

    def to_mapping(self) -> Dict[str, Any]:
        return {
            "city": self.city,
            "state": self.state,
            "country": self.country,
            "zip_code": self.zip_code,
        }


@dataclass(frozen=True)
class GeocodeResult:
    """Resultado de geocodificação direta (nome → coordenadas)."""

    lat: float
    lng: float
    formatted_address: str
    components: AddressComponents = field(default_factory=AddressComponents)
    accuracy: str = "approximate"
    source: str = "mock"
    degraded: bool = False

    @property
    def coordinates(self) -> Coordinates:
        return Coordinates(lat=self.lat, lng=self.lng)

    def as_degraded(self) -> "GeocodeResult":
        return replace(self, degraded=True)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "GeocodeResult":
        return cls(
            lat=float(data["lat"]),
            lng=float(data["lng"]),
            formatted_address=str(data.get("formatted_address", "")),
            components=AddressComponents.from_mapping(data.get("components")),
            accuracy=str(data.get("accuracy", "approximate")),
            source=str(data.get("source", "mock")),
            degraded=bool(data.get("degraded", False)),
        )

    def to_mapping(self) -> Dict[str, Any]:
        return {
            "lat": self.lat,
            "lng": self.lng,
            "formatted_address": self.formatted_address,
            "components": self.components.to_mapping(),
            "accuracy": self.accuracy,
            "source": self.source,
            "degraded": self.degraded,
        }


@dataclass(frozen=True)
class ReverseGeocodeResult:
    """Resultado de geocodificação reversa (coordenadas → endereço)."""

    formatted_address: str
    components: AddressComponents = field(default_factory=AddressComponents)
    source: str = "mock"
    degraded: bool = False

    def as_degraded(self) -> "ReverseGeocodeResult":
        return replace(self, degraded=True)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ReverseGeocodeResult":
        return cls(
            formatted_address=str(data.get("formatted_address", "")),
            components=AddressComponents.from_mapping(data.get("components")),
            source=str(data.get("source", "mock")),
            degraded=bool(data.get("degraded", False)),
        )

    def to_mapping(self) -> Dict[str, Any]:
        return {
            "formatted_address": self.formatted_address,
            "components": self.components.to_mapping(),
            "source": self.source,
            "degraded": self.degraded,
        }


@dataclass(frozen=True)
class LocationExtraction:
    """Nomes de lugares encontrados em um texto livre."""

    locations: Tuple[str, ...]
    source: str = "mock"
    degraded: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "LocationExtraction":
        return cls(
            locations=tuple(str(item) for item in data.get("locations") or ()),
            source=str(data.get("source", "mock")),
            degraded=bool(data.get("degraded", False)),
        )

    def to_mapping(self) -> Dict[str, Any]:
        return {
            "locations": list(self.locations),
            "source": self.source,
            "degraded": self.degraded,
        }


@dataclass(frozen=True)
class ImageAnalysis:
    """Parecer sobre a autenticidade de uma imagem."""

    is_authentic: bool
    confidence: int
    disaster_type: Optional[str] = None
    reasoning: str = ""
    manipulation_signs: Tuple[str, ...] = field(default_factory=tuple)
    source: str = "mock"
    degraded: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "confidence", int(clamp(self.confidence, 0, 100)))

    @property
    def status(self) -> str:
        """Status derivado: ``verified``, ``rejected`` ou ``pending``."""

        if self.is_authentic and self.confidence >= 80:
            return "verified"
        if not self.is_authentic or self.confidence < 50:
            return "rejected"
        return "pending"

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ImageAnalysis":
        return cls(
            is_authentic=bool(data.get("is_authentic", data.get("isAuthentic", False))),
            confidence=int(data.get("confidence") or 0),
            disaster_type=data.get("disaster_type") or data.get("disasterType"),
            reasoning=str(data.get("reasoning") or ""),
            manipulation_signs=tuple(
                data.get("manipulation_signs") or data.get("manipulationSigns") or ()
            ),
            source=str(data.get("source", "mock")),
            degraded=bool(data.get("degraded", False)),
        )

    def to_mapping(self) -> Dict[str, Any]:
        return {
            "is_authentic": self.is_authentic,
            "confidence": self.confidence,
            "disaster_type": self.disaster_type,
            "reasoning": self.reasoning,
            "manipulation_signs": list(self.manipulation_signs),
            "source": self.source,
            "degraded": self.degraded,
        }


@dataclass(frozen=True)
class SocialMediaPost:
    """Postagem bruta retornada por uma fonte de rede social."""

    id: str
    platform: str
    content: str
    author: str
    created_at: datetime
    url: Optional[str] = None
    metrics: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "SocialMediaPost":
        return cls(
            id=str(data["id"]),
            platform=str(data.get("platform", "")),
            content=str(data.get("content", "")),
            author=str(data.get("author", "")),
            created_at=_parse_datetime(data.get("created_at")),
            url=data.get("url"),
            metrics=dict(data.get("metrics") or {}),
        )

    def to_mapping(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "platform": self.platform,
            "content": self.content,
            "author": self.author,
            "created_at": self.created_at.isoformat(),
            "url": self.url,
            "metrics": dict(self.metrics),
        }


@dataclass(frozen=True)
class SocialMediaReport:
    """Postagem classificada e associada a um desastre."""

    post: SocialMediaPost
    disaster_id: Optional[str]
    priority_score: int
    sentiment: str
    category: str
    location_extracted: Optional[str] = None
    all_locations: Tuple[str, ...] = field(default_factory=tuple)
    coordinates: Optional[Coordinates] = None
    processed_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "priority_score", int(clamp(self.priority_score, 1, 10))
        )

    @property
    def post_id(self) -> str:
        return self.post.id

    @property
    def platform(self) -> str:
        return self.post.platform

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "SocialMediaReport":
        post = SocialMediaPost.from_mapping(
            {**data, "id": data.get("post_id") or data.get("id")}
        )
        return cls(
            post=post,
            disaster_id=data.get("disaster_id"),
            priority_score=int(data.get("priority_score") or 1),
            sentiment=str(data.get("sentiment") or "neutral"),
            category=str(data.get("category") or "general"),
            location_extracted=data.get("location_extracted"),
            all_locations=tuple(data.get("all_locations") or ()),
            coordinates=Coordinates.from_mapping(
                data.get("coordinates") or data.get("location")
            ),
            processed_at=_parse_datetime(data.get("processed_at")),
        )

    def to_mapping(self) -> Dict[str, Any]:
        payload = self.post.to_mapping()
        payload.update(
            {
                "post_id": self.post.id,
                "disaster_id": self.disaster_id,
                "priority_score": self.priority_score,
                "sentiment": self.sentiment,
                "category": self.category,
                "location_extracted": self.location_extracted,
                "all_locations": list(self.all_locations),
                "coordinates": (
                    self.coordinates.to_mapping() if self.coordinates else None
                ),
                "processed_at": self.processed_at.isoformat(),
            }
        )
        return payload


@dataclass(frozen=True)
class OfficialUpdate:
    """Comunicado publicado por uma fonte oficial (FEMA, Cruz Vermelha...)."""

    id: str
    source: str
    title: str
    content: str
    url: str
    published_at: datetime
    fetched_at: datetime = field(default_factory=utcnow)
    disaster_id: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "OfficialUpdate":
        return cls(
            id=str(data.get("id") or data.get("url")),
            source=str(data.get("source", "")),
            title=str(data.get("title", "")),
            content=str(data.get("content", "")),
            url=str(data.get("url", "")),
            published_at=_parse_datetime(data.get("published_at")),
            fetched_at=_parse_datetime(data.get("fetched_at")),
            disaster_id=data.get("disaster_id"),
        )

    def to_mapping(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source,
            "title": self.title,
            "content": self.content,
            "url": self.url,
            "published_at": self.published_at.isoformat(),
            "fetched_at": self.fetched_at.isoformat(),
            "disaster_id": self.disaster_id,
        }


@dataclass(frozen=True)
class ImageVerification:
    """Verificação persistida de uma imagem vinculada a um desastre."""

    disaster_id: str
    image_url: str
    analysis: ImageAnalysis
    report_id: Optional[str] = None
    verified_by: Optional[str] = None
    verified_at: datetime = field(default_factory=utcnow)

    @property
    def status(self) -> str:
        return self.analysis.status

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ImageVerification":
        return cls(
            disaster_id=str(data.get("disaster_id", "")),
            image_url=str(data.get("image_url", "")),
            analysis=ImageAnalysis.from_mapping(data.get("analysis") or {}),
            report_id=data.get("report_id"),
            verified_by=data.get("verified_by"),
            verified_at=_parse_datetime(data.get("verified_at")),
        )

    def to_mapping(self) -> Dict[str, Any]:
        return {
            "disaster_id": self.disaster_id,
            "image_url": self.image_url,
            "analysis": self.analysis.to_mapping(),
            "status": self.status,
            "report_id": self.report_id,
            "verified_by": self.verified_by,
            "verified_at": self.verified_at.isoformat(),
        }


__all__ = [
    "AddressComponents",
    "CATEGORIES",
    "GeocodeResult",
    "ImageAnalysis",
    "ImageVerification",
    "LocationExtraction",
    "OfficialUpdate",
    "ReverseGeocodeResult",
    "SENTIMENTS",
    "SocialMediaPost",
    "SocialMediaReport",
    "clamp",
]
