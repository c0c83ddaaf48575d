"""Par latitude/longitude e cálculos geodésicos simples."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Optional

EARTH_RADIUS_KM = 6371.0


def is_valid_coordinates(lat: Any, lng: Any) -> bool:
    """Indica se o par está dentro dos limites geográficos aceitos."""

    try:
        lat_value = float(lat)
        lng_value = float(lng)
    except (TypeError, ValueError):
        return False
    if math.isnan(lat_value) or math.isnan(lng_value):
        return False
    return -90.0 <= lat_value <= 90.0 and -180.0 <= lng_value <= 180.0


@dataclass(frozen=True)
class Coordinates:
    """Ponto geográfico em graus decimais (WGS84)."""

    lat: float
    lng: float

    def __post_init__(self) -> None:
        if not is_valid_coordinates(self.lat, self.lng):
            raise ValueError(f"invalid coordinates: {self.lat}, {self.lng}")

    @classmethod
    def from_mapping(cls, data: Any) -> Optional["Coordinates"]:
        """Aceita ``{lat, lng}`` ou um ponto GeoJSON; ``None`` quando ausente."""

        if not data:
            return None
        if data.get("type") == "Point":
            lng, lat = data["coordinates"][:2]
            return cls(lat=float(lat), lng=float(lng))
        return cls(lat=float(data["lat"]), lng=float(data["lng"]))

    def to_mapping(self) -> Dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}

    def to_geojson(self) -> Dict[str, Any]:
        return {"type": "Point", "coordinates": [self.lng, self.lat]}

    def distance_km(self, other: "Coordinates") -> float:
        """Distância pela fórmula de haversine, em quilômetros."""

        lat1, lat2 = math.radians(self.lat), math.radians(other.lat)
        d_lat = lat2 - lat1
        d_lng = math.radians(other.lng - self.lng)
        a = (
            math.sin(d_lat / 2) ** 2
            + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
        )
        return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


__all__ = ["Coordinates", "EARTH_RADIUS_KM", "is_valid_coordinates"]
