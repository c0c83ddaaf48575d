"""Geocodificação direta e reversa com provedores em cadeia."""

from .providers import (
    GoogleGeocoder,
    MapboxGeocoder,
    MockGeocoder,
    NominatimGeocoder,
)
from .service import GeocodeOutcome, GeocodingService, TextGeocoding

__all__ = [
    "GeocodeOutcome",
    "GeocodingService",
    "GoogleGeocoder",
    "MapboxGeocoder",
    "MockGeocoder",
    "NominatimGeocoder",
    "TextGeocoding",
]
