"""Clientes HTTP dos provedores de geocodificação."""
from __future__ import annotations

import hashlib
import logging
import time
from typing import Any, Callable, Dict, Iterable, Mapping, Optional
from urllib.parse import quote

import httpx

from socorro.domain.entities import AddressComponents, GeocodeResult, ReverseGeocodeResult
from socorro.domain.ports import Geocoder
from socorro.infrastructure.retry import retry_with_backoff
from socorro.logging_config import log_external_call

log = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 10.0
_USER_AGENT = "DisasterResponsePlatform/1.0"


class GeocodingError(RuntimeError):
    """O provedor respondeu, mas sem resultado utilizável."""


class HttpGeocoder(Geocoder):
    """Base dos provedores HTTP: cliente ``httpx`` próprio ou injetado."""

    name = "http"
    label = "HTTP"

    def __init__(
        self,
        *,
        client: httpx.Client | None = None,
        timeout: float | None = _DEFAULT_TIMEOUT,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._client: httpx.Client = client or httpx.Client(timeout=timeout)
        self._owns_client: bool = client is None
        self._max_attempts = max_attempts
        self._base_delay = base_delay
        self._sleep = sleep

    def close(self) -> None:
        """Fecha o cliente HTTP quando a instância é de responsabilidade local."""

        if self._owns_client:
            self._client.close()

    def _get_json(self, url: str, params: Mapping[str, Any], **kwargs: Any) -> Any:
        def call() -> Any:
            response = self._client.get(url, params=dict(params), **kwargs)
            response.raise_for_status()
            return response.json()

        return retry_with_backoff(
            call, self._max_attempts, self._base_delay, sleep=self._sleep
        )

    def _timed(self, action: str, operation: Callable[[], Any], **details: Any) -> Any:
        started = time.perf_counter()
        try:
            result = operation()
        except Exception as exc:
            elapsed = int((time.perf_counter() - started) * 1000)
            log_external_call(self.label, action, False, elapsed, error=str(exc), **details)
            raise
        elapsed = int((time.perf_counter() - started) * 1000)
        log_external_call(self.label, action, True, elapsed, **details)
        return result


class GoogleGeocoder(HttpGeocoder):
    """Google Maps Geocoding API."""

    name = "google"
    label = "Google Maps"
    endpoint = "https://maps.googleapis.com/maps/api/geocode/json"

    def __init__(self, api_key: str, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._api_key = api_key

    def geocode(self, location_name: str) -> GeocodeResult:
        def run() -> GeocodeResult:
            result = self._first_result({"address": location_name, "key": self._api_key})
            location = result["geometry"]["location"]
            return GeocodeResult(
                lat=float(location["lat"]),
                lng=float(location["lng"]),
                formatted_address=result.get("formatted_address", location_name),
                components=parse_google_components(result.get("address_components", ())),
                accuracy=str(result["geometry"].get("location_type", "unknown")),
                source=self.name,
            )

        return self._timed("geocode", run, location_name=location_name)

    def reverse(self, lat: float, lng: float) -> ReverseGeocodeResult:
        def run() -> ReverseGeocodeResult:
            result = self._first_result({"latlng": f"{lat},{lng}", "key": self._api_key})
            return ReverseGeocodeResult(
                formatted_address=result.get("formatted_address", ""),
                components=parse_google_components(result.get("address_components", ())),
                source=self.name,
            )

        return self._timed("reverseGeocode", run, lat=lat, lng=lng)

    def _first_result(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        data = self._get_json(self.endpoint, params)
        if data.get("status") != "OK" or not data.get("results"):
            raise GeocodingError(f"Google Maps API error: {data.get('status')}")
        return data["results"][0]


class MapboxGeocoder(HttpGeocoder):
    """Mapbox Geocoding API (v5)."""

    name = "mapbox"
    label = "Mapbox"
    endpoint = "https://api.mapbox.com/geocoding/v5/mapbox.places/{query}.json"

    def __init__(self, access_token: str, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._access_token = access_token

    def geocode(self, location_name: str) -> GeocodeResult:
        def run() -> GeocodeResult:
            feature = self._first_feature(location_name)
            lng, lat = feature["center"][:2]
            return GeocodeResult(
                lat=float(lat),
                lng=float(lng),
                formatted_address=feature.get("place_name", location_name),
                components=parse_mapbox_components(feature),
                accuracy=str((feature.get("properties") or {}).get("accuracy", "unknown")),
                source=self.name,
            )

        return self._timed("geocode", run, location_name=location_name)

    def reverse(self, lat: float, lng: float) -> ReverseGeocodeResult:
        def run() -> ReverseGeocodeResult:
            feature = self._first_feature(f"{lng},{lat}")
            return ReverseGeocodeResult(
                formatted_address=feature.get("place_name", ""),
                components=parse_mapbox_components(feature),
                source=self.name,
            )

        return self._timed("reverseGeocode", run, lat=lat, lng=lng)

    def _first_feature(self, query: str) -> Dict[str, Any]:
        url = self.endpoint.format(query=quote(query, safe=","))
        data = self._get_json(url, {"access_token": self._access_token, "limit": 1})
        features = data.get("features") or []
        if not features:
            raise GeocodingError("No results found")
        return features[0]


class NominatimGeocoder(HttpGeocoder):
    """OpenStreetMap Nominatim (não exige chave, mas exige User-Agent)."""

    name = "nominatim"
    label = "Nominatim"
    base_url = "https://nominatim.openstreetmap.org"

    def geocode(self, location_name: str) -> GeocodeResult:
        def run() -> GeocodeResult:
            data = self._get_json(
                f"{self.base_url}/search",
                {"q": location_name, "format": "json", "limit": 1, "addressdetails": 1},
                headers={"User-Agent": _USER_AGENT},
            )
            if not data:
                raise GeocodingError("No results found")
            result = data[0]
            return GeocodeResult(
                lat=float(result["lat"]),
                lng=float(result["lon"]),
                formatted_address=result.get("display_name", location_name),
                components=parse_nominatim_components(result.get("address")),
                accuracy=str(result.get("importance", 0.5)),
                source=self.name,
            )

        return self._timed("geocode", run, location_name=location_name)

    def reverse(self, lat: float, lng: float) -> ReverseGeocodeResult:
        def run() -> ReverseGeocodeResult:
            data = self._get_json(
                f"{self.base_url}/reverse",
                {"lat": lat, "lon": lng, "format": "json", "addressdetails": 1},
                headers={"User-Agent": _USER_AGENT},
            )
            if not data or "error" in data:
                raise GeocodingError(str((data or {}).get("error", "No results found")))
            return ReverseGeocodeResult(
                formatted_address=data.get("display_name", ""),
                components=parse_nominatim_components(data.get("address")),
                source=self.name,
            )

        return self._timed("reverseGeocode", run, lat=lat, lng=lng)


# Coordenadas conhecidas pelo geocodificador simulado.
MOCK_LOCATIONS: Mapping[str, tuple[float, float]] = {
    "manhattan, nyc": (40.7831, -73.9712),
    "brooklyn, nyc": (40.6782, -73.9442),
    "miami, fl": (25.7617, -80.1918),
    "houston, tx": (29.7604, -95.3698),
    "los angeles, ca": (34.0522, -118.2437),
    "chicago, il": (41.8781, -87.6298),
}
_MOCK_DEFAULT_CENTER = (40.7128, -74.0060)
_MOCK_JITTER = 0.05


class MockGeocoder(Geocoder):
    """Geocodificador determinístico usado sem credenciais ou como contingência."""

    name = "mock"

    def geocode(self, location_name: str) -> GeocodeResult:
        key = location_name.strip().lower()
        lat, lng = MOCK_LOCATIONS.get(key) or _jitter_around_default(key)
        parts = [part.strip() for part in location_name.split(",")]
        result = GeocodeResult(
            lat=lat,
            lng=lng,
            formatted_address=location_name,
            components=AddressComponents(
                city=parts[0] or None,
                state=parts[1] if len(parts) > 1 and parts[1] else None,
                country="United States",
            ),
            accuracy="approximate",
            source=self.name,
        )
        log_external_call("Mock Geocoding", "geocode", True, 0, location_name=location_name)
        return result

    def reverse(self, lat: float, lng: float) -> ReverseGeocodeResult:
        for name, (known_lat, known_lng) in MOCK_LOCATIONS.items():
            if round(lat, 4) == known_lat and round(lng, 4) == known_lng:
                return self._reverse_known(name)
        return ReverseGeocodeResult(
            formatted_address=f"{lat:.4f}, {lng:.4f}",
            components=AddressComponents(
                city="Unknown City", state="Unknown State", country="United States"
            ),
            source=self.name,
        )

    def _reverse_known(self, name: str) -> ReverseGeocodeResult:
        city, _, state = name.partition(",")
        city = _title_case(city.strip())
        state = state.strip().upper()
        return ReverseGeocodeResult(
            formatted_address=f"{city}, {state}",
            components=AddressComponents(city=city, state=state, country="United States"),
            source=self.name,
        )


def _title_case(value: str) -> str:
    return " ".join(word.capitalize() for word in value.split())


def _jitter_around_default(key: str) -> tuple[float, float]:
    """Gera um deslocamento estável (derivado do nome) em torno de Nova York."""

    digest = hashlib.sha256(key.encode("utf-8")).digest()
    unit_lat = int.from_bytes(digest[:4], "big") / 0xFFFFFFFF - 0.5
    unit_lng = int.from_bytes(digest[4:8], "big") / 0xFFFFFFFF - 0.5
    lat = _MOCK_DEFAULT_CENTER[0] + unit_lat * 2 * _MOCK_JITTER
    lng = _MOCK_DEFAULT_CENTER[1] + unit_lng * 2 * _MOCK_JITTER
    return round(lat, 6), round(lng, 6)


def parse_google_components(components: Iterable[Mapping[str, Any]]) -> AddressComponents:
    parsed: Dict[str, Optional[str]] = {}
    for component in components:
        types = component.get("types") or ()
        if "locality" in types:
            parsed["city"] = component.get("long_name")
        elif "administrative_area_level_1" in types:
            parsed["state"] = component.get("short_name")
        elif "country" in types:
            parsed["country"] = component.get("long_name")
        elif "postal_code" in types:
            parsed["zip_code"] = component.get("long_name")
    return AddressComponents(**parsed)


def parse_mapbox_components(feature: Mapping[str, Any]) -> AddressComponents:
    parsed: Dict[str, Optional[str]] = {}
    for item in feature.get("context") or ():
        identifier = str(item.get("id", ""))
        if identifier.startswith("place"):
            parsed["city"] = item.get("text")
        elif identifier.startswith("region"):
            parsed["state"] = item.get("short_code") or item.get("text")
        elif identifier.startswith("country"):
            parsed["country"] = item.get("text")
        elif identifier.startswith("postcode"):
            parsed["zip_code"] = item.get("text")
    return AddressComponents(**parsed)


def parse_nominatim_components(address: Mapping[str, Any] | None) -> AddressComponents:
    address = address or {}
    return AddressComponents(
        city=address.get("city") or address.get("town") or address.get("village"),
        state=address.get("state"),
        country=address.get("country"),
        zip_code=address.get("postcode"),
    )


__all__ = [
    "GeocodingError",
    "GoogleGeocoder",
    "HttpGeocoder",
    "MOCK_LOCATIONS",
    "MapboxGeocoder",
    "MockGeocoder",
    "NominatimGeocoder",
    "parse_google_components",
    "parse_mapbox_components",
    "parse_nominatim_components",
]
