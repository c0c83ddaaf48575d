from __future__ import annotations

from datetime import datetime, timezone

import httpx
import pytest

from socorro.domain.entities import GeocodeResult, ReverseGeocodeResult
from socorro.domain.ports import Geocoder
from socorro.infrastructure.cache import InMemoryCacheStore
from socorro.services.ai import AIService
from socorro.services.geocoding import GeocodingService, GoogleGeocoder, NominatimGeocoder

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


class _CountingGeocoder(Geocoder):
    def __init__(self, name: str, *, fail: bool = False) -> None:
        self.name = name
        self.calls = 0
        self._fail = fail

    def geocode(self, location_name: str) -> GeocodeResult:
        self.calls += 1
        if self._fail:
            raise ConnectionError("timeout")
        return GeocodeResult(lat=1.0, lng=2.0, formatted_address=location_name, source=self.name)

    def reverse(self, lat: float, lng: float) -> ReverseGeocodeResult:
        self.calls += 1
        if self._fail:
            raise ConnectionError("timeout")
        return ReverseGeocodeResult(formatted_address="Somewhere", source=self.name)


def _cache() -> InMemoryCacheStore:
    return InMemoryCacheStore(clock=lambda: NOW)


def test_mock_geocoding_round_trips_known_places() -> None:
    service = GeocodingService(_cache())

    result = service.geocode("Manhattan, NYC")
    address = service.reverse(result.lat, result.lng)

    assert (result.lat, result.lng) == (40.7831, -73.9712)
    assert result.source == "mock"
    assert "Manhattan" in address.formatted_address


def test_unknown_places_get_stable_coordinates_near_new_york() -> None:
    service = GeocodingService(_cache())

    first = service.geocode("Nowhere, ZZ")
    second = GeocodingService(_cache()).geocode("Nowhere, ZZ")

    assert (first.lat, first.lng) == (second.lat, second.lng)
    assert abs(first.lat - 40.7128) <= 0.05
    assert abs(first.lng + 74.0060) <= 0.05


@pytest.mark.parametrize("lat,lng", [(91, 0), (0, 181), ("abc", 0)])
def test_invalid_coordinates_fail_before_any_provider(lat: object, lng: object) -> None:
    provider = _CountingGeocoder("google")
    service = GeocodingService(_cache(), [provider])

    with pytest.raises(ValueError, match="Invalid coordinates provided"):
        service.reverse(lat, lng)  # type: ignore[arg-type]

    assert provider.calls == 0


def test_blank_location_name_is_rejected() -> None:
    with pytest.raises(ValueError):
        GeocodingService(_cache()).geocode("   ")


def test_first_successful_provider_wins_and_is_cached() -> None:
    broken = _CountingGeocoder("google", fail=True)
    mapbox = _CountingGeocoder("mapbox")
    nominatim = _CountingGeocoder("nominatim")
    service = GeocodingService(_cache(), [broken, mapbox, nominatim])

    first = service.geocode("Miami, FL")
    second = service.geocode("miami, fl")

    assert first.source == "mapbox"
    assert second == first
    assert (broken.calls, mapbox.calls, nominatim.calls) == (1, 1, 0)


def test_all_providers_failing_returns_uncached_degraded_result() -> None:
    cache = _cache()
    service = GeocodingService(cache, [_CountingGeocoder("google", fail=True)])

    result = service.geocode("Miami, FL")

    assert result.degraded is True
    assert result.source == "mock"
    assert (result.lat, result.lng) == (25.7617, -80.1918)
    assert len(cache) == 0


def test_batch_reports_each_outcome() -> None:
    service = GeocodingService(_cache())

    outcomes = service.geocode_many(["Miami, FL", "Nowhere, ZZ", ""])

    assert [outcome.success for outcome in outcomes] == [True, True, False]
    assert outcomes[2].error == "location name is required"
    assert outcomes[0].to_mapping()["location_name"] == "Miami, FL"


def test_text_geocoding_extracts_and_resolves_places() -> None:
    service = GeocodingService(_cache(), ai_service=AIService(_cache()))

    report = service.geocode_text(
        description="Flooding reported in Brooklyn", location_name="Miami, FL"
    )

    assert report.extraction is not None
    assert "Brooklyn" in report.extraction.locations
    assert report.total_locations == len(report.extraction.locations) + 1
    assert [step["step"] for step in report.steps[:2]] == ["location_extraction", "direct_location"]
    assert all(outcome.success for outcome in report.outcomes)


def test_text_geocoding_requires_some_input() -> None:
    with pytest.raises(ValueError):
        GeocodingService(_cache()).geocode_text()


def test_google_geocoder_parses_first_result() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["address"] == "Houston, TX"
        return httpx.Response(
            200,
            json={
                "status": "OK",
                "results": [
                    {
                        "formatted_address": "Houston, TX, USA",
                        "geometry": {
                            "location": {"lat": 29.76, "lng": -95.36},
                            "location_type": "APPROXIMATE",
                        },
                        "address_components": [
                            {"long_name": "Houston", "types": ["locality"]},
                            {"long_name": "Texas", "short_name": "TX", "types": ["administrative_area_level_1"]},
                        ],
                    }
                ],
            },
        )

    client = httpx.Client(transport=httpx.MockTransport(handler))
    result = GoogleGeocoder("key", client=client, max_attempts=1).geocode("Houston, TX")

    assert (result.lat, result.lng) == (29.76, -95.36)
    assert result.accuracy == "APPROXIMATE"
    assert result.components.city == "Houston"
    assert result.components.state == "TX"


def test_google_zero_results_is_an_error() -> None:
    client = httpx.Client(
        transport=httpx.MockTransport(
            lambda request: httpx.Response(200, json={"status": "ZERO_RESULTS", "results": []})
        )
    )

    with pytest.raises(RuntimeError, match="ZERO_RESULTS"):
        GoogleGeocoder("key", client=client, max_attempts=1).geocode("Atlantis")


def test_nominatim_sends_user_agent_and_reads_address() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["User-Agent"] == "DisasterResponsePlatform/1.0"
        return httpx.Response(
            200,
            json={
                "display_name": "Chicago, Illinois, USA",
                "address": {"town": "Chicago", "state": "Illinois", "postcode": "60601"},
            },
        )

    client = httpx.Client(transport=httpx.MockTransport(handler))
    address = NominatimGeocoder(client=client, max_attempts=1).reverse(41.8781, -87.6298)

    assert address.formatted_address == "Chicago, Illinois, USA"
    assert address.components.city == "Chicago"
    assert address.components.zip_code == "60601"
    assert address.source == "nominatim"
