from __future__ import annotations

from typing import Any, Mapping, Optional

import pytest

from socorro.domain.entities import Coordinates, Disaster
from socorro.domain.ports import Notifier
from socorro.infrastructure.repositories import InMemoryResourceRepository
from socorro.services.resources import ResourcesService

MANHATTAN = Coordinates(lat=40.7831, lng=-73.9712)
BROOKLYN = Coordinates(lat=40.6782, lng=-73.9442)
MIAMI = Coordinates(lat=25.7617, lng=-80.1918)


class _RecordingNotifier(Notifier):
    def __init__(self) -> None:
        self.events: list[tuple[str, Mapping[str, Any], Optional[str]]] = []

    def publish(
        self, event: str, payload: Mapping[str, Any], topic: Optional[str] = None
    ) -> None:
        self.events.append((event, payload, topic))


def _setup() -> tuple[ResourcesService, _RecordingNotifier, Disaster]:
    notifier = _RecordingNotifier()
    service = ResourcesService(InMemoryResourceRepository(), notifier)
    disaster = Disaster.new(
        title="NYC Flood", description="", owner_id="netrunnerX", coordinates=MANHATTAN
    )
    return service, notifier, disaster


def test_create_validates_type_and_status() -> None:
    service, notifier, disaster = _setup()

    with pytest.raises(ValueError, match="resource type"):
        service.create(disaster, name="Party", type="party")
    with pytest.raises(ValueError, match="availability status"):
        service.create(disaster, name="Shelter", type="shelter", availability_status="maybe")

    assert notifier.events == []


def test_create_broadcasts_latest_resources_to_disaster_topic() -> None:
    service, notifier, disaster = _setup()

    resource = service.create(
        disaster, name="Red Cross Shelter", type="shelter", coordinates=MANHATTAN, capacity=200
    )

    event, payload, topic = notifier.events[0]
    assert (event, topic) == ("resources_updated", disaster.id)
    assert payload["totalCount"] == 1
    assert payload["resources"][0]["id"] == resource.id


def test_disaster_resources_are_filtered_by_radius_and_sorted() -> None:
    service, _, disaster = _setup()
    service.create(disaster, name="Brooklyn Hospital", type="hospital", coordinates=BROOKLYN)
    service.create(disaster, name="Manhattan Shelter", type="shelter", coordinates=MANHATTAN)
    service.create(disaster, name="Miami Depot", type="food", coordinates=MIAMI)

    near = service.for_disaster(disaster, radius_km=10)
    wider = service.for_disaster(disaster, radius_km=20)

    assert near.geospatial is True
    assert [item.resource.name for item in near.resources] == ["Manhattan Shelter"]
    assert [item.resource.name for item in wider.resources] == [
        "Manhattan Shelter",
        "Brooklyn Hospital",
    ]
    assert wider.resources[0].to_mapping()["distance_km"] == 0.0
    assert 10 < wider.resources[1].distance_km < 20


def test_disaster_without_location_lists_everything() -> None:
    service, _, _ = _setup()
    unlocated = Disaster.new(title="Outage", description="", owner_id="netrunnerX")
    service.create(unlocated, name="Generator", type="emergency_services")
    service.create(unlocated, name="Water Truck", type="water", coordinates=MIAMI)

    search = service.for_disaster(unlocated, resource_type="water")

    assert search.geospatial is False
    assert [item.resource.name for item in search.resources] == ["Water Truck"]
    assert "distance_km" not in search.resources[0].to_mapping()


def test_nearby_and_types_span_all_disasters() -> None:
    service, _, disaster = _setup()
    other = Disaster.new(title="Miami Storm", description="", owner_id="reliefAdmin")
    service.create(disaster, name="Manhattan Shelter", type="shelter", coordinates=MANHATTAN)
    service.create(other, name="Miami Shelter", type="shelter", coordinates=MIAMI)
    service.create(other, name="Miami Clinic", type="medical", coordinates=MIAMI)

    nearby = service.nearby(MIAMI, radius_km=5)

    assert sorted(item.resource.name for item in nearby) == ["Miami Clinic", "Miami Shelter"]
    assert service.types() == [
        {"type": "medical", "count": 1},
        {"type": "shelter", "count": 2},
    ]


def test_broadcast_carries_ten_resources_and_the_full_count() -> None:
    service, notifier, disaster = _setup()
    for index in range(12):
        service.create(disaster, name=f"Shelter {index}", type="shelter", coordinates=MANHATTAN)

    _, payload, _ = notifier.events[-1]

    assert len(notifier.events) == 12
    assert payload["totalCount"] == 12
    assert len(payload["resources"]) == 10


def test_listing_broadcasts_located_resources_to_disaster_topic() -> None:
    service, notifier, disaster = _setup()
    service.create(disaster, name="Manhattan Shelter", type="shelter", coordinates=MANHATTAN)
    service.create(disaster, name="Miami Depot", type="food", coordinates=MIAMI)
    notifier.events.clear()

    service.for_disaster(disaster, radius_km=10)

    event, payload, topic = notifier.events[0]
    assert (event, topic) == ("resources_updated", disaster.id)
    assert payload["totalCount"] == 1
    assert payload["resources"][0]["name"] == "Manhattan Shelter"
