"""Entidade de recurso (abrigo, hospital, ponto de distribuição...)."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from .coordinates import Coordinates
from .disaster import _parse_datetime, utcnow

RESOURCE_TYPES = (
    "shelter",
    "hospital",
    "food",
    "water",
    "medical",
    "evacuation_center",
    "emergency_services",
    "supply_distribution",
)
AVAILABILITY_STATUSES = ("available", "full", "unavailable")


@dataclass(frozen=True)
class Resource:
    """Recurso de apoio vinculado a um desastre."""

    id: str
    disaster_id: str
    name: str
    type: str
    location_name: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    description: Optional[str] = None
    capacity: Optional[int] = None
    contact_info: Optional[Dict[str, Any]] = None
    availability_status: str = "available"
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @classmethod
    def new(cls, disaster_id: str, **fields: Any) -> "Resource":
        return cls(id=str(uuid.uuid4()), disaster_id=disaster_id, **fields)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Resource":
        capacity = data.get("capacity")
        return cls(
            id=str(data.get("id") or data.get("_id")),
            disaster_id=str(data.get("disaster_id", "")),
            name=str(data.get("name", "")),
            type=str(data.get("type", "")),
            location_name=data.get("location_name"),
            coordinates=Coordinates.from_mapping(
                data.get("coordinates") or data.get("location")
            ),
            description=data.get("description"),
            capacity=int(capacity) if capacity is not None else None,
            contact_info=data.get("contact_info"),
            availability_status=str(data.get("availability_status") or "available"),
            created_at=_parse_datetime(data.get("created_at")),
            updated_at=_parse_datetime(data.get("updated_at")),
        )

    def to_mapping(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "disaster_id": self.disaster_id,
            "name": self.name,
            "type": self.type,
            "location_name": self.location_name,
            "coordinates": self.coordinates.to_mapping() if self.coordinates else None,
            "description": self.description,
            "capacity": self.capacity,
            "contact_info": self.contact_info,
            "availability_status": self.availability_status,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


__all__ = ["AVAILABILITY_STATUSES", "RESOURCE_TYPES", "Resource"]
