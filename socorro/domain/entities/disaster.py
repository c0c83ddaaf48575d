"""Entidade que representa um desastre registrado na plataforma."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Tuple

from .coordinates import Coordinates


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, str) and value:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return utcnow()


@dataclass(frozen=True)
class AuditEntry:
    """Registro imutável de uma mutação aplicada ao desastre."""

    action: str
    user_id: str
    timestamp: datetime
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AuditEntry":
        return cls(
            action=str(data.get("action", "")),
            user_id=str(data.get("userId") or data.get("user_id") or ""),
            timestamp=_parse_datetime(data.get("timestamp")),
            details=dict(data.get("details") or {}),
        )

    def to_mapping(self) -> Dict[str, Any]:
        return {
            "action": self.action,
            "userId": self.user_id,
            "timestamp": self.timestamp.isoformat(),
            "details": dict(self.details),
        }


@dataclass(frozen=True)
class Disaster:
    """Desastre com localização, etiquetas e trilha de auditoria."""

    id: str
    title: str
    description: str
    owner_id: str
    location_name: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    tags: Tuple[str, ...] = field(default_factory=tuple)
    audit_trail: Tuple[AuditEntry, ...] = field(default_factory=tuple)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @classmethod
    def new(
        cls,
        *,
        title: str,
        description: str,
        owner_id: str,
        location_name: Optional[str] = None,
        coordinates: Optional[Coordinates] = None,
        tags: Tuple[str, ...] = (),
        now: Optional[datetime] = None,
    ) -> "Disaster":
        """Cria um desastre com identificador novo e a entrada ``create``."""

        moment = now or utcnow()
        disaster = cls(
            id=str(uuid.uuid4()),
            title=title,
            description=description,
            owner_id=owner_id,
            location_name=location_name,
            coordinates=coordinates,
            tags=tuple(tags),
            created_at=moment,
            updated_at=moment,
        )
        return disaster.with_audit("create", owner_id, {"title": title}, now=moment)

    def with_audit(
        self,
        action: str,
        user_id: str,
        details: Mapping[str, Any] | None = None,
        *,
        now: Optional[datetime] = None,
    ) -> "Disaster":
        """Retorna uma cópia com a nova entrada anexada ao final da trilha."""

        entry = AuditEntry(
            action=action,
            user_id=user_id,
            timestamp=now or utcnow(),
            details=dict(details or {}),
        )
        return replace(self, audit_trail=self.audit_trail + (entry,))

    def with_changes(
        self,
        changes: Mapping[str, Any],
        user_id: str,
        *,
        now: Optional[datetime] = None,
    ) -> "Disaster":
        """Aplica os campos alterados registrando a auditoria ``update``."""

        moment = now or utcnow()
        updated = replace(self, updated_at=moment, **dict(changes))
        return updated.with_audit(
            "update", user_id, {"changes": list(changes.keys())}, now=moment
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Disaster":
        """Reconstrói o desastre a partir do documento persistido."""

        return cls(
            id=str(data.get("id") or data.get("_id")),
            title=str(data.get("title", "")),
            description=str(data.get("description", "")),
            owner_id=str(data.get("owner_id", "")),
            location_name=data.get("location_name"),
            coordinates=Coordinates.from_mapping(
                data.get("coordinates") or data.get("location")
            ),
            tags=tuple(data.get("tags") or ()),
            audit_trail=tuple(
                AuditEntry.from_mapping(item) for item in data.get("audit_trail") or ()
            ),
            created_at=_parse_datetime(data.get("created_at")),
            updated_at=_parse_datetime(data.get("updated_at")),
        )

    def to_mapping(self) -> Dict[str, Any]:
        """Serializa o desastre no formato exposto pela API."""

        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "location_name": self.location_name,
            "coordinates": self.coordinates.to_mapping() if self.coordinates else None,
            "tags": list(self.tags),
            "owner_id": self.owner_id,
            "audit_trail": [entry.to_mapping() for entry in self.audit_trail],
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


__all__ = ["AuditEntry", "Disaster", "utcnow"]
