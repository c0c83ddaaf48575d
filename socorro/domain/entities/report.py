"""Relato enviado por um cidadão, opcionalmente com imagem."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from .disaster import _parse_datetime, utcnow

VERIFICATION_STATUSES = ("pending", "verified", "rejected")


@dataclass(frozen=True)
class Report:
    id: str
    disaster_id: str
    user_id: str
    content: str
    image_url: Optional[str] = None
    verification_status: str = "pending"
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Report":
        return cls(
            id=str(data.get("id") or data.get("_id")),
            disaster_id=str(data.get("disaster_id", "")),
            user_id=str(data.get("user_id", "")),
            content=str(data.get("content", "")),
            image_url=data.get("image_url"),
            verification_status=str(data.get("verification_status") or "pending"),
            created_at=_parse_datetime(data.get("created_at")),
            updated_at=_parse_datetime(data.get("updated_at")),
        )

    def to_mapping(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "disaster_id": self.disaster_id,
            "user_id": self.user_id,
            "content": self.content,
            "image_url": self.image_url,
            "verification_status": self.verification_status,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


__all__ = ["Report", "VERIFICATION_STATUSES"]
