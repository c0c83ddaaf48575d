"""Contrato de persistência dos comunicados oficiais."""
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, Optional

from socorro.domain.entities import OfficialUpdate


class OfficialUpdateRepository(ABC):
    """Comunicados são identificados pela ``url``."""

    @abstractmethod
    def upsert_many(self, updates: Iterable[OfficialUpdate]) -> int:
        """Inserir ou substituir comunicados e retornar quantos foram gravados."""

    @abstractmethod
    def list(
        self,
        *,
        disaster_id: Optional[str] = None,
        source: Optional[str] = None,
        fetched_since: Optional[datetime] = None,
        published_since: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> list[OfficialUpdate]:
        """Listar comunicados ordenados por publicação mais recente."""

    @abstractmethod
    def delete_for_disaster(self, disaster_id: str) -> int:
        """Apagar os comunicados associados ao desastre."""


__all__ = ["OfficialUpdateRepository"]
