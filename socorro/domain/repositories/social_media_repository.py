"""Contrato de persistência das postagens classificadas."""
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, Optional

from socorro.domain.entities import SocialMediaReport


class SocialMediaReportRepository(ABC):
    """Postagens são identificadas pelo par ``(post_id, platform)``."""

    @abstractmethod
    def upsert_many(self, reports: Iterable[SocialMediaReport]) -> int:
        """Inserir ou substituir postagens e retornar quantas foram gravadas."""

    @abstractmethod
    def list(
        self,
        *,
        disaster_id: Optional[str] = None,
        since: Optional[datetime] = None,
        min_priority: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> list[SocialMediaReport]:
        """Listar postagens filtradas.

        Com ``min_priority`` a ordenação é por prioridade decrescente; caso
        contrário pela data de processamento mais recente.
        """

    @abstractmethod
    def delete_for_disaster(self, disaster_id: str) -> int:
        """Apagar as postagens associadas ao desastre."""


__all__ = ["SocialMediaReportRepository"]
