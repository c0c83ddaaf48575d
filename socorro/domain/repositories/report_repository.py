"""Contrato de persistência dos relatos enviados por cidadãos."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from socorro.domain.entities import Report


class ReportRepository(ABC):
    @abstractmethod
    def add(self, report: Report) -> None:
        """Persistir um relato."""

    @abstractmethod
    def get(self, report_id: str) -> Optional[Report]:
        """Buscar um relato pelo identificador."""

    @abstractmethod
    def update_status(self, report_id: str, status: str) -> bool:
        """Atualizar ``verification_status``; retorna ``False`` se não existir."""

    @abstractmethod
    def delete_for_disaster(self, disaster_id: str) -> int:
        """Apagar os relatos do desastre."""


__all__ = ["ReportRepository"]
