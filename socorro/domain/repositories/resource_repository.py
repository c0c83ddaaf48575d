"""Contrato de persistência de recursos."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, Optional

from socorro.domain.entities import Resource


class ResourceRepository(ABC):
    @abstractmethod
    def add(self, resource: Resource) -> None:
        """Persistir um novo recurso."""

    @abstractmethod
    def list(
        self,
        *,
        disaster_id: Optional[str] = None,
        resource_type: Optional[str] = None,
    ) -> Iterable[Resource]:
        """Listar recursos (mais recentes primeiro) aplicando filtros opcionais."""

    @abstractmethod
    def delete_for_disaster(self, disaster_id: str) -> int:
        """Apagar os recursos do desastre e retornar a quantidade removida."""


__all__ = ["ResourceRepository"]
