"""Contrato de persistência de desastres."""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from socorro.domain.entities import Disaster


@dataclass(frozen=True)
class DisasterQuery:
    """Filtros aceitos pela listagem de desastres."""

    #: Etiqueta que precisa estar presente em ``tags``.
    tag: Optional[str] = None
    #: Identificador do usuário dono do registro.
    owner_id: Optional[str] = None
    #: Trecho procurado (sem diferenciar maiúsculas) em título, descrição e local.
    search: Optional[str] = None


class DisasterRepository(ABC):
    """Define operações de persistência de desastres."""

    @abstractmethod
    def add(self, disaster: Disaster) -> None:
        """Persistir um novo desastre."""

    @abstractmethod
    def get(self, disaster_id: str) -> Optional[Disaster]:
        """Buscar um desastre pelo identificador."""

    @abstractmethod
    def update(self, disaster: Disaster) -> None:
        """Substituir o registro existente pela versão informada."""

    @abstractmethod
    def delete(self, disaster_id: str) -> bool:
        """Remover o desastre e indicar se algo foi apagado."""

    @abstractmethod
    def search(
        self, query: DisasterQuery, *, offset: int, limit: int
    ) -> tuple[list[Disaster], int]:
        """Listar desastres mais recentes primeiro, com o total sem paginação."""


__all__ = ["DisasterQuery", "DisasterRepository"]
