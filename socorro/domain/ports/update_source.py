"""Porta de coleta de comunicados oficiais."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from socorro.domain.entities import OfficialUpdate


class UpdateSource(ABC):
    name: str = "unknown"

    @abstractmethod
    def fetch(self, keywords: Sequence[str]) -> list[OfficialUpdate]:
        """Coletar comunicados; o filtro por palavras-chave é opcional na fonte."""


__all__ = ["UpdateSource"]
