"""Porta de busca em redes sociais."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from socorro.domain.entities import Coordinates, SocialMediaPost


class SocialMediaSource(ABC):
    name: str = "unknown"

    @abstractmethod
    def search(
        self, keywords: Sequence[str], location: Optional[Coordinates] = None
    ) -> list[SocialMediaPost]:
        """Buscar postagens recentes que mencionem as palavras-chave."""


__all__ = ["SocialMediaSource"]
