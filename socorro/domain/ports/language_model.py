"""Porta para o modelo de linguagem usado em extração e verificação."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from socorro.domain.entities import ImageAnalysis, LocationExtraction


class LanguageModel(ABC):
    """Tarefas de IA: extrair lugares de texto e analisar imagens."""

    name: str = "unknown"

    @abstractmethod
    def extract_locations(self, text: str) -> LocationExtraction:
        """Listar os nomes de lugares mencionados em ``text``."""

    @abstractmethod
    def verify_image(
        self, image_url: str, context: Optional[str] = None
    ) -> ImageAnalysis:
        """Avaliar se a imagem é autêntica e relacionada a um desastre."""


__all__ = ["LanguageModel"]
