"""Contrato de persistência das verificações de imagem."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, Optional

from socorro.domain.entities import ImageVerification


class ImageVerificationRepository(ABC):
    """Verificações são identificadas pelo par ``(disaster_id, image_url)``."""

    @abstractmethod
    def upsert(self, verification: ImageVerification) -> None:
        """Inserir ou substituir a verificação."""

    @abstractmethod
    def list(self, *, disaster_id: Optional[str] = None) -> Iterable[ImageVerification]:
        """Listar verificações registradas."""

    @abstractmethod
    def delete_for_disaster(self, disaster_id: str) -> int:
        """Apagar as verificações associadas ao desastre."""


__all__ = ["ImageVerificationRepository"]
