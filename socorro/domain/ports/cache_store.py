"""Porta de armazenamento chave/valor com expiração."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional


class CacheStore(ABC):
    """Define o contrato do cache compartilhado pelas pipelines de enriquecimento.

    Valores precisam ser serializáveis em JSON. Uma leitura posterior à
    expiração retorna ``None`` e remove a entrada.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Retornar o valor armazenado ou ``None`` quando ausente ou expirado."""

    @abstractmethod
    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        """Gravar (ou sobrescrever) o valor com validade de ``ttl_seconds``."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remover a entrada, se existir."""

    @abstractmethod
    def clear_expired(self) -> int:
        """Remover entradas expiradas e retornar a quantidade apagada."""


__all__ = ["CacheStore"]
