"""Porta de saída para eventos em tempo real."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional


class Notifier(ABC):
    @abstractmethod
    def publish(
        self, event: str, payload: Mapping[str, Any], topic: Optional[str] = None
    ) -> None:
        """Enviar ``event`` aos inscritos em ``topic`` (ou a todos quando ``None``).

        A entrega é do tipo "dispare e esqueça": falhas não retornam ao
        chamador e não há reenvio.
        """


__all__ = ["Notifier"]
