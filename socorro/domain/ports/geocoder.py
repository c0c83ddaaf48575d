"""Porta de geocodificação."""
from __future__ import annotations

from abc import ABC, abstractmethod

from socorro.domain.entities import GeocodeResult, ReverseGeocodeResult


class Geocoder(ABC):
    """Converte nomes de lugares em coordenadas e vice-versa."""

    #: Identificador do provedor gravado em ``source`` nos resultados.
    name: str = "unknown"

    @abstractmethod
    def geocode(self, location_name: str) -> GeocodeResult:
        """Geocodificar ``location_name``; levanta exceção quando não encontrado."""

    @abstractmethod
    def reverse(self, lat: float, lng: float) -> ReverseGeocodeResult:
        """Obter o endereço correspondente às coordenadas."""


__all__ = ["Geocoder"]
