"""Heurísticas de extração de nomes de lugares em texto livre.

As expressões reconhecem três formas comuns em relatos de emergência:

* ``Cidade, UF`` (``Miami, FL``; ``Houston, Texas``);
* logradouros (``Oak Street``, ``Main St``);
* nomes próprios após preposições de lugar (``in Lower East Side``).

Somente a palavra-chave (preposição ou tipo de via) ignora maiúsculas; o
nome em si precisa começar com letra maiúscula para evitar capturar o
restante da frase.
"""
from __future__ import annotations

import re
from typing import Iterable, Mapping

_PROPER_NAME = r"[A-Z][a-z]+(?:\s+[A-Z][a-z]+)*"

CITY_STATE_PATTERN = re.compile(rf"\b({_PROPER_NAME}),\s*(?:[A-Z]{{2}}|[A-Z][a-z]+)\b")
STREET_PATTERN = re.compile(
    rf"\b({_PROPER_NAME}\s+"
    r"(?i:street|st|avenue|ave|road|rd|boulevard|blvd|drive|dr|lane|ln))\b"
)
PREPOSITION_PATTERN = re.compile(rf"\b(?i:in|at|on|near)\s+({_PROPER_NAME})")

COMMON_PLACES: Mapping[str, str] = {
    "manhattan": "Manhattan, NYC",
    "brooklyn": "Brooklyn, NYC",
    "queens": "Queens, NYC",
    "bronx": "Bronx, NYC",
    "miami": "Miami, FL",
    "houston": "Houston, TX",
    "los angeles": "Los Angeles, CA",
    "chicago": "Chicago, IL",
}


def _collect(text: str, patterns: Iterable[re.Pattern[str]]) -> list[str]:
    found: dict[str, None] = {}
    for pattern in patterns:
        for match in pattern.finditer(text):
            value = match.group(1).strip()
            if value:
                found.setdefault(value, None)
    return list(found)


def extract_location_mentions(text: str) -> list[str]:
    """Retorna menções de lugar na ordem: logradouro, preposição, cidade/UF."""

    if not text:
        return []
    return _collect(text, (STREET_PATTERN, PREPOSITION_PATTERN, CITY_STATE_PATTERN))


def extract_place_names(text: str) -> list[str]:
    """Extração usada pelo modelo simulado: padrões + tabela de cidades comuns."""

    if not text:
        return []
    places = _collect(text, (CITY_STATE_PATTERN, STREET_PATTERN, PREPOSITION_PATTERN))
    lowered = text.lower()
    for key, place in COMMON_PLACES.items():
        if key in lowered and place not in places:
            places.append(place)
    return places


__all__ = [
    "CITY_STATE_PATTERN",
    "COMMON_PLACES",
    "PREPOSITION_PATTERN",
    "STREET_PATTERN",
    "extract_location_mentions",
    "extract_place_names",
]
