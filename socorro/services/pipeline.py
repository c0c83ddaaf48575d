"""Etapas compartilhadas pelas pipelines de enriquecimento.

Todas seguem o mesmo fluxo: consulta ao cache, busca nas fontes em caso de
*miss*, normalização, persistência e gravação no cache. Resultados gerados
pela contingência simulada após falha das fontes reais não são gravados.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Optional, Sequence, TypeVar

from socorro.domain.ports import CacheStore

T = TypeVar("T")
S = TypeVar("S")

log = logging.getLogger(__name__)


def through_cache(
    cache: CacheStore,
    key: str,
    ttl_seconds: int,
    produce: Callable[[], T],
    *,
    encode: Callable[[T], Any],
    decode: Callable[[Any], T],
    cacheable: Callable[[T], bool] = lambda _: True,
) -> T:
    """Retorna o valor em cache ou produz, grava e retorna um novo valor."""

    cached = cache.get(key)
    if cached is not None:
        try:
            return decode(cached)
        except (KeyError, TypeError, ValueError) as exc:
            log.warning("entrada de cache inválida %s descartada: %s", key, exc)
            cache.delete(key)
    result = produce()
    if cacheable(result):
        cache.set(key, encode(result), ttl_seconds)
    return result


def first_success(
    sources: Sequence[S],
    call: Callable[[S], T],
    *,
    action: str,
) -> Optional[T]:
    """Tenta as fontes em ordem de prioridade e retorna o primeiro sucesso."""

    for source in sources:
        try:
            return call(source)
        except Exception as exc:
            log.warning(
                "%s: fonte %s falhou (%s)", action, getattr(source, "name", source), exc
            )
    return None


def gather_all(
    sources: Iterable[S],
    call: Callable[[S], list[T]],
    *,
    action: str,
) -> tuple[list[T], int, int]:
    """Consulta todas as fontes e concatena os resultados.

    Retorna ``(itens, fontes_com_sucesso, fontes_com_falha)``.
    """

    items: list[T] = []
    succeeded = failed = 0
    for source in sources:
        try:
            items.extend(call(source))
            succeeded += 1
        except Exception as exc:
            failed += 1
            log.warning(
                "%s: fonte %s falhou (%s)", action, getattr(source, "name", source), exc
            )
    return items, succeeded, failed


__all__ = ["first_success", "gather_all", "through_cache"]
