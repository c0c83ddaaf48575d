"""Configuração de logging e helpers de log estruturado."""
from __future__ import annotations

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

_service_log = logging.getLogger("socorro.external")
_cache_log = logging.getLogger("socorro.cache")
_geo_log = logging.getLogger("socorro.geospatial")
_disaster_log = logging.getLogger("socorro.disasters")


def configure_logging(level: str | int = "INFO", *, console: Console | None = None) -> None:
    """Configura o logger raiz com saída via ``RichHandler``."""

    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    handler = RichHandler(console=console or Console(), markup=False, rich_tracebacks=True)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )


def log_external_call(
    service: str, action: str, success: bool, elapsed_ms: int, **details: Any
) -> None:
    """Registra o resultado de uma chamada a serviço externo."""

    level = logging.INFO if success else logging.ERROR
    _service_log.log(
        level,
        "serviço externo %s.%s %s em %dms %s",
        service,
        action,
        "ok" if success else "falhou",
        elapsed_ms,
        details or "",
    )


def log_cache(operation: str, key: str, hit: bool) -> None:
    _cache_log.debug("cache %s %s (hit=%s)", operation, key, hit)


def log_geospatial_query(
    query_type: str, center: Any, radius_km: float, result_count: int, elapsed_ms: int
) -> None:
    _geo_log.info(
        "consulta geoespacial %s centro=%s raio=%skm resultados=%d em %dms",
        query_type,
        center,
        radius_km,
        result_count,
        elapsed_ms,
    )


def log_disaster_action(action: str, disaster_id: str, user_id: str, **details: Any) -> None:
    _disaster_log.info(
        "desastre %s %s por %s %s", action, disaster_id, user_id, details or ""
    )


__all__ = [
    "configure_logging",
    "log_cache",
    "log_disaster_action",
    "log_external_call",
    "log_geospatial_query",
]
