"""Envelopes JSON padronizados das respostas da API."""
from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

from socorro.domain.entities import utcnow


def _timestamp() -> str:
    return utcnow().isoformat()


def success(
    data: Any = None, message: str = "", errors: Iterable[Any] = ()
) -> Dict[str, Any]:
    """Envelope de sucesso: ``{success, data, message, errors, timestamp}``."""

    return {
        "success": True,
        "data": data,
        "message": message,
        "errors": list(errors),
        "timestamp": _timestamp(),
    }


def failure(
    message: str,
    errors: Iterable[Any] = (),
    status_code: int = 500,
    *,
    extra: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Envelope de erro com ``statusCode``; ``extra`` acrescenta campos (ex.: ``retryAfter``)."""

    payload: Dict[str, Any] = {
        "success": False,
        "data": None,
        "message": message,
        "errors": list(errors),
        "statusCode": status_code,
        "timestamp": _timestamp(),
    }
    if extra:
        payload.update(extra)
    return payload


__all__ = ["failure", "success"]
