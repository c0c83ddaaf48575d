"""Repetição de chamadas externas com espera exponencial."""
from __future__ import annotations

import logging
import time
from typing import Callable, TypeVar

T = TypeVar("T")

log = logging.getLogger(__name__)


def retry_with_backoff(
    operation: Callable[[], T],
    max_attempts: int = 3,
    base_delay: float = 1.0,
    *,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Executa ``operation`` até ``max_attempts`` vezes.

    Entre tentativas aguarda ``base_delay * 2 ** tentativa`` segundos (1s, 2s,
    4s...). Qualquer exceção é tratada igualmente; a última é propagada
    quando todas as tentativas falham.
    """

    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")
    for attempt in range(max_attempts):
        try:
            return operation()
        except Exception as exc:
            if attempt == max_attempts - 1:
                raise
            delay = base_delay * (2 ** attempt)
            log.warning(
                "tentativa %d/%d falhou (%s); nova tentativa em %.1fs",
                attempt + 1,
                max_attempts,
                exc,
                delay,
            )
            sleep(delay)
    raise AssertionError("unreachable")


__all__ = ["retry_with_backoff"]
