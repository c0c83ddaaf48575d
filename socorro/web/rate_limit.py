"""Limitadores de taxa em janela fixa, por endereço de cliente."""
from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from fastapi import Request

from socorro.settings import RateLimitSettings

from .auth import user_id_from_request
from .errors import RateLimitError

log = logging.getLogger("socorro.rate_limit")


def client_key(request: Request) -> str:
    """Identifica o cliente pelo IP ou, se ausente, pelo usuário informado."""

    if request.client is not None and request.client.host:
        return request.client.host
    return user_id_from_request(request) or "anonymous"


class FixedWindowRateLimiter:
    """Conta requisições por cliente numa janela fixa de ``window_seconds``."""

    def __init__(
        self,
        name: str,
        max_requests: int,
        window_seconds: float,
        message: str,
        *,
        enabled: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.name = name
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.message = message
        self.enabled = enabled
        self._clock = clock
        # chave do cliente -> (início da janela, contagem)
        self._windows: Dict[str, tuple[float, int]] = {}
        self._lock = threading.Lock()
        self._last_sweep = clock()

    @property
    def tracked_clients(self) -> int:
        with self._lock:
            return len(self._windows)

    def hit(self, key: str) -> Optional[int]:
        """Registra uma requisição; devolve os segundos de espera se excedeu."""

        if not self.enabled:
            return None
        now = self._clock()
        with self._lock:
            if now - self._last_sweep >= self.window_seconds:
                self._drop_expired(now)
            started, count = self._windows.get(key, (now, 0))
            if now - started >= self.window_seconds:
                started, count = now, 0
            count += 1
            self._windows[key] = (started, count)
        if count > self.max_requests:
            return max(1, math.ceil(started + self.window_seconds - now))
        return None

    def clear_expired(self) -> int:
        """Remove as janelas encerradas; devolve quantos clientes foram esquecidos."""

        with self._lock:
            return self._drop_expired(self._clock())

    def _drop_expired(self, now: float) -> int:
        expired = [
            key
            for key, (started, _) in self._windows.items()
            if now - started >= self.window_seconds
        ]
        for key in expired:
            del self._windows[key]
        self._last_sweep = now
        return len(expired)

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()

    def dependency(self, request: Request) -> None:
        retry_after = self.hit(client_key(request))
        if retry_after is not None:
            log.warning(
                "limitador %s excedido por %s em %s",
                self.name,
                client_key(request),
                request.url.path,
            )
            raise RateLimitError(self.message, retry_after)


@dataclass(frozen=True)
class RateLimiters:
    general: FixedWindowRateLimiter
    external_api: FixedWindowRateLimiter
    geocoding: FixedWindowRateLimiter
    social_media: FixedWindowRateLimiter
    image_verification: FixedWindowRateLimiter
    create_disaster: FixedWindowRateLimiter

    @classmethod
    def from_settings(
        cls,
        settings: RateLimitSettings,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> "RateLimiters":
        def build(name: str, max_requests: int, window: float, message: str) -> FixedWindowRateLimiter:
            return FixedWindowRateLimiter(
                name,
                max_requests,
                window,
                message,
                enabled=settings.enabled,
                clock=clock,
            )

        return cls(
            general=build(
                "general",
                settings.general_max,
                settings.general_window,
                "Too many requests from this IP, please try again later.",
            ),
            external_api=build(
                "external_api",
                settings.external_api_max,
                settings.external_api_window,
                "Too many external API requests, please try again later.",
            ),
            geocoding=build(
                "geocoding",
                settings.geocoding_max,
                settings.geocoding_window,
                "Too many geocoding requests, please try again later.",
            ),
            social_media=build(
                "social_media",
                settings.social_media_max,
                settings.social_media_window,
                "Too many social media requests, please try again later.",
            ),
            image_verification=build(
                "image_verification",
                settings.image_verification_max,
                settings.image_verification_window,
                "Too many image verification requests, please try again later.",
            ),
            create_disaster=build(
                "create_disaster",
                settings.create_disaster_max,
                settings.create_disaster_window,
                "Too many disaster creation requests, please try again later.",
            ),
        )

    def reset(self) -> None:
        for limiter in (
            self.general,
            self.external_api,
            self.geocoding,
            self.social_media,
            self.image_verification,
            self.create_disaster,
        ):
            limiter.reset()


__all__ = ["FixedWindowRateLimiter", "RateLimiters", "client_key"]
