"""Configurações compartilhadas carregadas a partir de variáveis de ambiente."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()

_DEFAULT_API_BIND_HOST = "0.0.0.0"
_DEFAULT_API_PORT = 5000
_DEFAULT_FRONTEND_URL = "http://localhost:3000"

# Valores de exemplo do arquivo ``.env.example`` contam como ausentes.
_PLACEHOLDER_PREFIXES = ("your_",)


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_secret(name: str) -> str | None:
    """Retorna a credencial configurada ou ``None`` quando ausente."""

    raw = (os.getenv(name) or "").strip()
    if not raw or raw.lower().startswith(_PLACEHOLDER_PREFIXES):
        return None
    return raw


def _env_list(name: str) -> tuple[str, ...]:
    raw = os.getenv(name) or ""
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@lru_cache(maxsize=None)
def get_api_port() -> int:
    """Retorna a porta configurada para expor a API."""

    return int(os.getenv("SOCORRO_API_PORT", os.getenv("PORT", _DEFAULT_API_PORT)))


@lru_cache(maxsize=None)
def get_api_bind_host() -> str:
    """Retorna o host utilizado pelo Uvicorn para escutar conexões."""

    return os.getenv("SOCORRO_API_BIND_HOST", _DEFAULT_API_BIND_HOST)


@lru_cache(maxsize=None)
def get_log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()


@dataclass(frozen=True)
class RateLimitSettings:
    """Janelas fixas (em segundos) e tetos de requisições por limitador."""

    general_window: float = 15 * 60
    general_max: int = 100
    external_api_window: float = 60
    external_api_max: int = 10
    geocoding_window: float = 60
    geocoding_max: int = 20
    social_media_window: float = 2 * 60
    social_media_max: int = 15
    image_verification_window: float = 5 * 60
    image_verification_max: int = 5
    create_disaster_window: float = 10 * 60
    create_disaster_max: int = 5
    enabled: bool = True

    @classmethod
    def from_env(cls) -> "RateLimitSettings":
        window_ms = os.getenv("RATE_LIMIT_WINDOW_MS")
        general_window = int(window_ms) / 1000 if window_ms else cls.general_window
        return cls(
            general_window=general_window,
            general_max=int(os.getenv("RATE_LIMIT_MAX_REQUESTS", cls.general_max)),
            enabled=_env_flag("RATE_LIMIT_ENABLED", True),
        )


@dataclass(frozen=True)
class Settings:
    """Configuração completa injetada no container da aplicação."""

    environment: str = "development"
    frontend_url: str = _DEFAULT_FRONTEND_URL
    storage_backend: str = "memory"
    cache_backend: str = "memory"
    gemini_api_key: str | None = None
    gemini_text_model: str = "gemini-pro"
    gemini_vision_model: str = "gemini-pro-vision"
    google_maps_api_key: str | None = None
    mapbox_access_token: str | None = None
    nominatim_enabled: bool = False
    twitter_bearer_token: str | None = None
    bluesky_identifier: str | None = None
    bluesky_password: str | None = None
    official_updates_scraping: bool = False
    official_updates_rss_feeds: tuple[str, ...] = ()
    retry_max_attempts: int = 3
    retry_base_delay: float = 1.0
    rate_limits: RateLimitSettings = field(default_factory=RateLimitSettings)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @classmethod
    def from_env(cls) -> "Settings":
        """Constrói a configuração a partir das variáveis de ambiente."""

        return cls(
            environment=os.getenv("APP_ENV", os.getenv("NODE_ENV", "development")),
            frontend_url=os.getenv("FRONTEND_URL", _DEFAULT_FRONTEND_URL),
            storage_backend=os.getenv("STORAGE_BACKEND", "memory").lower(),
            cache_backend=os.getenv("CACHE_BACKEND", "memory").lower(),
            gemini_api_key=_env_secret("GEMINI_API_KEY"),
            gemini_text_model=os.getenv("GEMINI_TEXT_MODEL", "gemini-pro"),
            gemini_vision_model=os.getenv("GEMINI_VISION_MODEL", "gemini-pro-vision"),
            google_maps_api_key=_env_secret("GOOGLE_MAPS_API_KEY"),
            mapbox_access_token=_env_secret("MAPBOX_ACCESS_TOKEN"),
            nominatim_enabled=_env_flag("NOMINATIM_ENABLED", True),
            twitter_bearer_token=_env_secret("TWITTER_BEARER_TOKEN"),
            bluesky_identifier=_env_secret("BLUESKY_IDENTIFIER"),
            bluesky_password=_env_secret("BLUESKY_PASSWORD"),
            official_updates_scraping=_env_flag("OFFICIAL_UPDATES_SCRAPING", True),
            official_updates_rss_feeds=_env_list("OFFICIAL_UPDATES_RSS_FEEDS"),
            retry_max_attempts=int(os.getenv("RETRY_MAX_ATTEMPTS", "3")),
            retry_base_delay=float(os.getenv("RETRY_BASE_DELAY", "1.0")),
            rate_limits=RateLimitSettings.from_env(),
        )


@lru_cache(maxsize=None)
def get_settings() -> Settings:
    """Retorna a configuração carregada do ambiente (memoizada)."""

    return Settings.from_env()


__all__ = [
    "RateLimitSettings",
    "Settings",
    "get_api_bind_host",
    "get_api_port",
    "get_log_level",
    "get_settings",
]
