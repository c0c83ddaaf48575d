"""Ponto de entrada REST que agrega os serviços do Socorro."""
from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from socorro.container import SocorroContainer, build_container
from socorro.domain.entities import utcnow
from socorro.logging_config import configure_logging
from socorro.services.disasters.api import include_routes as include_disaster_routes
from socorro.services.geocoding.api import include_routes as include_geocoding_routes
from socorro.services.image_verification.api import (
    include_routes as include_image_verification_routes,
)
from socorro.services.official_updates.api import (
    include_routes as include_official_update_routes,
)
from socorro.services.realtime.api import include_routes as include_realtime_routes
from socorro.services.resources.api import include_routes as include_resource_routes
from socorro.services.social_media.api import include_routes as include_social_media_routes
from socorro.settings import get_api_bind_host, get_api_port, get_log_level
from socorro.web import install_exception_handlers

log = logging.getLogger(__name__)


def configure_cors(app: FastAPI, frontend_url: str) -> None:
    """Libera o frontend configurado em ``FRONTEND_URL``."""

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[frontend_url],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "x-user-id"],
    )


def create_app(container: Optional[SocorroContainer] = None) -> FastAPI:
    """Cria a aplicação FastAPI com todas as rotas de serviços configuradas."""

    container = container or build_container()
    settings = container.settings
    started = time.monotonic()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("API iniciada em modo %s", settings.environment)
        yield
        container.close()

    app = FastAPI(
        title="Socorro API",
        version="1.0.0",
        description=(
            "Coordenação de resposta a desastres: cadastro de ocorrências e "
            "recursos, enriquecidos com geocodificação, redes sociais, "
            "comunicados oficiais e verificação de imagens."
        ),
        lifespan=lifespan,
    )
    app.state.container = container
    configure_cors(app, settings.frontend_url)
    install_exception_handlers(app, production=settings.is_production)

    @app.get("/health", tags=["Saúde"])
    def health() -> Dict[str, Any]:
        return {
            "status": "OK",
            "timestamp": utcnow().isoformat(),
            "uptime": round(time.monotonic() - started, 3),
            "environment": settings.environment,
        }

    include_disaster_routes(app, container)
    include_geocoding_routes(app, container)
    include_social_media_routes(app, container)
    include_resource_routes(app, container)
    include_official_update_routes(app, container)
    include_image_verification_routes(app, container)
    include_realtime_routes(app, container)
    return app


def run() -> None:
    """Executa a API agregada utilizando o Uvicorn."""

    load_dotenv()
    configure_logging(get_log_level())
    uvicorn.run(
        "socorro.api:create_app",
        host=get_api_bind_host(),
        port=get_api_port(),
        factory=True,
        log_config=None,
    )


__all__ = ["configure_cors", "create_app", "run"]
