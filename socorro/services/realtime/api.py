"""Rota WebSocket do canal em tempo real."""
from __future__ import annotations

from fastapi import APIRouter, FastAPI, WebSocket

from socorro.container import SocorroContainer


def include_routes(app: FastAPI, container: SocorroContainer, *, prefix: str = "") -> None:
    router = APIRouter(prefix=prefix, tags=["Tempo real"])

    @router.websocket("/ws")
    async def realtime(websocket: WebSocket) -> None:
        await container.broadcaster.serve(websocket)

    app.include_router(router)


__all__ = ["include_routes"]
