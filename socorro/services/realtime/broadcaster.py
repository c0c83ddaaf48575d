"""Difusão de eventos em tempo real para clientes WebSocket."""
from __future__ import annotations

import asyncio
import json
import logging
import threading
from typing import Any, Dict, Mapping, Optional

from fastapi import WebSocket, WebSocketDisconnect

from socorro.domain.ports import Notifier

log = logging.getLogger(__name__)


def room_for(disaster_id: str) -> str:
    return f"disaster_{disaster_id}"


class WebSocketBroadcaster(Notifier):
    """Mantém as conexões abertas e as salas ``disaster_<id>`` de cada uma.

    ``publish`` pode ser chamado a partir das threads do servidor: as
    mensagens são entregues ao laço de eventos dono dos sockets. Não há
    fila nem reenvio; clientes desconectados simplesmente não recebem.
    """

    def __init__(self) -> None:
        # chave: id() do socket; valor: (socket, salas)
        self._clients: Dict[int, tuple[WebSocket, set[str]]] = {}
        self._lock = threading.Lock()
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def connection_count(self) -> int:
        with self._lock:
            return len(self._clients)

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self._loop = asyncio.get_running_loop()
        with self._lock:
            self._clients[id(websocket)] = (websocket, set())
        log.info("cliente conectado (%d ativos)", self.connection_count)

    def disconnect(self, websocket: WebSocket) -> None:
        with self._lock:
            self._clients.pop(id(websocket), None)
        log.info("cliente desconectado (%d ativos)", self.connection_count)

    def join(self, websocket: WebSocket, disaster_id: str) -> None:
        with self._lock:
            client = self._clients.get(id(websocket))
            if client is not None:
                client[1].add(room_for(disaster_id))

    def leave(self, websocket: WebSocket, disaster_id: str) -> None:
        with self._lock:
            client = self._clients.get(id(websocket))
            if client is not None:
                client[1].discard(room_for(disaster_id))

    def publish(
        self, event: str, payload: Mapping[str, Any], topic: Optional[str] = None
    ) -> None:
        loop = self._loop
        if loop is None or loop.is_closed():
            log.debug("evento %s descartado: nenhum cliente conectado", event)
            return
        with self._lock:
            if topic is None:
                targets = [ws for ws, _ in self._clients.values()]
            else:
                room = room_for(topic)
                targets = [ws for ws, rooms in self._clients.values() if room in rooms]
        message = {"event": event, "data": dict(payload)}
        for websocket in targets:
            asyncio.run_coroutine_threadsafe(self._send(websocket, message), loop)
        log.debug("evento %s enviado a %d cliente(s)", event, len(targets))

    async def _send(self, websocket: WebSocket, message: Dict[str, Any]) -> None:
        try:
            await websocket.send_json(message)
        except Exception as exc:
            log.debug("falha ao enviar para cliente; removendo conexão: %s", exc)
            self.disconnect(websocket)

    async def serve(self, websocket: WebSocket) -> None:
        """Atende um cliente até a desconexão.

        Mensagens aceitas: ``{"event": "join_disaster" | "leave_disaster",
        "data": "<id>"}``.
        """

        await self.connect(websocket)
        try:
            while True:
                raw = await websocket.receive_text()
                try:
                    message = json.loads(raw)
                except ValueError:
                    message = None
                event = message.get("event") if isinstance(message, dict) else None
                disaster_id = message.get("data") if isinstance(message, dict) else None
                if not isinstance(disaster_id, str) or not disaster_id:
                    await websocket.send_json(
                        {"event": "error", "data": {"message": "disaster id is required"}}
                    )
                    continue
                if event == "join_disaster":
                    self.join(websocket, disaster_id)
                    await websocket.send_json(
                        {"event": "joined_disaster", "data": {"disasterId": disaster_id}}
                    )
                elif event == "leave_disaster":
                    self.leave(websocket, disaster_id)
                    await websocket.send_json(
                        {"event": "left_disaster", "data": {"disasterId": disaster_id}}
                    )
                else:
                    await websocket.send_json(
                        {"event": "error", "data": {"message": f"unknown event: {event}"}}
                    )
        except WebSocketDisconnect:
            pass
        finally:
            self.disconnect(websocket)


__all__ = ["WebSocketBroadcaster", "room_for"]
