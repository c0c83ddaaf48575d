"""Canal de eventos em tempo real (WebSocket)."""

from .broadcaster import WebSocketBroadcaster, room_for

__all__ = ["WebSocketBroadcaster", "room_for"]
