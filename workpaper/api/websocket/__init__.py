"""WebSocket connection manager for real-time notification pushes."""

from workpaper.api.websocket.manager import ConnectionManager

__all__ = ["ConnectionManager"]
