"""WebSocket connection manager.

Holds active connections per user and delivers notification pushes to
them. Use via app.state.ws_manager (set in lifespan). A user may have
several open tabs; each gets every message.
"""

from __future__ import annotations

import asyncio
from typing import Any

from fastapi import WebSocket


class ConnectionManager:
    """Tracks WebSocket connections by user id.

    Dead connections found while sending are dropped under the lock.
    """

    def __init__(self) -> None:
        self._connections_by_user: dict[str, set[WebSocket]] = {}
        self._websocket_to_user: dict[WebSocket, str] = {}
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket, user_id: str) -> None:
        """Accept and register a connection for user_id (from the verified token)."""
        await websocket.accept()
        async with self._lock:
            self._connections_by_user.setdefault(user_id, set()).add(websocket)
            self._websocket_to_user[websocket] = user_id

    async def disconnect(self, websocket: WebSocket) -> None:
        async with self._lock:
            self._forget(websocket)

    async def send_to_user(self, user_id: str, message: str | dict[str, Any]) -> int:
        """Send message to every connection of user_id; return how many received it."""
        async with self._lock:
            snapshot = list(self._connections_by_user.get(user_id, set()))
        return await self._send_to_list(snapshot, message)

    async def _send_to_list(
        self,
        connections: list[WebSocket],
        message: str | dict[str, Any],
    ) -> int:
        dead: list[WebSocket] = []
        delivered = 0
        for ws in connections:
            try:
                if isinstance(message, dict):
                    await ws.send_json(message)
                else:
                    await ws.send_text(message)
            except Exception:
                dead.append(ws)
            else:
                delivered += 1
        if dead:
            async with self._lock:
                for ws in dead:
                    self._forget(ws)
        return delivered

    def _forget(self, websocket: WebSocket) -> None:
        """Drop websocket from both indexes. Caller holds the lock."""
        user_id = self._websocket_to_user.pop(websocket, None)
        if user_id and user_id in self._connections_by_user:
            conns = self._connections_by_user[user_id]
            conns.discard(websocket)
            if not conns:
                del self._connections_by_user[user_id]

    async def get_connection_count(self) -> int:
        async with self._lock:
            return sum(len(c) for c in self._connections_by_user.values())
