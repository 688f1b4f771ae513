"""WebSocket endpoint for real-time notification pushes.

The JWT comes in the ?token= query parameter. The connection is registered
under the token's user id with the ConnectionManager on app.state.
"""

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from workpaper.api.v1.dependencies.auth import actor_from_token
from workpaper.domain.exceptions import AuthenticationException

logger = logging.getLogger(__name__)

router = APIRouter()

POLICY_VIOLATION = 1008


async def _reject_websocket(websocket: WebSocket, reason: str) -> None:
    """Accept then close so the client receives a proper close frame."""
    await websocket.accept()
    await websocket.close(code=POLICY_VIOLATION, reason=reason)


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    manager = websocket.app.state.ws_manager
    token = websocket.query_params.get("token")
    if not token:
        await _reject_websocket(websocket, "Missing token")
        return
    try:
        actor = actor_from_token(token)
    except AuthenticationException:
        await _reject_websocket(websocket, "Invalid token")
        return
    await manager.connect(websocket, actor.user_id)
    logger.debug("WebSocket connected for user %s", actor.user_id)
    try:
        while True:
            # Pushes are server to client; only keepalive pings are answered.
            data = await websocket.receive_text()
            if data == "ping":
                await websocket.send_text("pong")
    except WebSocketDisconnect:
        pass
    finally:
        await manager.disconnect(websocket)
