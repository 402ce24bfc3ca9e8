"""WebSocket fan-out for wizard session updates."""

import logging

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class WebSocketManager:
    """Tracks the sockets watching each wizard session.

    Every session can have any number of viewers. Messages are either
    progress ticks (``{"type": "progress", "value": n}``) or full state
    snapshots (``{"type": "state", "state": {...}}``).
    """

    def __init__(self):
        self.connections: dict[str, list[WebSocket]] = {}

    async def connect(self, session_id: str, websocket: WebSocket) -> None:
        """Accept a socket and register it under the session."""
        await websocket.accept()
        self.connections.setdefault(session_id, []).append(websocket)

    async def broadcast(self, session_id: str, message: dict) -> None:
        """Send a message to every viewer of a session.

        Sockets that fail to receive are dropped.
        """
        stale = []
        for ws in self.connections.get(session_id, []):
            try:
                await ws.send_json(message)
            except Exception as e:
                logger.debug(f"Dropping websocket for session {session_id}: {e}")
                stale.append(ws)

        for ws in stale:
            self.disconnect(session_id, ws)

    async def send_progress(self, session_id: str, value: int) -> None:
        await self.broadcast(session_id, {"type": "progress", "value": value})

    async def send_state(self, session_id: str, state: dict) -> None:
        await self.broadcast(session_id, {"type": "state", "state": state})

    def disconnect(self, session_id: str, websocket: WebSocket) -> None:
        """Remove one socket from a session."""
        sockets = self.connections.get(session_id, [])
        if websocket in sockets:
            sockets.remove(websocket)

    def cleanup(self, session_id: str) -> None:
        """Forget every socket of a session."""
        self.connections.pop(session_id, None)
