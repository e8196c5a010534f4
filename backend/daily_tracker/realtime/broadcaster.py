"""Fan-out of entity change events to connected WebSocket clients.

Best-effort only: no replay for late joiners, no retry on failed sends.
"""

import asyncio
import json
import logging
import threading
from typing import Any

from fastapi import WebSocket
from fastapi.encoders import jsonable_encoder
from starlette.websockets import WebSocketState

logger = logging.getLogger(__name__)


class Broadcaster:
    def __init__(self) -> None:
        self._clients: set[WebSocket] = set()
        self._lock = threading.Lock()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._pending: set[asyncio.Task] = set()

    @property
    def client_count(self) -> int:
        with self._lock:
            return len(self._clients)

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self._loop = asyncio.get_running_loop()
        with self._lock:
            self._clients.add(websocket)
        logger.info("WebSocket client connected (%d total)", self.client_count)

    def disconnect(self, websocket: WebSocket) -> None:
        with self._lock:
            self._clients.discard(websocket)
        logger.info("WebSocket client disconnected (%d total)", self.client_count)

    async def broadcast(self, event: str, data: Any) -> int:
        """Send ``{event, data}`` to every open client. Returns deliveries."""
        message = json.dumps({"event": event, "data": jsonable_encoder(data)})
        with self._lock:
            clients = list(self._clients)

        delivered = 0
        for client in clients:
            if client.client_state != WebSocketState.CONNECTED:
                self.disconnect(client)
                continue
            try:
                await client.send_text(message)
                delivered += 1
            except Exception:
                logger.warning("Broadcast of %s to a client failed, dropping it", event, exc_info=True)
                self.disconnect(client)
        logger.debug("Broadcast %s to %d/%d clients", event, delivered, len(clients))
        return delivered

    def publish(self, event: str, data: Any) -> None:
        """Schedule a broadcast from synchronous request handlers."""
        loop = self._loop
        if loop is None or loop.is_closed() or not self.client_count:
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            task = loop.create_task(self.broadcast(event, data))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
        else:
            asyncio.run_coroutine_threadsafe(self.broadcast(event, data), loop)

    async def handle_message(self, websocket: WebSocket, raw: str) -> None:
        """Answer liveness pings; anything else is ignored."""
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError:
            logger.debug("Ignoring non-JSON WebSocket message")
            return
        if isinstance(payload, dict) and payload.get("type") == "ping":
            await websocket.send_text(json.dumps({"type": "pong"}))
