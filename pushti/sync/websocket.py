# -*- coding: utf-8 -*-
"""
Sync WebSocket module

Forwards every storage change to connected clients so other open views of the
same data can refresh.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Optional
from uuid import uuid4

from fastapi import WebSocket, WebSocketDisconnect

from ..storage import ChangeChannel, StorageChange

logger = logging.getLogger(__name__)


@dataclass
class SyncConnection:
    connection_id: str
    websocket: WebSocket
    loop: asyncio.AbstractEventLoop
    connected_at: datetime
    queue: "asyncio.Queue[Dict[str, Any]]" = field(default_factory=asyncio.Queue)


class SyncHub:
    """Fan-out of storage changes to WebSocket clients."""

    def __init__(self, channel: ChangeChannel) -> None:
        self.channel = channel
        self.active_connections: Dict[str, SyncConnection] = {}
        self._unsubscribe: Optional[Callable[[], None]] = channel.subscribe_all(self._on_change)

    async def connect(self, websocket: WebSocket) -> SyncConnection:
        await websocket.accept()
        conn = SyncConnection(
            connection_id=str(uuid4()),
            websocket=websocket,
            loop=asyncio.get_running_loop(),
            connected_at=datetime.now(),
        )
        self.active_connections[conn.connection_id] = conn
        logger.info("sync client connected: %s", conn.connection_id)

        await websocket.send_json({
            "type": "connected",
            "connection_id": conn.connection_id,
            "timestamp": conn.connected_at.isoformat(),
        })
        return conn

    def disconnect(self, connection_id: str) -> None:
        if self.active_connections.pop(connection_id, None) is not None:
            logger.info("sync client disconnected: %s", connection_id)

    def _on_change(self, change: StorageChange) -> None:
        message = {"type": "change", **change.to_dict()}
        for conn in list(self.active_connections.values()):
            # Writers may run outside the connection's loop thread.
            conn.loop.call_soon_threadsafe(conn.queue.put_nowait, message)

    async def pump(self, conn: SyncConnection) -> None:
        """Send queued messages to one client until cancelled."""
        while True:
            message = await conn.queue.get()
            await conn.websocket.send_json(message)

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.active_connections.clear()


async def websocket_endpoint(websocket: WebSocket) -> None:
    hub: SyncHub = websocket.app.state.sync_hub
    conn = await hub.connect(websocket)
    sender = asyncio.create_task(hub.pump(conn))

    try:
        while True:
            data = await websocket.receive_json()
            if isinstance(data, dict) and data.get("type") == "ping":
                conn.queue.put_nowait({"type": "pong"})
    except WebSocketDisconnect:
        pass
    except Exception as exc:
        logger.error("sync websocket error: %s", exc)
    finally:
        sender.cancel()
        hub.disconnect(conn.connection_id)
