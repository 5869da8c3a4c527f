"""
WebSocket connection registry.

Maintains connection_id → WebSocket and room_code → {connection_id}.
Every connection gets an opaque id on accept; rooms broadcast to the ids
subscribed to them.
"""
from __future__ import annotations
import asyncio
import logging
import uuid
from typing import Dict, Set

from fastapi import WebSocket

from chiptable.models.events import ServerEvent

logger = logging.getLogger(__name__)


class ConnectionManager:
    def __init__(self) -> None:
        self._sockets: Dict[str, WebSocket] = {}
        # room_code → { connection_id }
        self._subscribers: Dict[str, Set[str]] = {}

    async def connect(self, websocket: WebSocket) -> str:
        await websocket.accept()
        connection_id = uuid.uuid4().hex[:12]
        self._sockets[connection_id] = websocket
        logger.info(f"Connected: {connection_id}")
        return connection_id

    def disconnect(self, connection_id: str) -> Set[str]:
        """Forget a connection. Returns the room codes it was subscribed to."""
        self._sockets.pop(connection_id, None)
        rooms = set()
        for code in list(self._subscribers):
            members = self._subscribers[code]
            if connection_id in members:
                members.discard(connection_id)
                rooms.add(code)
                if not members:
                    del self._subscribers[code]
        logger.info(f"Disconnected: {connection_id}")
        return rooms

    def subscribe(self, room_code: str, connection_id: str) -> None:
        self._subscribers.setdefault(room_code, set()).add(connection_id)

    def drop_room(self, room_code: str) -> None:
        self._subscribers.pop(room_code, None)

    async def send_personal(self, connection_id: str, event_type: str, payload: dict) -> None:
        """Send a message to a single connection."""
        ws = self._sockets.get(connection_id)
        if ws:
            await self._safe_send(ws, connection_id, event_type, payload)

    async def broadcast(self, room_code: str, event_type: str, payload: dict) -> None:
        """Send the same payload to every connection subscribed to ``room_code``."""
        tasks = []
        for connection_id in list(self._subscribers.get(room_code, ())):
            ws = self._sockets.get(connection_id)
            if ws is None:
                continue
            tasks.append(self._safe_send(ws, connection_id, event_type, payload))
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _safe_send(
        self,
        ws: WebSocket,
        connection_id: str,
        event_type: str,
        payload: dict,
    ) -> None:
        try:
            await ws.send_json(ServerEvent(type=event_type, payload=payload).model_dump())
        except Exception as e:
            # The receive loop of this socket handles the actual disconnect.
            logger.warning(f"WS send failed {connection_id}: {e}")
            self._sockets.pop(connection_id, None)

    def is_connected(self, connection_id: str) -> bool:
        return connection_id in self._sockets

    def is_subscribed(self, room_code: str, connection_id: str) -> bool:
        return connection_id in self._subscribers.get(room_code, ())

    def subscriber_count(self, room_code: str) -> int:
        return len(self._subscribers.get(room_code, ()))
