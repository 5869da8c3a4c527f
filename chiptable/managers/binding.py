"""
ConnectionBinding — ties live connections to rooms and seats.

A seat is keyed by the connection that created it: reconnecting gets a new
connection id and therefore a new seat. The old seat keeps its chips with
``connection_id=None`` until the whole room is collected.
"""
from __future__ import annotations
import logging
import uuid
from typing import Any, List

from chiptable.config import Settings
from chiptable.core.exceptions import InvalidName
from chiptable.core.ledger import safe_int
from chiptable.game.room_state import PlayerSeat, Room
from chiptable.managers.connection_manager import ConnectionManager
from chiptable.managers.room_registry import RoomRegistry

logger = logging.getLogger(__name__)


class ConnectionBinding:
    def __init__(
        self,
        registry: RoomRegistry,
        connections: ConnectionManager,
        settings: Settings,
    ) -> None:
        self.registry = registry
        self.connections = connections
        self.settings = settings

    def create_room(self, connection_id: str) -> Room:
        room = self.registry.create_room()
        self.connections.subscribe(room.code, connection_id)
        return room

    def join_room(self, connection_id: str, code: Any) -> Room:
        """Subscribe to a room's broadcasts. Raises RoomNotFound."""
        room = self.registry.lookup(code)
        self.connections.subscribe(room.code, connection_id)
        return room

    def join_as_player(self, connection_id: str, code: Any, name: Any, stack: Any = None) -> Room:
        """Seat the connection in the room, or rename its existing seat."""
        room = self.registry.lookup(code)
        clean_name = self.clean_name(name)
        self.connections.subscribe(room.code, connection_id)

        existing = room.player_for_connection(connection_id)
        if existing:
            existing.name = clean_name
            return room

        player = PlayerSeat(
            player_id=uuid.uuid4().hex[:12],
            name=clean_name,
            stack=max(0, safe_int(stack, self.settings.default_stack)),
            connection_id=connection_id,
        )
        room.players.append(player)
        room.add_log(f"{clean_name} joined.")
        logger.info(f"[{room.code}] {clean_name} seated with {player.stack} ({player.player_id})")
        return room

    def clean_name(self, name: Any) -> str:
        clean = str(name or "").strip()[: self.settings.max_name_length]
        if not clean:
            raise InvalidName()
        return clean

    def disconnect(self, connection_id: str) -> List[Room]:
        """
        Release every seat held by ``connection_id`` and collect empty rooms.

        Returns the rooms that changed and still exist, for re-broadcast.
        """
        touched = set(self.connections.disconnect(connection_id))
        for room in self.registry.rooms():
            player = room.player_for_connection(connection_id)
            if player is None:
                continue
            player.connection_id = None
            room.add_log(f"{player.name} left.")
            touched.add(room.code)

        survivors = []
        for code in sorted(touched):
            room = self.registry.get_room(code)
            if room is None:
                continue
            if self.registry.collect_if_empty(room):
                self.connections.drop_room(code)
                continue
            survivors.append(room)
        return survivors
