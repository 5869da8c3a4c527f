"""In-memory Room store, keyed by room code."""
from __future__ import annotations
import logging
import random
import string
from typing import Dict, List, Optional

from chiptable.config import Settings
from chiptable.core.exceptions import RoomNotFound
from chiptable.game.room_state import Room

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits


def normalize_code(code: object) -> str:
    return str(code or "").strip().upper()


class RoomRegistry:
    """
    Owns every live Room for the life of the process.

    Rooms are created on request and deleted only by ``collect_if_empty``
    once no seat in them has a live connection.
    """

    def __init__(self, settings: Settings, rng: Optional[random.Random] = None) -> None:
        self._settings = settings
        self._rng = rng or random.Random()
        self._rooms: Dict[str, Room] = {}

    def create_room(self) -> Room:
        code = self._new_code()
        room = Room(code=code, log_capacity=self._settings.log_capacity)
        self._rooms[code] = room
        logger.info(f"Room {code} created ({len(self._rooms)} live)")
        return room

    def _new_code(self) -> str:
        # Grow the code by one character each time the attempts run out.
        length = self._settings.room_code_length
        while True:
            for _ in range(self._settings.room_code_attempts):
                code = "".join(self._rng.choice(CODE_ALPHABET) for _ in range(length))
                if code not in self._rooms:
                    return code
            length += 1

    def get_room(self, code: object) -> Optional[Room]:
        return self._rooms.get(normalize_code(code))

    def lookup(self, code: object) -> Room:
        room = self.get_room(code)
        if room is None:
            raise RoomNotFound(code)
        return room

    def rooms(self) -> List[Room]:
        return list(self._rooms.values())

    def list_rooms(self) -> List[dict]:
        result = []
        for code, room in self._rooms.items():
            result.append({
                "roomCode": code,
                "players": len(room.players),
                "connected": sum(1 for p in room.players if p.is_connected),
                "phase": room.phase.value if room.phase else None,
            })
        return result

    def collect_if_empty(self, room: Room) -> bool:
        """Delete ``room`` if none of its seats has a live connection."""
        if room.has_connections:
            return False
        return self.delete_room(room.code)

    def delete_room(self, code: str) -> bool:
        if code in self._rooms:
            del self._rooms[code]
            logger.info(f"Room {code} deleted ({len(self._rooms)} live)")
            return True
        return False

    def __len__(self) -> int:
        return len(self._rooms)

    def __contains__(self, code: object) -> bool:
        return normalize_code(code) in self._rooms
