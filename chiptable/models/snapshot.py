"""
Versioned read model of a Room, pushed to every subscriber as ``state``.

Bump SNAPSHOT_VERSION whenever a field is renamed or removed.
"""
from __future__ import annotations
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from chiptable.game.room_state import PlayerSeat, Room, Round

SNAPSHOT_VERSION = 1


class _View(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class PlayerView(_View):
    id: str
    name: str
    stack: int
    in_round: bool = Field(alias="inRound")
    folded: bool
    street_put: int = Field(alias="streetPut")
    total_put: int = Field(alias="totalPut")
    connected: bool
    connection_id: Optional[str] = Field(default=None, alias="connectionId")

    @classmethod
    def from_seat(cls, p: PlayerSeat) -> "PlayerView":
        return cls(
            id=p.player_id,
            name=p.name,
            stack=p.stack,
            in_round=p.in_round,
            folded=p.folded,
            street_put=p.street_put,
            total_put=p.total_put,
            connected=p.is_connected,
            connection_id=p.connection_id,
        )


class RoundView(_View):
    current_bet: int = Field(alias="currentBet")
    turn_index: int = Field(alias="turnIndex")
    phase: str

    @classmethod
    def from_round(cls, r: Round) -> "RoundView":
        return cls(current_bet=r.current_bet, turn_index=r.turn_index, phase=r.phase.value)


class RoomSnapshot(_View):
    version: int = SNAPSHOT_VERSION
    room_code: str = Field(alias="roomCode")
    created_at: int = Field(alias="createdAt")   # epoch milliseconds
    dealer_index: int = Field(alias="dealerIndex")
    pot: int
    players: List[PlayerView]
    round: Optional[RoundView] = None
    log: List[str]

    @classmethod
    def from_room(cls, room: Room) -> "RoomSnapshot":
        return cls(
            room_code=room.code,
            created_at=int(room.created_at * 1000),
            dealer_index=room.dealer_index,
            pot=room.pot,
            players=[PlayerView.from_seat(p) for p in room.players],
            round=RoundView.from_round(room.round) if room.round else None,
            log=list(room.log),
        )


def snapshot_payload(room: Room) -> dict:
    return RoomSnapshot.from_room(room).model_dump(by_alias=True)
