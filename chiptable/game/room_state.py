"""Room, Round and PlayerSeat dataclasses, and the RoundPhase enum."""
from __future__ import annotations
import time
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Deque, List, Optional

from chiptable.core.ledger import total_pot

NO_TURN = -1


class RoundPhase(Enum):
    RUNNING = "running"
    PAY = "pay"
    ENDED = "ended"


@dataclass
class PlayerSeat:
    """A seat at the table. Survives disconnects; only dropped with its room."""
    player_id: str
    name: str
    stack: int
    connection_id: Optional[str] = None
    in_round: bool = False
    folded: bool = False
    street_put: int = 0    # chips put in this round
    total_put: int = 0     # same as street_put: a round is a single street
    acted: bool = False    # has acted since the round started

    @property
    def is_connected(self) -> bool:
        return self.connection_id is not None

    @property
    def is_active(self) -> bool:
        """Still contesting the pot."""
        return self.in_round and not self.folded

    def reset_round_fields(self, in_round: bool) -> None:
        self.in_round = in_round
        self.folded = False
        self.street_put = 0
        self.total_put = 0
        self.acted = False


@dataclass
class Round:
    current_bet: int = 0
    turn_index: int = NO_TURN
    phase: RoundPhase = RoundPhase.RUNNING


@dataclass
class Room:
    code: str
    log_capacity: int = 80
    created_at: float = field(default_factory=time.time)
    players: List[PlayerSeat] = field(default_factory=list)
    dealer_index: int = 0
    round: Optional[Round] = None
    log: Deque[str] = field(init=False)
    log_seq: int = field(default=0, init=False)   # lines ever logged, never reset

    def __post_init__(self) -> None:
        self.log = deque(maxlen=self.log_capacity)

    def add_log(self, message: str) -> None:
        self.log.append(str(message))
        self.log_seq += 1

    def clear_log(self) -> None:
        self.log.clear()

    @property
    def pot(self) -> int:
        return total_pot(self.players)

    @property
    def active_players(self) -> List[PlayerSeat]:
        return [p for p in self.players if p.is_active]

    @property
    def phase(self) -> Optional[RoundPhase]:
        return self.round.phase if self.round else None

    @property
    def current_actor(self) -> Optional[PlayerSeat]:
        if self.round is None or self.round.turn_index == NO_TURN:
            return None
        if 0 <= self.round.turn_index < len(self.players):
            return self.players[self.round.turn_index]
        return None

    @property
    def has_connections(self) -> bool:
        return any(p.is_connected for p in self.players)

    def get_player(self, player_id: str) -> Optional[PlayerSeat]:
        for p in self.players:
            if p.player_id == player_id:
                return p
        return None

    def player_for_connection(self, connection_id: str) -> Optional[PlayerSeat]:
        for p in self.players:
            if p.connection_id == connection_id:
                return p
        return None

    def normalized_dealer_index(self) -> int:
        n = len(self.players)
        return self.dealer_index % n if n else 0
