"""Turn order, dealer rotation and street-closure rules."""
from __future__ import annotations
from typing import List, Optional

from chiptable.core.ledger import amount_owed
from chiptable.game.room_state import NO_TURN, PlayerSeat, Room


def can_act(player: PlayerSeat, current_bet: int) -> bool:
    """True if the player still has a decision to make this round.

    A player is done once they have acted and owe nothing; a player with an
    empty stack has nothing left to decide.
    """
    if not player.is_active or player.stack <= 0:
        return False
    return not player.acted or amount_owed(current_bet, player.street_put) > 0


def next_actor_index(players: List[PlayerSeat], from_index: int, current_bet: int) -> int:
    """Index of the first player after ``from_index`` who can act, or NO_TURN.

    Scans at most one full lap, wrapping around the player list.
    """
    n = len(players)
    if n == 0:
        return NO_TURN
    for offset in range(1, n + 1):
        idx = (from_index + offset) % n
        if can_act(players[idx], current_bet):
            return idx
    return NO_TURN


def first_to_act(room: Room) -> int:
    """First actor of a fresh round: the seat after the dealer."""
    current_bet = room.round.current_bet if room.round else 0
    return next_actor_index(room.players, room.normalized_dealer_index(), current_bet)


def last_player_standing(room: Room) -> Optional[PlayerSeat]:
    active = room.active_players
    return active[0] if len(active) == 1 else None


def advance_dealer(room: Room) -> int:
    """Move the dealer button one seat. Returns the new dealer index."""
    n = len(room.players)
    room.dealer_index = (room.dealer_index + 1) % n if n else 0
    return room.dealer_index
