"""
Player actions for the single betting street of a round.

``apply_action`` validates and applies one action for the player whose turn
it is. It returns False, leaving the room untouched, when the action is not
allowed; turn advancement is left to the RoundEngine.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from chiptable.core.ledger import amount_owed, commit_chips, safe_int
from chiptable.game.room_state import PlayerSeat, Room

logger = logging.getLogger(__name__)


class BettingAction(Enum):
    FOLD = "fold"
    CHECK = "check"
    CALL = "call"
    BET = "bet"
    ALL_IN = "allin"


@dataclass
class ValidActions:
    can_check: bool
    call_amount: int        # 0 if can check
    can_all_in: bool
    player_stack: int


def get_valid_actions(room: Room, player: PlayerSeat, all_in_min_stack: int) -> ValidActions:
    current_bet = room.round.current_bet if room.round else 0
    owed = amount_owed(current_bet, player.street_put)
    return ValidActions(
        can_check=(owed == 0),
        call_amount=owed,
        can_all_in=(player.stack >= all_in_min_stack),
        player_stack=player.stack,
    )


def apply_action(
    room: Room,
    player: PlayerSeat,
    action: BettingAction,
    bet_to: Any = None,
    all_in_min_stack: int = 1000,
) -> bool:
    """
    Apply ``action`` for ``player``. Returns True if the room changed.

    bet_to: for BET, the street total the player wants to reach (not the increment).
    """
    rnd = room.round
    if rnd is None:
        return False
    valid = get_valid_actions(room, player, all_in_min_stack)

    if action == BettingAction.FOLD:
        player.folded = True
        room.add_log(f"{player.name} folded.")

    elif action == BettingAction.CHECK:
        if not valid.can_check:
            return _reject(player, action, f"owes {valid.call_amount}")
        room.add_log(f"{player.name} checked.")

    elif action == BettingAction.CALL:
        if valid.call_amount <= 0:
            return _reject(player, action, "nothing to call")
        paid = commit_chips(player, valid.call_amount)
        room.add_log(f"{player.name} called {paid}.")

    elif action == BettingAction.BET:
        target = _bet_target(bet_to)
        if target is None:
            return _reject(player, action, f"bad target {bet_to!r}")
        delta = target - player.street_put
        if delta <= 0:
            return _reject(player, action, f"target {target} not above {player.street_put}")
        paid = commit_chips(player, delta)
        rnd.current_bet = max(rnd.current_bet, player.street_put)
        room.add_log(f"{player.name} bet to {player.street_put} (paid {paid}).")

    elif action == BettingAction.ALL_IN:
        if not valid.can_all_in:
            return _reject(player, action, f"stack {player.stack} below {all_in_min_stack}")
        commit_chips(player, player.stack)
        rnd.current_bet = max(rnd.current_bet, player.street_put)
        room.add_log(f"{player.name} went ALL-IN to {player.street_put}.")

    else:
        raise ValueError(f"Unknown action: {action}")

    player.acted = True
    return True


def _bet_target(bet_to: Any) -> Optional[int]:
    target = safe_int(bet_to, fallback=0)
    return target if target > 0 else None


def _reject(player: PlayerSeat, action: BettingAction, reason: str) -> bool:
    logger.debug(f"Ignored {action.value} from {player.player_id}: {reason}")
    return False
