"""
RoundEngine — the per-room round state machine.

Phases:
  (no round) → RUNNING → PAY → ENDED → (no round, dealer advanced)
  RUNNING → ENDED directly when everyone but one player folds.

Every operation mutates the room synchronously and returns True when the
room changed, so the caller knows whether to broadcast. Requests that are
not allowed in the current state are dropped and return False; only
settlement problems raise (they are reported to the client).
"""
from __future__ import annotations
import logging
from typing import Any, Dict, Optional

from chiptable.config import Settings
from chiptable.core.exceptions import MalformedPayment, SettlementSumMismatch
from chiptable.core.ledger import safe_int
from chiptable.game.betting import BettingAction, apply_action, get_valid_actions, ValidActions
from chiptable.game.room_state import NO_TURN, PlayerSeat, Room, Round, RoundPhase
from chiptable.game.rules import (
    advance_dealer,
    first_to_act,
    last_player_standing,
    next_actor_index,
)

logger = logging.getLogger(__name__)


class RoundEngine:
    def __init__(self, settings: Settings) -> None:
        self.all_in_min_stack = settings.all_in_min_stack

    # ------------------------------------------------------------------
    # Lifecycle (host commands)
    # ------------------------------------------------------------------

    def start_round(self, room: Room) -> bool:
        if len(room.players) < 2:
            logger.debug(f"[{room.code}] start ignored: {len(room.players)} player(s)")
            return False
        if room.round is not None and room.round.phase != RoundPhase.ENDED:
            logger.debug(f"[{room.code}] start ignored: round is {room.round.phase.value}")
            return False

        for p in room.players:
            p.reset_round_fields(in_round=True)

        room.clear_log()
        room.add_log("Round started.")
        room.round = Round(current_bet=0, turn_index=NO_TURN, phase=RoundPhase.RUNNING)
        room.round.turn_index = first_to_act(room)
        logger.info(f"[{room.code}] round started, dealer={room.normalized_dealer_index()} "
                    f"first={room.round.turn_index}")

        if room.round.turn_index == NO_TURN:
            # nobody has chips to act with
            self.go_to_pay(room)
        return True

    def go_to_pay(self, room: Room) -> bool:
        if room.round is None or room.round.phase != RoundPhase.RUNNING:
            return False
        room.round.phase = RoundPhase.PAY
        room.round.turn_index = NO_TURN
        room.add_log("Going to payment.")
        logger.info(f"[{room.code}] pay phase, pot={room.pot}")
        return True

    def end_round(self, room: Room) -> bool:
        if room.round is None or room.round.phase == RoundPhase.ENDED:
            return False
        room.round.phase = RoundPhase.ENDED
        room.round.turn_index = NO_TURN
        for p in room.players:
            p.reset_round_fields(in_round=False)
        logger.info(f"[{room.code}] round ended")
        return True

    def next_round(self, room: Room) -> bool:
        if room.round is None or room.round.phase != RoundPhase.ENDED:
            return False
        advance_dealer(room)
        room.round = None
        room.clear_log()
        return True

    # ------------------------------------------------------------------
    # Player actions
    # ------------------------------------------------------------------

    def actor_for(self, room: Room, connection_id: str) -> Optional[PlayerSeat]:
        """The player to act, if ``connection_id`` is bound to them and betting is open."""
        if room.round is None or room.round.phase != RoundPhase.RUNNING:
            return None
        actor = room.current_actor
        if actor is None or actor.connection_id != connection_id:
            return None
        return actor

    def valid_actions(self, room: Room, player: PlayerSeat) -> ValidActions:
        return get_valid_actions(room, player, self.all_in_min_stack)

    def act(self, room: Room, connection_id: str, action: BettingAction, bet_to: Any = None) -> bool:
        actor = self.actor_for(room, connection_id)
        if actor is None:
            logger.debug(f"[{room.code}] {action.value} from {connection_id} ignored: not their turn")
            return False
        if not apply_action(room, actor, action, bet_to, self.all_in_min_stack):
            return False
        self.advance_turn_or_end(room)
        return True

    def advance_turn_or_end(self, room: Room) -> None:
        rnd = room.round
        winner = last_player_standing(room)
        if winner is not None:
            pot = room.pot
            room.add_log(f"{winner.name} won (everyone else folded).")
            winner.stack += pot
            logger.info(f"[{room.code}] {winner.name} wins {pot} uncontested")
            self.end_round(room)
            return

        nxt = next_actor_index(room.players, rnd.turn_index, rnd.current_bet)
        if nxt == NO_TURN:
            self.go_to_pay(room)
            return
        rnd.turn_index = nxt

    # ------------------------------------------------------------------
    # Settlement
    # ------------------------------------------------------------------

    def settle(self, room: Room, payments: Any) -> bool:
        """
        Credit the pot back to stacks and end the round.

        payments: list of {"playerId", "amount"} mappings. Entries with a
        non-positive amount, an unknown player or an unknown shape are
        dropped; the rest must add up to the pot exactly.
        """
        if room.round is None or room.round.phase != RoundPhase.PAY:
            return False

        credits = self._collect_payments(room, payments)
        pot = room.pot
        total = sum(credits.values())
        if total != pot:
            raise SettlementSumMismatch(expected=pot, got=total)

        parts = []
        for player_id, amount in credits.items():
            player = room.get_player(player_id)
            player.stack += amount
            parts.append(f"{player.name} +{amount}")
        room.add_log(f"Payment: {' | '.join(parts) or 'none'}.")
        logger.info(f"[{room.code}] settled pot {pot}: {parts}")
        self.end_round(room)
        return True

    @staticmethod
    def _collect_payments(room: Room, payments: Any) -> Dict[str, int]:
        if payments is None:
            payments = []
        if not isinstance(payments, (list, tuple)):
            raise MalformedPayment()

        credits: Dict[str, int] = {}
        for item in payments:
            if not isinstance(item, dict):
                continue
            player_id = str(item.get("playerId") or "")
            amount = max(0, safe_int(item.get("amount"), 0))
            if not player_id or amount <= 0 or room.get_player(player_id) is None:
                continue
            credits[player_id] = credits.get(player_id, 0) + amount
        return credits
