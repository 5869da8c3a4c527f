"""
Integer chip arithmetic.

Every amount that enters the ledger goes through ``safe_int`` so fractional
or textual input is floored to whole chips. Nothing here owns state.
"""
from __future__ import annotations
import math
from typing import Any, Iterable, Protocol


class Committer(Protocol):
    stack: int
    street_put: int
    total_put: int


def safe_int(value: Any, fallback: int = 0) -> int:
    """Floor ``value`` to an int, or return ``fallback`` if it is not a finite number.

    Booleans count as 0/1 and numeric strings are accepted
    (``"12.9"`` → 12). ``None`` and the empty string are treated as absent.
    """
    if value is None:
        return fallback
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return fallback
    try:
        number = float(value)
    except (TypeError, ValueError):
        return fallback
    if not math.isfinite(number):
        return fallback
    return math.floor(number)


def commit_chips(player: Committer, amount: int) -> int:
    """Move up to ``amount`` chips from the player's stack into the pot.

    Returns the chips actually paid, which is capped at the stack and is
    never negative.
    """
    amount = safe_int(amount)
    if amount <= 0:
        return 0
    paid = min(amount, player.stack)
    player.stack -= paid
    player.street_put += paid
    player.total_put += paid
    return paid


def amount_owed(current_bet: int, street_put: int) -> int:
    """Chips a player still has to put in to match ``current_bet``."""
    return max(0, current_bet - street_put)


def total_pot(players: Iterable[Committer]) -> int:
    return sum(p.total_put for p in players)
