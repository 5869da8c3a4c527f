#!/usr/bin/env python3
"""
CLI for the chip table.

Usage:
    python cli.py serve                          # run the WebSocket server
    python cli.py serve --port 8080 --log-level debug
    python cli.py table                          # offline table: Ana, Bia, Caio with 1000 each
    python cli.py table --players "Ana:500,Bia:2000"
    python cli.py table --all-in-min 500

The offline table drives the same RoundEngine as the server, with every
seat typed from one keyboard (whoever's turn it is acts).
"""
from __future__ import annotations

import argparse
import shlex
import sys
from typing import List, Optional, Tuple

from chiptable.config import Settings, get_settings
from chiptable.core.exceptions import ChipTableError
from chiptable.core.ledger import safe_int
from chiptable.game.betting import BettingAction
from chiptable.game.engine import RoundEngine
from chiptable.game.room_state import PlayerSeat, Room


# -- ANSI colors ---------------------------------------------------------------

RESET  = "\033[0m"
BOLD   = "\033[1m"
DIM    = "\033[2m"
RED    = "\033[91m"
YELLOW = "\033[93m"
CYAN   = "\033[96m"
WHITE  = "\033[97m"


def fmt_chips(n: int) -> str:
    return f"{YELLOW}${n:,}{RESET}"


# -- Display helpers -----------------------------------------------------------

def print_divider(label: str = "") -> None:
    if label:
        print(f"\n{DIM}{'─' * 20} {BOLD}{WHITE}{label} {DIM}{'─' * 20}{RESET}")
    else:
        print(f"{DIM}{'─' * 60}{RESET}")


def print_table(room: Room, engine: RoundEngine) -> None:
    """Print stacks, commitments and whose turn it is."""
    rnd = room.round
    phase = rnd.phase.value if rnd else "between rounds"
    print(f"\n  Phase: {CYAN}{phase}{RESET}   Pot: {fmt_chips(room.pot)}", end="")
    if rnd and rnd.current_bet:
        print(f"   Bet: {fmt_chips(rnd.current_bet)}", end="")
    print("\n")

    actor = room.current_actor
    for i, p in enumerate(room.players):
        marker_parts = []
        if i == room.normalized_dealer_index():
            marker_parts.append(f"{YELLOW}D{RESET}")
        if p.folded:
            marker_parts.append(f"{DIM}folded{RESET}")
        if p.in_round and p.stack == 0:
            marker_parts.append(f"{RED}{BOLD}ALL-IN{RESET}")
        markers = f" ({', '.join(marker_parts)})" if marker_parts else ""
        put = f"  put {fmt_chips(p.street_put)}" if p.street_put > 0 else ""
        active = f"{CYAN}>{RESET} " if p is actor else "  "
        print(f"  {active}{p.name:<12} {fmt_chips(p.stack):>18}{put}{markers}")

    if actor is not None:
        valid = engine.valid_actions(room, actor)
        options = ["fold", "check" if valid.can_check else f"call {valid.call_amount}", "bet N"]
        if valid.can_all_in:
            options.append("allin")
        print(f"\n  {BOLD}{actor.name}{RESET} ({fmt_chips(valid.player_stack)} behind) to act: {', '.join(options)}")
    print()


def print_log(room: Room, seen: int) -> int:
    """Print the lines logged after ``seen`` (a ``room.log_seq`` value). Returns the new seq."""
    fresh = min(room.log_seq - seen, len(room.log))
    if fresh > 0:
        for line in list(room.log)[-fresh:]:
            print(f"  {DIM}·{RESET} {line}")
    return room.log_seq


# -- Offline table -------------------------------------------------------------

def parse_players(players_arg: str, default_stack: int) -> List[Tuple[str, int]]:
    seats = []
    for part in players_arg.split(","):
        part = part.strip()
        if not part:
            continue
        name, _, stack = part.partition(":")
        seats.append((name.strip(), safe_int(stack, default_stack)))
    return seats


class CLITable:
    """One room on one keyboard: each seat has a fake connection id."""

    def __init__(self, settings: Settings, seats: List[Tuple[str, int]]) -> None:
        self.engine = RoundEngine(settings)
        self.room = Room(code="LOCAL", log_capacity=settings.log_capacity)
        for i, (name, stack) in enumerate(seats):
            self.room.players.append(PlayerSeat(
                player_id=f"p{i}",
                name=name[: settings.max_name_length],
                stack=max(0, stack),
                connection_id=f"seat-{i}",
            ))
        self._log_seen = 0

    def run(self) -> None:
        print_divider("CHIP TABLE")
        print("  commands: start, fold, check, call, bet N, allin, topay, pay [name=N ...], next, state, quit")
        print_table(self.room, self.engine)
        while True:
            try:
                raw = input(f"  {BOLD}> {RESET}").strip()
            except (EOFError, KeyboardInterrupt):
                print()
                return
            if not raw:
                continue
            if raw in ("q", "quit", "exit"):
                return
            try:
                changed = self.handle(raw)
            except ChipTableError as e:
                print(f"  {RED}{e.message}{RESET}")
                continue
            except ValueError as e:
                print(f"  {RED}{e}{RESET}")
                continue
            if changed:
                self._log_seen = print_log(self.room, self._log_seen)
                print_table(self.room, self.engine)
            elif raw != "state":
                print(f"  {DIM}(ignored){RESET}")

    def handle(self, raw: str) -> bool:
        words = shlex.split(raw)
        cmd, args = words[0].lower(), words[1:]
        room, engine = self.room, self.engine

        if cmd == "state":
            print_table(room, engine)
            return False
        if cmd == "start":
            return engine.start_round(room)
        if cmd == "topay":
            return engine.go_to_pay(room)
        if cmd == "next":
            return engine.next_round(room)
        if cmd == "pay":
            return engine.settle(room, self._payments(args))

        actions = {
            "fold": BettingAction.FOLD,
            "check": BettingAction.CHECK,
            "call": BettingAction.CALL,
            "bet": BettingAction.BET,
            "allin": BettingAction.ALL_IN,
        }
        if cmd not in actions:
            raise ValueError(f"Unknown command: {cmd}")
        actor = room.current_actor
        if actor is None:
            return False
        bet_to = args[0] if args else None
        return engine.act(room, actor.connection_id, actions[cmd], bet_to)

    def _payments(self, args: List[str]) -> List[dict]:
        """``pay`` alone gives the pot back to whoever put it in."""
        if not args:
            return [{"playerId": p.player_id, "amount": p.total_put}
                    for p in self.room.players if p.total_put > 0]
        by_name = {p.name.lower(): p for p in self.room.players}
        payments = []
        for arg in args:
            name, _, amount = arg.partition("=")
            player = by_name.get(name.strip().lower())
            if player is None:
                raise ValueError(f"No player named {name!r}")
            payments.append({"playerId": player.player_id, "amount": amount})
        return payments


# -- Entry point ---------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        description="Chip Table: shared chip ledger for in-person poker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    serve_p = sub.add_parser("serve", help="run the WebSocket server")
    serve_p.add_argument("--host", default=None)
    serve_p.add_argument("--port", type=int, default=None)
    serve_p.add_argument("--log-level", default=None)

    table_p = sub.add_parser("table", help="play an offline hot-seat table")
    table_p.add_argument("--players", default="Ana,Bia,Caio",
                         help='comma separated "name[:stack]" (default: Ana,Bia,Caio)')
    table_p.add_argument("--all-in-min", type=int, default=None,
                         help="minimum stack for the all-in action")

    args = parser.parse_args(argv)
    base = get_settings()

    if args.command == "serve":
        from chiptable.main import serve

        overrides = {k: v for k, v in (("host", args.host), ("port", args.port),
                                       ("log_level", args.log_level)) if v is not None}
        serve(base.model_copy(update=overrides))
        return

    settings = base
    if args.all_in_min is not None:
        settings = base.model_copy(update={"all_in_min_stack": args.all_in_min})
    seats = parse_players(args.players, settings.default_stack)
    if len(seats) < 2:
        print("Need at least two players.", file=sys.stderr)
        sys.exit(2)
    CLITable(settings, seats).run()


if __name__ == "__main__":
    main()
