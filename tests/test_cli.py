"""Unit tests for cli.py — offline table helpers."""
from cli import CLITable, parse_players, print_log
from chiptable.config import Settings
from chiptable.game.room_state import Room


class TestPrintLog:
    def test_prints_only_new_lines(self, capsys):
        room = Room(code="LOCAL")
        room.add_log("Ana joined.")
        seen = print_log(room, 0)
        room.add_log("Bia joined.")
        capsys.readouterr()
        assert print_log(room, seen) == 2
        out = capsys.readouterr().out
        assert "Bia joined." in out
        assert "Ana joined." not in out

    def test_keeps_printing_after_log_wraps(self, capsys):
        room = Room(code="LOCAL", log_capacity=3)
        for i in range(3):
            room.add_log(f"line {i}")
        seen = print_log(room, 0)
        assert seen == 3
        room.add_log("line 3")
        room.add_log("line 4")
        capsys.readouterr()
        assert print_log(room, seen) == 5
        out = capsys.readouterr().out
        assert "line 3" in out and "line 4" in out
        assert "line 2" not in out

    def test_more_new_lines_than_capacity(self, capsys):
        room = Room(code="LOCAL", log_capacity=2)
        for i in range(5):
            room.add_log(f"line {i}")
        print_log(room, 0)
        out = capsys.readouterr().out
        assert "line 3" in out and "line 4" in out
        assert "line 2" not in out

    def test_cleared_log_prints_next_round(self, capsys):
        room = Room(code="LOCAL")
        room.add_log("Ana folded.")
        seen = print_log(room, 0)
        room.clear_log()
        room.add_log("Round started.")
        capsys.readouterr()
        print_log(room, seen)
        out = capsys.readouterr().out
        assert "Round started." in out
        assert "Ana folded." not in out


class TestParsePlayers:
    def test_names_and_stacks(self):
        assert parse_players("Ana:500, Bia:2000,Caio", 1000) == [
            ("Ana", 500), ("Bia", 2000), ("Caio", 1000),
        ]

    def test_bad_stack_falls_back_to_default(self):
        assert parse_players("Ana:abc,Bia:12.9", 1000) == [("Ana", 1000), ("Bia", 12)]

    def test_skips_empty_parts(self):
        assert parse_players("Ana,,Bia,", 1000) == [("Ana", 1000), ("Bia", 1000)]


class TestCLITable:
    def test_log_follows_a_full_round(self, capsys):
        settings = Settings(_env_file=None, log_capacity=2)
        table = CLITable(settings, [("Ana", 500), ("Bia", 500)])
        for cmd in ("start", "check", "check"):
            assert table.handle(cmd) is True
            table._log_seen = print_log(table.room, table._log_seen)
        out = capsys.readouterr().out
        assert out.count("checked.") == 2
        assert table.room.round.phase.value == "pay"

    def test_table_shows_actor_stack(self, settings, capsys):
        table = CLITable(settings, [("Ana", 500), ("Bia", 700)])
        table.handle("start")
        capsys.readouterr()
        table.handle("state")
        out = capsys.readouterr().out
        assert "behind" in out
