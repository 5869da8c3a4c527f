"""Unit tests for models — Pydantic event and snapshot models."""
import pytest
from pydantic import ValidationError

from chiptable.game.room_state import PlayerSeat, Room, Round, RoundPhase
from chiptable.models.events import (
    BetPayload,
    ClientEvent,
    ErrorPayload,
    HelloPayload,
    PayPayload,
    PlayerJoinPayload,
    RoomPayload,
)
from chiptable.models.snapshot import SNAPSHOT_VERSION, RoomSnapshot, snapshot_payload


class TestClientEvents:
    def test_envelope_defaults_payload(self):
        ev = ClientEvent(type="room:create")
        assert ev.payload == {}

    def test_envelope_requires_type(self):
        with pytest.raises(ValidationError):
            ClientEvent.model_validate({"payload": {}})

    def test_room_code_alias(self):
        assert RoomPayload.model_validate({"roomCode": "ab12"}).room_code == "ab12"

    def test_numeric_room_code_coerced(self):
        assert RoomPayload.model_validate({"roomCode": 1234}).room_code == "1234"

    def test_missing_room_code(self):
        assert RoomPayload.model_validate({}).room_code is None

    def test_player_join_keeps_raw_values(self):
        req = PlayerJoinPayload.model_validate({"roomCode": "AB12", "name": "  Ana ", "stack": "x"})
        assert req.name == "  Ana "
        assert req.stack == "x"

    def test_bet_payload(self):
        assert BetPayload.model_validate({"roomCode": "AB12", "betTo": 250}).bet_to == 250
        assert BetPayload.model_validate({"roomCode": "AB12"}).bet_to is None

    def test_pay_payload_extra_ignored(self):
        req = PayPayload.model_validate({"roomCode": "AB12", "payments": [], "junk": 1})
        assert req.payments == []


class TestServerPayloads:
    def test_hello_by_alias(self):
        hello = HelloPayload(all_in_min_stack=1000, connection_id="abc")
        assert hello.model_dump(by_alias=True) == {"allInMinStack": 1000, "connectionId": "abc"}

    def test_error_payload(self):
        assert ErrorPayload(text="Room not found.").model_dump() == {"text": "Room not found.", "kind": None}


class TestSnapshot:
    def _room(self) -> Room:
        room = Room(code="AB12", created_at=1700000000.5)
        room.players.append(PlayerSeat(player_id="p0", name="Ana", stack=900,
                                       connection_id="c0", in_round=True,
                                       street_put=100, total_put=100))
        room.players.append(PlayerSeat(player_id="p1", name="Bia", stack=1000))
        room.round = Round(current_bet=100, turn_index=0, phase=RoundPhase.RUNNING)
        room.add_log("Round started.")
        return room

    def test_snapshot_fields(self):
        data = snapshot_payload(self._room())
        assert data["version"] == SNAPSHOT_VERSION
        assert data["roomCode"] == "AB12"
        assert data["createdAt"] == 1700000000500
        assert data["dealerIndex"] == 0
        assert data["pot"] == 100
        assert data["round"] == {"currentBet": 100, "turnIndex": 0, "phase": "running"}
        assert data["log"] == ["Round started."]

    def test_player_view(self):
        data = snapshot_payload(self._room())
        ana, bia = data["players"]
        assert ana == {
            "id": "p0",
            "name": "Ana",
            "stack": 900,
            "inRound": True,
            "folded": False,
            "streetPut": 100,
            "totalPut": 100,
            "connected": True,
            "connectionId": "c0",
        }
        assert bia["connected"] is False
        assert bia["connectionId"] is None

    def test_no_round(self):
        room = self._room()
        room.round = None
        assert snapshot_payload(room)["round"] is None

    def test_snapshot_is_a_copy(self):
        room = self._room()
        snap = RoomSnapshot.from_room(room)
        room.players[0].stack = 0
        room.add_log("later")
        assert snap.players[0].stack == 900
        assert snap.log == ["Round started."]
