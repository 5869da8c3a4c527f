"""Unit tests for connection_manager.py — ConnectionManager."""
import asyncio
from unittest.mock import AsyncMock
from chiptable.managers.connection_manager import ConnectionManager


def _mock_ws():
    """Create a mock WebSocket."""
    ws = AsyncMock()
    ws.accept = AsyncMock()
    ws.send_json = AsyncMock()
    return ws


class TestConnect:
    def test_connect_assigns_id(self):
        async def _run():
            cm = ConnectionManager()
            ws = _mock_ws()
            cid = await cm.connect(ws)
            assert cm.is_connected(cid) is True
            ws.accept.assert_awaited_once()
        asyncio.run(_run())

    def test_ids_are_distinct(self):
        async def _run():
            cm = ConnectionManager()
            a = await cm.connect(_mock_ws())
            b = await cm.connect(_mock_ws())
            assert a != b
        asyncio.run(_run())

    def test_not_connected(self):
        cm = ConnectionManager()
        assert cm.is_connected("nope") is False


class TestDisconnect:
    def test_disconnect_returns_subscribed_rooms(self):
        async def _run():
            cm = ConnectionManager()
            cid = await cm.connect(_mock_ws())
            cm.subscribe("ROOM", cid)
            cm.subscribe("OTHR", cid)
            assert cm.disconnect(cid) == {"ROOM", "OTHR"}
            assert cm.is_connected(cid) is False
            assert cm.subscriber_count("ROOM") == 0
        asyncio.run(_run())

    def test_disconnect_keeps_other_subscribers(self):
        cm = ConnectionManager()
        cm.subscribe("ROOM", "a")
        cm.subscribe("ROOM", "b")
        cm.disconnect("a")
        assert cm.is_subscribed("ROOM", "b")
        assert cm.subscriber_count("ROOM") == 1

    def test_disconnect_nonexistent_noop(self):
        cm = ConnectionManager()
        assert cm.disconnect("nope") == set()

    def test_drop_room(self):
        cm = ConnectionManager()
        cm.subscribe("ROOM", "a")
        cm.drop_room("ROOM")
        assert cm.subscriber_count("ROOM") == 0


class TestSendPersonal:
    def test_send_to_connected(self):
        async def _run():
            cm = ConnectionManager()
            ws = _mock_ws()
            cid = await cm.connect(ws)
            await cm.send_personal(cid, "test_event", {"key": "val"})
            ws.send_json.assert_awaited_with({"type": "test_event", "payload": {"key": "val"}})
        asyncio.run(_run())

    def test_nested_payload_sent_unchanged(self):
        async def _run():
            cm = ConnectionManager()
            ws = _mock_ws()
            cid = await cm.connect(ws)
            payload = {"players": [{"id": "p0", "stack": 900}], "round": None, "log": ["Round started."]}
            await cm.send_personal(cid, "state", payload)
            sent = ws.send_json.await_args.args[0]
            assert sent == {"type": "state", "payload": payload}
        asyncio.run(_run())

    def test_send_to_unknown_noop(self):
        async def _run():
            cm = ConnectionManager()
            await cm.send_personal("nope", "test", {})
        asyncio.run(_run())

    def test_send_error_drops_socket(self):
        async def _run():
            cm = ConnectionManager()
            ws = _mock_ws()
            ws.send_json.side_effect = Exception("connection lost")
            cid = await cm.connect(ws)
            await cm.send_personal(cid, "test", {})
            assert cm.is_connected(cid) is False
        asyncio.run(_run())


class TestBroadcast:
    def test_sends_to_subscribers_only(self):
        async def _run():
            cm = ConnectionManager()
            ws1, ws2, ws3 = _mock_ws(), _mock_ws(), _mock_ws()
            a = await cm.connect(ws1)
            b = await cm.connect(ws2)
            await cm.connect(ws3)
            cm.subscribe("ROOM", a)
            cm.subscribe("ROOM", b)
            await cm.broadcast("ROOM", "state", {"pot": 0})
            ws1.send_json.assert_awaited_with({"type": "state", "payload": {"pot": 0}})
            ws2.send_json.assert_awaited_with({"type": "state", "payload": {"pot": 0}})
            ws3.send_json.assert_not_awaited()
        asyncio.run(_run())

    def test_empty_room_noop(self):
        async def _run():
            cm = ConnectionManager()
            await cm.broadcast("ROOM", "state", {})
        asyncio.run(_run())

    def test_failed_send_does_not_stop_others(self):
        async def _run():
            cm = ConnectionManager()
            bad, good = _mock_ws(), _mock_ws()
            bad.send_json.side_effect = Exception("broken pipe")
            a = await cm.connect(bad)
            b = await cm.connect(good)
            cm.subscribe("ROOM", a)
            cm.subscribe("ROOM", b)
            await cm.broadcast("ROOM", "state", {"x": 1})
            good.send_json.assert_awaited_once()
            assert cm.is_connected(a) is False
            # still subscribed until the socket's own disconnect runs
            assert cm.is_subscribed("ROOM", a)
        asyncio.run(_run())
