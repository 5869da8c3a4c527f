"""
Routes inbound client events to the binding and the round engine.

Each event is handled to completion (room mutation, then broadcast) before
the next one is read from the socket, and the mutation itself never awaits,
so a room is never observed half-updated.
"""
from __future__ import annotations
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from pydantic import BaseModel, ValidationError

from chiptable.config import Settings
from chiptable.core.exceptions import ChipTableError
from chiptable.game.betting import BettingAction
from chiptable.game.engine import RoundEngine
from chiptable.game.room_state import Room
from chiptable.managers.binding import ConnectionBinding
from chiptable.managers.connection_manager import ConnectionManager
from chiptable.managers.room_registry import RoomRegistry
from chiptable.models.events import (
    BetPayload,
    ErrorPayload,
    HelloPayload,
    PayPayload,
    PlayerJoinPayload,
    RoomAckPayload,
    RoomPayload,
)
from chiptable.models.snapshot import snapshot_payload

logger = logging.getLogger(__name__)

Handler = Callable[[str, Dict[str, Any]], Awaitable[None]]

ACTION_EVENTS = {
    "action:fold": BettingAction.FOLD,
    "action:check": BettingAction.CHECK,
    "action:call": BettingAction.CALL,
    "action:bet": BettingAction.BET,
    "action:allin": BettingAction.ALL_IN,
}


class EventDispatcher:
    # Every connection is treated as the host; there is no host token.

    def __init__(
        self,
        settings: Settings,
        registry: Optional[RoomRegistry] = None,
        connections: Optional[ConnectionManager] = None,
    ) -> None:
        self.settings = settings
        self.registry = registry or RoomRegistry(settings)
        self.connections = connections or ConnectionManager()
        self.binding = ConnectionBinding(self.registry, self.connections, settings)
        self.engine = RoundEngine(settings)
        self._handlers: Dict[str, Handler] = {
            "room:create": self._room_create,
            "room:join": self._room_join,
            "player:join": self._player_join,
            "host:startRound": self._host_command(self.engine.start_round),
            "host:goToPay": self._host_command(self.engine.go_to_pay),
            "host:nextRound": self._host_command(self.engine.next_round),
            "host:pay": self._host_pay,
        }
        for event_type, action in ACTION_EVENTS.items():
            self._handlers[event_type] = self._player_action(action)

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    async def on_connect(self, connection_id: str) -> None:
        hello = HelloPayload(
            all_in_min_stack=self.settings.all_in_min_stack,
            connection_id=connection_id,
        )
        await self.connections.send_personal(connection_id, "hello", hello.model_dump(by_alias=True))

    async def on_disconnect(self, connection_id: str) -> None:
        for room in self.binding.disconnect(connection_id):
            await self.broadcast_state(room)

    async def dispatch(self, connection_id: str, event_type: Optional[str], payload: Any) -> None:
        handler = self._handlers.get(event_type or "")
        if handler is None:
            logger.debug(f"Unknown event {event_type!r} from {connection_id}")
            return
        if not isinstance(payload, dict):
            payload = {}
        try:
            await handler(connection_id, payload)
        except ChipTableError as e:
            logger.info(f"{event_type} from {connection_id} rejected: {e.message}")
            await self.send_error(connection_id, e)

    # ------------------------------------------------------------------
    # Outbound helpers
    # ------------------------------------------------------------------

    async def broadcast_state(self, room: Room) -> None:
        await self.connections.broadcast(room.code, "state", snapshot_payload(room))

    async def send_error(self, connection_id: str, error: ChipTableError) -> None:
        body = ErrorPayload(text=error.message, kind=type(error).__name__)
        await self.connections.send_personal(connection_id, "errorMsg", body.model_dump())

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    async def _room_create(self, connection_id: str, payload: Dict[str, Any]) -> None:
        room = self.binding.create_room(connection_id)
        ack = RoomAckPayload(room_code=room.code).model_dump(by_alias=True)
        await self.connections.send_personal(connection_id, "room:created", ack)
        await self.broadcast_state(room)

    async def _room_join(self, connection_id: str, payload: Dict[str, Any]) -> None:
        req = _parse(RoomPayload, payload)
        room = self.binding.join_room(connection_id, req.room_code if req else None)
        ack = RoomAckPayload(room_code=room.code).model_dump(by_alias=True)
        await self.connections.send_personal(connection_id, "room:joined", ack)
        await self.broadcast_state(room)

    async def _player_join(self, connection_id: str, payload: Dict[str, Any]) -> None:
        req = _parse(PlayerJoinPayload, payload)
        if req is None:
            room = self.binding.join_as_player(connection_id, None, None)
        else:
            room = self.binding.join_as_player(connection_id, req.room_code, req.name, req.stack)
        await self.broadcast_state(room)

    def _host_command(self, operation: Callable[[Room], bool]) -> Handler:
        async def handler(connection_id: str, payload: Dict[str, Any]) -> None:
            room = self._resolve(payload)
            if operation(room):
                await self.broadcast_state(room)
        return handler

    async def _host_pay(self, connection_id: str, payload: Dict[str, Any]) -> None:
        req = _parse(PayPayload, payload)
        room = self.registry.lookup(req.room_code if req else None)
        if self.engine.settle(room, req.payments):
            await self.broadcast_state(room)

    def _player_action(self, action: BettingAction) -> Handler:
        async def handler(connection_id: str, payload: Dict[str, Any]) -> None:
            req = _parse(BetPayload, payload)
            room = self.registry.lookup(req.room_code if req else None)
            if self.engine.act(room, connection_id, action, req.bet_to):
                await self.broadcast_state(room)
        return handler

    def _resolve(self, payload: Dict[str, Any]) -> Room:
        req = _parse(RoomPayload, payload)
        return self.registry.lookup(req.room_code if req else None)


def _parse(model: type[BaseModel], payload: Dict[str, Any]) -> Optional[Any]:
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        logger.debug(f"Ignored malformed {model.__name__}: {e.errors()}")
        return None
