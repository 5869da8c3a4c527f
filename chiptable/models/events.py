"""Pydantic models for WebSocket events."""
from __future__ import annotations
from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field


class ClientEvent(BaseModel):
    """Client → Server envelope."""
    type: str   # "room:create" | "player:join" | "host:pay" | "action:bet" | ...
    payload: Dict[str, Any] = Field(default_factory=dict)


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)


class RoomPayload(_Payload):
    room_code: Optional[str] = Field(default=None, alias="roomCode")


class PlayerJoinPayload(RoomPayload):
    # name/stack are coerced by the binding, not rejected here
    name: Any = None
    stack: Any = None


class BetPayload(RoomPayload):
    bet_to: Any = Field(default=None, alias="betTo")


class PayPayload(RoomPayload):
    # checked item by item by the engine
    payments: Any = None


class ServerEvent(BaseModel):
    """Server → Client envelope."""
    type: str
    payload: Dict[str, Any]


class HelloPayload(_Payload):
    all_in_min_stack: int = Field(alias="allInMinStack")
    connection_id: str = Field(alias="connectionId")


class RoomAckPayload(_Payload):
    room_code: str = Field(alias="roomCode")


class ErrorPayload(_Payload):
    text: str
    kind: Optional[str] = None
