"""Read-only REST routes: health, client config and room snapshots."""
from __future__ import annotations
from typing import Any, Dict

from fastapi import APIRouter, HTTPException, Request

from chiptable.api.dispatcher import EventDispatcher
from chiptable.models.snapshot import snapshot_payload

router = APIRouter()


def _dispatcher(request: Request) -> EventDispatcher:
    return request.app.state.dispatcher


@router.get("/health")
async def health() -> Dict[str, Any]:
    return {"status": "ok"}


@router.get("/api/config")
async def client_config(request: Request) -> Dict[str, Any]:
    return {"allInMinStack": _dispatcher(request).settings.all_in_min_stack}


@router.get("/api/rooms")
async def list_rooms(request: Request) -> Dict[str, Any]:
    return {"rooms": _dispatcher(request).registry.list_rooms()}


@router.get("/api/rooms/{room_code}")
async def get_room_state(request: Request, room_code: str) -> Dict[str, Any]:
    room = _dispatcher(request).registry.get_room(room_code)
    if not room:
        raise HTTPException(status_code=404, detail="Room not found")
    return snapshot_payload(room)
