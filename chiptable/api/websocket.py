"""WebSocket endpoint for the real-time event channel."""
from __future__ import annotations
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from chiptable.api.dispatcher import EventDispatcher
from chiptable.models.events import ClientEvent

logger = logging.getLogger(__name__)
ws_router = APIRouter()


@ws_router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    dispatcher: EventDispatcher = websocket.app.state.dispatcher
    connection_id = await dispatcher.connections.connect(websocket)
    await dispatcher.on_connect(connection_id)

    try:
        while True:
            data = await websocket.receive_json()
            if isinstance(data, dict) and data.get("type") == "ping":
                await websocket.send_json({"type": "pong"})
                continue
            try:
                event = ClientEvent.model_validate(data)
            except ValidationError:
                logger.debug(f"Ignored malformed envelope from {connection_id}")
                continue
            await dispatcher.dispatch(connection_id, event.type, event.payload)

    except WebSocketDisconnect:
        logger.info(f"Connection {connection_id} closed")
    except Exception as e:
        logger.error(f"WebSocket error for {connection_id}: {e}")
    finally:
        await dispatcher.on_disconnect(connection_id)
