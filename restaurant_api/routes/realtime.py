"""
Realtime channel: every connected screen receives new_order / order_update
(and menu_item_update) events as JSON text frames.
Path: restaurant_api/routes/realtime.py
"""
import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from ..utils.broadcaster import ChangeBroadcaster
from .deps import get_broadcaster

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Realtime"])


@router.websocket("/ws")
async def realtime_endpoint(
    websocket: WebSocket,
    broadcaster: ChangeBroadcaster = Depends(get_broadcaster)
):
    await websocket.accept()
    try:
        # Greeting and registration happen under the broadcaster lock:
        # "connected" is always the first frame and no later event is missed
        await broadcaster.subscribe(websocket, greeting={"type": "connected"})

        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))

            # Clients only ever send keepalives; binary frames are ignored
            text = message.get("text")
            if text is not None and text.strip().lower() == "ping":
                await websocket.send_json({"type": "pong"})
    except WebSocketDisconnect:
        logger.info("Realtime client disconnected")
    finally:
        await broadcaster.unsubscribe(websocket)
