"""
Real-time channel.

Every connected socket receives every ride event (`ride-created`,
`ride-status-changed`). The channel is receive-only; anything the
client sends is ignored.
"""

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from mototaxi.app.services.broadcaster import Broadcaster, get_broadcaster

router = APIRouter(tags=["Real-time"])


@router.websocket("/ws")
async def ride_events(websocket: WebSocket, broadcaster: Broadcaster = Depends(get_broadcaster)):
    await broadcaster.connect(websocket)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        broadcaster.unsubscribe(websocket)
