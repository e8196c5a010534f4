"""WebSocket endpoint for change notifications."""

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from .broadcaster import Broadcaster

router = APIRouter(tags=["realtime"])


@router.websocket("/ws")
async def notifications_socket(websocket: WebSocket):
    broadcaster: Broadcaster = websocket.app.state.broadcaster
    await broadcaster.connect(websocket)
    try:
        while True:
            raw = await websocket.receive_text()
            await broadcaster.handle_message(websocket, raw)
    except WebSocketDisconnect:
        pass
    finally:
        broadcaster.disconnect(websocket)
