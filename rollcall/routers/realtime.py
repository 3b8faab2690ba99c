from fastapi import APIRouter, WebSocket

router = APIRouter(tags=["realtime"])


@router.websocket("/ws")
async def observer_channel(websocket: WebSocket):
    """
    Push-only channel. Every mutation sends `{type, data}`; clients refetch
    /api/staff-status on receipt. Anything a client sends is ignored.
    """
    hub = websocket.app.state.hub
    await websocket.accept()
    await hub.register(websocket)
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    finally:
        await hub.unregister(websocket)
