from fastapi import APIRouter, WebSocket, WebSocketDisconnect, Depends, Query, HTTPException, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.dependencies.auth import get_current_user_from_token
from app.services.connection_manager import manager

router = APIRouter(tags=["notifications-ws"])


@router.websocket("/ws/notifications")
async def notifications_websocket_endpoint(
    websocket: WebSocket,
    token: str = Query(..., description="JWT token"),
    db: Session = Depends(get_db),
):
    # Authenticate
    try:
        current_user = get_current_user_from_token(token, db)
    except HTTPException:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    user_id = current_user["user_id"]
    await manager.connect(websocket, user_id)

    try:
        await websocket.send_json({"type": "info", "message": "connected"})
        while True:
            data = await websocket.receive_json()
            if data.get("type") == "ping":
                await websocket.send_json({"type": "pong"})
            else:
                await websocket.send_json({"type": "error", "message": "Unsupported message type"})
    except WebSocketDisconnect:
        manager.disconnect(websocket, user_id)
