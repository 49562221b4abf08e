"""
실시간 이벤트 WebSocket

WS /ws - 금고 변경 이벤트 수신

토큰은 선택 (?token=). 제공되었으나 검증 실패하면 연결 거부.
클라이언트가 "ping"을 보내면 pong 이벤트로 응답.
"""

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from core.config.loader import get_settings
from core.errors import AuthError
from core.utils.timezone import now_utc_iso
from web.dependencies import decode_actor

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Realtime"])


@router.websocket("/ws")
async def realtime_events(websocket: WebSocket) -> None:
    """실시간 이벤트 스트림"""
    token = websocket.query_params.get("token")
    username = "guest"

    if token:
        try:
            username = decode_actor(token, get_settings().web_secret_key).username
        except AuthError as e:
            logger.warning("WebSocket 인증 실패", extra={"error": e.message})
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
            return

    broadcaster = websocket.app.state.broadcaster
    await broadcaster.connect(websocket)
    logger.debug("WebSocket 구독 시작", extra={"username": username})

    try:
        while True:
            text = await websocket.receive_text()
            if text.strip().lower() == "ping":
                await websocket.send_json({"event": "pong", "data": None, "ts": now_utc_iso()})
    except WebSocketDisconnect:
        pass
    finally:
        broadcaster.disconnect(websocket)
