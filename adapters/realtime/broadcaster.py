"""
WebSocket 브로드캐스터

/ws 로 연결된 클라이언트 전체에 이벤트 전송.
IBroadcaster Protocol 준수.
"""

import asyncio
import logging
from typing import Any

from fastapi import WebSocket

from core.utils.timezone import now_utc_iso

logger = logging.getLogger(__name__)


class WebSocketBroadcaster:
    """WebSocket 브로드캐스터

    best-effort 전송:
    - 클라이언트별 전송 타임아웃 적용 (느린 클라이언트가 응답을 막지 않음)
    - 전송 실패한 클라이언트는 목록에서 제거
    - 예외를 호출 측으로 올리지 않음

    메시지 형식: {"event": str, "data": Any, "ts": ISO-8601}

    Args:
        send_timeout: 클라이언트별 전송 타임아웃 (초)
    """

    def __init__(self, send_timeout: float = 2.0):
        self.send_timeout = send_timeout
        self._clients: set[WebSocket] = set()

        # 통계
        self._published_count = 0
        self._dropped_count = 0

    @property
    def client_count(self) -> int:
        """연결된 클라이언트 수"""
        return len(self._clients)

    async def connect(self, websocket: WebSocket) -> None:
        """클라이언트 연결 수락 및 등록"""
        await websocket.accept()
        self._clients.add(websocket)
        logger.info(f"WebSocket 연결: {self.client_count} clients")

    def disconnect(self, websocket: WebSocket) -> None:
        """클라이언트 제거"""
        if websocket in self._clients:
            self._clients.discard(websocket)
            logger.info(f"WebSocket 연결 해제: {self.client_count} clients")

    async def _send(self, websocket: WebSocket, message: dict[str, Any]) -> bool:
        try:
            await asyncio.wait_for(websocket.send_json(message), timeout=self.send_timeout)
            return True
        except Exception as e:
            logger.debug(f"WebSocket 전송 실패, 클라이언트 제거: {e}")
            self._clients.discard(websocket)
            self._dropped_count += 1
            return False

    async def publish(self, event: str, payload: Any) -> int:
        """이벤트 발행

        Returns:
            전송 성공한 클라이언트 수
        """
        self._published_count += 1

        if not self._clients:
            return 0

        message = {"event": event, "data": payload, "ts": now_utc_iso()}
        clients = list(self._clients)
        results = await asyncio.gather(*(self._send(ws, message) for ws in clients))
        delivered = sum(1 for ok in results if ok)

        logger.debug(
            f"Broadcast {event}: {delivered}/{len(clients)}",
            extra={"event": event},
        )
        return delivered

    async def close_all(self) -> None:
        """모든 연결 종료 (앱 종료 시)"""
        for websocket in list(self._clients):
            try:
                await websocket.close()
            except Exception:
                # 이미 끊어진 연결
                pass
        self._clients.clear()

    def get_stats(self) -> dict[str, Any]:
        """통계 반환"""
        return {
            "client_count": self.client_count,
            "published_count": self._published_count,
            "dropped_count": self._dropped_count,
        }
