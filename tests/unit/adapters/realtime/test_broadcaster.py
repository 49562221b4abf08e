"""
WebSocketBroadcaster 테스트

가짜 WebSocket으로 전송/제거 동작 확인.
"""

import asyncio
from typing import Any

import pytest

from adapters.interfaces import IBroadcaster
from adapters.realtime.broadcaster import WebSocketBroadcaster


class FakeWebSocket:
    """accept/send_json/close만 흉내내는 WebSocket"""

    def __init__(self, fail: bool = False, delay: float = 0.0):
        self.fail = fail
        self.delay = delay
        self.accepted = False
        self.closed = False
        self.messages: list[dict[str, Any]] = []

    async def accept(self) -> None:
        self.accepted = True

    async def send_json(self, data: dict[str, Any]) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise RuntimeError("connection closed")
        self.messages.append(data)

    async def close(self) -> None:
        self.closed = True


class TestWebSocketBroadcaster:
    """WebSocketBroadcaster 테스트"""

    def test_implements_protocol(self) -> None:
        """IBroadcaster Protocol 구현 확인"""
        assert isinstance(WebSocketBroadcaster(), IBroadcaster)

    @pytest.mark.asyncio
    async def test_publish_without_clients(self) -> None:
        """클라이언트 없으면 0"""
        broadcaster = WebSocketBroadcaster()

        assert await broadcaster.publish("vault.stock.updated", []) == 0

    @pytest.mark.asyncio
    async def test_publish_to_all(self) -> None:
        """모든 클라이언트에 전송"""
        broadcaster = WebSocketBroadcaster()
        clients = [FakeWebSocket(), FakeWebSocket()]
        for ws in clients:
            await broadcaster.connect(ws)

        delivered = await broadcaster.publish("vault.transaction.created", {"id": 1})

        assert delivered == 2
        for ws in clients:
            assert ws.accepted
            message = ws.messages[0]
            assert message["event"] == "vault.transaction.created"
            assert message["data"] == {"id": 1}
            assert message["ts"]

    @pytest.mark.asyncio
    async def test_failed_client_dropped(self) -> None:
        """전송 실패 클라이언트는 제거, 예외 없음"""
        broadcaster = WebSocketBroadcaster()
        good, bad = FakeWebSocket(), FakeWebSocket(fail=True)
        await broadcaster.connect(good)
        await broadcaster.connect(bad)

        delivered = await broadcaster.publish("e", {})

        assert delivered == 1
        assert broadcaster.client_count == 1
        assert broadcaster.get_stats()["dropped_count"] == 1

    @pytest.mark.asyncio
    async def test_slow_client_times_out(self) -> None:
        """느린 클라이언트는 타임아웃 후 제거"""
        broadcaster = WebSocketBroadcaster(send_timeout=0.05)
        fast, slow = FakeWebSocket(), FakeWebSocket(delay=1.0)
        await broadcaster.connect(fast)
        await broadcaster.connect(slow)

        delivered = await broadcaster.publish("e", {})

        assert delivered == 1
        assert broadcaster.client_count == 1
        assert fast.messages

    @pytest.mark.asyncio
    async def test_disconnect(self) -> None:
        """연결 해제"""
        broadcaster = WebSocketBroadcaster()
        ws = FakeWebSocket()
        await broadcaster.connect(ws)

        broadcaster.disconnect(ws)
        broadcaster.disconnect(ws)

        assert broadcaster.client_count == 0
        assert await broadcaster.publish("e", {}) == 0

    @pytest.mark.asyncio
    async def test_close_all(self) -> None:
        """종료 시 모든 연결 닫기"""
        broadcaster = WebSocketBroadcaster()
        clients = [FakeWebSocket(), FakeWebSocket()]
        for ws in clients:
            await broadcaster.connect(ws)

        await broadcaster.close_all()

        assert broadcaster.client_count == 0
        assert all(ws.closed for ws in clients)
