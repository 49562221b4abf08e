"""
Mock 협력 객체 테스트

MockNotifier, MockAuditLog, MockBroadcaster 동작 확인.
"""

import pytest

from adapters.interfaces import IAuditLog, IBroadcaster, INotifier
from adapters.mock import MockAuditLog, MockBroadcaster, MockNotifier
from core.errors import StorageError
from core.types import Actor


class TestMockNotifier:
    """MockNotifier 테스트"""

    def test_implements_protocol(self) -> None:
        """INotifier Protocol 구현 확인"""
        assert isinstance(MockNotifier(), INotifier)

    @pytest.mark.asyncio
    async def test_records_notifications(self) -> None:
        """발송 기록"""
        notifier = MockNotifier()

        result = await notifier.send("drift", level="ERROR", extra={"karat": 22})
        await notifier.send("info")

        assert result is True
        assert len(notifier.notifications) == 2
        assert notifier.get_by_level("ERROR")[0].extra == {"karat": 22}
        assert notifier.last_notification.message == "info"

    @pytest.mark.asyncio
    async def test_should_fail(self) -> None:
        """실패 모드는 False 반환, 기록은 남음"""
        notifier = MockNotifier(should_fail=True)

        result = await notifier.send("x")

        assert result is False
        assert notifier.last_notification.sent is False

    def test_empty(self) -> None:
        """알림 없음"""
        assert MockNotifier().last_notification is None


class TestMockAuditLog:
    """MockAuditLog 테스트"""

    def test_implements_protocol(self) -> None:
        """IAuditLog Protocol 구현 확인"""
        assert isinstance(MockAuditLog(), IAuditLog)

    @pytest.mark.asyncio
    async def test_records(self, actor: Actor) -> None:
        """기록"""
        audit = MockAuditLog()

        log_id = await audit.record(actor, "External Vault Stock Sync", "0 transactions processed")

        assert log_id == 1
        assert audit.actions == ["External Vault Stock Sync"]
        assert audit.records[0].actor == actor

    @pytest.mark.asyncio
    async def test_should_fail(self, actor: Actor) -> None:
        """실패 모드는 StorageError"""
        audit = MockAuditLog(should_fail=True)

        with pytest.raises(StorageError):
            await audit.record(actor, "a", "b")

        assert audit.records == []


class TestMockBroadcaster:
    """MockBroadcaster 테스트"""

    def test_implements_protocol(self) -> None:
        """IBroadcaster Protocol 구현 확인"""
        assert isinstance(MockBroadcaster(), IBroadcaster)

    @pytest.mark.asyncio
    async def test_records_events(self) -> None:
        """이벤트 기록"""
        broadcaster = MockBroadcaster()

        await broadcaster.publish("vault.transaction.created", {"id": 1})
        await broadcaster.publish("vault.stock.updated", [])
        await broadcaster.publish("vault.transaction.created", {"id": 2})

        assert broadcaster.event_names == [
            "vault.transaction.created",
            "vault.stock.updated",
            "vault.transaction.created",
        ]
        assert broadcaster.payloads_of("vault.transaction.created") == [{"id": 1}, {"id": 2}]

    @pytest.mark.asyncio
    async def test_should_fail(self) -> None:
        """실패 모드는 예외"""
        with pytest.raises(RuntimeError):
            await MockBroadcaster(should_fail=True).publish("e", {})
