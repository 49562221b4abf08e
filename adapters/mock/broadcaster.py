"""
Mock 브로드캐스터

테스트용 IBroadcaster 구현.
발행된 이벤트를 기록.
"""

from typing import Any


class MockBroadcaster:
    """Mock 브로드캐스터

    Args:
        should_fail: True면 publish()가 RuntimeError 발생 (전송 계층 장애 시나리오)
    """

    def __init__(self, should_fail: bool = False):
        self.should_fail = should_fail
        self.events: list[tuple[str, Any]] = []

    async def publish(self, event: str, payload: Any) -> int:
        if self.should_fail:
            raise RuntimeError("broadcast transport down")

        self.events.append((event, payload))
        return 1

    @property
    def event_names(self) -> list[str]:
        return [name for name, _ in self.events]

    def payloads_of(self, event: str) -> list[Any]:
        """특정 이벤트의 payload 목록"""
        return [payload for name, payload in self.events if name == event]
