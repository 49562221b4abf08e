"""
Mock 감사 로그

테스트용 IAuditLog 구현.
"""

from dataclasses import dataclass

from core.errors import StorageError
from core.types import Actor


@dataclass
class AuditRecord:
    """감사 로그 기록"""

    actor: Actor
    action: str
    details: str
    entity_type: str
    entity_name: str


class MockAuditLog:
    """Mock 감사 로그

    Args:
        should_fail: True면 record()가 StorageError 발생
    """

    def __init__(self, should_fail: bool = False):
        self.should_fail = should_fail
        self.records: list[AuditRecord] = []

    async def record(
        self,
        actor: Actor,
        action: str,
        details: str,
        entity_type: str = "",
        entity_name: str = "",
    ) -> int:
        if self.should_fail:
            raise StorageError("audit log unavailable")

        self.records.append(AuditRecord(actor, action, details, entity_type, entity_name))
        return len(self.records)

    @property
    def actions(self) -> list[str]:
        return [r.action for r in self.records]
