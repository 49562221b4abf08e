"""
Mock 어댑터

테스트용 Mock 구현체 제공.
Protocol 준수하여 실제 구현체와 교체 가능.
"""

from adapters.mock.audit_log import AuditRecord, MockAuditLog
from adapters.mock.broadcaster import MockBroadcaster
from adapters.mock.notifier import MockNotifier, NotificationRecord

__all__ = [
    "MockAuditLog",
    "AuditRecord",
    "MockBroadcaster",
    "MockNotifier",
    "NotificationRecord",
]
