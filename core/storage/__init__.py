"""
스토리지 모듈

감사 로그 저장소
"""

from core.storage.audit_store import AuditLogStore

__all__ = [
    "AuditLogStore",
]
