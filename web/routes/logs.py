"""
감사 로그 API 라우트

GET /api/logs       - 로그 목록 (페이지네이션, 검색)
GET /api/logs/{id}  - 로그 단건
"""

from fastapi import APIRouter, Depends, Query

from core.errors import NotFoundError
from core.storage.audit_store import AuditLogStore
from core.types import Actor
from web.dependencies import get_audit_store, get_current_actor
from web.models.responses import LogEntryResponse, LogListResponse

router = APIRouter(prefix="/api/logs", tags=["Logs"])


@router.get("", response_model=LogListResponse)
async def list_logs(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=50, ge=1, le=500),
    search: str | None = Query(default=None, description="username/action/details 검색어"),
    actor: Actor = Depends(get_current_actor),
    store: AuditLogStore = Depends(get_audit_store),
) -> LogListResponse:
    """감사 로그 목록 (최신순)"""
    result = await store.list_logs(page=page, limit=limit, search=search)
    return LogListResponse(**result)


@router.get("/{log_id}", response_model=LogEntryResponse)
async def get_log(
    log_id: int,
    actor: Actor = Depends(get_current_actor),
    store: AuditLogStore = Depends(get_audit_store),
) -> LogEntryResponse:
    """감사 로그 단건"""
    log = await store.get(log_id)
    if log is None:
        raise NotFoundError(f"Log {log_id} not found")
    return LogEntryResponse(**log)
