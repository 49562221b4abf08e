"""
헬스 체크 엔드포인트

GET /health - 서버 및 DB 상태 확인
"""

import logging

from fastapi import APIRouter, Depends

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.errors import StorageError
from core.utils.timezone import now_utc
from web.dependencies import get_db
from web.models.responses import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(db: SQLiteAdapter = Depends(get_db)) -> HealthResponse:
    """서버 상태 확인

    Returns:
        HealthResponse: status, database, timestamp
    """
    database = "ok"
    try:
        await db.fetchone("SELECT 1")
    except StorageError as e:
        logger.warning("Health check DB 오류", extra={"error": str(e)})
        database = "error"

    return HealthResponse(
        status="ok" if database == "ok" else "degraded",
        database=database,
        timestamp=now_utc(),
    )
