"""
감사 로그 저장소

system_logs 테이블 기록 및 조회.
IAuditLog Protocol 구현.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Any

from core.types import Actor
from core.utils.timezone import now_utc_iso

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


def _row_to_dict(row: tuple[Any, ...]) -> dict[str, Any]:
    return {
        "id": row[0],
        "username": row[1],
        "action": row[2],
        "entity_type": row[3],
        "entity_name": row[4],
        "details": row[5],
        "created_at": row[6],
    }


class AuditLogStore:
    """감사 로그 저장소

    Args:
        db: SQLite 어댑터
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    async def record(
        self,
        actor: Actor,
        action: str,
        details: str,
        entity_type: str = "",
        entity_name: str = "",
    ) -> int:
        """감사 로그 기록 (자체 트랜잭션)

        Returns:
            생성된 로그 ID
        """
        async with self.db.transaction():
            cursor = await self.db.execute(
                """
                INSERT INTO system_logs (
                    username, action, entity_type, entity_name, details, created_at
                ) VALUES (?, ?, ?, ?, ?, ?)
                """,
                (actor.username, action, entity_type, entity_name, details, now_utc_iso()),
            )

        logger.debug(f"Audit log recorded: {action}", extra={"username": actor.username})
        return cursor.lastrowid

    async def get(self, log_id: int) -> dict[str, Any] | None:
        """로그 단건 조회"""
        row = await self.db.fetchone(
            """
            SELECT id, username, action, entity_type, entity_name, details, created_at
            FROM system_logs WHERE id = ?
            """,
            (log_id,),
        )
        return _row_to_dict(row) if row else None

    async def list_logs(
        self,
        page: int = 1,
        limit: int = 50,
        search: str | None = None,
    ) -> dict[str, Any]:
        """로그 목록 조회 (최신순, 페이지네이션)

        Args:
            page: 페이지 번호 (1부터)
            limit: 페이지 크기
            search: username/action/details 부분 일치 검색어

        Returns:
            logs, pagination 포함 응답
        """
        where = ""
        params: list[Any] = []

        if search:
            pattern = f"%{search}%"
            where = " WHERE username LIKE ? OR action LIKE ? OR details LIKE ?"
            params = [pattern, pattern, pattern]

        count_row = await self.db.fetchone(
            f"SELECT COUNT(*) FROM system_logs{where}",
            tuple(params),
        )
        total = count_row[0] if count_row else 0

        offset = (page - 1) * limit
        rows = await self.db.fetchall(
            f"""
            SELECT id, username, action, entity_type, entity_name, details, created_at
            FROM system_logs{where}
            ORDER BY created_at DESC, id DESC
            LIMIT ? OFFSET ?
            """,
            tuple(params + [limit, offset]),
        )

        return {
            "logs": [_row_to_dict(row) for row in rows],
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "pages": math.ceil(total / limit) if limit else 0,
            },
        }
