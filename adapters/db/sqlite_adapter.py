"""
SQLite 어댑터

WAL 모드로 SQLite 연결 관리.
요청별 연결이 동시에 쓰기를 시도해도 SQLite writer lock으로 직렬화됨.

주의: SQLite alias로 time, count 사용 금지 (예약어)
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator

import aiosqlite

from core.errors import StorageError

logger = logging.getLogger(__name__)


async def create_connection(
    db_path: Path | str,
    readonly: bool = False,
) -> aiosqlite.Connection:
    """SQLite 연결 생성 (WAL 모드)

    Args:
        db_path: DB 파일 경로 (":memory:" 허용)
        readonly: 읽기 전용 여부

    Returns:
        aiosqlite 연결 객체
    """
    db_path_str = str(db_path)
    in_memory = db_path_str == ":memory:"

    if not in_memory:
        # 디렉토리가 없으면 생성
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    try:
        if readonly and not in_memory:
            conn = await aiosqlite.connect(f"file:{db_path_str}?mode=ro", uri=True)
        else:
            conn = await aiosqlite.connect(db_path_str)

        if not readonly:
            await conn.execute("PRAGMA journal_mode=WAL")

        # 동시 접근 설정
        await conn.execute("PRAGMA busy_timeout=30000")  # 30초 대기
        await conn.execute("PRAGMA foreign_keys=ON")
    except aiosqlite.Error as e:
        raise StorageError(f"Database unavailable: {e}") from e

    logger.debug(
        "SQLite 연결 생성",
        extra={"db_path": db_path_str, "readonly": readonly},
    )

    return conn


class SQLiteAdapter:
    """SQLite 어댑터

    WAL 모드로 SQLite 연결 관리.
    트랜잭션 컨텍스트 매니저 제공.
    aiosqlite 예외는 이 계층에서 StorageError로 변환됨.

    Args:
        db_path: DB 파일 경로
        readonly: 읽기 전용 여부 (조회 API용)

    사용 예시:
    ```python
    adapter = SQLiteAdapter(db_path)
    await adapter.connect()

    async with adapter.transaction():
        await adapter.execute("INSERT INTO ...")

    await adapter.close()
    ```
    """

    def __init__(self, db_path: Path | str, readonly: bool = False):
        self.db_path = Path(db_path)
        self.readonly = readonly
        self._conn: aiosqlite.Connection | None = None
        # 하나의 연결을 여러 코루틴이 공유할 때 트랜잭션이 섞이지 않도록 보호
        self._tx_lock = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        """연결 상태 확인"""
        return self._conn is not None

    def _require_conn(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise StorageError("Not connected to database")
        return self._conn

    async def connect(self) -> None:
        """연결 생성"""
        if self._conn is not None:
            return

        self._conn = await create_connection(self.db_path, self.readonly)

    async def close(self) -> None:
        """연결 종료"""
        if self._conn is not None:
            await self._conn.close()
            self._conn = None
            logger.debug("SQLite 연결 종료")

    async def execute(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> aiosqlite.Cursor:
        """SQL 실행"""
        conn = self._require_conn()

        try:
            if parameters:
                return await conn.execute(sql, parameters)
            return await conn.execute(sql)
        except aiosqlite.Error as e:
            raise StorageError(f"Database error: {e}") from e

    async def fetchone(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> tuple[Any, ...] | None:
        """단일 행 조회"""
        cursor = await self.execute(sql, parameters)
        return await cursor.fetchone()

    async def fetchall(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> list[tuple[Any, ...]]:
        """전체 행 조회"""
        cursor = await self.execute(sql, parameters)
        return list(await cursor.fetchall())

    async def commit(self) -> None:
        """커밋"""
        if self._conn is not None:
            try:
                await self._conn.commit()
            except aiosqlite.Error as e:
                raise StorageError(f"Commit failed: {e}") from e

    async def rollback(self) -> None:
        """롤백"""
        if self._conn is not None:
            await self._conn.rollback()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """쓰기 트랜잭션 컨텍스트 매니저 (BEGIN IMMEDIATE)

        진입 시 SQLite writer lock을 먼저 획득하므로
        블록 안의 read-modify-write는 다른 연결의 쓰기와 섞이지 않음.
        성공 시 자동 커밋, 예외 시 자동 롤백.

        사용 예시:
        ```python
        async with adapter.transaction():
            await adapter.execute("INSERT INTO ...")
            # 성공 시 자동 커밋
        ```
        """
        conn = self._require_conn()

        async with self._tx_lock:
            await self.execute("BEGIN IMMEDIATE")
            try:
                yield conn
                await self.commit()
            except BaseException:
                await conn.rollback()
                raise

    async def table_exists(self, table_name: str) -> bool:
        """테이블 존재 여부 확인"""
        result = await self.fetchone(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
            (table_name,),
        )
        return result is not None

    # -------------------------------------------------------------------------
    # 컨텍스트 매니저
    # -------------------------------------------------------------------------

    async def __aenter__(self) -> "SQLiteAdapter":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


async def init_schema(adapter: SQLiteAdapter) -> None:
    """스키마 초기화 (테이블 생성)

    Args:
        adapter: 연결된 SQLiteAdapter
    """
    # 외부 금고 원장 (source of truth)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS external_vault_transactions (
            id                  INTEGER PRIMARY KEY AUTOINCREMENT,
            type                TEXT NOT NULL CHECK (type IN ('deposit', 'withdrawal')),
            amount              TEXT NOT NULL,
            karat               INTEGER NOT NULL,
            notes               TEXT NOT NULL DEFAULT '',

            recorded_by_id      INTEGER,
            recorded_by_name    TEXT NOT NULL,
            associated_party_id INTEGER,

            created_at          TEXT NOT NULL
        )
    """)

    # 외부 금고 재고 Projection (karat별 1행, 밀리그램 정수)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS external_vault_stock (
            id               INTEGER PRIMARY KEY AUTOINCREMENT,
            karat            INTEGER NOT NULL UNIQUE,
            amount_mg        INTEGER NOT NULL DEFAULT 0,
            updated_at       TEXT NOT NULL
        )
    """)

    # 감사 로그
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS system_logs (
            id               INTEGER PRIMARY KEY AUTOINCREMENT,
            username         TEXT,
            action           TEXT NOT NULL,
            entity_type      TEXT NOT NULL DEFAULT '',
            entity_name      TEXT NOT NULL DEFAULT '',
            details          TEXT,
            created_at       TEXT NOT NULL DEFAULT (datetime('now'))
        )
    """)

    # 인덱스 생성
    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_vault_tx_created
        ON external_vault_transactions(created_at, id)
    """)

    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_vault_tx_karat
        ON external_vault_transactions(karat, created_at, id)
    """)

    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_system_logs_created_at
        ON system_logs(created_at)
    """)

    await adapter.commit()

    logger.info("스키마 초기화 완료")
