"""
금고 원장 저장소

external_vault_transactions 테이블 저장/삭제/조회.
재고 Projection은 건드리지 않음 (StockReconciler 담당).
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, AsyncIterator

from core.errors import NotFoundError, ValidationError
from core.ledger.types import (
    NewVaultTransaction,
    VaultTransaction,
    format_amount,
    parse_amount,
    parse_karat,
)
from core.types import TransactionKind
from core.utils.timezone import now_utc

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


_COLUMNS = """
    id, type, amount, karat, notes,
    recorded_by_id, recorded_by_name, associated_party_id, created_at
"""


def _row_to_transaction(row: tuple[Any, ...]) -> VaultTransaction:
    return VaultTransaction(
        id=row[0],
        kind=TransactionKind(row[1]),
        amount=Decimal(row[2]),
        karat=row[3],
        notes=row[4] or "",
        recorded_by_id=row[5],
        recorded_by_name=row[6],
        associated_party_id=row[7],
        created_at=datetime.fromisoformat(row[8]),
    )


class LedgerStore:
    """금고 원장 저장소

    거래 행의 유일한 소유자.
    커밋하지 않음 - 트랜잭션 경계는 호출자가 결정.

    Args:
        db: SQLite 어댑터
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    async def insert(self, txn: NewVaultTransaction) -> VaultTransaction:
        """거래 저장

        ID와 생성 시각을 부여.

        Args:
            txn: 검증된 신규 거래

        Returns:
            저장된 거래

        Raises:
            ValidationError: 수량 <= 0 또는 유형 오류
        """
        # 직접 생성된 NewVaultTransaction도 저장 전에 다시 검증
        kind = TransactionKind.parse(txn.kind)
        amount = parse_amount(txn.amount)
        karat = parse_karat(txn.karat)
        if not txn.recorded_by_name:
            raise ValidationError("recorded_by is required")

        created_at = now_utc()

        cursor = await self.db.execute(
            """
            INSERT INTO external_vault_transactions (
                type, amount, karat, notes,
                recorded_by_id, recorded_by_name, associated_party_id, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                kind.value,
                format_amount(amount),
                karat,
                txn.notes,
                txn.recorded_by_id,
                txn.recorded_by_name,
                txn.associated_party_id,
                created_at.isoformat(timespec="microseconds"),
            ),
        )

        stored = VaultTransaction(
            id=cursor.lastrowid,
            kind=kind,
            amount=amount,
            karat=karat,
            notes=txn.notes,
            recorded_by_id=txn.recorded_by_id,
            recorded_by_name=txn.recorded_by_name,
            associated_party_id=txn.associated_party_id,
            created_at=created_at,
        )

        logger.debug(f"Vault transaction inserted: {stored.id}")
        return stored

    async def get_by_id(self, transaction_id: int) -> VaultTransaction | None:
        """거래 단건 조회"""
        row = await self.db.fetchone(
            f"SELECT {_COLUMNS} FROM external_vault_transactions WHERE id = ?",
            (transaction_id,),
        )
        return _row_to_transaction(row) if row else None

    async def delete_by_id(self, transaction_id: int) -> VaultTransaction:
        """거래 삭제 (hard delete)

        Returns:
            삭제된 거래 (역방향 재고 반영 계산용)

        Raises:
            NotFoundError: 해당 ID의 거래가 없는 경우
        """
        existing = await self.get_by_id(transaction_id)
        if existing is None:
            raise NotFoundError(f"Transaction not found: {transaction_id}")

        cursor = await self.db.execute(
            "DELETE FROM external_vault_transactions WHERE id = ?",
            (transaction_id,),
        )

        # 다른 연결이 먼저 삭제한 경우
        if cursor.rowcount == 0:
            raise NotFoundError(f"Transaction not found: {transaction_id}")

        logger.debug(f"Vault transaction deleted: {transaction_id}")
        return existing

    async def list_all(
        self,
        ascending: bool = True,
        karat: int | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[VaultTransaction]:
        """거래 목록 조회

        Args:
            ascending: True면 생성 시각 오름차순 (재동기화용), False면 최신순 (화면용)
            karat: karat 필터
            limit: 조회 개수 (None이면 전체)
            offset: 시작 위치
        """
        order = "ASC" if ascending else "DESC"
        sql = f"SELECT {_COLUMNS} FROM external_vault_transactions"
        params: list[Any] = []

        if karat is not None:
            sql += " WHERE karat = ?"
            params.append(karat)

        sql += f" ORDER BY created_at {order}, id {order}"

        if limit is not None:
            sql += " LIMIT ? OFFSET ?"
            params.extend([limit, offset])

        rows = await self.db.fetchall(sql, tuple(params))
        return [_row_to_transaction(row) for row in rows]

    async def iter_batches(
        self,
        batch_size: int,
        karat: int | None = None,
    ) -> AsyncIterator[list[VaultTransaction]]:
        """생성 시각 오름차순 배치 순회 (keyset pagination)

        OFFSET 없이 (created_at, id) 기준으로 이어서 읽으므로
        원장이 커도 배치당 비용이 일정함.
        """
        last_created: str | None = None
        last_id = 0

        while True:
            sql = f"SELECT {_COLUMNS} FROM external_vault_transactions WHERE 1 = 1"
            params: list[Any] = []

            if karat is not None:
                sql += " AND karat = ?"
                params.append(karat)

            if last_created is not None:
                sql += " AND (created_at > ? OR (created_at = ? AND id > ?))"
                params.extend([last_created, last_created, last_id])

            sql += " ORDER BY created_at ASC, id ASC LIMIT ?"
            params.append(batch_size)

            rows = await self.db.fetchall(sql, tuple(params))
            if not rows:
                return

            yield [_row_to_transaction(row) for row in rows]

            last_created = rows[-1][8]
            last_id = rows[-1][0]

            if len(rows) < batch_size:
                return

    async def count(self, karat: int | None = None) -> int:
        """거래 수"""
        if karat is None:
            row = await self.db.fetchone("SELECT COUNT(*) FROM external_vault_transactions")
        else:
            row = await self.db.fetchone(
                "SELECT COUNT(*) FROM external_vault_transactions WHERE karat = ?",
                (karat,),
            )
        return row[0] if row else 0
