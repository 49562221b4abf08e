"""
외부 금고 재고 Projection

external_vault_stock 테이블 (karat별 1행).
원장에서 파생된 상태이며 StockReconciler만 쓰기 가능.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from core.constants import AmountRules
from core.errors import ValidationError
from core.ledger.types import format_amount
from core.utils.timezone import now_utc_iso

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


def grams_to_mg(amount: Decimal) -> int:
    """그램 Decimal → 밀리그램 정수

    Raises:
        ValidationError: 밀리그램 이하 정밀도가 남는 경우
    """
    scaled = amount * AmountRules.MG_PER_GRAM
    if scaled != scaled.to_integral_value():
        raise ValidationError(
            f"Amount supports at most {AmountRules.DECIMAL_PLACES} decimal places"
        )
    return int(scaled)


def mg_to_grams(amount_mg: int) -> Decimal:
    """밀리그램 정수 → 그램 Decimal"""
    return Decimal(amount_mg) / AmountRules.MG_PER_GRAM


@dataclass(frozen=True)
class StockBalance:
    """karat별 재고 (음수 가능 - 출고가 기록된 입고를 초과한 경우)"""

    karat: int
    amount: Decimal
    updated_at: datetime

    def to_dict(self) -> dict[str, Any]:
        """딕셔너리 변환"""
        return {
            "karat": self.karat,
            "amount": format_amount(self.amount),
            "updated_at": self.updated_at.isoformat(),
        }


def _row_to_balance(row: tuple[Any, ...]) -> StockBalance:
    return StockBalance(
        karat=row[0],
        amount=mg_to_grams(row[1]),
        updated_at=datetime.fromisoformat(row[2]),
    )


class StockProjection:
    """재고 Projection 저장소

    쓰기 연산은 upsert_adjust(가산)와 reset_all(0으로 초기화)뿐.
    행은 삭제하지 않음 - 한 번 등장한 karat은 0으로 남음.
    커밋하지 않음 - 트랜잭션 경계는 호출자가 결정.

    Args:
        db: SQLite 어댑터
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    async def upsert_adjust(self, karat: int, delta: Decimal) -> None:
        """karat 재고에 delta 가산 (없으면 delta로 생성)

        단일 SQL 문으로 read-modify-write를 수행하므로
        같은 karat에 대한 동시 반영이 유실되지 않음.
        정수(밀리그램) 연산이라 누적 오차 없음.
        """
        delta_mg = grams_to_mg(delta)

        await self.db.execute(
            """
            INSERT INTO external_vault_stock (karat, amount_mg, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(karat) DO UPDATE SET
                amount_mg = amount_mg + excluded.amount_mg,
                updated_at = excluded.updated_at
            """,
            (karat, delta_mg, now_utc_iso()),
        )

        logger.debug(
            f"Stock adjusted: {karat}k",
            extra={"karat": karat, "delta": str(delta)},
        )

    async def reset_all(self, karat: int | None = None) -> int:
        """재고를 0으로 초기화 (행 유지)

        Args:
            karat: 지정 시 해당 karat만 초기화

        Returns:
            초기화된 행 수
        """
        if karat is None:
            cursor = await self.db.execute(
                "UPDATE external_vault_stock SET amount_mg = 0, updated_at = ?",
                (now_utc_iso(),),
            )
        else:
            cursor = await self.db.execute(
                "UPDATE external_vault_stock SET amount_mg = 0, updated_at = ? WHERE karat = ?",
                (now_utc_iso(), karat),
            )
        return cursor.rowcount

    async def get(self, karat: int) -> StockBalance | None:
        """karat 재고 조회"""
        row = await self.db.fetchone(
            "SELECT karat, amount_mg, updated_at FROM external_vault_stock WHERE karat = ?",
            (karat,),
        )
        return _row_to_balance(row) if row else None

    async def list_all(self) -> list[StockBalance]:
        """전체 재고 조회 (karat 오름차순)"""
        rows = await self.db.fetchall(
            "SELECT karat, amount_mg, updated_at FROM external_vault_stock ORDER BY karat"
        )
        return [_row_to_balance(row) for row in rows]
