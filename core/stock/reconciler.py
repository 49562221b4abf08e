"""
Stock Reconciler

원장 변경(생성/삭제)을 재고 Projection 가산으로 변환하고,
Projection이 의심될 때 원장 전체로부터 재계산(resync)하는 엔진.

불변식: 모든 karat k에 대해
    stock[k] == Σ (입고 +amount, 출고 -amount) over 원장[karat == k]
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.constants import Defaults
from core.errors import ProjectionDriftError, StorageError
from core.ledger.store import LedgerStore
from core.ledger.types import NewVaultTransaction, VaultTransaction
from core.stock.projection import StockBalance, StockProjection

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    """재고 동기화 결과"""

    processed_count: int
    karat: int | None = None
    balances: list[StockBalance] = field(default_factory=list)


class StockReconciler:
    """Stock Reconciler

    재고 Projection의 유일한 쓰기 주체.

    동작 방식:
    1. 생성: 원장 기록 → +amount(입고) / -amount(출고) 가산
    2. 삭제: 원장에서 조회+삭제 → 생성 시의 반대 부호 가산
    3. 재동기화: 재고 0 초기화 → 원장 오름차순 재생 → 처리 건수 반환

    atomic=True (기본값):
        원장 기록과 재고 가산을 한 트랜잭션으로 묶음.
        재고 가산 실패 시 원장 기록도 롤백되고 StorageError 발생.
    atomic=False:
        원장 기록을 먼저 커밋. 재고 가산 실패 시 원장은 그대로 두고
        ProjectionDriftError 발생 (자동 복구 없음, resync로 복구).

    Args:
        db: SQLite 어댑터 (쓰기 가능)
        ledger: 원장 저장소 (None이면 생성)
        projection: 재고 Projection (None이면 생성)
        atomic: 원장+재고 단일 트랜잭션 여부
        batch_size: resync 시 원장 배치 크기

    사용 예시:
    ```python
    reconciler = StockReconciler(db)

    txn = await reconciler.apply_create(new_txn)
    await reconciler.apply_delete(txn.id)

    result = await reconciler.resync()
    print(f"Processed {result.processed_count} transactions")
    ```
    """

    def __init__(
        self,
        db: SQLiteAdapter,
        ledger: LedgerStore | None = None,
        projection: StockProjection | None = None,
        atomic: bool = True,
        batch_size: int = Defaults.SYNC_BATCH_SIZE,
    ):
        self.db = db
        self.ledger = ledger or LedgerStore(db)
        self.projection = projection or StockProjection(db)
        self.atomic = atomic
        self.batch_size = batch_size

    async def apply_create(self, txn: NewVaultTransaction) -> VaultTransaction:
        """거래 생성 + 재고 반영

        Raises:
            ValidationError: 입력 오류 (재고 변경 없음)
            StorageError: 저장소 오류 (atomic 모드에서는 원장도 롤백)
            ProjectionDriftError: non-atomic 모드에서 재고 반영 실패
        """
        if self.atomic:
            async with self.db.transaction():
                stored = await self.ledger.insert(txn)
                await self.projection.upsert_adjust(stored.karat, stored.signed_amount)
            return stored

        async with self.db.transaction():
            stored = await self.ledger.insert(txn)

        await self._adjust_committed(stored, stored.signed_amount, operation="create")
        return stored

    async def apply_delete(self, transaction_id: int) -> VaultTransaction:
        """거래 삭제 + 역방향 재고 반영

        Raises:
            NotFoundError: 거래 없음 (재고 변경 없음)
            StorageError: 저장소 오류
            ProjectionDriftError: non-atomic 모드에서 재고 반영 실패
        """
        if self.atomic:
            async with self.db.transaction():
                deleted = await self.ledger.delete_by_id(transaction_id)
                await self.projection.upsert_adjust(deleted.karat, deleted.reversing_amount)
            return deleted

        async with self.db.transaction():
            deleted = await self.ledger.delete_by_id(transaction_id)

        await self._adjust_committed(deleted, deleted.reversing_amount, operation="delete")
        return deleted

    async def _adjust_committed(
        self,
        txn: VaultTransaction,
        delta: Decimal,
        operation: str,
    ) -> None:
        """커밋된 원장 변경에 대한 재고 반영 (non-atomic 모드)"""
        try:
            async with self.db.transaction():
                await self.projection.upsert_adjust(txn.karat, delta)
        except StorageError as e:
            logger.error(
                f"Projection drift: {operation} 재고 반영 실패, resync 필요",
                extra={
                    "transaction_id": txn.id,
                    "karat": txn.karat,
                    "delta": str(delta),
                    "error": str(e),
                },
            )
            raise ProjectionDriftError(
                f"Transaction {txn.id} was {operation}d but stock for "
                f"{txn.karat}k was not updated; run stock sync to repair",
                transaction_id=txn.id,
                karat=txn.karat,
                delta=delta,
            ) from e

    async def resync(self, karat: int | None = None) -> SyncResult:
        """원장 전체로부터 재고 재계산

        초기화와 재생을 하나의 BEGIN IMMEDIATE 트랜잭션으로 수행하므로
        진행 중에 다른 생성/삭제가 끼어들어 반영분이 사라지지 않음.

        Args:
            karat: 지정 시 해당 karat만 재계산

        Returns:
            SyncResult (처리 건수, 재계산 후 재고)
        """
        logger.info("Stock resync 시작", extra={"karat": karat})

        processed = 0

        async with self.db.transaction():
            await self.projection.reset_all(karat)

            async for batch in self.ledger.iter_batches(self.batch_size, karat=karat):
                # 같은 karat 행 갱신이므로 순차 적용
                for txn in batch:
                    await self.projection.upsert_adjust(txn.karat, txn.signed_amount)
                    processed += 1

        balances = await self.projection.list_all()

        logger.info(
            f"Stock resync 완료: {processed} transactions",
            extra={"karat": karat, "processed": processed},
        )

        return SyncResult(processed_count=processed, karat=karat, balances=balances)
