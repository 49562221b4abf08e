"""
외부 금고 서비스

거래 생성/삭제, 재고 동기화, 조회의 공개 연산.
StockReconciler로 원장과 재고를 조정하고
성공 후 감사 로그를 기록하고 실시간 이벤트는 백그라운드로 발행
(둘 다 실패해도 연산은 성공, 이벤트 발행은 응답을 지연시키지 않음).
"""

import asyncio
import logging
from typing import Any

from adapters.db.sqlite_adapter import SQLiteAdapter
from adapters.interfaces import IAuditLog, IBroadcaster, INotifier
from core.constants import AuditActions, Defaults, VaultEvents
from core.errors import ProjectionDriftError
from core.ledger.store import LedgerStore
from core.ledger.types import NewVaultTransaction, VaultTransaction, parse_karat
from core.stock.drift import DriftDetector, DriftInfo
from core.stock.projection import StockBalance, StockProjection
from core.stock.reconciler import StockReconciler, SyncResult
from core.types import Actor

logger = logging.getLogger(__name__)

# 발행 중인 태스크 참조 유지 (요청이 끝나도 GC되지 않도록)
_background_tasks: set[asyncio.Task] = set()


class VaultService:
    """외부 금고 서비스

    협력 객체(감사 로그, 브로드캐스터, 알림)는 생성자로 주입.

    Args:
        db: SQLiteAdapter 인스턴스 (쓰기 가능)
        audit_log: 감사 로그 기록기
        broadcaster: 실시간 이벤트 발행기
        notifier: 운영자 알림 (선택, drift 발생 시 사용)
        atomic: 원장+재고 단일 트랜잭션 여부
        sync_batch_size: 재동기화 배치 크기
    """

    def __init__(
        self,
        db: SQLiteAdapter,
        audit_log: IAuditLog,
        broadcaster: IBroadcaster,
        notifier: INotifier | None = None,
        atomic: bool = True,
        sync_batch_size: int = Defaults.SYNC_BATCH_SIZE,
    ):
        self.db = db
        self.audit_log = audit_log
        self.broadcaster = broadcaster
        self.notifier = notifier
        self._publish_tasks: set[asyncio.Task] = set()

        self.ledger = LedgerStore(db)
        self.projection = StockProjection(db)
        self.reconciler = StockReconciler(
            db,
            ledger=self.ledger,
            projection=self.projection,
            atomic=atomic,
            batch_size=sync_batch_size,
        )

    # =========================================================================
    # 변경 연산
    # =========================================================================

    async def create_transaction(
        self,
        actor: Actor,
        kind: Any,
        amount: Any,
        karat: Any,
        notes: str | None = None,
        associated_party_id: int | None = None,
    ) -> VaultTransaction:
        """금고 거래 생성

        Raises:
            ValidationError: 입력 오류 (저장소 변경 없음)
            StorageError: 저장소 오류
            ProjectionDriftError: 원장은 기록되었으나 재고 반영 실패
        """
        new_txn = NewVaultTransaction.create(
            kind=kind,
            amount=amount,
            karat=karat,
            recorded_by_name=actor.username,
            recorded_by_id=actor.user_id,
            notes=notes,
            associated_party_id=associated_party_id,
        )

        try:
            txn = await self.reconciler.apply_create(new_txn)
        except ProjectionDriftError as e:
            await self._audit_transaction(actor, AuditActions.TRANSACTION_CREATED, e.transaction_id, new_txn)
            await self._notify_drift(e)
            raise

        logger.info(
            f"금고 거래 생성: #{txn.id} {txn.kind.value} {txn.amount}g ({txn.karat}k)",
            extra={"username": actor.username},
        )

        await self._audit_transaction(actor, AuditActions.TRANSACTION_CREATED, txn.id, txn)
        await self._publish_with_stock([(VaultEvents.TRANSACTION_CREATED, txn.to_dict())])

        return txn

    async def delete_transaction(self, actor: Actor, transaction_id: int) -> VaultTransaction:
        """금고 거래 삭제

        Raises:
            NotFoundError: 거래 없음 (저장소 변경 없음)
            StorageError: 저장소 오류
            ProjectionDriftError: 원장은 삭제되었으나 재고 반영 실패
        """
        try:
            deleted = await self.reconciler.apply_delete(transaction_id)
        except ProjectionDriftError as e:
            await self._audit(
                actor,
                AuditActions.TRANSACTION_DELETED,
                f"transaction #{transaction_id} (stock not updated)",
                entity_name=f"#{transaction_id}",
            )
            await self._notify_drift(e)
            raise

        logger.info(
            f"금고 거래 삭제: #{deleted.id} {deleted.kind.value} {deleted.amount}g ({deleted.karat}k)",
            extra={"username": actor.username},
        )

        await self._audit_transaction(actor, AuditActions.TRANSACTION_DELETED, deleted.id, deleted)
        await self._publish_with_stock([(VaultEvents.TRANSACTION_DELETED, {"id": deleted.id})])

        return deleted

    async def sync_stock(self, actor: Actor, karat: Any = None) -> SyncResult:
        """원장으로부터 재고 재계산

        Args:
            actor: 행위자
            karat: 지정 시 해당 karat만 재계산

        Raises:
            ValidationError: karat 형식 오류
            StorageError: 저장소 오류
        """
        scoped_karat = parse_karat(karat) if karat is not None else None

        result = await self.reconciler.resync(scoped_karat)

        scope = f" ({scoped_karat}k)" if scoped_karat is not None else ""
        await self._audit(
            actor,
            AuditActions.STOCK_SYNCED,
            f"{result.processed_count} transactions processed{scope}",
        )
        self._publish(
            [
                (
                    VaultEvents.STOCK_SYNCED,
                    {"processed_count": result.processed_count, "karat": scoped_karat},
                ),
                (VaultEvents.STOCK_UPDATED, [b.to_dict() for b in result.balances]),
            ]
        )

        return result

    # =========================================================================
    # 조회 연산
    # =========================================================================

    async def list_transactions(
        self,
        limit: int | None = None,
        offset: int = 0,
        karat: int | None = None,
    ) -> list[VaultTransaction]:
        """거래 목록 (최신순)"""
        return await self.ledger.list_all(
            ascending=False,
            karat=karat,
            limit=limit,
            offset=offset,
        )

    async def count_transactions(self, karat: int | None = None) -> int:
        """거래 수"""
        return await self.ledger.count(karat)

    async def list_stock(self) -> list[StockBalance]:
        """karat별 재고 (karat 오름차순)"""
        return await self.projection.list_all()

    async def check_drift(self) -> list[DriftInfo]:
        """원장 합계와 재고 비교 (읽기 전용, 복구하지 않음)"""
        detector = DriftDetector(self.ledger, self.projection, self.reconciler.batch_size)
        return await detector.detect()

    # =========================================================================
    # 협력 객체 호출 (실패 시 경고만)
    # =========================================================================

    async def _audit_transaction(
        self,
        actor: Actor,
        action: str,
        transaction_id: int,
        txn: NewVaultTransaction | VaultTransaction,
    ) -> None:
        await self._audit(
            actor,
            action,
            f"{txn.kind.value}: {txn.amount}g ({txn.karat}k)",
            entity_name=f"#{transaction_id}",
        )

    async def _audit(
        self,
        actor: Actor,
        action: str,
        details: str,
        entity_name: str = "",
    ) -> None:
        try:
            await self.audit_log.record(
                actor,
                action,
                details,
                entity_type=AuditActions.ENTITY_TYPE,
                entity_name=entity_name,
            )
        except Exception as e:
            logger.warning(
                f"감사 로그 기록 실패: {action}",
                extra={"error": str(e), "username": actor.username},
            )

    def _publish(self, events: list[tuple[str, Any]]) -> None:
        """이벤트를 백그라운드 태스크로 발행

        한 연산의 이벤트는 한 태스크에서 순서대로 전송.
        느린 클라이언트가 있어도 응답은 기다리지 않음.
        """
        task = asyncio.create_task(self._send_events(events))
        _background_tasks.add(task)
        self._publish_tasks.add(task)
        task.add_done_callback(_background_tasks.discard)
        task.add_done_callback(self._publish_tasks.discard)

    async def _send_events(self, events: list[tuple[str, Any]]) -> None:
        for event, payload in events:
            try:
                await self.broadcaster.publish(event, payload)
            except Exception as e:
                logger.warning(f"브로드캐스트 실패: {event}", extra={"error": str(e)})

    async def _publish_with_stock(self, events: list[tuple[str, Any]]) -> None:
        """이벤트 + 현재 재고 발행

        재고는 요청 연결이 닫히기 전에 조회해 둠.
        """
        try:
            balances = await self.projection.list_all()
        except Exception as e:
            logger.warning("재고 조회 실패, stock 이벤트 생략", extra={"error": str(e)})
        else:
            events = events + [(VaultEvents.STOCK_UPDATED, [b.to_dict() for b in balances])]
        self._publish(events)

    async def flush_events(self) -> None:
        """발행 대기 중인 이벤트 전송 완료까지 대기"""
        if self._publish_tasks:
            await asyncio.gather(*self._publish_tasks)

    async def _notify_drift(self, error: ProjectionDriftError) -> None:
        if self.notifier is None:
            return
        try:
            await self.notifier.send(
                f"External vault stock drift: {error.karat}k needs stock sync",
                level="ERROR",
                extra={
                    "transaction_id": error.transaction_id,
                    "karat": error.karat,
                    "delta": str(error.delta),
                },
            )
        except Exception as e:
            logger.warning("Drift 알림 전송 실패", extra={"error": str(e)})
