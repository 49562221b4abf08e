"""
Drift Detector

원장 합계와 재고 Projection을 비교하여 불일치 감지.
운영자가 호출하는 읽기 전용 점검이며 복구는 하지 않음 (복구는 resync).
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from core.ledger.store import LedgerStore
from core.ledger.types import format_amount
from core.stock.projection import StockProjection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DriftInfo:
    """karat별 Drift 정보"""

    karat: int
    expected: Decimal  # 원장 합계
    actual: Decimal | None  # Projection 값 (행 없으면 None)

    @property
    def difference(self) -> Decimal:
        return (self.actual or Decimal("0")) - self.expected

    def to_dict(self) -> dict[str, Any]:
        return {
            "karat": self.karat,
            "expected": format_amount(self.expected),
            "actual": format_amount(self.actual) if self.actual is not None else None,
            "difference": format_amount(self.difference),
        }


class DriftDetector:
    """Drift 감지기

    Args:
        ledger: 원장 저장소
        projection: 재고 Projection
        batch_size: 원장 배치 크기
    """

    def __init__(
        self,
        ledger: LedgerStore,
        projection: StockProjection,
        batch_size: int = 500,
    ):
        self.ledger = ledger
        self.projection = projection
        self.batch_size = batch_size

    async def ledger_totals(self) -> dict[int, Decimal]:
        """원장 기준 karat별 합계"""
        totals: dict[int, Decimal] = defaultdict(Decimal)

        async for batch in self.ledger.iter_batches(self.batch_size):
            for txn in batch:
                totals[txn.karat] += txn.signed_amount

        return dict(totals)

    async def detect(self) -> list[DriftInfo]:
        """불일치 karat 목록 (일치하면 빈 리스트)"""
        expected = await self.ledger_totals()
        actual = {b.karat: b.amount for b in await self.projection.list_all()}

        drifts: list[DriftInfo] = []

        for karat in sorted(set(expected) | set(actual)):
            exp = expected.get(karat, Decimal("0"))
            act = actual.get(karat)

            # 원장 합계 0 + 행 없음은 정상 (한 번도 반영된 적 없음)
            if act is None and exp == 0:
                continue
            if act is not None and act == exp:
                continue

            drifts.append(DriftInfo(karat=karat, expected=exp, actual=act))

        if drifts:
            logger.warning(
                f"Stock drift detected: {len(drifts)} karat(s)",
                extra={"karats": [d.karat for d in drifts]},
            )

        return drifts
