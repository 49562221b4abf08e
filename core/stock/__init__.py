"""
외부 금고 재고 모듈

karat별 재고 Projection, 원장→재고 Reconciler, Drift 점검
"""

from core.stock.drift import DriftDetector, DriftInfo
from core.stock.projection import StockBalance, StockProjection
from core.stock.reconciler import StockReconciler, SyncResult

__all__ = [
    "StockProjection",
    "StockBalance",
    "StockReconciler",
    "SyncResult",
    "DriftDetector",
    "DriftInfo",
]
