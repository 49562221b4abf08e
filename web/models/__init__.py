"""
Web 모델 패키지

Pydantic 스키마 정의
"""

from web.models.requests import CreateTransactionRequest
from web.models.responses import (
    DriftListResponse,
    DriftResponse,
    ErrorResponse,
    HealthResponse,
    LogListResponse,
    MessageResponse,
    StockListResponse,
    StockResponse,
    SyncResponse,
    TransactionCreatedResponse,
    TransactionListResponse,
    TransactionResponse,
)

__all__ = [
    # Requests
    "CreateTransactionRequest",
    # Responses
    "DriftListResponse",
    "DriftResponse",
    "ErrorResponse",
    "HealthResponse",
    "LogListResponse",
    "MessageResponse",
    "StockListResponse",
    "StockResponse",
    "SyncResponse",
    "TransactionCreatedResponse",
    "TransactionListResponse",
    "TransactionResponse",
]
