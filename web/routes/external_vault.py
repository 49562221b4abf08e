"""
외부 금고 API 라우트

GET    /api/external-vault/transactions        - 거래 목록 (최신순)
POST   /api/external-vault/transactions        - 거래 생성
DELETE /api/external-vault/transactions/{id}   - 거래 삭제
GET    /api/external-vault/stock               - karat별 재고
POST   /api/external-vault/stock/sync          - 원장으로부터 재고 재계산
GET    /api/external-vault/stock/drift         - 원장/재고 불일치 검사
"""

from fastapi import APIRouter, Depends, Query

from core.types import Actor
from web.dependencies import get_current_actor, get_vault_reader, get_vault_service
from web.models.requests import CreateTransactionRequest
from web.models.responses import (
    DriftListResponse,
    DriftResponse,
    MessageResponse,
    StockListResponse,
    StockResponse,
    SyncResponse,
    TransactionCreatedResponse,
    TransactionListResponse,
    TransactionResponse,
)
from web.services.vault_service import VaultService

router = APIRouter(prefix="/api/external-vault", tags=["External Vault"])


@router.get("/transactions", response_model=TransactionListResponse)
async def list_transactions(
    limit: int | None = Query(default=None, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    karat: int | None = Query(default=None, ge=1, le=24),
    actor: Actor = Depends(get_current_actor),
    service: VaultService = Depends(get_vault_reader),
) -> TransactionListResponse:
    """거래 목록 조회 (created_at 내림차순)"""
    transactions = await service.list_transactions(limit=limit, offset=offset, karat=karat)
    total = await service.count_transactions(karat)

    return TransactionListResponse(
        transactions=[TransactionResponse(**t.to_dict()) for t in transactions],
        total=total,
    )


@router.post("/transactions", response_model=TransactionCreatedResponse, status_code=201)
async def create_transaction(
    request: CreateTransactionRequest,
    actor: Actor = Depends(get_current_actor),
    service: VaultService = Depends(get_vault_service),
) -> TransactionCreatedResponse:
    """거래 생성

    입고는 재고 증가, 출고는 재고 감소.
    재고 부족 검사는 하지 않음 (음수 재고 허용).
    """
    txn = await service.create_transaction(
        actor,
        kind=request.type,
        amount=request.amount,
        karat=request.karat,
        notes=request.notes,
        associated_party_id=request.company_id,
    )

    return TransactionCreatedResponse(id=txn.id, message="Transaction created")


@router.delete("/transactions/{transaction_id}", response_model=MessageResponse)
async def delete_transaction(
    transaction_id: int,
    actor: Actor = Depends(get_current_actor),
    service: VaultService = Depends(get_vault_service),
) -> MessageResponse:
    """거래 삭제 (재고는 생성 시의 반대 방향으로 조정)"""
    await service.delete_transaction(actor, transaction_id)
    return MessageResponse(message="Transaction deleted")


@router.get("/stock", response_model=StockListResponse)
async def list_stock(
    actor: Actor = Depends(get_current_actor),
    service: VaultService = Depends(get_vault_reader),
) -> StockListResponse:
    """karat별 재고 조회 (karat 오름차순)"""
    balances = await service.list_stock()
    return StockListResponse(stock=[StockResponse(**b.to_dict()) for b in balances])


@router.post("/stock/sync", response_model=SyncResponse)
async def sync_stock(
    karat: int | None = Query(default=None, description="지정 시 해당 karat만 재계산"),
    actor: Actor = Depends(get_current_actor),
    service: VaultService = Depends(get_vault_service),
) -> SyncResponse:
    """원장 전체로부터 재고 재계산

    재고를 0으로 초기화한 뒤 원장을 생성 순서대로 재생.
    """
    result = await service.sync_stock(actor, karat=karat)

    return SyncResponse(
        processed_count=result.processed_count,
        karat=result.karat,
        message="Stock sync completed",
    )


@router.get("/stock/drift", response_model=DriftListResponse)
async def check_drift(
    actor: Actor = Depends(get_current_actor),
    service: VaultService = Depends(get_vault_reader),
) -> DriftListResponse:
    """원장 합계와 재고 비교 (복구는 /stock/sync)"""
    drifts = await service.check_drift()

    return DriftListResponse(
        in_sync=not drifts,
        drifts=[DriftResponse(**d.to_dict()) for d in drifts],
    )
