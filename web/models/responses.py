"""
응답 스키마 (Pydantic)

Web API 응답 데이터 직렬화.
금액은 정밀도 보존을 위해 문자열.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """헬스 체크 응답"""

    status: str = Field(default="ok", description="서비스 상태")
    database: str = Field(..., description="DB 상태 (ok/error)")
    timestamp: datetime = Field(..., description="응답 시간 (UTC)")


class ErrorBody(BaseModel):
    """오류 내용"""

    kind: str = Field(..., description="오류 종류")
    message: str = Field(..., description="오류 메시지")


class ErrorResponse(BaseModel):
    """오류 응답"""

    error: ErrorBody


class TransactionResponse(BaseModel):
    """금고 거래 응답"""

    id: int = Field(..., description="거래 ID")
    type: str = Field(..., description="거래 종류 (deposit/withdrawal)")
    amount: str = Field(..., description="금 중량 (그램)")
    karat: int = Field(..., description="순도")
    notes: str = Field(default="", description="메모")
    user_id: int | None = Field(default=None, description="기록자 ID")
    user_name: str = Field(..., description="기록자 이름")
    company_id: int | None = Field(default=None, description="관련 거래처 ID")
    created_at: str = Field(..., description="생성 시간 (UTC)")


class TransactionListResponse(BaseModel):
    """금고 거래 목록 응답"""

    transactions: list[TransactionResponse] = Field(default_factory=list)
    total: int = Field(default=0, description="전체 거래 수")


class TransactionCreatedResponse(BaseModel):
    """거래 생성 응답"""

    id: int = Field(..., description="생성된 거래 ID")
    message: str = Field(..., description="결과 메시지")


class MessageResponse(BaseModel):
    """단순 메시지 응답"""

    message: str


class StockResponse(BaseModel):
    """karat별 재고 응답"""

    karat: int = Field(..., description="순도")
    amount: str = Field(..., description="보유 중량 (그램, 음수 가능)")
    updated_at: str | None = Field(default=None, description="마지막 변경 시간")


class StockListResponse(BaseModel):
    """재고 목록 응답"""

    stock: list[StockResponse] = Field(default_factory=list)


class SyncResponse(BaseModel):
    """재고 동기화 응답"""

    processed_count: int = Field(..., description="재생된 거래 수")
    karat: int | None = Field(default=None, description="동기화 범위 (None이면 전체)")
    message: str = Field(..., description="결과 메시지")


class DriftResponse(BaseModel):
    """karat별 불일치 응답"""

    karat: int
    expected: str = Field(..., description="원장 합계")
    actual: str | None = Field(default=None, description="재고 값 (행 없으면 None)")
    difference: str = Field(..., description="재고 - 원장")


class DriftListResponse(BaseModel):
    """불일치 검사 응답"""

    in_sync: bool = Field(..., description="불일치 없음 여부")
    drifts: list[DriftResponse] = Field(default_factory=list)


class LogEntryResponse(BaseModel):
    """감사 로그 항목"""

    id: int
    username: str
    action: str
    entity_type: str = ""
    entity_name: str = ""
    details: str = ""
    created_at: str


class PaginationResponse(BaseModel):
    """페이지 정보"""

    page: int
    limit: int
    total: int
    pages: int


class LogListResponse(BaseModel):
    """감사 로그 목록 응답"""

    logs: list[LogEntryResponse] = Field(default_factory=list)
    pagination: PaginationResponse
