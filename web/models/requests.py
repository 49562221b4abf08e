"""
요청 스키마 (Pydantic)

Web API 요청 데이터 검증.
금액/karat 형식 검증은 core.ledger.types에서 수행 (오류 응답 형식 통일).
"""

from typing import Any

from pydantic import BaseModel, Field


class CreateTransactionRequest(BaseModel):
    """금고 거래 생성 요청"""

    type: str = Field(..., description="거래 종류 (deposit/withdrawal)")
    amount: Any = Field(..., description="금 중량 (그램, 소수점 3자리까지)")
    karat: Any = Field(..., description="순도 (1~24)")
    notes: str | None = Field(default=None, description="메모")
    company_id: int | None = Field(default=None, description="관련 거래처 ID")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "type": "deposit",
                    "amount": "10.5",
                    "karat": 18,
                    "notes": "weekly intake",
                },
                {
                    "type": "withdrawal",
                    "amount": 3,
                    "karat": 21,
                    "company_id": 7,
                },
            ]
        }
    }
