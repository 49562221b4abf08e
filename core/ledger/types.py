"""
금고 원장 타입 정의

VaultTransaction 및 입력 검증 함수
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from core.constants import AmountRules, KaratRules
from core.errors import ValidationError
from core.types import TransactionKind


def parse_amount(value: Any) -> Decimal:
    """금 수량(그램) 검증 및 Decimal 변환

    float는 이진 오차를 피하기 위해 문자열 표현을 거쳐 변환.

    Raises:
        ValidationError: 숫자가 아니거나, 0 이하이거나, 허용 정밀도 초과
    """
    if value is None or isinstance(value, bool):
        raise ValidationError("Amount is required")

    try:
        if isinstance(value, float):
            amount = Decimal(repr(value))
        else:
            amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationError(f"Amount is not a number: '{value}'") from None

    if not amount.is_finite():
        raise ValidationError(f"Amount must be finite: '{value}'")
    if amount <= 0:
        raise ValidationError("Amount must be positive")
    if amount > AmountRules.MAX_AMOUNT:
        raise ValidationError(f"Amount exceeds maximum of {AmountRules.MAX_AMOUNT}g")
    if amount != amount.quantize(AmountRules.QUANTUM):
        raise ValidationError(
            f"Amount supports at most {AmountRules.DECIMAL_PLACES} decimal places"
        )

    # 지수 표기(1E+1)를 고정 소수점으로 정규화
    return Decimal(format_amount(amount))


def format_amount(amount: Decimal) -> str:
    """Decimal → 고정 소수점 문자열 (저장 / API 직렬화용)"""
    return format(amount, "f")


def parse_karat(value: Any) -> int:
    """karat 검증

    Raises:
        ValidationError: 누락, 정수 아님, 범위 밖
    """
    if value is None or isinstance(value, bool):
        raise ValidationError("Karat is required")

    try:
        karat = int(str(value).strip())
    except ValueError:
        raise ValidationError(f"Karat must be an integer: '{value}'") from None

    if not KaratRules.MIN_KARAT <= karat <= KaratRules.MAX_KARAT:
        raise ValidationError(
            f"Karat must be between {KaratRules.MIN_KARAT} and {KaratRules.MAX_KARAT}"
        )
    return karat


def signed_delta(kind: TransactionKind, amount: Decimal) -> Decimal:
    """재고에 적용할 부호 있는 변화량 (입고 +, 출고 -)"""
    return amount if kind == TransactionKind.DEPOSIT else -amount


@dataclass(frozen=True)
class NewVaultTransaction:
    """저장 전 거래 (검증 완료된 입력)

    create()를 통해서만 생성하는 것을 권장.
    """

    kind: TransactionKind
    amount: Decimal
    karat: int
    recorded_by_name: str
    recorded_by_id: int | None = None
    notes: str = ""
    associated_party_id: int | None = None

    @classmethod
    def create(
        cls,
        kind: Any,
        amount: Any,
        karat: Any,
        recorded_by_name: str,
        recorded_by_id: int | None = None,
        notes: str | None = None,
        associated_party_id: int | None = None,
    ) -> "NewVaultTransaction":
        """입력 검증 후 생성

        Raises:
            ValidationError: 입력 오류
        """
        return cls(
            kind=TransactionKind.parse(kind),
            amount=parse_amount(amount),
            karat=parse_karat(karat),
            recorded_by_name=recorded_by_name,
            recorded_by_id=recorded_by_id,
            notes=(notes or "").strip(),
            associated_party_id=associated_party_id,
        )

    @property
    def signed_amount(self) -> Decimal:
        return signed_delta(self.kind, self.amount)


@dataclass(frozen=True)
class VaultTransaction:
    """저장된 금고 거래 (불변)

    생성 후 수정 불가. 삭제만 가능 (hard delete).
    """

    id: int
    kind: TransactionKind
    amount: Decimal
    karat: int
    notes: str
    recorded_by_name: str
    created_at: datetime
    recorded_by_id: int | None = None
    associated_party_id: int | None = None

    @property
    def signed_amount(self) -> Decimal:
        """재고 반영 변화량"""
        return signed_delta(self.kind, self.amount)

    @property
    def reversing_amount(self) -> Decimal:
        """삭제 시 재고 반영 변화량 (생성 시의 반대 부호)"""
        return -self.signed_amount

    def to_dict(self) -> dict[str, Any]:
        """딕셔너리 변환 (API / 브로드캐스트용)"""
        return {
            "id": self.id,
            "type": self.kind.value,
            "amount": format_amount(self.amount),
            "karat": self.karat,
            "notes": self.notes,
            "user_id": self.recorded_by_id,
            "user_name": self.recorded_by_name,
            "company_id": self.associated_party_id,
            "created_at": self.created_at.isoformat(),
        }
