"""
타입 정의 모듈

Enum, Dataclass 등 핵심 타입 정의
모든 Enum은 str을 상속하여 문자열 직렬화 가능
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from core.errors import ValidationError


class TransactionKind(str, Enum):
    """외부 금고 기준 금 이동 방향"""

    DEPOSIT = "deposit"  # 금고로 입고
    WITHDRAWAL = "withdrawal"  # 금고에서 출고

    @classmethod
    def parse(cls, value: "str | TransactionKind | None") -> "TransactionKind":
        """문자열/Enum을 TransactionKind로 변환

        대소문자 구분 없음.

        Raises:
            ValidationError: 알 수 없는 유형인 경우
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str) or not value.strip():
            raise ValidationError("Transaction kind is required")
        try:
            return cls(value.strip().lower())
        except ValueError:
            valid = [k.value for k in cls]
            raise ValidationError(
                f"Invalid transaction kind: '{value}'. Valid values: {valid}"
            ) from None


class UserRole(str, Enum):
    """사용자 역할"""

    ADMIN = "admin"
    USER = "user"
    VIEWER = "viewer"


@dataclass(frozen=True)
class Actor:
    """행위자 (불변)

    인증 계층이 제공하는 사용자 식별 정보.
    감사 로그 기록용으로만 사용하며 재고 계산에는 관여하지 않음.
    """

    user_id: int | None
    username: str
    role: str

    @classmethod
    def from_claims(cls, claims: dict[str, Any]) -> "Actor":
        """JWT claim에서 Actor 생성

        원 시스템 토큰 형식(userId, username, role)을 따름.
        """
        user_id = claims.get("userId")
        return cls(
            user_id=int(user_id) if user_id is not None else None,
            username=str(claims.get("username") or "unknown"),
            role=str(claims.get("role") or UserRole.USER.value),
        )
