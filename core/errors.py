"""
예외 정의

모든 공개 연산은 성공 결과 또는 아래 예외 중 하나로 끝남.
kind는 API 응답의 기계 판독용 식별자로 그대로 노출됨.
"""

from decimal import Decimal


class VaultError(Exception):
    """금고 서비스 기본 예외"""

    kind: str = "VaultError"
    http_status: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        """API 응답용 딕셔너리"""
        return {"kind": self.kind, "message": self.message}


class ValidationError(VaultError):
    """잘못된 입력 (수량 <= 0, 알 수 없는 유형, karat 누락 등)

    저장소 변경 전에 발생.
    """

    kind = "ValidationError"
    http_status = 400


class NotFoundError(VaultError):
    """참조한 거래 ID가 존재하지 않음"""

    kind = "NotFoundError"
    http_status = 404


class StorageError(VaultError):
    """저장소 사용 불가 (재시도 없음)"""

    kind = "StorageError"
    http_status = 503


class ProjectionDriftError(StorageError):
    """원장 변경은 성공했으나 재고 반영이 실패한 상태

    자동 복구하지 않음. 운영자가 재고 동기화(resync)로 복구.
    """

    kind = "ProjectionDriftError"
    http_status = 500

    def __init__(
        self,
        message: str,
        transaction_id: int,
        karat: int,
        delta: Decimal,
    ):
        super().__init__(message)
        self.transaction_id = transaction_id
        self.karat = karat
        self.delta = delta


class AuthError(VaultError):
    """인증 실패 (토큰 없음 / 유효하지 않음)"""

    kind = "AuthError"
    http_status = 401
