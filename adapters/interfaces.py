"""
어댑터 인터페이스 정의

Protocol 기반으로 정의하여 의존성 주입 및 Mock 교체 가능.
VaultService는 전역 객체 대신 이 Protocol 구현체를 주입받음.
"""

from typing import Any, Protocol, runtime_checkable

from core.types import Actor


@runtime_checkable
class IAuditLog(Protocol):
    """감사 로그 인터페이스

    호출 측 입장에서는 fire-and-forget.
    실패해도 원 연산은 실패하지 않아야 함.
    """

    async def record(
        self,
        actor: Actor,
        action: str,
        details: str,
        entity_type: str = "",
        entity_name: str = "",
    ) -> Any:
        """감사 로그 기록

        Args:
            actor: 행위자
            action: 행위 이름
            details: 자유 형식 상세 내용
            entity_type: 대상 엔티티 종류 (선택)
            entity_name: 대상 엔티티 이름 (선택)
        """
        ...


@runtime_checkable
class IBroadcaster(Protocol):
    """실시간 이벤트 브로드캐스트 인터페이스

    best-effort: 수신 확인 없음, HTTP 응답과의 순서 보장 없음.
    """

    async def publish(self, event: str, payload: Any) -> int:
        """이벤트 발행

        Args:
            event: 이벤트 이름 (예: vault.transaction.created)
            payload: JSON 직렬화 가능한 데이터

        Returns:
            전달된 클라이언트 수
        """
        ...


@runtime_checkable
class INotifier(Protocol):
    """운영자 알림 인터페이스

    Projection drift 등 운영자 조치가 필요한 상황을 외부 서비스로 전송.
    """

    async def send(
        self,
        message: str,
        level: str = "INFO",
        extra: dict[str, Any] | None = None,
    ) -> bool:
        """알림 전송

        Args:
            message: 알림 메시지
            level: 알림 레벨 (INFO, WARNING, ERROR, CRITICAL)
            extra: 추가 데이터 (선택)

        Returns:
            전송 성공 여부
        """
        ...
