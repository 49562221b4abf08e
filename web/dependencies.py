"""
의존성 주입

FastAPI의 Depends를 사용한 의존성 관리.
"""

from typing import AsyncGenerator

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from adapters.db.sqlite_adapter import SQLiteAdapter
from adapters.interfaces import IBroadcaster, INotifier
from adapters.slack.notifier import SlackNotifier
from core.config.loader import Settings, get_settings
from core.errors import AuthError
from core.storage.audit_store import AuditLogStore
from core.types import Actor
from web.services.vault_service import VaultService

JWT_ALGORITHM = "HS256"

bearer_scheme = HTTPBearer(auto_error=False)


def get_app_settings() -> Settings:
    """애플리케이션 설정 반환"""
    return get_settings()


async def get_db() -> AsyncGenerator[SQLiteAdapter, None]:
    """DB 세션 반환 (읽기 전용)

    로그 조회 등 읽기 작업에 사용.
    """
    settings = get_settings()
    async with SQLiteAdapter(settings.db_path, readonly=True) as db:
        yield db


async def get_db_write() -> AsyncGenerator[SQLiteAdapter, None]:
    """DB 세션 반환 (쓰기 가능)

    금고 거래 생성/삭제, 재고 동기화 시 사용.
    """
    settings = get_settings()
    async with SQLiteAdapter(settings.db_path, readonly=False) as db:
        yield db


def get_broadcaster(request: Request) -> IBroadcaster:
    """앱 수명 동안 공유되는 브로드캐스터"""
    return request.app.state.broadcaster


async def get_notifier(
    settings: Settings = Depends(get_app_settings),
) -> AsyncGenerator[INotifier | None, None]:
    """Slack 알림 (webhook 미설정 시 None)"""
    if not settings.slack.enabled:
        yield None
        return

    notifier = SlackNotifier(
        webhook_url=settings.slack.webhook_url,
        channel=settings.slack.channel,
    )
    try:
        yield notifier
    finally:
        await notifier.close()


# =========================================================================
# 인증
# =========================================================================

def decode_actor(token: str, secret_key: str) -> Actor:
    """JWT 검증 후 Actor 생성

    Raises:
        AuthError: 서명/만료 등 토큰 검증 실패, claim 형식 오류
    """
    try:
        claims = jwt.decode(token, secret_key, algorithms=[JWT_ALGORITHM])
    except jwt.PyJWTError as e:
        raise AuthError(f"Invalid token: {e}") from e

    try:
        return Actor.from_claims(claims)
    except (TypeError, ValueError) as e:
        raise AuthError("Invalid token claims") from e


async def get_current_actor(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    settings: Settings = Depends(get_app_settings),
) -> Actor:
    """Authorization: Bearer 토큰에서 Actor 추출

    Raises:
        AuthError: 토큰 없음 또는 검증 실패
    """
    if credentials is None:
        raise AuthError("Bearer token required")
    return decode_actor(credentials.credentials, settings.web_secret_key)


# =========================================================================
# 서비스
# =========================================================================

async def get_vault_service(
    db: SQLiteAdapter = Depends(get_db_write),
    broadcaster: IBroadcaster = Depends(get_broadcaster),
    notifier: INotifier | None = Depends(get_notifier),
    settings: Settings = Depends(get_app_settings),
) -> VaultService:
    """요청 단위 VaultService (쓰기 가능)"""
    return VaultService(
        db,
        audit_log=AuditLogStore(db),
        broadcaster=broadcaster,
        notifier=notifier,
        atomic=settings.vault.atomic_mutations,
        sync_batch_size=settings.vault.sync_batch_size,
    )


async def get_vault_reader(
    db: SQLiteAdapter = Depends(get_db),
    broadcaster: IBroadcaster = Depends(get_broadcaster),
    settings: Settings = Depends(get_app_settings),
) -> VaultService:
    """조회 전용 VaultService (읽기 전용 연결)

    거래/재고 목록, drift 검사에 사용.
    """
    return VaultService(
        db,
        audit_log=AuditLogStore(db),
        broadcaster=broadcaster,
        sync_batch_size=settings.vault.sync_batch_size,
    )


async def get_audit_store(
    db: SQLiteAdapter = Depends(get_db),
) -> AuditLogStore:
    """읽기 전용 감사 로그 저장소"""
    return AuditLogStore(db)
