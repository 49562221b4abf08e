"""
FastAPI 애플리케이션

라우터 등록 및 앱 설정.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
from adapters.realtime.broadcaster import WebSocketBroadcaster
from core.config.loader import get_settings
from core.errors import ValidationError, VaultError
from core.logging import setup_logging

# 로깅 설정 (콘솔 + 파일)
setup_logging("web")

from web.routes import external_vault, health, logs, realtime

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """앱 생명주기 관리"""
    settings = get_settings()

    # 시작 시 - DB 스키마 자동 초기화
    async with SQLiteAdapter(settings.db_path) as db:
        await init_schema(db)

    app.state.broadcaster = WebSocketBroadcaster()
    logger.info(
        "Web 시작",
        extra={
            "db_path": str(settings.db_path),
            "atomic_mutations": settings.vault.atomic_mutations,
        },
    )

    yield

    # 종료 시 - WebSocket 연결 정리
    await app.state.broadcaster.close_all()
    logger.info("Web 종료")


# =========================================================================
# 오류 응답
# =========================================================================

def _error_response(status_code: int, kind: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"kind": kind, "message": message}},
    )


async def vault_error_handler(request: Request, exc: VaultError) -> JSONResponse:
    """VaultError → {"error": {"kind", "message"}}"""
    if exc.http_status >= 500:
        logger.error(
            f"{exc.kind}: {exc.message}",
            extra={"path": request.url.path, "method": request.method},
        )
    return JSONResponse(status_code=exc.http_status, content={"error": exc.to_dict()})


async def request_validation_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """요청 형식 오류도 ValidationError(400)로 통일"""
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))

    message = "; ".join(problems) or "Invalid request"
    return _error_response(ValidationError.http_status, ValidationError.kind, message)


def create_app() -> FastAPI:
    """FastAPI 앱 생성"""
    app = FastAPI(
        title="GoldVault API",
        description="외부 금고 금 거래 원장 및 karat별 재고 API",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS 설정
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(VaultError, vault_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    # =====================================================================
    # API 라우터 등록
    # =====================================================================

    app.include_router(health.router)
    app.include_router(external_vault.router)
    app.include_router(logs.router)
    app.include_router(realtime.router)

    return app


app = create_app()
