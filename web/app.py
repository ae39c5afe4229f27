"""
FastAPI 애플리케이션

라우터 등록, 오류 응답 매핑 및 앱 설정.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import get_settings
from core.constants import VERSION
from core.ledger.errors import (
    AlreadyReversedError,
    DuplicateReferenceError,
    EmptyEntryError,
    LedgerError,
    LedgerValidationError,
    NotFoundError,
    PersistenceFailureError,
    UnbalancedEntryError,
    UnknownAccountError,
)
from core.ledger.schema import init_ledger_schema
from core.logging import setup_logging
from web.routes import (
    accounts,
    health,
    journal,
    ledger,
    reports,
    transactions,
    transfers,
)

logger = logging.getLogger(__name__)


# 오류 종류 → HTTP 상태 코드 (PersistenceFailureError는 retryable 여부로 결정)
ERROR_STATUS: list[tuple[type[LedgerError], int]] = [
    (UnbalancedEntryError, 400),
    (EmptyEntryError, 400),
    (LedgerValidationError, 400),
    (NotFoundError, 404),
    (UnknownAccountError, 422),
    (DuplicateReferenceError, 409),
    (AlreadyReversedError, 409),
]


def status_for_error(exc: LedgerError) -> int:
    """LedgerError에 대응하는 HTTP 상태 코드"""
    if isinstance(exc, PersistenceFailureError):
        return 503 if exc.retryable else 500
    for error_type, status_code in ERROR_STATUS:
        if isinstance(exc, error_type):
            return status_code
    return 500


@asynccontextmanager
async def lifespan(app: FastAPI):
    """앱 생명주기 관리"""
    setup_logging("web")
    settings = get_settings()

    # 시작 시 - 장부 스키마 자동 초기화 (기본 계정과목 포함)
    async with SQLiteAdapter(settings.db_path) as db:
        await init_ledger_schema(db)

    logger.info(f"Web: 장부 준비 완료 (mode={settings.mode.value}, db={settings.db_path})")
    yield


app = FastAPI(
    title="Storebooks API",
    description="소규모 상점용 복식부기 회계 API",
    version=VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS 설정 (개발용)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    """회계 오류를 구조화된 JSON 응답으로 변환"""
    status_code = status_for_error(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} 실패: {exc}")
    return JSONResponse(status_code=status_code, content=exc.to_dict())


# =========================================================================
# API 라우터 등록
# =========================================================================

app.include_router(health.router)
app.include_router(accounts.router)
app.include_router(journal.router)
app.include_router(ledger.router)
app.include_router(reports.router)
app.include_router(transactions.router)
app.include_router(transfers.router)
