"""
FastAPI 애플리케이션

라우터 등록 및 앱 설정.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
from core.config.loader import get_settings
from core.constants import APP_NAME, APP_VERSION
from core.ledger.errors import (
    ConflictError,
    InvariantError,
    LedgerError,
    NotFoundError,
    ProtectedEntityError,
    ValidationError,
)
from core.ledger.schema import init_ledger_schema
from core.logging import setup_logging
from web.routes import (
    accounts,
    books,
    categories,
    export,
    health,
    ledger,
    notes,
    recycle_bin,
    transactions,
    transfer,
)

# 로깅 설정 (콘솔 + 파일)
setup_logging("web", level=get_settings().log_level)

logger = logging.getLogger(__name__)

# 도메인 예외 → HTTP 상태 코드
ERROR_STATUS: dict[type[LedgerError], int] = {
    ValidationError: 422,
    ConflictError: 409,
    NotFoundError: 404,
    InvariantError: 409,
    ProtectedEntityError: 403,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """앱 생명주기 관리"""
    settings = get_settings()

    # 시작 시 - DB 스키마 자동 초기화
    async with SQLiteAdapter(settings.db_path) as db:
        await init_schema(db)
        await init_ledger_schema(db)

    logger.info(f"Web 시작: db={settings.db_path}")
    yield


app = FastAPI(
    title=f"{APP_NAME} API",
    description="복식부기 다중 장부 관리 API",
    version=APP_VERSION,
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
    """도메인 예외를 구조화된 실패 응답으로 변환"""
    status_code = next(
        (code for cls, code in ERROR_STATUS.items() if isinstance(exc, cls)),
        400,
    )
    logger.info(
        f"요청 실패: {exc.kind}: {exc.message}",
        extra={"path": request.url.path, "status_code": status_code},
    )
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": exc.kind, "message": exc.message},
    )


# =========================================================================
# API 라우터 등록
# =========================================================================

app.include_router(health.router)
app.include_router(books.router)
app.include_router(categories.router)
app.include_router(accounts.router)
app.include_router(transactions.router)
app.include_router(notes.router)
app.include_router(ledger.router)
app.include_router(transfer.router)
app.include_router(recycle_bin.router)
app.include_router(export.router)
