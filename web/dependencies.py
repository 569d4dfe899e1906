"""
의존성 주입

FastAPI의 Depends를 사용한 의존성 관리.
"""

from typing import AsyncGenerator

from fastapi import Depends, Path

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import Settings, get_settings
from core.ledger.services import LedgerServices


def get_app_settings() -> Settings:
    """애플리케이션 설정 반환"""
    return get_settings()


async def get_db() -> AsyncGenerator[SQLiteAdapter, None]:
    """요청별 DB 세션 반환 (쓰기 가능)"""
    settings = get_settings()
    async with SQLiteAdapter(settings.db_path) as db:
        yield db


def get_services(
    db: SQLiteAdapter = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> LedgerServices:
    """요청 DB 연결 위에 Ledger 컴포넌트 구성"""
    return LedgerServices.from_db(db, default_book_name=settings.default_book_name)


async def get_book_id(
    book_id: str = Path(..., description="장부 ID"),
    services: LedgerServices = Depends(get_services),
) -> str:
    """경로의 장부 ID 검증 (없으면 404)"""
    await services.books.get(book_id)
    return book_id
