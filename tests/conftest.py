"""
pytest 공통 fixture 정의

인메모리 SQLite 위에 스키마를 만들고 Ledger 컴포넌트를 조립한다.
"""

import tempfile
from pathlib import Path
from typing import AsyncIterator

import pytest
import pytest_asyncio

from adapters.db.sqlite_adapter import MEMORY_DB, SQLiteAdapter, init_schema
from core.config.loader import Settings
from core.ledger.models import Book
from core.ledger.schema import init_ledger_schema
from core.ledger.services import LedgerServices


@pytest.fixture
def temp_dir() -> Path:
    """OS 독립적인 임시 디렉토리 생성"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(autouse=True)
def reset_settings() -> None:
    """테스트 간 Settings 싱글턴 격리"""
    Settings.reset()
    yield
    Settings.reset()


@pytest_asyncio.fixture
async def db() -> AsyncIterator[SQLiteAdapter]:
    """스키마가 준비된 인메모리 DB"""
    adapter = SQLiteAdapter(MEMORY_DB)
    await adapter.connect()
    await init_schema(adapter)
    await init_ledger_schema(adapter)

    yield adapter

    await adapter.close()


@pytest.fixture
def services(db: SQLiteAdapter) -> LedgerServices:
    """Ledger 컴포넌트 묶음"""
    return LedgerServices.from_db(db)


@pytest_asyncio.fixture
async def default_book(services: LedgerServices) -> Book:
    """기본 장부 (최초 조회 시 자동 생성)"""
    books = await services.books.list()
    return books[0]
