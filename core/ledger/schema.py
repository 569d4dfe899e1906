"""
복식부기 스키마 초기화

Web 시작 시 자동으로 Ledger 테이블과 인덱스 생성.
CREATE IF NOT EXISTS 패턴으로 안전하게 동작.
"""

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


async def init_ledger_schema(db: "SQLiteAdapter") -> None:
    """Ledger 스키마 초기화

    이미 존재하는 경우 안전하게 건너뜀 (IF NOT EXISTS).

    Args:
        db: SQLiteAdapter 인스턴스
    """
    await _create_ledger_tables(db)
    await _create_ledger_indexes(db)
    await db.commit()
    logger.info("Ledger 스키마 초기화 완료")


async def _create_ledger_tables(db: "SQLiteAdapter") -> None:
    """Ledger 테이블 생성

    book_id는 느슨한 참조로 둔다 (휴지통 복원 순서와 무관하게 재삽입 가능).
    """

    # book 테이블
    await db.execute("""
        CREATE TABLE IF NOT EXISTS book (
            book_id          TEXT PRIMARY KEY,
            name             TEXT NOT NULL,
            created_at       TEXT NOT NULL
        )
    """)

    # category 테이블
    await db.execute("""
        CREATE TABLE IF NOT EXISTS category (
            category_id      TEXT PRIMARY KEY,
            book_id          TEXT NOT NULL,
            name             TEXT NOT NULL,
            normal_balance   TEXT NOT NULL DEFAULT 'debit'
                CHECK(normal_balance IN ('debit','credit')),
            is_system        INTEGER NOT NULL DEFAULT 0
        )
    """)

    # account 테이블
    await db.execute("""
        CREATE TABLE IF NOT EXISTS account (
            account_id           TEXT PRIMARY KEY,
            book_id              TEXT NOT NULL,
            category_id          TEXT NOT NULL,
            name                 TEXT NOT NULL,
            opening_balance      TEXT,
            opening_balance_type TEXT NOT NULL DEFAULT 'debit'
                CHECK(opening_balance_type IN ('debit','credit')),
            is_system            INTEGER NOT NULL DEFAULT 0
        )
    """)

    # ledger_transaction 테이블 (seq: 생성 순서, 동일 날짜 정렬용)
    await db.execute("""
        CREATE TABLE IF NOT EXISTS ledger_transaction (
            seq              INTEGER PRIMARY KEY AUTOINCREMENT,
            transaction_id   TEXT NOT NULL UNIQUE,
            book_id          TEXT NOT NULL,
            ts               TEXT NOT NULL,
            description      TEXT NOT NULL,
            highlight        TEXT
                CHECK(highlight IN ('yellow','blue','strikethrough')),
            created_at       TEXT NOT NULL
        )
    """)

    # transaction_entry 테이블
    await db.execute("""
        CREATE TABLE IF NOT EXISTS transaction_entry (
            line_id          INTEGER PRIMARY KEY AUTOINCREMENT,
            transaction_id   TEXT NOT NULL,
            account_id       TEXT NOT NULL,
            side             TEXT NOT NULL CHECK(side IN ('debit','credit')),
            amount           TEXT NOT NULL,
            description      TEXT,
            line_order       INTEGER DEFAULT 0,
            FOREIGN KEY (transaction_id)
                REFERENCES ledger_transaction(transaction_id) ON DELETE CASCADE
        )
    """)

    logger.debug("Ledger 테이블 생성 완료")


async def _create_ledger_indexes(db: "SQLiteAdapter") -> None:
    """인덱스 생성

    이름 유일성은 대소문자 무시. casefold는 연결마다 등록되는 SQL 함수
    (adapters.db.sqlite_adapter.fold_name).
    """
    await db.execute(
        "CREATE UNIQUE INDEX IF NOT EXISTS ux_book_name_fold ON book(casefold(name))"
    )
    await db.execute(
        "CREATE UNIQUE INDEX IF NOT EXISTS ux_category_book_name_fold "
        "ON category(book_id, casefold(name))"
    )
    await db.execute(
        "CREATE UNIQUE INDEX IF NOT EXISTS ux_account_book_name_fold "
        "ON account(book_id, casefold(name))"
    )
    await db.execute("CREATE INDEX IF NOT EXISTS idx_account_category ON account(category_id)")
    await db.execute(
        "CREATE INDEX IF NOT EXISTS idx_transaction_book_ts "
        "ON ledger_transaction(book_id, ts DESC, seq DESC)"
    )
    await db.execute(
        "CREATE INDEX IF NOT EXISTS idx_entry_transaction ON transaction_entry(transaction_id)"
    )
    await db.execute(
        "CREATE INDEX IF NOT EXISTS idx_entry_account ON transaction_entry(account_id)"
    )
