"""
SQLite 어댑터

WAL 모드로 SQLite 연결 관리.
Web과 스크립트가 동시에 접근 가능하도록 설정.

주의: SQLite alias로 time, count 사용 금지 (예약어)
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator

import aiosqlite

from core.constants import Paths

logger = logging.getLogger(__name__)

MEMORY_DB = ":memory:"


def fold_name(value: Any) -> Any:
    """이름 비교용 대소문자 정규화 (SQL 함수 casefold)

    SQLite 내장 lower()는 ASCII 전용이다.
    """
    if isinstance(value, str):
        return value.casefold()
    return value


def get_db_path(override: Path | str | None = None) -> Path:
    """DB 경로 반환

    Args:
        override: 명시적 경로 (None이면 기본 경로)

    Returns:
        DB 파일 경로 (Path 타입)
    """
    if override is None:
        return Paths.LEDGER_DB
    return Path(override)


async def create_connection(
    db_path: Path | str,
    readonly: bool = False,
) -> aiosqlite.Connection:
    """SQLite 연결 생성 (WAL 모드)

    Args:
        db_path: DB 파일 경로 (":memory:" 허용)
        readonly: 읽기 전용 여부

    Returns:
        aiosqlite 연결 객체
    """
    db_path_str = str(db_path)
    in_memory = db_path_str == MEMORY_DB

    if not in_memory:
        # 디렉토리가 없으면 생성
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    if readonly and not in_memory:
        conn = await aiosqlite.connect(f"file:{db_path_str}?mode=ro", uri=True)
    else:
        conn = await aiosqlite.connect(db_path_str)

    if not in_memory:
        await conn.execute("PRAGMA journal_mode=WAL")

    # 동시 접근 설정
    await conn.execute("PRAGMA busy_timeout=30000")  # 30초 대기

    # 외래 키 제약 활성화
    await conn.execute("PRAGMA foreign_keys=ON")

    # 이름 유일성 인덱스와 이름 조회에서 사용
    await conn.create_function("casefold", 1, fold_name, deterministic=True)

    logger.info(
        "SQLite 연결 생성",
        extra={"db_path": db_path_str, "readonly": readonly},
    )

    return conn


class SQLiteAdapter:
    """SQLite 어댑터

    WAL 모드로 SQLite 연결 관리.
    중첩 가능한 트랜잭션 컨텍스트 매니저 제공.

    Args:
        db_path: DB 파일 경로
        readonly: 읽기 전용 여부

    사용 예시:
    ```python
    adapter = SQLiteAdapter(db_path)
    await adapter.connect()

    async with adapter.transaction():
        await adapter.execute("INSERT INTO ...")
        async with adapter.transaction():  # 중첩: 바깥 블록에서 한 번만 커밋
            await adapter.execute("UPDATE ...")

    await adapter.close()
    ```
    """

    def __init__(self, db_path: Path | str, readonly: bool = False):
        self.db_path = db_path if str(db_path) == MEMORY_DB else Path(db_path)
        self.readonly = readonly
        self._conn: aiosqlite.Connection | None = None
        self._tx_depth = 0

    @property
    def is_connected(self) -> bool:
        """연결 상태 확인"""
        return self._conn is not None

    @property
    def in_transaction(self) -> bool:
        """transaction() 블록 내부 여부"""
        return self._tx_depth > 0

    async def connect(self) -> None:
        """연결 생성"""
        if self._conn is not None:
            return

        self._conn = await create_connection(self.db_path, self.readonly)

    async def close(self) -> None:
        """연결 종료"""
        if self._conn is not None:
            await self._conn.close()
            self._conn = None
            self._tx_depth = 0
            logger.info("SQLite 연결 종료")

    async def execute(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> aiosqlite.Cursor:
        """SQL 실행"""
        if self._conn is None:
            raise RuntimeError("Not connected to database")

        if parameters:
            return await self._conn.execute(sql, parameters)
        return await self._conn.execute(sql)

    async def executemany(
        self,
        sql: str,
        parameters: list[tuple[Any, ...]],
    ) -> aiosqlite.Cursor:
        """SQL 다중 실행"""
        if self._conn is None:
            raise RuntimeError("Not connected to database")

        return await self._conn.executemany(sql, parameters)

    async def fetchone(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> tuple[Any, ...] | None:
        """단일 행 조회"""
        cursor = await self.execute(sql, parameters)
        return await cursor.fetchone()

    async def fetchall(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> list[tuple[Any, ...]]:
        """전체 행 조회"""
        cursor = await self.execute(sql, parameters)
        return list(await cursor.fetchall())

    async def commit(self) -> None:
        """커밋 (transaction() 블록 내부에서는 무시)"""
        if self._conn is not None and self._tx_depth == 0:
            await self._conn.commit()

    async def rollback(self) -> None:
        """롤백"""
        if self._conn is not None:
            await self._conn.rollback()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """트랜잭션 컨텍스트 매니저

        성공 시 자동 커밋, 예외 시 자동 롤백.
        중첩 호출 시 가장 바깥 블록만 커밋/롤백하므로
        여러 단계로 이루어진 작업을 하나의 단위로 묶을 수 있음.
        """
        if self._conn is None:
            raise RuntimeError("Not connected to database")

        if self._tx_depth > 0:
            self._tx_depth += 1
            try:
                yield self._conn
            finally:
                self._tx_depth -= 1
            return

        self._tx_depth = 1
        try:
            yield self._conn
            await self._conn.commit()
        except BaseException:
            await self._conn.rollback()
            raise
        finally:
            self._tx_depth = 0

    async def table_exists(self, table_name: str) -> bool:
        """테이블 존재 여부 확인"""
        result = await self.fetchone(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
            (table_name,),
        )
        return result is not None

    async def get_table_info(self, table_name: str) -> list[dict[str, Any]]:
        """테이블 정보 조회"""
        rows = await self.fetchall(f"PRAGMA table_info({table_name})")

        columns = []
        for row in rows:
            columns.append({
                "cid": row[0],
                "name": row[1],
                "type": row[2],
                "notnull": bool(row[3]),
                "default_value": row[4],
                "pk": bool(row[5]),
            })

        return columns

    # -------------------------------------------------------------------------
    # 컨텍스트 매니저
    # -------------------------------------------------------------------------

    async def __aenter__(self) -> "SQLiteAdapter":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


async def init_schema(adapter: SQLiteAdapter) -> None:
    """보조 스키마 초기화 (메모, 휴지통)

    장부 핵심 테이블은 core.ledger.schema.init_ledger_schema()에서 생성.

    Args:
        adapter: 연결된 SQLiteAdapter
    """
    # note (장부별 메모)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS note (
            note_id          TEXT PRIMARY KEY,
            book_id          TEXT NOT NULL,
            text             TEXT NOT NULL,
            is_completed     INTEGER NOT NULL DEFAULT 0,
            created_at       TEXT NOT NULL
        )
    """)

    # recycle_bin (소프트 삭제 스냅샷)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS recycle_bin (
            bin_id           TEXT PRIMARY KEY,
            entity_id        TEXT NOT NULL,
            entity_type      TEXT NOT NULL,
            book_id          TEXT,
            payload_json     TEXT NOT NULL,
            deleted_at       TEXT NOT NULL,
            seq              INTEGER NOT NULL DEFAULT 0
        )
    """)

    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_note_book_created
        ON note(book_id, created_at DESC)
    """)

    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_recycle_bin_entity
        ON recycle_bin(entity_type, entity_id)
    """)

    await adapter.commit()

    logger.info("스키마 초기화 완료")
