"""
SQLite 어댑터 테스트

SQLiteAdapter 및 관련 함수 테스트.
"""

import sqlite3
from pathlib import Path

import pytest

from adapters.db.sqlite_adapter import (
    MEMORY_DB,
    SQLiteAdapter,
    create_connection,
    fold_name,
    get_db_path,
    init_schema,
)
from core.constants import Paths
from core.ledger.schema import init_ledger_schema


class TestGetDbPath:
    """get_db_path 테스트"""

    def test_default(self) -> None:
        path = get_db_path()

        assert path == Paths.LEDGER_DB
        assert isinstance(path, Path)

    def test_override(self) -> None:
        assert get_db_path("custom.db") == Path("custom.db")


class TestCreateConnection:
    """create_connection 테스트"""

    @pytest.mark.asyncio
    async def test_create_connection(self, tmp_path: Path) -> None:
        """연결 생성"""
        db_path = tmp_path / "test.db"

        conn = await create_connection(db_path)

        # WAL 모드 확인
        cursor = await conn.execute("PRAGMA journal_mode")
        row = await cursor.fetchone()
        assert row[0].upper() == "WAL"

        await conn.close()

    @pytest.mark.asyncio
    async def test_creates_parent_directory(self, tmp_path: Path) -> None:
        """부모 디렉토리 생성"""
        db_path = tmp_path / "subdir" / "test.db"

        conn = await create_connection(db_path)

        assert db_path.parent.exists()

        await conn.close()

    @pytest.mark.asyncio
    async def test_foreign_keys_enabled(self) -> None:
        conn = await create_connection(MEMORY_DB)

        cursor = await conn.execute("PRAGMA foreign_keys")
        row = await cursor.fetchone()
        assert row[0] == 1

        await conn.close()

    @pytest.mark.asyncio
    async def test_casefold_function_registered(self) -> None:
        conn = await create_connection(MEMORY_DB)

        cursor = await conn.execute("SELECT casefold(?), casefold(NULL)", ("ÉPARGNE",))
        row = await cursor.fetchone()
        assert row[0] == "épargne"
        assert row[1] is None

        await conn.close()


class TestFoldName:
    """이름 비교용 정규화 테스트"""

    def test_folds_unicode(self) -> None:
        assert fold_name("Straße") == fold_name("STRASSE") == "strasse"
        assert fold_name("Épargne") == fold_name("ÉPARGNE")

    def test_non_string_passthrough(self) -> None:
        assert fold_name(None) is None
        assert fold_name(3) == 3


class TestSQLiteAdapter:
    """SQLiteAdapter 테스트"""

    @pytest.mark.asyncio
    async def test_context_manager(self) -> None:
        async with SQLiteAdapter(MEMORY_DB) as adapter:
            assert adapter.is_connected

        assert not adapter.is_connected

    @pytest.mark.asyncio
    async def test_execute_without_connection(self) -> None:
        adapter = SQLiteAdapter(MEMORY_DB)

        with pytest.raises(RuntimeError, match="Not connected"):
            await adapter.execute("SELECT 1")

    @pytest.mark.asyncio
    async def test_transaction_commits(self) -> None:
        async with SQLiteAdapter(MEMORY_DB) as adapter:
            await adapter.execute("CREATE TABLE t (v INTEGER)")

            async with adapter.transaction():
                await adapter.execute("INSERT INTO t VALUES (1)")

            rows = await adapter.fetchall("SELECT v FROM t")
            assert rows == [(1,)]

    @pytest.mark.asyncio
    async def test_transaction_rolls_back_on_error(self) -> None:
        """예외 시 롤백"""
        async with SQLiteAdapter(MEMORY_DB) as adapter:
            await adapter.execute("CREATE TABLE t (v INTEGER)")
            await adapter.commit()

            with pytest.raises(ValueError):
                async with adapter.transaction():
                    await adapter.execute("INSERT INTO t VALUES (1)")
                    raise ValueError("boom")

            rows = await adapter.fetchall("SELECT v FROM t")
            assert rows == []
            assert not adapter.in_transaction

    @pytest.mark.asyncio
    async def test_nested_transaction_rolls_back_outer_work(self) -> None:
        """중첩 블록 실패 시 바깥 블록 작업까지 모두 롤백"""
        async with SQLiteAdapter(MEMORY_DB) as adapter:
            await adapter.execute("CREATE TABLE t (v INTEGER)")
            await adapter.commit()

            with pytest.raises(ValueError):
                async with adapter.transaction():
                    await adapter.execute("INSERT INTO t VALUES (1)")
                    async with adapter.transaction():
                        assert adapter.in_transaction
                        await adapter.execute("INSERT INTO t VALUES (2)")
                        raise ValueError("inner")

            rows = await adapter.fetchall("SELECT v FROM t")
            assert rows == []

    @pytest.mark.asyncio
    async def test_commit_ignored_inside_transaction(self) -> None:
        """transaction() 내부 commit()은 무시"""
        async with SQLiteAdapter(MEMORY_DB) as adapter:
            await adapter.execute("CREATE TABLE t (v INTEGER)")
            await adapter.commit()

            with pytest.raises(ValueError):
                async with adapter.transaction():
                    await adapter.execute("INSERT INTO t VALUES (1)")
                    await adapter.commit()
                    raise ValueError("after commit")

            assert await adapter.fetchall("SELECT v FROM t") == []


class TestInitSchema:
    """스키마 초기화 테스트"""

    @pytest.mark.asyncio
    async def test_creates_tables(self) -> None:
        async with SQLiteAdapter(MEMORY_DB) as adapter:
            await init_schema(adapter)
            await init_ledger_schema(adapter)

            for table in (
                "note",
                "recycle_bin",
                "book",
                "category",
                "account",
                "ledger_transaction",
                "transaction_entry",
            ):
                assert await adapter.table_exists(table), table

    @pytest.mark.asyncio
    async def test_idempotent(self) -> None:
        """두 번 실행해도 오류 없음"""
        async with SQLiteAdapter(MEMORY_DB) as adapter:
            await init_schema(adapter)
            await init_ledger_schema(adapter)
            await init_schema(adapter)
            await init_ledger_schema(adapter)

            columns = {c["name"] for c in await adapter.get_table_info("ledger_transaction")}
            assert {"transaction_id", "book_id", "ts", "description", "highlight"} <= columns

    @pytest.mark.asyncio
    async def test_name_index_folds_unicode_case(self) -> None:
        """이름 유일성 인덱스는 ASCII 외 대소문자도 같은 이름으로 취급"""
        async with SQLiteAdapter(MEMORY_DB) as adapter:
            await init_ledger_schema(adapter)
            await adapter.execute(
                "INSERT INTO book (book_id, name, created_at) VALUES (?, ?, ?)",
                ("book_a", "Épargne", "2026-01-01T00:00:00.000000+00:00"),
            )

            with pytest.raises(sqlite3.IntegrityError):
                await adapter.execute(
                    "INSERT INTO book (book_id, name, created_at) VALUES (?, ?, ?)",
                    ("book_b", "épargne", "2026-01-01T00:00:00.000000+00:00"),
                )
