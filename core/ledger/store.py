"""
Ledger 저장소

장부/카테고리/계정/거래/휴지통 행의 저장 및 조회.
도메인 규칙은 두지 않는다 (검증은 상위 컴포넌트 책임).
"""

from __future__ import annotations

import json
import logging
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Iterable

from core.ledger.models import (
    Account,
    Book,
    Category,
    RecycleBinItem,
    Transaction,
    TransactionEntry,
    snapshot_from_payload,
)
from core.ledger.types import EntrySide, Highlight
from core.utils.timezone import from_db_text, to_db_text

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)

_BOOK_COLUMNS = "book_id, name, created_at"
_CATEGORY_COLUMNS = "category_id, book_id, name, normal_balance, is_system"
_ACCOUNT_COLUMNS = (
    "account_id, book_id, category_id, name, "
    "opening_balance, opening_balance_type, is_system"
)
_TRANSACTION_COLUMNS = "transaction_id, book_id, ts, description, highlight, created_at"


def _placeholders(count: int) -> str:
    return ", ".join("?" for _ in range(count))


def _book_from_row(row: tuple[Any, ...]) -> Book:
    return Book(id=row[0], name=row[1], created_at=from_db_text(row[2]))


def _category_from_row(row: tuple[Any, ...]) -> Category:
    return Category(
        id=row[0],
        book_id=row[1],
        name=row[2],
        normal_balance=EntrySide(row[3]),
        is_system=bool(row[4]),
    )


def _account_from_row(row: tuple[Any, ...]) -> Account:
    return Account(
        id=row[0],
        book_id=row[1],
        category_id=row[2],
        name=row[3],
        opening_balance=Decimal(row[4]) if row[4] is not None else None,
        opening_balance_type=EntrySide(row[5]),
        is_system=bool(row[6]),
    )


class LedgerStore:
    """Ledger 저장소

    엔티티별 list/get/insert/update/delete 및 날짜순 거래 조회 제공.
    쓰기는 모두 db.transaction() 안에서 실행되므로
    상위 컴포넌트가 바깥 트랜잭션으로 묶으면 한 번에 커밋된다.

    Args:
        db: SQLite 어댑터
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    # -------------------------------------------------------------------------
    # Book
    # -------------------------------------------------------------------------

    async def list_books(self) -> list[Book]:
        rows = await self.db.fetchall(
            f"SELECT {_BOOK_COLUMNS} FROM book ORDER BY created_at, book_id"
        )
        return [_book_from_row(row) for row in rows]

    async def get_book(self, book_id: str) -> Book | None:
        row = await self.db.fetchone(
            f"SELECT {_BOOK_COLUMNS} FROM book WHERE book_id = ?",
            (book_id,),
        )
        return _book_from_row(row) if row else None

    async def find_book_by_name(self, name: str, exclude_id: str | None = None) -> Book | None:
        """이름으로 장부 조회 (대소문자 무시)"""
        row = await self.db.fetchone(
            f"""
            SELECT {_BOOK_COLUMNS} FROM book
            WHERE casefold(name) = casefold(?) AND book_id != ?
            """,
            (name, exclude_id or ""),
        )
        return _book_from_row(row) if row else None

    async def insert_book(self, book: Book) -> None:
        async with self.db.transaction():
            await self.db.execute(
                f"INSERT INTO book ({_BOOK_COLUMNS}) VALUES (?, ?, ?)",
                (book.id, book.name, to_db_text(book.created_at)),
            )

    async def update_book(self, book_id: str, name: str) -> None:
        async with self.db.transaction():
            await self.db.execute(
                "UPDATE book SET name = ? WHERE book_id = ?",
                (name, book_id),
            )

    async def delete_book(self, book_id: str) -> None:
        async with self.db.transaction():
            await self.db.execute("DELETE FROM book WHERE book_id = ?", (book_id,))

    # -------------------------------------------------------------------------
    # Category
    # -------------------------------------------------------------------------

    async def list_categories(self, book_id: str) -> list[Category]:
        rows = await self.db.fetchall(
            f"""
            SELECT {_CATEGORY_COLUMNS} FROM category
            WHERE book_id = ?
            ORDER BY rowid
            """,
            (book_id,),
        )
        return [_category_from_row(row) for row in rows]

    async def get_category(self, book_id: str, category_id: str) -> Category | None:
        row = await self.db.fetchone(
            f"""
            SELECT {_CATEGORY_COLUMNS} FROM category
            WHERE category_id = ? AND book_id = ?
            """,
            (category_id, book_id),
        )
        return _category_from_row(row) if row else None

    async def find_category_by_name(
        self,
        book_id: str,
        name: str,
        exclude_id: str | None = None,
    ) -> Category | None:
        """이름으로 카테고리 조회 (대소문자 무시)"""
        row = await self.db.fetchone(
            f"""
            SELECT {_CATEGORY_COLUMNS} FROM category
            WHERE book_id = ? AND casefold(name) = casefold(?) AND category_id != ?
            """,
            (book_id, name, exclude_id or ""),
        )
        return _category_from_row(row) if row else None

    async def insert_category(self, category: Category) -> None:
        async with self.db.transaction():
            await self.db.execute(
                f"INSERT INTO category ({_CATEGORY_COLUMNS}) VALUES ({_placeholders(5)})",
                (
                    category.id,
                    category.book_id,
                    category.name,
                    category.normal_balance.value,
                    int(category.is_system),
                ),
            )

    async def update_category(self, category: Category) -> None:
        async with self.db.transaction():
            await self.db.execute(
                """
                UPDATE category SET name = ?, normal_balance = ?
                WHERE category_id = ? AND book_id = ?
                """,
                (
                    category.name,
                    category.normal_balance.value,
                    category.id,
                    category.book_id,
                ),
            )

    async def delete_category(self, book_id: str, category_id: str) -> None:
        async with self.db.transaction():
            await self.db.execute(
                "DELETE FROM category WHERE category_id = ? AND book_id = ?",
                (category_id, book_id),
            )

    # -------------------------------------------------------------------------
    # Account
    # -------------------------------------------------------------------------

    async def list_accounts(self, book_id: str) -> list[Account]:
        rows = await self.db.fetchall(
            f"""
            SELECT {_ACCOUNT_COLUMNS} FROM account
            WHERE book_id = ?
            ORDER BY rowid
            """,
            (book_id,),
        )
        return [_account_from_row(row) for row in rows]

    async def get_account(self, book_id: str, account_id: str) -> Account | None:
        row = await self.db.fetchone(
            f"""
            SELECT {_ACCOUNT_COLUMNS} FROM account
            WHERE account_id = ? AND book_id = ?
            """,
            (account_id, book_id),
        )
        return _account_from_row(row) if row else None

    async def find_account_by_name(
        self,
        book_id: str,
        name: str,
        exclude_id: str | None = None,
    ) -> Account | None:
        """이름으로 계정 조회 (대소문자 무시)"""
        row = await self.db.fetchone(
            f"""
            SELECT {_ACCOUNT_COLUMNS} FROM account
            WHERE book_id = ? AND casefold(name) = casefold(?) AND account_id != ?
            """,
            (book_id, name, exclude_id or ""),
        )
        return _account_from_row(row) if row else None

    async def count_accounts_in_category(self, book_id: str, category_id: str) -> int:
        row = await self.db.fetchone(
            "SELECT COUNT(*) FROM account WHERE book_id = ? AND category_id = ?",
            (book_id, category_id),
        )
        return int(row[0]) if row else 0

    async def insert_account(self, account: Account) -> None:
        async with self.db.transaction():
            await self.db.execute(
                f"INSERT INTO account ({_ACCOUNT_COLUMNS}) VALUES ({_placeholders(7)})",
                (
                    account.id,
                    account.book_id,
                    account.category_id,
                    account.name,
                    str(account.opening_balance) if account.opening_balance is not None else None,
                    account.opening_balance_type.value,
                    int(account.is_system),
                ),
            )

    async def update_account(self, account: Account) -> None:
        async with self.db.transaction():
            await self.db.execute(
                """
                UPDATE account SET
                    category_id = ?,
                    name = ?,
                    opening_balance = ?,
                    opening_balance_type = ?
                WHERE account_id = ? AND book_id = ?
                """,
                (
                    account.category_id,
                    account.name,
                    str(account.opening_balance) if account.opening_balance is not None else None,
                    account.opening_balance_type.value,
                    account.id,
                    account.book_id,
                ),
            )

    async def delete_account(self, book_id: str, account_id: str) -> None:
        async with self.db.transaction():
            await self.db.execute(
                "DELETE FROM account WHERE account_id = ? AND book_id = ?",
                (account_id, book_id),
            )

    # -------------------------------------------------------------------------
    # Transaction
    # -------------------------------------------------------------------------

    async def _load_entries(
        self,
        transaction_ids: list[str],
    ) -> dict[str, list[TransactionEntry]]:
        """거래 ID별 항목 조회 (line_order 순)"""
        if not transaction_ids:
            return {}

        entries: dict[str, list[TransactionEntry]] = {tx_id: [] for tx_id in transaction_ids}
        # SQLite 변수 개수 제한 회피
        chunk_size = 500
        for start in range(0, len(transaction_ids), chunk_size):
            chunk = transaction_ids[start:start + chunk_size]
            rows = await self.db.fetchall(
                f"""
                SELECT transaction_id, account_id, side, amount, description
                FROM transaction_entry
                WHERE transaction_id IN ({_placeholders(len(chunk))})
                ORDER BY transaction_id, line_order, line_id
                """,
                tuple(chunk),
            )
            for row in rows:
                entries[row[0]].append(
                    TransactionEntry(
                        account_id=row[1],
                        type=EntrySide(row[2]),
                        amount=Decimal(row[3]),
                        description=row[4],
                    )
                )
        return entries

    async def _hydrate(self, rows: Iterable[tuple[Any, ...]]) -> list[Transaction]:
        rows = list(rows)
        entries = await self._load_entries([row[0] for row in rows])
        return [
            Transaction(
                id=row[0],
                book_id=row[1],
                date=from_db_text(row[2]),
                description=row[3],
                highlight=Highlight(row[4]) if row[4] else None,
                created_at=from_db_text(row[5]),
                entries=entries.get(row[0], []),
            )
            for row in rows
        ]

    async def list_transactions(self, book_id: str) -> list[Transaction]:
        """장부 거래 목록 (날짜 내림차순, 동일 날짜는 최근 생성 우선)"""
        rows = await self.db.fetchall(
            f"""
            SELECT {_TRANSACTION_COLUMNS} FROM ledger_transaction
            WHERE book_id = ?
            ORDER BY ts DESC, seq DESC
            """,
            (book_id,),
        )
        return await self._hydrate(rows)

    async def list_transactions_for_account(
        self,
        book_id: str,
        account_id: str,
    ) -> list[Transaction]:
        """특정 계정이 포함된 거래 목록 (날짜 내림차순)"""
        rows = await self.db.fetchall(
            f"""
            SELECT {_TRANSACTION_COLUMNS} FROM ledger_transaction
            WHERE book_id = ? AND transaction_id IN (
                SELECT transaction_id FROM transaction_entry WHERE account_id = ?
            )
            ORDER BY ts DESC, seq DESC
            """,
            (book_id, account_id),
        )
        return await self._hydrate(rows)

    async def get_transaction(self, book_id: str, transaction_id: str) -> Transaction | None:
        row = await self.db.fetchone(
            f"""
            SELECT {_TRANSACTION_COLUMNS} FROM ledger_transaction
            WHERE transaction_id = ? AND book_id = ?
            """,
            (transaction_id, book_id),
        )
        if not row:
            return None
        return (await self._hydrate([row]))[0]

    async def find_transactions(
        self,
        book_id: str,
        transaction_ids: list[str],
    ) -> list[Transaction]:
        """ID 목록에 해당하는 거래 조회 (존재하는 것만)"""
        if not transaction_ids:
            return []
        rows = await self.db.fetchall(
            f"""
            SELECT {_TRANSACTION_COLUMNS} FROM ledger_transaction
            WHERE book_id = ? AND transaction_id IN ({_placeholders(len(transaction_ids))})
            ORDER BY ts DESC, seq DESC
            """,
            (book_id, *transaction_ids),
        )
        return await self._hydrate(rows)

    async def _insert_entries(self, transaction: Transaction) -> None:
        await self.db.executemany(
            """
            INSERT INTO transaction_entry (
                transaction_id, account_id, side, amount, description, line_order
            ) VALUES (?, ?, ?, ?, ?, ?)
            """,
            [
                (
                    transaction.id,
                    entry.account_id,
                    entry.type.value,
                    str(entry.amount),
                    entry.description,
                    i,
                )
                for i, entry in enumerate(transaction.entries)
            ],
        )

    async def insert_transaction(self, transaction: Transaction) -> None:
        """거래 저장 (헤더 + 항목을 하나의 트랜잭션으로)"""
        async with self.db.transaction():
            await self.db.execute(
                f"""
                INSERT INTO ledger_transaction ({_TRANSACTION_COLUMNS})
                VALUES ({_placeholders(6)})
                """,
                (
                    transaction.id,
                    transaction.book_id,
                    to_db_text(transaction.date),
                    transaction.description,
                    transaction.highlight.value if transaction.highlight else None,
                    to_db_text(transaction.created_at),
                ),
            )
            await self._insert_entries(transaction)

        logger.debug(f"Saved transaction: {transaction.id}")

    async def replace_transaction(self, transaction: Transaction) -> None:
        """거래 전체 교체 (헤더 갱신 + 항목 재작성)"""
        async with self.db.transaction():
            await self.db.execute(
                """
                UPDATE ledger_transaction SET ts = ?, description = ?, highlight = ?
                WHERE transaction_id = ? AND book_id = ?
                """,
                (
                    to_db_text(transaction.date),
                    transaction.description,
                    transaction.highlight.value if transaction.highlight else None,
                    transaction.id,
                    transaction.book_id,
                ),
            )
            await self.db.execute(
                "DELETE FROM transaction_entry WHERE transaction_id = ?",
                (transaction.id,),
            )
            await self._insert_entries(transaction)

    async def set_highlight(
        self,
        book_id: str,
        transaction_id: str,
        highlight: Highlight | None,
    ) -> None:
        async with self.db.transaction():
            await self.db.execute(
                """
                UPDATE ledger_transaction SET highlight = ?
                WHERE transaction_id = ? AND book_id = ?
                """,
                (highlight.value if highlight else None, transaction_id, book_id),
            )

    async def delete_transactions(self, book_id: str, transaction_ids: list[str]) -> None:
        """거래 삭제 (항목은 ON DELETE CASCADE)"""
        if not transaction_ids:
            return
        async with self.db.transaction():
            await self.db.execute(
                f"""
                DELETE FROM ledger_transaction
                WHERE book_id = ? AND transaction_id IN ({_placeholders(len(transaction_ids))})
                """,
                (book_id, *transaction_ids),
            )

    # -------------------------------------------------------------------------
    # Book cascade
    # -------------------------------------------------------------------------

    async def delete_book_contents(self, book_id: str) -> None:
        """장부 소속 거래/계정/카테고리 일괄 삭제"""
        async with self.db.transaction():
            await self.db.execute(
                "DELETE FROM ledger_transaction WHERE book_id = ?",
                (book_id,),
            )
            await self.db.execute("DELETE FROM account WHERE book_id = ?", (book_id,))
            await self.db.execute("DELETE FROM category WHERE book_id = ?", (book_id,))

    # -------------------------------------------------------------------------
    # Recycle bin
    # -------------------------------------------------------------------------

    async def insert_bin_items(self, items: list[RecycleBinItem]) -> None:
        """휴지통 항목 일괄 저장

        같은 배치 안에서는 앞선 항목이 목록 상단에 오도록 seq를 역순 부여.
        """
        if not items:
            return
        async with self.db.transaction():
            row = await self.db.fetchone("SELECT COALESCE(MAX(seq), 0) FROM recycle_bin")
            base = int(row[0]) if row else 0
            await self.db.executemany(
                """
                INSERT INTO recycle_bin (
                    bin_id, entity_id, entity_type, book_id, payload_json, deleted_at, seq
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        item.bin_id,
                        item.entity_id,
                        item.item_type.value,
                        item.book_id,
                        json.dumps(item.entity.to_dict(), ensure_ascii=False),
                        to_db_text(item.deleted_at),
                        base + len(items) - i,
                    )
                    for i, item in enumerate(items)
                ],
            )

    @staticmethod
    def _bin_item_from_row(row: tuple[Any, ...]) -> RecycleBinItem:
        return RecycleBinItem(
            bin_id=row[0],
            item_type=row[1],
            entity=snapshot_from_payload(row[1], json.loads(row[2])),
            deleted_at=from_db_text(row[3]),
        )

    async def list_bin_items(self) -> list[RecycleBinItem]:
        """휴지통 목록 (최근 삭제 우선)"""
        rows = await self.db.fetchall(
            """
            SELECT bin_id, entity_type, payload_json, deleted_at
            FROM recycle_bin
            ORDER BY deleted_at DESC, seq DESC
            """
        )
        return [self._bin_item_from_row(row) for row in rows]

    async def get_bin_item(self, bin_id: str) -> RecycleBinItem | None:
        row = await self.db.fetchone(
            """
            SELECT bin_id, entity_type, payload_json, deleted_at
            FROM recycle_bin WHERE bin_id = ?
            """,
            (bin_id,),
        )
        return self._bin_item_from_row(row) if row else None

    async def delete_bin_item(self, bin_id: str) -> bool:
        async with self.db.transaction():
            cursor = await self.db.execute(
                "DELETE FROM recycle_bin WHERE bin_id = ?",
                (bin_id,),
            )
        return cursor.rowcount > 0
