"""
Ledger 서비스 구성

하나의 DB 연결 위에 모든 Ledger 컴포넌트를 조립한다.

사용 예시:
```python
async with SQLiteAdapter(db_path) as db:
    await init_schema(db)
    await init_ledger_schema(db)

    services = LedgerServices.from_db(db)
    books = await services.books.list()
```
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from core.constants import APP_NAME, APP_VERSION, Defaults
from core.ledger.accounts import AccountRegistry
from core.ledger.balance import BalanceQueries
from core.ledger.books import BookRegistry
from core.ledger.categories import CategoryStore
from core.ledger.engine import LedgerEngine
from core.ledger.recycle_bin import RecycleBin
from core.ledger.store import LedgerStore
from core.ledger.transfer import TransferCoordinator
from core.storage.note_store import NoteStore
from core.utils.timezone import now_utc, to_db_text

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


@dataclass
class LedgerServices:
    """Ledger 컴포넌트 묶음"""

    db: SQLiteAdapter
    store: LedgerStore
    recycle_bin: RecycleBin
    engine: LedgerEngine
    categories: CategoryStore
    accounts: AccountRegistry
    books: BookRegistry
    transfers: TransferCoordinator
    balances: BalanceQueries
    notes: NoteStore

    @classmethod
    def from_db(
        cls,
        db: SQLiteAdapter,
        default_book_name: str = Defaults.DEFAULT_BOOK_NAME,
    ) -> LedgerServices:
        """연결된 어댑터로 전체 컴포넌트 생성"""
        store = LedgerStore(db)
        recycle_bin = RecycleBin(store)
        engine = LedgerEngine(store, recycle_bin)
        categories = CategoryStore(store, recycle_bin)
        accounts = AccountRegistry(store, engine, recycle_bin)
        books = BookRegistry(store, accounts, recycle_bin, default_book_name)
        return cls(
            db=db,
            store=store,
            recycle_bin=recycle_bin,
            engine=engine,
            categories=categories,
            accounts=accounts,
            books=books,
            transfers=TransferCoordinator(store, engine, accounts, categories),
            balances=BalanceQueries(store),
            notes=NoteStore(db),
        )

    async def export_all(self) -> dict[str, Any]:
        """전체 데이터 내보내기 (JSON 직렬화 가능한 dict)"""
        books = await self.books.list()

        categories: list[dict[str, Any]] = []
        accounts: list[dict[str, Any]] = []
        transactions: list[dict[str, Any]] = []
        for book in books:
            categories.extend(c.to_dict() for c in await self.store.list_categories(book.id))
            accounts.extend(a.to_dict() for a in await self.store.list_accounts(book.id))
            transactions.extend(
                t.to_dict() for t in await self.store.list_transactions(book.id)
            )

        notes = await self.notes.list_all()
        recycle_bin = await self.recycle_bin.list()

        logger.info(
            "데이터 내보내기",
            extra={"books": len(books), "transactions": len(transactions)},
        )
        return {
            "app": APP_NAME,
            "version": APP_VERSION,
            "exported_at": to_db_text(now_utc()),
            "books": [b.to_dict() for b in books],
            "categories": categories,
            "accounts": accounts,
            "transactions": transactions,
            "notes": [n.to_dict() for n in notes],
            "recycle_bin": [item.to_dict() for item in recycle_bin],
        }
