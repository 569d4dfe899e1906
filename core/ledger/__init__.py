"""
복식부기 (Double-Entry Bookkeeping) 장부 시스템

여러 장부(Book)에 대해 카테고리/계정/거래를 관리하고
잔액 계산, 장부 간 이체, 휴지통(소프트 삭제)을 제공.

사용 예시:
```python
from core.ledger import LedgerServices, TransactionEntry, TransactionInput

services = LedgerServices.from_db(db)

# 기본 장부 (빈 저장소면 자동 생성)
books = await services.books.list()

# 거래 생성 (차변 합계 = 대변 합계)
tx = await services.engine.create(
    "book_default",
    TransactionInput(
        date=now_utc(),
        description="Office rent",
        entries=[
            TransactionEntry(account_id=rent_id, amount=Decimal("500"), type=EntrySide.DEBIT),
            TransactionEntry(account_id=cash_id, amount=Decimal("500"), type=EntrySide.CREDIT),
        ],
    ),
)

# 계정별 잔액
balances = await services.balances.accounts_with_balances("book_default")
```
"""

from core.ledger.accounts import AccountInput, AccountRegistry, AccountUpdate
from core.ledger.balance import BalanceQueries
from core.ledger.books import BookRegistry
from core.ledger.categories import CategoryStore
from core.ledger.engine import LedgerEngine
from core.ledger.errors import (
    ConflictError,
    InvariantError,
    LedgerError,
    NotFoundError,
    ProtectedEntityError,
    ValidationError,
)
from core.ledger.models import (
    Account,
    Book,
    Category,
    Note,
    RecycleBinItem,
    Transaction,
    TransactionEntry,
    TransactionInput,
)
from core.ledger.recycle_bin import RecycleBin
from core.ledger.services import LedgerServices
from core.ledger.store import LedgerStore
from core.ledger.transfer import TransferCoordinator
from core.ledger.types import (
    DEFAULT_BOOK_ID,
    EntrySide,
    Highlight,
    RecycleItemType,
)

__all__ = [
    # 핵심 클래스
    "LedgerServices",
    "LedgerStore",
    "LedgerEngine",
    "BookRegistry",
    "CategoryStore",
    "AccountRegistry",
    "BalanceQueries",
    "TransferCoordinator",
    "RecycleBin",
    # 모델
    "Book",
    "Category",
    "Account",
    "AccountInput",
    "AccountUpdate",
    "Transaction",
    "TransactionEntry",
    "TransactionInput",
    "Note",
    "RecycleBinItem",
    # Enum
    "EntrySide",
    "Highlight",
    "RecycleItemType",
    # 예외
    "LedgerError",
    "ValidationError",
    "ConflictError",
    "NotFoundError",
    "InvariantError",
    "ProtectedEntityError",
    # 상수
    "DEFAULT_BOOK_ID",
]
