"""
계정 관리

장부별 계정 CRUD 및 기초 잔액(Opening Balance) 처리.

기초 잔액은 별도 거래로 표현된다:
    [{계정, 금액, 방향}, {Opening Balance Equity, 금액, 반대 방향}]
설명은 "Opening Balance for <계정 이름>" 이며 이 설명으로 기초 잔액 거래를 식별한다.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any

from core.ledger.categories import clean_name
from core.ledger.errors import (
    ConflictError,
    InvariantError,
    NotFoundError,
    ProtectedEntityError,
    ValidationError,
)
from core.ledger.models import (
    Account,
    Category,
    Transaction,
    TransactionEntry,
    TransactionInput,
    parse_side,
    to_decimal,
)
from core.ledger.types import (
    EQUITY_CATEGORY_NAME,
    OPENING_BALANCE_EQUITY_NAME,
    EntrySide,
    equity_category_id,
    new_id,
    opening_balance_description,
    opening_balance_equity_id,
)
from core.utils.timezone import now_utc

if TYPE_CHECKING:
    from core.ledger.engine import LedgerEngine
    from core.ledger.recycle_bin import RecycleBin
    from core.ledger.store import LedgerStore

logger = logging.getLogger(__name__)


@dataclass
class AccountInput:
    """계정 생성 입력"""

    name: str
    category_id: str
    opening_balance: Decimal | None = None
    opening_balance_type: EntrySide = EntrySide.DEBIT


@dataclass
class AccountUpdate:
    """계정 수정 입력

    None인 필드는 변경하지 않는다.
    opening_balance=0 은 기초 잔액 제거를 의미한다.
    """

    name: str | None = None
    category_id: str | None = None
    opening_balance: Decimal | None = None
    opening_balance_type: EntrySide | None = None


class OpeningBalanceAction(str, Enum):
    """계정 수정 시 기초 잔액 거래 처리"""

    NONE = "none"  # 변경 없음
    CREATE = "create"  # 새 기초 잔액 거래 생성
    REPLACE = "replace"  # 항목과 설명 교체
    DELETE = "delete"  # 기초 잔액 거래 삭제 (휴지통)
    RENAME = "rename"  # 설명만 변경


def plan_opening_balance(
    has_transaction: bool,
    requested: Decimal | None,
    type_changed: bool = False,
    renamed: bool = False,
) -> OpeningBalanceAction:
    """기초 잔액 거래 처리 방식 결정

    Args:
        has_transaction: 기존 기초 잔액 거래 존재 여부
        requested: 요청된 기초 잔액 (None이면 금액 변경 없음)
        type_changed: 차변/대변 방향 변경 여부
        renamed: 계정 이름 변경 여부

    Returns:
        수행할 처리
    """
    if requested is None:
        if has_transaction and type_changed:
            return OpeningBalanceAction.REPLACE
        if has_transaction and renamed:
            return OpeningBalanceAction.RENAME
        return OpeningBalanceAction.NONE

    if requested > 0:
        return OpeningBalanceAction.REPLACE if has_transaction else OpeningBalanceAction.CREATE

    return OpeningBalanceAction.DELETE if has_transaction else OpeningBalanceAction.NONE


def opening_balance_entries(
    account_id: str,
    equity_account_id: str,
    amount: Decimal,
    side: EntrySide,
) -> list[TransactionEntry]:
    """기초 잔액 분개 항목 (계정 ↔ Opening Balance Equity)"""
    return [
        TransactionEntry(account_id=account_id, amount=amount, type=side),
        TransactionEntry(account_id=equity_account_id, amount=amount, type=side.inverse),
    ]


def _opening_amount(value: Any) -> Decimal | None:
    """기초 잔액 입력 변환 (음수 불가)"""
    if value is None:
        return None
    amount = to_decimal(value, "opening balance")
    if amount < 0:
        raise ValidationError("Opening balance cannot be negative")
    return amount


class AccountRegistry:
    """계정 관리

    Args:
        store: Ledger 저장소
        engine: 기초 잔액 거래를 만들 거래 엔진
        recycle_bin: 삭제 계정을 보관할 휴지통
    """

    def __init__(self, store: LedgerStore, engine: LedgerEngine, recycle_bin: RecycleBin):
        self.store = store
        self.engine = engine
        self.recycle_bin = recycle_bin

    async def list(self, book_id: str, include_system: bool = False) -> list[Account]:
        """계정 목록 (기본적으로 시스템 계정 제외)"""
        accounts = await self.store.list_accounts(book_id)
        if include_system:
            return accounts
        return [a for a in accounts if not a.is_system]

    async def get(self, book_id: str, account_id: str) -> Account:
        """계정 조회

        Raises:
            NotFoundError: 해당 장부에 계정 없음
        """
        account = await self.store.get_account(book_id, account_id)
        if account is None:
            raise NotFoundError(f"Account not found in this book: {account_id}")
        return account

    async def ensure_opening_balance_equity(self, book_id: str) -> Account:
        """Opening Balance Equity 계정 조회 (없으면 Equity 카테고리와 함께 생성)

        Equity 카테고리는 이름(대소문자 무시)으로 찾고 없으면 시스템 카테고리로 만든다.

        Raises:
            NotFoundError: 장부 없음
            ConflictError: 같은 이름의 일반 계정이 이미 존재
        """
        account_id = opening_balance_equity_id(book_id)
        existing = await self.store.get_account(book_id, account_id)
        if existing is not None:
            return existing

        if await self.store.get_book(book_id) is None:
            raise NotFoundError(f"Book not found: {book_id}")
        if await self.store.find_account_by_name(book_id, OPENING_BALANCE_EQUITY_NAME):
            raise ConflictError(
                f'An account named "{OPENING_BALANCE_EQUITY_NAME}" already exists in this book'
            )

        async with self.store.db.transaction():
            category = await self.store.find_category_by_name(book_id, EQUITY_CATEGORY_NAME)
            if category is None:
                category = Category(
                    id=equity_category_id(book_id),
                    book_id=book_id,
                    name=EQUITY_CATEGORY_NAME,
                    normal_balance=EntrySide.CREDIT,
                    is_system=True,
                )
                await self.store.insert_category(category)

            account = Account(
                id=account_id,
                book_id=book_id,
                category_id=category.id,
                name=OPENING_BALANCE_EQUITY_NAME,
                is_system=True,
            )
            await self.store.insert_account(account)

        logger.info("Opening Balance Equity 계정 생성", extra={"book_id": book_id})
        return account

    async def create(self, book_id: str, data: AccountInput) -> Account:
        """계정 생성 (기초 잔액 > 0 이면 기초 잔액 거래 함께 생성)

        Raises:
            ValidationError: 빈 이름, 카테고리 미지정, 음수 기초 잔액
            NotFoundError: 장부 또는 카테고리 없음
            ConflictError: 이름 중복
        """
        name = clean_name(data.name, "Account")
        if not data.category_id:
            raise ValidationError("Account category is required")
        opening_balance = _opening_amount(data.opening_balance)
        side = parse_side(data.opening_balance_type, "opening balance type")

        if await self.store.get_book(book_id) is None:
            raise NotFoundError(f"Book not found: {book_id}")
        if await self.store.get_category(book_id, data.category_id) is None:
            raise NotFoundError(f"Category not found in this book: {data.category_id}")
        if await self.store.find_account_by_name(book_id, name) is not None:
            raise ConflictError(f'An account named "{name}" already exists in this book')

        account = Account(
            id=new_id("acc"),
            book_id=book_id,
            category_id=data.category_id,
            name=name,
            opening_balance=opening_balance,
            opening_balance_type=side,
        )

        async with self.store.db.transaction():
            await self.store.insert_account(account)
            if opening_balance is not None and opening_balance > 0:
                await self._create_opening_transaction(account, opening_balance, side)

        logger.info(
            "계정 생성",
            extra={
                "book_id": book_id,
                "account_id": account.id,
                "opening_balance": str(opening_balance) if opening_balance else None,
            },
        )
        return account

    async def update(self, book_id: str, account_id: str, data: AccountUpdate) -> Account:
        """계정 수정

        기초 잔액 거래는 plan_opening_balance() 결과에 따라 생성/교체/삭제/설명 변경.
        모든 단계는 하나의 DB 트랜잭션으로 실행된다.

        Raises:
            ValidationError: 빈 이름, 음수 기초 잔액
            NotFoundError: 계정 또는 카테고리 없음
            ProtectedEntityError: 시스템 계정
            ConflictError: 이름 중복
        """
        account = await self.get(book_id, account_id)
        if account.is_system:
            raise ProtectedEntityError(f"Cannot modify the system-generated {account.name} account")

        name = clean_name(data.name, "Account") if data.name is not None else account.name
        requested = _opening_amount(data.opening_balance)
        side = (
            parse_side(data.opening_balance_type, "opening balance type")
            if data.opening_balance_type is not None
            else account.opening_balance_type
        )

        if name != account.name and await self.store.find_account_by_name(
            book_id, name, exclude_id=account_id
        ):
            raise ConflictError(f'An account named "{name}" already exists in this book')
        if data.category_id is not None and data.category_id != account.category_id:
            if await self.store.get_category(book_id, data.category_id) is None:
                raise NotFoundError(f"Category not found in this book: {data.category_id}")

        opening_tx = await self.find_opening_transaction(book_id, account)
        action = plan_opening_balance(
            has_transaction=opening_tx is not None,
            requested=requested,
            type_changed=side != account.opening_balance_type,
            renamed=name != account.name,
        )

        updated = Account(
            id=account.id,
            book_id=book_id,
            category_id=data.category_id or account.category_id,
            name=name,
            opening_balance=account.opening_balance,
            opening_balance_type=side,
            is_system=account.is_system,
        )
        if requested is not None:
            updated.opening_balance = requested if requested > 0 else None

        async with self.store.db.transaction():
            await self.store.update_account(updated)

            if action is OpeningBalanceAction.CREATE:
                await self._create_opening_transaction(updated, requested, side)
            elif action is OpeningBalanceAction.REPLACE:
                amount = requested if requested is not None else self._opening_amount_of(
                    opening_tx, account_id
                )
                equity = await self.ensure_opening_balance_equity(book_id)
                await self.engine.update(
                    book_id,
                    opening_tx.id,
                    TransactionInput(
                        date=opening_tx.date,
                        description=opening_balance_description(name),
                        entries=opening_balance_entries(account_id, equity.id, amount, side),
                    ),
                )
            elif action is OpeningBalanceAction.DELETE:
                await self.engine.delete(book_id, opening_tx.id)
            elif action is OpeningBalanceAction.RENAME:
                await self.engine.update(
                    book_id,
                    opening_tx.id,
                    TransactionInput(
                        date=opening_tx.date,
                        description=opening_balance_description(name),
                        entries=opening_tx.entries,
                    ),
                )

        logger.info(
            "계정 수정",
            extra={
                "book_id": book_id,
                "account_id": account_id,
                "opening_balance_action": action.value,
            },
        )
        return updated

    async def delete(self, book_id: str, account_id: str) -> None:
        """계정 삭제

        기초 잔액 거래 외 다른 거래가 있으면 삭제 불가.
        기초 잔액 거래를 먼저 휴지통으로 옮긴 뒤 계정을 옮긴다.

        Raises:
            NotFoundError: 계정 없음
            ProtectedEntityError: 시스템 계정
            InvariantError: 다른 거래 존재
        """
        await self.delete_many(book_id, [account_id])

    async def delete_many(self, book_id: str, account_ids: list[str]) -> None:
        """계정 일괄 삭제 (하나라도 삭제 불가하면 전체 실패)

        Raises:
            NotFoundError: 없는 계정 포함
            ProtectedEntityError: 시스템 계정 포함
            InvariantError: 다른 거래가 있는 계정 포함
        """
        plans: list[tuple[Account, Transaction | None]] = []
        for account_id in dict.fromkeys(account_ids):
            account = await self.get(book_id, account_id)
            if account.is_system:
                raise ProtectedEntityError(
                    f"Cannot delete the system-generated {account.name} account"
                )

            transactions = await self.engine.transactions_for_account(book_id, account_id)
            opening_tx = self._match_opening_transaction(account, transactions)
            if len(transactions) > (1 if opening_tx else 0):
                raise InvariantError(
                    f'Cannot delete account "{account.name}" because it has existing transactions'
                )
            plans.append((account, opening_tx))

        async with self.store.db.transaction():
            for account, opening_tx in plans:
                if opening_tx is not None:
                    await self.engine.delete(book_id, opening_tx.id)
                await self.recycle_bin.add([account])
                await self.store.delete_account(book_id, account.id)

        logger.info(
            "계정 삭제",
            extra={"book_id": book_id, "count": len(plans)},
        )

    async def find_opening_transaction(
        self,
        book_id: str,
        account: Account,
    ) -> Transaction | None:
        """계정의 기초 잔액 거래 조회"""
        transactions = await self.engine.transactions_for_account(book_id, account.id)
        return self._match_opening_transaction(account, transactions)

    # -------------------------------------------------------------------------
    # 내부 헬퍼
    # -------------------------------------------------------------------------

    @staticmethod
    def _match_opening_transaction(
        account: Account,
        transactions: list[Transaction],
    ) -> Transaction | None:
        description = opening_balance_description(account.name)
        for transaction in transactions:
            if transaction.description == description and transaction.touches(account.id):
                return transaction
        return None

    @staticmethod
    def _opening_amount_of(transaction: Transaction, account_id: str) -> Decimal:
        return sum(
            (e.amount for e in transaction.entries if e.account_id == account_id),
            Decimal("0"),
        )

    async def _create_opening_transaction(
        self,
        account: Account,
        amount: Decimal,
        side: EntrySide,
    ) -> Transaction:
        equity = await self.ensure_opening_balance_equity(account.book_id)
        return await self.engine.create(
            account.book_id,
            TransactionInput(
                date=now_utc(),
                description=opening_balance_description(account.name),
                entries=opening_balance_entries(account.id, equity.id, amount, side),
            ),
        )
