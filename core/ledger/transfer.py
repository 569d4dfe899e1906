"""
장부 간 이체

두 장부는 서로 독립적인 원장이므로 이체는 각 장부의 Opening Balance Equity 계정을
상대 계정으로 하는 거래 두 건으로 표현된다.

- 원 장부: 원 계정 잔액 감소 ↔ 원 장부 OBE
- 대상 장부: 대상 계정 잔액 증가 ↔ 대상 장부 OBE

두 거래는 하나의 DB 트랜잭션으로 저장되어 한쪽만 반영되는 일이 없다.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from core.ledger.accounts import AccountInput, opening_balance_entries
from core.ledger.errors import NotFoundError, ProtectedEntityError, ValidationError
from core.ledger.models import (
    Account,
    Book,
    Category,
    Transaction,
    TransactionInput,
    parse_side,
    to_decimal,
)
from core.ledger.types import EntrySide, opening_balance_description
from core.utils.timezone import now_utc

if TYPE_CHECKING:
    from core.ledger.accounts import AccountRegistry
    from core.ledger.categories import CategoryStore
    from core.ledger.engine import LedgerEngine
    from core.ledger.store import LedgerStore

logger = logging.getLogger(__name__)


@dataclass
class TransferResult:
    """이체 결과"""

    target_account: Account
    target_transaction: Transaction
    source_transaction: Transaction | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "target_account": self.target_account.to_dict(),
            "target_transaction": self.target_transaction.to_dict(),
            "source_transaction": (
                self.source_transaction.to_dict() if self.source_transaction else None
            ),
        }


class TransferCoordinator:
    """장부 간 이체

    Args:
        store: Ledger 저장소
        engine: 거래 엔진
        accounts: 계정 관리 (OBE 조회, 대상 계정 생성)
        categories: 카테고리 관리 (대상 카테고리 생성)
    """

    def __init__(
        self,
        store: LedgerStore,
        engine: LedgerEngine,
        accounts: AccountRegistry,
        categories: CategoryStore,
    ):
        self.store = store
        self.engine = engine
        self.accounts = accounts
        self.categories = categories

    async def transfer_opening_balance(
        self,
        source_book_id: str,
        target_book_id: str,
        account_name: str,
        category_id: str,
        amount: Decimal | str | int,
        balance_type: EntrySide | str,
    ) -> TransferResult:
        """기초 잔액 이체 (대상 장부에만 기록, 원 장부는 변경 없음)

        대상 장부에서 같은 이름의 카테고리/계정을 찾고 없으면 만든 뒤
        OBE 계정을 상대로 기초 잔액 형태의 거래를 생성한다.

        Args:
            source_book_id: 원 장부 ID
            target_book_id: 대상 장부 ID
            account_name: 계정 이름
            category_id: 원 장부의 카테고리 ID (대상 장부에서 같은 이름으로 매칭)
            amount: 금액 (> 0)
            balance_type: 대상 계정에 기록할 방향

        Raises:
            ValidationError: 같은 장부, 0 이하 금액
            NotFoundError: 장부 또는 원 카테고리 없음
            ProtectedEntityError: 대상 장부의 같은 이름 계정이 시스템 계정
        """
        amount, side = self._validate(source_book_id, target_book_id, amount, balance_type)
        source_book = await self._require_book(source_book_id)
        await self._require_book(target_book_id)
        source_category = await self.categories.get(source_book_id, category_id)

        async with self.store.db.transaction():
            target_category = await self._resolve_category(target_book_id, source_category)
            target_account = await self._resolve_account(
                target_book_id, account_name, target_category
            )
            target_tx = await self._post_target_leg(
                target_account,
                amount,
                side,
                fallback_description=f"Opening balance transferred from {source_book.name}",
            )

        logger.info(
            "기초 잔액 이체",
            extra={
                "source_book_id": source_book_id,
                "target_book_id": target_book_id,
                "account_id": target_account.id,
                "amount": str(amount),
            },
        )
        return TransferResult(target_account=target_account, target_transaction=target_tx)

    async def transfer_balance_between_books(
        self,
        source_book_id: str,
        target_book_id: str,
        source_account_id: str,
        category_id: str | None,
        amount: Decimal | str | int,
        balance_type: EntrySide | str,
        target_account_id: str | None = None,
    ) -> TransferResult:
        """장부 간 잔액 이체

        원 장부: 원 계정을 balance_type 반대 방향으로 amount만큼 기록 (잔액 감소).
        대상 장부: 대상 계정을 balance_type 방향으로 amount만큼 기록 (잔액 증가).
        대상 계정은 명시 ID → 같은 이름 계정 → 새 계정 순으로 결정.

        Args:
            source_book_id: 원 장부 ID
            target_book_id: 대상 장부 ID
            source_account_id: 원 계정 ID
            category_id: 원 장부 카테고리 ID (None이면 원 계정의 카테고리)
            amount: 금액 (> 0)
            balance_type: 원 계정 잔액 방향 (차변 잔액이면 debit)
            target_account_id: 대상 계정 ID (선택)

        Raises:
            ValidationError: 같은 장부, 0 이하 금액
            NotFoundError: 장부, 원 계정, 명시한 대상 계정 없음
            ProtectedEntityError: 원 계정 또는 대상 계정이 시스템 계정
        """
        amount, side = self._validate(source_book_id, target_book_id, amount, balance_type)
        source_book = await self._require_book(source_book_id)
        target_book = await self._require_book(target_book_id)
        source_account = await self.accounts.get(source_book_id, source_account_id)
        if source_account.is_system:
            raise ProtectedEntityError(
                f"Cannot transfer from the system-generated {source_account.name} account"
            )

        explicit_target: Account | None = None
        if target_account_id:
            explicit_target = await self.store.get_account(target_book_id, target_account_id)
            if explicit_target is None:
                raise NotFoundError(
                    f"Target account not found in book {target_book_id}: {target_account_id}"
                )
            if explicit_target.is_system:
                raise ProtectedEntityError(
                    f"Cannot transfer into the system-generated {explicit_target.name} account"
                )

        async with self.store.db.transaction():
            source_equity = await self.accounts.ensure_opening_balance_equity(source_book_id)
            source_tx = await self.engine.create(
                source_book_id,
                TransactionInput(
                    date=now_utc(),
                    description=f"Balance transfer to {target_book.name}",
                    entries=opening_balance_entries(
                        source_account.id, source_equity.id, amount, side.inverse
                    ),
                ),
            )

            if explicit_target is not None:
                target_account = explicit_target
            else:
                source_category = await self.categories.get(
                    source_book_id, category_id or source_account.category_id
                )
                target_category = await self._resolve_category(target_book_id, source_category)
                target_account = await self._resolve_account(
                    target_book_id, source_account.name, target_category
                )

            target_equity = await self.accounts.ensure_opening_balance_equity(target_book_id)
            target_tx = await self.engine.create(
                target_book_id,
                TransactionInput(
                    date=now_utc(),
                    description=f"Balance transfer from {source_book.name}",
                    entries=opening_balance_entries(
                        target_account.id, target_equity.id, amount, side
                    ),
                ),
            )

        logger.info(
            "장부 간 잔액 이체",
            extra={
                "source_book_id": source_book_id,
                "target_book_id": target_book_id,
                "source_account_id": source_account.id,
                "target_account_id": target_account.id,
                "amount": str(amount),
            },
        )
        return TransferResult(
            target_account=target_account,
            target_transaction=target_tx,
            source_transaction=source_tx,
        )

    # -------------------------------------------------------------------------
    # 내부 헬퍼
    # -------------------------------------------------------------------------

    @staticmethod
    def _validate(
        source_book_id: str,
        target_book_id: str,
        amount: Any,
        balance_type: EntrySide | str,
    ) -> tuple[Decimal, EntrySide]:
        if source_book_id == target_book_id:
            raise ValidationError("Source and target books must be different")
        value = to_decimal(amount)
        if value <= 0:
            raise ValidationError("Transfer amount must be positive")
        return value, parse_side(balance_type, "balance type")

    async def _require_book(self, book_id: str) -> Book:
        book = await self.store.get_book(book_id)
        if book is None:
            raise NotFoundError(f"Book not found: {book_id}")
        return book

    async def _resolve_category(self, book_id: str, source: Category) -> Category:
        """대상 장부에서 같은 이름의 카테고리 (없으면 생성)"""
        existing = await self.store.find_category_by_name(book_id, source.name)
        if existing is not None:
            return existing
        return await self.categories.create(book_id, source.name, source.normal_balance)

    async def _resolve_account(
        self,
        book_id: str,
        name: str,
        category: Category,
    ) -> Account:
        """대상 장부에서 같은 이름의 계정 (없으면 생성)"""
        existing = await self.store.find_account_by_name(book_id, name)
        if existing is not None:
            if existing.is_system:
                raise ProtectedEntityError(
                    f"Cannot transfer into the system-generated {existing.name} account"
                )
            return existing
        return await self.accounts.create(
            book_id,
            AccountInput(name=name, category_id=category.id),
        )

    async def _post_target_leg(
        self,
        account: Account,
        amount: Decimal,
        side: EntrySide,
        fallback_description: str,
    ) -> Transaction:
        """대상 계정 기초 잔액 거래 생성

        기존 기초 잔액 거래가 없으면 이 거래가 계정의 기초 잔액이 되고,
        이미 있으면 별도 설명으로 추가 거래를 만든다.
        """
        equity = await self.accounts.ensure_opening_balance_equity(account.book_id)
        existing = await self.accounts.find_opening_transaction(account.book_id, account)

        if existing is None:
            description = opening_balance_description(account.name)
            account.opening_balance = amount
            account.opening_balance_type = side
            await self.store.update_account(account)
        else:
            description = fallback_description

        return await self.engine.create(
            account.book_id,
            TransactionInput(
                date=now_utc(),
                description=description,
                entries=opening_balance_entries(account.id, equity.id, amount, side),
            ),
        )
