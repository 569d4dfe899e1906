"""
잔액 계산

거래 목록에 대한 읽기 전용 계산 (저장소 변경 없음).

- 원시 잔액: Σ차변 − Σ대변
- 정상 잔액 방향(카테고리 normal_balance) 기준 정규화
- 계정 원장 (누적 잔액), 카테고리 합계, 시산 합계
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import TYPE_CHECKING, Iterable

from core.ledger.errors import NotFoundError
from core.ledger.models import Account, Category, Transaction
from core.ledger.types import EntrySide, opening_balance_description
from core.utils.timezone import to_utc

if TYPE_CHECKING:
    from core.ledger.store import LedgerStore

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def _side_sums(account_id: str, transaction: Transaction) -> tuple[Decimal, Decimal]:
    """거래 내 특정 계정의 (차변, 대변) 합계"""
    debit = ZERO
    credit = ZERO
    for entry in transaction.entries:
        if entry.account_id != account_id:
            continue
        if entry.type is EntrySide.DEBIT:
            debit += entry.amount
        else:
            credit += entry.amount
    return debit, credit


def account_balance(account_id: str, transactions: Iterable[Transaction]) -> Decimal:
    """원시 잔액 (Σ차변 − Σ대변)"""
    balance = ZERO
    for transaction in transactions:
        debit, credit = _side_sums(account_id, transaction)
        balance += debit - credit
    return balance


def normalize(raw: Decimal, normal_balance: EntrySide) -> Decimal:
    """정상 잔액 방향 기준 잔액 (차변 정상이면 그대로, 대변 정상이면 부호 반전)"""
    return raw if normal_balance is EntrySide.DEBIT else -raw


def balance_side(normalized: Decimal, normal_balance: EntrySide) -> EntrySide:
    """표시용 잔액 방향 (0 이상이면 정상 방향, 음수면 반대 방향)"""
    return normal_balance if normalized >= 0 else normal_balance.inverse


@dataclass
class LedgerRow:
    """계정 원장 한 줄"""

    transaction_id: str
    date: datetime
    description: str
    debit: Decimal
    credit: Decimal
    balance: Decimal

    def to_dict(self) -> dict:
        return {
            "transaction_id": self.transaction_id,
            "date": self.date.isoformat(),
            "description": self.description,
            "debit": str(self.debit),
            "credit": str(self.credit),
            "balance": str(self.balance),
        }


@dataclass
class AccountLedger:
    """계정 원장 (기초 잔액 + 기간 내 행 + 기말 잔액)"""

    account_id: str
    normal_balance: EntrySide
    opening_balance: Decimal
    rows: list[LedgerRow] = field(default_factory=list)

    @property
    def closing_balance(self) -> Decimal:
        return self.rows[-1].balance if self.rows else self.opening_balance

    @property
    def closing_side(self) -> EntrySide:
        return balance_side(self.closing_balance, self.normal_balance)


def _start_bound(value: date | datetime | None) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_utc(value)
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def _end_bound(value: date | datetime | None) -> datetime | None:
    # 날짜만 주어지면 해당 일자 끝까지 포함
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_utc(value)
    return datetime.combine(value, time.max, tzinfo=timezone.utc)


def account_ledger(
    account: Account,
    transactions: Iterable[Transaction],
    normal_balance: EntrySide,
    date_from: date | datetime | None = None,
    date_to: date | datetime | None = None,
) -> AccountLedger:
    """계정 원장 계산

    "Opening Balance for <계정 이름>" 거래는 행이 아니라 시작 잔액으로 반영.
    date_from 이전 거래는 기초 잔액에 합산, date_to 이후 거래는 제외.

    Args:
        account: 대상 계정
        transactions: 거래 목록 (순서 무관, 해당 계정 미포함 거래는 무시)
        normal_balance: 계정 카테고리의 정상 잔액 방향
        date_from: 기간 시작 (포함)
        date_to: 기간 끝 (포함)

    Returns:
        AccountLedger
    """
    start = _start_bound(date_from)
    end = _end_bound(date_to)
    opening_description = opening_balance_description(account.name)

    relevant = sorted(
        (t for t in transactions if t.touches(account.id)),
        key=lambda t: (t.date, t.created_at),
    )
    opening_tx = next((t for t in relevant if t.description == opening_description), None)

    def change_of(transaction: Transaction) -> tuple[Decimal, Decimal, Decimal]:
        debit, credit = _side_sums(account.id, transaction)
        return debit, credit, normalize(debit - credit, normal_balance)

    opening = change_of(opening_tx)[2] if opening_tx is not None else ZERO
    regular = [t for t in relevant if t is not opening_tx]

    # 기간 시작 이전 거래는 기초 잔액에 합산
    if start is not None:
        opening += sum((change_of(t)[2] for t in regular if t.date < start), ZERO)

    running = opening
    rows: list[LedgerRow] = []
    for transaction in regular:
        if start is not None and transaction.date < start:
            continue
        if end is not None and transaction.date > end:
            continue

        debit, credit, change = change_of(transaction)
        running += change
        entry_description = next(
            (e.description for e in transaction.entries
             if e.account_id == account.id and e.description),
            None,
        )
        rows.append(
            LedgerRow(
                transaction_id=transaction.id,
                date=transaction.date,
                description=entry_description or transaction.description,
                debit=debit,
                credit=credit,
                balance=running,
            )
        )

    return AccountLedger(
        account_id=account.id,
        normal_balance=normal_balance,
        opening_balance=opening,
        rows=rows,
    )


def category_totals(
    category: Category,
    accounts: Iterable[Account],
    transactions: Iterable[Transaction],
) -> Decimal:
    """카테고리 합계 (소속 계정 정규화 잔액의 합)"""
    transactions = list(transactions)
    total = ZERO
    for account in accounts:
        if account.category_id != category.id:
            continue
        total += normalize(account_balance(account.id, transactions), category.normal_balance)
    return total


@dataclass
class TrialTotals:
    """시산 합계"""

    total_debit: Decimal
    total_credit: Decimal

    @property
    def difference(self) -> Decimal:
        return self.total_debit - self.total_credit

    def to_dict(self) -> dict:
        return {
            "total_debit": str(self.total_debit),
            "total_credit": str(self.total_credit),
            "difference": str(self.difference),
        }


def trial_totals(transactions: Iterable[Transaction]) -> TrialTotals:
    """전체 거래의 차변/대변 합계"""
    total_debit = ZERO
    total_credit = ZERO
    for transaction in transactions:
        total_debit += transaction.total_debit
        total_credit += transaction.total_credit
    return TrialTotals(total_debit=total_debit, total_credit=total_credit)


@dataclass
class AccountBalance:
    """계정 + 잔액"""

    account: Account
    raw: Decimal
    balance: Decimal
    side: EntrySide

    def to_dict(self) -> dict:
        return {
            **self.account.to_dict(),
            "raw_balance": str(self.raw),
            "balance": str(self.balance),
            "balance_side": self.side.value,
        }


@dataclass
class CategoryTotal:
    """카테고리 + 합계"""

    category: Category
    total: Decimal
    accounts: list[AccountBalance] = field(default_factory=list)

    @property
    def side(self) -> EntrySide:
        return balance_side(self.total, self.category.normal_balance)

    def to_dict(self) -> dict:
        return {
            **self.category.to_dict(),
            "total": str(self.total),
            "balance_side": self.side.value,
            "accounts": [a.to_dict() for a in self.accounts],
        }


class BalanceQueries:
    """저장소 기반 잔액 조회 (대시보드/계정/카테고리 화면용)

    Args:
        store: Ledger 저장소
    """

    def __init__(self, store: LedgerStore):
        self.store = store

    async def accounts_with_balances(
        self,
        book_id: str,
        include_system: bool = False,
    ) -> list[AccountBalance]:
        """장부 계정별 잔액"""
        categories = {c.id: c for c in await self.store.list_categories(book_id)}
        accounts = await self.store.list_accounts(book_id)
        transactions = await self.store.list_transactions(book_id)
        return [
            self._account_balance(account, categories, transactions)
            for account in accounts
            if include_system or not account.is_system
        ]

    async def categories_with_totals(self, book_id: str) -> list[CategoryTotal]:
        """장부 카테고리별 합계 (소속 계정 잔액 포함)"""
        categories = await self.store.list_categories(book_id)
        by_id = {c.id: c for c in categories}
        accounts = await self.store.list_accounts(book_id)
        transactions = await self.store.list_transactions(book_id)

        result = []
        for category in categories:
            members = [
                self._account_balance(a, by_id, transactions)
                for a in accounts
                if a.category_id == category.id
            ]
            result.append(
                CategoryTotal(
                    category=category,
                    total=sum((m.balance for m in members), ZERO),
                    accounts=members,
                )
            )
        return result

    async def account_ledger(
        self,
        book_id: str,
        account_id: str,
        date_from: date | datetime | None = None,
        date_to: date | datetime | None = None,
    ) -> AccountLedger:
        """계정 원장

        Raises:
            NotFoundError: 계정 없음
        """
        account = await self.store.get_account(book_id, account_id)
        if account is None:
            raise NotFoundError(f"Account not found in this book: {account_id}")
        category = await self.store.get_category(book_id, account.category_id)
        normal = category.normal_balance if category else EntrySide.DEBIT
        transactions = await self.store.list_transactions_for_account(book_id, account_id)
        return account_ledger(account, transactions, normal, date_from, date_to)

    async def trial_totals(self, book_id: str) -> TrialTotals:
        return trial_totals(await self.store.list_transactions(book_id))

    @staticmethod
    def _account_balance(
        account: Account,
        categories: dict[str, Category],
        transactions: list[Transaction],
    ) -> AccountBalance:
        category = categories.get(account.category_id)
        normal = category.normal_balance if category else EntrySide.DEBIT
        raw = account_balance(account.id, transactions)
        balance = normalize(raw, normal)
        return AccountBalance(
            account=account,
            raw=raw,
            balance=balance,
            side=balance_side(balance, normal),
        )
