"""
거래 엔진

복식부기 거래 생성/수정/삭제 및 검증.
모든 검증은 쓰기 전에 수행되며 실패 시 아무것도 저장되지 않는다.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from core.ledger.errors import NotFoundError, ValidationError
from core.ledger.models import Transaction, TransactionInput, entries_totals
from core.ledger.types import BALANCE_TOLERANCE, Highlight, new_id

if TYPE_CHECKING:
    from core.ledger.recycle_bin import RecycleBin
    from core.ledger.store import LedgerStore

logger = logging.getLogger(__name__)


class LedgerEngine:
    """거래 엔진

    Args:
        store: Ledger 저장소
        recycle_bin: 삭제 거래를 보관할 휴지통
    """

    def __init__(self, store: LedgerStore, recycle_bin: RecycleBin):
        self.store = store
        self.recycle_bin = recycle_bin

    async def list_transactions(self, book_id: str) -> list[Transaction]:
        """장부 거래 목록 (날짜 내림차순, 동일 날짜는 최근 생성 우선)"""
        return await self.store.list_transactions(book_id)

    async def transactions_for_account(
        self,
        book_id: str,
        account_id: str,
    ) -> list[Transaction]:
        """특정 계정이 포함된 거래 목록"""
        return await self.store.list_transactions_for_account(book_id, account_id)

    async def get(self, book_id: str, transaction_id: str) -> Transaction:
        """거래 조회

        Raises:
            NotFoundError: 거래 없음
        """
        transaction = await self.store.get_transaction(book_id, transaction_id)
        if transaction is None:
            raise NotFoundError(f"Transaction not found: {transaction_id}")
        return transaction

    async def validate(self, book_id: str, data: TransactionInput) -> None:
        """거래 입력 검증

        - 설명 필수
        - 항목 2개 이상
        - 모든 금액 > 0
        - 차변 합계 = 대변 합계 (0.01 이내)
        - 항목 계정이 해당 장부에 존재

        Raises:
            ValidationError: 검증 실패
        """
        if not data.description or not data.description.strip():
            raise ValidationError("Transaction description is required")

        if len(data.entries) < 2:
            raise ValidationError("A transaction must have at least two entries")

        for entry in data.entries:
            if entry.amount <= 0:
                raise ValidationError(
                    f"Entry amount must be positive: {entry.amount} ({entry.account_id})"
                )

        total_debit, total_credit = entries_totals(data.entries)
        if abs(total_debit - total_credit) > BALANCE_TOLERANCE:
            raise ValidationError(
                f"Transaction is not balanced: debit={total_debit}, credit={total_credit}"
            )

        for account_id in dict.fromkeys(e.account_id for e in data.entries):
            if await self.store.get_account(book_id, account_id) is None:
                raise ValidationError(f"Account not found in book: {account_id}")

    async def create(self, book_id: str, data: TransactionInput) -> Transaction:
        """거래 생성

        Raises:
            ValidationError: 검증 실패
        """
        await self.validate(book_id, data)

        transaction = Transaction(
            id=new_id("txn"),
            book_id=book_id,
            date=data.date,
            description=data.description,
            entries=list(data.entries),
        )
        await self.store.insert_transaction(transaction)

        logger.info(
            "거래 생성",
            extra={
                "book_id": book_id,
                "transaction_id": transaction.id,
                "amount": str(transaction.total_debit),
            },
        )
        return transaction

    async def update(
        self,
        book_id: str,
        transaction_id: str,
        data: TransactionInput,
    ) -> Transaction:
        """거래 수정 (항목 전체 교체, 강조 표시는 유지)

        Raises:
            NotFoundError: 거래 없음
            ValidationError: 검증 실패
        """
        existing = await self.get(book_id, transaction_id)
        await self.validate(book_id, data)

        updated = Transaction(
            id=existing.id,
            book_id=book_id,
            date=data.date,
            description=data.description,
            entries=list(data.entries),
            highlight=existing.highlight,
            created_at=existing.created_at,
        )
        await self.store.replace_transaction(updated)

        logger.info(
            "거래 수정",
            extra={"book_id": book_id, "transaction_id": transaction_id},
        )
        return updated

    async def set_highlight(
        self,
        book_id: str,
        transaction_id: str,
        highlight: Highlight | str | None,
    ) -> Transaction:
        """강조 표시 설정 (None이면 해제)

        Raises:
            NotFoundError: 거래 없음
            ValidationError: 알 수 없는 색상
        """
        try:
            color = Highlight(highlight) if highlight is not None else None
        except ValueError as e:
            raise ValidationError(f"Unknown highlight: {highlight}") from e

        transaction = await self.get(book_id, transaction_id)
        transaction.highlight = color
        await self.store.set_highlight(book_id, transaction_id, transaction.highlight)
        return transaction

    async def delete(self, book_id: str, transaction_id: str) -> None:
        """거래 삭제 (휴지통 이동)

        Raises:
            NotFoundError: 거래 없음
        """
        await self.delete_many(book_id, [transaction_id])

    async def delete_many(self, book_id: str, transaction_ids: list[str]) -> None:
        """거래 일괄 삭제

        하나라도 없으면 전체 실패 (부분 삭제 없음).

        Raises:
            NotFoundError: 없는 거래 포함
        """
        unique_ids = list(dict.fromkeys(transaction_ids))
        found = await self.store.find_transactions(book_id, unique_ids)
        found_ids = {t.id for t in found}
        missing = [tx_id for tx_id in unique_ids if tx_id not in found_ids]
        if missing:
            raise NotFoundError(f"Transaction not found: {', '.join(missing)}")

        async with self.store.db.transaction():
            await self.recycle_bin.add(found)
            await self.store.delete_transactions(book_id, unique_ids)

        logger.info(
            "거래 삭제",
            extra={"book_id": book_id, "count": len(unique_ids)},
        )
