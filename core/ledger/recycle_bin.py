"""
휴지통 (소프트 삭제)

삭제되는 모든 엔티티는 스냅샷으로 휴지통에 보관된 뒤 원본에서 제거된다.
복원 시 스냅샷을 원래 저장소에 다시 넣고 휴지통 항목을 제거한다.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from core.ledger.errors import ConflictError, NotFoundError, ProtectedEntityError
from core.ledger.models import (
    Account,
    BinEntity,
    Book,
    Category,
    RecycleBinItem,
    Transaction,
    item_type_of,
)
from core.ledger.types import DEFAULT_BOOK_ID, new_id
from core.utils.timezone import now_utc

if TYPE_CHECKING:
    from core.ledger.store import LedgerStore

logger = logging.getLogger(__name__)


class RecycleBin:
    """휴지통

    Args:
        store: Ledger 저장소
    """

    def __init__(self, store: LedgerStore):
        self.store = store

    async def list(self) -> list[RecycleBinItem]:
        """휴지통 목록 (최근 삭제 우선)"""
        return await self.store.list_bin_items()

    async def get(self, bin_id: str) -> RecycleBinItem:
        """휴지통 항목 조회

        Raises:
            NotFoundError: 항목 없음
        """
        item = await self.store.get_bin_item(bin_id)
        if item is None:
            raise NotFoundError(f"Recycle bin item not found: {bin_id}")
        return item

    async def add(self, entities: list[BinEntity]) -> list[RecycleBinItem]:
        """엔티티 스냅샷을 휴지통에 추가 (같은 배치는 같은 deleted_at)

        Args:
            entities: 삭제 직전 엔티티 목록 (목록 순서대로 상단 표시)

        Returns:
            생성된 휴지통 항목 목록
        """
        deleted_at = now_utc()
        items = [
            RecycleBinItem(
                bin_id=new_id("bin"),
                item_type=item_type_of(entity),
                entity=entity,
                deleted_at=deleted_at,
            )
            for entity in entities
        ]
        await self.store.insert_bin_items(items)
        return items

    async def restore(self, bin_id: str) -> RecycleBinItem:
        """휴지통 항목 복원

        Raises:
            NotFoundError: 항목 없음, 또는 소속 장부(계정의 경우 카테고리,
                거래의 경우 계정)가 사라진 경우
            ConflictError: 같은 이름/ID가 이미 존재
            ValidationError: 알 수 없는 항목 유형
        """
        item = await self.get(bin_id)
        entity = item.entity

        async with self.store.db.transaction():
            if isinstance(entity, Book):
                await self._restore_book(entity)
            elif isinstance(entity, Category):
                await self._restore_category(entity)
            elif isinstance(entity, Account):
                await self._restore_account(entity)
            elif isinstance(entity, Transaction):
                await self._restore_transaction(entity)
            await self.store.delete_bin_item(bin_id)

        logger.info(
            "휴지통 항목 복원",
            extra={"bin_id": bin_id, "type": item.item_type.value, "entity_id": item.entity_id},
        )
        return item

    async def purge(self, bin_id: str) -> None:
        """휴지통 항목 영구 삭제

        Raises:
            NotFoundError: 항목 없음
        """
        if not await self.store.delete_bin_item(bin_id):
            raise NotFoundError(f"Recycle bin item not found: {bin_id}")
        logger.info("휴지통 항목 영구 삭제", extra={"bin_id": bin_id})

    async def delete_book(self, book_id: str) -> list[RecycleBinItem]:
        """장부 삭제 (장부 + 거래/계정/카테고리를 한 배치로 휴지통 이동)

        Raises:
            ProtectedEntityError: 기본 장부
            NotFoundError: 장부 없음
        """
        if book_id == DEFAULT_BOOK_ID:
            raise ProtectedEntityError("Cannot delete the default book")

        book = await self.store.get_book(book_id)
        if book is None:
            raise NotFoundError(f"Book not found: {book_id}")

        async with self.store.db.transaction():
            transactions = await self.store.list_transactions(book_id)
            accounts = await self.store.list_accounts(book_id)
            categories = await self.store.list_categories(book_id)

            items = await self.add([book, *transactions, *accounts, *categories])
            await self.store.delete_book_contents(book_id)
            await self.store.delete_book(book_id)

        logger.info(
            "장부 삭제",
            extra={
                "book_id": book_id,
                "transactions": len(transactions),
                "accounts": len(accounts),
                "categories": len(categories),
            },
        )
        return items

    # -------------------------------------------------------------------------
    # 유형별 복원
    # -------------------------------------------------------------------------

    async def _require_book(self, book_id: str) -> None:
        if await self.store.get_book(book_id) is None:
            raise NotFoundError(f"Book not found: {book_id}")

    async def _restore_book(self, book: Book) -> None:
        if await self.store.get_book(book.id) is not None:
            raise ConflictError(f"Book already exists: {book.id}")
        if await self.store.find_book_by_name(book.name) is not None:
            raise ConflictError(f"A book with name '{book.name}' already exists")
        await self.store.insert_book(book)

    async def _restore_category(self, category: Category) -> None:
        await self._require_book(category.book_id)
        if await self.store.get_category(category.book_id, category.id) is not None:
            raise ConflictError(f"Category already exists: {category.id}")
        if await self.store.find_category_by_name(category.book_id, category.name) is not None:
            raise ConflictError(f"A category with name '{category.name}' already exists")
        await self.store.insert_category(category)

    async def _restore_account(self, account: Account) -> None:
        await self._require_book(account.book_id)
        if await self.store.get_category(account.book_id, account.category_id) is None:
            raise NotFoundError(f"Category not found: {account.category_id}")
        if await self.store.get_account(account.book_id, account.id) is not None:
            raise ConflictError(f"Account already exists: {account.id}")
        if await self.store.find_account_by_name(account.book_id, account.name) is not None:
            raise ConflictError(f"An account with name '{account.name}' already exists")
        await self.store.insert_account(account)

    async def _restore_transaction(self, transaction: Transaction) -> None:
        await self._require_book(transaction.book_id)
        if await self.store.get_transaction(transaction.book_id, transaction.id) is not None:
            raise ConflictError(f"Transaction already exists: {transaction.id}")
        for account_id in dict.fromkeys(e.account_id for e in transaction.entries):
            if await self.store.get_account(transaction.book_id, account_id) is None:
                raise NotFoundError(f"Account not found: {account_id}")
        await self.store.insert_transaction(transaction)
