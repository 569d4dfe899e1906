"""
장부 관리

장부 생성/이름 변경/삭제.
새 장부에는 시스템 Equity 카테고리와 Opening Balance Equity 계정이 함께 만들어진다.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from core.constants import Defaults
from core.ledger.categories import clean_name
from core.ledger.errors import ConflictError, NotFoundError
from core.ledger.models import Book, Category, RecycleBinItem
from core.ledger.types import DEFAULT_BOOK_CATEGORIES, DEFAULT_BOOK_ID, new_id

if TYPE_CHECKING:
    from core.ledger.accounts import AccountRegistry
    from core.ledger.recycle_bin import RecycleBin
    from core.ledger.store import LedgerStore

logger = logging.getLogger(__name__)


class BookRegistry:
    """장부 관리

    Args:
        store: Ledger 저장소
        accounts: 시스템 계정 생성에 사용할 계정 관리자
        recycle_bin: 장부 삭제 시 연쇄 보관할 휴지통
        default_book_name: 빈 저장소에서 자동 생성할 기본 장부 이름
    """

    def __init__(
        self,
        store: LedgerStore,
        accounts: AccountRegistry,
        recycle_bin: RecycleBin,
        default_book_name: str = Defaults.DEFAULT_BOOK_NAME,
    ):
        self.store = store
        self.accounts = accounts
        self.recycle_bin = recycle_bin
        self.default_book_name = default_book_name

    async def list(self) -> list[Book]:
        """장부 목록 (저장소가 비어 있으면 기본 장부 생성)"""
        books = await self.store.list_books()
        if not books:
            books = [await self._create_default_book()]
        return books

    async def get(self, book_id: str) -> Book:
        """장부 조회

        저장소가 비어 있는 상태에서 기본 장부를 조회하면 먼저 생성한다.

        Raises:
            NotFoundError: 장부 없음
        """
        book = await self.store.get_book(book_id)
        if book is None and book_id == DEFAULT_BOOK_ID:
            await self.list()
            book = await self.store.get_book(book_id)
        if book is None:
            raise NotFoundError(f"Book not found: {book_id}")
        return book

    async def create(self, name: str) -> Book:
        """장부 생성 (Equity 카테고리 + Opening Balance Equity 계정 포함)

        Raises:
            ValidationError: 빈 이름
            ConflictError: 이름 중복 (대소문자 무시)
        """
        name = clean_name(name, "Book")
        if await self.store.find_book_by_name(name) is not None:
            raise ConflictError("A book with this name already exists")

        book = Book(id=new_id("book"), name=name)
        async with self.store.db.transaction():
            await self.store.insert_book(book)
            await self.accounts.ensure_opening_balance_equity(book.id)

        logger.info("장부 생성", extra={"book_id": book.id, "book_name": name})
        return book

    async def rename(self, book_id: str, name: str) -> Book:
        """장부 이름 변경

        Raises:
            ValidationError: 빈 이름
            NotFoundError: 장부 없음
            ConflictError: 이름 중복
        """
        name = clean_name(name, "Book")
        book = await self.get(book_id)
        if await self.store.find_book_by_name(name, exclude_id=book_id) is not None:
            raise ConflictError("A book with this name already exists")

        book.name = name
        await self.store.update_book(book_id, name)

        logger.info("장부 이름 변경", extra={"book_id": book_id, "book_name": name})
        return book

    async def delete(self, book_id: str) -> list[RecycleBinItem]:
        """장부 삭제 (소속 데이터와 함께 휴지통 이동)

        Raises:
            ProtectedEntityError: 기본 장부
            NotFoundError: 장부 없음
        """
        return await self.recycle_bin.delete_book(book_id)

    async def _create_default_book(self) -> Book:
        """기본 장부 생성 (기본 카테고리 + 시스템 계정)"""
        book = Book(id=DEFAULT_BOOK_ID, name=self.default_book_name)
        async with self.store.db.transaction():
            await self.store.insert_book(book)
            for category_id, name, normal_balance in DEFAULT_BOOK_CATEGORIES:
                await self.store.insert_category(
                    Category(
                        id=category_id,
                        book_id=book.id,
                        name=name,
                        normal_balance=normal_balance,
                    )
                )
            await self.accounts.ensure_opening_balance_equity(book.id)

        logger.info("기본 장부 생성", extra={"book_id": book.id, "book_name": book.name})
        return book
