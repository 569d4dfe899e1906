"""
카테고리 관리

장부별 계정 그룹. 이름은 장부 내에서 대소문자 무시 유일.
시스템 카테고리(Equity)와 사용 중인 카테고리는 삭제할 수 없다.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from core.ledger.errors import (
    ConflictError,
    InvariantError,
    NotFoundError,
    ProtectedEntityError,
    ValidationError,
)
from core.ledger.models import Category, parse_side
from core.ledger.types import EntrySide, new_id

if TYPE_CHECKING:
    from core.ledger.recycle_bin import RecycleBin
    from core.ledger.store import LedgerStore

logger = logging.getLogger(__name__)


def clean_name(name: str | None, label: str) -> str:
    """이름 공백 제거 후 빈 값 검증

    Raises:
        ValidationError: 빈 이름
    """
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError(f"{label} name is required")
    return cleaned


class CategoryStore:
    """카테고리 관리

    Args:
        store: Ledger 저장소
        recycle_bin: 삭제 카테고리를 보관할 휴지통
    """

    def __init__(self, store: LedgerStore, recycle_bin: RecycleBin):
        self.store = store
        self.recycle_bin = recycle_bin

    async def list(self, book_id: str) -> list[Category]:
        return await self.store.list_categories(book_id)

    async def get(self, book_id: str, category_id: str) -> Category:
        """카테고리 조회

        Raises:
            NotFoundError: 해당 장부에 카테고리 없음
        """
        category = await self.store.get_category(book_id, category_id)
        if category is None:
            raise NotFoundError(f"Category not found in this book: {category_id}")
        return category

    async def create(
        self,
        book_id: str,
        name: str,
        normal_balance: EntrySide | str = EntrySide.DEBIT,
    ) -> Category:
        """카테고리 생성

        Raises:
            ValidationError: 빈 이름
            NotFoundError: 장부 없음
            ConflictError: 이름 중복
        """
        name = clean_name(name, "Category")
        if await self.store.get_book(book_id) is None:
            raise NotFoundError(f"Book not found: {book_id}")
        if await self.store.find_category_by_name(book_id, name) is not None:
            raise ConflictError(f"Category already exists in this book: {name}")

        category = Category(
            id=new_id("cat"),
            book_id=book_id,
            name=name,
            normal_balance=parse_side(normal_balance, "normal balance"),
        )
        await self.store.insert_category(category)

        logger.info(
            "카테고리 생성",
            extra={"book_id": book_id, "category_id": category.id, "category_name": name},
        )
        return category

    async def rename(
        self,
        book_id: str,
        category_id: str,
        name: str,
        normal_balance: EntrySide | str | None = None,
    ) -> Category:
        """카테고리 이름 변경 (정상 잔액 방향 변경 선택)

        Raises:
            ValidationError: 빈 이름
            NotFoundError: 카테고리 없음
            ProtectedEntityError: 시스템 카테고리
            ConflictError: 이름 중복
        """
        name = clean_name(name, "Category")
        category = await self.get(book_id, category_id)
        if category.is_system:
            raise ProtectedEntityError(f"Cannot modify the system-generated {category.name} category")
        if await self.store.find_category_by_name(book_id, name, exclude_id=category_id):
            raise ConflictError(f'A category named "{name}" already exists in this book')

        category.name = name
        if normal_balance is not None:
            category.normal_balance = parse_side(normal_balance, "normal balance")
        await self.store.update_category(category)

        logger.info(
            "카테고리 수정",
            extra={"book_id": book_id, "category_id": category_id, "category_name": name},
        )
        return category

    async def delete(self, book_id: str, category_id: str) -> None:
        """카테고리 삭제 (휴지통 이동)

        Raises:
            NotFoundError: 카테고리 없음
            ProtectedEntityError: 시스템 카테고리
            InvariantError: 계정이 사용 중
        """
        category = await self.get(book_id, category_id)
        if category.is_system:
            raise ProtectedEntityError(f"Cannot delete the system-generated {category.name} category")
        if await self.store.count_accounts_in_category(book_id, category_id) > 0:
            raise InvariantError(
                "Cannot delete category. It is currently assigned to one or more accounts"
            )

        async with self.store.db.transaction():
            await self.recycle_bin.add([category])
            await self.store.delete_category(book_id, category_id)

        logger.info(
            "카테고리 삭제",
            extra={"book_id": book_id, "category_id": category_id},
        )
