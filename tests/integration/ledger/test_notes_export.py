"""
메모 저장소 및 전체 내보내기 통합 테스트
"""

import json
from decimal import Decimal

import pytest

from core.constants import APP_NAME
from core.ledger.accounts import AccountInput
from core.ledger.errors import NotFoundError, ValidationError
from core.ledger.models import Book
from core.ledger.services import LedgerServices


class TestNotes:
    """메모 테스트"""

    @pytest.mark.asyncio
    async def test_add_and_list(self, services: LedgerServices, default_book: Book) -> None:
        """최근 생성 우선"""
        first = await services.notes.add(default_book.id, "Check card statement")
        second = await services.notes.add(default_book.id, "  Pay rent  ")

        notes = await services.notes.list(default_book.id)

        assert [n.id for n in notes] == [second.id, first.id]
        assert notes[0].text == "Pay rent"
        assert notes[0].is_completed is False

    @pytest.mark.asyncio
    async def test_notes_are_book_scoped(
        self, services: LedgerServices, default_book: Book
    ) -> None:
        side = await services.books.create("Side")
        await services.notes.add(side.id, "Side note")

        assert await services.notes.list(default_book.id) == []
        with pytest.raises(NotFoundError):
            await services.notes.get(default_book.id, (await services.notes.list(side.id))[0].id)

    @pytest.mark.asyncio
    async def test_update(self, services: LedgerServices, default_book: Book) -> None:
        note = await services.notes.add(default_book.id, "Pay rent")

        await services.notes.update(default_book.id, note.id, is_completed=True)
        loaded = await services.notes.get(default_book.id, note.id)

        assert loaded.is_completed is True
        assert loaded.text == "Pay rent"

    @pytest.mark.asyncio
    async def test_empty_text(self, services: LedgerServices, default_book: Book) -> None:
        with pytest.raises(ValidationError):
            await services.notes.add(default_book.id, "   ")

    @pytest.mark.asyncio
    async def test_missing_book(self, services: LedgerServices) -> None:
        with pytest.raises(NotFoundError):
            await services.notes.add("book_missing", "text")

    @pytest.mark.asyncio
    async def test_delete(self, services: LedgerServices, default_book: Book) -> None:
        note = await services.notes.add(default_book.id, "Pay rent")

        await services.notes.delete(default_book.id, note.id)

        assert await services.notes.list(default_book.id) == []
        with pytest.raises(NotFoundError):
            await services.notes.delete(default_book.id, note.id)


class TestExport:
    """전체 데이터 내보내기 테스트"""

    @pytest.mark.asyncio
    async def test_export_contains_all_sections(
        self, services: LedgerServices, default_book: Book
    ) -> None:
        await services.accounts.create(
            default_book.id,
            AccountInput(name="Bank", category_id="cat_cash_default", opening_balance=Decimal("5")),
        )
        await services.notes.add(default_book.id, "memo")
        await services.categories.delete(default_book.id, "cat_expense_default")

        data = await services.export_all()

        assert data["app"] == APP_NAME
        assert [b["id"] for b in data["books"]] == [default_book.id]
        assert {a["name"] for a in data["accounts"]} == {"Bank", "Opening Balance Equity"}
        assert len(data["transactions"]) == 1
        assert data["transactions"][0]["entries"][0]["amount"] == "5"
        assert [n["text"] for n in data["notes"]] == ["memo"]
        assert [i["type"] for i in data["recycle_bin"]] == ["category"]

        # JSON 직렬화 가능
        json.dumps(data)
