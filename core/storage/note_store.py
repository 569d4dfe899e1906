"""
NoteStore - 장부별 메모 저장소

note 테이블을 통해 장부별 메모 관리.
메모는 원장 불변식과 무관하며 삭제 시 휴지통을 거치지 않는다.
"""

from __future__ import annotations

import logging
from typing import Any

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.ledger.errors import NotFoundError, ValidationError
from core.ledger.models import Note
from core.ledger.types import new_id
from core.utils.timezone import from_db_text, now_utc, to_db_text

logger = logging.getLogger(__name__)


def _note_from_row(row: tuple[Any, ...]) -> Note:
    return Note(
        id=row[0],
        book_id=row[1],
        text=row[2],
        is_completed=bool(row[3]),
        created_at=from_db_text(row[4]),
    )


def _clean_text(text: str | None) -> str:
    cleaned = (text or "").strip()
    if not cleaned:
        raise ValidationError("Note text is required")
    return cleaned


class NoteStore:
    """메모 저장소

    사용 예시:
    ```python
    notes = NoteStore(db)
    note = await notes.add("book_default", "카드 명세서 확인")
    await notes.update("book_default", note.id, is_completed=True)
    ```
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    async def list(self, book_id: str) -> list[Note]:
        """장부 메모 목록 (최근 생성 우선)"""
        rows = await self.db.fetchall(
            """
            SELECT note_id, book_id, text, is_completed, created_at
            FROM note
            WHERE book_id = ?
            ORDER BY created_at DESC, rowid DESC
            """,
            (book_id,),
        )
        return [_note_from_row(row) for row in rows]

    async def get(self, book_id: str, note_id: str) -> Note:
        """메모 조회

        Raises:
            NotFoundError: 메모 없음
        """
        row = await self.db.fetchone(
            """
            SELECT note_id, book_id, text, is_completed, created_at
            FROM note
            WHERE note_id = ? AND book_id = ?
            """,
            (note_id, book_id),
        )
        if row is None:
            raise NotFoundError(f"Note not found: {note_id}")
        return _note_from_row(row)

    async def add(self, book_id: str, text: str) -> Note:
        """메모 추가

        Raises:
            ValidationError: 빈 내용
            NotFoundError: 장부 없음
        """
        text = _clean_text(text)
        if await self.db.fetchone("SELECT 1 FROM book WHERE book_id = ?", (book_id,)) is None:
            raise NotFoundError(f"Book not found: {book_id}")

        note = Note(
            id=new_id("note"),
            book_id=book_id,
            text=text,
            created_at=now_utc(),
        )
        async with self.db.transaction():
            await self.db.execute(
                """
                INSERT INTO note (note_id, book_id, text, is_completed, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (note.id, note.book_id, note.text, 0, to_db_text(note.created_at)),
            )

        logger.debug(f"Note added: {note.id}")
        return note

    async def update(
        self,
        book_id: str,
        note_id: str,
        text: str | None = None,
        is_completed: bool | None = None,
    ) -> Note:
        """메모 수정 (None인 필드는 유지)

        Raises:
            NotFoundError: 메모 없음
            ValidationError: 빈 내용
        """
        note = await self.get(book_id, note_id)
        if text is not None:
            note.text = _clean_text(text)
        if is_completed is not None:
            note.is_completed = is_completed

        async with self.db.transaction():
            await self.db.execute(
                """
                UPDATE note SET text = ?, is_completed = ?
                WHERE note_id = ? AND book_id = ?
                """,
                (note.text, int(note.is_completed), note_id, book_id),
            )
        return note

    async def delete(self, book_id: str, note_id: str) -> None:
        """메모 삭제 (영구 삭제)

        Raises:
            NotFoundError: 메모 없음
        """
        async with self.db.transaction():
            cursor = await self.db.execute(
                "DELETE FROM note WHERE note_id = ? AND book_id = ?",
                (note_id, book_id),
            )
        if cursor.rowcount == 0:
            raise NotFoundError(f"Note not found: {note_id}")
        logger.debug(f"Note deleted: {note_id}")

    async def list_all(self) -> list[Note]:
        """전체 메모 (내보내기용)"""
        rows = await self.db.fetchall(
            """
            SELECT note_id, book_id, text, is_completed, created_at
            FROM note
            ORDER BY created_at DESC, rowid DESC
            """
        )
        return [_note_from_row(row) for row in rows]
