"""
메모 API 라우트

/api/books/{book_id}/notes
"""

from typing import Any

from fastapi import APIRouter, Depends, status

from core.ledger.services import LedgerServices
from web.dependencies import get_book_id, get_services
from web.models.requests import NoteCreateRequest, NoteUpdateRequest
from web.models.responses import MessageResponse

router = APIRouter(prefix="/api/books/{book_id}/notes", tags=["Notes"])


@router.get("")
async def list_notes(
    book_id: str = Depends(get_book_id),
    services: LedgerServices = Depends(get_services),
) -> list[dict[str, Any]]:
    """메모 목록 (최근 우선)"""
    return [n.to_dict() for n in await services.notes.list(book_id)]


@router.post("", status_code=status.HTTP_201_CREATED)
async def add_note(
    request: NoteCreateRequest,
    book_id: str = Depends(get_book_id),
    services: LedgerServices = Depends(get_services),
) -> dict[str, Any]:
    note = await services.notes.add(book_id, request.text)
    return note.to_dict()


@router.patch("/{note_id}")
async def update_note(
    note_id: str,
    request: NoteUpdateRequest,
    book_id: str = Depends(get_book_id),
    services: LedgerServices = Depends(get_services),
) -> dict[str, Any]:
    note = await services.notes.update(
        book_id, note_id, text=request.text, is_completed=request.is_completed
    )
    return note.to_dict()


@router.delete("/{note_id}", response_model=MessageResponse)
async def delete_note(
    note_id: str,
    book_id: str = Depends(get_book_id),
    services: LedgerServices = Depends(get_services),
) -> MessageResponse:
    """메모 삭제 (영구)"""
    await services.notes.delete(book_id, note_id)
    return MessageResponse(message="Note deleted")
