"""
장부 API 라우트

GET    /api/books            - 장부 목록 (비어 있으면 기본 장부 생성)
POST   /api/books            - 장부 생성
GET    /api/books/{book_id}  - 장부 조회
PATCH  /api/books/{book_id}  - 이름 변경
DELETE /api/books/{book_id}  - 장부 삭제 (소속 데이터와 함께 휴지통 이동)
"""

from typing import Any

from fastapi import APIRouter, Depends, status

from core.ledger.services import LedgerServices
from web.dependencies import get_services
from web.models.requests import BookRequest
from web.models.responses import MessageResponse

router = APIRouter(prefix="/api/books", tags=["Books"])


@router.get("")
async def list_books(
    services: LedgerServices = Depends(get_services),
) -> list[dict[str, Any]]:
    """장부 목록"""
    return [b.to_dict() for b in await services.books.list()]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_book(
    request: BookRequest,
    services: LedgerServices = Depends(get_services),
) -> dict[str, Any]:
    """장부 생성 (Equity 카테고리 + Opening Balance Equity 계정 포함)"""
    book = await services.books.create(request.name)
    return book.to_dict()


@router.get("/{book_id}")
async def get_book(
    book_id: str,
    services: LedgerServices = Depends(get_services),
) -> dict[str, Any]:
    """장부 조회"""
    return (await services.books.get(book_id)).to_dict()


@router.patch("/{book_id}")
async def rename_book(
    book_id: str,
    request: BookRequest,
    services: LedgerServices = Depends(get_services),
) -> dict[str, Any]:
    """장부 이름 변경"""
    book = await services.books.rename(book_id, request.name)
    return book.to_dict()


@router.delete("/{book_id}", response_model=MessageResponse)
async def delete_book(
    book_id: str,
    services: LedgerServices = Depends(get_services),
) -> MessageResponse:
    """장부 삭제 (기본 장부는 삭제 불가)"""
    items = await services.books.delete(book_id)
    return MessageResponse(message=f"Book moved to recycle bin ({len(items)} items)")
