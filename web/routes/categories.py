"""
카테고리 API 라우트

/api/books/{book_id}/categories
"""

from typing import Any

from fastapi import APIRouter, Depends, status

from core.ledger.services import LedgerServices
from web.dependencies import get_book_id, get_services
from web.models.requests import CategoryCreateRequest, CategoryUpdateRequest
from web.models.responses import MessageResponse

router = APIRouter(prefix="/api/books/{book_id}/categories", tags=["Categories"])


@router.get("")
async def list_categories(
    book_id: str = Depends(get_book_id),
    services: LedgerServices = Depends(get_services),
) -> list[dict[str, Any]]:
    """카테고리 목록"""
    return [c.to_dict() for c in await services.categories.list(book_id)]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_category(
    request: CategoryCreateRequest,
    book_id: str = Depends(get_book_id),
    services: LedgerServices = Depends(get_services),
) -> dict[str, Any]:
    """카테고리 생성"""
    category = await services.categories.create(
        book_id, request.name, request.normal_balance
    )
    return category.to_dict()


@router.get("/{category_id}")
async def get_category(
    category_id: str,
    book_id: str = Depends(get_book_id),
    services: LedgerServices = Depends(get_services),
) -> dict[str, Any]:
    """카테고리 조회"""
    return (await services.categories.get(book_id, category_id)).to_dict()


@router.patch("/{category_id}")
async def update_category(
    category_id: str,
    request: CategoryUpdateRequest,
    book_id: str = Depends(get_book_id),
    services: LedgerServices = Depends(get_services),
) -> dict[str, Any]:
    """카테고리 이름 변경"""
    category = await services.categories.rename(
        book_id, category_id, request.name, request.normal_balance
    )
    return category.to_dict()


@router.delete("/{category_id}", response_model=MessageResponse)
async def delete_category(
    category_id: str,
    book_id: str = Depends(get_book_id),
    services: LedgerServices = Depends(get_services),
) -> MessageResponse:
    """카테고리 삭제 (사용 중이거나 시스템 카테고리면 실패)"""
    await services.categories.delete(book_id, category_id)
    return MessageResponse(message="Category moved to recycle bin")
