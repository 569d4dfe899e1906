"""
거래 API 라우트

/api/books/{book_id}/transactions
"""

from typing import Any

from fastapi import APIRouter, Depends, Query, status

from core.ledger.services import LedgerServices
from web.dependencies import get_book_id, get_services
from web.models.requests import BulkDeleteRequest, HighlightRequest, TransactionRequest
from web.models.responses import MessageResponse

router = APIRouter(prefix="/api/books/{book_id}/transactions", tags=["Transactions"])


@router.get("")
async def list_transactions(
    account_id: str | None = Query(default=None, description="계정 필터"),
    limit: int | None = Query(default=None, ge=1, le=1000),
    book_id: str = Depends(get_book_id),
    services: LedgerServices = Depends(get_services),
) -> list[dict[str, Any]]:
    """거래 목록 (날짜 내림차순)"""
    if account_id:
        transactions = await services.engine.transactions_for_account(book_id, account_id)
    else:
        transactions = await services.engine.list_transactions(book_id)
    if limit is not None:
        transactions = transactions[:limit]
    return [t.to_dict() for t in transactions]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_transaction(
    request: TransactionRequest,
    book_id: str = Depends(get_book_id),
    services: LedgerServices = Depends(get_services),
) -> dict[str, Any]:
    """거래 생성"""
    transaction = await services.engine.create(book_id, request.to_input())
    return transaction.to_dict()


@router.post("/bulk-delete", response_model=MessageResponse)
async def delete_transactions(
    request: BulkDeleteRequest,
    book_id: str = Depends(get_book_id),
    services: LedgerServices = Depends(get_services),
) -> MessageResponse:
    """거래 일괄 삭제 (하나라도 없으면 전체 실패)"""
    await services.engine.delete_many(book_id, request.ids)
    return MessageResponse(message=f"{len(request.ids)} transactions moved to recycle bin")


@router.get("/{transaction_id}")
async def get_transaction(
    transaction_id: str,
    book_id: str = Depends(get_book_id),
    services: LedgerServices = Depends(get_services),
) -> dict[str, Any]:
    """거래 조회"""
    return (await services.engine.get(book_id, transaction_id)).to_dict()


@router.put("/{transaction_id}")
async def update_transaction(
    transaction_id: str,
    request: TransactionRequest,
    book_id: str = Depends(get_book_id),
    services: LedgerServices = Depends(get_services),
) -> dict[str, Any]:
    """거래 수정 (항목 전체 교체)"""
    transaction = await services.engine.update(book_id, transaction_id, request.to_input())
    return transaction.to_dict()


@router.patch("/{transaction_id}/highlight")
async def set_highlight(
    transaction_id: str,
    request: HighlightRequest,
    book_id: str = Depends(get_book_id),
    services: LedgerServices = Depends(get_services),
) -> dict[str, Any]:
    """강조 표시 설정/해제"""
    transaction = await services.engine.set_highlight(
        book_id, transaction_id, request.highlight
    )
    return transaction.to_dict()


@router.delete("/{transaction_id}", response_model=MessageResponse)
async def delete_transaction(
    transaction_id: str,
    book_id: str = Depends(get_book_id),
    services: LedgerServices = Depends(get_services),
) -> MessageResponse:
    """거래 삭제 (휴지통 이동)"""
    await services.engine.delete(book_id, transaction_id)
    return MessageResponse(message="Transaction moved to recycle bin")
