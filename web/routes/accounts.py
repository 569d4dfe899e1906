"""
계정 API 라우트

/api/books/{book_id}/accounts
"""

from typing import Any

from fastapi import APIRouter, Depends, Query, status

from core.ledger.services import LedgerServices
from web.dependencies import get_book_id, get_services
from web.models.requests import (
    AccountCreateRequest,
    AccountUpdateRequest,
    BulkDeleteRequest,
)
from web.models.responses import MessageResponse

router = APIRouter(prefix="/api/books/{book_id}/accounts", tags=["Accounts"])


@router.get("")
async def list_accounts(
    include_system: bool = Query(default=False, description="시스템 계정 포함"),
    book_id: str = Depends(get_book_id),
    services: LedgerServices = Depends(get_services),
) -> list[dict[str, Any]]:
    """계정 목록 (잔액 포함)"""
    balances = await services.balances.accounts_with_balances(book_id, include_system)
    return [b.to_dict() for b in balances]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_account(
    request: AccountCreateRequest,
    book_id: str = Depends(get_book_id),
    services: LedgerServices = Depends(get_services),
) -> dict[str, Any]:
    """계정 생성 (기초 잔액 > 0 이면 기초 잔액 거래 생성)"""
    account = await services.accounts.create(book_id, request.to_input())
    return account.to_dict()


@router.post("/bulk-delete", response_model=MessageResponse)
async def delete_accounts(
    request: BulkDeleteRequest,
    book_id: str = Depends(get_book_id),
    services: LedgerServices = Depends(get_services),
) -> MessageResponse:
    """계정 일괄 삭제"""
    await services.accounts.delete_many(book_id, request.ids)
    return MessageResponse(message=f"{len(request.ids)} accounts moved to recycle bin")


@router.get("/{account_id}")
async def get_account(
    account_id: str,
    book_id: str = Depends(get_book_id),
    services: LedgerServices = Depends(get_services),
) -> dict[str, Any]:
    """계정 조회"""
    return (await services.accounts.get(book_id, account_id)).to_dict()


@router.patch("/{account_id}")
async def update_account(
    account_id: str,
    request: AccountUpdateRequest,
    book_id: str = Depends(get_book_id),
    services: LedgerServices = Depends(get_services),
) -> dict[str, Any]:
    """계정 수정 (기초 잔액 거래 동기화)"""
    account = await services.accounts.update(book_id, account_id, request.to_update())
    return account.to_dict()


@router.delete("/{account_id}", response_model=MessageResponse)
async def delete_account(
    account_id: str,
    book_id: str = Depends(get_book_id),
    services: LedgerServices = Depends(get_services),
) -> MessageResponse:
    """계정 삭제 (기초 잔액 거래만 있는 경우)"""
    await services.accounts.delete(book_id, account_id)
    return MessageResponse(message="Account moved to recycle bin")
