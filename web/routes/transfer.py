"""
장부 간 이체 API 라우트

POST /api/transfers/opening-balance - 기초 잔액 이체 (대상 장부에만 기록)
POST /api/transfers/balance         - 잔액 이체 (양쪽 장부 기록)
"""

from typing import Any

from fastapi import APIRouter, Depends, status

from core.ledger.services import LedgerServices
from web.dependencies import get_services
from web.models.requests import BalanceTransferRequest, OpeningBalanceTransferRequest

router = APIRouter(prefix="/api/transfers", tags=["Transfer"])


@router.post("/opening-balance", status_code=status.HTTP_201_CREATED)
async def transfer_opening_balance(
    request: OpeningBalanceTransferRequest,
    services: LedgerServices = Depends(get_services),
) -> dict[str, Any]:
    """기초 잔액 이체"""
    result = await services.transfers.transfer_opening_balance(
        source_book_id=request.source_book_id,
        target_book_id=request.target_book_id,
        account_name=request.account_name,
        category_id=request.category_id,
        amount=request.amount,
        balance_type=request.balance_type,
    )
    return result.to_dict()


@router.post("/balance", status_code=status.HTTP_201_CREATED)
async def transfer_balance(
    request: BalanceTransferRequest,
    services: LedgerServices = Depends(get_services),
) -> dict[str, Any]:
    """장부 간 잔액 이체"""
    result = await services.transfers.transfer_balance_between_books(
        source_book_id=request.source_book_id,
        target_book_id=request.target_book_id,
        source_account_id=request.source_account_id,
        category_id=request.category_id,
        amount=request.amount,
        balance_type=request.balance_type,
        target_account_id=request.target_account_id,
    )
    return result.to_dict()
