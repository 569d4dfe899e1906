"""
원장/잔액 API 라우트

GET /api/books/{book_id}/ledger/accounts/{account_id} - 계정 원장 (누적 잔액)
GET /api/books/{book_id}/ledger/balances             - 계정별 잔액
GET /api/books/{book_id}/ledger/categories           - 카테고리별 합계
GET /api/books/{book_id}/ledger/totals               - 차변/대변 합계
"""

from datetime import date
from typing import Any

from fastapi import APIRouter, Depends, Query

from core.ledger.services import LedgerServices
from web.dependencies import get_book_id, get_services

router = APIRouter(prefix="/api/books/{book_id}/ledger", tags=["Ledger"])


@router.get("/accounts/{account_id}")
async def get_account_ledger(
    account_id: str,
    date_from: date | None = Query(default=None, description="시작일 (포함)"),
    date_to: date | None = Query(default=None, description="종료일 (포함)"),
    book_id: str = Depends(get_book_id),
    services: LedgerServices = Depends(get_services),
) -> dict[str, Any]:
    """계정 원장

    기초 잔액 거래와 시작일 이전 거래는 opening_balance에 합산.
    """
    account = await services.accounts.get(book_id, account_id)
    ledger = await services.balances.account_ledger(book_id, account_id, date_from, date_to)
    return {
        "account": account.to_dict(),
        "normal_balance": ledger.normal_balance.value,
        "opening_balance": str(ledger.opening_balance),
        "closing_balance": str(ledger.closing_balance),
        "closing_side": ledger.closing_side.label,
        "rows": [row.to_dict() for row in ledger.rows],
    }


@router.get("/balances")
async def get_balances(
    include_system: bool = Query(default=False),
    book_id: str = Depends(get_book_id),
    services: LedgerServices = Depends(get_services),
) -> list[dict[str, Any]]:
    """계정별 잔액"""
    balances = await services.balances.accounts_with_balances(book_id, include_system)
    return [b.to_dict() for b in balances]


@router.get("/categories")
async def get_category_totals(
    book_id: str = Depends(get_book_id),
    services: LedgerServices = Depends(get_services),
) -> list[dict[str, Any]]:
    """카테고리별 합계"""
    return [c.to_dict() for c in await services.balances.categories_with_totals(book_id)]


@router.get("/totals")
async def get_trial_totals(
    book_id: str = Depends(get_book_id),
    services: LedgerServices = Depends(get_services),
) -> dict[str, str]:
    """장부 전체 차변/대변 합계 및 차이"""
    return (await services.balances.trial_totals(book_id)).to_dict()
