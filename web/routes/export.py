"""
데이터 내보내기 API

GET /api/export - 전체 데이터 (JSON)
"""

from typing import Any

from fastapi import APIRouter, Depends

from core.ledger.services import LedgerServices
from web.dependencies import get_services

router = APIRouter(prefix="/api/export", tags=["Export"])


@router.get("")
async def export_all(
    services: LedgerServices = Depends(get_services),
) -> dict[str, Any]:
    """전체 데이터 내보내기"""
    return await services.export_all()
