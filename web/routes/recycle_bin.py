"""
휴지통 API 라우트

GET    /api/recycle-bin                  - 목록 (최근 삭제 우선)
POST   /api/recycle-bin/{bin_id}/restore - 복원
DELETE /api/recycle-bin/{bin_id}         - 영구 삭제
"""

from typing import Any

from fastapi import APIRouter, Depends

from core.ledger.services import LedgerServices
from web.dependencies import get_services
from web.models.responses import MessageResponse

router = APIRouter(prefix="/api/recycle-bin", tags=["RecycleBin"])


@router.get("")
async def list_items(
    services: LedgerServices = Depends(get_services),
) -> list[dict[str, Any]]:
    return [item.to_dict() for item in await services.recycle_bin.list()]


@router.post("/{bin_id}/restore")
async def restore_item(
    bin_id: str,
    services: LedgerServices = Depends(get_services),
) -> dict[str, Any]:
    """휴지통 항목 복원"""
    item = await services.recycle_bin.restore(bin_id)
    return item.to_dict()


@router.delete("/{bin_id}", response_model=MessageResponse)
async def purge_item(
    bin_id: str,
    services: LedgerServices = Depends(get_services),
) -> MessageResponse:
    """휴지통 항목 영구 삭제"""
    await services.recycle_bin.purge(bin_id)
    return MessageResponse(message="Item permanently deleted")
