"""
Web 모델 패키지

Pydantic 스키마 정의
"""

from web.models.requests import (
    AccountCreateRequest,
    AccountUpdateRequest,
    BalanceTransferRequest,
    BookRequest,
    BulkDeleteRequest,
    CategoryCreateRequest,
    CategoryUpdateRequest,
    EntryRequest,
    HighlightRequest,
    NoteCreateRequest,
    NoteUpdateRequest,
    OpeningBalanceTransferRequest,
    TransactionRequest,
)
from web.models.responses import (
    ErrorResponse,
    HealthResponse,
    MessageResponse,
)

__all__ = [
    # Requests
    "BookRequest",
    "CategoryCreateRequest",
    "CategoryUpdateRequest",
    "AccountCreateRequest",
    "AccountUpdateRequest",
    "BulkDeleteRequest",
    "EntryRequest",
    "TransactionRequest",
    "HighlightRequest",
    "NoteCreateRequest",
    "NoteUpdateRequest",
    "OpeningBalanceTransferRequest",
    "BalanceTransferRequest",
    # Responses
    "HealthResponse",
    "MessageResponse",
    "ErrorResponse",
]
