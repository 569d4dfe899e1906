"""
요청 스키마 (Pydantic)

Web API 요청 데이터 검증
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from core.ledger.accounts import AccountInput, AccountUpdate
from core.ledger.models import TransactionEntry, TransactionInput
from core.ledger.types import EntrySide, Highlight


class BookRequest(BaseModel):
    """장부 생성/이름 변경 요청"""

    name: str = Field(..., description="장부 이름 (대소문자 무시 유일)")


class CategoryCreateRequest(BaseModel):
    """카테고리 생성 요청"""

    name: str = Field(..., description="카테고리 이름")
    normal_balance: EntrySide = Field(default=EntrySide.DEBIT, description="정상 잔액 방향")


class CategoryUpdateRequest(BaseModel):
    """카테고리 수정 요청"""

    name: str = Field(..., description="새 이름")
    normal_balance: EntrySide | None = Field(default=None, description="정상 잔액 방향 (선택)")


class AccountCreateRequest(BaseModel):
    """계정 생성 요청"""

    name: str = Field(..., description="계정 이름")
    category_id: str = Field(..., description="카테고리 ID")
    opening_balance: Decimal | None = Field(default=None, description="기초 잔액")
    opening_balance_type: EntrySide = Field(default=EntrySide.DEBIT, description="기초 잔액 방향")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Bank",
                    "category_id": "cat_cash_default",
                    "opening_balance": "1000",
                    "opening_balance_type": "debit",
                },
            ]
        }
    }

    def to_input(self) -> AccountInput:
        return AccountInput(
            name=self.name,
            category_id=self.category_id,
            opening_balance=self.opening_balance,
            opening_balance_type=self.opening_balance_type,
        )


class AccountUpdateRequest(BaseModel):
    """계정 수정 요청 (생략한 필드는 유지, opening_balance=0 은 기초 잔액 제거)"""

    name: str | None = None
    category_id: str | None = None
    opening_balance: Decimal | None = None
    opening_balance_type: EntrySide | None = None

    def to_update(self) -> AccountUpdate:
        return AccountUpdate(
            name=self.name,
            category_id=self.category_id,
            opening_balance=self.opening_balance,
            opening_balance_type=self.opening_balance_type,
        )


class BulkDeleteRequest(BaseModel):
    """일괄 삭제 요청"""

    ids: list[str] = Field(..., min_length=1, description="삭제할 ID 목록")


class EntryRequest(BaseModel):
    """거래 항목"""

    account_id: str
    amount: Decimal
    type: EntrySide
    description: str | None = None


class TransactionRequest(BaseModel):
    """거래 생성/수정 요청"""

    date: datetime = Field(..., description="거래 일시 (timezone 없으면 UTC)")
    description: str = Field(..., description="설명")
    entries: list[EntryRequest] = Field(..., description="분개 항목 (2개 이상)")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "date": "2026-01-05T09:00:00Z",
                    "description": "Office rent",
                    "entries": [
                        {"account_id": "acc_rent", "amount": "500", "type": "debit"},
                        {"account_id": "acc_bank", "amount": "500", "type": "credit"},
                    ],
                },
            ]
        }
    }

    def to_input(self) -> TransactionInput:
        return TransactionInput(
            date=self.date,
            description=self.description,
            entries=[
                TransactionEntry(
                    account_id=e.account_id,
                    amount=e.amount,
                    type=e.type,
                    description=e.description,
                )
                for e in self.entries
            ],
        )


class HighlightRequest(BaseModel):
    """강조 표시 요청 (null이면 해제)"""

    highlight: Highlight | None = None


class NoteCreateRequest(BaseModel):
    """메모 추가 요청"""

    text: str


class NoteUpdateRequest(BaseModel):
    """메모 수정 요청"""

    text: str | None = None
    is_completed: bool | None = None


class OpeningBalanceTransferRequest(BaseModel):
    """기초 잔액 이체 요청"""

    source_book_id: str
    target_book_id: str
    account_name: str
    category_id: str = Field(..., description="원 장부 카테고리 ID")
    amount: Decimal
    balance_type: EntrySide


class BalanceTransferRequest(BaseModel):
    """장부 간 잔액 이체 요청"""

    source_book_id: str
    target_book_id: str
    source_account_id: str
    category_id: str | None = Field(default=None, description="원 장부 카테고리 ID")
    amount: Decimal
    balance_type: EntrySide = Field(..., description="원 계정 잔액 방향")
    target_account_id: str | None = Field(default=None, description="대상 계정 ID (선택)")
