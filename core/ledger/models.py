"""
Ledger 엔티티 모델

장부(Book), 카테고리, 계정, 거래, 메모, 휴지통 항목 데이터클래스.
금액은 Decimal, 시간은 UTC datetime으로 다룬다.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Union

from core.ledger.errors import ValidationError
from core.ledger.types import (
    BALANCE_TOLERANCE,
    EntrySide,
    Highlight,
    RecycleItemType,
)
from core.utils.timezone import from_db_text, now_utc, to_db_text, to_utc


def to_decimal(value: Any, field_name: str = "amount") -> Decimal:
    """금액 값을 Decimal로 변환

    float는 문자열을 거쳐 변환하여 2진 오차를 피한다.

    Raises:
        ValidationError: 숫자로 해석할 수 없는 경우
    """
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, ValueError) as e:
            raise ValidationError(f"Invalid {field_name}: {value!r}") from e
    if not result.is_finite():
        raise ValidationError(f"Invalid {field_name}: {value!r}")
    return result


def parse_side(value: EntrySide | str, field_name: str = "side") -> EntrySide:
    """차변/대변 방향 파싱

    Raises:
        ValidationError: debit/credit 이외의 값
    """
    try:
        return EntrySide(value)
    except ValueError as e:
        raise ValidationError(f"Invalid {field_name}: {value!r}") from e


@dataclass
class Book:
    """장부"""

    id: str
    name: str
    created_at: datetime = field(default_factory=now_utc)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "created_at": to_db_text(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Book:
        created = data.get("created_at")
        return cls(
            id=data["id"],
            name=data["name"],
            created_at=from_db_text(created) if created else now_utc(),
        )


@dataclass
class Category:
    """카테고리 (계정 그룹)

    normal_balance: 이 카테고리 계정의 정상 잔액 방향
    is_system: 시스템 생성 여부 (Equity)
    """

    id: str
    book_id: str
    name: str
    normal_balance: EntrySide = EntrySide.DEBIT
    is_system: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "book_id": self.book_id,
            "name": self.name,
            "normal_balance": self.normal_balance.value,
            "is_system": self.is_system,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Category:
        return cls(
            id=data["id"],
            book_id=data["book_id"],
            name=data["name"],
            normal_balance=EntrySide(data.get("normal_balance", EntrySide.DEBIT.value)),
            is_system=bool(data.get("is_system", False)),
        )


@dataclass
class Account:
    """계정"""

    id: str
    book_id: str
    category_id: str
    name: str
    opening_balance: Decimal | None = None
    opening_balance_type: EntrySide = EntrySide.DEBIT
    is_system: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "book_id": self.book_id,
            "category_id": self.category_id,
            "name": self.name,
            "opening_balance": (
                str(self.opening_balance) if self.opening_balance is not None else None
            ),
            "opening_balance_type": self.opening_balance_type.value,
            "is_system": self.is_system,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Account:
        opening = data.get("opening_balance")
        return cls(
            id=data["id"],
            book_id=data["book_id"],
            category_id=data["category_id"],
            name=data["name"],
            opening_balance=Decimal(str(opening)) if opening is not None else None,
            opening_balance_type=EntrySide(
                data.get("opening_balance_type") or EntrySide.DEBIT.value
            ),
            is_system=bool(data.get("is_system", False)),
        )


@dataclass
class TransactionEntry:
    """거래 항목 (차변 또는 대변 한 줄)"""

    account_id: str
    amount: Decimal
    type: EntrySide
    description: str | None = None

    def __post_init__(self) -> None:
        self.amount = to_decimal(self.amount)
        self.type = parse_side(self.type, "entry type")

    def to_dict(self) -> dict[str, Any]:
        return {
            "account_id": self.account_id,
            "amount": str(self.amount),
            "type": self.type.value,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TransactionEntry:
        return cls(
            account_id=data["account_id"],
            amount=Decimal(str(data["amount"])),
            type=EntrySide(data["type"]),
            description=data.get("description"),
        )


def entries_totals(entries: list[TransactionEntry]) -> tuple[Decimal, Decimal]:
    """(차변 합계, 대변 합계)"""
    total_debit = sum(
        (e.amount for e in entries if e.type is EntrySide.DEBIT), Decimal("0")
    )
    total_credit = sum(
        (e.amount for e in entries if e.type is EntrySide.CREDIT), Decimal("0")
    )
    return total_debit, total_credit


@dataclass
class TransactionInput:
    """거래 생성/수정 입력 (id, book_id 제외)"""

    date: datetime
    description: str
    entries: list[TransactionEntry]

    def __post_init__(self) -> None:
        self.date = to_utc(self.date)


@dataclass
class Transaction:
    """거래 (복식부기 분개)

    차변 합계 = 대변 합계 (균형)
    """

    id: str
    book_id: str
    date: datetime
    description: str
    entries: list[TransactionEntry]
    highlight: Highlight | None = None
    created_at: datetime = field(default_factory=now_utc)

    def __post_init__(self) -> None:
        self.date = to_utc(self.date)
        if self.highlight is not None:
            self.highlight = Highlight(self.highlight)

    @property
    def total_debit(self) -> Decimal:
        return entries_totals(self.entries)[0]

    @property
    def total_credit(self) -> Decimal:
        return entries_totals(self.entries)[1]

    def is_balanced(self) -> bool:
        """차변/대변 균형 검증 (0.01 이내 오차 허용)"""
        total_debit, total_credit = entries_totals(self.entries)
        return abs(total_debit - total_credit) <= BALANCE_TOLERANCE

    def touches(self, account_id: str) -> bool:
        """해당 계정이 포함된 거래인지"""
        return any(e.account_id == account_id for e in self.entries)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "book_id": self.book_id,
            "date": to_db_text(self.date),
            "description": self.description,
            "entries": [e.to_dict() for e in self.entries],
            "highlight": self.highlight.value if self.highlight else None,
            "created_at": to_db_text(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Transaction:
        created = data.get("created_at")
        return cls(
            id=data["id"],
            book_id=data["book_id"],
            date=from_db_text(data["date"]),
            description=data["description"],
            entries=[TransactionEntry.from_dict(e) for e in data["entries"]],
            highlight=Highlight(data["highlight"]) if data.get("highlight") else None,
            created_at=from_db_text(created) if created else now_utc(),
        )


@dataclass
class Note:
    """장부별 메모 (원장 불변식과 무관)"""

    id: str
    book_id: str
    text: str
    is_completed: bool = False
    created_at: datetime = field(default_factory=now_utc)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "book_id": self.book_id,
            "text": self.text,
            "is_completed": self.is_completed,
            "created_at": to_db_text(self.created_at),
        }


BinEntity = Union[Book, Category, Account, Transaction]

# 휴지통 항목 유형 ↔ 스냅샷 클래스
SNAPSHOT_TYPES: dict[RecycleItemType, type] = {
    RecycleItemType.BOOK: Book,
    RecycleItemType.CATEGORY: Category,
    RecycleItemType.ACCOUNT: Account,
    RecycleItemType.TRANSACTION: Transaction,
}


def parse_item_type(value: str | RecycleItemType) -> RecycleItemType:
    """휴지통 항목 유형 파싱

    Raises:
        ValidationError: 알 수 없는 유형
    """
    try:
        return RecycleItemType(value)
    except ValueError as e:
        raise ValidationError(f"Unknown item type for restore: {value}") from e


def snapshot_from_payload(item_type: str | RecycleItemType, payload: dict[str, Any]) -> BinEntity:
    """저장된 스냅샷 JSON을 유형별 엔티티로 복원"""
    resolved = parse_item_type(item_type)
    return SNAPSHOT_TYPES[resolved].from_dict(payload)


def item_type_of(entity: BinEntity) -> RecycleItemType:
    """엔티티 인스턴스의 휴지통 유형"""
    for item_type, cls in SNAPSHOT_TYPES.items():
        if isinstance(entity, cls):
            return item_type
    raise ValidationError(f"Unsupported recycle bin entity: {type(entity).__name__}")


@dataclass
class RecycleBinItem:
    """휴지통 항목 (유형별 스냅샷을 담는 태그드 유니온)

    item_type과 entity의 실제 타입은 항상 일치해야 한다.
    """

    bin_id: str
    item_type: RecycleItemType
    entity: BinEntity
    deleted_at: datetime

    def __post_init__(self) -> None:
        self.item_type = parse_item_type(self.item_type)
        expected = SNAPSHOT_TYPES[self.item_type]
        if not isinstance(self.entity, expected):
            raise ValidationError(
                f"Recycle bin item type '{self.item_type.value}' "
                f"does not match snapshot {type(self.entity).__name__}"
            )

    @property
    def entity_id(self) -> str:
        return self.entity.id

    @property
    def book_id(self) -> str:
        if isinstance(self.entity, Book):
            return self.entity.id
        return self.entity.book_id

    def to_dict(self) -> dict[str, Any]:
        return {
            "bin_id": self.bin_id,
            "type": self.item_type.value,
            "deleted_at": to_db_text(self.deleted_at),
            **self.entity.to_dict(),
        }
