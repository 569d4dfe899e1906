"""
복식부기 타입 정의

EntrySide 등 Ledger 시스템에서 사용하는 Enum 및 시스템 엔티티 규칙 정의
"""

from decimal import Decimal
from enum import Enum
from uuid import uuid4


class EntrySide(str, Enum):
    """분개 방향 (차변/대변)

    str을 상속하여 JSON 직렬화 가능.
    """

    DEBIT = "debit"  # 차변 (자산 증가, 비용 증가)
    CREDIT = "credit"  # 대변 (자산 감소, 수익/부채/자본 증가)

    @property
    def inverse(self) -> "EntrySide":
        """반대 방향"""
        return EntrySide.CREDIT if self is EntrySide.DEBIT else EntrySide.DEBIT

    @property
    def label(self) -> str:
        """화면 표시용 약어 (Dr/Cr)"""
        return "Dr" if self is EntrySide.DEBIT else "Cr"


class Highlight(str, Enum):
    """거래 강조 표시"""

    YELLOW = "yellow"
    BLUE = "blue"
    STRIKETHROUGH = "strikethrough"


class RecycleItemType(str, Enum):
    """휴지통 항목 유형"""

    BOOK = "book"
    CATEGORY = "category"
    ACCOUNT = "account"
    TRANSACTION = "transaction"


# 차변/대변 합계 허용 오차
BALANCE_TOLERANCE = Decimal("0.01")

# 기본 장부 (삭제 불가)
DEFAULT_BOOK_ID = "book_default"

# 시스템 카테고리/계정
EQUITY_CATEGORY_NAME = "Equity"
OPENING_BALANCE_EQUITY_NAME = "Opening Balance Equity"
OPENING_BALANCE_PREFIX = "Opening Balance for "

# 기본 장부 최초 생성 시 함께 만드는 카테고리
# (category_id, name, normal_balance)
DEFAULT_BOOK_CATEGORIES: list[tuple[str, str, EntrySide]] = [
    ("cat_cash_default", "Cash", EntrySide.DEBIT),
    ("cat_capital_default", "Capital", EntrySide.CREDIT),
    ("cat_party_default", "Parties", EntrySide.DEBIT),
    ("cat_expense_default", "Expenses", EntrySide.DEBIT),
]


def equity_category_id(book_id: str) -> str:
    """장부별 Equity 카테고리 ID"""
    return f"cat_equity_{book_id}"


def opening_balance_equity_id(book_id: str) -> str:
    """장부별 Opening Balance Equity 계정 ID"""
    return f"acc_opening_balance_equity_{book_id}"


def opening_balance_description(account_name: str) -> str:
    """기초 잔액 거래 설명 (계정 이름으로 기초 잔액 거래를 식별)"""
    return f"{OPENING_BALANCE_PREFIX}{account_name}"


def new_id(prefix: str) -> str:
    """접두어 + UUID 형식의 새 엔티티 ID (예: txn_3f2a...)"""
    return f"{prefix}_{uuid4().hex}"
