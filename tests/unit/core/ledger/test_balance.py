"""잔액 계산 테스트"""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from core.ledger.balance import (
    account_balance,
    account_ledger,
    balance_side,
    category_totals,
    normalize,
    trial_totals,
)
from core.ledger.models import Account, Category, Transaction, TransactionEntry
from core.ledger.types import EntrySide

BOOK = "book_default"
BASE = datetime(2026, 1, 1, tzinfo=timezone.utc)


def _tx(
    tx_id: str,
    day: int,
    description: str,
    *entries: tuple[str, str, EntrySide],
) -> Transaction:
    return Transaction(
        id=tx_id,
        book_id=BOOK,
        date=BASE + timedelta(days=day),
        description=description,
        entries=[
            TransactionEntry(account_id=account_id, amount=Decimal(amount), type=side)
            for account_id, amount, side in entries
        ],
        created_at=BASE + timedelta(days=day),
    )


DR = EntrySide.DEBIT
CR = EntrySide.CREDIT


class TestAccountBalance:
    """원시 잔액 테스트"""

    def test_debit_minus_credit(self) -> None:
        txs = [
            _tx("t1", 0, "Salary", ("bank", "1000", DR), ("income", "1000", CR)),
            _tx("t2", 1, "Rent", ("rent", "300", DR), ("bank", "300", CR)),
        ]

        assert account_balance("bank", txs) == Decimal("700")
        assert account_balance("income", txs) == Decimal("-1000")

    def test_untouched_account_is_zero(self) -> None:
        txs = [_tx("t1", 0, "x", ("a", "5", DR), ("b", "5", CR))]
        assert account_balance("z", txs) == Decimal("0")


class TestNormalize:
    """정상 잔액 방향 정규화 테스트"""

    def test_debit_normal_keeps_sign(self) -> None:
        assert normalize(Decimal("50"), DR) == Decimal("50")

    def test_credit_normal_flips_sign(self) -> None:
        assert normalize(Decimal("-50"), CR) == Decimal("50")

    def test_balance_side(self) -> None:
        """음수 정규화 잔액은 반대 방향으로 표시"""
        assert balance_side(Decimal("10"), DR) is DR
        assert balance_side(Decimal("0"), CR) is CR
        assert balance_side(Decimal("-10"), DR) is CR


class TestAccountLedger:
    """계정 원장 테스트"""

    def _account(self) -> Account:
        return Account(id="bank", book_id=BOOK, category_id="cat_cash", name="Bank")

    def _transactions(self) -> list[Transaction]:
        return [
            _tx("t3", 10, "Groceries", ("food", "50", DR), ("bank", "50", CR)),
            _tx(
                "ob", 0, "Opening Balance for Bank",
                ("bank", "500", DR), ("obe", "500", CR),
            ),
            _tx("t1", 2, "Salary", ("bank", "1000", DR), ("income", "1000", CR)),
            _tx("t2", 5, "Rent", ("rent", "300", DR), ("bank", "300", CR)),
            _tx("other", 3, "Unrelated", ("food", "5", DR), ("cash", "5", CR)),
        ]

    def test_opening_transaction_becomes_starting_balance(self) -> None:
        """기초 잔액 거래는 행이 아닌 시작 잔액"""
        ledger = account_ledger(self._account(), self._transactions(), DR)

        assert ledger.opening_balance == Decimal("500")
        assert [r.transaction_id for r in ledger.rows] == ["t1", "t2", "t3"]
        assert [r.balance for r in ledger.rows] == [
            Decimal("1500"),
            Decimal("1200"),
            Decimal("1150"),
        ]
        assert ledger.closing_balance == Decimal("1150")
        assert ledger.closing_side is DR

    def test_row_debit_credit_columns(self) -> None:
        ledger = account_ledger(self._account(), self._transactions(), DR)
        rent = ledger.rows[1]

        assert rent.debit == Decimal("0")
        assert rent.credit == Decimal("300")
        assert rent.description == "Rent"

    def test_date_from_folds_earlier_rows_into_opening(self) -> None:
        """기간 시작 이전 거래는 기초 잔액에 합산"""
        ledger = account_ledger(
            self._account(),
            self._transactions(),
            DR,
            date_from=date(2026, 1, 4),
        )

        assert ledger.opening_balance == Decimal("1500")
        assert [r.transaction_id for r in ledger.rows] == ["t2", "t3"]
        assert ledger.closing_balance == Decimal("1150")

    def test_date_to_includes_whole_day(self) -> None:
        """날짜만 주어진 끝 경계는 해당 일자 전체 포함"""
        ledger = account_ledger(
            self._account(),
            self._transactions(),
            DR,
            date_to=date(2026, 1, 6),
        )

        assert [r.transaction_id for r in ledger.rows] == ["t1", "t2"]
        assert ledger.closing_balance == Decimal("1200")

    def test_entry_description_preferred(self) -> None:
        """계정 항목 설명이 있으면 거래 설명 대신 사용"""
        tx = Transaction(
            id="t1",
            book_id=BOOK,
            date=BASE,
            description="Split",
            entries=[
                TransactionEntry(
                    account_id="bank", amount=Decimal("10"), type=DR, description="ATM"
                ),
                TransactionEntry(account_id="x", amount=Decimal("10"), type=CR),
            ],
        )

        ledger = account_ledger(self._account(), [tx], DR)

        assert ledger.rows[0].description == "ATM"

    def test_credit_normal_account(self) -> None:
        """대변 정상 계정은 대변 증가가 양수"""
        account = Account(id="loan", book_id=BOOK, category_id="cat_capital", name="Loan")
        txs = [_tx("t1", 0, "Borrow", ("bank", "200", DR), ("loan", "200", CR))]

        ledger = account_ledger(account, txs, CR)

        assert ledger.closing_balance == Decimal("200")
        assert ledger.closing_side is CR

    def test_empty(self) -> None:
        ledger = account_ledger(self._account(), [], DR)

        assert ledger.rows == []
        assert ledger.closing_balance == Decimal("0")


class TestCategoryTotals:
    """카테고리 합계 테스트"""

    def test_sum_of_member_balances(self) -> None:
        cash = Category(id="cat_cash", book_id=BOOK, name="Cash")
        accounts = [
            Account(id="bank", book_id=BOOK, category_id="cat_cash", name="Bank"),
            Account(id="wallet", book_id=BOOK, category_id="cat_cash", name="Wallet"),
            Account(id="rent", book_id=BOOK, category_id="cat_expense", name="Rent"),
        ]
        txs = [
            _tx("t1", 0, "a", ("bank", "100", DR), ("capital", "100", CR)),
            _tx("t2", 1, "b", ("wallet", "40", DR), ("bank", "40", CR)),
            _tx("t3", 2, "c", ("rent", "30", DR), ("wallet", "30", CR)),
        ]

        assert category_totals(cash, accounts, txs) == Decimal("70")


class TestTrialTotals:
    """시산 합계 테스트"""

    def test_balanced_book_has_zero_difference(self) -> None:
        txs = [
            _tx("t1", 0, "a", ("bank", "100", DR), ("capital", "100", CR)),
            _tx("t2", 1, "b", ("rent", "30.50", DR), ("bank", "30.50", CR)),
        ]

        totals = trial_totals(txs)

        assert totals.total_debit == Decimal("130.50")
        assert totals.total_credit == Decimal("130.50")
        assert totals.difference == Decimal("0")
        assert totals.to_dict()["difference"] == "0.00"
