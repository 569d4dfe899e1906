"""기초 잔액 처리 결정 테스트"""

from decimal import Decimal

import pytest

from core.ledger.accounts import (
    OpeningBalanceAction,
    opening_balance_entries,
    plan_opening_balance,
)
from core.ledger.types import EntrySide


class TestPlanOpeningBalance:
    """plan_opening_balance() 결정 테이블"""

    @pytest.mark.parametrize(
        "has_transaction,requested,expected",
        [
            (False, Decimal("100"), OpeningBalanceAction.CREATE),
            (True, Decimal("100"), OpeningBalanceAction.REPLACE),
            (True, Decimal("0"), OpeningBalanceAction.DELETE),
            (False, Decimal("0"), OpeningBalanceAction.NONE),
            (False, None, OpeningBalanceAction.NONE),
            (True, None, OpeningBalanceAction.NONE),
        ],
    )
    def test_amount_decisions(
        self,
        has_transaction: bool,
        requested: Decimal | None,
        expected: OpeningBalanceAction,
    ) -> None:
        assert plan_opening_balance(has_transaction, requested) is expected

    def test_type_change_without_amount_replaces(self) -> None:
        """금액 없이 방향만 바뀌어도 기존 거래 교체"""
        action = plan_opening_balance(True, None, type_changed=True)
        assert action is OpeningBalanceAction.REPLACE

    def test_rename_only_updates_description(self) -> None:
        action = plan_opening_balance(True, None, renamed=True)
        assert action is OpeningBalanceAction.RENAME

    def test_rename_without_transaction(self) -> None:
        action = plan_opening_balance(False, None, renamed=True)
        assert action is OpeningBalanceAction.NONE


class TestOpeningBalanceEntries:
    """기초 잔액 분개 항목 테스트"""

    def test_debit_opening(self) -> None:
        entries = opening_balance_entries("acc_bank", "acc_obe", Decimal("500"), EntrySide.DEBIT)

        assert [(e.account_id, e.type) for e in entries] == [
            ("acc_bank", EntrySide.DEBIT),
            ("acc_obe", EntrySide.CREDIT),
        ]
        assert all(e.amount == Decimal("500") for e in entries)

    def test_credit_opening(self) -> None:
        entries = opening_balance_entries("acc_loan", "acc_obe", Decimal("75"), EntrySide.CREDIT)

        assert entries[0].type is EntrySide.CREDIT
        assert entries[1].type is EntrySide.DEBIT
