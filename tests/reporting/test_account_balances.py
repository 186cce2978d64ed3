"""
Tests for the balance calculator (bursar_modules/reporting/balances.py).

Covers natural-side normalization, abnormal balances, the as-of cut-off,
and the warnings produced for unknown accounts and undated entries.
"""

from datetime import date
from decimal import Decimal

import pytest

from bursar_kernel.domain.values import AccountCategory, BalanceSide
from bursar_kernel.exceptions import ReportInputError
from bursar_kernel.selectors.account_selector import AccountRegistry
from bursar_kernel.selectors.journal_selector import JournalStore
from bursar_modules.reporting.balances import (
    compute_balance_snapshot,
    compute_balances,
    normalize_balance,
)
from bursar_modules.reporting.models import WarningCode
from tests.conftest import make_account, make_entry

AS_OF = date(2024, 3, 31)


class TestNormalizeBalance:
    """Sign normalization per category."""

    @pytest.mark.parametrize(
        "category,net,expected",
        [
            (AccountCategory.ASSET, Decimal("600"), (Decimal("600"), BalanceSide.DEBIT, False)),
            (AccountCategory.ASSET, Decimal("-50"), (Decimal("50"), BalanceSide.CREDIT, True)),
            (AccountCategory.EXPENSE, Decimal("400"), (Decimal("400"), BalanceSide.DEBIT, False)),
            (AccountCategory.REVENUE, Decimal("-1000"), (Decimal("1000"), BalanceSide.CREDIT, False)),
            (AccountCategory.LIABILITY, Decimal("25"), (Decimal("25"), BalanceSide.DEBIT, True)),
            (AccountCategory.EQUITY, Decimal("-300"), (Decimal("300"), BalanceSide.CREDIT, False)),
        ],
    )
    def test_side_and_abnormal_flag(self, category, net, expected):
        assert normalize_balance(category, net) == expected

    def test_within_epsilon_is_zero(self):
        assert normalize_balance(AccountCategory.ASSET, Decimal("0.0005")) == (
            Decimal("0"), BalanceSide.NONE, False,
        )
        assert normalize_balance(AccountCategory.REVENUE, Decimal("-0.001")) == (
            Decimal("0"), BalanceSide.NONE, False,
        )

    def test_just_over_epsilon_counts(self):
        balance, side, _ = normalize_balance(AccountCategory.ASSET, Decimal("0.002"))
        assert balance == Decimal("0.002")
        assert side == BalanceSide.DEBIT


class TestComputeBalances:

    def test_school_balances(self, school_accounts, school_entries):
        balances = compute_balances(school_accounts, school_entries, AS_OF)

        assert balances["cash"].balance == Decimal("600")
        assert balances["cash"].side == BalanceSide.DEBIT
        assert balances["cash"].debit_total == Decimal("1000")
        assert balances["cash"].credit_total == Decimal("400")
        assert balances["tuition"].balance == Decimal("1000")
        assert balances["tuition"].side == BalanceSide.CREDIT
        assert balances["salaries"].balance == Decimal("400")
        assert balances["salaries"].side == BalanceSide.DEBIT

    def test_every_known_account_present(self, school_accounts, school_entries):
        balances = compute_balances(school_accounts, school_entries, AS_OF)

        assert set(balances) == {a.account_id for a in school_accounts}
        assert balances["payable"].side == BalanceSide.NONE
        assert balances["payable"].balance == Decimal("0")

    def test_entries_after_as_of_ignored(self, school_accounts, school_entries):
        balances = compute_balances(school_accounts, school_entries, date(2024, 1, 31))

        assert balances["cash"].balance == Decimal("1000")
        assert balances["salaries"].side == BalanceSide.NONE

    def test_as_of_date_is_inclusive(self, school_accounts, school_entries):
        balances = compute_balances(school_accounts, school_entries, date(2024, 2, 10))
        assert balances["cash"].balance == Decimal("600")

    def test_overdrawn_asset_is_abnormal(self):
        accounts = [
            make_account("bank", "Bank", AccountCategory.ASSET, "1010"),
            make_account("supplies", "Supplies", AccountCategory.EXPENSE, "5100"),
        ]
        entries = [make_entry(date(2024, 1, 5), ("supplies", "75", "0"), ("bank", "0", "75"))]

        balances = compute_balances(accounts, entries, AS_OF)

        assert balances["bank"].side == BalanceSide.CREDIT
        assert balances["bank"].balance == Decimal("75")
        assert balances["bank"].is_abnormal is True
        assert balances["bank"].net == Decimal("-75")

    def test_accepts_registry_and_store(self, school_accounts, school_entries):
        balances = compute_balances(
            AccountRegistry(school_accounts), JournalStore(school_entries), AS_OF,
        )
        assert balances["cash"].balance == Decimal("600")

    def test_empty_journal(self, school_accounts):
        snapshot = compute_balance_snapshot(school_accounts, [], AS_OF)

        assert all(b.side == BalanceSide.NONE for b in snapshot.balances.values())
        assert snapshot.warnings == ()

    def test_missing_registry_raises(self, school_entries):
        with pytest.raises(ReportInputError) as exc_info:
            compute_balances(None, school_entries, AS_OF)
        assert exc_info.value.code == "REPORT_INPUT_INVALID"

    def test_missing_journal_raises(self, school_accounts):
        with pytest.raises(ReportInputError):
            compute_balances(school_accounts, None, AS_OF)


class TestBalanceWarnings:

    def test_unknown_account_skipped_with_warning(self, school_accounts):
        entries = [
            make_entry(
                date(2024, 1, 5),
                ("cash", "100", "0"),
                ("deleted-acct", "0", "100"),
                entry_id="je-orphan",
            )
        ]

        snapshot = compute_balance_snapshot(school_accounts, entries, AS_OF)

        assert "deleted-acct" not in snapshot.balances
        assert snapshot.balances["cash"].balance == Decimal("100")
        assert len(snapshot.warnings) == 1
        warning = snapshot.warnings[0]
        assert warning.code == WarningCode.UNKNOWN_ACCOUNT
        assert warning.entry_id == "je-orphan"
        assert warning.account_id == "deleted-acct"

    def test_undated_entry_excluded_with_warning(self, school_accounts, school_entries):
        undated = make_entry(None, ("cash", "999", "0"), ("tuition", "0", "999"), entry_id="je-bad")

        snapshot = compute_balance_snapshot(
            school_accounts, [*school_entries, undated], AS_OF,
        )

        assert snapshot.balances["cash"].balance == Decimal("600")
        assert [w.code for w in snapshot.warnings] == [WarningCode.MALFORMED_DATE]
        assert snapshot.warnings[0].entry_id == "je-bad"

    def test_unknown_account_is_logged(self, school_accounts, captured_logs):
        entries = [make_entry(date(2024, 1, 5), ("ghost", "10", "0"), ("cash", "0", "10"))]

        compute_balance_snapshot(school_accounts, entries, AS_OF)

        logs = captured_logs()
        assert any(
            r["message"] == "journal_line_unknown_account" and r["account_id"] == "ghost"
            for r in logs
        )

    def test_deterministic(self, school_accounts, school_entries):
        first = compute_balance_snapshot(school_accounts, school_entries, AS_OF)
        second = compute_balance_snapshot(school_accounts, school_entries, AS_OF)
        assert first == second
