"""
Integration tests for ReportingService on a real (SQLite) session.

Verifies selector wiring, tenant isolation, envelope metadata and the
configuration hand-off to the pure builders.
"""

from datetime import date
from decimal import Decimal

import pytest

from bursar_config.schema import LedgerEngineConfig
from bursar_kernel.domain.values import AccountCategory
from bursar_kernel.exceptions import AccountNotFoundError, ReportInputError
from bursar_kernel.models.cash_record import CashRecordKind, CashRecordModel
from bursar_kernel.models.fee_transaction import FeeTransaction
from bursar_modules.reporting.models import (
    BalanceSnapshot,
    CashAccountSource,
    ReportType,
    WarningCode,
)
from bursar_modules.reporting.service import ReportingService
from tests.conftest import TENANT_ID, seed_account, seed_entry

Q1_START = date(2024, 1, 1)
Q1_END = date(2024, 3, 31)


@pytest.fixture
def engine_config():
    return LedgerEngineConfig(entity_name="Hillside Academy", currency="UGX")


@pytest.fixture
def reporting(seeded_school, deterministic_clock, engine_config):
    return ReportingService(
        seeded_school, TENANT_ID, clock=deterministic_clock, config=engine_config,
    )


class TestEnvelope:

    def test_metadata(self, reporting):
        envelope = reporting.trial_balance(Q1_END)

        meta = envelope.metadata
        assert meta.report_type == ReportType.TRIAL_BALANCE
        assert meta.tenant_id == TENANT_ID
        assert meta.entity_name == "Hillside Academy"
        assert meta.currency == "UGX"
        assert meta.as_of_date == Q1_END
        assert meta.generated_at == "2024-03-31T09:00:00+00:00"
        assert meta.report_id
        assert envelope.warning_count == 0

    def test_as_of_defaults_to_clock_date(self, reporting):
        envelope = reporting.trial_balance()
        assert envelope.metadata.as_of_date == date(2024, 3, 31)

    def test_report_ids_are_unique(self, reporting):
        assert (
            reporting.trial_balance(Q1_END).metadata.report_id
            != reporting.trial_balance(Q1_END).metadata.report_id
        )

    def test_logs_carry_tenant_and_report(self, reporting, captured_logs):
        envelope = reporting.trial_balance(Q1_END)

        record = next(r for r in captured_logs() if r["message"] == "report_generated")
        assert record["tenant_id"] == TENANT_ID
        assert record["report_id"] == envelope.metadata.report_id


class TestReports:

    def test_account_balances(self, reporting):
        snapshot = reporting.account_balances(Q1_END).report

        assert isinstance(snapshot, BalanceSnapshot)
        assert snapshot.balances["cash"].balance == Decimal("600")

    def test_trial_balance(self, reporting):
        report = reporting.trial_balance(Q1_END).report

        assert report.total_debit == Decimal("1000")
        assert report.total_credit == Decimal("1000")
        assert report.is_balanced is True

    def test_balance_sheet(self, reporting):
        envelope = reporting.balance_sheet(Q1_END)

        assert envelope.report.total_assets == Decimal("600")
        assert envelope.report.total_equity == Decimal("600")
        assert envelope.report.is_balanced is True
        assert envelope.metadata.period_start == date(2024, 1, 1)

    def test_income_statement(self, reporting):
        envelope = reporting.income_statement(Q1_START, Q1_END)

        assert envelope.report.net_income == Decimal("600")
        assert envelope.metadata.period_start == Q1_START
        assert envelope.metadata.period_end == Q1_END

    def test_cash_flow(self, reporting, seeded_school):
        seeded_school.add_all(
            [
                FeeTransaction(
                    tenant_id=TENANT_ID, student_id="s1", type="credit",
                    amount=Decimal("1000"), transaction_date=date(2024, 1, 10),
                    payment_method="Cash",
                ),
                FeeTransaction(
                    tenant_id=TENANT_ID, student_id="s2", type="credit",
                    amount=Decimal("300"), transaction_date=date(2024, 1, 12),
                    payment_method="Bursary",
                ),
                CashRecordModel(
                    tenant_id=TENANT_ID, kind=CashRecordKind.EXPENSE.value,
                    record_date=date(2024, 2, 10), amount=Decimal("400"),
                ),
            ]
        )
        seeded_school.flush()

        report = reporting.cash_flow(Q1_START, Q1_END).report

        assert report.fee_cash_collected == Decimal("1000")
        assert report.operating_outflow == Decimal("400")
        assert report.net_change_in_cash == Decimal("600")
        assert report.cash_at_end_of_period == Decimal("600")
        assert report.cash_at_beginning_of_period == Decimal("0")
        assert report.cash_account_source == CashAccountSource.NAME_MATCH

    def test_cash_flow_uses_designated_accounts(self, seeded_school, deterministic_clock):
        config = LedgerEngineConfig(designated_cash_account_ids={TENANT_ID: ("salaries",)})
        service = ReportingService(seeded_school, TENANT_ID, clock=deterministic_clock, config=config)

        report = service.cash_flow(Q1_START, Q1_END).report

        assert report.cash_account_source == CashAccountSource.DESIGNATED
        assert report.cash_at_end_of_period == Decimal("400")

    def test_account_ledger(self, reporting):
        report = reporting.account_ledger("cash", date(2024, 2, 1), Q1_END).report

        assert report.opening_balance == Decimal("1000")
        assert report.closing_balance == Decimal("600")

    def test_account_ledger_unknown_account(self, reporting):
        with pytest.raises(AccountNotFoundError) as exc_info:
            reporting.account_ledger("no-such-account", Q1_START, Q1_END)
        assert exc_info.value.tenant_id == TENANT_ID

    def test_general_ledger(self, reporting):
        report = reporting.general_ledger(Q1_START, Q1_END).report
        assert len(report.lines) == 4

    def test_inverted_range(self, reporting):
        with pytest.raises(ReportInputError):
            reporting.income_statement(Q1_END, Q1_START)


class TestCashRecordReports:

    @pytest.fixture
    def cash_records(self, seeded_school):
        seeded_school.add_all(
            [
                CashRecordModel(
                    tenant_id=TENANT_ID, kind=CashRecordKind.INCOME.value,
                    record_date=date(2024, 1, 20), amount=Decimal("250"),
                    category="Canteen", payment_method="Cash",
                ),
                CashRecordModel(
                    tenant_id=TENANT_ID, kind=CashRecordKind.INCOME.value,
                    record_date=date(2024, 3, 2), amount=Decimal("750"),
                    category="Uniform sales",
                ),
                CashRecordModel(
                    tenant_id=TENANT_ID, kind=CashRecordKind.EXPENSE.value,
                    record_date=date(2024, 2, 10), amount=Decimal("400"),
                    category="Salaries", payment_method="Bank",
                ),
                CashRecordModel(
                    tenant_id="school-002", kind=CashRecordKind.INCOME.value,
                    record_date=date(2024, 2, 1), amount=Decimal("9999"),
                ),
                FeeTransaction(
                    tenant_id=TENANT_ID, student_id="amina", type="debit",
                    amount=Decimal("800"), transaction_date=date(2024, 1, 5),
                ),
                FeeTransaction(
                    tenant_id=TENANT_ID, student_id="brian", type="credit",
                    amount=Decimal("200"), transaction_date=date(2024, 1, 6),
                    payment_method="Cash",
                ),
            ]
        )
        seeded_school.flush()

    def test_income_ledger(self, reporting, cash_records):
        envelope = reporting.income_ledger(Q1_START, Q1_END)

        report = envelope.report
        assert envelope.metadata.report_type == ReportType.INCOME_LEDGER
        assert [r.category for r in report.records] == ["Uniform sales", "Canteen"]
        assert report.records[1].payment_method == "Cash"
        assert report.total == Decimal("1000")

    def test_expense_ledger(self, reporting, cash_records):
        report = reporting.expense_ledger(Q1_START, Q1_END).report

        assert [r.amount for r in report.records] == [Decimal("400")]
        assert report.records[0].payment_method == "Bank"
        assert report.total == Decimal("400")

    def test_financial_ratios(self, reporting, cash_records):
        envelope = reporting.financial_ratios(Q1_START, Q1_END)

        report = envelope.report
        assert envelope.metadata.report_type == ReportType.FINANCIAL_RATIOS
        assert envelope.metadata.as_of_date == Q1_END
        assert report.profit_margin_pct == Decimal("60.00")
        assert report.operating_expense_ratio_pct == Decimal("40.00")
        assert report.accounts_receivable == Decimal("800")
        assert report.fees_paid_in_advance == Decimal("200")
        assert report.student_dues_coverage == Decimal("4.00")

    def test_financial_ratios_as_of_before_fees(self, reporting, cash_records):
        report = reporting.financial_ratios(Q1_START, Q1_END, as_of_date=date(2024, 1, 1)).report

        assert report.accounts_receivable == Decimal("0")
        assert report.student_dues_coverage == Decimal("0")

    def test_inverted_range(self, reporting):
        with pytest.raises(ReportInputError):
            reporting.income_ledger(Q1_END, Q1_START)
        with pytest.raises(ReportInputError):
            reporting.financial_ratios(Q1_END, Q1_START)


class TestDataQuality:

    def test_warnings_counted_in_envelope(self, reporting, seeded_school):
        seed_entry(
            seeded_school, date(2024, 3, 1),
            ("cash", "10", "0"), ("retired-acct", "0", "10"),
            entry_id="je-orphan",
        )
        seed_entry(seeded_school, None, ("cash", "5", "0"), entry_id="je-undated")

        envelope = reporting.trial_balance(Q1_END)

        codes = {w.code for w in envelope.report.warnings}
        assert WarningCode.UNKNOWN_ACCOUNT in codes
        assert WarningCode.MALFORMED_DATE in codes
        assert envelope.warning_count == len(envelope.report.warnings)


class TestTenantIsolation:

    def test_other_school_books_invisible(self, seeded_school, deterministic_clock, engine_config):
        seed_account(
            seeded_school, "other-cash", "Cash", AccountCategory.ASSET, "1000",
            tenant_id="school-002",
        )
        seed_entry(
            seeded_school, date(2024, 1, 3),
            ("other-cash", "9999", "0"), ("cash", "0", "9999"),
            tenant_id="school-002",
        )

        ours = ReportingService(
            seeded_school, TENANT_ID, clock=deterministic_clock, config=engine_config,
        ).trial_balance(Q1_END).report
        theirs = ReportingService(
            seeded_school, "school-002", clock=deterministic_clock, config=engine_config,
        ).trial_balance(Q1_END).report

        assert ours.total_debit == Decimal("1000")
        assert ours.warnings == ()
        assert [r.account_id for r in theirs.rows] == ["other-cash"]
        # the line on "cash" belongs to an account school-002 does not have
        assert [w.code for w in theirs.warnings] == [
            WarningCode.UNKNOWN_ACCOUNT,
            WarningCode.UNBALANCED_TRIAL_BALANCE,
        ]
