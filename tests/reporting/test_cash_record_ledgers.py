"""Tests for build_income_ledger and build_expense_ledger."""

from datetime import date
from decimal import Decimal

import pytest

from bursar_kernel.domain.values import CashRecord
from bursar_kernel.exceptions import ReportInputError
from bursar_modules.reporting.models import WarningCode
from bursar_modules.reporting.statements import (
    build_expense_ledger,
    build_income_ledger,
    render_to_dict,
)

MAR_1 = date(2024, 3, 1)
MAR_31 = date(2024, 3, 31)


def _record(record_id, amount, record_date, category=None, payment_method=None):
    return CashRecord(
        record_id=record_id,
        record_date=record_date,
        amount=Decimal(amount),
        category=category,
        payment_method=payment_method,
    )


@pytest.fixture
def income_records():
    return [
        _record("inc-1", "200", date(2024, 3, 2), "Canteen", "Cash"),
        _record("inc-2", "75.50", date(2024, 3, 20), "Uniform sales", "Mobile Money"),
        _record("inc-3", "40", date(2024, 3, 20), "Canteen"),
        _record("inc-old", "999", date(2024, 2, 28), "Canteen"),
        _record("inc-late", "999", date(2024, 4, 1), "Canteen"),
    ]


class TestIncomeLedger:

    def test_newest_first_with_total(self, income_records):
        report = build_income_ledger(income_records, MAR_1, MAR_31)

        assert report.record_kind == "income"
        assert [r.record_id for r in report.records] == ["inc-2", "inc-3", "inc-1"]
        assert report.total == Decimal("315.50")
        assert report.warnings == ()

    def test_period_bounds_inclusive(self):
        records = [
            _record("first", "1", MAR_1),
            _record("last", "2", MAR_31),
        ]

        report = build_income_ledger(records, MAR_1, MAR_31)

        assert [r.record_id for r in report.records] == ["last", "first"]
        assert report.total == Decimal("3")

    def test_undated_record_warned(self, income_records):
        income_records.append(_record("inc-undated", "10", None))

        report = build_income_ledger(income_records, MAR_1, MAR_31)

        assert report.total == Decimal("315.50")
        assert [(w.code, w.entry_id) for w in report.warnings] == [
            (WarningCode.MALFORMED_DATE, "inc-undated"),
        ]

    def test_empty_period(self, income_records):
        report = build_income_ledger(income_records, date(2023, 1, 1), date(2023, 1, 31))

        assert report.records == ()
        assert report.total == Decimal("0")

    def test_inverted_range(self, income_records):
        with pytest.raises(ReportInputError):
            build_income_ledger(income_records, MAR_31, MAR_1)

    def test_renders_payment_method(self, income_records):
        rendered = render_to_dict(build_income_ledger(income_records, MAR_1, MAR_31))

        assert rendered["total"] == "315.50"
        assert rendered["records"][0]["payment_method"] == "Mobile Money"
        assert rendered["records"][0]["record_date"] == "2024-03-20"


class TestExpenseLedger:

    def test_newest_first_with_total(self):
        records = [
            _record("exp-1", "120", date(2024, 3, 5), "Stationery", "Cash"),
            _record("exp-2", "400", date(2024, 3, 28), "Salaries", "Bank"),
        ]

        report = build_expense_ledger(records, MAR_1, MAR_31)

        assert report.record_kind == "expense"
        assert [r.record_id for r in report.records] == ["exp-2", "exp-1"]
        assert report.total == Decimal("520")

    def test_missing_records_rejected(self):
        with pytest.raises(ReportInputError):
            build_expense_ledger(None, MAR_1, MAR_31)
