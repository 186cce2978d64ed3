"""
Financial Reporting Domain Models (``bursar_modules.reporting.models``).

Responsibility
--------------
Frozen dataclass value objects for every report the engine produces:
balance snapshots, trial balance, balance sheet, income statement, cash-flow
statement, account and general ledgers, income and expense ledgers and
financial ratios, plus the data-integrity warnings attached to each of them.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  Produced by the
pure builders in ``balances.py``, ``statements.py`` and ``ledgers.py``;
wrapped in a ``ReportEnvelope`` by ``ReportingService``.

Invariants enforced
-------------------
* All models are ``frozen=True``; collections are tuples.
* All monetary fields use ``Decimal`` -- NEVER ``float``.
* Reports carry no timestamps: identical inputs give equal reports.
  ``generated_at`` lives only in ``ReportMetadata``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Literal, Union

from bursar_kernel.domain.values import ZERO, AccountCategory, BalanceSide, CashRecord


# =========================================================================
# Enums
# =========================================================================


class ReportType(str, Enum):
    """Types of financial reports."""

    ACCOUNT_BALANCES = "account_balances"
    TRIAL_BALANCE = "trial_balance"
    BALANCE_SHEET = "balance_sheet"
    INCOME_STATEMENT = "income_statement"
    CASH_FLOW = "cash_flow"
    ACCOUNT_LEDGER = "account_ledger"
    GENERAL_LEDGER = "general_ledger"
    INCOME_LEDGER = "income_ledger"
    EXPENSE_LEDGER = "expense_ledger"
    FINANCIAL_RATIOS = "financial_ratios"


class WarningCode(str, Enum):
    """Data-integrity problems surfaced alongside a report."""

    UNBALANCED_ENTRY = "unbalanced_entry"
    UNKNOWN_ACCOUNT = "unknown_account"
    MALFORMED_DATE = "malformed_date"
    UNBALANCED_TRIAL_BALANCE = "unbalanced_trial_balance"
    BALANCE_SHEET_MISMATCH = "balance_sheet_mismatch"
    NO_CASH_ACCOUNT = "no_cash_account"


class CashAccountSource(str, Enum):
    """How the cash-flow statement chose its cash accounts."""

    DESIGNATED = "designated"
    NAME_MATCH = "name_match"
    NONE = "none"


# =========================================================================
# Warnings
# =========================================================================


@dataclass(frozen=True)
class IntegrityWarning:
    """
    A data-quality problem found while building a report.

    Never fatal.  ``entry_id`` identifies the offending journal entry (or
    fee / cash record), ``delta`` carries the numeric discrepancy when
    there is one.
    """

    code: WarningCode
    message: str
    entry_id: str | None = None
    account_id: str | None = None
    delta: Decimal | None = None


# =========================================================================
# Balances
# =========================================================================


@dataclass(frozen=True)
class SignedBalance:
    """
    One account's aggregate position as of a date.

    ``net`` is always debit_total - credit_total.  ``balance`` is the
    non-negative magnitude reported in the ``side`` column; ``is_abnormal``
    is True when that column is not the category's natural side.
    """

    account_id: str
    debit_total: Decimal
    credit_total: Decimal
    net: Decimal
    balance: Decimal
    side: BalanceSide
    is_abnormal: bool = False


@dataclass(frozen=True)
class BalanceSnapshot:
    """
    Balances of every known account as of one date.

    Compute once and pass to several builders to avoid re-aggregating the
    journal.  ``balances`` is keyed by account id and must not be mutated.
    """

    as_of: date
    balances: dict[str, SignedBalance]
    warnings: tuple[IntegrityWarning, ...] = ()

    def balance_for(self, account_id: str) -> SignedBalance | None:
        return self.balances.get(account_id)


# =========================================================================
# Trial Balance
# =========================================================================


@dataclass(frozen=True)
class TrialBalanceRow:
    """A single line in the trial balance."""

    account_id: str
    account_code: str | None
    account_name: str
    category: AccountCategory
    debit: Decimal
    credit: Decimal
    side: BalanceSide
    is_abnormal: bool = False


@dataclass(frozen=True)
class TrialBalanceReport:
    """Complete trial balance.  ``is_balanced`` is |difference| <= tolerance."""

    as_of_date: date
    rows: tuple[TrialBalanceRow, ...]
    total_debit: Decimal
    total_credit: Decimal
    difference: Decimal
    is_balanced: bool
    warnings: tuple[IntegrityWarning, ...] = ()


# =========================================================================
# Balance Sheet
# =========================================================================


@dataclass(frozen=True)
class BalanceSheetLine:
    """
    An account on the balance sheet.

    ``amount`` is positive in the account's natural direction; an abnormal
    balance shows as a negative amount.
    """

    account_id: str
    account_code: str | None
    account_name: str
    amount: Decimal
    is_abnormal: bool = False


@dataclass(frozen=True)
class BalanceSheetSection:
    label: str
    lines: tuple[BalanceSheetLine, ...]
    total: Decimal


@dataclass(frozen=True)
class BalanceSheetReport:
    """
    Assets = Liabilities + Equity as of a date.

    ``total_equity`` includes ``period_net_income``, the revenue minus
    expense of the calendar year to ``as_of_date``.  The equation is
    checked, not enforced: ``difference`` is assets minus (liabilities +
    equity).
    """

    as_of_date: date
    period_start: date
    assets: BalanceSheetSection
    liabilities: BalanceSheetSection
    equity: BalanceSheetSection
    period_net_income: Decimal
    total_assets: Decimal
    total_liabilities: Decimal
    total_equity: Decimal
    total_liabilities_and_equity: Decimal
    difference: Decimal
    is_balanced: bool
    warnings: tuple[IntegrityWarning, ...] = ()


# =========================================================================
# Income Statement
# =========================================================================


@dataclass(frozen=True)
class IncomeStatementLine:
    account_id: str
    account_code: str | None
    account_name: str
    amount: Decimal


@dataclass(frozen=True)
class IncomeStatementReport:
    """Revenue and expense activity over a period, largest lines first."""

    period_start: date
    period_end: date
    revenue: tuple[IncomeStatementLine, ...]
    expenses: tuple[IncomeStatementLine, ...]
    total_revenue: Decimal
    total_expenses: Decimal
    net_income: Decimal
    warnings: tuple[IntegrityWarning, ...] = ()


# =========================================================================
# Cash Flow
# =========================================================================


@dataclass(frozen=True)
class CashFlowReport:
    """
    Direct-method cash-flow statement.

    The operating figures come from fee transactions and school income /
    expense records; ``cash_at_end_of_period`` comes from journal lines on
    the cash accounts.  The two sources are kept apart and neither adjusts
    the other.  ``cash_at_beginning_of_period`` is DERIVED as end minus net
    change, so it absorbs any disagreement between them.
    """

    period_start: date
    period_end: date
    fee_cash_collected: Decimal
    other_income_received: Decimal
    operating_inflow: Decimal
    operating_outflow: Decimal
    net_cash_from_operating: Decimal
    net_cash_from_investing: Decimal
    net_cash_from_financing: Decimal
    net_change_in_cash: Decimal
    cash_at_end_of_period: Decimal
    cash_at_beginning_of_period: Decimal
    cash_account_ids: tuple[str, ...]
    cash_account_source: CashAccountSource
    beginning_cash_is_derived: bool = True
    investing_tracked: bool = False
    financing_tracked: bool = False
    warnings: tuple[IntegrityWarning, ...] = ()


# =========================================================================
# Ledgers
# =========================================================================


@dataclass(frozen=True)
class OpeningBalanceLine:
    """
    Balance brought forward into an account ledger.

    Not a journal line: it summarizes every entry dated before the period.
    """

    date: date
    amount: Decimal
    running_balance: Decimal
    kind: Literal["opening"] = "opening"

    @property
    def debit(self) -> Decimal:
        return self.amount if self.amount > ZERO else ZERO

    @property
    def credit(self) -> Decimal:
        return -self.amount if self.amount < ZERO else ZERO


@dataclass(frozen=True)
class PostedLedgerLine:
    """A journal line as it appears in an account ledger."""

    date: date
    entry_id: str
    entry_description: str
    line_description: str | None
    debit: Decimal
    credit: Decimal
    running_balance: Decimal
    kind: Literal["posted"] = "posted"


AccountLedgerLine = Union[OpeningBalanceLine, PostedLedgerLine]


@dataclass(frozen=True)
class AccountLedgerReport:
    """
    One account's activity over a period.

    Balances are signed nets (debit - credit) regardless of category.
    """

    account_id: str
    account_code: str | None
    account_name: str
    category: AccountCategory
    period_start: date
    period_end: date
    opening_balance: Decimal
    lines: tuple[AccountLedgerLine, ...]
    closing_balance: Decimal
    total_debit: Decimal
    total_credit: Decimal
    warnings: tuple[IntegrityWarning, ...] = ()


@dataclass(frozen=True)
class GeneralLedgerLine:
    """
    One journal line in the general ledger.

    ``account_name`` is the registry's name (authoritative);
    ``cached_account_name`` is the name stored on the line when it was
    posted, kept for display only.
    """

    date: date
    entry_id: str
    entry_description: str
    account_id: str
    account_name: str
    cached_account_name: str | None
    account_known: bool
    line_description: str | None
    debit: Decimal
    credit: Decimal


@dataclass(frozen=True)
class GeneralLedgerReport:
    period_start: date
    period_end: date
    lines: tuple[GeneralLedgerLine, ...]
    total_debit: Decimal
    total_credit: Decimal
    warnings: tuple[IntegrityWarning, ...] = ()


@dataclass(frozen=True)
class CashRecordLedgerReport:
    """
    Income or expense records in a period, newest first, with their total.

    ``record_kind`` is "income" or "expense".  Undated records are left
    out and reported as MALFORMED_DATE warnings.
    """

    record_kind: Literal["income", "expense"]
    period_start: date
    period_end: date
    records: tuple[CashRecord, ...]
    total: Decimal
    warnings: tuple[IntegrityWarning, ...] = ()


# =========================================================================
# Financial Ratios
# =========================================================================


@dataclass(frozen=True)
class FinancialRatiosReport:
    """
    Headline ratios from income / expense records and the fee ledger.

    Percentages and the coverage ratio are rounded to two places.  With no
    income in the period both percentages are 0.  ``student_dues_coverage``
    is receivables / advances; it is None (and ``dues_coverage_unbounded``
    True) when students owe money but none has paid ahead.
    """

    period_start: date
    period_end: date
    as_of_date: date
    total_income: Decimal
    total_expenses: Decimal
    net_income: Decimal
    profit_margin_pct: Decimal
    operating_expense_ratio_pct: Decimal
    accounts_receivable: Decimal
    fees_paid_in_advance: Decimal
    student_dues_coverage: Decimal | None
    dues_coverage_unbounded: bool = False
    warnings: tuple[IntegrityWarning, ...] = ()


# =========================================================================
# Report Metadata (common to all reports)
# =========================================================================


@dataclass(frozen=True)
class ReportMetadata:
    """Metadata attached to every report the service returns."""

    report_id: str
    report_type: ReportType
    tenant_id: str
    entity_name: str
    currency: str
    as_of_date: date
    generated_at: str  # ISO format timestamp from injected clock
    period_start: date | None = None
    period_end: date | None = None


@dataclass(frozen=True)
class ReportEnvelope:
    metadata: ReportMetadata
    report: object
    warning_count: int = field(default=0)
