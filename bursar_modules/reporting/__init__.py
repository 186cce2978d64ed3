"""
School Financial Reporting Module (``bursar_modules.reporting``).

Responsibility
--------------
Read-only module that derives every financial report from a school's chart
of accounts and journal: per-account balances, trial balance, balance
sheet, income statement, cash-flow statement, account and general
ledgers.  Income and expense ledgers and financial ratios are built from
the school's income / expense records and the student fee ledger.

Architecture position
---------------------
**Modules layer**.  All computation is implemented as pure functions;
``ReportingService`` only loads data and wraps results.

Invariants enforced
-------------------
* No journal entries are created by this module.
* Balances are recomputed from the journal on every report (no stored
  balances).
"""

from bursar_modules.reporting.balances import compute_balance_snapshot, compute_balances
from bursar_modules.reporting.config import ReportingConfig
from bursar_modules.reporting.integrity import find_unbalanced_entries
from bursar_modules.reporting.ledgers import build_account_ledger, build_general_ledger
from bursar_modules.reporting.models import (
    AccountLedgerReport,
    BalanceSheetLine,
    BalanceSheetReport,
    BalanceSheetSection,
    BalanceSnapshot,
    CashAccountSource,
    CashFlowReport,
    CashRecordLedgerReport,
    FinancialRatiosReport,
    GeneralLedgerLine,
    GeneralLedgerReport,
    IncomeStatementLine,
    IncomeStatementReport,
    IntegrityWarning,
    OpeningBalanceLine,
    PostedLedgerLine,
    ReportEnvelope,
    ReportMetadata,
    ReportType,
    SignedBalance,
    TrialBalanceReport,
    TrialBalanceRow,
    WarningCode,
)
from bursar_modules.reporting.service import ReportingService
from bursar_modules.reporting.statements import (
    build_balance_sheet,
    build_cash_flow_statement,
    build_expense_ledger,
    build_financial_ratios,
    build_income_ledger,
    build_income_statement,
    build_trial_balance,
    render_to_dict,
)

__all__ = [
    # Service
    "ReportingService",
    # Config
    "ReportingConfig",
    # Builders
    "compute_balances",
    "compute_balance_snapshot",
    "find_unbalanced_entries",
    "build_trial_balance",
    "build_balance_sheet",
    "build_income_statement",
    "build_cash_flow_statement",
    "build_account_ledger",
    "build_general_ledger",
    "build_income_ledger",
    "build_expense_ledger",
    "build_financial_ratios",
    "render_to_dict",
    # Models
    "ReportType",
    "WarningCode",
    "CashAccountSource",
    "IntegrityWarning",
    "SignedBalance",
    "BalanceSnapshot",
    "TrialBalanceRow",
    "TrialBalanceReport",
    "BalanceSheetLine",
    "BalanceSheetSection",
    "BalanceSheetReport",
    "IncomeStatementLine",
    "IncomeStatementReport",
    "CashFlowReport",
    "OpeningBalanceLine",
    "PostedLedgerLine",
    "AccountLedgerReport",
    "GeneralLedgerLine",
    "GeneralLedgerReport",
    "CashRecordLedgerReport",
    "FinancialRatiosReport",
    "ReportMetadata",
    "ReportEnvelope",
]
