"""
Pure financial statement functions.

These functions turn a chart of accounts and a journal snapshot into
structured statements.  ZERO I/O.  ZERO side effects.

All monetary values are Decimal.  All outputs are frozen dataclasses.

Functions in this module follow the bursar_kernel/domain/ purity convention:
- No database access
- No clock access
- No file I/O
- Deterministic: same inputs always produce equal outputs

Data-quality problems never raise.  They are returned in each report's
``warnings`` tuple (and logged).  Only contract violations -- a missing
account list or journal, an inverted date range -- raise
``ReportInputError``.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any

from bursar_kernel.domain.values import (
    BALANCE_EPSILON,
    REPORT_TOLERANCE,
    ZERO,
    AccountCategory,
    AccountInfo,
    BalanceSide,
    CashRecord,
    FeeTransactionData,
    JournalEntryData,
)
from bursar_kernel.exceptions import ReportInputError
from bursar_kernel.logging_config import get_logger
from bursar_modules.fees.adapter import (
    DEFAULT_NON_CASH_KEYWORDS,
    summarize_fee_collections,
    summarize_student_dues,
)
from bursar_modules.reporting.balances import (
    accumulate,
    check_range,
    compute_balance_snapshot,
    natural_amount,
    resolve_accounts,
    resolve_entries,
)
from bursar_modules.reporting.integrity import (
    find_unbalanced_entries,
    malformed_date_warning,
    merge_warnings,
)
from bursar_modules.reporting.models import (
    BalanceSheetLine,
    BalanceSheetReport,
    BalanceSheetSection,
    BalanceSnapshot,
    CashAccountSource,
    CashFlowReport,
    CashRecordLedgerReport,
    FinancialRatiosReport,
    IncomeStatementLine,
    IncomeStatementReport,
    IntegrityWarning,
    TrialBalanceReport,
    TrialBalanceRow,
    WarningCode,
)

logger = get_logger("modules.reporting.statements")

DEFAULT_CASH_ACCOUNT_KEYWORDS: tuple[str, ...] = ("cash", "bank")


# =========================================================================
# Helpers
# =========================================================================


def _snapshot_for(
    snapshot: BalanceSnapshot | None,
    accounts: tuple[AccountInfo, ...],
    entries: tuple[JournalEntryData, ...],
    as_of_date: date,
    epsilon: Decimal,
    report_type: str,
) -> BalanceSnapshot:
    if snapshot is None:
        return compute_balance_snapshot(accounts, entries, as_of_date, epsilon)
    if snapshot.as_of != as_of_date:
        raise ReportInputError(
            report_type,
            f"snapshot is as of {snapshot.as_of}, report is as of {as_of_date}",
        )
    return snapshot


def _dated_through(
    entries: Iterable[JournalEntryData], as_of_date: date,
) -> list[JournalEntryData]:
    return [
        e for e in entries
        if e.effective_date is not None and e.effective_date <= as_of_date
    ]


def _sorted_accounts(accounts: Iterable[AccountInfo]) -> list[AccountInfo]:
    """Order used by every account listing: code, else name; id breaks ties."""
    return sorted(accounts, key=lambda a: (a.sort_key, a.account_id))


# =========================================================================
# 1. TRIAL BALANCE
# =========================================================================


def build_trial_balance(
    accounts: Any,
    journal_entries: Any,
    as_of_date: date,
    snapshot: BalanceSnapshot | None = None,
    include_zero_balances: bool = True,
    epsilon: Decimal = BALANCE_EPSILON,
    tolerance: Decimal = REPORT_TOLERANCE,
) -> TrialBalanceReport:
    """
    Every account's balance in its side's column, with column totals.

    Never fails on unbalanced books: ``is_balanced`` is False, the numeric
    ``difference`` is reported, and an UNBALANCED_TRIAL_BALANCE warning is
    added.  Unbalanced entries dated on or before ``as_of_date`` are listed
    as UNBALANCED_ENTRY warnings.
    """
    account_list = resolve_accounts(accounts, "trial_balance")
    entry_list = resolve_entries(journal_entries, "trial_balance")
    snap = _snapshot_for(
        snapshot, account_list, entry_list, as_of_date, epsilon, "trial_balance",
    )

    rows: list[TrialBalanceRow] = []
    total_debit = ZERO
    total_credit = ZERO
    for account in _sorted_accounts(account_list):
        bal = snap.balance_for(account.account_id)
        if bal is None:
            continue
        debit = bal.balance if bal.side == BalanceSide.DEBIT else ZERO
        credit = bal.balance if bal.side == BalanceSide.CREDIT else ZERO
        total_debit += debit
        total_credit += credit
        if bal.side == BalanceSide.NONE and not include_zero_balances:
            continue
        rows.append(
            TrialBalanceRow(
                account_id=account.account_id,
                account_code=account.code,
                account_name=account.name,
                category=account.category,
                debit=debit,
                credit=credit,
                side=bal.side,
                is_abnormal=bal.is_abnormal,
            )
        )

    difference = total_debit - total_credit
    is_balanced = abs(difference) <= tolerance

    extra: list[IntegrityWarning] = []
    if not is_balanced:
        logger.warning(
            "trial_balance_unbalanced",
            extra={
                "as_of": as_of_date,
                "total_debit": total_debit,
                "total_credit": total_credit,
                "delta": difference,
            },
        )
        extra.append(
            IntegrityWarning(
                code=WarningCode.UNBALANCED_TRIAL_BALANCE,
                message=(
                    f"Trial balance debits {total_debit} != credits "
                    f"{total_credit} as of {as_of_date}"
                ),
                delta=difference,
            )
        )

    warnings = merge_warnings(
        snap.warnings,
        find_unbalanced_entries(_dated_through(entry_list, as_of_date), epsilon),
        extra,
    )

    logger.info(
        "trial_balance_built",
        extra={
            "as_of": as_of_date,
            "row_count": len(rows),
            "is_balanced": is_balanced,
            "warning_count": len(warnings),
        },
    )
    return TrialBalanceReport(
        as_of_date=as_of_date,
        rows=tuple(rows),
        total_debit=total_debit,
        total_credit=total_credit,
        difference=difference,
        is_balanced=is_balanced,
        warnings=warnings,
    )


# =========================================================================
# 2. BALANCE SHEET
# =========================================================================


def _make_section(
    label: str,
    accounts: list[AccountInfo],
    snap: BalanceSnapshot,
    epsilon: Decimal,
) -> BalanceSheetSection:
    """Section total covers every account; lines list only non-zero ones."""
    lines: list[BalanceSheetLine] = []
    total = ZERO
    for account in _sorted_accounts(accounts):
        bal = snap.balance_for(account.account_id)
        if bal is None:
            continue
        amount = natural_amount(account.category, bal.net)
        total += amount
        if abs(amount) <= epsilon:
            continue
        lines.append(
            BalanceSheetLine(
                account_id=account.account_id,
                account_code=account.code,
                account_name=account.name,
                amount=amount,
                is_abnormal=bal.is_abnormal,
            )
        )
    return BalanceSheetSection(label=label, lines=tuple(lines), total=total)


def year_start(as_of_date: date) -> date:
    return date(as_of_date.year, 1, 1)


def compute_period_net_income(
    accounts: Iterable[AccountInfo],
    entries: Iterable[JournalEntryData],
    from_date: date,
    to_date: date,
) -> tuple[Decimal, tuple[IntegrityWarning, ...]]:
    """Revenue (credit - debit) minus expense (debit - credit) over a window."""
    account_list = list(accounts)
    totals = accumulate(account_list, entries, to_date=to_date, from_date=from_date)
    revenue = ZERO
    expense = ZERO
    for account in account_list:
        net = totals.net(account.account_id)
        if account.category == AccountCategory.REVENUE:
            revenue -= net
        elif account.category == AccountCategory.EXPENSE:
            expense += net
    return revenue - expense, totals.warnings


def build_balance_sheet(
    accounts: Any,
    journal_entries: Any,
    as_of_date: date,
    snapshot: BalanceSnapshot | None = None,
    epsilon: Decimal = BALANCE_EPSILON,
    tolerance: Decimal = REPORT_TOLERANCE,
) -> BalanceSheetReport:
    """
    Assets, liabilities and equity as of a date.

    Equity includes year-to-date net income: revenue minus expense over
    entries dated from January 1 of ``as_of_date``'s year through
    ``as_of_date``.  Income of earlier years that was never closed into an
    equity account is therefore missing from equity, and shows up as a
    BALANCE_SHEET_MISMATCH warning carrying the exact delta.
    """
    account_list = resolve_accounts(accounts, "balance_sheet")
    entry_list = resolve_entries(journal_entries, "balance_sheet")
    snap = _snapshot_for(
        snapshot, account_list, entry_list, as_of_date, epsilon, "balance_sheet",
    )

    def of(category: AccountCategory) -> list[AccountInfo]:
        return [a for a in account_list if a.category == category]

    assets = _make_section("Assets", of(AccountCategory.ASSET), snap, epsilon)
    liabilities = _make_section("Liabilities", of(AccountCategory.LIABILITY), snap, epsilon)
    equity = _make_section("Equity", of(AccountCategory.EQUITY), snap, epsilon)

    period_start = year_start(as_of_date)
    net_income, _ = compute_period_net_income(
        account_list, entry_list, period_start, as_of_date,
    )

    total_assets = assets.total
    total_liabilities = liabilities.total
    total_equity = equity.total + net_income
    total_le = total_liabilities + total_equity
    difference = total_assets - total_le
    is_balanced = abs(difference) <= tolerance

    extra: list[IntegrityWarning] = []
    if not is_balanced:
        logger.warning(
            "balance_sheet_mismatch",
            extra={
                "as_of": as_of_date,
                "total_assets": total_assets,
                "total_liabilities_and_equity": total_le,
                "delta": difference,
            },
        )
        extra.append(
            IntegrityWarning(
                code=WarningCode.BALANCE_SHEET_MISMATCH,
                message=(
                    f"Total assets {total_assets} != liabilities and equity "
                    f"{total_le} as of {as_of_date}"
                ),
                delta=difference,
            )
        )

    warnings = merge_warnings(
        snap.warnings,
        find_unbalanced_entries(_dated_through(entry_list, as_of_date), epsilon),
        extra,
    )

    logger.info(
        "balance_sheet_built",
        extra={
            "as_of": as_of_date,
            "total_assets": total_assets,
            "is_balanced": is_balanced,
            "warning_count": len(warnings),
        },
    )
    return BalanceSheetReport(
        as_of_date=as_of_date,
        period_start=period_start,
        assets=assets,
        liabilities=liabilities,
        equity=equity,
        period_net_income=net_income,
        total_assets=total_assets,
        total_liabilities=total_liabilities,
        total_equity=total_equity,
        total_liabilities_and_equity=total_le,
        difference=difference,
        is_balanced=is_balanced,
        warnings=warnings,
    )


# =========================================================================
# 3. INCOME STATEMENT
# =========================================================================


def build_income_statement(
    accounts: Any,
    journal_entries: Any,
    from_date: date,
    to_date: date,
    epsilon: Decimal = BALANCE_EPSILON,
) -> IncomeStatementReport:
    """
    Revenue and expense activity in [from_date, to_date].

    Revenue lines are credit - debit, expense lines debit - credit.
    Accounts with no activity beyond ``epsilon`` are omitted.  Lines are
    sorted by amount, largest first.
    """
    account_list = resolve_accounts(accounts, "income_statement")
    entry_list = resolve_entries(journal_entries, "income_statement")
    check_range(from_date, to_date, "income_statement")

    totals = accumulate(account_list, entry_list, to_date=to_date, from_date=from_date)

    revenue: list[IncomeStatementLine] = []
    expenses: list[IncomeStatementLine] = []
    for account in _sorted_accounts(account_list):
        if account.category not in (AccountCategory.REVENUE, AccountCategory.EXPENSE):
            continue
        amount = natural_amount(account.category, totals.net(account.account_id))
        if abs(amount) <= epsilon:
            continue
        line = IncomeStatementLine(
            account_id=account.account_id,
            account_code=account.code,
            account_name=account.name,
            amount=amount,
        )
        if account.category == AccountCategory.REVENUE:
            revenue.append(line)
        else:
            expenses.append(line)

    # stable sort: equal amounts keep code order
    revenue.sort(key=lambda x: x.amount, reverse=True)
    expenses.sort(key=lambda x: x.amount, reverse=True)
    total_revenue = sum((x.amount for x in revenue), ZERO)
    total_expenses = sum((x.amount for x in expenses), ZERO)

    in_range = [
        e for e in entry_list
        if e.effective_date is not None and from_date <= e.effective_date <= to_date
    ]
    warnings = merge_warnings(totals.warnings, find_unbalanced_entries(in_range, epsilon))

    logger.info(
        "income_statement_built",
        extra={
            "period_start": from_date,
            "period_end": to_date,
            "net_income": total_revenue - total_expenses,
        },
    )
    return IncomeStatementReport(
        period_start=from_date,
        period_end=to_date,
        revenue=tuple(revenue),
        expenses=tuple(expenses),
        total_revenue=total_revenue,
        total_expenses=total_expenses,
        net_income=total_revenue - total_expenses,
        warnings=warnings,
    )


# =========================================================================
# 4. CASH FLOW
# =========================================================================


def select_cash_accounts(
    accounts: Iterable[AccountInfo],
    designated_cash_account_ids: Iterable[str] = (),
    cash_account_keywords: Iterable[str] = DEFAULT_CASH_ACCOUNT_KEYWORDS,
) -> tuple[tuple[str, ...], CashAccountSource]:
    """
    Pick the accounts whose journal lines make up the cash position.

    Designated ids win, even ids unknown to the registry.  Otherwise ASSET
    accounts whose name contains a keyword (case-insensitive).
    """
    designated = tuple(dict.fromkeys(designated_cash_account_ids))
    if designated:
        return designated, CashAccountSource.DESIGNATED
    keywords = tuple(k.lower() for k in cash_account_keywords)
    matched = tuple(
        a.account_id
        for a in _sorted_accounts(accounts)
        if a.category == AccountCategory.ASSET
        and any(k in a.name.lower() for k in keywords)
    )
    if matched:
        return matched, CashAccountSource.NAME_MATCH
    return (), CashAccountSource.NONE


def _sum_cash_records(
    records: Iterable[CashRecord],
    from_date: date,
    to_date: date,
    record_type: str,
) -> tuple[Decimal, list[IntegrityWarning]]:
    total = ZERO
    warnings: list[IntegrityWarning] = []
    for record in records:
        if record.record_date is None:
            warnings.append(malformed_date_warning(record.record_id, record_type))
            continue
        if from_date <= record.record_date <= to_date:
            total += record.amount
    return total, warnings


def build_cash_flow_statement(
    accounts: Any,
    journal_entries: Any,
    fee_transactions: Iterable[FeeTransactionData],
    income_records: Iterable[CashRecord],
    expense_records: Iterable[CashRecord],
    from_date: date,
    to_date: date,
    designated_cash_account_ids: Iterable[str] = (),
    non_cash_payment_keywords: Iterable[str] = DEFAULT_NON_CASH_KEYWORDS,
    cash_account_keywords: Iterable[str] = DEFAULT_CASH_ACCOUNT_KEYWORDS,
) -> CashFlowReport:
    """
    Direct-method cash-flow statement for [from_date, to_date].

    Operating inflow is cash collected from fees (payments in the period,
    excluding non-cash settlements) plus other income records in the
    period; outflow is expense records in the period.  Investing and
    financing are not tracked and are reported as zero.

    Ending cash is the net of journal lines on the cash accounts for
    entries dated on or before ``to_date``.  Beginning cash is derived as
    ending cash minus the net change; it is never read independently.
    """
    account_list = resolve_accounts(accounts, "cash_flow")
    entry_list = resolve_entries(journal_entries, "cash_flow")
    check_range(from_date, to_date, "cash_flow")
    if fee_transactions is None or income_records is None or expense_records is None:
        raise ReportInputError(
            "cash_flow", "fee transactions, income and expense records are required",
        )

    fees = summarize_fee_collections(
        fee_transactions, from_date, to_date, non_cash_payment_keywords,
    )
    warnings: list[IntegrityWarning] = [
        malformed_date_warning(tx_id, "fee transaction")
        for tx_id in fees.undated_transaction_ids
    ]
    other_income, income_warnings = _sum_cash_records(
        income_records, from_date, to_date, "income record",
    )
    outflow, expense_warnings = _sum_cash_records(
        expense_records, from_date, to_date, "expense record",
    )
    warnings.extend(income_warnings)
    warnings.extend(expense_warnings)

    inflow = fees.cash_collected + other_income
    net_operating = inflow - outflow
    net_investing = ZERO
    net_financing = ZERO
    net_change = net_operating + net_investing + net_financing

    cash_ids, source = select_cash_accounts(
        account_list, designated_cash_account_ids, cash_account_keywords,
    )
    cash_set = set(cash_ids)
    ending_cash = ZERO
    for entry in entry_list:
        if entry.effective_date is None:
            warnings.append(malformed_date_warning(entry.entry_id))
            continue
        if entry.effective_date > to_date:
            continue
        for line in entry.lines:
            if line.account_id in cash_set:
                ending_cash += line.debit - line.credit

    if source == CashAccountSource.NONE:
        logger.warning(
            "cash_flow_no_cash_account",
            extra={"period_start": from_date, "period_end": to_date},
        )
        warnings.append(
            IntegrityWarning(
                code=WarningCode.NO_CASH_ACCOUNT,
                message=(
                    "No designated cash account and no asset account named "
                    "like cash or bank; ending cash reported as 0"
                ),
            )
        )

    beginning_cash = ending_cash - net_change

    logger.info(
        "cash_flow_built",
        extra={
            "period_start": from_date,
            "period_end": to_date,
            "fee_cash_collected": fees.cash_collected,
            "cash_at_end_of_period": ending_cash,
            "cash_account_source": source,
        },
    )
    return CashFlowReport(
        period_start=from_date,
        period_end=to_date,
        fee_cash_collected=fees.cash_collected,
        other_income_received=other_income,
        operating_inflow=inflow,
        operating_outflow=outflow,
        net_cash_from_operating=net_operating,
        net_cash_from_investing=net_investing,
        net_cash_from_financing=net_financing,
        net_change_in_cash=net_change,
        cash_at_end_of_period=ending_cash,
        cash_at_beginning_of_period=beginning_cash,
        cash_account_ids=cash_ids,
        cash_account_source=source,
        warnings=merge_warnings(warnings),
    )


# =========================================================================
# 5. INCOME AND EXPENSE LEDGERS
# =========================================================================


def _build_cash_record_ledger(
    record_kind: str,
    records: Iterable[CashRecord],
    from_date: date,
    to_date: date,
) -> CashRecordLedgerReport:
    report_type = f"{record_kind}_ledger"
    check_range(from_date, to_date, report_type)
    if records is None:
        raise ReportInputError(report_type, f"{record_kind} records are required")

    warnings: list[IntegrityWarning] = []
    in_range: list[CashRecord] = []
    for record in records:
        if record.record_date is None:
            warnings.append(malformed_date_warning(record.record_id, f"{record_kind} record"))
            continue
        if from_date <= record.record_date <= to_date:
            in_range.append(record)

    # newest first; same-day records keep their input order
    in_range.sort(key=lambda r: r.record_date, reverse=True)
    total = sum((r.amount for r in in_range), ZERO)

    logger.info(
        f"{report_type}_built",
        extra={
            "period_start": from_date,
            "period_end": to_date,
            "record_count": len(in_range),
            "total": total,
        },
    )
    return CashRecordLedgerReport(
        record_kind=record_kind,
        period_start=from_date,
        period_end=to_date,
        records=tuple(in_range),
        total=total,
        warnings=merge_warnings(warnings),
    )


def build_income_ledger(
    income_records: Iterable[CashRecord],
    from_date: date,
    to_date: date,
) -> CashRecordLedgerReport:
    """School income records dated in [from_date, to_date], newest first."""
    return _build_cash_record_ledger("income", income_records, from_date, to_date)


def build_expense_ledger(
    expense_records: Iterable[CashRecord],
    from_date: date,
    to_date: date,
) -> CashRecordLedgerReport:
    """School expense records dated in [from_date, to_date], newest first."""
    return _build_cash_record_ledger("expense", expense_records, from_date, to_date)


# =========================================================================
# 6. FINANCIAL RATIOS
# =========================================================================

_HUNDRED = Decimal("100")
_RATIO_PLACES = Decimal("0.01")


def _ratio(numerator: Decimal, denominator: Decimal, scale: Decimal = Decimal("1")) -> Decimal:
    return (numerator * scale / denominator).quantize(_RATIO_PLACES, rounding=ROUND_HALF_UP)


def build_financial_ratios(
    income_records: Iterable[CashRecord],
    expense_records: Iterable[CashRecord],
    fee_transactions: Iterable[FeeTransactionData],
    from_date: date,
    to_date: date,
    as_of_date: date,
) -> FinancialRatiosReport:
    """
    Profit margin, operating expense ratio and student dues coverage.

    The first two use income and expense records dated in
    [from_date, to_date]; dues coverage uses the fee ledger as of
    ``as_of_date``, which need not fall inside the period.
    """
    check_range(from_date, to_date, "financial_ratios")
    if income_records is None or expense_records is None or fee_transactions is None:
        raise ReportInputError(
            "financial_ratios", "income, expense and fee records are required",
        )

    total_income, income_warnings = _sum_cash_records(
        income_records, from_date, to_date, "income record",
    )
    total_expenses, expense_warnings = _sum_cash_records(
        expense_records, from_date, to_date, "expense record",
    )
    dues = summarize_student_dues(fee_transactions, as_of_date)

    net_income = total_income - total_expenses
    if total_income > ZERO:
        profit_margin = _ratio(net_income, total_income, _HUNDRED)
        expense_ratio = _ratio(total_expenses, total_income, _HUNDRED)
    else:
        profit_margin = ZERO
        expense_ratio = ZERO

    unbounded = False
    if dues.advances > ZERO:
        coverage: Decimal | None = _ratio(dues.receivables, dues.advances)
    elif dues.receivables > ZERO:
        coverage = None
        unbounded = True
    else:
        coverage = ZERO

    warnings = merge_warnings(
        income_warnings,
        expense_warnings,
        [
            malformed_date_warning(tx_id, "fee transaction")
            for tx_id in dues.undated_transaction_ids
        ],
    )

    logger.info(
        "financial_ratios_built",
        extra={
            "period_start": from_date,
            "period_end": to_date,
            "as_of": as_of_date,
            "profit_margin_pct": profit_margin,
            "operating_expense_ratio_pct": expense_ratio,
            "student_dues_coverage": coverage,
        },
    )
    return FinancialRatiosReport(
        period_start=from_date,
        period_end=to_date,
        as_of_date=as_of_date,
        total_income=total_income,
        total_expenses=total_expenses,
        net_income=net_income,
        profit_margin_pct=profit_margin,
        operating_expense_ratio_pct=expense_ratio,
        accounts_receivable=dues.receivables,
        fees_paid_in_advance=dues.advances,
        student_dues_coverage=coverage,
        dues_coverage_unbounded=unbounded,
        warnings=warnings,
    )


# =========================================================================
# 7. RENDERER (dict/JSON output)
# =========================================================================


def render_to_dict(obj: object) -> dict | list | str | int | float | bool | None:
    """
    Convert any report dataclass to plain primitives for JSON serialization.

    Handles:
    - Decimal -> str (preserving precision)
    - date -> ISO format string
    - Enum -> .value
    - Nested frozen dataclasses -> nested dicts
    - Tuples -> lists
    - None preserved
    """
    if obj is None:
        return None
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, date):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (list, tuple)):
        return [render_to_dict(item) for item in obj]
    if isinstance(obj, dict):
        return {str(k): render_to_dict(v) for k, v in obj.items()}
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.name: render_to_dict(getattr(obj, f.name))
            for f in dataclasses.fields(obj)
        }
    if isinstance(obj, (str, int, float, bool)):
        return obj
    return str(obj)
