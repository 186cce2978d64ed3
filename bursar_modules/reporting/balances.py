"""
Balance Calculator -- per-account signed balances from the journal.

Responsibility:
    Aggregates journal lines into debit and credit totals per account and
    normalizes each net into a (balance, side) pair by account category.
    Every statement builder consumes this module's output.

Architecture position:
    Modules > Reporting -- pure functions, zero I/O.

Algorithm:
    1. Start every known account at debit_total = credit_total = 0.
    2. For every entry dated inside the window, add each line's debit and
       credit to its account.  Entries with no usable date are skipped with
       a MALFORMED_DATE warning; lines on unknown accounts are skipped with
       an UNKNOWN_ACCOUNT warning.
    3. net = debit_total - credit_total.
    4. Normalize by natural side with tolerance epsilon:

       ======================  ===============  =====================
       category                net > eps        net < -eps
       ======================  ===============  =====================
       ASSET, EXPENSE          (net, DEBIT)     (|net|, CREDIT) abn.
       LIABILITY, EQUITY, REV  (net, DEBIT) ab  (|net|, CREDIT)
       ======================  ===============  =====================

       |net| <= eps gives (0, NONE).

Invariants enforced:
    - Deterministic: identical inputs give equal snapshots.
    - Never raises for bad data; raises ReportInputError only when the
      account list or entry list is missing.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any

from bursar_kernel.domain.values import (
    BALANCE_EPSILON,
    ZERO,
    AccountCategory,
    AccountInfo,
    BalanceSide,
    JournalEntryData,
)
from bursar_kernel.exceptions import ReportInputError
from bursar_kernel.logging_config import get_logger
from bursar_modules.reporting.integrity import (
    malformed_date_warning,
    unknown_account_warning,
)
from bursar_modules.reporting.models import (
    BalanceSnapshot,
    IntegrityWarning,
    SignedBalance,
)

logger = get_logger("modules.reporting.balances")


# =========================================================================
# Input normalization
# =========================================================================


def resolve_accounts(accounts: Any, report_type: str) -> tuple[AccountInfo, ...]:
    """
    Accept an ``AccountRegistry``, an ``AccountSelector`` or any iterable of
    ``AccountInfo``.  Duplicate ids keep the first occurrence.
    """
    if accounts is None:
        raise ReportInputError(report_type, "account registry is required")
    if hasattr(accounts, "list_accounts"):
        accounts = accounts.list_accounts()
    seen: set[str] = set()
    result: list[AccountInfo] = []
    for account in accounts:
        if account.account_id in seen:
            continue
        seen.add(account.account_id)
        result.append(account)
    return tuple(result)


def resolve_entries(entries: Any, report_type: str) -> tuple[JournalEntryData, ...]:
    """Accept a ``JournalStore`` or any iterable of ``JournalEntryData``."""
    if entries is None:
        raise ReportInputError(report_type, "journal entries are required")
    if hasattr(entries, "entries"):
        return entries.entries()
    return tuple(entries)


def check_range(from_date: date, to_date: date, report_type: str) -> None:
    if from_date is None or to_date is None:
        raise ReportInputError(report_type, "both from_date and to_date are required")
    if from_date > to_date:
        raise ReportInputError(
            report_type, f"from_date {from_date} is after to_date {to_date}",
        )


# =========================================================================
# Aggregation
# =========================================================================


@dataclass(frozen=True)
class AccountTotals:
    """Raw debit / credit totals per account over a date window."""

    debits: dict[str, Decimal]
    credits: dict[str, Decimal]
    warnings: tuple[IntegrityWarning, ...]

    def net(self, account_id: str) -> Decimal:
        return self.debits.get(account_id, ZERO) - self.credits.get(account_id, ZERO)


def accumulate(
    accounts: Iterable[AccountInfo],
    entries: Iterable[JournalEntryData],
    to_date: date,
    from_date: date | None = None,
) -> AccountTotals:
    """
    Sum debits and credits per known account over entries dated in
    [from_date, to_date] (open start when ``from_date`` is None).
    """
    known = {a.account_id for a in accounts}
    debits = {account_id: ZERO for account_id in known}
    credits = {account_id: ZERO for account_id in known}
    warnings: list[IntegrityWarning] = []

    for entry in entries:
        entry_date = entry.effective_date
        if entry_date is None:
            warnings.append(malformed_date_warning(entry.entry_id))
            continue
        if entry_date > to_date:
            continue
        if from_date is not None and entry_date < from_date:
            continue
        for line in entry.lines:
            if line.account_id not in known:
                warnings.append(unknown_account_warning(entry.entry_id, line.account_id))
                continue
            debits[line.account_id] += line.debit
            credits[line.account_id] += line.credit

    return AccountTotals(debits=debits, credits=credits, warnings=tuple(warnings))


def normalize_balance(
    category: AccountCategory,
    net: Decimal,
    epsilon: Decimal = BALANCE_EPSILON,
) -> tuple[Decimal, BalanceSide, bool]:
    """Map a signed net to (balance, side, is_abnormal) for a category."""
    if abs(net) <= epsilon:
        return ZERO, BalanceSide.NONE, False
    side = BalanceSide.DEBIT if net > ZERO else BalanceSide.CREDIT
    return abs(net), side, side != category.natural_side


def natural_amount(category: AccountCategory, net: Decimal) -> Decimal:
    """Net expressed positive-in-the-natural-direction (credit - debit for credit-normal)."""
    if category.natural_side == BalanceSide.DEBIT:
        return net
    return -net


def compute_balance_snapshot(
    accounts: Any,
    journal_entries: Any,
    as_of_date: date,
    epsilon: Decimal = BALANCE_EPSILON,
) -> BalanceSnapshot:
    """
    Balances of every known account from all entries dated <= as_of_date.

    Args:
        accounts: AccountRegistry or iterable of AccountInfo.
        journal_entries: JournalStore or iterable of JournalEntryData.
        as_of_date: Inclusive cut-off; later entries are ignored.
        epsilon: Tolerance below which a net is treated as zero.
    """
    account_list = resolve_accounts(accounts, "account_balances")
    entry_list = resolve_entries(journal_entries, "account_balances")
    if as_of_date is None:
        raise ReportInputError("account_balances", "as_of_date is required")

    totals = accumulate(account_list, entry_list, to_date=as_of_date)

    balances: dict[str, SignedBalance] = {}
    for account in account_list:
        debit_total = totals.debits[account.account_id]
        credit_total = totals.credits[account.account_id]
        net = debit_total - credit_total
        balance, side, abnormal = normalize_balance(account.category, net, epsilon)
        balances[account.account_id] = SignedBalance(
            account_id=account.account_id,
            debit_total=debit_total,
            credit_total=credit_total,
            net=net,
            balance=balance,
            side=side,
            is_abnormal=abnormal,
        )

    logger.debug(
        "balance_snapshot_computed",
        extra={
            "as_of": as_of_date,
            "account_count": len(balances),
            "entry_count": len(entry_list),
            "warning_count": len(totals.warnings),
        },
    )
    return BalanceSnapshot(as_of=as_of_date, balances=balances, warnings=totals.warnings)


def compute_balances(
    accounts: Any,
    journal_entries: Any,
    as_of_date: date,
    epsilon: Decimal = BALANCE_EPSILON,
) -> dict[str, SignedBalance]:
    """Per-account signed balances as of a date, keyed by account id."""
    return compute_balance_snapshot(accounts, journal_entries, as_of_date, epsilon).balances
