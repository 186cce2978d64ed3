"""
Ledger builders -- account ledger and general ledger.

Pure functions.  Both walk the journal in effective-date order; entries
sharing a date keep the order they were supplied in (insertion order).
Entries with no usable date are left out with a MALFORMED_DATE warning.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any

from bursar_kernel.domain.values import (
    BALANCE_EPSILON,
    ZERO,
    AccountInfo,
    JournalEntryData,
)
from bursar_kernel.exceptions import ReportInputError
from bursar_kernel.logging_config import get_logger
from bursar_modules.reporting.balances import (
    check_range,
    resolve_accounts,
    resolve_entries,
)
from bursar_modules.reporting.integrity import (
    malformed_date_warning,
    merge_warnings,
    unknown_account_warning,
)
from bursar_modules.reporting.models import (
    AccountLedgerLine,
    AccountLedgerReport,
    GeneralLedgerLine,
    GeneralLedgerReport,
    IntegrityWarning,
    OpeningBalanceLine,
    PostedLedgerLine,
)

logger = get_logger("modules.reporting.ledgers")


def _chronological(
    entries: tuple[JournalEntryData, ...],
) -> tuple[list[JournalEntryData], list[IntegrityWarning]]:
    """Dated entries in (date, insertion) order, plus warnings for the rest."""
    dated: list[JournalEntryData] = []
    warnings: list[IntegrityWarning] = []
    for entry in entries:
        if entry.effective_date is None:
            warnings.append(malformed_date_warning(entry.entry_id))
        else:
            dated.append(entry)
    # list.sort is stable: same-date entries keep insertion order
    dated.sort(key=lambda e: e.effective_date)
    return dated, warnings


def build_account_ledger(
    account: AccountInfo,
    journal_entries: Any,
    from_date: date,
    to_date: date,
    epsilon: Decimal = BALANCE_EPSILON,
) -> AccountLedgerReport:
    """
    One account's lines in [from_date, to_date] with a running balance.

    The opening balance is the net (debit - credit) of the account's lines
    in entries dated strictly before ``from_date``.  When it is larger than
    ``epsilon`` in magnitude the ledger starts with an OpeningBalanceLine.
    Every matching line after that is emitted once, carrying the running
    balance after it.  The closing balance is the final running balance.
    """
    if account is None:
        raise ReportInputError("account_ledger", "account is required")
    entry_list = resolve_entries(journal_entries, "account_ledger")
    check_range(from_date, to_date, "account_ledger")

    dated, warnings = _chronological(entry_list)
    account_id = account.account_id

    opening = ZERO
    for entry in dated:
        if entry.effective_date >= from_date:
            break
        for line in entry.lines:
            if line.account_id == account_id:
                opening += line.debit - line.credit

    lines: list[AccountLedgerLine] = []
    if abs(opening) > epsilon:
        lines.append(
            OpeningBalanceLine(date=from_date, amount=opening, running_balance=opening)
        )

    running = opening
    total_debit = ZERO
    total_credit = ZERO
    for entry in dated:
        if entry.effective_date < from_date:
            continue
        if entry.effective_date > to_date:
            break
        for line in entry.lines:
            if line.account_id != account_id:
                continue
            running += line.debit - line.credit
            total_debit += line.debit
            total_credit += line.credit
            lines.append(
                PostedLedgerLine(
                    date=entry.effective_date,
                    entry_id=entry.entry_id,
                    entry_description=entry.description,
                    line_description=line.description,
                    debit=line.debit,
                    credit=line.credit,
                    running_balance=running,
                )
            )

    logger.info(
        "account_ledger_built",
        extra={
            "account_id": account_id,
            "period_start": from_date,
            "period_end": to_date,
            "line_count": len(lines),
            "closing_balance": running,
        },
    )
    return AccountLedgerReport(
        account_id=account_id,
        account_code=account.code,
        account_name=account.name,
        category=account.category,
        period_start=from_date,
        period_end=to_date,
        opening_balance=opening,
        lines=tuple(lines),
        closing_balance=running,
        total_debit=total_debit,
        total_credit=total_credit,
        warnings=merge_warnings(warnings),
    )


def build_general_ledger(
    accounts: Any,
    journal_entries: Any,
    from_date: date,
    to_date: date,
) -> GeneralLedgerReport:
    """
    Every line of every entry dated in [from_date, to_date], chronological.

    No running balance.  Account names come from the registry; a line on
    an unknown account is still listed (``account_known=False``, empty
    name) with an UNKNOWN_ACCOUNT warning.
    """
    account_list = resolve_accounts(accounts, "general_ledger")
    entry_list = resolve_entries(journal_entries, "general_ledger")
    check_range(from_date, to_date, "general_ledger")

    names = {a.account_id: a.name for a in account_list}
    dated, warnings = _chronological(entry_list)

    lines: list[GeneralLedgerLine] = []
    total_debit = ZERO
    total_credit = ZERO
    for entry in dated:
        if entry.effective_date < from_date:
            continue
        if entry.effective_date > to_date:
            break
        for line in entry.lines:
            known = line.account_id in names
            if not known:
                warnings.append(unknown_account_warning(entry.entry_id, line.account_id))
            total_debit += line.debit
            total_credit += line.credit
            lines.append(
                GeneralLedgerLine(
                    date=entry.effective_date,
                    entry_id=entry.entry_id,
                    entry_description=entry.description,
                    account_id=line.account_id,
                    account_name=names.get(line.account_id, ""),
                    cached_account_name=line.account_name,
                    account_known=known,
                    line_description=line.description,
                    debit=line.debit,
                    credit=line.credit,
                )
            )

    logger.info(
        "general_ledger_built",
        extra={
            "period_start": from_date,
            "period_end": to_date,
            "line_count": len(lines),
        },
    )
    return GeneralLedgerReport(
        period_start=from_date,
        period_end=to_date,
        lines=tuple(lines),
        total_debit=total_debit,
        total_credit=total_credit,
        warnings=merge_warnings(warnings),
    )
