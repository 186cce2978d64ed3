"""
Journal integrity checks.

Pure functions that turn data-quality problems into ``IntegrityWarning``
values.  Every warning created here is also logged at WARNING level so
that operators see broken books even when a caller ignores the report's
``warnings`` tuple.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from bursar_kernel.domain.values import BALANCE_EPSILON, JournalEntryData
from bursar_kernel.logging_config import get_logger
from bursar_modules.reporting.models import IntegrityWarning, WarningCode

logger = get_logger("modules.reporting.integrity")


def unknown_account_warning(entry_id: str, account_id: str) -> IntegrityWarning:
    logger.warning(
        "journal_line_unknown_account",
        extra={"entry_id": entry_id, "account_id": account_id},
    )
    return IntegrityWarning(
        code=WarningCode.UNKNOWN_ACCOUNT,
        message=f"Entry {entry_id} has a line on unknown account {account_id}",
        entry_id=entry_id,
        account_id=account_id,
    )


def malformed_date_warning(record_id: str, record_type: str = "journal entry") -> IntegrityWarning:
    logger.warning(
        "record_excluded_malformed_date",
        extra={"entry_id": record_id, "record_type": record_type},
    )
    return IntegrityWarning(
        code=WarningCode.MALFORMED_DATE,
        message=f"{record_type.capitalize()} {record_id} has no usable date and was excluded",
        entry_id=record_id,
    )


def find_unbalanced_entries(
    entries: Iterable[JournalEntryData],
    epsilon: Decimal = BALANCE_EPSILON,
) -> tuple[IntegrityWarning, ...]:
    """
    One UNBALANCED_ENTRY warning per entry whose debits and credits differ
    by more than ``epsilon``.  ``delta`` is debits minus credits.
    """
    warnings: list[IntegrityWarning] = []
    for entry in entries:
        delta = entry.imbalance
        if abs(delta) <= epsilon:
            continue
        logger.warning(
            "journal_entry_unbalanced",
            extra={"entry_id": entry.entry_id, "delta": delta},
        )
        warnings.append(
            IntegrityWarning(
                code=WarningCode.UNBALANCED_ENTRY,
                message=(
                    f"Entry {entry.entry_id} debits {entry.total_debit} "
                    f"!= credits {entry.total_credit}"
                ),
                entry_id=entry.entry_id,
                delta=delta,
            )
        )
    return tuple(warnings)


def merge_warnings(*groups: Iterable[IntegrityWarning]) -> tuple[IntegrityWarning, ...]:
    """Concatenate warning groups, dropping exact duplicates, keeping order."""
    seen: set[IntegrityWarning] = set()
    merged: list[IntegrityWarning] = []
    for group in groups:
        for warning in group:
            if warning in seen:
                continue
            seen.add(warning)
            merged.append(warning)
    return tuple(merged)
