"""Pure domain layer: value objects, raw-record parsing, and the clock."""

from bursar_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from bursar_kernel.domain.values import (
    BALANCE_EPSILON,
    REPORT_TOLERANCE,
    ZERO,
    AccountCategory,
    AccountInfo,
    BalanceSide,
    CashRecord,
    FeeTransactionData,
    FeeTransactionType,
    JournalEntryData,
    JournalLineData,
    to_decimal,
)

__all__ = [
    "Clock",
    "SystemClock",
    "DeterministicClock",
    "ZERO",
    "BALANCE_EPSILON",
    "REPORT_TOLERANCE",
    "AccountCategory",
    "AccountInfo",
    "BalanceSide",
    "CashRecord",
    "FeeTransactionData",
    "FeeTransactionType",
    "JournalEntryData",
    "JournalLineData",
    "to_decimal",
]
