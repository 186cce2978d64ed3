"""
Values -- Immutable domain value objects for the school ledger.

Responsibility:
    Defines the snapshot types every report is computed from: accounts,
    journal entries and lines, student fee transactions, and the standalone
    income / expense records used by the cash-flow statement.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    The ORM models (``bursar_kernel.models``) and the raw-document parser
    (``bursar_kernel.domain.records``) both convert INTO these types; the
    reporting layer consumes ONLY these types.

Invariants enforced:
    - All monetary amounts are ``Decimal`` (never ``float``).
    - All objects are frozen; collections are tuples.
    - An account's category is part of its identity and cannot change.

Failure modes:
    - ``ValueError`` from ``to_decimal`` on non-numeric or non-finite amounts.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

ZERO = Decimal("0")

# Monetary rounding tolerance for per-account balances and entry balance checks.
BALANCE_EPSILON = Decimal("0.001")

# Tolerance for report-level comparisons (trial balance, balance sheet).
REPORT_TOLERANCE = Decimal("0.01")


def to_decimal(value: Any) -> Decimal:
    """
    Coerce a raw amount into ``Decimal``.

    ``None`` and empty strings are treated as zero (an absent debit or
    credit).  Floats go through ``str()`` so ``0.1`` becomes ``Decimal("0.1")``
    rather than its binary expansion.  NaN and infinities are rejected.
    """
    if value is None or value == "":
        return ZERO
    if isinstance(value, bool):
        raise ValueError(f"Not a monetary amount: {value!r}")
    if isinstance(value, Decimal):
        result = value
    else:
        if isinstance(value, float):
            value = str(value)
        try:
            result = Decimal(value)
        except (InvalidOperation, TypeError) as exc:
            raise ValueError(f"Not a monetary amount: {value!r}") from exc
    if not result.is_finite():
        raise ValueError(f"Not a finite monetary amount: {value!r}")
    return result


class AccountCategory(str, Enum):
    """
    Chart-of-accounts category.

    - ASSET, EXPENSE: debit increases the balance
    - LIABILITY, EQUITY, REVENUE: credit increases the balance
    """

    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"

    @classmethod
    def parse(cls, value: str | AccountCategory) -> AccountCategory:
        """Accept enum members and case-insensitive names ("Asset", "asset")."""
        if isinstance(value, AccountCategory):
            return value
        return cls(str(value).strip().lower())

    @property
    def natural_side(self) -> BalanceSide:
        if self in (AccountCategory.ASSET, AccountCategory.EXPENSE):
            return BalanceSide.DEBIT
        return BalanceSide.CREDIT


class BalanceSide(str, Enum):
    """Column a balance is reported in."""

    DEBIT = "debit"
    CREDIT = "credit"
    NONE = "none"


class FeeTransactionType(str, Enum):
    """Student fee ledger movement: DEBIT = billed, CREDIT = paid."""

    DEBIT = "debit"
    CREDIT = "credit"


@dataclass(frozen=True)
class AccountInfo:
    """
    Snapshot of a chart-of-accounts entry.

    This is the bridge between the ORM ``Account`` model (or a raw document)
    and the pure reporting functions.
    """

    account_id: str
    name: str
    category: AccountCategory
    code: str | None = None
    parent_id: str | None = None
    description: str | None = None

    @property
    def sort_key(self) -> str:
        """Code when present, else name -- the order reports list accounts in."""
        return self.code or self.name


@dataclass(frozen=True)
class JournalLineData:
    """One debit or credit line of a journal entry."""

    account_id: str
    debit: Decimal = ZERO
    credit: Decimal = ZERO
    description: str | None = None
    # Display cache captured at posting time; may drift from the registry.
    account_name: str | None = None

    @property
    def net(self) -> Decimal:
        return self.debit - self.credit


@dataclass(frozen=True)
class JournalEntryData:
    """
    A journal entry as read from the journal store.

    ``effective_date`` is None when the stored date was missing or could not
    be parsed; such entries are excluded from every date-window computation.
    Provenance fields are carried for audit display only.
    """

    entry_id: str
    effective_date: date | None
    description: str
    lines: tuple[JournalLineData, ...]
    source_document_id: str | None = None
    source_document_type: str | None = None
    posted_by_id: str | None = None
    posted_by_name: str | None = None

    @property
    def total_debit(self) -> Decimal:
        return sum((line.debit for line in self.lines), ZERO)

    @property
    def total_credit(self) -> Decimal:
        return sum((line.credit for line in self.lines), ZERO)

    @property
    def imbalance(self) -> Decimal:
        """Debits minus credits; zero for a well-formed entry."""
        return self.total_debit - self.total_credit

    @property
    def is_balanced(self) -> bool:
        return abs(self.imbalance) <= BALANCE_EPSILON


@dataclass(frozen=True)
class FeeTransactionData:
    """A per-student fee ledger record. Not a journal entry."""

    transaction_id: str
    student_id: str
    type: FeeTransactionType
    amount: Decimal
    transaction_date: date | None
    payment_method: str | None = None
    description: str | None = None
    journal_entry_id: str | None = None


@dataclass(frozen=True)
class CashRecord:
    """A standalone income or expense record (non-fee)."""

    record_id: str
    record_date: date | None
    amount: Decimal
    description: str = ""
    account_id: str | None = None
    category: str | None = None
    payment_method: str | None = None
