"""
Fee-Transaction Adapter.

Responsibility
--------------
Student fee transactions are a ledger kept beside the journal: a billed
fee is a ``debit``, a payment a ``credit``.  The cash-flow statement needs
one figure from it -- cash actually received from students in a period --
and this module computes it.  The financial-ratio report needs another:
how much students owe in total, and how much they have paid ahead.

A payment whose method names a non-cash settlement (bursary, scholarship)
reduced what the student owes without bringing money in, so it is counted
separately and left out of the cash figure.

Non-goals
---------
* Does NOT post journal entries for fee transactions and does NOT
  reconcile fee cash against journal cash.  The two ledgers are reported
  side by side.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from bursar_kernel.domain.values import ZERO, FeeTransactionData, FeeTransactionType
from bursar_kernel.logging_config import get_logger

logger = get_logger("modules.fees.adapter")

DEFAULT_NON_CASH_KEYWORDS: tuple[str, ...] = ("bursary", "scholarship")


@dataclass(frozen=True)
class FeeCollectionSummary:
    """Fee activity for a period, split by cash effect."""

    period_start: date
    period_end: date
    cash_collected: Decimal
    non_cash_credits: Decimal
    billed: Decimal
    payment_count: int
    # Transactions with no usable date, excluded from every figure
    undated_transaction_ids: tuple[str, ...] = ()


def is_non_cash_payment(
    payment_method: str | None,
    keywords: Iterable[str] = DEFAULT_NON_CASH_KEYWORDS,
) -> bool:
    """True when the method contains a non-cash keyword (case-insensitive)."""
    if not payment_method:
        return False
    method = payment_method.lower()
    return any(keyword.lower() in method for keyword in keywords)


def summarize_fee_collections(
    transactions: Iterable[FeeTransactionData],
    from_date: date,
    to_date: date,
    non_cash_payment_keywords: Iterable[str] = DEFAULT_NON_CASH_KEYWORDS,
) -> FeeCollectionSummary:
    """
    Split fee transactions dated in [from_date, to_date].

    Undated transactions are excluded and listed in
    ``undated_transaction_ids``.
    """
    keywords = tuple(non_cash_payment_keywords)
    cash = ZERO
    non_cash = ZERO
    billed = ZERO
    payments = 0
    undated: list[str] = []

    for tx in transactions:
        tx_date = tx.transaction_date
        if tx_date is None:
            undated.append(tx.transaction_id)
            continue
        if tx_date < from_date or tx_date > to_date:
            continue
        if tx.type == FeeTransactionType.DEBIT:
            billed += tx.amount
        elif is_non_cash_payment(tx.payment_method, keywords):
            non_cash += tx.amount
        else:
            cash += tx.amount
            payments += 1

    logger.debug(
        "fee_collections_summarized",
        extra={
            "period_start": from_date,
            "period_end": to_date,
            "cash_collected": cash,
            "non_cash_credits": non_cash,
            "payment_count": payments,
        },
    )
    return FeeCollectionSummary(
        period_start=from_date,
        period_end=to_date,
        cash_collected=cash,
        non_cash_credits=non_cash,
        billed=billed,
        payment_count=payments,
        undated_transaction_ids=tuple(undated),
    )


def fee_cash_collected(
    transactions: Iterable[FeeTransactionData],
    from_date: date,
    to_date: date,
    non_cash_payment_keywords: Iterable[str] = DEFAULT_NON_CASH_KEYWORDS,
) -> Decimal:
    """Cash received from students in the period."""
    return summarize_fee_collections(
        transactions, from_date, to_date, non_cash_payment_keywords,
    ).cash_collected


@dataclass(frozen=True)
class StudentDuesPosition:
    """
    What students owe the school, and what it holds in advance, as of a date.

    Each student's position is billed (debit) minus paid (credit) over
    transactions dated on or before ``as_of_date``.  A positive position is
    a receivable, a negative one a fee paid in advance; the two are never
    netted across students.
    """

    as_of_date: date
    receivables: Decimal
    advances: Decimal
    students_owing: int
    students_in_advance: int
    undated_transaction_ids: tuple[str, ...] = ()


def summarize_student_dues(
    transactions: Iterable[FeeTransactionData],
    as_of_date: date,
) -> StudentDuesPosition:
    """Split per-student fee balances into receivables and advances."""
    positions: dict[str, Decimal] = {}
    undated: list[str] = []
    for tx in transactions:
        if tx.transaction_date is None:
            undated.append(tx.transaction_id)
            continue
        if tx.transaction_date > as_of_date:
            continue
        signed = tx.amount if tx.type == FeeTransactionType.DEBIT else -tx.amount
        positions[tx.student_id] = positions.get(tx.student_id, ZERO) + signed

    owing = [p for p in positions.values() if p > ZERO]
    ahead = [-p for p in positions.values() if p < ZERO]

    logger.debug(
        "student_dues_summarized",
        extra={
            "as_of": as_of_date,
            "student_count": len(positions),
            "receivables": sum(owing, ZERO),
            "advances": sum(ahead, ZERO),
        },
    )
    return StudentDuesPosition(
        as_of_date=as_of_date,
        receivables=sum(owing, ZERO),
        advances=sum(ahead, ZERO),
        students_owing=len(owing),
        students_in_advance=len(ahead),
        undated_transaction_ids=tuple(undated),
    )
