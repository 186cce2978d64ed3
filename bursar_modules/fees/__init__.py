"""
Student Fees Module (``bursar_modules.fees``).

Adapts the per-student fee ledger into the figures the cash-flow statement
and the financial-ratio report need.  Read-only.
"""

from bursar_modules.fees.adapter import (
    DEFAULT_NON_CASH_KEYWORDS,
    FeeCollectionSummary,
    StudentDuesPosition,
    fee_cash_collected,
    is_non_cash_payment,
    summarize_fee_collections,
    summarize_student_dues,
)

__all__ = [
    "DEFAULT_NON_CASH_KEYWORDS",
    "FeeCollectionSummary",
    "StudentDuesPosition",
    "fee_cash_collected",
    "is_non_cash_payment",
    "summarize_fee_collections",
    "summarize_student_dues",
]
