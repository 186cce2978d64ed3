"""ORM models for the school ledger."""

from bursar_kernel.models.account import Account
from bursar_kernel.models.cash_record import CashRecordKind, CashRecordModel
from bursar_kernel.models.fee_transaction import FeeTransaction
from bursar_kernel.models.journal import JournalEntry, JournalLine

__all__ = [
    "Account",
    "JournalEntry",
    "JournalLine",
    "FeeTransaction",
    "CashRecordModel",
    "CashRecordKind",
]
