"""Selectors for the bursar kernel (read side)."""

from bursar_kernel.selectors.account_selector import AccountRegistry, AccountSelector
from bursar_kernel.selectors.fee_selector import FeeSelector
from bursar_kernel.selectors.journal_selector import JournalSelector, JournalStore

__all__ = [
    "AccountRegistry",
    "AccountSelector",
    "JournalStore",
    "JournalSelector",
    "FeeSelector",
]
