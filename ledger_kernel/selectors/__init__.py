"""Selectors for the ledger kernel (read side)."""

from ledger_kernel.selectors.account_selector import AccountSelector
from ledger_kernel.selectors.journal_selector import ALL_STATUSES, JournalSelector

__all__ = [
    "ALL_STATUSES",
    "AccountSelector",
    "JournalSelector",
]
