"""Domain models for the ledger kernel."""

from ledger_kernel.models.account import Account, AccountType, NormalBalance
from ledger_kernel.models.accounting_config import (
    REQUIRED_ROLES,
    ROLE_COLUMNS,
    AccountingConfig,
)
from ledger_kernel.models.audit_log import AuditAction, AuditLog
from ledger_kernel.models.fiscal_period import AccountingPeriod
from ledger_kernel.models.journal import (
    JournalEntry,
    JournalEntryStatus,
    JournalEntryType,
    JournalLine,
)

__all__ = [
    "Account",
    "AccountType",
    "NormalBalance",
    "AccountingConfig",
    "ROLE_COLUMNS",
    "REQUIRED_ROLES",
    "AccountingPeriod",
    "AuditAction",
    "AuditLog",
    "JournalEntry",
    "JournalEntryStatus",
    "JournalEntryType",
    "JournalLine",
]
