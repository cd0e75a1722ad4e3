"""Services for the ledger kernel (write side)."""

from ledger_kernel.services.audit_service import AuditService
from ledger_kernel.services.config_service import AccountingConfigService
from ledger_kernel.services.journal_service import JournalService
from ledger_kernel.services.period_service import PeriodService, period_code
from ledger_kernel.services.posting_service import SourcePostingService
from ledger_kernel.services.sequence_service import SequenceCounter, SequenceService

__all__ = [
    "AccountingConfigService",
    "AuditService",
    "JournalService",
    "PeriodService",
    "SequenceCounter",
    "SequenceService",
    "SourcePostingService",
    "period_code",
]
