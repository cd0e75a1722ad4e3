"""Sales adapters: invoices, annulments, payments and credit notes."""

from ledger_modules.sales.credit_notes import (
    CreditNoteAccountingService,
    CreditNotePostingOutcome,
)
from ledger_modules.sales.service import SalesAccountingService

__all__ = [
    "CreditNoteAccountingService",
    "CreditNotePostingOutcome",
    "SalesAccountingService",
]
