"""
Credit Note Accounting (``ledger_modules.sales.credit_notes``).

Responsibility
--------------
Posts credit notes (returns and voids against an electronic invoice) and
the reversal of cost of sales for goods that come back into stock.

Architecture
------------
Layer: **Modules** -- thin glue over the kernel.

``CreditNoteAccountingService.record_credit_note`` is the entry point the
credit-note business flow calls after saving the document.  Accounting
here is best-effort relative to that document: a tenant that has not
finished its accounting setup must still be able to issue credit notes.
``ConfigurationIncompleteError`` is therefore caught, logged and reported
back in ``CreditNotePostingOutcome`` instead of raised.  Every other error
propagates.

Invariants
----------
- Only invoices whose electronic status is SENT or ACCEPTED may receive a
  credit note.  Checked before anything posts.
- The credit-note entry (``CREDIT_NOTE``) and its cost reversal
  (``CREDIT_NOTE_COST_REVERSAL``) use different source types, so both can
  exist for one credit note and each posts at most once.

Failure Modes
-------------
- ``CreditNoteNotAllowedError``: invoice not SENT/ACCEPTED.
- ``SourceDocumentNotFoundError``: credit note missing or foreign.
- ``ConfigurationIncompleteError``: from ``post_credit_note`` and
  ``reverse_cost_for_return`` when called directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session, selectinload

from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.posting_intent import IntentLine, PostingIntent, SourceType
from ledger_kernel.exceptions import ConfigurationIncompleteError, CreditNoteNotAllowedError
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_kernel.models.journal import JournalEntry, JournalEntryType
from ledger_kernel.services.posting_service import SourcePostingService
from ledger_modules._posting_helpers import (
    customer_third_party,
    document_date,
    load_source_document,
)
from ledger_modules.sales.orm import (
    CreditNoteItemModel,
    CreditNoteModel,
    ElectronicStatus,
    InvoiceModel,
)

logger = get_logger("modules.credit_notes")

CREDIT_NOTE_ROLES = ("accounts_receivable", "sales_revenue", "vat_generated")


@dataclass(frozen=True)
class CreditNotePostingOutcome:
    """
    What accounting did for one credit note.

    ``accounting_posted`` is False when any requested posting was skipped
    for missing configuration; ``errors`` then carries the messages to show
    the operator.
    """

    accounting_posted: bool
    credit_note_entry: JournalEntry | None = None
    cost_reversal_entry: JournalEntry | None = None
    errors: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Intent builders
# ---------------------------------------------------------------------------


def credit_note_intent(credit_note: CreditNoteModel) -> PostingIntent:
    """Mirror of the invoice posting: revenue and VAT debit, AR credit."""
    invoice = credit_note.invoice
    customer = customer_third_party(invoice.customer if invoice is not None else None)
    invoice_number = invoice.number if invoice is not None else ""
    return PostingIntent.build(
        source_type=SourceType.CREDIT_NOTE,
        source_doc_id=str(credit_note.id),
        entry_type=JournalEntryType.JOURNAL.value,
        entry_date=document_date(credit_note.created_at),
        description=f"Credit note - {credit_note.number} - Invoice {invoice_number}",
        reference=credit_note.number,
        lines=[
            IntentLine.debit(
                "sales_revenue",
                credit_note.subtotal,
                f"Sales return - Credit note {credit_note.number}",
            ),
            IntentLine.debit(
                "vat_generated",
                credit_note.tax,
                f"VAT reversal - Credit note {credit_note.number}",
            ),
            IntentLine.credit(
                "accounts_receivable",
                credit_note.total,
                f"Credit note {credit_note.number}",
                third_party=customer,
            ),
        ],
        extra_roles=CREDIT_NOTE_ROLES,
    )


def returned_cost(items: list[CreditNoteItemModel]) -> Decimal:
    """Σ(variant cost, else product cost, × quantity) of returned items."""
    total = Decimal("0")
    for item in items:
        unit_cost = item.variant.cost if item.variant is not None else None
        if not unit_cost:
            unit_cost = item.product.cost
        total += unit_cost * item.quantity
    return total


def cost_reversal_intent(
    credit_note: CreditNoteModel, total_cost: Decimal
) -> PostingIntent:
    return PostingIntent.build(
        source_type=SourceType.CREDIT_NOTE_COST_REVERSAL,
        source_doc_id=str(credit_note.id),
        entry_type=JournalEntryType.JOURNAL.value,
        entry_date=document_date(credit_note.created_at),
        description=f"Cost of sales reversal - Credit note {credit_note.number}",
        reference=credit_note.number,
        lines=[
            IntentLine.debit(
                "inventory",
                total_cost,
                f"Inventory return - Credit note {credit_note.number}",
            ),
            IntentLine.credit(
                "cost_of_sales",
                total_cost,
                f"Cost of sales reversal - Credit note {credit_note.number}",
            ),
        ],
    )


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class CreditNoteAccountingService:
    """Credit-note and cost-reversal postings for one session."""

    def __init__(self, session: Session, clock: Clock | None = None):
        self._session = session
        self._posting = SourcePostingService(session, clock=clock or SystemClock())

    def _load(self, credit_note_id: UUID | str, tenant_id: str) -> CreditNoteModel:
        return load_source_document(
            self._session,
            CreditNoteModel,
            credit_note_id,
            tenant_id,
            "CreditNote",
            options=(
                selectinload(CreditNoteModel.invoice).selectinload(InvoiceModel.customer),
                selectinload(CreditNoteModel.items).selectinload(CreditNoteItemModel.product),
                selectinload(CreditNoteModel.items).selectinload(CreditNoteItemModel.variant),
            ),
        )

    def post_credit_note(
        self, credit_note_id: UUID | str, tenant_id: str, user_id: str
    ) -> JournalEntry:
        """Post the credit-note entry (idempotent).  Configuration errors propagate."""
        credit_note = self._load(credit_note_id, tenant_id)
        return self._posting.post(tenant_id, user_id, credit_note_intent(credit_note))

    def reverse_cost_for_return(
        self,
        credit_note_id: UUID | str,
        warehouse_id: str | None,
        tenant_id: str,
        user_id: str,
    ) -> JournalEntry | None:
        """
        Put the cost of returned goods back into inventory.

        Returns None when the returned items carry no cost.  ``warehouse_id``
        identifies where stock was received; the ledger only logs it.
        """
        credit_note = self._load(credit_note_id, tenant_id)
        total_cost = returned_cost(credit_note.items)
        if total_cost <= 0:
            logger.info(
                "cost_reversal_skipped",
                extra={
                    "tenant_id": tenant_id,
                    "credit_note_id": str(credit_note.id),
                    "total_cost": total_cost,
                },
            )
            return None

        entry = self._posting.post(
            tenant_id, user_id, cost_reversal_intent(credit_note, total_cost)
        )
        logger.info(
            "cost_reversal_posted",
            extra={
                "tenant_id": tenant_id,
                "credit_note_id": str(credit_note.id),
                "warehouse_id": warehouse_id,
                "entry_id": str(entry.id),
            },
        )
        return entry

    def record_credit_note(
        self,
        credit_note_id: UUID | str,
        tenant_id: str,
        user_id: str,
        reverse_inventory: bool = False,
        warehouse_id: str | None = None,
    ) -> CreditNotePostingOutcome:
        """
        Account for a saved credit note, best-effort.

        Raises:
            CreditNoteNotAllowedError: if the invoice is not an electronic
                invoice in SENT or ACCEPTED state.
            SourceDocumentNotFoundError: if the credit note does not exist
                for the tenant.
        """
        credit_note = self._load(credit_note_id, tenant_id)
        invoice = credit_note.invoice
        if invoice.electronic_status not in ElectronicStatus.CREDITABLE:
            raise CreditNoteNotAllowedError(str(invoice.id), invoice.electronic_status)

        errors: list[str] = []
        entry = None
        cost_entry = None

        with LogContext.bind(tenant_id=tenant_id, actor_id=user_id):
            try:
                entry = self.post_credit_note(credit_note.id, tenant_id, user_id)
            except ConfigurationIncompleteError as exc:
                logger.warning(
                    "credit_note_accounting_skipped",
                    extra={
                        "credit_note_id": str(credit_note.id),
                        "missing_roles": exc.missing_roles,
                    },
                )
                errors.append(str(exc))

            if reverse_inventory:
                try:
                    cost_entry = self.reverse_cost_for_return(
                        credit_note.id, warehouse_id, tenant_id, user_id
                    )
                except ConfigurationIncompleteError as exc:
                    logger.warning(
                        "cost_reversal_accounting_skipped",
                        extra={
                            "credit_note_id": str(credit_note.id),
                            "missing_roles": exc.missing_roles,
                        },
                    )
                    errors.append(str(exc))

        return CreditNotePostingOutcome(
            accounting_posted=not errors,
            credit_note_entry=entry,
            cost_reversal_entry=cost_entry,
            errors=tuple(errors),
        )
