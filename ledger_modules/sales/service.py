"""
Sales Accounting Service (``ledger_modules.sales.service``).

Responsibility
--------------
Posts sales invoices, invoice annulments and customer payments to the
journal.  Each event has a pure intent-building function (``*_intent``)
and a service method that loads the source document and hands the intent
to ``SourcePostingService``.

Architecture
------------
Layer: **Modules** -- thin glue over the kernel.

1. Load the source document, tenant-scoped (``load_source_document``).
2. Build a ``PostingIntent`` in terms of semantic roles.
3. ``SourcePostingService.post`` resolves roles, creates and tags the entry,
   or returns the entry that already exists for the document.

Invariants
----------
- An invoice posts at most once (``INVOICE``); its annulment at most once
  (``INVOICE_REVERSAL``).
- Annulment never mutates the original entry.  It posts a new entry whose
  lines swap every original debit and credit, keeping account and third
  party.
- Configuration errors propagate: an invoice or payment without accounting
  setup fails loudly.

Failure Modes
-------------
- ``SourceDocumentNotFoundError``: invoice/payment missing or foreign.
- ``ConfigurationIncompleteError``: a required role is unset.

Usage::

    service = SalesAccountingService(session)
    entry = service.post_invoice(invoice_id, tenant_id="acme", user_id="u-1")
"""

from __future__ import annotations

from datetime import date
from uuid import UUID

from sqlalchemy.orm import Session, selectinload

from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.posting_intent import (
    IntentLine,
    LineSide,
    PostingIntent,
    SourceType,
    ThirdParty,
)
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.journal import JournalEntry, JournalEntryType
from ledger_kernel.services.posting_service import SourcePostingService
from ledger_modules._posting_helpers import (
    customer_third_party,
    document_date,
    load_source_document,
)
from ledger_modules.sales.orm import InvoiceModel, PaymentMethod, PaymentModel

logger = get_logger("modules.sales")

INVOICE_ROLES = ("accounts_receivable", "sales_revenue", "vat_generated")
# A bank payment still requires the cash account, its fallback
PAYMENT_ROLES = ("cash", "accounts_receivable")


# ---------------------------------------------------------------------------
# Intent builders
# ---------------------------------------------------------------------------


def invoice_intent(invoice: InvoiceModel) -> PostingIntent:
    """AR debit total; revenue credit subtotal; VAT credit tax when > 0."""
    customer = customer_third_party(invoice.customer)
    return PostingIntent.build(
        source_type=SourceType.INVOICE,
        source_doc_id=str(invoice.id),
        entry_type=JournalEntryType.INCOME.value,
        entry_date=document_date(invoice.created_at),
        description=f"Sale - Invoice {invoice.number}",
        reference=invoice.number,
        lines=[
            IntentLine.debit(
                "accounts_receivable",
                invoice.total,
                f"Invoice {invoice.number}",
                third_party=customer,
            ),
            IntentLine.credit(
                "sales_revenue",
                invoice.subtotal,
                f"Sales revenue - Invoice {invoice.number}",
            ),
            IntentLine.credit(
                "vat_generated",
                invoice.tax,
                f"VAT generated - Invoice {invoice.number}",
            ),
        ],
        extra_roles=INVOICE_ROLES,
    )


def reversal_intent(
    original: JournalEntry, source_doc_id: str, entry_date: date
) -> PostingIntent:
    """Mirror of ``original``: every debit becomes a credit and vice versa."""
    lines: list[IntentLine] = []
    for line in original.lines:
        party = ThirdParty(
            id=line.third_party_id,
            name=line.third_party_name,
            nit=line.third_party_nit,
        )
        has_party = any((party.id, party.name, party.nit))
        description = f"VOID - {line.description}" if line.description else "VOID"
        if line.debit > 0:
            lines.append(
                IntentLine.for_account(
                    LineSide.CREDIT,
                    line.account_id,
                    line.debit,
                    description,
                    party if has_party else None,
                )
            )
        if line.credit > 0:
            lines.append(
                IntentLine.for_account(
                    LineSide.DEBIT,
                    line.account_id,
                    line.credit,
                    description,
                    party if has_party else None,
                )
            )
    return PostingIntent.build(
        source_type=SourceType.reversal_of(original.source_type or SourceType.INVOICE),
        source_doc_id=source_doc_id,
        entry_type=JournalEntryType.JOURNAL.value,
        entry_date=entry_date,
        description=f"VOID - {original.description}",
        reference=original.reference,
        lines=lines,
    )


def payment_debit_role(method: str, bank_configured: bool) -> str:
    """CASH -> cash; CARD/TRANSFER -> bank (cash when no bank); other -> cash."""
    if method.upper() in (PaymentMethod.CARD, PaymentMethod.TRANSFER) and bank_configured:
        return "bank"
    return "cash"


def payment_intent(payment: PaymentModel, debit_role: str) -> PostingIntent:
    invoice = payment.invoice
    invoice_number = invoice.number if invoice is not None else ""
    customer = customer_third_party(invoice.customer if invoice is not None else None)
    return PostingIntent.build(
        source_type=SourceType.PAYMENT,
        source_doc_id=str(payment.id),
        entry_type=JournalEntryType.INCOME.value,
        entry_date=document_date(payment.created_at),
        description=f"Payment received - {payment.method} - Invoice {invoice_number}".rstrip(),
        reference=f"PAY-{str(payment.id)[:8]}",
        lines=[
            IntentLine.debit(
                debit_role,
                payment.amount,
                f"Payment received - {payment.method}",
            ),
            IntentLine.credit(
                "accounts_receivable",
                payment.amount,
                f"Payment of invoice {invoice_number}".rstrip(),
                third_party=customer,
            ),
        ],
        extra_roles=PAYMENT_ROLES,
    )


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class SalesAccountingService:
    """Invoice, annulment and payment postings for one session."""

    def __init__(self, session: Session, clock: Clock | None = None):
        self._session = session
        self._clock = clock or SystemClock()
        self._posting = SourcePostingService(session, clock=self._clock)

    def post_invoice(
        self, invoice_id: UUID | str, tenant_id: str, user_id: str
    ) -> JournalEntry:
        """Post a sales invoice (idempotent)."""
        invoice = load_source_document(
            self._session,
            InvoiceModel,
            invoice_id,
            tenant_id,
            "Invoice",
            options=(selectinload(InvoiceModel.customer),),
        )
        return self._posting.post(tenant_id, user_id, invoice_intent(invoice))

    def reverse_invoice(
        self, invoice_id: UUID | str, tenant_id: str, user_id: str
    ) -> JournalEntry | None:
        """
        Post the annulment of an invoice.

        Returns None when the invoice never posted.  A second call returns
        the reversal already posted; a reversal is never itself reversed.
        """
        invoice = load_source_document(
            self._session, InvoiceModel, invoice_id, tenant_id, "Invoice"
        )
        journal = self._posting.journal
        original = journal.find_by_source(tenant_id, str(invoice.id), SourceType.INVOICE)
        if original is None:
            logger.info(
                "invoice_reversal_skipped",
                extra={"tenant_id": tenant_id, "invoice_id": str(invoice.id)},
            )
            return None

        original = journal.get_entry(tenant_id, original.id)
        intent = reversal_intent(original, str(invoice.id), self._clock.today())
        entry = self._posting.post(tenant_id, user_id, intent)
        logger.info(
            "invoice_reversed",
            extra={
                "tenant_id": tenant_id,
                "original_entry_id": str(original.id),
                "reversal_entry_id": str(entry.id),
            },
        )
        return entry

    def post_payment(
        self, payment_id: UUID | str, tenant_id: str, user_id: str
    ) -> JournalEntry:
        """Post a customer payment (idempotent)."""
        payment = load_source_document(
            self._session,
            PaymentModel,
            payment_id,
            tenant_id,
            "Payment",
            options=(selectinload(PaymentModel.invoice).selectinload(InvoiceModel.customer),),
        )
        bank_configured = (
            self._posting.config.resolve_role(tenant_id, "bank") is not None
        )
        debit_role = payment_debit_role(payment.method, bank_configured)
        if debit_role == "cash" and payment.method.upper() != PaymentMethod.CASH:
            logger.debug(
                "payment_routed_to_cash",
                extra={"payment_id": str(payment.id), "method": payment.method},
            )
        return self._posting.post(tenant_id, user_id, payment_intent(payment, debit_role))
