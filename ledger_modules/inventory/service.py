"""
Inventory Accounting Service (``ledger_modules.inventory.service``).

Responsibility
--------------
Posts the two inventory-valued events: cost of sales when an invoice
ships stock-tracked goods, and inventory purchase receipts from suppliers.

Architecture
------------
Layer: **Modules** -- thin glue over the kernel.  Amounts come from the
source documents (product cost x quantity) or from the caller (purchase
total); this module does not value inventory itself.

Invariants
----------
- Only ``track_stock`` products contribute to cost of sales.  Services and
  other untracked items never move inventory.
- A zero cost of sales posts nothing (returns None).
- Each invoice posts cost of sales at most once (``COST_OF_SALES``); each
  purchase receipt at most once (``PURCHASE``).

Failure Modes
-------------
- ``SourceDocumentNotFoundError``: invoice missing or foreign.
- ``ConfigurationIncompleteError``: inventory / cost of sales / AP unset.

Usage::

    service = InventoryAccountingService(session)
    service.post_inventory_purchase(
        "PO-1001", "acme", "u-1", Decimal("500.00"),
        supplier_id="s-9", supplier_name="Proveedor XYZ", supplier_nit="900123",
    )
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session, selectinload

from ledger_kernel.db.types import to_money
from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.posting_intent import (
    IntentLine,
    PostingIntent,
    SourceType,
    ThirdParty,
)
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.journal import JournalEntry, JournalEntryType
from ledger_kernel.services.posting_service import SourcePostingService
from ledger_modules._posting_helpers import document_date, load_source_document
from ledger_modules.sales.orm import InvoiceItemModel, InvoiceModel

logger = get_logger("modules.inventory")


def cost_of_sales(items: list[InvoiceItemModel]) -> Decimal:
    """Σ(product cost × quantity) over stock-tracked items."""
    return sum(
        (item.product.cost * item.quantity for item in items if item.product.track_stock),
        Decimal("0"),
    )


def cost_of_sales_intent(invoice: InvoiceModel, total_cost: Decimal) -> PostingIntent:
    return PostingIntent.build(
        source_type=SourceType.COST_OF_SALES,
        source_doc_id=str(invoice.id),
        entry_type=JournalEntryType.COST_SALES.value,
        entry_date=document_date(invoice.created_at),
        description=f"Cost of sales - Invoice {invoice.number}",
        reference=invoice.number,
        lines=[
            IntentLine.debit(
                "cost_of_sales",
                total_cost,
                f"Cost of sales - Invoice {invoice.number}",
            ),
            IntentLine.credit(
                "inventory",
                total_cost,
                f"Inventory issue - Invoice {invoice.number}",
            ),
        ],
    )


def inventory_purchase_intent(
    purchase_id: str,
    entry_date: date,
    total_cost: Decimal,
    supplier: ThirdParty | None,
) -> PostingIntent:
    return PostingIntent.build(
        source_type=SourceType.PURCHASE,
        source_doc_id=purchase_id,
        entry_type=JournalEntryType.EXPENSE.value,
        entry_date=entry_date,
        description="Inventory purchase",
        reference=purchase_id,
        lines=[
            IntentLine.debit("inventory", total_cost, "Inventory purchase"),
            IntentLine.credit(
                "accounts_payable", total_cost, "Supplier", third_party=supplier
            ),
        ],
    )


class InventoryAccountingService:
    """Cost-of-sales and purchase-receipt postings for one session."""

    def __init__(self, session: Session, clock: Clock | None = None):
        self._session = session
        self._clock = clock or SystemClock()
        self._posting = SourcePostingService(session, clock=self._clock)

    def post_cost_of_sales(
        self, invoice_id: UUID | str, tenant_id: str, user_id: str
    ) -> JournalEntry | None:
        """Post cost of sales for an invoice; None when nothing tracked was sold."""
        invoice = load_source_document(
            self._session,
            InvoiceModel,
            invoice_id,
            tenant_id,
            "Invoice",
            options=(selectinload(InvoiceModel.items).selectinload(InvoiceItemModel.product),),
        )
        total_cost = cost_of_sales(invoice.items)
        if total_cost == 0:
            logger.info(
                "cost_of_sales_skipped",
                extra={"tenant_id": tenant_id, "invoice_id": str(invoice.id)},
            )
            return None
        return self._posting.post(
            tenant_id, user_id, cost_of_sales_intent(invoice, total_cost)
        )

    def post_inventory_purchase(
        self,
        purchase_id: str,
        tenant_id: str,
        user_id: str,
        total_cost: Decimal,
        supplier_id: str | None = None,
        supplier_name: str | None = None,
        supplier_nit: str | None = None,
    ) -> JournalEntry:
        """
        Post a goods receipt: inventory debit, accounts payable credit.

        The purchase document lives outside the ledger, so its id and total
        are passed in.  The entry is dated today.
        """
        supplier = None
        if supplier_id or supplier_name or supplier_nit:
            supplier = ThirdParty(id=supplier_id, name=supplier_name, nit=supplier_nit)
        intent = inventory_purchase_intent(
            str(purchase_id), self._clock.today(), to_money(total_cost), supplier
        )
        return self._posting.post(tenant_id, user_id, intent)
