"""
Sales ORM Models (``ledger_modules.sales.orm``).

Responsibility
--------------
Minimal SQLAlchemy shapes of the sales documents the accounting adapters
read: customers, products and variants (for cost), invoices and their
items, payments, and credit notes and their items.

These tables belong to the sales and inventory domains of the host
application.  Adapters only read them.

Architecture position
---------------------
**Modules layer** -- persistence.  Imports from ``ledger_kernel.db.base``.
MUST NOT be imported by ``ledger_kernel``.
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_kernel.db.base import TrackedBase, UUIDString


class ElectronicStatus:
    """Electronic-invoicing states reported by the tax authority gateway."""

    PENDING = "PENDING"
    SENT = "SENT"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"

    # States in which an invoice may receive a credit note
    CREDITABLE = frozenset({SENT, ACCEPTED})


class PaymentMethod:
    CASH = "CASH"
    CARD = "CARD"
    TRANSFER = "TRANSFER"


class CreditNoteType:
    TOTAL = "TOTAL"
    PARTIAL = "PARTIAL"


# ---------------------------------------------------------------------------
# Parties and catalogue
# ---------------------------------------------------------------------------


class CustomerModel(TrackedBase):
    """Customer; ``tax_id`` is the NIT carried on third-party lines."""

    __tablename__ = "sales_customers"

    __table_args__ = (Index("idx_sales_customers_tenant", "tenant_id"),)

    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    tax_id: Mapped[str | None] = mapped_column(String(50), nullable=True)


class ProductModel(TrackedBase):
    """Product with unit cost; only ``track_stock`` products carry COGS."""

    __tablename__ = "sales_products"

    __table_args__ = (Index("idx_sales_products_tenant", "tenant_id"),)

    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    cost: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
    track_stock: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class ProductVariantModel(TrackedBase):
    """Product variant; a non-null ``cost`` overrides the product's."""

    __tablename__ = "sales_product_variants"

    product_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("sales_products.id"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    cost: Mapped[Decimal | None] = mapped_column(nullable=True)

    product: Mapped[ProductModel] = relationship()


# ---------------------------------------------------------------------------
# Invoices and payments
# ---------------------------------------------------------------------------


class InvoiceModel(TrackedBase):
    """Sales invoice header.  ``total == subtotal + tax``."""

    __tablename__ = "sales_invoices"

    __table_args__ = (Index("idx_sales_invoices_tenant", "tenant_id"),)

    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False)
    number: Mapped[str] = mapped_column(String(50), nullable=False)
    customer_id: Mapped[UUID | None] = mapped_column(
        UUIDString(), ForeignKey("sales_customers.id"), nullable=True
    )
    subtotal: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
    tax: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
    total: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
    electronic_status: Mapped[str | None] = mapped_column(String(20), nullable=True)

    customer: Mapped[CustomerModel | None] = relationship()
    items: Mapped[list["InvoiceItemModel"]] = relationship(
        back_populates="invoice",
        cascade="all, delete-orphan",
    )


class InvoiceItemModel(TrackedBase):
    __tablename__ = "sales_invoice_items"

    invoice_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("sales_invoices.id"), nullable=False
    )
    product_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("sales_products.id"), nullable=False
    )
    quantity: Mapped[Decimal] = mapped_column(nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)

    invoice: Mapped[InvoiceModel] = relationship(back_populates="items")
    product: Mapped[ProductModel] = relationship()


class PaymentModel(TrackedBase):
    """Customer payment applied to an invoice."""

    __tablename__ = "sales_payments"

    __table_args__ = (Index("idx_sales_payments_tenant", "tenant_id"),)

    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False)
    invoice_id: Mapped[UUID | None] = mapped_column(
        UUIDString(), ForeignKey("sales_invoices.id"), nullable=True
    )
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    # CASH, CARD, TRANSFER; anything else posts to cash
    method: Mapped[str] = mapped_column(String(20), nullable=False)

    invoice: Mapped[InvoiceModel | None] = relationship()


# ---------------------------------------------------------------------------
# Credit notes
# ---------------------------------------------------------------------------


class CreditNoteModel(TrackedBase):
    """Credit note (return or void) against an electronic invoice."""

    __tablename__ = "sales_credit_notes"

    __table_args__ = (Index("idx_sales_credit_notes_tenant", "tenant_id"),)

    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False)
    number: Mapped[str] = mapped_column(String(50), nullable=False)
    invoice_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("sales_invoices.id"), nullable=False
    )
    # TOTAL or PARTIAL
    type: Mapped[str] = mapped_column(String(10), nullable=False)
    subtotal: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
    tax: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
    total: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)

    invoice: Mapped[InvoiceModel] = relationship()
    items: Mapped[list["CreditNoteItemModel"]] = relationship(
        back_populates="credit_note",
        cascade="all, delete-orphan",
    )


class CreditNoteItemModel(TrackedBase):
    __tablename__ = "sales_credit_note_items"

    credit_note_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("sales_credit_notes.id"), nullable=False
    )
    product_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("sales_products.id"), nullable=False
    )
    variant_id: Mapped[UUID | None] = mapped_column(
        UUIDString(), ForeignKey("sales_product_variants.id"), nullable=True
    )
    quantity: Mapped[Decimal] = mapped_column(nullable=False)

    credit_note: Mapped[CreditNoteModel] = relationship(back_populates="items")
    product: Mapped[ProductModel] = relationship()
    variant: Mapped[ProductVariantModel | None] = relationship()
