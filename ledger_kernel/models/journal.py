"""
Module: ledger_kernel.models.journal
Responsibility: ORM persistence for journal entries and journal lines -- the
    single source of financial truth in the ledger.
Architecture position: Kernel > Models.  May import from db/base.py only.
    MUST NOT import from services/, selectors/ or domain/.

Invariants enforced:
    - (tenant_id, number) is unique: one human-readable number per entry.
    - (tenant_id, source_doc_id, source_type) is unique: a business document
      posts at most once per adapter.  Reversal entries use a distinct
      source_type suffix and so form their own pair.  NULL source ids (manual
      entries) never collide.
    - total_debit / total_credit are cached sums of the lines; JournalService
      is the only writer and computes them from the same lines it persists.

Failure modes:
    - IntegrityError on a duplicate number or duplicate source tag.  The
      source-tag violation is translated into "already posted" by
      SourcePostingService.

Audit relevance:
    Lines are never updated after creation.  Corrections are new entries
    (reversals), so the journal is append-only history.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import (
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_kernel.db.base import TrackedBase, UUIDString

if TYPE_CHECKING:
    from ledger_kernel.models.account import Account


class JournalEntryStatus(str, Enum):
    """Lifecycle status of a journal entry.

    Contract: Transitions are one-way: DRAFT -> APPROVED.
    """

    DRAFT = "DRAFT"
    APPROVED = "APPROVED"


class JournalEntryType(str, Enum):
    """Voucher type of a journal entry."""

    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    COST_SALES = "COST_SALES"
    JOURNAL = "JOURNAL"
    COMPROBANTE_EGRESO = "COMPROBANTE_EGRESO"


class JournalEntry(TrackedBase):
    """
    Journal entry header -- the atomic unit of double-entry accounting.

    Contract:
        number has the form ``{period}-{seq:04d}`` where period is the
        entry's ``YYYY-MM`` month and seq is allocated from the tenant's
        per-period sequence counter.

    Guarantees:
        - status is DRAFT until approve_entry succeeds, then APPROVED.
        - At APPROVED, |total_debit - total_credit| <= tolerance.

    Non-goals:
        - This model does NOT enforce balance; the approval gate lives in
          JournalService.
    """

    __tablename__ = "journal_entries"

    __table_args__ = (
        UniqueConstraint("tenant_id", "number", name="uq_journal_tenant_number"),
        UniqueConstraint(
            "tenant_id",
            "source_doc_id",
            "source_type",
            name="uq_journal_tenant_source",
        ),
        Index("idx_journal_tenant_period", "tenant_id", "period"),
        Index("idx_journal_tenant_date", "tenant_id", "entry_date"),
        Index("idx_journal_tenant_status", "tenant_id", "status"),
    )

    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False)

    # Human-readable number: 2025-03-0001
    number: Mapped[str] = mapped_column(String(20), nullable=False)

    entry_date: Mapped[date] = mapped_column(Date, nullable=False)

    # Accounting period (YYYY-MM)
    period: Mapped[str] = mapped_column(String(7), nullable=False)

    entry_type: Mapped[JournalEntryType] = mapped_column(String(30), nullable=False)

    description: Mapped[str] = mapped_column(String(500), nullable=False)

    reference: Mapped[str | None] = mapped_column(String(100), nullable=True)

    status: Mapped[JournalEntryStatus] = mapped_column(
        String(10),
        default=JournalEntryStatus.DRAFT.value,
        nullable=False,
    )

    total_debit: Mapped[Decimal] = mapped_column(
        Numeric(38, 9), default=Decimal("0"), nullable=False
    )

    total_credit: Mapped[Decimal] = mapped_column(
        Numeric(38, 9), default=Decimal("0"), nullable=False
    )

    # Originating business document (idempotency key with tenant_id)
    source_doc_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    source_type: Mapped[str | None] = mapped_column(String(50), nullable=True)

    approved_by_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    approved_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    lines: Mapped[list["JournalLine"]] = relationship(
        back_populates="entry",
        cascade="all, delete-orphan",
        order_by="JournalLine.line_seq",
        lazy="select",
    )

    def __repr__(self) -> str:
        return f"<JournalEntry {self.number} status={self.status}>"

    @property
    def is_draft(self) -> bool:
        return self.status == JournalEntryStatus.DRAFT

    @property
    def is_approved(self) -> bool:
        return self.status == JournalEntryStatus.APPROVED

    @property
    def difference(self) -> Decimal:
        """Absolute gap between cached debit and credit totals."""
        return abs(self.total_debit - self.total_credit)


class JournalLine(TrackedBase):
    """
    Individual debit or credit line within a journal entry.

    Contract:
        Each line belongs to exactly one JournalEntry and references exactly
        one Account.  Exactly one of debit/credit is non-zero by convention;
        adapters drop zero-amount lines before they reach the journal.

    Guarantees:
        - debit and credit are never negative.
        - line_seq gives deterministic ordering within the entry.
    """

    __tablename__ = "journal_lines"

    __table_args__ = (
        Index("idx_line_entry", "journal_entry_id"),
        Index("idx_line_account", "account_id"),
        Index("idx_line_third_party", "third_party_id"),
    )

    journal_entry_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("journal_entries.id"),
        nullable=False,
    )

    account_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("accounting_accounts.id"),
        nullable=False,
    )

    description: Mapped[str | None] = mapped_column(String(500), nullable=True)

    debit: Mapped[Decimal] = mapped_column(
        Numeric(38, 9), default=Decimal("0"), nullable=False
    )

    credit: Mapped[Decimal] = mapped_column(
        Numeric(38, 9), default=Decimal("0"), nullable=False
    )

    # Counterparty (customer / supplier) for third-party tracked accounts
    third_party_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    third_party_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    third_party_nit: Mapped[str | None] = mapped_column(String(50), nullable=True)

    line_seq: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    entry: Mapped["JournalEntry"] = relationship(back_populates="lines")

    account: Mapped["Account"] = relationship(back_populates="journal_lines")

    def __repr__(self) -> str:
        return f"<JournalLine Dr {self.debit} Cr {self.credit}>"
