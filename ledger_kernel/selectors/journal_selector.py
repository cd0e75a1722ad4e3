"""
Module: ledger_kernel.selectors.journal_selector
Responsibility: Read-only queries over journal entries and journal lines:
    listing, drill-down, source-document lookup and line-level ledger queries.
Architecture position: Kernel > Selectors.  May import from models/ and db/.

Invariants enforced:
    - Tenant scoping on every query.
    - Listings never eager-load lines; drill-down loads lines and their
      accounts in the same round trip.
    - Deterministic ordering: entries by date then number (both descending),
      lines by entry date, entry number and line_seq.
"""

from datetime import date
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import joinedload, selectinload

from ledger_kernel.models.journal import JournalEntry, JournalLine
from ledger_kernel.selectors.base import BaseSelector

# Passing this status to list_entries disables the status filter.
ALL_STATUSES = "ALL"


class JournalSelector(BaseSelector[JournalEntry]):
    """Read-side queries for the journal."""

    def get_entry(
        self, tenant_id: str, entry_id: UUID, with_lines: bool = True
    ) -> JournalEntry | None:
        stmt = select(JournalEntry).where(
            JournalEntry.id == entry_id,
            JournalEntry.tenant_id == tenant_id,
        )
        if with_lines:
            stmt = stmt.options(
                selectinload(JournalEntry.lines).joinedload(JournalLine.account)
            )
        return self.session.execute(stmt).scalar_one_or_none()

    def list_entries(
        self,
        tenant_id: str,
        status: str | None = None,
        start: date | None = None,
        end: date | None = None,
    ) -> list[JournalEntry]:
        """
        Entries for a tenant, newest first.

        Args:
            status: DRAFT / APPROVED, or None / "ALL" for every status.
            start: Inclusive lower bound on entry_date.
            end: Inclusive upper bound on entry_date.
        """
        stmt = select(JournalEntry).where(JournalEntry.tenant_id == tenant_id)
        status_value = getattr(status, "value", status)
        if status_value is not None and status_value != ALL_STATUSES:
            stmt = stmt.where(JournalEntry.status == status_value)
        if start is not None:
            stmt = stmt.where(JournalEntry.entry_date >= start)
        if end is not None:
            stmt = stmt.where(JournalEntry.entry_date <= end)
        stmt = stmt.order_by(JournalEntry.entry_date.desc(), JournalEntry.number.desc())
        return list(self.session.scalars(stmt))

    def find_by_source(
        self, tenant_id: str, source_doc_id: str, source_type: str
    ) -> JournalEntry | None:
        return self.session.execute(
            select(JournalEntry).where(
                JournalEntry.tenant_id == tenant_id,
                JournalEntry.source_doc_id == source_doc_id,
                JournalEntry.source_type == source_type,
            )
        ).scalar_one_or_none()

    def list_lines(
        self,
        tenant_id: str,
        account_id: UUID | None = None,
        third_party_id: str | None = None,
        start: date | None = None,
        end: date | None = None,
    ) -> list[JournalLine]:
        """Journal lines for an account and/or third party, oldest first."""
        stmt = (
            select(JournalLine)
            .join(JournalLine.entry)
            .where(JournalEntry.tenant_id == tenant_id)
            .options(
                joinedload(JournalLine.entry),
                joinedload(JournalLine.account),
            )
        )
        if account_id is not None:
            stmt = stmt.where(JournalLine.account_id == account_id)
        if third_party_id is not None:
            stmt = stmt.where(JournalLine.third_party_id == third_party_id)
        if start is not None:
            stmt = stmt.where(JournalEntry.entry_date >= start)
        if end is not None:
            stmt = stmt.where(JournalEntry.entry_date <= end)
        stmt = stmt.order_by(
            JournalEntry.entry_date, JournalEntry.number, JournalLine.line_seq
        )
        return list(self.session.scalars(stmt))
