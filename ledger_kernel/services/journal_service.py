"""
JournalService -- the only writer of journal entries and journal lines.

Responsibility:
    Creates, numbers, approves and retrieves journal entries.  Every other
    component (source adapters, the host application's manual voucher
    screen) goes through this service to touch the journal.

Architecture position:
    Kernel > Services -- imperative shell.
    Called by SourcePostingService and directly by the host application.
    Reads through JournalSelector; allocates numbers through SequenceService.

Invariants enforced:
    - total_debit / total_credit equal the sums of the persisted lines; both
      are computed from the same LineInput tuple the lines are built from.
    - Numbering: ``{period}-{seq:04d}`` with seq drawn from the locked
      per-tenant-per-period counter, so numbers in a period are 1, 2, 3 ...
      with no duplicates under concurrency.
    - Entry and lines are flushed together in the caller's transaction;
      neither is visible without the other.
    - Balance gate: an entry becomes APPROVED only if
      |total_debit - total_credit| <= tolerance (0.01 by default).
    - DRAFT -> APPROVED is one-way.  There is no update or delete path.
    - No entry is created or approved in a closed period.

Failure modes:
    - EmptyEntryError: create_entry with no lines.
    - ClosedPeriodError: entry date / entry period is closed.
    - EntryNotFoundError: approve of a missing or foreign entry.
    - EntryNotDraftError: approve of a non-DRAFT entry.
    - UnbalancedEntryError: approve of an entry outside tolerance; carries
      the numeric difference.
    - IntegrityError (SQLAlchemy): tag_source on a (source_doc_id,
      source_type) pair already used by another entry of the tenant.

Audit relevance:
    Creation and approval write CREATED / APPROVED audit rows and emit
    ``journal_entry_created`` / ``journal_entry_approved`` log events with
    tenant_id, entry_id, number and totals.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.dtos import EntryInput
from ledger_kernel.exceptions import (
    EmptyEntryError,
    EntryNotDraftError,
    EntryNotFoundError,
    UnbalancedEntryError,
)
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_kernel.models.audit_log import AuditAction
from ledger_kernel.models.journal import (
    JournalEntry,
    JournalEntryStatus,
    JournalEntryType,
    JournalLine,
)
from ledger_kernel.selectors.journal_selector import JournalSelector
from ledger_kernel.services.audit_service import AuditService
from ledger_kernel.services.base import BaseService
from ledger_kernel.services.period_service import PeriodService
from ledger_kernel.services.sequence_service import SequenceService
from ledger_kernel.settings import DEFAULT_BALANCE_TOLERANCE

logger = get_logger("services.journal")


def _as_uuid(value: UUID | str) -> UUID:
    return value if isinstance(value, UUID) else UUID(str(value))


class JournalService(BaseService[JournalEntry]):
    """
    Journal entry lifecycle: create (DRAFT), approve (APPROVED), query.

    Contract:
        Write methods flush within the caller's transaction and return the
        ORM entry.  Query methods delegate to JournalSelector.

    Guarantees:
        - Returned entries from create_entry carry their lines.
        - Approval never changes amounts, only status and approver fields.

    Non-goals:
        - Does NOT enforce balance at creation.  DRAFT entries may be
          transiently unbalanced while being assembled.
        - Does NOT delete entries.  Corrections are reversal entries.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        balance_tolerance: Decimal = DEFAULT_BALANCE_TOLERANCE,
    ):
        super().__init__(session)
        self._clock = clock or SystemClock()
        self._tolerance = balance_tolerance
        self._sequences = SequenceService(session)
        self._periods = PeriodService(session, self._clock)
        self._audit = AuditService(session)
        self._selector = JournalSelector(session)

    # =========================================================================
    # Write side
    # =========================================================================

    def create_entry(
        self, tenant_id: str, user_id: str, entry_input: EntryInput
    ) -> JournalEntry:
        """
        Create a DRAFT journal entry with its lines.

        Preconditions:
            - ``entry_input.lines`` is non-empty.
            - The entry date's period is open.

        Postconditions:
            - Entry and lines are flushed; number is allocated.

        Raises:
            EmptyEntryError: if there are no lines.
            ClosedPeriodError: if the period is closed.
        """
        if not entry_input.lines:
            raise EmptyEntryError(entry_input.description)

        period = entry_input.period
        self._periods.validate_period_open(tenant_id, period)

        seq = self._sequences.next_value(
            SequenceService.journal_entry_sequence(tenant_id, period)
        )
        number = f"{period}-{seq:04d}"

        entry = JournalEntry(
            tenant_id=tenant_id,
            number=number,
            entry_date=entry_input.entry_date,
            period=period,
            entry_type=JournalEntryType(entry_input.entry_type).value,
            description=entry_input.description,
            reference=entry_input.reference,
            status=JournalEntryStatus.DRAFT.value,
            total_debit=entry_input.total_debit,
            total_credit=entry_input.total_credit,
            created_by_id=user_id,
        )
        entry.lines = [
            JournalLine(
                account_id=line.account_id,
                debit=line.debit,
                credit=line.credit,
                description=line.description,
                third_party_id=line.third_party_id,
                third_party_name=line.third_party_name,
                third_party_nit=line.third_party_nit,
                line_seq=seq_no,
                created_by_id=user_id,
            )
            for seq_no, line in enumerate(entry_input.lines)
        ]
        self.session.add(entry)
        self.session.flush()

        self._audit.record(
            tenant_id,
            "JournalEntry",
            entry.id,
            AuditAction.CREATED,
            user_id,
            {
                "number": number,
                "total_debit": entry.total_debit,
                "total_credit": entry.total_credit,
            },
        )
        logger.info(
            "journal_entry_created",
            extra={
                "tenant_id": tenant_id,
                "entry_id": str(entry.id),
                "number": number,
                "entry_type": entry.entry_type,
                "line_count": len(entry.lines),
                "total_debit": entry.total_debit,
                "total_credit": entry.total_credit,
            },
        )
        return entry

    def approve_entry(
        self, tenant_id: str, entry_id: UUID | str, user_id: str
    ) -> JournalEntry:
        """
        Move a DRAFT entry to APPROVED after the balance check.

        Raises:
            EntryNotFoundError: if the entry is missing or belongs to
                another tenant.
            EntryNotDraftError: if the entry is not DRAFT.
            ClosedPeriodError: if the entry's period is closed.
            UnbalancedEntryError: if |debits - credits| exceeds tolerance.
        """
        entry = self.session.execute(
            select(JournalEntry)
            .where(
                JournalEntry.id == _as_uuid(entry_id),
                JournalEntry.tenant_id == tenant_id,
            )
            .with_for_update()
        ).scalar_one_or_none()
        if entry is None:
            raise EntryNotFoundError(str(entry_id))

        with LogContext.bind(tenant_id=tenant_id, entry_id=entry.id, actor_id=user_id):
            if entry.status != JournalEntryStatus.DRAFT:
                raise EntryNotDraftError(
                    str(entry.id), JournalEntryStatus(entry.status).value
                )

            self._periods.validate_period_open(tenant_id, entry.period)

            difference = abs(entry.total_debit - entry.total_credit)
            if difference > self._tolerance:
                logger.warning(
                    "journal_entry_unbalanced",
                    extra={
                        "number": entry.number,
                        "total_debit": entry.total_debit,
                        "total_credit": entry.total_credit,
                        "difference": difference,
                    },
                )
                raise UnbalancedEntryError(
                    str(entry.id), entry.total_debit, entry.total_credit, difference
                )

            entry.status = JournalEntryStatus.APPROVED.value
            entry.approved_by_id = user_id
            entry.approved_at = self._clock.now()
            entry.updated_by_id = user_id
            self.session.flush()

            self._audit.record(
                tenant_id,
                "JournalEntry",
                entry.id,
                AuditAction.APPROVED,
                user_id,
                {"number": entry.number},
            )
            logger.info(
                "journal_entry_approved",
                extra={"number": entry.number, "total_debit": entry.total_debit},
            )
        return entry

    def tag_source(
        self, entry: JournalEntry, source_doc_id: str, source_type: str
    ) -> JournalEntry:
        """
        Link an entry to the business document that produced it.

        The unique (tenant_id, source_doc_id, source_type) constraint makes
        this flush fail with IntegrityError if the document is already
        linked to another entry.
        """
        entry.source_doc_id = source_doc_id
        entry.source_type = source_type
        self.session.flush()
        logger.debug(
            "journal_entry_tagged",
            extra={
                "entry_id": str(entry.id),
                "source_doc_id": source_doc_id,
                "source_type": source_type,
            },
        )
        return entry

    # =========================================================================
    # Read side
    # =========================================================================

    def list_entries(
        self,
        tenant_id: str,
        status: JournalEntryStatus | str | None = None,
        start: date | None = None,
        end: date | None = None,
    ) -> list[JournalEntry]:
        """Entries newest first, without lines.  ``"ALL"`` disables the status filter."""
        return self._selector.list_entries(tenant_id, status=status, start=start, end=end)

    def get_entry(self, tenant_id: str, entry_id: UUID | str) -> JournalEntry | None:
        """Entry with its lines and their accounts, or None."""
        return self._selector.get_entry(tenant_id, _as_uuid(entry_id))

    def find_by_source(
        self, tenant_id: str, source_doc_id: str, source_type: str
    ) -> JournalEntry | None:
        return self._selector.find_by_source(tenant_id, source_doc_id, source_type)

    def list_lines(
        self,
        tenant_id: str,
        account_id: UUID | None = None,
        third_party_id: str | None = None,
        start: date | None = None,
        end: date | None = None,
    ) -> list[JournalLine]:
        return self._selector.list_lines(
            tenant_id,
            account_id=account_id,
            third_party_id=third_party_id,
            start=start,
            end=end,
        )
