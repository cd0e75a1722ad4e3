"""
SourcePostingService -- idempotent posting of source-document intents.

Responsibility:
    Runs the algorithm every source adapter shares: given a PostingIntent,
    return the existing entry if the document already posted, otherwise
    resolve the intent's roles through the accounting configuration,
    create the journal entry and tag it with the document identity.

Architecture position:
    Kernel > Services -- imperative shell.
    Called by every adapter in ``ledger_modules``.  Calls
    AccountingConfigService and JournalService; never writes ledger rows
    itself.

Invariants enforced:
    - Idempotency: at most one entry per (tenant_id, source_doc_id,
      source_type).  The read-side lookup is an optimisation; the unique
      constraint on journal_entries is the authoritative check.  When the
      tag flush violates it (a concurrent posting of the same document won
      the race), the savepoint holding the new entry is rolled back and the
      winner's entry is returned.
    - Configuration completeness is checked before anything is written.

Failure modes:
    - ConfigurationIncompleteError: an intent role has no account.
    - EmptyEntryError: the intent has no non-zero lines.
    - ClosedPeriodError: the intent date falls in a closed period.

Audit relevance:
    Logs ``source_posting_completed`` for new entries and
    ``source_posting_skipped`` when the document had already posted.
"""

from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ledger_kernel.domain.clock import Clock
from ledger_kernel.domain.dtos import EntryInput, LineInput
from ledger_kernel.domain.posting_intent import PostingIntent
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_kernel.models.journal import JournalEntry
from ledger_kernel.services.config_service import AccountingConfigService
from ledger_kernel.services.journal_service import JournalService
from ledger_kernel.settings import DEFAULT_BALANCE_TOLERANCE

logger = get_logger("services.source_posting")


class SourcePostingService:
    """
    Posts PostingIntents through the journal, exactly once per document.

    Contract:
        ``post`` returns the entry for the intent's source document, new or
        pre-existing.  New entries are DRAFT.

    Non-goals:
        - Does NOT approve entries.
        - Does NOT commit.  The caller owns the outer transaction.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        balance_tolerance: Decimal = DEFAULT_BALANCE_TOLERANCE,
    ):
        self._session = session
        self.journal = JournalService(
            session, clock=clock, balance_tolerance=balance_tolerance
        )
        self.config = AccountingConfigService(session)

    def post(self, tenant_id: str, user_id: str, intent: PostingIntent) -> JournalEntry:
        """
        Post ``intent`` for ``tenant_id`` unless its document already posted.

        Raises:
            ConfigurationIncompleteError: if a required role is unset.
        """
        with LogContext.bind(
            tenant_id=tenant_id,
            actor_id=user_id,
            source_type=intent.source_type,
            source_doc_id=intent.source_doc_id,
        ):
            existing = self.journal.find_by_source(
                tenant_id, intent.source_doc_id, intent.source_type
            )
            if existing is not None:
                logger.info(
                    "source_posting_skipped",
                    extra={"entry_id": str(existing.id), "number": existing.number},
                )
                return existing

            accounts = self.config.require_roles(tenant_id, intent.required_roles)
            entry_input = self._to_entry_input(intent, accounts)

            savepoint = self._session.begin_nested()
            try:
                entry = self.journal.create_entry(tenant_id, user_id, entry_input)
                self.journal.tag_source(entry, intent.source_doc_id, intent.source_type)
                savepoint.commit()
            except IntegrityError:
                savepoint.rollback()
                existing = self.journal.find_by_source(
                    tenant_id, intent.source_doc_id, intent.source_type
                )
                if existing is None:
                    raise
                logger.info(
                    "source_posting_race_resolved",
                    extra={"entry_id": str(existing.id), "number": existing.number},
                )
                return existing
            except Exception:
                savepoint.rollback()
                raise

            logger.info(
                "source_posting_completed",
                extra={
                    "entry_id": str(entry.id),
                    "number": entry.number,
                    "line_count": len(entry.lines),
                },
            )
            return entry

    @staticmethod
    def _to_entry_input(intent: PostingIntent, accounts: dict) -> EntryInput:
        lines = []
        for line in intent.lines:
            account_id = line.account_id if line.role is None else accounts[line.role]
            party = line.third_party
            lines.append(
                LineInput(
                    account_id=account_id,
                    debit=line.amount if line.is_debit else Decimal("0"),
                    credit=Decimal("0") if line.is_debit else line.amount,
                    description=line.description,
                    third_party_id=party.id if party else None,
                    third_party_name=party.name if party else None,
                    third_party_nit=party.nit if party else None,
                )
            )
        return EntryInput(
            entry_date=intent.entry_date,
            entry_type=intent.entry_type,
            description=intent.description,
            reference=intent.reference,
            lines=tuple(lines),
        )
