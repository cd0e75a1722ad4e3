"""
SequenceService -- monotonic sequence allocation via locked counter rows.

Responsibility:
    Provides strictly increasing sequence numbers for journal entry
    numbering.  Each tenant and accounting period owns its own counter
    (``journal_entry:{tenant_id}:{period}``), stored in a dedicated table
    and locked with ``SELECT ... FOR UPDATE``.

Architecture position:
    Kernel > Services -- imperative shell infrastructure.
    Called by JournalService.create_entry.

Invariants enforced:
    - Monotonicity: the locked counter row is the sole source of truth for
      the next value.  Counting existing entries and adding one is never
      used; two concurrent postings to the same tenant+period serialize on
      the counter row instead of racing to the same number.
    - Transactional: the increment is only visible after the caller's
      transaction commits.  A rollback returns the value.

Failure modes:
    - IntegrityError: concurrent counter creation race (handled via
      savepoint rollback and retry).
"""

from sqlalchemy import BigInteger, String, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Mapped, Session, mapped_column

from ledger_kernel.db.base import Base
from ledger_kernel.logging_config import get_logger

logger = get_logger("services.sequence")


class SequenceCounter(Base):
    """
    Sequence counter table.

    Each row is a named sequence with its current value.
    """

    __tablename__ = "sequence_counters"

    # e.g. "journal_entry:tenant-a:2025-03"
    name: Mapped[str] = mapped_column(
        String(150),
        nullable=False,
        unique=True,
    )

    current_value: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=0,
    )


class SequenceService:
    """
    Service for generating transactional sequence numbers.

    Contract:
        Accepts a sequence name and returns the next strictly increasing
        integer value, starting at 1.

    Non-goals:
        - Does NOT call ``session.commit()``; the caller controls boundaries.

    Usage:
        seq = SequenceService(session).next_value(
            SequenceService.journal_entry_sequence("tenant-a", "2025-03")
        )
    """

    JOURNAL_ENTRY = "journal_entry"

    def __init__(self, session: Session):
        self._session = session

    @classmethod
    def journal_entry_sequence(cls, tenant_id: str, period: str) -> str:
        """Counter name for journal entry numbers of one tenant and period."""
        return f"{cls.JOURNAL_ENTRY}:{tenant_id}:{period}"

    def _locked_counter(self, sequence_name: str) -> SequenceCounter | None:
        return self._session.execute(
            select(SequenceCounter)
            .where(SequenceCounter.name == sequence_name)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def next_value(self, sequence_name: str) -> int:
        """
        Get the next value for a named sequence.

        Locks the counter row (creating it on first use), increments it and
        returns the new value.  The counter row stays locked until the
        caller's transaction completes.

        Returns:
            The next sequence value (always > 0).
        """
        counter = self._locked_counter(sequence_name)

        if counter is None:
            # First use.  A concurrent transaction may create the same row, so
            # the insert runs in a savepoint that can be discarded on conflict.
            savepoint = self._session.begin_nested()
            try:
                counter = SequenceCounter(name=sequence_name, current_value=1)
                self._session.add(counter)
                self._session.flush()
                savepoint.commit()
                logger.debug(
                    "sequence_allocated",
                    extra={"sequence_name": sequence_name, "value": 1},
                )
                return 1
            except IntegrityError:
                logger.debug(
                    "sequence_counter_race_retry",
                    extra={"sequence_name": sequence_name},
                )
                savepoint.rollback()
                counter = self._locked_counter(sequence_name)
                if counter is None:
                    raise

        counter.current_value += 1
        self._session.flush()
        logger.debug(
            "sequence_allocated",
            extra={"sequence_name": sequence_name, "value": counter.current_value},
        )
        return counter.current_value

    def current_value(self, sequence_name: str) -> int | None:
        """Current value of a sequence without incrementing, or None."""
        counter = self._session.execute(
            select(SequenceCounter).where(SequenceCounter.name == sequence_name)
        ).scalar_one_or_none()
        return counter.current_value if counter else None
