"""
PeriodService -- monthly accounting period control.

Responsibility:
    Opens and closes calendar-month accounting periods per tenant and
    validates that postings and approvals target an open month.

Architecture position:
    Kernel > Services -- imperative shell.
    Called by JournalService before creating or approving an entry, and by
    the host application to drive month-end close.

Invariants enforced:
    - No entry is created or approved in a closed period.
    - A period cannot close while it still holds DRAFT entries: every entry
      of a closed month is APPROVED.
    - A month with no AccountingPeriod row is open.
    - Flush-only: never commits or rolls back the session.

Failure modes:
    - ClosedPeriodError: posting or approving into a closed month.
    - PeriodAlreadyClosedError: closing a closed month.
    - PeriodHasDraftsError: closing a month with DRAFT entries.
    - PeriodNotFoundError: reopening a month that was never closed.
    - PeriodNotClosedError: reopening an open month.

Audit relevance:
    Close and reopen write PERIOD_CLOSED / PERIOD_REOPENED audit rows and
    are logged with tenant_id, period and actor.
"""

from datetime import date

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.dtos import PeriodInfo
from ledger_kernel.exceptions import (
    ClosedPeriodError,
    PeriodAlreadyClosedError,
    PeriodHasDraftsError,
    PeriodNotClosedError,
    PeriodNotFoundError,
)
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.audit_log import AuditAction
from ledger_kernel.models.fiscal_period import AccountingPeriod
from ledger_kernel.models.journal import JournalEntry, JournalEntryStatus
from ledger_kernel.services.audit_service import AuditService
from ledger_kernel.services.base import BaseService

logger = get_logger("services.period")


def period_code(value: date) -> str:
    """``YYYY-MM`` period string for a date."""
    return value.strftime("%Y-%m")


def _split_code(period: str) -> tuple[int, int]:
    year, month = period.split("-")
    return int(year), int(month)


class PeriodService(BaseService[AccountingPeriod]):
    """
    Service for the open/closed lifecycle of accounting periods.

    Contract:
        Validation methods raise typed exceptions; lifecycle methods flush
        within the caller's transaction and return PeriodInfo DTOs.

    Guarantees:
        - Concurrent close/reopen of the same month serialize on the period
          row via ``SELECT ... FOR UPDATE``.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()
        self._audit = AuditService(session)

    def _to_info(self, period: AccountingPeriod) -> PeriodInfo:
        return PeriodInfo(
            period=period.code,
            is_closed=period.is_closed,
            closed_at=period.closed_at,
            closed_by_id=period.closed_by_id,
        )

    def _get_row(
        self, tenant_id: str, year: int, month: int, lock: bool = False
    ) -> AccountingPeriod | None:
        stmt = select(AccountingPeriod).where(
            AccountingPeriod.tenant_id == tenant_id,
            AccountingPeriod.year == year,
            AccountingPeriod.month == month,
        )
        if lock:
            stmt = stmt.with_for_update()
        return self.session.execute(stmt).scalar_one_or_none()

    # =========================================================================
    # Validation
    # =========================================================================

    def is_closed(self, tenant_id: str, period: str) -> bool:
        year, month = _split_code(period)
        row = self._get_row(tenant_id, year, month)
        return row is not None and row.is_closed

    def validate_period_open(self, tenant_id: str, period: str) -> None:
        """
        Raises:
            ClosedPeriodError: if the period is closed for the tenant.
        """
        if self.is_closed(tenant_id, period):
            logger.warning(
                "closed_period_rejected",
                extra={"tenant_id": tenant_id, "period": period},
            )
            raise ClosedPeriodError(period)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def close_period(
        self, tenant_id: str, year: int, month: int, user_id: str
    ) -> PeriodInfo:
        """
        Close a month.

        Raises:
            PeriodAlreadyClosedError: if the month is already closed.
            PeriodHasDraftsError: if DRAFT entries remain in the month.
        """
        code = f"{year:04d}-{month:02d}"
        row = self._get_row(tenant_id, year, month, lock=True)
        if row is not None and row.is_closed:
            raise PeriodAlreadyClosedError(code)

        draft_count = self.session.execute(
            select(func.count())
            .select_from(JournalEntry)
            .where(
                JournalEntry.tenant_id == tenant_id,
                JournalEntry.period == code,
                JournalEntry.status == JournalEntryStatus.DRAFT.value,
            )
        ).scalar_one()
        if draft_count:
            raise PeriodHasDraftsError(code, draft_count)

        now = self._clock.now()
        if row is None:
            row = AccountingPeriod(
                tenant_id=tenant_id,
                year=year,
                month=month,
                created_by_id=user_id,
            )
            self.session.add(row)
        row.is_closed = True
        row.closed_at = now
        row.closed_by_id = user_id
        row.updated_by_id = user_id
        self.session.flush()

        self._audit.record(
            tenant_id,
            "AccountingPeriod",
            row.id,
            AuditAction.PERIOD_CLOSED,
            user_id,
            {"period": code},
        )
        logger.info(
            "period_closed",
            extra={"tenant_id": tenant_id, "period": code, "actor_id": user_id},
        )
        return self._to_info(row)

    def reopen_period(
        self, tenant_id: str, year: int, month: int, user_id: str
    ) -> PeriodInfo:
        """
        Reopen a closed month.

        Raises:
            PeriodNotFoundError: if the month was never closed.
            PeriodNotClosedError: if the month is open.
        """
        code = f"{year:04d}-{month:02d}"
        row = self._get_row(tenant_id, year, month, lock=True)
        if row is None:
            raise PeriodNotFoundError(code)
        if not row.is_closed:
            raise PeriodNotClosedError(code)

        row.is_closed = False
        row.closed_at = None
        row.closed_by_id = None
        row.updated_by_id = user_id
        self.session.flush()

        self._audit.record(
            tenant_id,
            "AccountingPeriod",
            row.id,
            AuditAction.PERIOD_REOPENED,
            user_id,
            {"period": code},
        )
        logger.info(
            "period_reopened",
            extra={"tenant_id": tenant_id, "period": code, "actor_id": user_id},
        )
        return self._to_info(row)

    # =========================================================================
    # Queries
    # =========================================================================

    def get_period_status(self, tenant_id: str, year: int, month: int) -> PeriodInfo:
        row = self._get_row(tenant_id, year, month)
        if row is None:
            return PeriodInfo(period=f"{year:04d}-{month:02d}", is_closed=False)
        return self._to_info(row)

    def list_periods(self, tenant_id: str) -> list[PeriodInfo]:
        """Every period with a stored state, newest first."""
        rows = self.session.scalars(
            select(AccountingPeriod)
            .where(AccountingPeriod.tenant_id == tenant_id)
            .order_by(AccountingPeriod.year.desc(), AccountingPeriod.month.desc())
        )
        return [self._to_info(row) for row in rows]
