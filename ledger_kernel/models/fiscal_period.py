"""
Module: ledger_kernel.models.fiscal_period
Responsibility: ORM persistence for monthly accounting periods and their
    open/closed state.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - One row per (tenant_id, year, month).
    - A month without a row is open.  Rows are created lazily the first time
      a month is closed.

Failure modes:
    - ClosedPeriodError raised by PeriodService when a posting or approval
      targets a closed month.
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TrackedBase


class AccountingPeriod(TrackedBase):
    """
    Calendar-month accounting period.

    Contract:
        ``code`` renders the period as ``YYYY-MM``, the same string stored on
        JournalEntry.period.
    """

    __tablename__ = "accounting_periods"

    __table_args__ = (
        UniqueConstraint("tenant_id", "year", "month", name="uq_period_tenant_month"),
    )

    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False)

    year: Mapped[int] = mapped_column(Integer, nullable=False)

    month: Mapped[int] = mapped_column(Integer, nullable=False)

    is_closed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    closed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    closed_by_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    def __repr__(self) -> str:
        state = "closed" if self.is_closed else "open"
        return f"<AccountingPeriod {self.code} {state}>"

    @property
    def code(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"
