"""
Payroll ORM Models (``ledger_modules.payroll.orm``).

Responsibility
--------------
Minimal SQLAlchemy shape of a payroll run's totals.  The payroll domain of
the host application owns the row; the accounting adapter reads the totals
and writes back ``journal_entry_id`` once the run has posted.

Architecture position
---------------------
**Modules layer** -- persistence.  Imports from ``ledger_kernel.db.base``.
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TrackedBase, UUIDString


class PayrollPeriodModel(TrackedBase):
    """
    One payroll run.

    Guarantees:
        - ``net_pay == total_earnings - total_deductions`` for runs produced
          by the payroll domain.
        - ``journal_entry_id`` is set at most once, by the accounting adapter.
    """

    __tablename__ = "payroll_periods"

    __table_args__ = (Index("idx_payroll_periods_tenant", "tenant_id"),)

    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False)
    # e.g. "2025-03 Q1"
    period_name: Mapped[str] = mapped_column(String(100), nullable=False)
    total_earnings: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
    total_deductions: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
    net_pay: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
    journal_entry_id: Mapped[UUID | None] = mapped_column(
        UUIDString(), ForeignKey("journal_entries.id"), nullable=True
    )
