"""
Module: ledger_kernel.models.audit_log
Responsibility: Append-only record of significant ledger actions (entry
    created, entry approved, period closed/reopened, configuration updated).
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Rows are insert-only.  AuditService exposes no update or delete path.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from sqlalchemy import JSON, DateTime, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import Base


class AuditAction(str, Enum):
    """Actions recorded in the audit log."""

    CREATED = "CREATED"
    APPROVED = "APPROVED"
    PERIOD_CLOSED = "PERIOD_CLOSED"
    PERIOD_REOPENED = "PERIOD_REOPENED"
    CONFIG_UPDATED = "CONFIG_UPDATED"


class AuditLog(Base):
    """One audited action against a ledger entity."""

    __tablename__ = "accounting_audit_logs"

    __table_args__ = (
        Index("idx_audit_tenant_entity", "tenant_id", "entity_type", "entity_id"),
    )

    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False)

    # JournalEntry, AccountingPeriod, AccountingConfig
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False)

    entity_id: Mapped[str] = mapped_column(String(64), nullable=False)

    action: Mapped[AuditAction] = mapped_column(String(30), nullable=False)

    user_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    details: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    # Set client-side: history() orders on it, and rows written in one
    # transaction would share the server timestamp.
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<AuditLog {self.action} {self.entity_type}:{self.entity_id}>"
