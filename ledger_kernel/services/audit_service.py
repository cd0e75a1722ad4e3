"""
AuditService -- append-only audit trail for ledger actions.

Responsibility:
    Records who did what to which ledger entity: entry creation and
    approval, period close/reopen, configuration updates.

Architecture position:
    Kernel > Services -- imperative shell.
    Called by JournalService, PeriodService and AccountingConfigService
    inside the same transaction as the audited change, so an audit row
    exists iff the change committed.

Invariants enforced:
    - Insert-only.  There is no update or delete method.
    - ``details`` is stored as JSON; Decimal, UUID and date values are
      converted to strings before storage.
"""

from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import select

from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.audit_log import AuditAction, AuditLog
from ledger_kernel.services.base import BaseService

logger = get_logger("services.audit")


def _json_safe(value: Any) -> Any:
    if isinstance(value, (Decimal, UUID, date)):
        return str(value)
    if isinstance(value, dict):
        return {str(k): _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    return value


class AuditService(BaseService[AuditLog]):
    """Writes and reads audit rows for one session."""

    def record(
        self,
        tenant_id: str,
        entity_type: str,
        entity_id: UUID | str,
        action: AuditAction,
        user_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> AuditLog:
        row = AuditLog(
            tenant_id=tenant_id,
            entity_type=entity_type,
            entity_id=str(entity_id),
            action=AuditAction(action).value,
            user_id=user_id,
            details=_json_safe(details) if details is not None else None,
        )
        self.session.add(row)
        self.session.flush()

        logger.debug(
            "audit_recorded",
            extra={
                "entity_type": entity_type,
                "entity_id": str(entity_id),
                "action": AuditAction(action).value,
            },
        )
        return row

    def history(
        self,
        tenant_id: str,
        entity_type: str | None = None,
        entity_id: UUID | str | None = None,
    ) -> list[AuditLog]:
        """Audit rows for a tenant, oldest first, optionally for one entity."""
        stmt = select(AuditLog).where(AuditLog.tenant_id == tenant_id)
        if entity_type is not None:
            stmt = stmt.where(AuditLog.entity_type == entity_type)
        if entity_id is not None:
            stmt = stmt.where(AuditLog.entity_id == str(entity_id))
        stmt = stmt.order_by(AuditLog.created_at, AuditLog.id)
        return list(self.session.scalars(stmt))
