"""
Shared helpers for source adapters.

Used by ledger_modules/*/service.py to load source documents with tenant
scoping and to derive third-party identities and entry dates.

Architecture: Modules layer. Imports only from ledger_kernel.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from ledger_kernel.db.base import Base
from ledger_kernel.domain.posting_intent import ThirdParty
from ledger_kernel.exceptions import SourceDocumentNotFoundError

ModelT = TypeVar("ModelT", bound=Base)


def as_uuid(value: UUID | str) -> UUID:
    return value if isinstance(value, UUID) else UUID(str(value))


def load_source_document(
    session: Session,
    model: type[ModelT],
    document_id: UUID | str,
    tenant_id: str,
    document_type: str,
    options: tuple[Any, ...] = (),
) -> ModelT:
    """Load a tenant's source document or raise SourceDocumentNotFoundError.

    A document owned by another tenant is reported exactly like a missing
    one.
    """
    document = session.execute(
        select(model)
        .where(model.id == as_uuid(document_id), model.tenant_id == tenant_id)
        .options(*options)
    ).scalar_one_or_none()
    if document is None:
        raise SourceDocumentNotFoundError(document_type, str(document_id))
    return document


def customer_third_party(customer: Any | None) -> ThirdParty | None:
    """Third-party identity of a customer row (None when absent)."""
    if customer is None:
        return None
    return ThirdParty(id=str(customer.id), name=customer.name, nit=customer.tax_id)


def document_date(value: datetime | date) -> date:
    """Entry date of a source document from its timestamp."""
    return value.date() if isinstance(value, datetime) else value
