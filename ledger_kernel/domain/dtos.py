"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Defines the immutable inputs and results that cross the service
    boundary: EntryInput / LineInput (what a caller hands to
    JournalService.create_entry), ConfigValidation (result of
    AccountingConfigService.validate) and PeriodInfo (result of the
    PeriodService queries).

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.  Uses only the
    entry type enum from models.journal; never touches a Session.

Failure modes:
    - ValueError on LineInput with a negative debit or credit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from ledger_kernel.models.journal import JournalEntryType


@dataclass(frozen=True)
class LineInput:
    """
    One journal line as supplied to create_entry.

    Guarantees:
        - debit and credit are non-negative Decimals.
    """

    account_id: UUID
    debit: Decimal = Decimal("0")
    credit: Decimal = Decimal("0")
    description: str | None = None
    third_party_id: str | None = None
    third_party_name: str | None = None
    third_party_nit: str | None = None

    def __post_init__(self) -> None:
        if self.debit < 0 or self.credit < 0:
            raise ValueError(
                f"Line amounts must be non-negative "
                f"(debit={self.debit}, credit={self.credit})"
            )


@dataclass(frozen=True)
class EntryInput:
    """
    Header and lines for a new journal entry.

    Entries are always created DRAFT; the approval gate is
    JournalService.approve_entry.
    """

    entry_date: date
    entry_type: JournalEntryType | str
    description: str
    lines: tuple[LineInput, ...] = field(default_factory=tuple)
    reference: str | None = None

    @property
    def period(self) -> str:
        return self.entry_date.strftime("%Y-%m")

    @property
    def total_debit(self) -> Decimal:
        return sum((line.debit for line in self.lines), Decimal("0"))

    @property
    def total_credit(self) -> Decimal:
        return sum((line.credit for line in self.lines), Decimal("0"))


@dataclass(frozen=True)
class ConfigValidation:
    """Completeness report for a tenant's accounting configuration."""

    is_valid: bool
    missing_roles: tuple[str, ...] = ()


@dataclass(frozen=True)
class PeriodInfo:
    """Open/closed state of one accounting month."""

    period: str
    is_closed: bool
    closed_at: datetime | None = None
    closed_by_id: str | None = None
