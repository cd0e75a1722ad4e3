"""
PostingIntent -- role-based description of one source-document posting.

Responsibility:
    Defines the immutable intermediate representation that every source
    adapter produces.  An adapter says *what* to post using semantic ROLES
    ("accounts_receivable", "sales_revenue", ...), never account ids; the
    SourcePostingService resolves roles against the tenant's accounting
    configuration and hands concrete lines to JournalService.

    Adding a new business event means adding one intent-building function,
    not touching JournalService.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Amounts are non-negative Decimals; ``side`` gives the direction.
    - Zero-amount lines never reach the journal: ``PostingIntent.build``
      drops them.
    - A line targets either a role or an explicit account id, never both.
      Explicit ids are used by reversals, which must hit the exact accounts
      of the original entry.

Failure modes:
    - ValueError on an IntentLine with an invalid side, a negative amount,
      or neither/both of role and account_id.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID


class LineSide:
    """Side of an intent line."""

    DEBIT = "debit"
    CREDIT = "credit"


class SourceType:
    """Source types tagged on journal entries, one per adapter."""

    INVOICE = "INVOICE"
    INVOICE_REVERSAL = "INVOICE_REVERSAL"
    PAYMENT = "PAYMENT"
    COST_OF_SALES = "COST_OF_SALES"
    PURCHASE = "PURCHASE"
    CREDIT_NOTE = "CREDIT_NOTE"
    CREDIT_NOTE_COST_REVERSAL = "CREDIT_NOTE_COST_REVERSAL"
    PAYROLL = "PAYROLL"

    @staticmethod
    def reversal_of(source_type: str) -> str:
        """Source type of the entry that reverses one of ``source_type``."""
        return f"{source_type}_REVERSAL"


@dataclass(frozen=True)
class ThirdParty:
    """Customer or supplier identity attached to a line."""

    id: str | None = None
    name: str | None = None
    nit: str | None = None


@dataclass(frozen=True)
class IntentLine:
    """
    A single line of a posting intent.

    Contract:
        Exactly one of ``role`` / ``account_id`` is set.  Role lines are
        resolved through the accounting configuration at posting time.

    Guarantees:
        - ``side`` is ``"debit"`` or ``"credit"``.
        - ``amount`` is a non-negative Decimal.
    """

    side: str
    amount: Decimal
    role: str | None = None
    account_id: UUID | None = None
    description: str | None = None
    third_party: ThirdParty | None = None

    def __post_init__(self) -> None:
        if self.side not in (LineSide.DEBIT, LineSide.CREDIT):
            raise ValueError(f"Invalid side: {self.side}")
        if self.amount < Decimal("0"):
            raise ValueError(f"Amount must be non-negative, got {self.amount}")
        if (self.role is None) == (self.account_id is None):
            raise ValueError("IntentLine needs exactly one of role or account_id")

    @classmethod
    def debit(
        cls,
        role: str,
        amount: Decimal,
        description: str | None = None,
        third_party: ThirdParty | None = None,
    ) -> IntentLine:
        return cls(
            side=LineSide.DEBIT,
            amount=amount,
            role=role,
            description=description,
            third_party=third_party,
        )

    @classmethod
    def credit(
        cls,
        role: str,
        amount: Decimal,
        description: str | None = None,
        third_party: ThirdParty | None = None,
    ) -> IntentLine:
        return cls(
            side=LineSide.CREDIT,
            amount=amount,
            role=role,
            description=description,
            third_party=third_party,
        )

    @classmethod
    def for_account(
        cls,
        side: str,
        account_id: UUID,
        amount: Decimal,
        description: str | None = None,
        third_party: ThirdParty | None = None,
    ) -> IntentLine:
        """Line against a concrete account, bypassing role resolution."""
        return cls(
            side=side,
            amount=amount,
            account_id=account_id,
            description=description,
            third_party=third_party,
        )

    @property
    def is_debit(self) -> bool:
        return self.side == LineSide.DEBIT

    @property
    def is_zero(self) -> bool:
        return self.amount == Decimal("0")


@dataclass(frozen=True)
class PostingIntent:
    """
    Everything needed to post one source document.

    Contract:
        ``(source_doc_id, source_type)`` is the idempotency key within a
        tenant.  Build instances with ``PostingIntent.build`` so zero-amount
        lines are filtered out.

    Non-goals:
        - Does NOT check balance.  Adapters build balanced lines; the
          approval gate in JournalService is the enforcement point.
    """

    source_type: str
    source_doc_id: str
    entry_type: str
    entry_date: date
    description: str
    lines: tuple[IntentLine, ...]
    reference: str | None = None
    # Roles checked even when their line was dropped as zero
    extra_roles: tuple[str, ...] = ()

    @classmethod
    def build(
        cls,
        *,
        source_type: str,
        source_doc_id: str,
        entry_type: str,
        entry_date: date,
        description: str,
        lines: Iterable[IntentLine],
        reference: str | None = None,
        extra_roles: Iterable[str] = (),
    ) -> PostingIntent:
        return cls(
            source_type=source_type,
            source_doc_id=source_doc_id,
            entry_type=entry_type,
            entry_date=entry_date,
            description=description,
            lines=tuple(line for line in lines if not line.is_zero),
            reference=reference,
            extra_roles=tuple(extra_roles),
        )

    @property
    def required_roles(self) -> tuple[str, ...]:
        """Roles referenced by the lines, in first-use order, then extra_roles."""
        seen: dict[str, None] = {}
        for line in self.lines:
            if line.role is not None:
                seen.setdefault(line.role, None)
        for role in self.extra_roles:
            seen.setdefault(role, None)
        return tuple(seen)

    @property
    def total_debits(self) -> Decimal:
        return sum(
            (line.amount for line in self.lines if line.is_debit), Decimal("0")
        )

    @property
    def total_credits(self) -> Decimal:
        return sum(
            (line.amount for line in self.lines if not line.is_debit), Decimal("0")
        )

    def is_balanced(self) -> bool:
        return self.total_debits == self.total_credits
