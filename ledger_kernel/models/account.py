"""
Module: ledger_kernel.models.account
Responsibility: ORM persistence for a tenant's chart of accounts -- the target
    of every journal line.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - code is unique per tenant (uq_account_tenant_code).
    - The ledger treats accounts as read-only reference data; the chart is
      maintained by the host application.

Failure modes:
    - AccountNotFoundError when a configuration or posting references an
      account that does not exist for the tenant (raised by services).
"""

from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Boolean, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_kernel.db.base import TrackedBase, UUIDString

if TYPE_CHECKING:
    from ledger_kernel.models.journal import JournalLine


class AccountType(str, Enum):
    """Types of accounts in the chart of accounts."""

    ASSET = "ASSET"
    LIABILITY = "LIABILITY"
    EQUITY = "EQUITY"
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    COST_SALES = "COST_SALES"


class NormalBalance(str, Enum):
    """Normal balance side (nature) of an account."""

    DEBIT = "DEBIT"
    CREDIT = "CREDIT"


class Account(TrackedBase):
    """
    Chart of accounts entry.

    Contract:
        Account.code is unique within a tenant.  Codes are hierarchical by
        prefix (``1`` > ``11`` > ``1105`` > ``110505``), which is what the
        code-prefix lookups in AccountSelector rely on.

    Guarantees:
        - nature is DEBIT or CREDIT.
        - requires_third_party marks accounts whose lines should carry a
          customer/supplier identity (receivables, payables).
    """

    __tablename__ = "accounting_accounts"

    __table_args__ = (
        UniqueConstraint("tenant_id", "code", name="uq_account_tenant_code"),
        Index("idx_account_tenant_type", "tenant_id", "account_type"),
    )

    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False)

    code: Mapped[str] = mapped_column(String(20), nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    account_type: Mapped[AccountType] = mapped_column(String(20), nullable=False)

    nature: Mapped[NormalBalance] = mapped_column(
        String(10),
        default=NormalBalance.DEBIT.value,
        nullable=False,
    )

    level: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    parent_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    requires_third_party: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )

    requires_cost_center: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    journal_lines: Mapped[list["JournalLine"]] = relationship(
        back_populates="account",
        lazy="dynamic",
    )

    def __repr__(self) -> str:
        return f"<Account {self.code}: {self.name}>"
