"""
Module: ledger_kernel.models.accounting_config
Responsibility: Per-tenant mapping from semantic accounting roles (cash,
    sales revenue, VAT generated, ...) to concrete chart-of-accounts rows.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - At most one configuration row per tenant (uq_accounting_config_tenant).
    - Every role column is a nullable FK to accounting_accounts.  An unset
      role is a hard precondition failure for the adapter that needs it,
      raised by AccountingConfigService.require_roles().

Audit relevance:
    Changes go through AccountingConfigService.upsert_config(), which writes
    a CONFIG_UPDATED audit row naming the roles that moved.
"""

from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_kernel.db.base import TrackedBase, UUIDString

if TYPE_CHECKING:
    from ledger_kernel.models.account import Account


# Role name -> column holding the account id.  Order is the display order.
ROLE_COLUMNS: dict[str, str] = {
    "cash": "cash_account_id",
    "bank": "bank_account_id",
    "accounts_receivable": "accounts_receivable_id",
    "accounts_payable": "accounts_payable_id",
    "inventory": "inventory_account_id",
    "sales_revenue": "sales_revenue_id",
    "vat_generated": "vat_generated_id",
    "vat_deductible": "vat_deductible_id",
    "cost_of_sales": "cost_of_sales_id",
    "salary_expense": "salary_expense_id",
    "payroll_liabilities": "payroll_liabilities_id",
}

# Minimum roles a tenant needs before sales posting can run.
REQUIRED_ROLES: tuple[str, ...] = (
    "cash",
    "accounts_receivable",
    "sales_revenue",
    "vat_generated",
    "cost_of_sales",
    "inventory",
)


def _account_fk() -> Mapped[UUID | None]:
    return mapped_column(
        UUIDString(),
        ForeignKey("accounting_accounts.id"),
        nullable=True,
    )


class AccountingConfig(TrackedBase):
    """
    Semantic role -> account mapping for one tenant.

    Contract:
        Each ``<role>`` relationship resolves the matching ``<role>_id``
        column.  Relationships load eagerly so a fetched config carries its
        accounts, not just their ids.
    """

    __tablename__ = "accounting_configs"

    __table_args__ = (
        UniqueConstraint("tenant_id", name="uq_accounting_config_tenant"),
    )

    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False)

    cash_account_id: Mapped[UUID | None] = _account_fk()
    bank_account_id: Mapped[UUID | None] = _account_fk()
    accounts_receivable_id: Mapped[UUID | None] = _account_fk()
    accounts_payable_id: Mapped[UUID | None] = _account_fk()
    inventory_account_id: Mapped[UUID | None] = _account_fk()
    sales_revenue_id: Mapped[UUID | None] = _account_fk()
    vat_generated_id: Mapped[UUID | None] = _account_fk()
    vat_deductible_id: Mapped[UUID | None] = _account_fk()
    cost_of_sales_id: Mapped[UUID | None] = _account_fk()
    salary_expense_id: Mapped[UUID | None] = _account_fk()
    payroll_liabilities_id: Mapped[UUID | None] = _account_fk()

    cash: Mapped["Account | None"] = relationship(
        foreign_keys=[cash_account_id], lazy="selectin"
    )
    bank: Mapped["Account | None"] = relationship(
        foreign_keys=[bank_account_id], lazy="selectin"
    )
    accounts_receivable: Mapped["Account | None"] = relationship(
        foreign_keys=[accounts_receivable_id], lazy="selectin"
    )
    accounts_payable: Mapped["Account | None"] = relationship(
        foreign_keys=[accounts_payable_id], lazy="selectin"
    )
    inventory: Mapped["Account | None"] = relationship(
        foreign_keys=[inventory_account_id], lazy="selectin"
    )
    sales_revenue: Mapped["Account | None"] = relationship(
        foreign_keys=[sales_revenue_id], lazy="selectin"
    )
    vat_generated: Mapped["Account | None"] = relationship(
        foreign_keys=[vat_generated_id], lazy="selectin"
    )
    vat_deductible: Mapped["Account | None"] = relationship(
        foreign_keys=[vat_deductible_id], lazy="selectin"
    )
    cost_of_sales: Mapped["Account | None"] = relationship(
        foreign_keys=[cost_of_sales_id], lazy="selectin"
    )
    salary_expense: Mapped["Account | None"] = relationship(
        foreign_keys=[salary_expense_id], lazy="selectin"
    )
    payroll_liabilities: Mapped["Account | None"] = relationship(
        foreign_keys=[payroll_liabilities_id], lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<AccountingConfig tenant={self.tenant_id}>"

    def account_id_for(self, role: str) -> UUID | None:
        """Return the account id mapped to ``role`` (KeyError if unknown)."""
        return getattr(self, ROLE_COLUMNS[role])

    def set_role(self, role: str, account_id: UUID | None) -> None:
        setattr(self, ROLE_COLUMNS[role], account_id)

    def missing_roles(self, roles: tuple[str, ...] | list[str]) -> list[str]:
        return [role for role in roles if self.account_id_for(role) is None]
