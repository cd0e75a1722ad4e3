"""
Module: ledger_kernel.selectors.account_selector
Responsibility: Read-only lookups against a tenant's chart of accounts, by id,
    by exact code or by code prefix.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Tenant scoping: an account of another tenant is never returned.
    - Prefix lookups only consider active accounts and return the lowest
      code, so ``2370`` finds ``237005`` before ``237010``.
"""

from uuid import UUID

from sqlalchemy import select

from ledger_kernel.models.account import Account
from ledger_kernel.selectors.base import BaseSelector


class AccountSelector(BaseSelector[Account]):
    """Chart-of-accounts lookups for one tenant at a time."""

    def get(self, tenant_id: str, account_id: UUID) -> Account | None:
        return self.session.execute(
            select(Account).where(
                Account.id == account_id,
                Account.tenant_id == tenant_id,
            )
        ).scalar_one_or_none()

    def get_by_code(self, tenant_id: str, code: str) -> Account | None:
        return self.session.execute(
            select(Account).where(
                Account.tenant_id == tenant_id,
                Account.code == code,
            )
        ).scalar_one_or_none()

    def first_by_prefix(self, tenant_id: str, prefix: str) -> Account | None:
        return self.session.execute(
            select(Account)
            .where(
                Account.tenant_id == tenant_id,
                Account.code.startswith(prefix, autoescape=True),
                Account.is_active.is_(True),
            )
            .order_by(Account.code)
            .limit(1)
        ).scalar_one_or_none()

    def find_by_code_or_prefix(
        self, tenant_id: str, code: str | None, *prefixes: str
    ) -> Account | None:
        """
        Exact ``code`` first (when given), then each prefix in order.

        Example:
            find_by_code_or_prefix(tenant, "510506", "5105")
            find_by_code_or_prefix(tenant, None, "2370", "23")
        """
        if code is not None:
            account = self.get_by_code(tenant_id, code)
            if account is not None:
                return account
        for prefix in prefixes:
            account = self.first_by_prefix(tenant_id, prefix)
            if account is not None:
                return account
        return None
