"""
AccountingConfigService -- per-tenant semantic role -> account mapping.

Responsibility:
    Stores which chart-of-accounts row plays each semantic role (cash,
    accounts receivable, sales revenue, ...) for a tenant, validates that
    the mapping is complete enough to post, and resolves roles for the
    source adapters.

Architecture position:
    Kernel > Services -- imperative shell.
    Read by SourcePostingService before every adapter posting; written by
    the host application's configuration screen.

Invariants enforced:
    - One configuration row per tenant; upsert merges, never replaces.
    - Every mapped account exists and belongs to the same tenant.
    - Flush-only: never commits or rolls back the session.

Failure modes:
    - ValueError: unknown role name.
    - AccountNotFoundError: role mapped to a missing or foreign account.
    - ConfigurationIncompleteError: ``require_roles`` found unset roles.
      This is the single "configuration incomplete" failure shared by all
      adapters; it names every missing role, not just the first.

Audit relevance:
    upsert_config writes a CONFIG_UPDATED audit row with the roles changed.
"""

from collections.abc import Iterable, Mapping
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from ledger_kernel.domain.dtos import ConfigValidation
from ledger_kernel.exceptions import AccountNotFoundError, ConfigurationIncompleteError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.accounting_config import (
    REQUIRED_ROLES,
    ROLE_COLUMNS,
    AccountingConfig,
)
from ledger_kernel.models.audit_log import AuditAction
from ledger_kernel.selectors.account_selector import AccountSelector
from ledger_kernel.services.audit_service import AuditService
from ledger_kernel.services.base import BaseService

logger = get_logger("services.config")

# Actor recorded when the caller does not identify a user.
SYSTEM_ACTOR = "system"


def _check_roles(roles: Iterable[str]) -> None:
    unknown = sorted(set(roles) - set(ROLE_COLUMNS))
    if unknown:
        raise ValueError(
            f"Unknown accounting role(s): {', '.join(unknown)}. "
            f"Valid roles: {', '.join(ROLE_COLUMNS)}"
        )


class AccountingConfigService(BaseService[AccountingConfig]):
    """
    Service for the accounting configuration store.

    Contract:
        Roles are the keys of ``ROLE_COLUMNS``.  Account ids may be given as
        UUIDs or their string form.

    Guarantees:
        - ``get_config`` returns the row with every role's Account loaded.
        - ``validate`` on a tenant without configuration reports every
          required role as missing.
    """

    def __init__(self, session: Session):
        super().__init__(session)
        self._accounts = AccountSelector(session)
        self._audit = AuditService(session)

    def get_config(self, tenant_id: str) -> AccountingConfig | None:
        return self.session.execute(
            select(AccountingConfig).where(AccountingConfig.tenant_id == tenant_id)
        ).scalar_one_or_none()

    def upsert_config(
        self,
        tenant_id: str,
        roles: Mapping[str, UUID | str | None],
        user_id: str | None = None,
    ) -> AccountingConfig:
        """
        Create the tenant's configuration or merge ``roles`` into it.

        Roles absent from ``roles`` keep their current account.  A role
        explicitly mapped to None is cleared.

        Raises:
            ValueError: if ``roles`` names an unknown role.
            AccountNotFoundError: if an account is missing or foreign.
        """
        _check_roles(roles)
        actor = user_id or SYSTEM_ACTOR

        resolved: dict[str, UUID | None] = {}
        for role, account_ref in roles.items():
            if account_ref is None:
                resolved[role] = None
                continue
            account_id = account_ref if isinstance(account_ref, UUID) else UUID(str(account_ref))
            if self._accounts.get(tenant_id, account_id) is None:
                raise AccountNotFoundError(str(account_id))
            resolved[role] = account_id

        config = self.get_config(tenant_id)
        created = config is None
        if config is None:
            config = AccountingConfig(tenant_id=tenant_id, created_by_id=actor)
            self.session.add(config)
        else:
            config.updated_by_id = actor

        for role, account_id in resolved.items():
            config.set_role(role, account_id)
        self.session.flush()
        # Reload so role relationships match the new foreign keys
        self.session.refresh(config)

        self._audit.record(
            tenant_id,
            "AccountingConfig",
            config.id,
            AuditAction.CONFIG_UPDATED,
            user_id,
            {"roles": resolved, "created": created},
        )
        logger.info(
            "accounting_config_updated",
            extra={
                "tenant_id": tenant_id,
                "roles": sorted(resolved),
                "config_created": created,
            },
        )
        return config

    def validate(self, tenant_id: str) -> ConfigValidation:
        config = self.get_config(tenant_id)
        if config is None:
            return ConfigValidation(is_valid=False, missing_roles=REQUIRED_ROLES)
        missing = tuple(config.missing_roles(REQUIRED_ROLES))
        return ConfigValidation(is_valid=not missing, missing_roles=missing)

    def resolve_role(self, tenant_id: str, role: str) -> UUID | None:
        _check_roles([role])
        config = self.get_config(tenant_id)
        if config is None:
            return None
        return config.account_id_for(role)

    def require_roles(self, tenant_id: str, roles: Iterable[str]) -> dict[str, UUID]:
        """
        Resolve every role in ``roles`` or fail naming all unset ones.

        Raises:
            ValueError: if a role name is unknown.
            ConfigurationIncompleteError: if any role has no account.
        """
        roles = list(dict.fromkeys(roles))
        _check_roles(roles)
        config = self.get_config(tenant_id)
        if config is None:
            missing = roles
        else:
            missing = config.missing_roles(roles)
        if missing:
            logger.warning(
                "accounting_config_incomplete",
                extra={"tenant_id": tenant_id, "missing_roles": missing},
            )
            raise ConfigurationIncompleteError(tenant_id, missing)
        return {role: config.account_id_for(role) for role in roles}
