"""
Payroll Accounting Service (``ledger_modules.payroll.service``).

Responsibility
--------------
Posts a payroll run's disbursement: salary expense against payroll
liabilities (withholdings) and the bank (net pay).

Architecture
------------
Layer: **Modules** -- thin glue over the kernel.

Payroll goes through the same pipeline as every other adapter: accounts
come from the accounting configuration (``salary_expense``,
``payroll_liabilities``, ``bank``), the entry is created DRAFT by
``SourcePostingService`` and then approved through
``JournalService.approve_entry`` so the balance gate applies.

Tenants whose configuration predates the payroll roles still post: an unset
role falls back to the chart of accounts by code (``510506`` / ``5105*``
salaries, ``111005`` / ``1110*`` banks, ``2370*`` / ``23*`` payroll
liabilities), and the bank falls back to the cash role last.

Invariants
----------
- A payroll run posts at most once: ``journal_entry_id`` on the run and the
  ``PAYROLL`` source tag both point at the single entry.
- Zero amounts produce no line.  An account is only required for an amount
  that is non-zero.
- The resulting entry is APPROVED, or nothing is returned.

Failure Modes
-------------
- ``SourceDocumentNotFoundError``: run missing or foreign.
- ``ConfigurationIncompleteError``: no account found for a non-zero amount.
- ``UnbalancedEntryError``: earnings != deductions + net pay.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy.orm import Session

from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.posting_intent import (
    IntentLine,
    LineSide,
    PostingIntent,
    SourceType,
)
from ledger_kernel.exceptions import ConfigurationIncompleteError
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_kernel.models.journal import JournalEntry, JournalEntryType
from ledger_kernel.selectors.account_selector import AccountSelector
from ledger_kernel.services.posting_service import SourcePostingService
from ledger_modules._posting_helpers import load_source_document
from ledger_modules.payroll.orm import PayrollPeriodModel

logger = get_logger("modules.payroll")

# role -> (exact code or None, prefixes) searched when the role is unset
CHART_FALLBACKS: dict[str, tuple[str | None, tuple[str, ...]]] = {
    "salary_expense": ("510506", ("5105",)),
    "bank": ("111005", ("1110",)),
    "payroll_liabilities": (None, ("2370", "23")),
}


def payroll_intent(
    run: PayrollPeriodModel, accounts: dict[str, UUID], entry_date
) -> PostingIntent:
    lines = []
    if run.total_earnings > 0:
        lines.append(
            IntentLine.for_account(
                LineSide.DEBIT,
                accounts["salary_expense"],
                run.total_earnings,
                f"Payroll expense {run.period_name}",
            )
        )
    if run.total_deductions > 0:
        lines.append(
            IntentLine.for_account(
                LineSide.CREDIT,
                accounts["payroll_liabilities"],
                run.total_deductions,
                f"Payroll withholdings {run.period_name}",
            )
        )
    if run.net_pay > 0:
        lines.append(
            IntentLine.for_account(
                LineSide.CREDIT,
                accounts["bank"],
                run.net_pay,
                f"Net payroll payment {run.period_name}",
            )
        )
    return PostingIntent.build(
        source_type=SourceType.PAYROLL,
        source_doc_id=str(run.id),
        entry_type=JournalEntryType.COMPROBANTE_EGRESO.value,
        entry_date=entry_date,
        description=f"Payroll payment: {run.period_name}",
        reference=f"NOM-{run.period_name}",
        lines=lines,
    )


class PayrollAccountingService:
    """Payroll-run postings for one session."""

    def __init__(self, session: Session, clock: Clock | None = None):
        self._session = session
        self._clock = clock or SystemClock()
        self._posting = SourcePostingService(session, clock=self._clock)
        self._accounts = AccountSelector(session)

    def _resolve(self, tenant_id: str, role: str) -> UUID | None:
        account_id = self._posting.config.resolve_role(tenant_id, role)
        if account_id is not None:
            return account_id
        code, prefixes = CHART_FALLBACKS[role]
        account = self._accounts.find_by_code_or_prefix(tenant_id, code, *prefixes)
        if account is not None:
            logger.debug(
                "payroll_account_from_chart",
                extra={"role": role, "account_code": account.code},
            )
            return account.id
        if role == "bank":
            return self._posting.config.resolve_role(tenant_id, "cash")
        return None

    def _required_accounts(
        self, tenant_id: str, run: PayrollPeriodModel
    ) -> dict[str, UUID]:
        needed = [
            role
            for role, amount in (
                ("salary_expense", run.total_earnings),
                ("payroll_liabilities", run.total_deductions),
                ("bank", run.net_pay),
            )
            if amount > 0
        ]
        accounts: dict[str, UUID] = {}
        missing: list[str] = []
        for role in needed:
            account_id = self._resolve(tenant_id, role)
            if account_id is None:
                missing.append(role)
            else:
                accounts[role] = account_id
        if missing:
            raise ConfigurationIncompleteError(tenant_id, missing)
        return accounts

    def post_payroll(
        self, period_id: UUID | str, tenant_id: str, user_id: str
    ) -> JournalEntry:
        """
        Post and approve a payroll run's disbursement entry (idempotent).

        Returns the run's existing entry when it already posted.
        """
        run = load_source_document(
            self._session, PayrollPeriodModel, period_id, tenant_id, "PayrollPeriod"
        )
        journal = self._posting.journal

        with LogContext.bind(tenant_id=tenant_id, actor_id=user_id):
            if run.journal_entry_id is not None:
                logger.info(
                    "payroll_posting_skipped",
                    extra={"payroll_period_id": str(run.id)},
                )
                return journal.get_entry(tenant_id, run.journal_entry_id)

            accounts = self._required_accounts(tenant_id, run)
            intent = payroll_intent(run, accounts, self._clock.today())
            entry = self._posting.post(tenant_id, user_id, intent)
            if entry.is_draft:
                entry = journal.approve_entry(tenant_id, entry.id, user_id)

            run.journal_entry_id = entry.id
            run.updated_by_id = user_id
            self._session.flush()

            logger.info(
                "payroll_posted",
                extra={
                    "payroll_period_id": str(run.id),
                    "entry_id": str(entry.id),
                    "number": entry.number,
                },
            )
        return entry
