"""
Tests for PayrollAccountingService.

Verifies:
- Salary expense debit, withholdings and net pay credits, approved entry
- Accounts from configuration first, chart-of-accounts codes second
- A run posts once and remembers its entry
"""

from datetime import date
from decimal import Decimal

import pytest

from ledger_kernel.domain.posting_intent import SourceType
from ledger_kernel.exceptions import (
    ConfigurationIncompleteError,
    EmptyEntryError,
    UnbalancedEntryError,
)
from ledger_kernel.models.account import Account, AccountType, NormalBalance
from ledger_kernel.models.journal import JournalEntryStatus, JournalEntryType


class TestPostPayroll:
    def test_posts_and_approves_from_chart(
        self, payroll_service, make_payroll_run, configured_tenant, tenant_id, test_actor_id
    ):
        run = make_payroll_run()

        entry = payroll_service.post_payroll(run.id, tenant_id, test_actor_id)

        assert entry.status == JournalEntryStatus.APPROVED
        assert entry.approved_by_id == test_actor_id
        assert entry.entry_type == JournalEntryType.COMPROBANTE_EGRESO.value
        assert entry.source_type == SourceType.PAYROLL
        assert entry.source_doc_id == str(run.id)
        assert entry.description == "Payroll payment: 2025-03 Q1"
        assert entry.reference == "NOM-2025-03 Q1"
        assert entry.entry_date == date(2025, 3, 15)

        salary, withholdings, net = entry.lines
        assert (salary.account_id, salary.debit) == (configured_tenant["5105"].id, Decimal("1000.00"))
        assert (withholdings.account_id, withholdings.credit) == (
            configured_tenant["2370"].id,
            Decimal("80.00"),
        )
        assert (net.account_id, net.credit) == (configured_tenant["1110"].id, Decimal("920.00"))
        assert run.journal_entry_id == entry.id

    def test_configured_roles_take_precedence(
        self,
        payroll_service,
        config_service,
        make_payroll_run,
        configured_tenant,
        tenant_id,
        test_actor_id,
    ):
        config_service.upsert_config(
            tenant_id,
            {
                "bank": configured_tenant["1105"].id,
                "salary_expense": configured_tenant["6135"].id,
            },
        )

        entry = payroll_service.post_payroll(make_payroll_run().id, tenant_id, test_actor_id)

        accounts = [line.account_id for line in entry.lines]
        assert accounts == [
            configured_tenant["6135"].id,
            configured_tenant["2370"].id,
            configured_tenant["1105"].id,
        ]

    def test_bank_falls_back_to_cash(
        self,
        payroll_service,
        config_service,
        chart_seeder,
        make_payroll_run,
        other_tenant_id,
        test_actor_id,
    ):
        chart = chart_seeder(other_tenant_id, codes={"1105", "2370", "5105"})
        config_service.upsert_config(other_tenant_id, {"cash": chart["1105"].id})
        run = make_payroll_run(tenant=other_tenant_id)

        entry = payroll_service.post_payroll(run.id, other_tenant_id, test_actor_id)

        assert entry.lines[-1].account_id == chart["1105"].id

    def test_liabilities_fall_back_to_group_23(
        self, session, payroll_service, chart_seeder, make_payroll_run, other_tenant_id, test_actor_id
    ):
        chart_seeder(other_tenant_id, codes={"1110", "5105"})
        payables = Account(
            tenant_id=other_tenant_id,
            code="2335",
            name="Costos y gastos por pagar",
            account_type=AccountType.LIABILITY.value,
            nature=NormalBalance.CREDIT.value,
            level=3,
            created_by_id=test_actor_id,
        )
        session.add(payables)
        session.flush()

        run = make_payroll_run(tenant=other_tenant_id)
        entry = payroll_service.post_payroll(run.id, other_tenant_id, test_actor_id)

        assert entry.lines[1].account_id == payables.id

    def test_zero_deductions_need_no_liability_account(
        self, payroll_service, chart_seeder, make_payroll_run, other_tenant_id, test_actor_id
    ):
        chart = chart_seeder(other_tenant_id, codes={"1110", "5105"})
        run = make_payroll_run(
            total_earnings=Decimal("500.00"), total_deductions=Decimal("0"), tenant=other_tenant_id
        )

        entry = payroll_service.post_payroll(run.id, other_tenant_id, test_actor_id)

        assert len(entry.lines) == 2
        assert entry.lines[1].account_id == chart["1110"].id

    def test_no_accounts_names_every_role(
        self, payroll_service, make_payroll_run, other_tenant_id, test_actor_id
    ):
        run = make_payroll_run(tenant=other_tenant_id)

        with pytest.raises(ConfigurationIncompleteError) as exc_info:
            payroll_service.post_payroll(run.id, other_tenant_id, test_actor_id)

        assert exc_info.value.missing_roles == [
            "salary_expense",
            "payroll_liabilities",
            "bank",
        ]
        assert run.journal_entry_id is None

    def test_second_call_returns_posted_entry(
        self, payroll_service, journal_service, make_payroll_run, configured_tenant, tenant_id, test_actor_id, captured_logs
    ):
        run = make_payroll_run()
        first = payroll_service.post_payroll(run.id, tenant_id, test_actor_id)
        second = payroll_service.post_payroll(run.id, tenant_id, test_actor_id)

        assert second.id == first.id
        assert len(journal_service.list_entries(tenant_id)) == 1
        assert any(r["message"] == "payroll_posting_skipped" for r in captured_logs())

    def test_inconsistent_run_fails_approval(
        self, payroll_service, make_payroll_run, configured_tenant, tenant_id, test_actor_id
    ):
        run = make_payroll_run(net_pay=Decimal("900.00"))

        with pytest.raises(UnbalancedEntryError) as exc_info:
            payroll_service.post_payroll(run.id, tenant_id, test_actor_id)

        assert exc_info.value.difference == Decimal("20.00")
        assert run.journal_entry_id is None

    def test_empty_run_rejected(
        self, payroll_service, make_payroll_run, configured_tenant, tenant_id, test_actor_id
    ):
        run = make_payroll_run(total_earnings=Decimal("0"), total_deductions=Decimal("0"))
        with pytest.raises(EmptyEntryError):
            payroll_service.post_payroll(run.id, tenant_id, test_actor_id)
