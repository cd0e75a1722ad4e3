"""
Tests for CreditNoteAccountingService.

Verifies:
- The credit-note entry mirrors the invoice posting (revenue and VAT
  debit, AR credit with the customer)
- Cost reversal uses variant cost when set, product cost otherwise
- record_credit_note refuses non-electronic invoices and reports, rather
  than raises, incomplete configuration
"""

from decimal import Decimal

import pytest

from ledger_kernel.domain.posting_intent import SourceType
from ledger_kernel.exceptions import ConfigurationIncompleteError, CreditNoteNotAllowedError
from ledger_kernel.models.journal import JournalEntryType
from ledger_modules.sales.orm import ElectronicStatus


class TestPostCreditNote:
    def test_mirror_of_invoice(
        self, credit_note_service, make_invoice, make_credit_note, configured_tenant, tenant_id, test_actor_id
    ):
        credit_note = make_credit_note(make_invoice())

        entry = credit_note_service.post_credit_note(credit_note.id, tenant_id, test_actor_id)

        revenue, vat, ar = entry.lines
        assert (revenue.account_id, revenue.debit) == (configured_tenant["4135"].id, Decimal("50.00"))
        assert (vat.account_id, vat.debit) == (configured_tenant["240805"].id, Decimal("9.50"))
        assert (ar.account_id, ar.credit) == (configured_tenant["1305"].id, Decimal("59.50"))
        assert ar.third_party_nit == "900123456"
        assert entry.entry_type == JournalEntryType.JOURNAL.value
        assert entry.source_type == SourceType.CREDIT_NOTE
        assert entry.description == "Credit note - NC-001 - Invoice FV-001"
        assert entry.reference == "NC-001"

    def test_zero_vat_drops_line(
        self, credit_note_service, make_invoice, make_credit_note, configured_tenant, tenant_id, test_actor_id
    ):
        credit_note = make_credit_note(make_invoice(), tax=Decimal("0"))

        entry = credit_note_service.post_credit_note(credit_note.id, tenant_id, test_actor_id)

        revenue, ar = entry.lines
        assert (revenue.account_id, revenue.debit) == (configured_tenant["4135"].id, Decimal("50.00"))
        assert (ar.account_id, ar.credit) == (configured_tenant["1305"].id, Decimal("50.00"))

    def test_zero_vat_still_requires_vat_role(
        self, credit_note_service, config_service, make_invoice, make_credit_note, configured_tenant, tenant_id, test_actor_id
    ):
        config_service.upsert_config(tenant_id, {"vat_generated": None})
        credit_note = make_credit_note(make_invoice(), tax=Decimal("0"))

        with pytest.raises(ConfigurationIncompleteError) as exc_info:
            credit_note_service.post_credit_note(credit_note.id, tenant_id, test_actor_id)
        assert exc_info.value.missing_roles == ["vat_generated"]

    def test_posts_once(
        self, credit_note_service, make_invoice, make_credit_note, configured_tenant, tenant_id, test_actor_id
    ):
        credit_note = make_credit_note(make_invoice())
        first = credit_note_service.post_credit_note(credit_note.id, tenant_id, test_actor_id)
        second = credit_note_service.post_credit_note(credit_note.id, tenant_id, test_actor_id)
        assert second.id == first.id


class TestReverseCostForReturn:
    def test_variant_cost_overrides_product_cost(
        self,
        credit_note_service,
        make_invoice,
        make_product,
        make_variant,
        make_credit_note,
        configured_tenant,
        tenant_id,
        test_actor_id,
    ):
        cement = make_product(cost=Decimal("30.00"))
        small_bag = make_variant(cement, cost=Decimal("20.00"))
        plain_variant = make_variant(cement, cost=None, name="Sin costo")
        credit_note = make_credit_note(
            make_invoice(),
            items=[(cement, small_bag, 2), (cement, plain_variant, 1), (cement, None, 1)],
        )

        entry = credit_note_service.reverse_cost_for_return(
            credit_note.id, "WH-01", tenant_id, test_actor_id
        )

        inventory, cogs = entry.lines
        # 2 x 20 (variant) + 1 x 30 (variant without cost) + 1 x 30 (no variant)
        assert (inventory.account_id, inventory.debit) == (configured_tenant["1435"].id, Decimal("100.00"))
        assert (cogs.account_id, cogs.credit) == (configured_tenant["6135"].id, Decimal("100.00"))
        assert entry.source_type == SourceType.CREDIT_NOTE_COST_REVERSAL

    def test_zero_cost_posts_nothing(
        self, credit_note_service, make_invoice, make_product, make_credit_note, configured_tenant, tenant_id, test_actor_id
    ):
        free_sample = make_product(cost=Decimal("0"))
        credit_note = make_credit_note(make_invoice(), items=[(free_sample, None, 5)])

        assert (
            credit_note_service.reverse_cost_for_return(
                credit_note.id, None, tenant_id, test_actor_id
            )
            is None
        )


class TestRecordCreditNote:
    def test_posts_note_and_cost_reversal(
        self, credit_note_service, make_invoice, make_product, make_credit_note, configured_tenant, tenant_id, test_actor_id
    ):
        product = make_product(cost=Decimal("30.00"))
        credit_note = make_credit_note(
            make_invoice(electronic_status=ElectronicStatus.SENT),
            items=[(product, None, 1)],
        )

        outcome = credit_note_service.record_credit_note(
            credit_note.id, tenant_id, test_actor_id, reverse_inventory=True, warehouse_id="WH-01"
        )

        assert outcome.accounting_posted
        assert outcome.errors == ()
        assert outcome.credit_note_entry.source_type == SourceType.CREDIT_NOTE
        assert outcome.cost_reversal_entry.total_debit == Decimal("30.00")

    def test_cost_reversal_is_opt_in(
        self, credit_note_service, make_invoice, make_product, make_credit_note, configured_tenant, tenant_id, test_actor_id
    ):
        credit_note = make_credit_note(make_invoice(), items=[(make_product(), None, 1)])

        outcome = credit_note_service.record_credit_note(credit_note.id, tenant_id, test_actor_id)

        assert outcome.credit_note_entry is not None
        assert outcome.cost_reversal_entry is None

    @pytest.mark.parametrize(
        "status", [ElectronicStatus.PENDING, ElectronicStatus.REJECTED, None]
    )
    def test_non_creditable_invoice_rejected(
        self, credit_note_service, journal_service, make_invoice, make_credit_note, configured_tenant, tenant_id, test_actor_id, status
    ):
        credit_note = make_credit_note(make_invoice(electronic_status=status))

        with pytest.raises(CreditNoteNotAllowedError) as exc_info:
            credit_note_service.record_credit_note(credit_note.id, tenant_id, test_actor_id)

        assert exc_info.value.electronic_status == status
        assert journal_service.list_entries(tenant_id) == []

    def test_missing_configuration_is_reported(
        self, credit_note_service, journal_service, make_invoice, make_credit_note, accounts, tenant_id, test_actor_id, captured_logs
    ):
        credit_note = make_credit_note(make_invoice())

        outcome = credit_note_service.record_credit_note(
            credit_note.id, tenant_id, test_actor_id, reverse_inventory=True
        )

        assert not outcome.accounting_posted
        assert outcome.credit_note_entry is None
        assert len(outcome.errors) == 1
        assert "accounts_receivable" in outcome.errors[0]
        assert journal_service.list_entries(tenant_id) == []
        warnings = [r for r in captured_logs() if r["message"] == "credit_note_accounting_skipped"]
        assert warnings[0]["level"] == "WARNING"
