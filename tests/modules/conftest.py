"""
Fixtures for the source adapter tests.

Source documents (customers, products, invoices, payments, credit notes,
payroll runs) are created through factory fixtures.  Document timestamps
are pinned to March 2025 so entries land in the DeterministicClock's month.
"""

from datetime import datetime
from decimal import Decimal

import pytest

from ledger_modules.inventory.service import InventoryAccountingService
from ledger_modules.payroll.orm import PayrollPeriodModel
from ledger_modules.payroll.service import PayrollAccountingService
from ledger_modules.sales.credit_notes import CreditNoteAccountingService
from ledger_modules.sales.orm import (
    CreditNoteItemModel,
    CreditNoteModel,
    CreditNoteType,
    CustomerModel,
    ElectronicStatus,
    InvoiceItemModel,
    InvoiceModel,
    PaymentModel,
    ProductModel,
    ProductVariantModel,
)
from ledger_modules.sales.service import SalesAccountingService

TEST_ACTOR_ID = "user-0001"
DOCUMENT_TIME = datetime(2025, 3, 10, 9, 30)


@pytest.fixture
def sales_service(session, deterministic_clock) -> SalesAccountingService:
    return SalesAccountingService(session, clock=deterministic_clock)


@pytest.fixture
def credit_note_service(session, deterministic_clock) -> CreditNoteAccountingService:
    return CreditNoteAccountingService(session, clock=deterministic_clock)


@pytest.fixture
def inventory_service(session, deterministic_clock) -> InventoryAccountingService:
    return InventoryAccountingService(session, clock=deterministic_clock)


@pytest.fixture
def payroll_service(session, deterministic_clock) -> PayrollAccountingService:
    return PayrollAccountingService(session, clock=deterministic_clock)


@pytest.fixture
def customer(session, tenant_id) -> CustomerModel:
    row = CustomerModel(
        tenant_id=tenant_id,
        name="Constructora ABC",
        tax_id="900123456",
        created_by_id=TEST_ACTOR_ID,
    )
    session.add(row)
    session.flush()
    return row


@pytest.fixture
def make_product(session, tenant_id):
    def _make(name="Cemento gris 50kg", cost=Decimal("30.00"), track_stock=True, tenant=None):
        row = ProductModel(
            tenant_id=tenant or tenant_id,
            name=name,
            cost=cost,
            track_stock=track_stock,
            created_by_id=TEST_ACTOR_ID,
        )
        session.add(row)
        session.flush()
        return row

    return _make


@pytest.fixture
def make_invoice(session, tenant_id, customer):
    """
    ``make_invoice(subtotal, tax, items=[(product, qty)], ...)``.

    ``total`` is subtotal + tax.
    """

    def _make(
        subtotal=Decimal("100.00"),
        tax=Decimal("19.00"),
        number="FV-001",
        items=(),
        electronic_status=ElectronicStatus.ACCEPTED,
        tenant=None,
        with_customer=True,
    ):
        invoice = InvoiceModel(
            tenant_id=tenant or tenant_id,
            number=number,
            customer_id=customer.id if with_customer else None,
            subtotal=subtotal,
            tax=tax,
            total=subtotal + tax,
            electronic_status=electronic_status,
            created_at=DOCUMENT_TIME,
            created_by_id=TEST_ACTOR_ID,
        )
        invoice.items = [
            InvoiceItemModel(
                product_id=product.id,
                quantity=Decimal(quantity),
                unit_price=Decimal("0"),
                created_by_id=TEST_ACTOR_ID,
            )
            for product, quantity in items
        ]
        session.add(invoice)
        session.flush()
        return invoice

    return _make


@pytest.fixture
def make_payment(session, tenant_id):
    def _make(invoice, amount=Decimal("119.00"), method="CASH"):
        payment = PaymentModel(
            tenant_id=tenant_id,
            invoice_id=invoice.id,
            amount=amount,
            method=method,
            created_at=DOCUMENT_TIME,
            created_by_id=TEST_ACTOR_ID,
        )
        session.add(payment)
        session.flush()
        return payment

    return _make


@pytest.fixture
def make_variant(session):
    def _make(product, cost=None, name="Presentacion 25kg"):
        variant = ProductVariantModel(
            product_id=product.id, name=name, cost=cost, created_by_id=TEST_ACTOR_ID
        )
        session.add(variant)
        session.flush()
        return variant

    return _make


@pytest.fixture
def make_credit_note(session):
    """``make_credit_note(invoice, subtotal, tax, items=[(product, variant, qty)])``."""

    def _make(
        invoice,
        subtotal=Decimal("50.00"),
        tax=Decimal("9.50"),
        number="NC-001",
        items=(),
        note_type=CreditNoteType.PARTIAL,
    ):
        credit_note = CreditNoteModel(
            tenant_id=invoice.tenant_id,
            number=number,
            invoice_id=invoice.id,
            type=note_type,
            subtotal=subtotal,
            tax=tax,
            total=subtotal + tax,
            created_at=DOCUMENT_TIME,
            created_by_id=TEST_ACTOR_ID,
        )
        credit_note.items = [
            CreditNoteItemModel(
                product_id=product.id,
                variant_id=variant.id if variant is not None else None,
                quantity=Decimal(quantity),
                created_by_id=TEST_ACTOR_ID,
            )
            for product, variant, quantity in items
        ]
        session.add(credit_note)
        session.flush()
        return credit_note

    return _make


@pytest.fixture
def make_payroll_run(session, tenant_id):
    def _make(
        total_earnings=Decimal("1000.00"),
        total_deductions=Decimal("80.00"),
        net_pay=None,
        period_name="2025-03 Q1",
        tenant=None,
    ):
        run = PayrollPeriodModel(
            tenant_id=tenant or tenant_id,
            period_name=period_name,
            total_earnings=total_earnings,
            total_deductions=total_deductions,
            net_pay=total_earnings - total_deductions if net_pay is None else net_pay,
            created_by_id=TEST_ACTOR_ID,
        )
        session.add(run)
        session.flush()
        return run

    return _make
