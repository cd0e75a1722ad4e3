"""Payroll adapter: payroll run disbursement."""

from ledger_modules.payroll.service import PayrollAccountingService

__all__ = ["PayrollAccountingService"]
