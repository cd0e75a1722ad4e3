"""
Ledger Kernel

A tenant-scoped, double-entry journal engine with:
- Balanced entries enforced at approval
- Sequential entry numbers per tenant and accounting period
- Idempotent posting of source documents
- Corrections through reversal entries, never in place
"""

__version__ = "0.1.0"
