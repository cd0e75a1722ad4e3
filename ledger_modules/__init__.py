"""
Ledger Modules.

Source integration adapters over the ledger kernel, one per family of
business events:

- Sales: invoice posting and annulment, customer payments, credit notes
  and their cost reversal
- Inventory: cost of sales and inventory purchase receipts
- Payroll: payroll run disbursement

Each adapter reads its source document, builds a PostingIntent in terms of
semantic roles and hands it to ``SourcePostingService``.  The journal
itself is only ever written by the kernel.
"""
