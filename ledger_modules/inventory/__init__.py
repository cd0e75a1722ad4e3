"""Inventory adapters: cost of sales and purchase receipts."""

from ledger_modules.inventory.service import InventoryAccountingService

__all__ = ["InventoryAccountingService"]
