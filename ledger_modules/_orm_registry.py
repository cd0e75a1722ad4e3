"""
Module ORM Registry (``ledger_modules._orm_registry``).

Responsibility
--------------
Ensure every SQLAlchemy model, kernel and module, is imported so that
``Base.metadata`` contains its table definition before tables are created.

Architecture position
---------------------
**Modules layer** -- utility.  Called lazily by
``ledger_kernel.db.engine.create_tables()``.
"""


def import_all_orm_models() -> None:
    """Import kernel models and every ``ledger_modules.*.orm`` module.

    Kernel tables first: module tables hold foreign keys to them
    (payroll_periods.journal_entry_id -> journal_entries.id).

    Idempotent -- repeated calls are harmless.
    """
    import ledger_kernel.models  # noqa: F401
    import ledger_kernel.services.sequence_service  # noqa: F401
    import ledger_modules.payroll.orm  # noqa: F401
    import ledger_modules.sales.orm  # noqa: F401
