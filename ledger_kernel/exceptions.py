"""
Typed exception hierarchy for the ledger kernel.

Every error has a typed class (catch by type, not by message), a ``code``
class attribute (machine-readable, API-safe) and structured attributes
(not just a message string).

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    LedgerError (base)
    |
    +-- ConfigurationError
    |   +-- ConfigurationIncompleteError
    |
    +-- NotFoundError
    |   +-- EntryNotFoundError
    |   +-- SourceDocumentNotFoundError
    |   +-- AccountNotFoundError
    |
    +-- PostingError
    |   +-- EmptyEntryError
    |   +-- UnbalancedEntryError
    |
    +-- StateError
    |   +-- EntryNotDraftError
    |   +-- CreditNoteNotAllowedError
    |
    +-- PeriodError
        +-- ClosedPeriodError
        +-- PeriodAlreadyClosedError
        +-- PeriodNotClosedError
        +-- PeriodNotFoundError
        +-- PeriodHasDraftsError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Configuration   | CONFIGURATION_INCOMPLETE    | Required semantic role has no account
----------------|-----------------------------|-----------------------------------------
Not found       | ENTRY_NOT_FOUND             | Entry missing or owned by another tenant
                | SOURCE_DOCUMENT_NOT_FOUND   | Invoice/payment/... missing or foreign
                | ACCOUNT_NOT_FOUND           | Account missing or owned by another tenant
----------------|-----------------------------|-----------------------------------------
Posting         | EMPTY_ENTRY                 | Entry submitted without lines
                | UNBALANCED_ENTRY            | |debits - credits| > tolerance at approval
----------------|-----------------------------|-----------------------------------------
State           | ENTRY_NOT_DRAFT             | Approval of a non-DRAFT entry
                | CREDIT_NOTE_NOT_ALLOWED     | Invoice not electronic SENT/ACCEPTED
----------------|-----------------------------|-----------------------------------------
Period          | CLOSED_PERIOD               | Posting or approving into a closed month
                | PERIOD_ALREADY_CLOSED       | Closing a closed month
                | PERIOD_NOT_CLOSED           | Reopening an open month
                | PERIOD_NOT_FOUND            | Reopening a month that was never closed
                | PERIOD_HAS_DRAFTS           | Closing a month that still has drafts

===============================================================================
HANDLING PATTERNS
===============================================================================

1. CONFIGURATION ERRORS direct the operator to finish the account mapping:

    except ConfigurationIncompleteError as e:
        return {"error": e.code, "missing_roles": e.missing_roles}

2. BALANCE ERRORS indicate a bug in line construction.  Treat them as
   internal failures; retrying the same lines cannot succeed.

3. IDEMPOTENT RE-POSTING is not an error: adapters return the existing
   entry for an already-posted source document.
"""

from decimal import Decimal


class LedgerError(Exception):
    """
    Base exception for all ledger errors.

    All subclasses carry a ``code`` class attribute for machine-readable
    error identification.
    """

    code: str = "LEDGER_ERROR"


# Configuration


class ConfigurationError(LedgerError):
    """Base exception for accounting configuration errors."""

    code: str = "CONFIGURATION_ERROR"


class ConfigurationIncompleteError(ConfigurationError):
    """One or more semantic roles required for a posting have no account."""

    code: str = "CONFIGURATION_INCOMPLETE"

    def __init__(self, tenant_id: str, missing_roles: list[str]):
        self.tenant_id = tenant_id
        self.missing_roles = list(missing_roles)
        super().__init__(
            "Accounting configuration incomplete; map accounts for: "
            + ", ".join(self.missing_roles)
        )


# Not found


class NotFoundError(LedgerError):
    """Base exception for missing or foreign-tenant records."""

    code: str = "NOT_FOUND"


class EntryNotFoundError(NotFoundError):
    """Journal entry does not exist or belongs to another tenant."""

    code: str = "ENTRY_NOT_FOUND"

    def __init__(self, entry_id: str):
        self.entry_id = entry_id
        super().__init__(f"Journal entry not found: {entry_id}")


class SourceDocumentNotFoundError(NotFoundError):
    """Source document does not exist or belongs to another tenant."""

    code: str = "SOURCE_DOCUMENT_NOT_FOUND"

    def __init__(self, document_type: str, document_id: str):
        self.document_type = document_type
        self.document_id = document_id
        super().__init__(f"{document_type} not found: {document_id}")


class AccountNotFoundError(NotFoundError):
    """Account does not exist in the tenant's chart of accounts."""

    code: str = "ACCOUNT_NOT_FOUND"

    def __init__(self, account_ref: str):
        self.account_ref = account_ref
        super().__init__(f"Account not found: {account_ref}")


# Posting


class PostingError(LedgerError):
    """Base exception for posting errors."""

    code: str = "POSTING_ERROR"


class EmptyEntryError(PostingError):
    """A journal entry needs at least one line."""

    code: str = "EMPTY_ENTRY"

    def __init__(self, description: str):
        self.description = description
        super().__init__(f"Journal entry has no lines: {description}")


class UnbalancedEntryError(PostingError):
    """Journal entry debits do not equal credits within tolerance."""

    code: str = "UNBALANCED_ENTRY"

    def __init__(
        self,
        entry_id: str,
        total_debit: Decimal,
        total_credit: Decimal,
        difference: Decimal,
    ):
        self.entry_id = entry_id
        self.total_debit = total_debit
        self.total_credit = total_credit
        self.difference = difference
        super().__init__(
            f"Entry {entry_id} is not balanced. Diff: {difference} "
            f"(debits={total_debit}, credits={total_credit})"
        )


# State


class StateError(LedgerError):
    """Base exception for invalid lifecycle transitions."""

    code: str = "STATE_ERROR"


class EntryNotDraftError(StateError):
    """Only DRAFT entries can be approved."""

    code: str = "ENTRY_NOT_DRAFT"

    def __init__(self, entry_id: str, status: str):
        self.entry_id = entry_id
        self.status = status
        super().__init__(f"Entry {entry_id} is not in DRAFT state (status={status})")


class CreditNoteNotAllowedError(StateError):
    """Credit notes require an electronic invoice that was SENT or ACCEPTED."""

    code: str = "CREDIT_NOTE_NOT_ALLOWED"

    def __init__(self, invoice_id: str, electronic_status: str | None):
        self.invoice_id = invoice_id
        self.electronic_status = electronic_status
        super().__init__(
            f"Invoice {invoice_id} cannot receive a credit note "
            f"(electronic status={electronic_status})"
        )


# Period


class PeriodError(LedgerError):
    """Base exception for accounting period errors."""

    code: str = "PERIOD_ERROR"


class ClosedPeriodError(PeriodError):
    """The accounting period is closed and accepts no changes."""

    code: str = "CLOSED_PERIOD"

    def __init__(self, period: str):
        self.period = period
        super().__init__(f"Period {period} is closed and does not allow changes")


class PeriodAlreadyClosedError(PeriodError):
    """Period is already closed."""

    code: str = "PERIOD_ALREADY_CLOSED"

    def __init__(self, period: str):
        self.period = period
        super().__init__(f"Period {period} is already closed")


class PeriodNotClosedError(PeriodError):
    """Period is already open."""

    code: str = "PERIOD_NOT_CLOSED"

    def __init__(self, period: str):
        self.period = period
        super().__init__(f"Period {period} is already open")


class PeriodNotFoundError(PeriodError):
    """No period record exists."""

    code: str = "PERIOD_NOT_FOUND"

    def __init__(self, period: str):
        self.period = period
        super().__init__(f"Period {period} does not exist")


class PeriodHasDraftsError(PeriodError):
    """A period cannot be closed while it still holds DRAFT entries."""

    code: str = "PERIOD_HAS_DRAFTS"

    def __init__(self, period: str, draft_count: int):
        self.period = period
        self.draft_count = draft_count
        super().__init__(
            f"Cannot close period {period}: {draft_count} draft entr"
            f"{'y' if draft_count == 1 else 'ies'} pending"
        )
