"""
Module: ledger_kernel.db.types
Responsibility: Annotated type aliases and rounding helpers for ledger columns.
    Centralizes precision so every model and service uses identical
    definitions.
Architecture position: Kernel > DB.  May be imported by models/, domain/,
    services/ and selectors/.  MUST NOT import from any of those layers.

Invariants enforced:
    - No floats for money.  Amounts are Decimal end to end; values that arrive
      as int/float/str from the host application are converted through
      to_money() before they touch a line.
    - round_money() is the only sanctioned rounding function.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated

from sqlalchemy import Numeric, String

# Monetary amount: 38 digits total, 9 decimal places
Money = Annotated[Decimal, Numeric(38, 9)]

# Tenant identifier handed in by the host application
TenantId = Annotated[str, String(64)]

# Short identifier strings
ShortCode = Annotated[str, String(50)]

# Long text for descriptions
LongText = Annotated[str, String(500)]


MONEY_DECIMAL_PLACES = 2
DEFAULT_ROUNDING = ROUND_HALF_UP

ZERO = Decimal("0")


def to_money(value: Decimal | int | float | str | None) -> Decimal:
    """
    Convert a host-supplied amount to Decimal.

    Floats are converted through their string representation so that 0.1
    becomes Decimal("0.1") rather than its binary approximation.  None is
    treated as zero (an unset amount on a source document).
    """
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def round_money(
    value: Decimal,
    decimal_places: int = MONEY_DECIMAL_PLACES,
    rounding: str = DEFAULT_ROUNDING,
) -> Decimal:
    """
    Round a monetary value to the given number of decimal places.

    Preconditions: value is a Decimal.
    Postconditions: Returns value quantized with the given rounding mode.
    """
    quantize_str = "0." + "0" * decimal_places
    return value.quantize(Decimal(quantize_str), rounding=rounding)
