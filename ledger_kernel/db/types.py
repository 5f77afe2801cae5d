"""
Module: ledger_kernel.db.types
Responsibility: Amount parsing for every monetary field the services
    accept.  Amounts are stored as Numeric(38, 9) (see Base.type_annotation_map),
    so anything with more than 29 integer digits is rejected here.
Architecture position: Kernel > DB.  May be imported by models/, domain/,
    services/ and selectors/.  MUST NOT import from any of those layers.

Invariants enforced:
    - No floats anywhere in the ledger.  All monetary amounts are Decimal;
      parse_amount() is the only sanctioned way to turn caller input into one.

Failure modes:
    - InvalidAmountError when input cannot be parsed, is not finite, or falls
      outside the allowed range.
"""

from decimal import Decimal, InvalidOperation
from typing import Any

from ledger_kernel.exceptions import InvalidAmountError

ZERO = Decimal("0")

# Numeric(38, 9) leaves 29 digits before the decimal point
AMOUNT_LIMIT = Decimal(10) ** 29

# What callers may pass where an amount is expected
AmountInput = Decimal | int | float | str


def parse_amount(
    value: Any,
    field: str = "amount",
    *,
    allow_zero: bool = True,
) -> Decimal:
    """
    Parse caller input into a non-negative Decimal.

    Accepts Decimal, int, numeric strings (surrounding whitespace ignored) and
    float (converted through its shortest repr, never its binary expansion).

    Args:
        value: The raw amount.
        field: Field name reported in the error.
        allow_zero: When False the amount must be strictly positive.

    Returns:
        The parsed Decimal.

    Raises:
        InvalidAmountError: on unparseable, non-finite, negative or too large
            input, and on zero when allow_zero is False.
    """
    if value is None or isinstance(value, bool):
        raise InvalidAmountError(field, value, "amount is required")

    try:
        if isinstance(value, Decimal):
            amount = value
        elif isinstance(value, float):
            amount = Decimal(repr(value))
        elif isinstance(value, str):
            amount = Decimal(value.strip())
        else:
            amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmountError(field, value, "not a number") from None

    if not amount.is_finite():
        raise InvalidAmountError(field, value, "must be a finite number")
    if amount < ZERO:
        raise InvalidAmountError(field, value, "must not be negative")
    if amount >= AMOUNT_LIMIT:
        raise InvalidAmountError(field, value, "exceeds the storable range")
    if not allow_zero and amount == ZERO:
        raise InvalidAmountError(field, value, "must be greater than 0")
    return amount

