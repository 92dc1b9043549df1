"""Integer-cents money helpers.

Every amount that enters the ledger is converted to integer minor units once,
at the boundary, and never touches floating point again.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from .exceptions import InvalidAmountError

CENTS_PER_UNIT = 100


def to_cents(amount: Decimal | int | float | str) -> int:
    """
    Convert a decimal currency amount to integer cents.
    Uses ROUND_HALF_UP for consistency.

    Floats go through str() first so that 0.29 becomes 29 cents rather
    than 28.999... cents.

    Args:
        amount: Currency amount, e.g. Decimal("12.34"), 12.34, "12.34" or 12

    Returns:
        Amount in cents (integer)

    Raises:
        InvalidAmountError: If the amount is not a finite number
    """
    if isinstance(amount, bool):
        raise InvalidAmountError(f"Invalid amount: {amount!r}")

    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount).strip())
    except (InvalidOperation, ValueError) as e:
        raise InvalidAmountError(f"Invalid amount: {amount!r}") from e

    if not value.is_finite():
        raise InvalidAmountError(f"Amount must be finite, got {amount!r}")

    cents = value * CENTS_PER_UNIT
    return int(cents.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_cents(cents: int) -> Decimal:
    """Convert integer cents back to a two-place Decimal amount."""
    return (Decimal(cents) / CENTS_PER_UNIT).quantize(Decimal("0.01"))


def format_cents(cents: int) -> str:
    """Render cents as a plain decimal string, e.g. 1234 -> '12.34'."""
    return f"{from_cents(cents):.2f}"
