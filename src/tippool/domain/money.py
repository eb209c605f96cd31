"""Conversion between major currency units (dollars) and integer cents."""
from __future__ import annotations
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from tippool.domain.exceptions import InvalidInputError

_CENT = Decimal("0.01")


def to_cents(amount: Decimal | float | int | str | None) -> int:
    """Convert a non-negative major-unit amount to cents, rounding half up.

    ``None`` and blank strings count as zero, which is how an untouched
    tips cell in the cuts sheet reads.
    """
    if amount is None or (isinstance(amount, str) and not amount.strip()):
        return 0
    try:
        value = Decimal(str(amount).strip())
    except InvalidOperation:
        raise InvalidInputError(f"Invalid amount: {amount!r}") from None
    if not value.is_finite():
        raise InvalidInputError(f"Invalid amount: {amount!r}")
    if value < 0:
        raise InvalidInputError(f"Amount must be non-negative, got {amount!r}")
    return int((value / _CENT).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
