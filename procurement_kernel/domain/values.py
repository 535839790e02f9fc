"""
Values -- quantity parsing for the returns domain.

Responsibility:
    Normalize caller-supplied quantities to ``Decimal`` at the edge of the
    domain.  Record fields hold plain ``Decimal`` values; floats are never
    accepted because they cannot represent received quantities exactly.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

from procurement_kernel.exceptions import InvalidQuantityError

ZERO = Decimal("0")

# Quantities are stored with three decimal places (precision 15, scale 3).
QUANTITY_PLACES = 3


def to_quantity(
    value: Decimal | str | int | None,
    field: str = "quantity",
) -> Decimal:
    """
    Parse a caller-supplied quantity into a finite ``Decimal``.

    Raises:
        InvalidQuantityError: If ``value`` is None, a float, a bool, not a
            number, or not finite.
    """
    if value is None:
        raise InvalidQuantityError(field, value, "a value is required")
    if isinstance(value, (float, bool)):
        raise InvalidQuantityError(field, value, f"{type(value).__name__} is not accepted")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError) as e:
            raise InvalidQuantityError(field, value, "not a number") from e
    if not result.is_finite():
        raise InvalidQuantityError(field, value, "must be finite")
    return result


def fits_scale(value: Decimal, places: int = QUANTITY_PLACES) -> bool:
    """
    True if ``value`` needs at most ``places`` decimal places.

    Trailing zeros do not count (``4.100`` fits a scale of 1).  Never
    raises for a finite value, however large.
    """
    _, digits, exponent = value.as_tuple()
    excess = -exponent - places
    if excess <= 0:
        return True
    return not any(digits[-excess:])
