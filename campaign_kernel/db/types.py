"""
Module: campaign_kernel.db.types
Responsibility: Decimal helpers shared by models, engines and services.
    Centralizes precision and rounding so every layer converts and rounds
    currency the same way.
Architecture position: Kernel > DB.  May be imported by models/, domain/,
    services/, selectors/ and campaign_engines.  MUST NOT import from any of
    those layers (campaign_kernel.exceptions is a leaf and is allowed).

Invariants enforced:
    - No floats anywhere.  to_decimal() rejects float and bool inputs.
    - No NaN or Infinity.  to_decimal() only returns finite values.
    - round_money() is the ONLY sanctioned rounding function for reported
      values (percentages, ratios).  Sums are never rounded.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from campaign_kernel.exceptions import InvalidAmountError

# Stored precision for currency columns (Numeric(38, 9))
MONEY_DECIMAL_PLACES = 9
DEFAULT_ROUNDING = ROUND_HALF_UP

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def to_decimal(value: Any, field: str = "value") -> Decimal:
    """
    Convert an int, str or Decimal into a finite Decimal.

    Preconditions: value is a Decimal, an int, or a numeric string.
    Postconditions: Returns an exact, finite Decimal.

    Raises:
        TypeError: If value is a float or bool (binary floats would break
            exact currency sums).
        InvalidAmountError: If a string is not a valid number, or the value
            is NaN or Infinity.
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise TypeError(f"{field} must be Decimal, int or str, not {type(value).__name__}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except ArithmeticError as exc:
            raise InvalidAmountError(field, value) from exc
    else:
        raise TypeError(f"{field} must be Decimal, int or str, not {type(value).__name__}")
    if not result.is_finite():
        raise InvalidAmountError(field, value)
    return result


def round_money(
    value: Decimal,
    decimal_places: int = 2,
    rounding: str = DEFAULT_ROUNDING,
) -> Decimal:
    """
    Round a value to the given number of decimal places.

    Args:
        value: The Decimal value to round.
        decimal_places: Number of decimal places to round to.
        rounding: Rounding mode (default: ROUND_HALF_UP).

    Returns:
        Rounded Decimal value.
    """
    if decimal_places <= 0:
        return value.quantize(Decimal("1"), rounding=rounding)
    quantize_str = "0." + "0" * decimal_places
    return value.quantize(Decimal(quantize_str), rounding=rounding)


def percent_of(part: Decimal, whole: Decimal, decimal_places: int = 2) -> Decimal | None:
    """``part / whole * 100`` rounded, or None when ``whole`` is zero."""
    if whole == ZERO:
        return None
    return round_money(part / whole * HUNDRED, decimal_places)
