"""Money and quantity primitives — pure functions, zero external dependencies.

Every helper is total: malformed input coerces to zero instead of raising,
so a half-typed value never aborts a computation.
"""

import re
from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal, InvalidOperation

ZERO = Decimal("0")
CENT = Decimal("0.01")

_NON_NUMERIC = re.compile(r"[^\d.\-]")


def to_number(value):
    """Parse *value* permissively into a Decimal, returning 0 on failure.

    Numbers pass through unchanged; anything else is stringified and stripped
    of every character other than digits, sign and decimal point.
    """
    if isinstance(value, Decimal):
        return value if value.is_finite() else ZERO
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        text = repr(value)
    else:
        text = _NON_NUMERIC.sub("", "" if value is None else str(value))
    try:
        result = Decimal(text)
    except InvalidOperation:
        return ZERO
    return result if result.is_finite() else ZERO


def round2(value):
    """Round to the cent, half away from zero."""
    try:
        return to_number(value).quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return ZERO


def clamp_int(value, minimum=0, maximum=None):
    """Floor *value* to an integer and clamp it into [minimum, maximum]."""
    result = int(to_number(value).to_integral_value(rounding=ROUND_FLOOR))
    if minimum is not None:
        result = max(result, minimum)
    if maximum is not None:
        result = min(result, maximum)
    return result


def non_negative(value):
    """Coerce *value* and floor it at zero."""
    return max(to_number(value), ZERO)
