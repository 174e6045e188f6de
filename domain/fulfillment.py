"""Fulfillment and shortage evaluation — pure functions, zero external dependencies.

Only stdlib and domain imports allowed.
"""

from domain.models import Fulfillment
from domain.money import clamp_int


def evaluate(requested_qty, available_qty) -> Fulfillment:
    """Compare a requested (or ordered) quantity with what is available (or received)."""
    requested = clamp_int(requested_qty)
    available = clamp_int(available_qty)
    return Fulfillment(
        short_qty=max(requested - available, 0),
        can_fulfill=available >= requested,
    )


def shortages(lines):
    """Return (priced line, Fulfillment) pairs for lines whose stock falls short.

    Lines without a known stock figure are skipped.
    """
    result = []
    for line in lines:
        if line.item.stock_available is None:
            continue
        fulfillment = evaluate(line.qty, line.item.stock_available)
        if not fulfillment.can_fulfill:
            result.append((line, fulfillment))
    return result
