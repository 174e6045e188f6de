"""Group and bill aggregation — pure functions, zero external dependencies.

Amounts are rounded at every boundary (line, subtotal, discount, charges,
total) so totals re-derived from persisted rounded figures match.

Only stdlib and domain imports allowed.
"""

from decimal import Decimal

from domain.models import (
    BillCharges,
    Discount,
    DiscountType,
    GrandTotals,
    GroupTotals,
)
from domain.money import ZERO, non_negative, round2, to_number


def normalize_charges(charges=None) -> BillCharges:
    """Coerce and round charges; all but round_off are floored at zero."""
    charges = charges or BillCharges()
    return BillCharges(
        shipping=round2(non_negative(charges.shipping)),
        packing=round2(non_negative(charges.packing)),
        other=round2(non_negative(charges.other)),
        tax=round2(non_negative(charges.tax)),
        round_off=round2(charges.round_off),
    )


def raw_discount_amount(subtotal, discount) -> Decimal:
    """Bill discount on *subtotal* before clamping to the subtotal."""
    if discount is None:
        return ZERO
    value = to_number(discount.value)
    if discount.type is DiscountType.PERCENT:
        amount = to_number(subtotal) * value / 100
    elif discount.type is DiscountType.AMOUNT:
        amount = value
    else:
        amount = ZERO
    return round2(max(amount, ZERO))


def bill_discount_amount(subtotal, discount) -> Decimal:
    """Bill discount clamped to [0, subtotal]."""
    return min(raw_discount_amount(subtotal, discount), max(round2(subtotal), ZERO))


def aggregate_group(group, bill_discount=None, charges=None) -> GroupTotals:
    """Subtotal, clamped bill discount, additive charges and total of one group."""
    subtotal = round2(sum((line.line_amount for line in group.lines), ZERO))
    discount = bill_discount or Discount.none()
    discount_amount = bill_discount_amount(subtotal, discount)
    charges = normalize_charges(charges)
    total = round2(max(subtotal - discount_amount, ZERO) + charges.total)
    return GroupTotals(
        subtotal=subtotal,
        discount=discount,
        discount_amount=discount_amount,
        charges=charges,
        total=total,
        line_count=len(group.lines),
        billable_count=sum(1 for line in group.lines if line.qty > 0),
    )


def grand_totals(totals) -> GrandTotals:
    """Element-wise sum of per-group totals (never re-derived from raw lines)."""
    totals = list(totals)
    return GrandTotals(
        subtotal=round2(sum((t.subtotal for t in totals), ZERO)),
        discount_amount=round2(sum((t.discount_amount for t in totals), ZERO)),
        charges_total=round2(sum((t.charges.total for t in totals), ZERO)),
        total=round2(sum((t.total for t in totals), ZERO)),
        group_count=len(totals),
        billable_count=sum(t.billable_count for t in totals),
    )
