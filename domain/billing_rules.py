"""Domain billing rules — pure functions, zero external dependencies.

Rules return RuleResult values; they never raise. Callers decide whether a
failed rule blocks an invoice or is only shown as a warning.

Only stdlib and domain imports allowed.
"""

from domain.aggregation import raw_discount_amount
from domain.fulfillment import evaluate
from domain.models import Rejection, RuleResult
from domain.money import ZERO, to_number

BLOCKING_CODES = frozenset({"LINES_001", "GROUP_001"})


def check_billable_lines(group):
    """Check that a group holds at least one line with positive quantity."""
    billable = sum(1 for line in group.lines if line.qty > 0)
    if billable == 0:
        return RuleResult(
            is_valid=False,
            code="LINES_001",
            description=f"Group {group.key} has no line with a positive quantity",
            details={"group": group.key, "line_count": len(group.lines)},
        )
    return RuleResult(
        is_valid=True,
        code="LINES_001",
        description=f"{billable} billable line(s)",
    )


def check_bill_discount(group_key, subtotal, discount):
    """Check that the bill discount does not exceed the subtotal before clamping."""
    requested = raw_discount_amount(subtotal, discount)
    if requested > subtotal:
        return RuleResult(
            is_valid=False,
            code="DISC_001",
            description=f"Discount {requested} exceeds subtotal {subtotal} of {group_key}",
            details={"group": group_key, "requested": requested, "subtotal": subtotal},
        )
    return RuleResult(
        is_valid=True,
        code="DISC_001",
        description="Discount within subtotal",
    )


def check_stock(line):
    """Check that known stock covers the line's resolved quantity."""
    if line.item.stock_available is None:
        return RuleResult(
            is_valid=True,
            code="STOCK_001",
            description="Stock unknown",
        )
    fulfillment = evaluate(line.qty, line.item.stock_available)
    if not fulfillment.can_fulfill:
        return RuleResult(
            is_valid=False,
            code="STOCK_001",
            description=f"Short by {fulfillment.short_qty} for {line.item.title or line.item.line_id}",
            details={
                "line_id": line.item.line_id,
                "requested": line.qty,
                "available": line.item.stock_available,
                "short": fulfillment.short_qty,
            },
        )
    return RuleResult(
        is_valid=True,
        code="STOCK_001",
        description="Stock sufficient",
    )


def check_discount_fields(ref, discount_pct, discount_amt):
    """Check that an order row does not carry both a percent and a flat discount.

    Only the flat amount is applied when both are set, so the percentage
    would be silently lost.
    """
    pct = to_number(discount_pct)
    amount = to_number(discount_amt)
    if pct > ZERO and amount > ZERO:
        return RuleResult(
            is_valid=False,
            code="DISC_002",
            description=f"Row {ref} has discount {pct}% and {amount}; only {amount} applied",
            details={"ref": ref, "discount_pct": pct, "discount_amt": amount},
        )
    return RuleResult(
        is_valid=True,
        code="DISC_002",
        description="Single discount column",
    )


def check_group_known(group_key, known_keys):
    """Check that a selected group key names a group of the preview."""
    if group_key not in known_keys:
        return RuleResult(
            is_valid=False,
            code="GROUP_001",
            description=f"Unknown group {group_key}",
            details={"group": group_key, "known": sorted(known_keys)},
        )
    return RuleResult(
        is_valid=True,
        code="GROUP_001",
        description="Group selected",
    )


def group_warnings(group):
    """Failed non-blocking rules of an aggregated group."""
    results = []
    if group.totals is not None:
        results.append(check_bill_discount(group.key, group.totals.subtotal, group.totals.discount))
    results.extend(check_stock(line) for line in group.lines if line.qty > 0)
    return [r for r in results if not r.is_valid]


def check_group(group):
    """Return a Rejection when a blocking rule fails, otherwise None."""
    failed = [r for r in (check_billable_lines(group),) if not r.is_valid]
    if not failed:
        return None
    return Rejection(group_key=group.key, reasons=tuple(failed))
