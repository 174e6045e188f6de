"""Invoice preview pipeline — pure functions, zero external dependencies.

line items + overrides → resolved qty/price → priced lines → groups →
group totals → grand totals. Commit reuses the very same pipeline, so a
stored invoice always matches the preview shown for identical inputs.

Only stdlib and domain imports allowed.
"""

from __future__ import annotations

from dataclasses import replace

from domain.aggregation import aggregate_group, grand_totals
from domain.billing_rules import group_warnings
from domain.grouping import group_lines, parse_grouping
from domain.models import (
    BillCharges,
    GroupAdjustment,
    GroupingMode,
    InvoiceGroup,
    PricedLine,
    Preview,
)
from domain.overrides import OverrideSet, parse_override, resolve_price, resolve_qty
from domain.pricing import price_line


def price_item(item, overrides: OverrideSet) -> PricedLine:
    qty = resolve_qty(item.line_id, item.requested_qty, overrides.qty, item.product_id)
    unit_price = resolve_price(
        item.line_id,
        item.product_id,
        item.default_unit_price,
        overrides.price,
        overrides.global_default_price,
        allow_zero=overrides.allow_zero_price,
    )
    priced = price_line(qty, unit_price, item.item_discount)
    return PricedLine(
        item=item,
        qty=qty,
        unit_price=unit_price,
        net_unit_price=priced.net_unit_price,
        line_amount=priced.line_amount,
    )


def price_lines(items, overrides: OverrideSet | None = None) -> tuple[PricedLine, ...]:
    overrides = overrides or OverrideSet()
    return tuple(price_item(item, overrides) for item in items)


def billable_lines(group: InvoiceGroup) -> tuple[PricedLine, ...]:
    """Lines that survive the qty > 0 filter applied before an invoice is created."""
    return tuple(line for line in group.lines if line.qty > 0)


def preview(
    items,
    grouping=GroupingMode.NONE,
    overrides: OverrideSet | None = None,
    bill_discount=None,
    charges: BillCharges | None = None,
    default_price=None,
    group_adjustments: dict[str, GroupAdjustment] | None = None,
) -> Preview:
    """Price, group and total *items*; side-effect free and deterministic.

    *bill_discount* and *charges* apply to every group unless
    *group_adjustments* holds an entry for that group's key.
    *default_price*, when given, replaces the override set's global default.
    """
    mode = parse_grouping(grouping)
    overrides = overrides or OverrideSet()
    if default_price is not None:
        overrides = replace(overrides, global_default_price=parse_override(default_price))
    adjustments = group_adjustments or {}

    groups = []
    warnings = []
    for group in group_lines(price_lines(items, overrides), mode):
        adjustment = adjustments.get(group.key)
        if adjustment is not None:
            totals = aggregate_group(group, adjustment.discount, adjustment.charges)
        else:
            totals = aggregate_group(group, bill_discount, charges)
        group = replace(group, totals=totals)
        groups.append(group)
        warnings.extend(group_warnings(group))

    return Preview(
        grouping=mode,
        groups=tuple(groups),
        grand=grand_totals(g.totals for g in groups),
        warnings=tuple(warnings),
    )
