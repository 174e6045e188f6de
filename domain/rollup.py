"""Hierarchical billing rollup — pure functions, zero external dependencies.

Aggregates already-priced book rows upward: book → class → supplier → school.
A single pass over the rows; every level carries the same counters so any
granularity can be rendered without recomputation.

Only stdlib and domain imports allowed.
"""

from domain.fulfillment import evaluate
from domain.grouping import natural_key
from domain.models import (
    BookNode,
    ClassNode,
    ReportView,
    RollupNode,
    SchoolRollup,
    SupplierNode,
)
from domain.money import clamp_int, round2
from domain.normalization import normalize_group_key
from domain.pricing import price_line


def book_node(row) -> BookNode:
    """Price one book row: gross on received qty, net after the item discount."""
    ordered = clamp_int(row.ordered_qty)
    received = clamp_int(row.received_qty)
    short = evaluate(ordered, received).short_qty
    priced = price_line(received, row.rate, row.discount)
    gross = price_line(received, row.rate).line_amount
    return BookNode(
        row=row,
        net_unit_price=priced.net_unit_price,
        totals=RollupNode(
            ordered_qty=ordered,
            received_qty=received,
            short_qty=short,
            gross_amount=gross,
            discount_amount=round2(gross - priced.line_amount),
            net_amount=priced.line_amount,
            ordered_net_amount=price_line(ordered, row.rate, row.discount).line_amount,
            short_net_amount=price_line(short, row.rate, row.discount).line_amount,
        ),
    )


def filter_rows(rows, view=ReportView.ALL):
    """Keep rows matching the report view (received only / still pending)."""
    view = view if isinstance(view, ReportView) else ReportView(str(view).upper())
    if view is ReportView.RECEIVED:
        return [r for r in rows if clamp_int(r.received_qty) > 0]
    if view is ReportView.PENDING:
        return [r for r in rows if evaluate(r.ordered_qty, r.received_qty).short_qty > 0]
    return list(rows)


def rollup(rows) -> SchoolRollup:
    """Build the supplier / class / book tree and the school total."""
    suppliers = {}
    for row in rows:
        node = book_node(row)
        supplier_name = normalize_group_key(row.supplier_name)
        supplier = suppliers.setdefault((row.supplier_id, supplier_name), {})
        bucket = supplier.setdefault(normalize_group_key(row.class_name), [RollupNode(), []])
        bucket[0] = bucket[0] + node.totals
        bucket[1].append(node)

    supplier_nodes = []
    school_totals = RollupNode()
    for (supplier_id, supplier_name), classes in suppliers.items():
        class_nodes = []
        supplier_totals = RollupNode()
        for class_name in sorted(classes, key=natural_key):
            totals, books = classes[class_name]
            books.sort(key=lambda b: (natural_key(b.row.title), str(b.row.book_id)))
            class_nodes.append(ClassNode(class_name=class_name, totals=totals, books=tuple(books)))
            supplier_totals = supplier_totals + totals
        supplier_nodes.append(
            SupplierNode(
                supplier_id=supplier_id,
                supplier_name=supplier_name,
                totals=supplier_totals,
                classes=tuple(class_nodes),
            )
        )
        school_totals = school_totals + supplier_totals

    supplier_nodes.sort(key=lambda s: (natural_key(s.supplier_name), str(s.supplier_id)))
    return SchoolRollup(totals=school_totals, suppliers=tuple(supplier_nodes))
