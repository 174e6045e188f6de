"""Billing tables -- pandas facades over the preview and report engine.

Domain-pure equivalents: domain.invoicing.preview and domain.rollup.rollup.
Amounts are converted to float here, for display and export only.
"""

from datetime import date

import pandas as pd
from sqlalchemy.orm import Session

from backoffice.adapters.outbound.sqlalchemy_repos import SqlAlchemyBillingRowRepository
from domain.billing_service import BillingService
from domain.models import ReportFilters, ReportView

_TOTAL_COLUMNS = [
    "ordered_qty", "received_qty", "short_qty", "gross_amount",
    "discount_amount", "net_amount", "ordered_net_amount", "short_net_amount",
]
_LINE_COLUMNS = [
    "group", "line_id", "product_id", "title", "class_name", "publisher_name",
    "qty", "unit_price", "net_unit_price", "line_amount",
]


def _totals_dict(node) -> dict:
    return {
        name: float(getattr(node, name)) if name.endswith("amount") else getattr(node, name)
        for name in _TOTAL_COLUMNS
    }


def preview_to_frame(preview) -> pd.DataFrame:
    """One row per priced line, in group order."""
    rows = [
        {
            "group": group.key,
            "line_id": line.item.line_id,
            "product_id": line.item.product_id,
            "title": line.item.title,
            "class_name": line.item.class_name,
            "publisher_name": line.item.publisher_name,
            "qty": line.qty,
            "unit_price": float(line.unit_price),
            "net_unit_price": float(line.net_unit_price),
            "line_amount": float(line.line_amount),
        }
        for group in preview.groups
        for line in group.lines
    ]
    return pd.DataFrame(rows, columns=_LINE_COLUMNS)


def group_totals_frame(preview) -> pd.DataFrame:
    """One row per group with its subtotal, discount, charges and total."""
    rows = [
        {
            "group": group.key,
            "lines": group.totals.line_count,
            "billable_lines": group.totals.billable_count,
            "subtotal": float(group.totals.subtotal),
            "discount_amount": float(group.totals.discount_amount),
            "charges": float(group.totals.charges.total),
            "total": float(group.totals.total),
        }
        for group in preview.groups
    ]
    return pd.DataFrame(rows, columns=[
        "group", "lines", "billable_lines", "subtotal", "discount_amount", "charges", "total",
    ])


def rollup_to_frame(rollup) -> pd.DataFrame:
    """Flatten a SchoolRollup to one row per book."""
    rows = []
    for supplier in rollup.suppliers:
        for cls in supplier.classes:
            for book in cls.books:
                rows.append({
                    "supplier": supplier.supplier_name,
                    "class_name": cls.class_name,
                    "order_no": book.row.order_no,
                    "bill_no": book.row.bill_no,
                    "book_id": book.row.book_id,
                    "code": book.row.code,
                    "title": book.row.title,
                    "subject": book.row.subject,
                    "rate": float(book.row.rate),
                    "net_unit_price": float(book.net_unit_price),
                    **_totals_dict(book.totals),
                })
    return pd.DataFrame(rows, columns=[
        "supplier", "class_name", "order_no", "bill_no", "book_id", "code", "title", "subject",
        "rate", "net_unit_price",
        *_TOTAL_COLUMNS,
    ])


def class_summary_frame(rollup) -> pd.DataFrame:
    """One row per (supplier, class) with its rolled-up counters."""
    rows = [
        {"supplier": supplier.supplier_name, "class_name": cls.class_name, **_totals_dict(cls.totals)}
        for supplier in rollup.suppliers
        for cls in supplier.classes
    ]
    return pd.DataFrame(rows, columns=["supplier", "class_name", *_TOTAL_COLUMNS])


def school_billing_report(
    session: Session,
    school_id: int,
    supplier_id: int | None = None,
    academic_session: str | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    include_draft: bool = False,
    view: str = "ALL",
) -> dict:
    """School / supplier billing report as a rollup plus book and class tables."""
    service = BillingService(rows=SqlAlchemyBillingRowRepository(session))
    rollup = service.report(ReportFilters(
        school_id=school_id,
        supplier_id=supplier_id,
        academic_session=academic_session,
        date_from=date_from,
        date_to=date_to,
        include_draft=include_draft,
        view=ReportView(str(view).upper()),
    ))
    return {
        "rollup": rollup,
        "totals": _totals_dict(rollup.totals),
        "books": rollup_to_frame(rollup),
        "classes": class_summary_frame(rollup),
    }
