"""In-memory implementations of the domain repository ports.

Intended for testing and dry runs where persistence is not needed.
"""

from __future__ import annotations

from dataclasses import replace

from domain.models import BookRow, InvoiceRecord, ReportFilters
from domain.ports import BillingRowRepository, InvoiceRepository, RepositoryError


class InMemoryInvoiceRepository(InvoiceRepository):
    """InvoiceRepository backed by a dict.

    Group keys listed in *failing_groups* raise RepositoryError on save,
    which lets callers exercise partial multi-invoice commits.
    """

    def __init__(self, prefix: str = "INV", failing_groups=()):
        self._store: dict[int, InvoiceRecord] = {}
        self._prefix = prefix
        self._failing = set(failing_groups)

    def save(self, record: InvoiceRecord) -> InvoiceRecord:
        if record.group.key in self._failing:
            raise RepositoryError(f"Could not save invoice for group {record.group.key}")
        record.id = len(self._store) + 1
        record.invoice_no = f"{self._prefix}-{record.id:05d}"
        self._store[record.id] = replace(record)
        return record

    def get(self, invoice_id: int) -> InvoiceRecord | None:
        return self._store.get(invoice_id)

    def list_by_school(self, school_id: int) -> list[InvoiceRecord]:
        return [r for _, r in sorted(self._store.items()) if r.header.school_id == school_id]


class InMemoryBillingRowRepository(BillingRowRepository):
    """BillingRowRepository over a fixed list of (school_id, BookRow) pairs."""

    def __init__(self, rows: list[tuple[int, BookRow]] | None = None):
        self._rows = list(rows or [])

    def add(self, school_id: int, row: BookRow) -> None:
        self._rows.append((school_id, row))

    def list_book_rows(self, filters: ReportFilters) -> list[BookRow]:
        result = []
        for school_id, row in self._rows:
            if school_id != filters.school_id:
                continue
            if row.status == "cancelled":
                continue
            if row.status == "draft" and not filters.include_draft:
                continue
            if filters.supplier_id is not None and row.supplier_id != filters.supplier_id:
                continue
            if filters.academic_session and row.academic_session != filters.academic_session:
                continue
            if filters.date_from is not None and (
                row.order_date is None or row.order_date < filters.date_from
            ):
                continue
            if filters.date_to is not None and (
                row.order_date is None or row.order_date > filters.date_to
            ):
                continue
            result.append(row)
        return result
