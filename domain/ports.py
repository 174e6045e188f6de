"""Domain ports — abstract interfaces for repositories.

Only stdlib (abc) and domain.models imports allowed.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from domain.models import BookRow, InvoiceRecord, ReportFilters


class RepositoryError(Exception):
    """A persistence adapter failed to read or write."""


# ── Repository Ports ──────────────────────────────────────────────────────


class InvoiceRepository(ABC):
    """Persistence port for committed invoices."""

    @abstractmethod
    def save(self, record: InvoiceRecord) -> InvoiceRecord: ...

    @abstractmethod
    def get(self, invoice_id: int) -> InvoiceRecord | None: ...

    @abstractmethod
    def list_by_school(self, school_id: int) -> list[InvoiceRecord]: ...


class BillingRowRepository(ABC):
    """Read port for already-committed supplier order rows."""

    @abstractmethod
    def list_book_rows(self, filters: ReportFilters) -> list[BookRow]: ...
