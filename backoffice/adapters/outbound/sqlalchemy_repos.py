"""SQLAlchemy implementations of domain repository ports.

Each adapter translates between ORM models (sqlalchemy_models) and
pure domain models (domain.models), keeping the domain layer free
of any infrastructure dependency.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backoffice.adapters.outbound.sqlalchemy_models import (
    Book as OrmBook,
    Invoice as OrmInvoice,
    InvoiceLine as OrmInvoiceLine,
    Supplier as OrmSupplier,
    SupplierOrder as OrmSupplierOrder,
    SupplierOrderItem as OrmSupplierOrderItem,
)
from domain.models import (
    ZERO,
    BillCharges,
    BookRow,
    Discount,
    DiscountType,
    GroupingMode,
    GroupTotals,
    InvoiceGroup,
    InvoiceHeader,
    InvoiceRecord,
    LineItem,
    PricedLine,
    ReportFilters,
)
from domain.money import to_number
from domain.normalization import discount_from_columns, normalize_group_key
from domain.ports import BillingRowRepository, InvoiceRepository, RepositoryError
from domain.pricing import pick_unit_price

logger = logging.getLogger(__name__)


def _report_rate(item, book):
    """Order item rate, else the book's rate, selling price, then MRP."""
    return pick_unit_price(
        {
            "item_rate": item.rate,
            "rate": book.rate,
            "selling_price": book.selling_price,
            "mrp": book.mrp,
        },
        ("item_rate", "rate", "selling_price", "mrp"),
    )


def _discount(kind, value) -> Discount:
    if not kind:
        return Discount.none()
    return Discount(DiscountType(kind), value if value is not None else ZERO)


class SqlAlchemyInvoiceRepository(InvoiceRepository):
    """SQLAlchemy adapter for the InvoiceRepository port.

    Every save() commits on its own, so a multi-group commit stays a
    sequence of independent transactions.
    """

    def __init__(self, session: Session, prefix: str = "INV") -> None:
        self._session = session
        self._prefix = prefix

    # ── Commands ───────────────────────────────────────────────────────

    def save(self, record: InvoiceRecord) -> InvoiceRecord:
        """Persist an invoice with its lines and return it with id and number."""
        totals = record.group.totals
        if totals is None:
            raise ValueError(f"Group {record.group.key} has not been aggregated")
        orm_invoice = OrmInvoice(
            school_id=record.header.school_id,
            grouping_mode=record.grouping.value,
            group_key=record.group.key,
            invoice_date=record.header.invoice_date,
            academic_session=record.header.academic_session,
            status=record.header.status,
            notes=record.header.notes,
            subtotal=totals.subtotal,
            discount_type=totals.discount.type.value,
            discount_value=to_number(totals.discount.value),
            discount_amount=totals.discount_amount,
            shipping_charge=totals.charges.shipping,
            packing_charge=totals.charges.packing,
            other_charge=totals.charges.other,
            tax=totals.charges.tax,
            round_off=totals.charges.round_off,
            total=totals.total,
            lines=[
                OrmInvoiceLine(
                    line_id=line.item.line_id,
                    product_id=line.item.product_id,
                    title=line.item.title,
                    class_name=line.item.class_name,
                    publisher_name=line.item.publisher_name,
                    qty=line.qty,
                    unit_price=line.unit_price,
                    discount_type=line.item.item_discount.type.value,
                    discount_value=to_number(line.item.item_discount.value),
                    net_unit_price=line.net_unit_price,
                    line_amount=line.line_amount,
                )
                for line in record.group.lines
            ],
        )
        try:
            self._session.add(orm_invoice)
            self._session.flush()
            orm_invoice.invoice_no = f"{self._prefix}-{orm_invoice.id:05d}"
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            logger.error("Could not save invoice for group %s: %s", record.group.key, exc)
            raise RepositoryError(f"Could not save invoice for group {record.group.key}") from exc
        record.id = orm_invoice.id
        record.invoice_no = orm_invoice.invoice_no
        return record

    # ── Queries ────────────────────────────────────────────────────────

    def get(self, invoice_id: int) -> InvoiceRecord | None:
        orm = self._session.get(OrmInvoice, invoice_id)
        if orm is None:
            return None
        return self._to_domain(orm)

    def list_by_school(self, school_id: int) -> list[InvoiceRecord]:
        """Return a school's invoices, oldest first."""
        stmt = (
            select(OrmInvoice)
            .where(OrmInvoice.school_id == school_id)
            .order_by(OrmInvoice.id)
        )
        return [self._to_domain(orm) for orm in self._session.scalars(stmt)]

    # ── Internal helpers ───────────────────────────────────────────────

    @staticmethod
    def _to_domain(orm: OrmInvoice) -> InvoiceRecord:
        """Convert an ORM Invoice row (with its lines) to a domain InvoiceRecord."""
        lines = tuple(
            PricedLine(
                item=LineItem(
                    line_id=ln.line_id,
                    product_id=ln.product_id,
                    requested_qty=ln.qty,
                    default_unit_price=ln.unit_price or ZERO,
                    title=ln.title or "",
                    class_name=normalize_group_key(ln.class_name),
                    publisher_name=normalize_group_key(ln.publisher_name),
                    item_discount=_discount(ln.discount_type, ln.discount_value),
                ),
                qty=ln.qty,
                unit_price=ln.unit_price or ZERO,
                net_unit_price=ln.net_unit_price or ZERO,
                line_amount=ln.line_amount,
            )
            for ln in sorted(orm.lines, key=lambda ln: ln.id)
        )
        totals = GroupTotals(
            subtotal=orm.subtotal,
            discount=_discount(orm.discount_type, orm.discount_value),
            discount_amount=orm.discount_amount or ZERO,
            charges=BillCharges(
                shipping=orm.shipping_charge or ZERO,
                packing=orm.packing_charge or ZERO,
                other=orm.other_charge or ZERO,
                tax=orm.tax or ZERO,
                round_off=orm.round_off or ZERO,
            ),
            total=orm.total,
            line_count=len(lines),
            billable_count=sum(1 for ln in lines if ln.qty > 0),
        )
        return InvoiceRecord(
            header=InvoiceHeader(
                school_id=orm.school_id,
                invoice_date=orm.invoice_date,
                academic_session=orm.academic_session,
                notes=orm.notes,
                status=orm.status or "draft",
            ),
            grouping=GroupingMode(orm.grouping_mode or "NONE"),
            group=InvoiceGroup(key=orm.group_key, lines=lines, totals=totals),
            invoice_no=orm.invoice_no,
            id=orm.id,
        )


class SqlAlchemyBillingRowRepository(BillingRowRepository):
    """SQLAlchemy adapter for the BillingRowRepository port."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def list_book_rows(self, filters: ReportFilters) -> list[BookRow]:
        """Return committed order item rows of a school matching *filters*.

        Joins items -> orders -> suppliers and items -> books. Cancelled
        orders are always excluded, drafts unless ``include_draft`` is set.
        """
        stmt = (
            select(OrmSupplierOrderItem, OrmSupplierOrder, OrmBook, OrmSupplier.name)
            .join(OrmSupplierOrder, OrmSupplierOrderItem.order_id == OrmSupplierOrder.id)
            .join(OrmBook, OrmSupplierOrderItem.book_id == OrmBook.id)
            .outerjoin(OrmSupplier, OrmSupplierOrder.supplier_id == OrmSupplier.id)
            .where(OrmSupplierOrder.school_id == filters.school_id)
            .where(OrmSupplierOrder.status != "cancelled")
            .order_by(OrmSupplierOrder.id, OrmSupplierOrderItem.id)
        )
        if not filters.include_draft:
            stmt = stmt.where(OrmSupplierOrder.status != "draft")
        if filters.supplier_id is not None:
            stmt = stmt.where(OrmSupplierOrder.supplier_id == filters.supplier_id)
        if filters.academic_session:
            stmt = stmt.where(OrmSupplierOrder.academic_session == filters.academic_session)
        if filters.date_from is not None:
            stmt = stmt.where(OrmSupplierOrder.order_date >= filters.date_from)
        if filters.date_to is not None:
            stmt = stmt.where(OrmSupplierOrder.order_date <= filters.date_to)

        try:
            rows = self._session.execute(stmt).all()
        except SQLAlchemyError as exc:
            logger.error("Could not load billing rows for school %s: %s", filters.school_id, exc)
            raise RepositoryError("Could not load billing rows") from exc

        return [
            BookRow(
                book_id=str(book.id),
                title=book.title or "",
                class_name=normalize_group_key(book.class_name),
                supplier_id=order.supplier_id,
                supplier_name=normalize_group_key(supplier_name),
                ordered_qty=item.ordered_qty or 0,
                received_qty=item.received_qty or 0,
                rate=_report_rate(item, book),
                discount=discount_from_columns(
                    item.discount_pct, item.discount_amt, ref=order.order_no
                ),
                order_id=order.id,
                order_no=order.order_no,
                order_date=order.order_date,
                academic_session=order.academic_session,
                status=order.status,
                subject=book.subject,
                code=book.code,
                bill_no=order.bill_no,
            )
            for item, order, book, supplier_name in rows
        ]
