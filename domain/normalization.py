"""Domain normalization — pure functions, zero external dependencies.

Upstream records (requirement items, sale preview items, receipt items)
name the same facts differently and nest them at different depths. They are
mapped here, once, into the canonical LineItem / BookRow shapes so the
engine only ever sees one shape.

Only stdlib and domain imports allowed.
"""

import logging

from domain.billing_rules import check_discount_fields
from domain.models import UNASSIGNED, BookRow, LineItem
from domain.money import clamp_int
from domain.pricing import REQUIREMENT_PRICE_CHAIN, discount_from_fields, pick_unit_price

_LINE_ID_PATHS = ("requirement_item_id", "line_id", "id")
_PRODUCT_ID_PATHS = ("book_id", "product_id", "book.id", "product.id")
_TITLE_PATHS = ("title", "book.title", "product.name", "name")
_CLASS_PATHS = ("class_name", "book.class_name", "class.class_name", "school_class.name")
_PUBLISHER_PATHS = (
    "publisher_name",
    "book.publisher.name",
    "publisher.name",
    "book.publisher_name",
)
_QTY_PATHS = ("requested_qty", "required_qty", "qty", "quantity")
_STOCK_PATHS = ("stock_available", "available_qty", "stock")

logger = logging.getLogger(__name__)


def normalize_group_key(value):
    """Collapse whitespace; blank values become the "Unassigned" sentinel."""
    text = " ".join(str(value or "").split())
    return text or UNASSIGNED


def _dig(record, path):
    current = record
    for part in path.split("."):
        if not isinstance(current, dict):
            return None
        current = current.get(part)
    return current


def first_present(record, paths, default=None):
    """Return the first non-null, non-blank value found along *paths*."""
    for path in paths:
        value = _dig(record, path)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return default


def discount_from_columns(discount_pct, discount_amt, ref=None):
    """Discount from an order row's percent / amount pair; warns when both are set."""
    check = check_discount_fields(ref, discount_pct, discount_amt)
    if not check.is_valid:
        logger.warning("%s: %s", check.code, check.description)
    return discount_from_fields(discount_pct, discount_amt)


def line_item_from_record(record, price_chain=REQUIREMENT_PRICE_CHAIN):
    """Map an upstream line record onto the canonical LineItem."""
    product = first_present(record, _PRODUCT_ID_PATHS, default="")
    line_id = first_present(record, _LINE_ID_PATHS, default=product)
    price_source = dict(record)
    book = record.get("book")
    if isinstance(book, dict):
        # fields on the line win over the catalog entry
        price_source = {**book, **record}
    stock = first_present(record, _STOCK_PATHS)
    return LineItem(
        line_id=str(line_id),
        product_id=str(product),
        requested_qty=clamp_int(first_present(record, _QTY_PATHS, default=0)),
        default_unit_price=pick_unit_price(price_source, price_chain),
        title=str(first_present(record, _TITLE_PATHS, default="")).strip(),
        class_name=normalize_group_key(first_present(record, _CLASS_PATHS)),
        publisher_name=normalize_group_key(first_present(record, _PUBLISHER_PATHS)),
        stock_available=None if stock is None else clamp_int(stock),
        item_discount=discount_from_columns(
            record.get("discount_pct"), record.get("discount_amt"), ref=line_id
        ),
    )


def book_row_from_record(record):
    """Map a supplier-order report row onto the canonical BookRow."""
    supplier_name = first_present(record, ("supplier.name", "supplier_name"))
    if supplier_name is None and isinstance(record.get("supplier"), str):
        supplier_name = record["supplier"]
    return BookRow(
        book_id=str(first_present(record, ("book_id", "book.id"), default="")),
        title=str(first_present(record, _TITLE_PATHS, default="")).strip(),
        class_name=normalize_group_key(first_present(record, _CLASS_PATHS)),
        supplier_id=first_present(record, ("supplier.id", "supplier_id")),
        supplier_name=normalize_group_key(supplier_name),
        ordered_qty=clamp_int(record.get("ordered_qty")),
        received_qty=clamp_int(record.get("received_qty")),
        rate=pick_unit_price(record, ("rate", "unit_price")),
        discount=discount_from_columns(
            record.get("discount_pct"), record.get("discount_amt"), ref=record.get("order_no")
        ),
        order_id=record.get("order_id"),
        order_no=record.get("order_no"),
        order_date=record.get("order_date"),
        academic_session=record.get("academic_session"),
        status=record.get("status"),
        subject=first_present(record, ("subject", "book.subject")),
        code=first_present(record, ("code", "book.code")),
        bill_no=record.get("bill_no"),
    )
