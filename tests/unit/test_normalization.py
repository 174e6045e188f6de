"""Tests for domain.normalization — upstream records to canonical line items."""

import logging
from decimal import Decimal

from domain.models import DiscountType, UNASSIGNED
from domain.normalization import (
    book_row_from_record,
    first_present,
    line_item_from_record,
    normalize_group_key,
)
from domain.pricing import RECEIPT_PRICE_CHAIN, SCHOOL_SALE_PRICE_CHAIN


class TestNormalizeGroupKey:
    """Tests for normalize_group_key."""

    def test_collapses_whitespace(self):
        assert normalize_group_key("  Class   10 ") == "Class 10"

    def test_blank_is_unassigned(self):
        assert normalize_group_key("   ") == UNASSIGNED

    def test_none_is_unassigned(self):
        assert normalize_group_key(None) == UNASSIGNED

    def test_number(self):
        assert normalize_group_key(5) == "5"


class TestFirstPresent:
    def test_nested_path(self):
        record = {"book": {"publisher": {"name": "Oxford"}}}
        assert first_present(record, ("publisher_name", "book.publisher.name")) == "Oxford"

    def test_skips_blank_strings(self):
        assert first_present({"a": " ", "b": "x"}, ("a", "b")) == "x"

    def test_default(self):
        assert first_present({}, ("a",), default=0) == 0


class TestLineItemFromRecord:
    """Tests for line_item_from_record."""

    def test_requirement_item(self):
        item = line_item_from_record(
            {
                "requirement_item_id": 42,
                "book_id": 7,
                "required_qty": "12",
                "rate": 0,
                "selling_price": "55.50",
                "mrp": 60,
                "title": " Maths Book ",
                "class_name": "Class 5",
                "publisher_name": "",
            }
        )
        assert item.line_id == "42"
        assert item.product_id == "7"
        assert item.requested_qty == 12
        assert item.default_unit_price == Decimal("55.50")
        assert item.title == "Maths Book"
        assert item.publisher_name == UNASSIGNED
        assert item.stock_available is None

    def test_nested_book_fields(self):
        item = line_item_from_record(
            {
                "id": 3,
                "qty": 2,
                "book": {
                    "id": 9,
                    "title": "Atlas",
                    "class_name": "Class 8",
                    "publisher": {"name": "Orient"},
                    "mrp": "120",
                },
            }
        )
        assert item.product_id == "9"
        assert item.title == "Atlas"
        assert item.class_name == "Class 8"
        assert item.publisher_name == "Orient"
        assert item.default_unit_price == Decimal("120")

    def test_sale_price_chain(self):
        record = {"id": 1, "book_id": 2, "qty": 1, "rate": 40, "sale_price": 45}
        item = line_item_from_record(record, SCHOOL_SALE_PRICE_CHAIN)
        assert item.default_unit_price == Decimal("45")

    def test_receipt_chain_and_discount(self):
        record = {"id": 1, "book_id": 2, "qty": 1, "unit_price": "30", "discount_pct": 5}
        item = line_item_from_record(record, RECEIPT_PRICE_CHAIN)
        assert item.default_unit_price == Decimal("30")
        assert item.item_discount.type is DiscountType.PERCENT

    def test_garbage_quantity_and_stock(self):
        item = line_item_from_record({"id": 1, "qty": "abc", "stock": "4.9"})
        assert item.requested_qty == 0
        assert item.stock_available == 4

    def test_line_id_falls_back_to_product(self):
        assert line_item_from_record({"book_id": 11}).line_id == "11"


class TestBookRowFromRecord:
    def test_supplier_nested(self):
        row = book_row_from_record(
            {
                "book_id": 1,
                "title": "Maths",
                "class_name": "",
                "supplier": {"id": 4, "name": "Oxford  Press"},
                "ordered_qty": 10,
                "received_qty": "6",
                "rate": "50",
                "discount_amt": "2",
                "status": "sent",
            }
        )
        assert row.supplier_id == 4
        assert row.supplier_name == "Oxford Press"
        assert row.class_name == UNASSIGNED
        assert row.received_qty == 6
        assert row.rate == Decimal("50")
        assert row.discount.type is DiscountType.AMOUNT

    def test_flat_supplier_columns(self):
        row = book_row_from_record({"book_id": 2, "supplier_id": 3, "supplier_name": "Orient"})
        assert row.supplier_id == 3
        assert row.supplier_name == "Orient"
        assert row.ordered_qty == 0

    def test_plain_string_supplier(self):
        row = book_row_from_record({"book_id": 1, "title": "X", "supplier": "OUP", "supplier_id": 8})
        assert row.supplier_name == "OUP"
        assert row.supplier_id == 8

    def test_unexpected_supplier_shape(self):
        row = book_row_from_record({"book_id": 1, "supplier": ["OUP"]})
        assert row.supplier_id is None
        assert row.supplier_name == UNASSIGNED

    def test_catalog_and_bill_fields(self):
        row = book_row_from_record(
            {"book_id": 1, "book": {"subject": "Science", "code": "SC-8"}, "bill_no": "B-12"}
        )
        assert (row.subject, row.code, row.bill_no) == ("Science", "SC-8", "B-12")

    def test_both_discount_columns_warn(self, caplog):
        with caplog.at_level(logging.WARNING, logger="domain.normalization"):
            row = book_row_from_record(
                {"book_id": 1, "order_no": "PO-3", "discount_pct": 10, "discount_amt": 5}
            )
        assert row.discount.type is DiscountType.AMOUNT
        assert row.discount.value == Decimal("5")
        assert "DISC_002" in caplog.text
        assert "PO-3" in caplog.text
