"""Tests for domain.pricing — line pricing and the caller adapters."""

from decimal import Decimal

import pytest

from domain.models import Discount, DiscountType
from domain.pricing import (
    RECEIPT_PRICE_CHAIN,
    discount_from_fields,
    item_discount_amount,
    parse_discount,
    pick_unit_price,
    price_line,
)


class TestPriceLine:
    """Tests for price_line."""

    def test_percent_discount(self):
        result = price_line(10, 50, Discount.percent(10))
        assert result.net_unit_price == Decimal("45")
        assert result.line_amount == Decimal("450.00")

    def test_amount_discount_is_per_unit(self):
        result = price_line(4, 25, Discount.amount(5))
        assert result.net_unit_price == Decimal("20")
        assert result.line_amount == Decimal("80.00")

    def test_no_discount(self):
        assert price_line(3, "19.99").line_amount == Decimal("59.97")

    def test_discount_larger_than_price_floors_at_zero(self):
        result = price_line(2, 30, Discount.amount(50))
        assert result.net_unit_price == Decimal("0")
        assert result.line_amount == Decimal("0.00")

    def test_negative_discount_ignored(self):
        assert price_line(2, 30, Discount.percent(-10)).line_amount == Decimal("60.00")

    def test_line_amount_rounded_half_up(self):
        # 3 * 33.335 = 100.005
        assert price_line(3, "33.335").line_amount == Decimal("100.01")

    def test_zero_qty(self):
        assert price_line(0, 99, Discount.percent(5)).line_amount == Decimal("0.00")

    def test_garbage_inputs_price_to_zero(self):
        result = price_line("x", "y", Discount.amount("z"))
        assert result.line_amount == Decimal("0.00")


class TestItemDiscountAmount:
    def test_percent(self):
        assert item_discount_amount(200, Discount.percent("12.5")) == Decimal("25")

    def test_none(self):
        assert item_discount_amount(200, None) == Decimal("0")

    def test_none_type(self):
        assert item_discount_amount(200, Discount.none()) == Decimal("0")


class TestPickUnitPrice:
    """Tests for the price fallback chains."""

    def test_explicit_rate_first(self):
        assert pick_unit_price({"rate": 80, "selling_price": 90, "mrp": 100}) == Decimal("80")

    def test_falls_back_to_selling_price(self):
        assert pick_unit_price({"rate": 0, "selling_price": 90, "mrp": 100}) == Decimal("90")

    def test_falls_back_to_mrp(self):
        assert pick_unit_price({"rate": None, "mrp": "100"}) == Decimal("100")

    def test_nothing_positive_is_zero(self):
        assert pick_unit_price({"rate": 0}) == Decimal("0")

    def test_custom_chain(self):
        record = {"unit_price": "", "rate": 45, "mrp": 60}
        assert pick_unit_price(record, RECEIPT_PRICE_CHAIN) == Decimal("45")


class TestDiscountAdapters:
    def test_amount_wins_over_percent(self):
        assert discount_from_fields("10", "5") == Discount(DiscountType.AMOUNT, Decimal("5"))

    def test_percent_when_no_amount(self):
        assert discount_from_fields(10, None) == Discount(DiscountType.PERCENT, Decimal("10"))

    def test_neither(self):
        assert discount_from_fields(None, "0") == Discount.none()

    def test_parse_discount_by_name(self):
        assert parse_discount("percent", "7.5") == Discount(DiscountType.PERCENT, Decimal("7.5"))

    def test_parse_discount_blank(self):
        assert parse_discount("") == Discount.none()

    def test_parse_discount_unknown_type(self):
        with pytest.raises(ValueError):
            parse_discount("coupon", 5)
