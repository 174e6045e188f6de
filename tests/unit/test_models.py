"""Tests for domain models — pure Python, no external dependencies."""

from dataclasses import FrozenInstanceError
from decimal import Decimal
from enum import Enum

import pytest

from domain.models import (
    BillCharges,
    CommitOutcome,
    CommitStatus,
    Discount,
    DiscountType,
    GroupCommitResult,
    GroupingMode,
    InvoiceGroup,
    InvoiceHeader,
    InvoiceRecord,
    LineItem,
    ReportView,
    RollupNode,
)


# ── Enums ───────────────────────────────────────────────────────────────


class TestEnums:
    def test_are_enums(self):
        for cls in (DiscountType, GroupingMode, ReportView, CommitStatus):
            assert issubclass(cls, Enum)

    def test_grouping_values(self):
        assert {m.value for m in GroupingMode} == {"NONE", "CLASS", "PUBLISHER"}

    def test_discount_values(self):
        assert {m.value for m in DiscountType} == {"NONE", "PERCENT", "AMOUNT"}

    def test_commit_status_lookup(self):
        assert CommitStatus("failed") is CommitStatus.FAILED

    def test_unknown_value_raises(self):
        with pytest.raises(ValueError):
            GroupingMode("SUBJECT")


# ── Value objects ───────────────────────────────────────────────────────


class TestDiscount:
    def test_default_is_none(self):
        assert Discount() == Discount.none()
        assert Discount().type is DiscountType.NONE

    def test_factories(self):
        assert Discount.percent(10) == Discount(DiscountType.PERCENT, 10)
        assert Discount.amount("5").value == "5"

    def test_frozen(self):
        with pytest.raises(FrozenInstanceError):
            Discount().value = Decimal("1")


class TestBillCharges:
    def test_total_includes_negative_round_off(self):
        charges = BillCharges(
            shipping=Decimal("10"), packing=Decimal("2"), round_off=Decimal("-0.40")
        )
        assert charges.total == Decimal("11.60")


class TestLineItem:
    def test_defaults(self):
        item = LineItem("1", "B1")
        assert item.requested_qty == 0
        assert item.class_name == "Unassigned"
        assert item.stock_available is None
        assert item.item_discount == Discount.none()


class TestRollupNode:
    def test_add_is_field_wise(self):
        a = RollupNode(ordered_qty=3, short_qty=1, net_amount=Decimal("10.50"))
        b = RollupNode(ordered_qty=2, received_qty=2, net_amount=Decimal("4.25"))
        total = a + b
        assert total.ordered_qty == 5
        assert total.received_qty == 2
        assert total.short_qty == 1
        assert total.net_amount == Decimal("14.75")

    def test_zero_is_identity(self):
        node = RollupNode(gross_amount=Decimal("3"))
        assert RollupNode() + node == node


# ── Commit outcome ──────────────────────────────────────────────────────


def _result(key, status):
    invoice = None
    if status is CommitStatus.CREATED:
        invoice = InvoiceRecord(
            header=InvoiceHeader(school_id=1),
            grouping=GroupingMode.NONE,
            group=InvoiceGroup(key=key),
        )
    return GroupCommitResult(group_key=key, status=status, invoice=invoice)


class TestCommitOutcome:
    def test_all_succeeded(self):
        outcome = CommitOutcome((_result("a", CommitStatus.CREATED),))
        assert outcome.all_succeeded
        assert not outcome.partial
        assert not outcome.none_succeeded

    def test_partial(self):
        outcome = CommitOutcome(
            (_result("a", CommitStatus.CREATED), _result("b", CommitStatus.FAILED))
        )
        assert outcome.partial
        assert len(outcome.created) == 1

    def test_none_succeeded(self):
        outcome = CommitOutcome((_result("a", CommitStatus.REJECTED),))
        assert outcome.none_succeeded
        assert not outcome.partial

    def test_empty(self):
        outcome = CommitOutcome()
        assert not outcome.all_succeeded
        assert outcome.none_succeeded

    def test_invoice_total_without_totals(self):
        assert _result("a", CommitStatus.CREATED).invoice.total == Decimal("0")
