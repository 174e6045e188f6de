"""Integration tests for the billing DataFrame facades."""

from datetime import date
from decimal import Decimal

import pandas as pd
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from backoffice.adapters.outbound.sqlalchemy_models import (
    Base,
    Book,
    School,
    Supplier,
    SupplierOrder,
    SupplierOrderItem,
)
from backoffice.analytics.billing import (
    class_summary_frame,
    group_totals_frame,
    preview_to_frame,
    rollup_to_frame,
    school_billing_report,
)
from backoffice.data.demo import seed_demo_data
from domain.invoicing import preview
from domain.models import BillCharges, Discount, GroupingMode, LineItem


@pytest.fixture
def session():
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    with Session(engine) as s:
        s.add(School(id=1, name="Green Valley School"))
        s.add_all([
            Supplier(id=1, name="Oxford"),
            Supplier(id=2, name="Bharati"),
            Book(id=1, title="Maths", class_name="Class 10", rate=Decimal("50")),
            Book(id=2, title="English", class_name="Class 2", rate=Decimal("30")),
            Book(id=3, title="Hindi", class_name="Class 2", rate=Decimal("80")),
        ])
        s.add_all([
            SupplierOrder(
                id=1, order_no="PO-1", school_id=1, supplier_id=1, status="received",
                order_date=date(2024, 4, 1),
                items=[
                    SupplierOrderItem(book_id=1, ordered_qty=100, received_qty=65,
                                      rate=Decimal("50"), discount_pct=Decimal("10")),
                    SupplierOrderItem(book_id=2, ordered_qty=40, received_qty=40),
                ],
            ),
            SupplierOrder(
                id=2, order_no="PO-2", school_id=1, supplier_id=2, status="sent",
                order_date=date(2024, 4, 9),
                items=[SupplierOrderItem(book_id=3, ordered_qty=10, received_qty=0)],
            ),
        ])
        s.flush()
        yield s


def _preview():
    items = [
        LineItem("r1", "b1", 10, 50, title="Maths", class_name="5",
                 item_discount=Discount.percent(10)),
        LineItem("r2", "b2", 4, 120, title="English", class_name="10"),
        LineItem("r3", "b3", 0, 80, title="Atlas", class_name="10"),
    ]
    return preview(items, GroupingMode.CLASS, charges=BillCharges(shipping=Decimal("5")))


class TestPreviewFrames:
    def test_preview_to_frame(self):
        df = preview_to_frame(_preview())
        assert isinstance(df, pd.DataFrame)
        assert list(df["group"]) == ["5", "10", "10"]
        assert df["line_amount"].sum() == pytest.approx(930.0)

    def test_group_totals_frame(self):
        df = group_totals_frame(_preview())
        assert list(df["group"]) == ["5", "10"]
        assert list(df["total"]) == [455.0, 485.0]
        assert list(df["billable_lines"]) == [1, 1]

    def test_empty_preview(self):
        df = preview_to_frame(preview([]))
        assert df.empty
        assert "line_amount" in df.columns


class TestSchoolBillingReport:
    """Tests for school_billing_report."""

    def test_returns_rollup_and_tables(self, session):
        report = school_billing_report(session, school_id=1)
        assert set(report) == {"rollup", "totals", "books", "classes"}
        assert report["totals"]["short_qty"] == 45
        assert report["totals"]["net_amount"] == pytest.approx(2925.0 + 1200.0)

    def test_books_frame(self, session):
        books = school_billing_report(session, school_id=1)["books"]
        assert list(books["supplier"]) == ["Bharati", "Oxford", "Oxford"]
        assert list(books["title"]) == ["Hindi", "English", "Maths"]

    def test_classes_frame_is_naturally_sorted(self, session):
        classes = school_billing_report(session, school_id=1)["classes"]
        oxford = classes[classes["supplier"] == "Oxford"]
        assert list(oxford["class_name"]) == ["Class 2", "Class 10"]

    def test_pending_view(self, session):
        report = school_billing_report(session, school_id=1, view="pending")
        assert list(report["books"]["title"]) == ["Hindi", "Maths"]
        assert report["totals"]["short_net_amount"] == pytest.approx(800.0 + 1575.0)

    def test_supplier_filter(self, session):
        report = school_billing_report(session, school_id=1, supplier_id=2)
        assert list(report["books"]["supplier"]) == ["Bharati"]

    def test_rollup_frames_match_rollup(self, session):
        rollup = school_billing_report(session, school_id=1)["rollup"]
        assert rollup_to_frame(rollup)["net_amount"].sum() == pytest.approx(
            float(rollup.totals.net_amount)
        )
        assert len(class_summary_frame(rollup)) == 3


class TestDemoData:
    def test_seeded_report(self):
        engine = create_engine("sqlite:///:memory:")
        Base.metadata.create_all(engine)
        with Session(engine) as s:
            school = seed_demo_data(s)
            report = school_billing_report(s, school.id)
            suppliers = [n.supplier_name for n in report["rollup"].suppliers]
            assert suppliers == ["Bharati Bhawan", "Oxford University Press"]
            assert report["totals"]["short_qty"] == 105
            assert report["totals"]["net_amount"] == pytest.approx(59478.75)

            with_draft = school_billing_report(s, school.id, include_draft=True)
            assert with_draft["totals"]["ordered_qty"] == 400

    def test_books_frame_shows_catalog_and_bill_columns(self):
        engine = create_engine("sqlite:///:memory:")
        Base.metadata.create_all(engine)
        with Session(engine) as s:
            school = seed_demo_data(s)
            books = school_billing_report(s, school.id)["books"]
            maths = books[books["title"] == "New Maths Ahead 5"].iloc[0]
            assert maths["code"] == "OUP-M5"
            assert maths["subject"] == "Mathematics"
            assert maths["bill_no"] == "OUP/7781"
