"""Sample schools, suppliers and orders for demos and smoke tests."""

from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session

from backoffice.adapters.outbound.sqlalchemy_models import (
    Book, School, Supplier, SupplierOrder, SupplierOrderItem,
)


def seed_demo_data(session: Session) -> School:
    """Insert one school with two suppliers and three orders; returns the school.

    Order states cover the report filters: one received order with a
    shortage, one sent order with nothing received yet and one draft.
    """
    school = School(name="Green Valley Public School")
    oxford = Supplier(name="Oxford University Press")
    bharati = Supplier(name="Bharati Bhawan")
    session.add_all([school, oxford, bharati])

    maths = Book(title="New Maths Ahead 5", class_name="Class 5", publisher_name="Oxford",
                 subject="Mathematics", code="OUP-M5",
                 rate=Decimal("345"), mrp=Decimal("395"))
    english = Book(title="Broad Ways English 5", class_name="Class 5", publisher_name="Oxford",
                   rate=Decimal("310"), mrp=Decimal("350"))
    science = Book(title="Science Today 10", class_name="Class 10", publisher_name="Bharati",
                   rate=Decimal("420"))
    hindi = Book(title="Vasant Hindi 10", class_name="Class 10", publisher_name="Bharati",
                 selling_price=Decimal("150"), mrp=Decimal("175"))
    session.add_all([maths, english, science, hindi])
    session.flush()

    session.add_all([
        SupplierOrder(
            order_no="PO-2024-001", school_id=school.id, supplier_id=oxford.id,
            order_date=date(2024, 3, 18), academic_session="2024-25", status="received",
            bill_no="OUP/7781",
            items=[
                SupplierOrderItem(book_id=maths.id, ordered_qty=120, received_qty=95,
                                  rate=Decimal("345"), discount_pct=Decimal("15")),
                SupplierOrderItem(book_id=english.id, ordered_qty=120, received_qty=120,
                                  rate=Decimal("310"), discount_pct=Decimal("15")),
            ],
        ),
        SupplierOrder(
            order_no="PO-2024-002", school_id=school.id, supplier_id=bharati.id,
            order_date=date(2024, 3, 25), academic_session="2024-25", status="sent",
            items=[
                SupplierOrderItem(book_id=science.id, ordered_qty=80, received_qty=0,
                                  rate=Decimal("420"), discount_amt=Decimal("40")),
            ],
        ),
        SupplierOrder(
            order_no="PO-2024-003", school_id=school.id, supplier_id=bharati.id,
            order_date=date(2024, 4, 2), academic_session="2024-25", status="draft",
            items=[
                SupplierOrderItem(book_id=hindi.id, ordered_qty=80, received_qty=0,
                                  rate=Decimal("150")),
            ],
        ),
    ])
    session.commit()
    return school
