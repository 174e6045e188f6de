from datetime import datetime, timezone
from sqlalchemy import (
    Column, Integer, String, Numeric, Date, DateTime, Text, ForeignKey, Index,
)
from sqlalchemy.orm import DeclarativeBase, relationship


class Base(DeclarativeBase):
    pass


class School(Base):
    __tablename__ = "schools"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)

    invoices = relationship("Invoice", back_populates="school")


class Supplier(Base):
    __tablename__ = "suppliers"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)

    orders = relationship("SupplierOrder", back_populates="supplier")


class Book(Base):
    __tablename__ = "books"

    id = Column(Integer, primary_key=True)
    title = Column(Text, nullable=False)
    class_name = Column(String)
    publisher_name = Column(String)
    subject = Column(String)
    code = Column(String)
    rate = Column(Numeric(12, 2))
    selling_price = Column(Numeric(12, 2))
    mrp = Column(Numeric(12, 2))

    __table_args__ = (
        Index("idx_books_class", "class_name"),
    )


class SupplierOrder(Base):
    __tablename__ = "supplier_orders"

    id = Column(Integer, primary_key=True)
    order_no = Column(String, nullable=False)
    school_id = Column(Integer, ForeignKey("schools.id"), nullable=False)
    supplier_id = Column(Integer, ForeignKey("suppliers.id"))
    order_date = Column(Date)
    academic_session = Column(String)
    status = Column(String, default="draft")  # "draft", "sent", "received", "cancelled"
    bill_no = Column(String)

    supplier = relationship("Supplier", back_populates="orders")
    items = relationship("SupplierOrderItem", back_populates="order", cascade="all, delete-orphan")

    __table_args__ = (
        Index("idx_supplier_orders_school", "school_id"),
        Index("idx_supplier_orders_date", "order_date"),
    )


class SupplierOrderItem(Base):
    __tablename__ = "supplier_order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("supplier_orders.id"), nullable=False)
    book_id = Column(Integer, ForeignKey("books.id"), nullable=False)
    ordered_qty = Column(Integer, default=0)
    received_qty = Column(Integer, default=0)
    rate = Column(Numeric(12, 2))
    discount_pct = Column(Numeric(7, 3))
    discount_amt = Column(Numeric(12, 2))

    order = relationship("SupplierOrder", back_populates="items")
    book = relationship("Book")

    __table_args__ = (
        Index("idx_supplier_order_items_order", "order_id"),
    )


class Invoice(Base):
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True)
    invoice_no = Column(String, unique=True)
    school_id = Column(Integer, ForeignKey("schools.id"), nullable=False)
    grouping_mode = Column(String, default="NONE")  # "NONE", "CLASS", "PUBLISHER"
    group_key = Column(String, nullable=False)
    invoice_date = Column(Date)
    academic_session = Column(String)
    status = Column(String, default="draft")
    notes = Column(Text)
    subtotal = Column(Numeric(12, 2), nullable=False)
    discount_type = Column(String, default="NONE")
    discount_value = Column(Numeric(12, 3))
    discount_amount = Column(Numeric(12, 2))
    shipping_charge = Column(Numeric(12, 2))
    packing_charge = Column(Numeric(12, 2))
    other_charge = Column(Numeric(12, 2))
    tax = Column(Numeric(12, 2))
    round_off = Column(Numeric(12, 2))
    total = Column(Numeric(12, 2), nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    school = relationship("School", back_populates="invoices")
    lines = relationship("InvoiceLine", back_populates="invoice", cascade="all, delete-orphan")

    __table_args__ = (
        Index("idx_invoices_school", "school_id"),
    )


class InvoiceLine(Base):
    __tablename__ = "invoice_lines"

    id = Column(Integer, primary_key=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=False)
    line_id = Column(String, nullable=False)
    product_id = Column(String, nullable=False)
    title = Column(Text)
    class_name = Column(String)
    publisher_name = Column(String)
    qty = Column(Integer, nullable=False)
    unit_price = Column(Numeric(14, 4))
    discount_type = Column(String, default="NONE")
    discount_value = Column(Numeric(12, 3))
    net_unit_price = Column(Numeric(14, 4))
    line_amount = Column(Numeric(12, 2), nullable=False)

    invoice = relationship("Invoice", back_populates="lines")

    __table_args__ = (
        Index("idx_invoice_lines_invoice", "invoice_id"),
    )
