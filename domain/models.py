"""Domain models — pure Python, zero external dependencies.

Only stdlib imports allowed: dataclasses, datetime, decimal, enum.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import date
from decimal import Decimal
from enum import Enum

ZERO = Decimal("0")
UNASSIGNED = "Unassigned"
ALL_GROUP = "ALL"


class DiscountType(Enum):
    """How a discount value is expressed."""

    NONE = "NONE"
    PERCENT = "PERCENT"
    AMOUNT = "AMOUNT"


class GroupingMode(Enum):
    """How line items are split into invoices."""

    NONE = "NONE"
    CLASS = "CLASS"
    PUBLISHER = "PUBLISHER"


class ReportView(Enum):
    """Which book rows a billing report keeps."""

    ALL = "ALL"
    RECEIVED = "RECEIVED"
    PENDING = "PENDING"


class CommitStatus(Enum):
    """Outcome of committing one invoice group."""

    CREATED = "created"
    REJECTED = "rejected"
    FAILED = "failed"


# ── Value Objects ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class Discount:
    """A discount expressed as a percentage or a flat currency amount."""

    type: DiscountType = DiscountType.NONE
    value: Decimal = ZERO

    @classmethod
    def none(cls) -> Discount:
        return cls()

    @classmethod
    def percent(cls, value) -> Discount:
        return cls(DiscountType.PERCENT, value)

    @classmethod
    def amount(cls, value) -> Discount:
        return cls(DiscountType.AMOUNT, value)


@dataclass(frozen=True)
class BillCharges:
    """Additive bill-level charges. Only round_off may be negative."""

    shipping: Decimal = ZERO
    packing: Decimal = ZERO
    other: Decimal = ZERO
    tax: Decimal = ZERO
    round_off: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return self.shipping + self.packing + self.other + self.tax + self.round_off


@dataclass(frozen=True)
class GroupAdjustment:
    """Bill discount and charges for one specific group key."""

    discount: Discount = field(default_factory=Discount)
    charges: BillCharges = field(default_factory=BillCharges)


@dataclass(frozen=True)
class LineItem:
    """One book or product within a requirement, order, or receipt."""

    line_id: str
    product_id: str
    requested_qty: int = 0
    default_unit_price: Decimal = ZERO
    title: str = ""
    class_name: str = UNASSIGNED
    publisher_name: str = UNASSIGNED
    stock_available: int | None = None
    item_discount: Discount = field(default_factory=Discount)


@dataclass(frozen=True)
class LinePrice:
    """Result of pricing one line."""

    net_unit_price: Decimal
    line_amount: Decimal


@dataclass(frozen=True)
class PricedLine:
    """A line item with its resolved quantity, price and amount."""

    item: LineItem
    qty: int
    unit_price: Decimal
    net_unit_price: Decimal
    line_amount: Decimal


@dataclass(frozen=True)
class GroupTotals:
    """Totals of one invoice group."""

    subtotal: Decimal
    discount: Discount
    discount_amount: Decimal
    charges: BillCharges
    total: Decimal
    line_count: int = 0
    billable_count: int = 0


@dataclass(frozen=True)
class InvoiceGroup:
    """Priced lines sharing one grouping key; totals are attached once aggregated."""

    key: str
    lines: tuple[PricedLine, ...] = ()
    totals: GroupTotals | None = None


@dataclass(frozen=True)
class GrandTotals:
    """Element-wise sum of every group's totals."""

    subtotal: Decimal = ZERO
    discount_amount: Decimal = ZERO
    charges_total: Decimal = ZERO
    total: Decimal = ZERO
    group_count: int = 0
    billable_count: int = 0


@dataclass(frozen=True)
class Fulfillment:
    """Shortage of a requested quantity against what is available."""

    short_qty: int
    can_fulfill: bool


@dataclass(frozen=True)
class RuleResult:
    """Read-only result of a business rule check."""

    is_valid: bool
    code: str
    description: str
    details: dict = field(default_factory=dict)


@dataclass(frozen=True)
class Rejection:
    """Why a group cannot become an invoice."""

    group_key: str
    reasons: tuple[RuleResult, ...] = ()


@dataclass(frozen=True)
class Preview:
    """Priced groups, their grand totals and any non-blocking warnings."""

    grouping: GroupingMode
    groups: tuple[InvoiceGroup, ...] = ()
    grand: GrandTotals = field(default_factory=GrandTotals)
    warnings: tuple[RuleResult, ...] = ()

    @property
    def is_committable(self) -> bool:
        """True when at least one group has a line with positive quantity."""
        return any(g.totals is not None and g.totals.billable_count > 0 for g in self.groups)


# ── Invoices ────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class InvoiceHeader:
    """Caller-supplied header fields copied onto every created invoice."""

    school_id: int
    invoice_date: date | None = None
    academic_session: str | None = None
    notes: str | None = None
    status: str = "draft"


@dataclass
class InvoiceRecord:
    """A persisted (or about to be persisted) invoice for one group."""

    header: InvoiceHeader
    grouping: GroupingMode
    group: InvoiceGroup
    invoice_no: str | None = None
    id: int | None = None

    @property
    def total(self) -> Decimal:
        return self.group.totals.total if self.group.totals else ZERO


@dataclass(frozen=True)
class GroupCommitResult:
    """Tagged outcome of committing a single group."""

    group_key: str
    status: CommitStatus
    invoice: InvoiceRecord | None = None
    rejection: Rejection | None = None
    error: str | None = None


@dataclass(frozen=True)
class CommitOutcome:
    """Per-group results of a multi-invoice commit; not atomic across groups."""

    results: tuple[GroupCommitResult, ...] = ()

    @property
    def created(self) -> list[InvoiceRecord]:
        return [r.invoice for r in self.results if r.status is CommitStatus.CREATED]

    @property
    def all_succeeded(self) -> bool:
        return bool(self.results) and all(
            r.status is CommitStatus.CREATED for r in self.results
        )

    @property
    def none_succeeded(self) -> bool:
        return not self.created

    @property
    def partial(self) -> bool:
        return not self.all_succeeded and not self.none_succeeded


# ── Billing report ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class ReportFilters:
    """Selection of committed order rows for a billing report."""

    school_id: int
    supplier_id: int | None = None
    academic_session: str | None = None
    date_from: date | None = None
    date_to: date | None = None
    include_draft: bool = False
    view: ReportView = ReportView.ALL


@dataclass(frozen=True)
class BookRow:
    """One already-committed ordered/received book line of a supplier order."""

    book_id: str
    title: str
    class_name: str
    supplier_id: int | None
    supplier_name: str
    ordered_qty: int
    received_qty: int
    rate: Decimal
    discount: Discount = field(default_factory=Discount)
    order_id: int | None = None
    order_no: str | None = None
    order_date: date | None = None
    academic_session: str | None = None
    status: str | None = None
    subject: str | None = None
    code: str | None = None
    bill_no: str | None = None


@dataclass(frozen=True)
class RollupNode:
    """Quantity and amount counters shared by every level of the report."""

    ordered_qty: int = 0
    received_qty: int = 0
    short_qty: int = 0
    gross_amount: Decimal = ZERO
    discount_amount: Decimal = ZERO
    net_amount: Decimal = ZERO
    ordered_net_amount: Decimal = ZERO
    short_net_amount: Decimal = ZERO

    def __add__(self, other: RollupNode) -> RollupNode:
        return RollupNode(
            **{f.name: getattr(self, f.name) + getattr(other, f.name) for f in fields(self)}
        )


@dataclass(frozen=True)
class BookNode:
    row: BookRow
    net_unit_price: Decimal
    totals: RollupNode


@dataclass(frozen=True)
class ClassNode:
    class_name: str
    totals: RollupNode
    books: tuple[BookNode, ...] = ()


@dataclass(frozen=True)
class SupplierNode:
    supplier_id: int | None
    supplier_name: str
    totals: RollupNode
    classes: tuple[ClassNode, ...] = ()


@dataclass(frozen=True)
class SchoolRollup:
    """Book → class → supplier → school aggregation of one report request."""

    totals: RollupNode = field(default_factory=RollupNode)
    suppliers: tuple[SupplierNode, ...] = ()
