"""Line pricing — pure functions, zero external dependencies.

One calculator serves every caller; callers differ only in how they pick a
default unit price (a fallback chain of record fields) and how they express
an item discount (percent or flat amount), both adapted here.

Only stdlib and domain imports allowed.
"""

from domain.models import Discount, DiscountType, LinePrice
from domain.money import ZERO, clamp_int, non_negative, round2, to_number

# Fallback chains: the first positive field wins, otherwise 0.
REQUIREMENT_PRICE_CHAIN = ("rate", "selling_price", "mrp")
SCHOOL_SALE_PRICE_CHAIN = (
    "unit_price",
    "sale_price",
    "requested_unit_price",
    "rate",
    "requested_unit_price_snapshot",
    "default_unit_price",
)
RECEIPT_PRICE_CHAIN = ("unit_price", "rate", "mrp")


def pick_unit_price(record, chain=REQUIREMENT_PRICE_CHAIN):
    """Return the first positive price among *chain* fields of *record*."""
    for name in chain:
        value = to_number(record.get(name))
        if value > ZERO:
            return value
    return ZERO


def discount_from_fields(discount_pct=None, discount_amt=None):
    """Build a Discount from the percent / amount column pair used on orders.

    A positive flat amount takes precedence over a percentage; the two are
    never combined, and the percentage is ignored when both are set.
    """
    amount = to_number(discount_amt)
    if amount > ZERO:
        return Discount.amount(amount)
    pct = to_number(discount_pct)
    if pct > ZERO:
        return Discount.percent(pct)
    return Discount.none()


def parse_discount(kind, value=None):
    """Build a Discount from a type string such as ``"PERCENT"``."""
    if isinstance(kind, Discount):
        return kind
    if kind is None or kind == "":
        return Discount.none()
    dtype = kind if isinstance(kind, DiscountType) else DiscountType(str(kind).upper())
    return Discount(dtype, to_number(value))


def item_discount_amount(unit_price, discount):
    """Per-unit discount of *discount* on *unit_price*, never negative."""
    if discount is None:
        return ZERO
    value = to_number(discount.value)
    if discount.type is DiscountType.AMOUNT:
        amount = value
    elif discount.type is DiscountType.PERCENT:
        amount = to_number(unit_price) * value / 100
    else:
        amount = ZERO
    return max(amount, ZERO)


def price_line(qty, unit_price, item_discount=None) -> LinePrice:
    """Apply the per-unit discount, then multiply by quantity and round."""
    price = non_negative(unit_price)
    net_unit_price = max(price - item_discount_amount(price, item_discount), ZERO)
    return LinePrice(
        net_unit_price=net_unit_price,
        line_amount=round2(net_unit_price * clamp_int(qty)),
    )
