"""Override resolution — pure functions, zero external dependencies.

Overrides cross the boundary as flat string-keyed mappings
(``"item:<line id>"`` / ``"product:<product id>"``) so callers can diff and
log them as-is. Values are unpacked to ``Decimal | None`` internally, where
``None`` means "not overridden".

Only stdlib and domain imports allowed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from domain.money import ZERO, clamp_int, to_number

ITEM_PREFIX = "item:"
PRODUCT_PREFIX = "product:"


def item_key(line_id) -> str:
    return f"{ITEM_PREFIX}{line_id}"


def product_key(product_id) -> str:
    return f"{PRODUCT_PREFIX}{product_id}"


def parse_override(raw) -> Decimal | None:
    """Unpack one override value; None and blank strings mean absent."""
    if raw is None:
        return None
    if isinstance(raw, str) and not raw.strip():
        return None
    return to_number(raw)


def parse_overrides(flat: dict | None) -> dict[str, Decimal]:
    """Unpack a flat override mapping, dropping absent values."""
    parsed = {}
    for key, raw in (flat or {}).items():
        value = parse_override(raw)
        if value is not None:
            parsed[str(key)] = value
    return parsed


@dataclass(frozen=True)
class OverrideSet:
    """Price and quantity overrides for a single computation pass."""

    price: dict[str, Decimal] = field(default_factory=dict)
    qty: dict[str, Decimal] = field(default_factory=dict)
    global_default_price: Decimal | None = None
    allow_zero_price: bool = False

    @classmethod
    def from_flat(
        cls,
        price_overrides: dict | None = None,
        qty_overrides: dict | None = None,
        global_default_price=None,
        allow_zero_price: bool = False,
    ) -> OverrideSet:
        return cls(
            price=parse_overrides(price_overrides),
            qty=parse_overrides(qty_overrides),
            global_default_price=parse_override(global_default_price),
            allow_zero_price=allow_zero_price,
        )

    def to_flat(self) -> dict:
        """Serialize back to the flat boundary shape for audit logging."""
        return {
            "price_overrides": {k: str(v) for k, v in sorted(self.price.items())},
            "qty_overrides": {k: str(v) for k, v in sorted(self.qty.items())},
            "default_unit_price": (
                str(self.global_default_price)
                if self.global_default_price is not None
                else None
            ),
            "allow_zero_price": self.allow_zero_price,
        }


def _lookup(overrides, line_id, product_id, accept):
    """Return the first accepted override, line id before product id."""
    keys = [item_key(line_id)]
    if product_id is not None:
        keys.append(product_key(product_id))
    for key in keys:
        value = parse_override((overrides or {}).get(key))
        if value is not None and accept(value):
            return value
    return None


def resolve_qty(line_id, requested_qty, qty_overrides, product_id=None, ceiling=None) -> int:
    """Effective quantity: an override (zero included) wins over the requested quantity.

    *ceiling* caps the result, e.g. a received quantity may not exceed the
    ordered quantity.
    """
    value = _lookup(qty_overrides, line_id, product_id, lambda v: True)
    if value is None:
        value = requested_qty
    return clamp_int(value, 0, ceiling)


def resolve_price(
    line_id,
    product_id,
    default_unit_price,
    price_overrides,
    global_default_price=None,
    allow_zero=False,
) -> Decimal:
    """Effective unit price.

    Precedence: line-id override, product-id override, global default price
    (only when > 0), then the line's own default price. An override of 0
    counts as absent unless *allow_zero* is set.
    """
    def accept(v):
        return v > ZERO or (allow_zero and v == ZERO)

    value = _lookup(price_overrides, line_id, product_id, accept)
    if value is not None:
        return value
    default = parse_override(global_default_price)
    if default is not None and default > ZERO:
        return default
    return max(to_number(default_unit_price), ZERO)
