"""Invoice grouping — pure functions, zero external dependencies.

Only stdlib and domain imports allowed.
"""

import re

from domain.models import ALL_GROUP, GroupingMode, InvoiceGroup
from domain.normalization import normalize_group_key

_DIGITS = re.compile(r"(\d+)")


def natural_key(value):
    """Case-insensitive, numeric-aware sort key ("Class 2" < "Class 10")."""
    text = str(value or "")
    parts = _DIGITS.split(text.casefold())
    # split() alternates text / digit runs, so positions never mix types
    return tuple(int(p) if i % 2 else p for i, p in enumerate(parts)), text


def parse_grouping(mode) -> GroupingMode:
    if isinstance(mode, GroupingMode):
        return mode
    return GroupingMode(str(mode or "NONE").strip().upper())


def group_key(line, mode) -> str:
    """Grouping key of a priced line under *mode*."""
    if mode is GroupingMode.CLASS:
        return normalize_group_key(line.item.class_name)
    if mode is GroupingMode.PUBLISHER:
        return normalize_group_key(line.item.publisher_name)
    return ALL_GROUP


def group_lines(lines, mode=GroupingMode.NONE) -> list[InvoiceGroup]:
    """Partition priced lines into groups; every line lands in exactly one group.

    NONE always yields the single ALL group, even for no lines.
    """
    mode = parse_grouping(mode)
    buckets = {ALL_GROUP: []} if mode is GroupingMode.NONE else {}
    for line in lines:
        buckets.setdefault(group_key(line, mode), []).append(line)

    groups = []
    for key in sorted(buckets, key=natural_key):
        members = sorted(
            buckets[key],
            key=lambda ln: (natural_key(ln.item.title), str(ln.item.line_id)),
        )
        groups.append(InvoiceGroup(key=key, lines=tuple(members)))
    return groups
