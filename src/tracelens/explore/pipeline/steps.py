# explore/pipeline/steps.py
"""
Pure derivation steps of the span explorer.

Every function here is total: malformed items (missing system, values that
are not dates) only change where an item is classified or sorted, they never
raise.
"""
from __future__ import annotations

import datetime as dt
import logging
import math
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from tracelens.explore.pipeline.order import Order
from tracelens.explore.pipeline.system import classify
from tracelens.explore.schemas.explore import (
    ColumnInfo,
    ExploreItem,
    ItemValue,
    TypeItem,
)

logger = logging.getLogger(__name__)

DATE_FIELDS = ("time", "date")

# --------------------------------------------------------
# Type filter
# --------------------------------------------------------


def filter_items(
    items: Sequence[ExploreItem],
    type_filter: Iterable[str],
    system_key: str,
    separators: Optional[str] = None,
) -> Sequence[ExploreItem]:
    """Keep items whose span type is selected.

    An empty filter returns ``items`` as is. Items without a system are never
    filtered out.
    """
    selected = set(type_filter)
    if not selected:
        return items

    out: List[ExploreItem] = []
    for item in items:
        typ = classify(item.get(system_key), separators)
        if typ is None or typ in selected:
            out.append(item)
    return out


# --------------------------------------------------------
# Sort
# --------------------------------------------------------


def is_date_field(column: str, time_key: str) -> bool:
    if column == time_key:
        return True
    return any(_has_field(column, field) for field in DATE_FIELDS)


def _has_field(s: str, field: str) -> bool:
    return s.endswith("." + field) or s.endswith("_" + field)


def to_timestamp(value: Any) -> float:
    """Convert a date-like value to a POSIX timestamp.

    Strings are parsed as ISO-8601 and numbers are epoch milliseconds.
    Anything else, including unparseable strings, is epoch 0.
    """
    if isinstance(value, bool) or value is None:
        return 0.0
    try:
        if isinstance(value, dt.datetime):
            return _aware(value).timestamp()
        if isinstance(value, (int, float)):
            if math.isnan(value) or math.isinf(value):
                return 0.0
            return value / 1000.0
        if isinstance(value, str) and value.strip():
            parsed = dt.datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
            return _aware(parsed).timestamp()
    except (ValueError, OverflowError, OSError):
        logger.debug("Unparseable date value %r, using epoch 0", value)
    return 0.0


def _aware(value: dt.datetime) -> dt.datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value


def _value_key(value: ItemValue) -> Tuple[int, Any]:
    # missing < numbers < strings
    if value is None:
        return (0, 0)
    if isinstance(value, (bool, int, float)):
        if isinstance(value, float) and math.isnan(value):
            return (0, 0)
        return (1, value)
    return (2, str(value))


def sort_items(
    items: Sequence[ExploreItem], order: Order, time_key: str
) -> Sequence[ExploreItem]:
    """Stable sort of ``items`` by ``order.column``; identity when unset."""
    column = order.column
    if not column:
        return items

    if is_date_field(column, time_key):
        return sorted(
            items,
            key=lambda item: to_timestamp(item.get(column)),
            reverse=order.desc,
        )

    return sorted(
        items,
        key=lambda item: _value_key(item.get(column)),
        reverse=order.desc,
    )


# --------------------------------------------------------
# Aggregates and projections
# --------------------------------------------------------


def aggregate_types(
    items: Iterable[ExploreItem],
    system_key: str,
    separators: Optional[str] = None,
) -> List[TypeItem]:
    """Count items per span type, ordered by type name."""
    counts: dict[str, int] = {}
    for item in items:
        typ = classify(item.get(system_key), separators)
        if typ is None:
            continue
        counts[typ] = counts.get(typ, 0) + 1

    return [
        TypeItem(type=typ, num_group=num) for typ, num in sorted(counts.items())
    ]


def group_columns(columns: Iterable[ColumnInfo]) -> List[ColumnInfo]:
    return [col for col in columns if col.is_group]


def plot_columns(columns: Iterable[ColumnInfo]) -> List[ColumnInfo]:
    return [col for col in columns if col.is_num]
