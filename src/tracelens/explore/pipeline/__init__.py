from __future__ import annotations

from .errors import ErrorInfo, format_query, project_error
from .explorer import ExploreView, SpanExplorer
from .order import Order
from .pager import PagePos, Pager
from .steps import (
    aggregate_types,
    filter_items,
    group_columns,
    is_date_field,
    plot_columns,
    sort_items,
)
from .system import classify, split_type_system
from .type_filter import TypeFilter

__all__ = [
    "SpanExplorer",
    "ExploreView",
    "Pager",
    "PagePos",
    "Order",
    "TypeFilter",
    "classify",
    "split_type_system",
    "filter_items",
    "sort_items",
    "is_date_field",
    "aggregate_types",
    "group_columns",
    "plot_columns",
    "ErrorInfo",
    "format_query",
    "project_error",
]
