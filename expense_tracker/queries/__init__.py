"""Filtering and aggregation package."""

from expense_tracker.queries.aggregator import (
    UNCATEGORIZED,
    aggregate,
    distinct_categories,
    format_amount,
)
from expense_tracker.queries.filters import (
    coerce_window,
    filter_records,
    start_of_week,
    window_bounds,
)

__all__ = [
    "UNCATEGORIZED",
    "aggregate",
    "coerce_window",
    "distinct_categories",
    "filter_records",
    "format_amount",
    "start_of_week",
    "window_bounds",
]
