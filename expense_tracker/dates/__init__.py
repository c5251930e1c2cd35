"""Date normalization package."""

from expense_tracker.dates.normalizer import (
    epoch_millis_to_iso,
    format_typed_date,
    normalize_date,
    normalize_stored_date,
    parse_stored_date,
)

__all__ = [
    "epoch_millis_to_iso",
    "format_typed_date",
    "normalize_date",
    "normalize_stored_date",
    "parse_stored_date",
]
