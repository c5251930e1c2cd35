"""
Record Filtering

DESIGN DECISION: Filtering happens in memory, on every render.
The list of expenses is small (one person's records), so there is no
need to push windows down into SQL, and keeping it here makes the
boundary arithmetic testable with an injected "today".

GUARANTEES:
- Input order is preserved and the input list is never mutated
- Windows are half-open: [start, end)
- A record without a usable date never matches a week/month window
- Nothing here raises for malformed records
"""

from datetime import date, timedelta
from typing import Iterable, Optional, Union

from dateutil.relativedelta import relativedelta

from expense_tracker.dates import parse_stored_date
from expense_tracker.models.expense import ExpenseRecord, TimeWindow


DAYS_PER_WEEK = 7


def coerce_window(window: Union[TimeWindow, str, None]) -> TimeWindow:
    """Map a window selector to TimeWindow. Unknown values mean ALL."""
    if isinstance(window, TimeWindow):
        return window
    try:
        return TimeWindow(window)
    except ValueError:
        return TimeWindow.ALL


def start_of_week(today: date) -> date:
    """Most recent Sunday at or before today."""
    # date.weekday() counts from Monday=0; shift so Sunday=0
    days_since_sunday = (today.weekday() + 1) % DAYS_PER_WEEK
    return today - timedelta(days=days_since_sunday)


def window_bounds(
    window: Union[TimeWindow, str, None],
    today: Optional[date] = None,
) -> Optional[tuple[date, date]]:
    """
    Compute the half-open date range for a window.

    Args:
        window: Selected time window
        today: Reference day (defaults to the local calendar date)

    Returns:
        (start, end) with end excluded, or None for ALL.
    """
    window = coerce_window(window)
    today = today or date.today()

    if window == TimeWindow.WEEK:
        start = start_of_week(today)
        return start, start + timedelta(days=DAYS_PER_WEEK)

    if window == TimeWindow.MONTH:
        start = today.replace(day=1)
        return start, start + relativedelta(months=1)

    return None


def _in_range(record: ExpenseRecord, start: date, end: date) -> bool:
    record_date = parse_stored_date(record.date)
    if record_date is None:
        return False
    return start <= record_date < end


def _same_category(record: ExpenseRecord, selected: str) -> bool:
    return (record.category or "").strip() == selected


def filter_records(
    records: Iterable[ExpenseRecord],
    window: Union[TimeWindow, str, None] = TimeWindow.ALL,
    category: Optional[str] = None,
    today: Optional[date] = None,
) -> list[ExpenseRecord]:
    """
    Keep the records that fall in a time window and (optionally) a category.

    Args:
        records: Expense records, in display order
        window: "all", "week" or "month"
        category: Exact (trimmed, case-sensitive) category to keep,
                  or None to keep every category
        today: Reference day for the window, defaults to date.today()

    Returns:
        A new list with the matching records in their original order.
    """
    result = list(records or [])

    bounds = window_bounds(window, today)
    if bounds is not None:
        start, end = bounds
        result = [record for record in result if _in_range(record, start, end)]

    if category is not None:
        selected = category.strip()
        result = [record for record in result if _same_category(record, selected)]

    return result
