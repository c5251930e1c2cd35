"""
Totals and Per-Category Breakdown

Deterministic aggregation over whatever the filter returned.
Amounts are summed as Decimal so totals do not drift (0.1 + 0.2 is 0.3).
"""

from decimal import Decimal
from typing import Iterable

from expense_tracker.models.expense import CategoryTotal, ExpenseRecord, ExpenseSummary


UNCATEGORIZED = "Uncategorized"


def _category_label(record: ExpenseRecord, uncategorized_label: str) -> str:
    category = (record.category or "").strip()
    return category or uncategorized_label


def aggregate(
    records: Iterable[ExpenseRecord],
    uncategorized_label: str = UNCATEGORIZED,
) -> ExpenseSummary:
    """
    Sum amounts overall and per category.

    Records with no amount count as 0. Categories are ordered by total
    descending; equal totals are ordered by category name.
    """
    total = Decimal("0")
    groups: dict[str, Decimal] = {}
    count = 0

    for record in records or []:
        count += 1
        amount = record.amount if record.amount is not None else Decimal("0")
        total += amount

        key = _category_label(record, uncategorized_label)
        groups[key] = groups.get(key, Decimal("0")) + amount

    by_category = [
        CategoryTotal(category=category, total=amount)
        for category, amount in sorted(groups.items(), key=lambda item: (-item[1], item[0]))
    ]

    return ExpenseSummary(total=total, by_category=by_category, record_count=count)


def distinct_categories(records: Iterable[ExpenseRecord]) -> list[str]:
    """Sorted, de-duplicated categories (records without one are left out)."""
    return sorted({
        record.category.strip()
        for record in records or []
        if record.category and record.category.strip()
    })


def format_amount(amount: Decimal, currency_symbol: str = "$") -> str:
    """Two-decimal display form, e.g. Decimal('12.5') -> '$12.50'."""
    return f"{currency_symbol}{amount:,.2f}"
