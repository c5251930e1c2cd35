"""
Expense Tracker - Source Package

The core of a personal expense tracking screen: entering expenses,
listing and filtering them, and computing totals.

DESIGN PRINCIPLES:
1. Validate and normalize at the write boundary
2. Stored dates are always canonical YYYY-MM-DD
3. Filtering and aggregation are pure functions over in-memory records
4. Malformed input becomes "no value", never a crash
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Expense Tracker Team"
