"""Validation package."""

from expense_tracker.validation.validator import ExpenseValidator, parse_amount

__all__ = ["ExpenseValidator", "parse_amount"]
