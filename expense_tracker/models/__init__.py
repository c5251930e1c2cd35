"""
Data Models Package

This package contains all Pydantic models used by the expense tracker.
"""

from expense_tracker.models.expense import (
    CategoryTotal,
    ExpenseDraft,
    ExpenseForm,
    ExpenseRecord,
    ExpenseSummary,
    ExpenseView,
    FilterState,
    TimeWindow,
    ValidationIssue,
    ValidationResult,
)
from expense_tracker.models.migration import (
    MigrationReport,
    MigrationRowOutcome,
    MigrationRowStatus,
)
from expense_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Expense models
    "CategoryTotal",
    "ExpenseDraft",
    "ExpenseForm",
    "ExpenseRecord",
    "ExpenseSummary",
    "ExpenseView",
    "FilterState",
    "TimeWindow",
    "ValidationIssue",
    "ValidationResult",
    # Migration models
    "MigrationReport",
    "MigrationRowOutcome",
    "MigrationRowStatus",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
