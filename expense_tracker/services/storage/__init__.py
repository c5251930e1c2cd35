"""
Storage Services Package

Provides the abstract storage interface and the SQLite implementation,
plus the best-effort date migration for older databases.
"""

from expense_tracker.services.storage.interface import (
    ConnectionError,
    ExpenseStorageInterface,
    NotFoundError,
    StorageError,
)
from expense_tracker.services.storage.sqlite_store import (
    EXPENSES_SCHEMA,
    EXPENSES_TABLE,
    SQLiteDatabase,
    SQLiteExpenseStorage,
)
from expense_tracker.services.storage.migration import (
    ensure_date_column,
    migrate_expense_dates,
)

__all__ = [
    # Interfaces
    "ExpenseStorageInterface",
    # Exceptions
    "ConnectionError",
    "NotFoundError",
    "StorageError",
    # SQLite implementation
    "EXPENSES_SCHEMA",
    "EXPENSES_TABLE",
    "SQLiteDatabase",
    "SQLiteExpenseStorage",
    # Migration
    "ensure_date_column",
    "migrate_expense_dates",
]
