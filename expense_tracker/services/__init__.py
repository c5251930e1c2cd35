"""Services package."""

from expense_tracker.services.storage import (
    ConnectionError,
    ExpenseStorageInterface,
    NotFoundError,
    SQLiteDatabase,
    SQLiteExpenseStorage,
    StorageError,
    migrate_expense_dates,
)

__all__ = [
    "ConnectionError",
    "ExpenseStorageInterface",
    "NotFoundError",
    "SQLiteDatabase",
    "SQLiteExpenseStorage",
    "StorageError",
    "migrate_expense_dates",
]
