"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep the screen logic decoupled from SQLite
2. Use an in-memory database for testing
3. Swap the embedded store later without touching validation or filtering

The interface is intentionally simple - we're not building a full ORM.
Just the operations the expense screen needs.
"""

from abc import ABC, abstractmethod
from typing import Optional

from expense_tracker.audit import AuditLogger
from expense_tracker.models.expense import ExpenseDraft, ExpenseRecord
from expense_tracker.models.migration import MigrationReport


class ExpenseStorageInterface(ABC):
    """
    Abstract interface for expense storage operations.

    Storage only accepts ExpenseDraft objects, which are valid by
    construction.
    """

    @abstractmethod
    def initialize(self) -> None:
        """Create the expenses table if it does not exist yet."""
        pass

    @abstractmethod
    def save_expense(self, draft: ExpenseDraft) -> ExpenseRecord:
        """
        Insert a new expense.

        Args:
            draft: The validated expense

        Returns:
            The stored record, with its assigned id

        Raises:
            StorageError: If the insert fails
        """
        pass

    @abstractmethod
    def get_expense(self, expense_id: int) -> Optional[ExpenseRecord]:
        """
        Retrieve an expense by id.

        Returns:
            The record if found, None otherwise
        """
        pass

    @abstractmethod
    def update_expense(self, expense_id: int, draft: ExpenseDraft) -> ExpenseRecord:
        """
        Overwrite every field of an existing expense except its id.

        Raises:
            NotFoundError: If no expense has this id
            StorageError: If the update fails
        """
        pass

    @abstractmethod
    def delete_expense(self, expense_id: int) -> bool:
        """
        Delete an expense by id.

        Returns:
            True if a row was deleted, False if none matched
        """
        pass

    @abstractmethod
    def list_expenses(self) -> list[ExpenseRecord]:
        """
        List every expense, newest (highest id) first.
        """
        pass

    def migrate(self, audit_logger: Optional[AuditLogger] = None) -> Optional[MigrationReport]:
        """
        Bring data written by older versions up to date.

        Backends with nothing to migrate return None.
        """
        return None


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class ConnectionError(StorageError):
    """Could not open the database."""
    pass
