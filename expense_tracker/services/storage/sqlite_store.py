"""
SQLite Storage Implementation

DESIGN DECISION: A single-table SQLite database is the local store.
1. No server to run; the database is one file next to the app
2. The screen only needs create / query / execute primitives
3. Listing, filtering and totals happen in Python on the loaded rows

TRADEOFFS:
- One connection per client; the tracker is used by one caller at a time
- Amounts are stored as REAL (the column type older databases already have)
  and converted back to Decimal on read

The implementation follows the abstract interface, so business logic never
touches SQL directly.
"""

import sqlite3
from typing import Any, Optional, Sequence

import structlog
from pydantic import ValidationError
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from expense_tracker.audit import AuditLogger
from expense_tracker.config import get_settings
from expense_tracker.models.expense import ExpenseDraft, ExpenseRecord
from expense_tracker.models.migration import MigrationReport
from expense_tracker.services.storage.interface import (
    ConnectionError,
    ExpenseStorageInterface,
    NotFoundError,
    StorageError,
)


EXPENSES_TABLE = "expenses"

EXPENSES_SCHEMA = f"""
CREATE TABLE IF NOT EXISTS {EXPENSES_TABLE} (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    amount REAL NOT NULL,
    category TEXT NOT NULL,
    note TEXT,
    date TEXT
);
"""

EXPENSE_COLUMNS = ("id", "amount", "category", "note", "date")

logger = structlog.get_logger(__name__)


class SQLiteDatabase:
    """
    Low-level SQLite client wrapper.

    Exposes the three primitives the rest of the code relies on:
    create_table, query and execute. Every sqlite3 error is re-raised
    as a StorageError.
    """

    def __init__(
        self,
        path: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        connect_attempts: Optional[int] = None,
    ):
        settings = get_settings().storage
        self._path = path or settings.path
        self._timeout = timeout_seconds or settings.timeout_seconds
        self._attempts = connect_attempts or settings.connect_attempts
        self._connection: Optional[sqlite3.Connection] = None

    @property
    def path(self) -> str:
        return self._path

    def connect(self) -> sqlite3.Connection:
        """
        Open the database (once).

        A locked or briefly unavailable file is retried with exponential
        backoff before giving up.
        """
        if self._connection is None:
            try:
                for attempt in Retrying(
                    stop=stop_after_attempt(self._attempts),
                    wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
                    retry=retry_if_exception_type(sqlite3.OperationalError),
                    reraise=True,
                ):
                    with attempt:
                        connection = sqlite3.connect(self._path, timeout=self._timeout)
            except sqlite3.Error as e:
                raise ConnectionError(f"Failed to open database {self._path}: {e}") from e

            connection.row_factory = sqlite3.Row
            self._connection = connection
            logger.debug("database_connected", path=self._path)

        return self._connection

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None

    def create_table(self, schema: str) -> None:
        """Run a CREATE TABLE (or any DDL script)."""
        try:
            self.connect().executescript(schema)
        except sqlite3.Error as e:
            raise StorageError(f"Failed to create table: {e}") from e

    def query(self, sql: str, params: Sequence[Any] = ()) -> list[dict]:
        """Run a SELECT and return the rows as dicts."""
        try:
            cursor = self.connect().execute(sql, tuple(params))
            return [dict(row) for row in cursor.fetchall()]
        except sqlite3.Error as e:
            raise StorageError(f"Query failed: {e}") from e

    def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        """
        Run a write statement and commit.

        Returns:
            Number of rows affected
        """
        return self._write(sql, params).rowcount

    def insert(self, sql: str, params: Sequence[Any] = ()) -> int:
        """
        Run an INSERT and commit.

        Returns:
            The id of the inserted row
        """
        return self._write(sql, params).lastrowid

    def table_columns(self, table: str) -> set[str]:
        """Column names of a table (empty if the table does not exist)."""
        return {row["name"] for row in self.query(f"PRAGMA table_info({table});")}

    def _write(self, sql: str, params: Sequence[Any]) -> sqlite3.Cursor:
        connection = self.connect()
        try:
            cursor = connection.execute(sql, tuple(params))
            connection.commit()
            return cursor
        except sqlite3.Error as e:
            connection.rollback()
            raise StorageError(f"Write failed: {e}") from e


class SQLiteExpenseStorage(ExpenseStorageInterface):
    """
    SQLite implementation of expense storage.

    One expense per row in the `expenses` table.
    """

    def __init__(self, db: Optional[SQLiteDatabase] = None):
        self._db = db or SQLiteDatabase()

    @property
    def db(self) -> SQLiteDatabase:
        return self._db

    def _draft_to_params(self, draft: ExpenseDraft) -> list:
        """Convert an ExpenseDraft to statement parameters."""
        return [
            float(draft.amount),
            draft.category,
            draft.note,
            draft.date,
        ]

    def _row_to_record(self, row: dict) -> ExpenseRecord:
        """Convert a database row to an ExpenseRecord."""
        return ExpenseRecord(**{column: row.get(column) for column in EXPENSE_COLUMNS})

    def initialize(self) -> None:
        self._db.create_table(EXPENSES_SCHEMA)

    def migrate(self, audit_logger: Optional[AuditLogger] = None) -> MigrationReport:
        """Add the date column if missing and canonicalize stored dates."""
        # Local import: the migration module depends on this one
        from expense_tracker.services.storage.migration import migrate_expense_dates

        return migrate_expense_dates(self._db, audit_logger)

    def save_expense(self, draft: ExpenseDraft) -> ExpenseRecord:
        """Insert an expense and return it with its new id."""
        expense_id = self._db.insert(
            f"INSERT INTO {EXPENSES_TABLE} (amount, category, note, date) VALUES (?, ?, ?, ?);",
            self._draft_to_params(draft),
        )
        return ExpenseRecord(
            id=expense_id,
            amount=draft.amount,
            category=draft.category,
            note=draft.note,
            date=draft.date,
        )

    def get_expense(self, expense_id: int) -> Optional[ExpenseRecord]:
        rows = self._db.query(
            f"SELECT * FROM {EXPENSES_TABLE} WHERE id = ?;",
            [expense_id],
        )
        return self._row_to_record(rows[0]) if rows else None

    def update_expense(self, expense_id: int, draft: ExpenseDraft) -> ExpenseRecord:
        """Overwrite amount, category, note and date of an existing expense."""
        affected = self._db.execute(
            f"UPDATE {EXPENSES_TABLE} SET amount = ?, category = ?, note = ?, date = ? WHERE id = ?;",
            self._draft_to_params(draft) + [expense_id],
        )
        if affected == 0:
            raise NotFoundError(f"Expense not found: {expense_id}")

        return ExpenseRecord(
            id=expense_id,
            amount=draft.amount,
            category=draft.category,
            note=draft.note,
            date=draft.date,
        )

    def delete_expense(self, expense_id: int) -> bool:
        affected = self._db.execute(
            f"DELETE FROM {EXPENSES_TABLE} WHERE id = ?;",
            [expense_id],
        )
        return affected > 0

    def list_expenses(self) -> list[ExpenseRecord]:
        """List expenses newest first. Rows that cannot be read are skipped."""
        rows = self._db.query(f"SELECT * FROM {EXPENSES_TABLE} ORDER BY id DESC;")

        records = []
        for row in rows:
            try:
                records.append(self._row_to_record(row))
            except ValidationError as e:
                logger.warning("expense_row_skipped", expense_id=row.get("id"), error=str(e))
        return records
