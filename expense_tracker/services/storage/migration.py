"""
Best-Effort Date Migration

Databases created by earlier versions of the screen either lack the
`date` column or hold dates in whatever form the user typed (epoch
numbers, "03/05/2024", ...). This pass brings them to canonical
YYYY-MM-DD.

IMPORTANT: A row that cannot be rewritten is recorded and skipped.
It never aborts the rest of the pass.
"""

from typing import Optional

from expense_tracker.audit import AuditLogger
from expense_tracker.dates import normalize_stored_date
from expense_tracker.models.migration import (
    MigrationReport,
    MigrationRowOutcome,
    MigrationRowStatus,
)
from expense_tracker.services.storage.interface import StorageError
from expense_tracker.services.storage.sqlite_store import EXPENSES_TABLE, SQLiteDatabase


def ensure_date_column(db: SQLiteDatabase) -> bool:
    """
    Add the `date` column to a pre-existing expenses table.

    Returns True if the column had to be added.
    """
    if "date" in db.table_columns(EXPENSES_TABLE):
        return False
    db.execute(f"ALTER TABLE {EXPENSES_TABLE} ADD COLUMN date TEXT;")
    return True


def _migrate_row(
    db: SQLiteDatabase,
    row: dict,
    audit_logger: AuditLogger,
) -> MigrationRowOutcome:
    row_id = row["id"]
    stored = row.get("date")
    original = None if stored is None else str(stored)

    normalized = normalize_stored_date(stored)
    if normalized is None:
        return MigrationRowOutcome(
            row_id=row_id,
            original=original,
            status=MigrationRowStatus.SKIPPED,
        )

    if normalized == original:
        return MigrationRowOutcome(
            row_id=row_id,
            original=original,
            normalized=normalized,
            status=MigrationRowStatus.UNCHANGED,
        )

    try:
        db.execute(
            f"UPDATE {EXPENSES_TABLE} SET date = ? WHERE id = ?;",
            [normalized, row_id],
        )
    except StorageError as e:
        audit_logger.log_migration_row_failed(
            expense_id=row_id,
            original=original,
            normalized=normalized,
            error_message=str(e),
        )
        return MigrationRowOutcome(
            row_id=row_id,
            original=original,
            normalized=normalized,
            status=MigrationRowStatus.FAILED,
            error_message=str(e),
        )

    return MigrationRowOutcome(
        row_id=row_id,
        original=original,
        normalized=normalized,
        status=MigrationRowStatus.REWRITTEN,
    )


def migrate_expense_dates(
    db: SQLiteDatabase,
    audit_logger: Optional[AuditLogger] = None,
) -> MigrationReport:
    """
    Ensure the date column exists and canonicalize every stored date.

    Args:
        db: Database holding the expenses table
        audit_logger: Where per-row failures are logged

    Returns:
        A report with one outcome per row that had a date

    Raises:
        StorageError: If the table cannot be inspected or altered
                      (row-level failures are only reported)
    """
    audit_logger = audit_logger or AuditLogger()

    report = MigrationReport(column_added=ensure_date_column(db))

    rows = db.query(f"SELECT id, date FROM {EXPENSES_TABLE} WHERE date IS NOT NULL;")
    for row in rows:
        report.outcomes.append(_migrate_row(db, row, audit_logger))

    audit_logger.log_migration_completed(report.to_log_dict())
    return report
