"""
Tests for SQLite storage and the date migration.

Every test uses its own in-memory database.
"""

import pytest
from decimal import Decimal

from expense_tracker.audit import AuditLogger
from expense_tracker.models.audit import AuditEventType
from expense_tracker.models.expense import ExpenseDraft
from expense_tracker.models.migration import MigrationRowStatus
from expense_tracker.services.storage import (
    EXPENSES_TABLE,
    NotFoundError,
    SQLiteDatabase,
    SQLiteExpenseStorage,
    StorageError,
    ensure_date_column,
    migrate_expense_dates,
)


LEGACY_SCHEMA = f"""
CREATE TABLE {EXPENSES_TABLE} (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    amount REAL NOT NULL,
    category TEXT NOT NULL,
    note TEXT
);
"""


class FlakyDatabase(SQLiteDatabase):
    """Fails the date rewrite for one row."""

    def __init__(self, failing_id, **kwargs):
        super().__init__(**kwargs)
        self.failing_id = failing_id

    def execute(self, sql, params=()):
        if sql.startswith(f"UPDATE {EXPENSES_TABLE} SET date") and params[-1] == self.failing_id:
            raise StorageError("Write failed: disk I/O error")
        return super().execute(sql, params)


@pytest.fixture
def db():
    database = SQLiteDatabase(path=":memory:")
    yield database
    database.close()


@pytest.fixture
def storage(db):
    store = SQLiteExpenseStorage(db)
    store.initialize()
    return store


def _draft(amount="12.50", category="Food", note=None, date="2024-03-05"):
    return ExpenseDraft(amount=Decimal(amount), category=category, note=note, date=date)


def _insert_raw(db, amount, category, note=None, date=None):
    return db.insert(
        f"INSERT INTO {EXPENSES_TABLE} (amount, category, note, date) VALUES (?, ?, ?, ?);",
        [amount, category, note, date],
    )


class TestSQLiteExpenseStorage:
    """Tests for CRUD against SQLite."""

    def test_initialize_is_idempotent(self, storage):
        storage.initialize()
        assert storage.list_expenses() == []

    def test_save_assigns_id(self, storage):
        first = storage.save_expense(_draft())
        second = storage.save_expense(_draft(category="Books"))

        assert first.id > 0
        assert second.id > first.id
        assert first.amount == Decimal("12.50")

    def test_get_expense(self, storage):
        saved = storage.save_expense(_draft(note="Lunch"))
        loaded = storage.get_expense(saved.id)

        assert loaded.amount == Decimal("12.5")
        assert loaded.category == "Food"
        assert loaded.note == "Lunch"
        assert loaded.date == "2024-03-05"

    def test_get_missing_expense(self, storage):
        assert storage.get_expense(999) is None

    def test_list_newest_first(self, storage):
        ids = [storage.save_expense(_draft(amount=str(i))).id for i in range(1, 4)]
        assert [record.id for record in storage.list_expenses()] == list(reversed(ids))

    def test_missing_date_stored_as_null(self, storage, db):
        saved = storage.save_expense(_draft(date=None))
        rows = db.query(f"SELECT date FROM {EXPENSES_TABLE} WHERE id = ?;", [saved.id])
        assert rows[0]["date"] is None

    def test_update_expense(self, storage):
        saved = storage.save_expense(_draft())
        updated = storage.update_expense(saved.id, _draft(amount="20", category="Books", date=None))

        assert updated.id == saved.id
        loaded = storage.get_expense(saved.id)
        assert loaded.amount == Decimal("20")
        assert loaded.category == "Books"
        assert loaded.date is None

    def test_update_missing_raises(self, storage):
        with pytest.raises(NotFoundError):
            storage.update_expense(999, _draft())

    def test_delete_expense(self, storage):
        saved = storage.save_expense(_draft())

        assert storage.delete_expense(saved.id) is True
        assert storage.get_expense(saved.id) is None
        assert storage.delete_expense(saved.id) is False

    def test_non_numeric_amount_loads_as_none(self, storage, db):
        _insert_raw(db, "abc", "Food")
        records = storage.list_expenses()

        assert len(records) == 1
        assert records[0].amount is None

    def test_query_error_is_storage_error(self, db):
        with pytest.raises(StorageError):
            db.query("SELECT * FROM no_such_table;")

    def test_write_error_is_storage_error(self, storage, db):
        with pytest.raises(StorageError):
            db.execute(f"INSERT INTO {EXPENSES_TABLE} (amount, category) VALUES (NULL, NULL);")


class TestDateMigration:
    """Tests for ensure_date_column / migrate_expense_dates."""

    def test_adds_missing_column(self, db):
        db.create_table(LEGACY_SCHEMA)

        assert ensure_date_column(db) is True
        assert "date" in db.table_columns(EXPENSES_TABLE)
        assert ensure_date_column(db) is False

    def test_legacy_table_gets_date_column(self, db):
        db.create_table(LEGACY_SCHEMA)
        db.insert(f"INSERT INTO {EXPENSES_TABLE} (amount, category) VALUES (?, ?);", [5, "Food"])

        storage = SQLiteExpenseStorage(db)
        storage.initialize()
        report = storage.migrate()

        assert report.column_added is True
        assert report.rows_scanned == 0
        assert storage.list_expenses()[0].date is None

    def test_outcomes_per_row(self, storage, db):
        canonical = _insert_raw(db, 1, "Food", date="2024-03-05")
        seconds = _insert_raw(db, 2, "Food", date="1709640000")
        millis = _insert_raw(db, 3, "Food", date=1709640000000)
        freeform = _insert_raw(db, 4, "Food", date="2024-03-05T10:00:00+00:00")
        garbage = _insert_raw(db, 5, "Food", date="garbage")
        _insert_raw(db, 6, "Food", date=None)

        report = migrate_expense_dates(db, AuditLogger())
        statuses = {outcome.row_id: outcome.status for outcome in report.outcomes}

        assert report.column_added is False
        assert report.rows_scanned == 5
        assert statuses == {
            canonical: MigrationRowStatus.UNCHANGED,
            seconds: MigrationRowStatus.REWRITTEN,
            millis: MigrationRowStatus.REWRITTEN,
            freeform: MigrationRowStatus.REWRITTEN,
            garbage: MigrationRowStatus.SKIPPED,
        }

        dates = {record.id: record.date for record in SQLiteExpenseStorage(db).list_expenses()}
        assert dates[seconds] == "2024-03-05"
        assert dates[millis] == "2024-03-05"
        assert dates[freeform] == "2024-03-05"
        assert dates[garbage] == "garbage"

    def test_integer_date_column_reads_like_migration(self, db):
        db.create_table(LEGACY_SCHEMA.replace("note TEXT", "note TEXT,\n    date INTEGER"))
        row_id = _insert_raw(db, 5, "Food", date=1709640000)
        storage = SQLiteExpenseStorage(db)

        assert storage.get_expense(row_id).date == "1970-01-20"

        report = storage.migrate()
        assert report.rewritten_count == 1
        assert report.outcomes[0].normalized == "1970-01-20"
        assert storage.get_expense(row_id).date == "1970-01-20"

    def test_second_pass_changes_nothing(self, storage, db):
        _insert_raw(db, 1, "Food", date="1709640000")

        migrate_expense_dates(db)
        report = migrate_expense_dates(db)

        assert report.rewritten_count == 0
        assert report.unchanged_count == 1

    def test_failed_row_does_not_stop_the_pass(self):
        db = FlakyDatabase(failing_id=2, path=":memory:")
        storage = SQLiteExpenseStorage(db)
        storage.initialize()
        for _ in range(3):
            _insert_raw(db, 1, "Food", date="1709640000")

        audit_logger = AuditLogger()
        report = migrate_expense_dates(db, audit_logger)

        assert report.rewritten_count == 2
        assert report.failed_count == 1
        assert report.failures[0].row_id == 2
        assert "disk I/O error" in report.failures[0].error_message

        dates = {record.id: record.date for record in storage.list_expenses()}
        assert dates == {1: "2024-03-05", 2: "1709640000", 3: "2024-03-05"}

        event_types = [event.event_type for event in audit_logger.events]
        assert AuditEventType.MIGRATION_ROW_FAILED in event_types
        assert event_types[-1] == AuditEventType.MIGRATION_COMPLETED
        db.close()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
