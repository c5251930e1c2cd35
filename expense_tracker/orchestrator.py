"""
Expense Screen Orchestrator

Wires validation, storage, filtering, aggregation and audit logging
into the operations the expense screen performs:

ADD / EDIT:
1. Validate and normalize the form
2. Invalid input -> nothing is written, the form stays as typed
3. Write, log, reload the list

RENDER (every frame):
1. Filter the loaded records by the caller's FilterState
2. Aggregate what is visible
3. Return an ExpenseView

The view layer owns the FilterState and the form; the tracker only owns
the loaded record list.
"""

from datetime import date
from typing import Optional

import structlog

from expense_tracker.audit import AuditLogger
from expense_tracker.config import AppSettings, get_settings
from expense_tracker.models.expense import (
    ExpenseForm,
    ExpenseRecord,
    ExpenseView,
    FilterState,
    TimeWindow,
    ValidationResult,
)
from expense_tracker.models.migration import MigrationReport
from expense_tracker.queries import aggregate, distinct_categories, filter_records, format_amount
from expense_tracker.services.storage import (
    ExpenseStorageInterface,
    NotFoundError,
    SQLiteDatabase,
    SQLiteExpenseStorage,
    StorageError,
)
from expense_tracker.validation import ExpenseValidator


logger = structlog.get_logger(__name__)


class ExpenseTracker:
    """
    Handles the expense screen's add / edit / delete / render flow.

    Storage errors propagate to the caller; validation problems never do.
    """

    def __init__(
        self,
        storage: ExpenseStorageInterface,
        validator: Optional[ExpenseValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[AppSettings] = None,
    ):
        self._storage = storage
        self._validator = validator or ExpenseValidator()
        self._audit_logger = audit_logger or AuditLogger()
        self._settings = settings or get_settings().app
        self._records: list[ExpenseRecord] = []
        self.last_validation: Optional[ValidationResult] = None

    @property
    def records(self) -> list[ExpenseRecord]:
        """All loaded records, newest first."""
        return list(self._records)

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit_logger

    def default_state(self) -> FilterState:
        return FilterState(window=TimeWindow(self._settings.default_window))

    # =========================================================================
    # SETUP
    # =========================================================================

    def initialize(self) -> Optional[MigrationReport]:
        """
        Create the table, migrate older data, and load the list.

        A failing migration is logged and otherwise ignored; the screen
        still opens with whatever data is readable.
        """
        self._storage.initialize()

        report = None
        try:
            report = self._storage.migrate(self._audit_logger)
        except StorageError as e:
            self._audit_logger.log_migration_failed(str(e))

        self.load_expenses()
        return report

    def load_expenses(self) -> list[ExpenseRecord]:
        """Reload the record list from storage."""
        self._records = self._storage.list_expenses()
        logger.debug("expenses_loaded", count=len(self._records))
        return self.records

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def _validate(self, form: ExpenseForm, expense_id: Optional[int] = None) -> ValidationResult:
        result = self._validator.validate(form)
        self.last_validation = result
        if not result.is_valid:
            self._audit_logger.log_expense_rejected(
                issues=[issue.model_dump() for issue in result.issues if issue.severity == "error"],
                expense_id=expense_id,
            )
        return result

    def add_expense(self, form: ExpenseForm) -> Optional[ExpenseRecord]:
        """
        Validate and store a new expense.

        Returns:
            The stored record, or None if the form was invalid
            (in which case nothing was written).
        """
        result = self._validate(form)
        if not result.is_valid:
            return None

        record = self._storage.save_expense(result.draft)
        self._audit_logger.log_expense_added(
            expense_id=record.id,
            amount=str(record.amount),
            category=record.category,
        )

        self.load_expenses()
        return record

    def update_expense(self, expense_id: int, form: ExpenseForm) -> Optional[ExpenseRecord]:
        """
        Validate and overwrite an existing expense.

        Returns:
            The updated record, or None if the form was invalid or the
            expense no longer exists.
        """
        result = self._validate(form, expense_id=expense_id)
        if not result.is_valid:
            return None

        try:
            record = self._storage.update_expense(expense_id, result.draft)
        except NotFoundError:
            self._audit_logger.log_expense_not_found(expense_id)
            self.load_expenses()
            return None

        self._audit_logger.log_expense_updated(
            expense_id=record.id,
            amount=str(record.amount),
            category=record.category,
        )

        self.load_expenses()
        return record

    def delete_expense(self, expense_id: int) -> bool:
        """Delete an expense. Returns False if it did not exist."""
        existed = self._storage.delete_expense(expense_id)
        self._audit_logger.log_expense_deleted(expense_id=expense_id, existed=existed)
        self.load_expenses()
        return existed

    # =========================================================================
    # RENDER
    # =========================================================================

    def render(
        self,
        state: Optional[FilterState] = None,
        today: Optional[date] = None,
    ) -> ExpenseView:
        """
        Build the view for the current filter selection.

        Args:
            state: Filter selection owned by the view (defaults to the
                   configured default window, all categories)
            today: Reference day for week/month windows
        """
        state = state or self.default_state()

        try:
            visible = filter_records(self._records, state.window, state.category, today=today)
        except Exception as e:
            self._audit_logger.log_render_fallback(str(e))
            visible = list(self._records)

        summary = aggregate(visible, uncategorized_label=self._settings.uncategorized_label)

        return ExpenseView(
            state=state,
            records=visible,
            summary=summary,
            categories=distinct_categories(self._records),
            formatted_total=format_amount(summary.total, self._settings.currency_symbol),
        )


def create_app_components(
    use_storage: bool = True,
    db_path: Optional[str] = None,
) -> tuple[ExpenseTracker, SQLiteDatabase]:
    """
    Factory function to create the tracker and its database.

    Args:
        use_storage: Whether to open the configured database file.
                    Set to False for a throwaway in-memory database.
        db_path: Overrides the configured database path.

    Returns:
        (tracker, database) - the tracker is already initialized
    """
    audit_logger = AuditLogger()

    db = SQLiteDatabase(path=db_path if use_storage else ":memory:")
    tracker = ExpenseTracker(
        storage=SQLiteExpenseStorage(db),
        audit_logger=audit_logger,
    )
    try:
        tracker.initialize()
    except StorageError as e:
        # Unopenable path or not a SQLite file: continue without persistence
        logger.warning("storage_unavailable", path=db.path, error=str(e))
        audit_logger.log_storage_error(operation="open", error_message=str(e))
        db.close()

        db = SQLiteDatabase(path=":memory:")
        tracker = ExpenseTracker(
            storage=SQLiteExpenseStorage(db),
            audit_logger=audit_logger,
        )
        tracker.initialize()

    return tracker, db
