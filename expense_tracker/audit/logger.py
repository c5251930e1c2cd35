"""
Audit Logger

DESIGN DECISION: Every change to the expense list is logged.
Rejected input and migration failures are silent for the user, so the
log is the only place they show up.

The audit logger:
- Renders events through structlog (JSON by default)
- Gracefully handles failures (never crashes the caller if logging fails)
"""

import logging
import sys
from typing import Optional

import structlog

from expense_tracker.config import AppSettings, get_settings
from expense_tracker.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


def configure_logging(settings: Optional[AppSettings] = None) -> None:
    """
    Configure structlog on top of stdlib logging.

    The stdlib root logger is only set up if nothing configured it first;
    the `expense_tracker` logger level always follows the settings.
    """
    settings = settings or get_settings().app
    level = "DEBUG" if settings.debug_mode else settings.log_level

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )
    logging.getLogger("expense_tracker").setLevel(level)

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.log_json
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()


class AuditLogger:
    """
    Central audit logging service.

    Every event goes to the structured local log. Events are also kept
    in memory (oldest first) so callers and tests
    can inspect what happened during a session.
    """

    def __init__(self, keep_events: int = 500):
        self._logger = structlog.get_logger("expense_tracker.audit")
        self._keep_events = keep_events
        self._events: list[AuditEvent] = []

    @property
    def events(self) -> list[AuditEvent]:
        return list(self._events)

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns True if the event was written to the log.
        """
        self._events.append(event)
        if len(self._events) > self._keep_events:
            del self._events[0]

        log_dict = event.to_log_dict()
        try:
            if event.severity == AuditSeverity.ERROR:
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            # Logging must never break an add/edit/delete
            logging.getLogger(__name__).error("audit logging failed: %s", e)
            return False

        return True

    def log_expense_added(self, expense_id: int, amount: str, category: str) -> None:
        """Log a new expense."""
        self.log(AuditEventBuilder.expense_added(
            expense_id=expense_id,
            amount=amount,
            category=category,
        ))

    def log_expense_updated(self, expense_id: int, amount: str, category: str) -> None:
        self.log(AuditEventBuilder.expense_updated(
            expense_id=expense_id,
            amount=amount,
            category=category,
        ))

    def log_expense_deleted(self, expense_id: int, existed: bool) -> None:
        self.log(AuditEventBuilder.expense_deleted(expense_id=expense_id, existed=existed))

    def log_expense_rejected(
        self,
        issues: list[dict],
        expense_id: Optional[int] = None,
    ) -> None:
        """Log input that failed validation and was not saved."""
        self.log(AuditEventBuilder.expense_rejected(issues=issues, expense_id=expense_id))

    def log_expense_not_found(self, expense_id: int) -> None:
        self.log(AuditEventBuilder.expense_not_found(expense_id=expense_id))

    def log_migration_completed(self, summary: dict) -> None:
        self.log(AuditEventBuilder.migration_completed(summary=summary))

    def log_migration_row_failed(
        self,
        expense_id: int,
        original: Optional[str],
        normalized: Optional[str],
        error_message: str,
    ) -> None:
        """Log a row the migration could not rewrite."""
        self.log(AuditEventBuilder.migration_row_failed(
            expense_id=expense_id,
            original=original,
            normalized=normalized,
            error_message=error_message,
        ))

    def log_migration_failed(self, error_message: str) -> None:
        self.log(AuditEventBuilder.migration_failed(error_message=error_message))

    def log_storage_error(self, operation: str, error_message: str) -> None:
        self.log(AuditEventBuilder.storage_error(
            operation=operation,
            error_message=error_message,
        ))

    def log_render_fallback(self, error_message: str) -> None:
        self.log(AuditEventBuilder.render_fallback(error_message=error_message))
