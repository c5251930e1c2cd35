"""
Audit Models for Expense Tracker

Every change to the expense list is logged as a structured event.
This provides:
1. Traceability of adds, edits and deletes
2. A record of rejected input (which is otherwise silent for the user)
3. Visibility into best-effort migration failures

DESIGN DECISION: Events are plain pydantic models rendered through
structlog. They are not persisted to the expense database.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Expense lifecycle
    EXPENSE_ADDED = "expense_added"
    EXPENSE_UPDATED = "expense_updated"
    EXPENSE_DELETED = "expense_deleted"
    EXPENSE_REJECTED = "expense_rejected"
    EXPENSE_NOT_FOUND = "expense_not_found"

    # Schema / migration
    MIGRATION_COMPLETED = "migration_completed"
    MIGRATION_ROW_FAILED = "migration_row_failed"
    MIGRATION_FAILED = "migration_failed"

    # System events
    STORAGE_ERROR = "storage_error"
    RENDER_FALLBACK = "render_fallback"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant action creates one of these.
    """

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Which expense (if any) this is about
    expense_id: Optional[int] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "expense_id": self.expense_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.expense_added(expense_id=7, amount="12.50", category="Food")
        audit_logger.log(event)
    """

    @staticmethod
    def expense_added(expense_id: int, amount: str, category: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            expense_id=expense_id,
            description=f"Expense added: {amount} in {category}",
            details={"amount": amount, "category": category},
            is_user_action=True,
        )

    @staticmethod
    def expense_updated(expense_id: int, amount: str, category: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_UPDATED,
            expense_id=expense_id,
            description=f"Expense {expense_id} updated",
            details={"amount": amount, "category": category},
            is_user_action=True,
        )

    @staticmethod
    def expense_deleted(expense_id: int, existed: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETED,
            expense_id=expense_id,
            description=f"Expense {expense_id} deleted",
            details={"existed": existed},
            is_user_action=True,
        )

    @staticmethod
    def expense_rejected(
        issues: list[dict],
        expense_id: Optional[int] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_REJECTED,
            severity=AuditSeverity.WARNING,
            expense_id=expense_id,
            description=f"Expense input rejected with {len(issues)} issue(s)",
            details={"issues": issues},
            is_user_action=True,
        )

    @staticmethod
    def expense_not_found(expense_id: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_NOT_FOUND,
            severity=AuditSeverity.WARNING,
            expense_id=expense_id,
            description=f"Expense {expense_id} does not exist",
            is_user_action=True,
        )

    @staticmethod
    def migration_completed(summary: dict) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MIGRATION_COMPLETED,
            description="Date migration completed",
            details=summary,
        )

    @staticmethod
    def migration_row_failed(
        expense_id: int,
        original: Optional[str],
        normalized: Optional[str],
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MIGRATION_ROW_FAILED,
            severity=AuditSeverity.WARNING,
            expense_id=expense_id,
            description=f"Could not rewrite date of expense {expense_id}",
            details={"original": original, "normalized": normalized},
            error_message=error_message,
        )

    @staticmethod
    def migration_failed(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MIGRATION_FAILED,
            severity=AuditSeverity.ERROR,
            description="Date migration aborted",
            error_message=error_message,
        )

    @staticmethod
    def storage_error(operation: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"Storage error during {operation}",
            details={"operation": operation},
            error_message=error_message,
        )

    @staticmethod
    def render_fallback(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RENDER_FALLBACK,
            severity=AuditSeverity.WARNING,
            description="Filtering failed, showing unfiltered list",
            error_message=error_message,
        )
