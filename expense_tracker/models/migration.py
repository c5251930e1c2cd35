"""
Migration Report Models

The date migration repairs legacy rows one at a time. Each row gets an
outcome instead of an exception, and the outcomes are collected into a
report so callers (and tests) can see exactly what happened.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class MigrationRowStatus(str, Enum):
    """What happened to a single row during the date migration."""
    REWRITTEN = "rewritten"    # Stored date replaced by its canonical form
    UNCHANGED = "unchanged"    # Already canonical
    SKIPPED = "skipped"        # No canonical form could be derived
    FAILED = "failed"          # Canonical form found, but the write failed


class MigrationRowOutcome(BaseModel):
    """Outcome for one row."""

    row_id: int
    original: Optional[str] = None
    normalized: Optional[str] = None
    status: MigrationRowStatus
    error_message: Optional[str] = None


class MigrationReport(BaseModel):
    """
    Result of one best-effort migration pass.

    A FAILED row never stops the pass; it is only recorded here.
    """

    started_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    column_added: bool = Field(
        default=False,
        description="Was the date column missing and added?"
    )
    outcomes: list[MigrationRowOutcome] = Field(default_factory=list)

    def _count(self, status: MigrationRowStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == status)

    @property
    def rows_scanned(self) -> int:
        return len(self.outcomes)

    @property
    def rewritten_count(self) -> int:
        return self._count(MigrationRowStatus.REWRITTEN)

    @property
    def unchanged_count(self) -> int:
        return self._count(MigrationRowStatus.UNCHANGED)

    @property
    def skipped_count(self) -> int:
        return self._count(MigrationRowStatus.SKIPPED)

    @property
    def failed_count(self) -> int:
        return self._count(MigrationRowStatus.FAILED)

    @property
    def failures(self) -> list[MigrationRowOutcome]:
        """Rows whose rewrite failed."""
        return [
            outcome for outcome in self.outcomes
            if outcome.status == MigrationRowStatus.FAILED
        ]

    def to_log_dict(self) -> dict:
        return {
            "column_added": self.column_added,
            "rows_scanned": self.rows_scanned,
            "rewritten": self.rewritten_count,
            "unchanged": self.unchanged_count,
            "skipped": self.skipped_count,
            "failed": self.failed_count,
        }
