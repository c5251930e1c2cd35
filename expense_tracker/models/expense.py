"""
Core Data Models for Expense Tracker

These models define the schemas for all data flowing through the tracker.
They are designed to:
1. Keep invalid expenses away from storage
2. Tolerate legacy rows when reading them back
3. Give the view layer one explicit state object instead of globals

DESIGN DECISION: Writes and reads use different models.
ExpenseDraft is strict (it is the only thing storage accepts), while
ExpenseRecord is lenient because rows written by older versions of the
screen may carry odd amounts or dates.
"""

import math
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)

from expense_tracker.dates import normalize_stored_date


CANONICAL_DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_decimal(value: Any) -> Optional[Decimal]:
    """
    Best-effort conversion of a stored amount to Decimal.

    Returns None for missing, non-numeric or non-finite values.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    try:
        # str() first so floats keep their shortest repr (0.1 -> "0.1")
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    return amount if amount.is_finite() else None


def is_storable_amount(amount: Decimal) -> bool:
    """Amounts are kept as REAL, so they must stay positive and finite as floats."""
    as_float = float(amount)
    return math.isfinite(as_float) and as_float > 0


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TimeWindow(str, Enum):
    """
    Time windows the list can be narrowed to.

    Windows are half-open calendar ranges computed from "today".
    """
    ALL = "all"
    WEEK = "week"    # Sunday through Saturday of the current week
    MONTH = "month"  # First through last day of the current month


# =============================================================================
# EXPENSE MODELS
# =============================================================================

class ExpenseDraft(BaseModel):
    """
    A validated expense, ready to be written.

    CRITICAL: Storage only ever accepts drafts. A draft cannot be
    constructed with a non-positive amount or a blank category, so
    an invalid expense can never reach the database.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    amount: Decimal = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Expense amount, strictly positive"
    )
    category: str = Field(
        ...,
        min_length=1,
        description="Expense category (required)"
    )
    note: Optional[str] = Field(
        default=None,
        description="Free-form note"
    )
    date: Optional[str] = Field(
        default=None,
        pattern=CANONICAL_DATE_PATTERN,
        description="Canonical YYYY-MM-DD date, None when unknown"
    )

    @field_validator('amount')
    @classmethod
    def amount_fits_storage(cls, v: Decimal) -> Decimal:
        if not is_storable_amount(v):
            raise ValueError("Amount is out of range")
        return v

    @field_validator('note', mode='before')
    @classmethod
    def blank_note_is_none(cls, v: Any) -> Any:
        """Empty notes are stored as NULL."""
        if isinstance(v, str) and not v.strip():
            return None
        return v


class ExpenseRecord(BaseModel):
    """
    An expense as stored.

    Read-side model: amounts that are not numbers load as None and
    contribute nothing to totals, blank categories load as None.
    """
    model_config = ConfigDict(frozen=True)

    id: int = Field(
        ...,
        description="Identifier assigned by storage"
    )
    amount: Optional[Decimal] = None
    category: Optional[str] = None
    note: Optional[str] = None
    date: Optional[str] = Field(
        default=None,
        description="Stored date, canonical unless it predates the migration"
    )

    @field_validator('amount', mode='before')
    @classmethod
    def coerce_amount(cls, v: Any) -> Optional[Decimal]:
        return to_decimal(v)

    @field_validator('category', 'note', mode='before')
    @classmethod
    def strip_text(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        text = str(v).strip()
        return text or None

    @field_validator('date', mode='before')
    @classmethod
    def stringify_date(cls, v: Any) -> Optional[str]:
        """
        Legacy rows may hold epoch milliseconds as numbers in the date column.

        Those are read the same way the migration reads them; numbers that
        are not a valid timestamp load as None.
        """
        if v is None:
            return None
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return normalize_stored_date(v)
        text = str(v).strip()
        return text or None


class ExpenseForm(BaseModel):
    """
    Raw, unvalidated input as typed into the add/edit form.

    Every field is a plain string; nothing here is trusted.
    """

    amount: str = ""
    category: str = ""
    note: str = ""
    date: str = ""

    @field_validator('amount', 'category', 'note', 'date', mode='before')
    @classmethod
    def none_is_empty(cls, v: Any) -> Any:
        if v is None:
            return ""
        if isinstance(v, (int, float, Decimal)) and not isinstance(v, bool):
            return str(v)
        return v

    @classmethod
    def from_record(cls, record: ExpenseRecord) -> "ExpenseForm":
        """Pre-fill the form for editing an existing record."""
        return cls(
            amount=str(record.amount) if record.amount is not None else "",
            category=record.category or "",
            note=record.note or "",
            date=record.date or "",
        )


# =============================================================================
# FILTER / SUMMARY MODELS
# =============================================================================

class FilterState(BaseModel):
    """
    The screen's current filter selection.

    Owned by the view and passed into every render.
    """

    window: TimeWindow = TimeWindow.ALL
    category: Optional[str] = Field(
        default=None,
        description="Exact category to keep; None keeps every category"
    )


class CategoryTotal(BaseModel):
    """Sum of amounts for one category."""

    category: str
    total: Decimal = Decimal("0")


class ExpenseSummary(BaseModel):
    """Totals over a list of records."""

    total: Decimal = Decimal("0")
    by_category: list[CategoryTotal] = Field(default_factory=list)
    record_count: int = Field(default=0, ge=0)

    def as_pairs(self) -> list[tuple[str, Decimal]]:
        """(category, sum) pairs in display order."""
        return [(item.category, item.total) for item in self.by_category]


class ExpenseView(BaseModel):
    """Everything the screen needs to draw one frame."""

    state: FilterState
    records: list[ExpenseRecord] = Field(default_factory=list)
    summary: ExpenseSummary = Field(default_factory=ExpenseSummary)
    categories: list[str] = Field(
        default_factory=list,
        description="Distinct categories across all records, for the selector"
    )
    formatted_total: str = ""


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'unparseable')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Result of validating a form.

    When is_valid is True, draft holds the normalized expense.
    Warnings never block a save.
    """

    validated_at: datetime = Field(
        default_factory=_utcnow
    )
    is_valid: bool = Field(
        ...,
        description="Overall validation result"
    )
    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All validation issues found"
    )
    draft: Optional[ExpenseDraft] = None

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == "warning"]


