"""
Expense Form Validation

DESIGN DECISION: Validation happens before any write, and a failed
validation never raises to the caller. The form is left as the user
typed it and the result lists what needs fixing.

BLOCKING (severity "error"):
- Amount is not a number, or not greater than zero
- Category is blank

NON-BLOCKING (severity "warning"):
- A date was entered but no canonical form could be derived;
  the expense is saved without a date
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Optional

from pydantic import ValidationError

from expense_tracker.dates import normalize_date
from expense_tracker.models.expense import (
    ExpenseDraft,
    ExpenseForm,
    ValidationIssue,
    ValidationResult,
    is_storable_amount,
)


# Leading numeric prefix, the way lenient float parsing reads "12.50 USD"
_NUMERIC_PREFIX_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def parse_amount(raw: Optional[str]) -> Optional[Decimal]:
    """
    Read an amount from the start of a string.

    Returns None when the string does not begin with a finite number.
    """
    if raw is None:
        return None
    match = _NUMERIC_PREFIX_RE.match(str(raw).strip())
    if not match:
        return None
    try:
        amount = Decimal(match.group(0))
    except InvalidOperation:
        return None
    return amount if amount.is_finite() else None


class ExpenseValidator:
    """
    Validates raw form input and builds an ExpenseDraft.
    """

    def validate(self, form: ExpenseForm) -> ValidationResult:
        """
        Validate a form.

        Returns a ValidationResult; when it is valid, `draft` holds the
        trimmed, normalized expense ready for storage.
        """
        issues: list[ValidationIssue] = []

        amount = parse_amount(form.amount)
        if amount is None:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="missing" if not form.amount.strip() else "invalid_format",
                message="Amount must be a number",
                severity="error",
                suggested_fix="Enter the amount using digits, e.g. 12.50",
            ))
        elif amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be greater than zero",
                severity="error",
            ))
        elif not is_storable_amount(amount):
            issues.append(ValidationIssue(
                field="amount",
                issue_type="out_of_range",
                message="Amount is too small or too large to store",
                severity="error",
            ))

        category = form.category.strip()
        if not category:
            issues.append(ValidationIssue(
                field="category",
                issue_type="missing",
                message="Category is required",
                severity="error",
                suggested_fix="Enter a category such as Food or Books",
            ))

        note = form.note.strip() or None

        raw_date = form.date.strip()
        iso_date = normalize_date(raw_date)
        if raw_date and iso_date is None:
            issues.append(ValidationIssue(
                field="date",
                issue_type="unparseable",
                message=f"Could not read '{raw_date}' as a date; saving without one",
                severity="warning",
                suggested_fix="Use YYYY-MM-DD",
            ))

        if any(issue.severity == "error" for issue in issues):
            return ValidationResult(is_valid=False, issues=issues)

        try:
            draft = ExpenseDraft(
                amount=amount,
                category=category,
                note=note,
                date=iso_date,
            )
        except ValidationError as e:
            issues.extend(
                ValidationIssue(
                    field=".".join(str(part) for part in error["loc"]) or "expense",
                    issue_type="invalid_value",
                    message=error["msg"],
                    severity="error",
                )
                for error in e.errors()
            )
            return ValidationResult(is_valid=False, issues=issues)

        return ValidationResult(is_valid=True, issues=issues, draft=draft)
