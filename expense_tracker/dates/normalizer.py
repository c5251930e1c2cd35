"""
Date Normalization

Users type dates by hand, paste them from other tools, or paste raw
epoch timestamps. Everything is normalized once, at the write boundary,
into canonical YYYY-MM-DD so that filtering never has to guess.

RULES (in order):
1. Empty input -> no date
2. Already YYYY-MM-DD -> kept as is
3. Digits only -> epoch timestamp (10 digits = seconds, else milliseconds)
4. Anything else -> general date parse (python-dateutil)

Timestamps and parsed datetimes are reduced to their UTC calendar date.
None of the functions here raise on bad input; they return None.
"""

import re
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional

from dateutil import parser as date_parser
from dateutil.parser import ParserError


CANONICAL_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$", re.ASCII)
DIGITS_RE = re.compile(r"^\d+$", re.ASCII)

# Digit count that marks an epoch timestamp as seconds rather than milliseconds
EPOCH_SECONDS_DIGITS = 10

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _format_utc(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%d")


def epoch_millis_to_iso(millis: int) -> Optional[str]:
    """Convert epoch milliseconds to a UTC YYYY-MM-DD, or None if out of range."""
    try:
        return _format_utc(_EPOCH + timedelta(milliseconds=millis))
    except (OverflowError, ValueError):
        return None


def _digits_to_iso(digits: str) -> Optional[str]:
    try:
        value = int(digits)
    except ValueError:  # beyond the int string-conversion limit
        return None
    if len(digits) == EPOCH_SECONDS_DIGITS:
        value *= 1000
    return epoch_millis_to_iso(value)


def _parse_freeform(text: str) -> Optional[str]:
    try:
        parsed = date_parser.parse(text)
    except (ParserError, ValueError, OverflowError, TypeError):
        return None

    # Naive results are wall-clock times on this machine
    try:
        return _format_utc(parsed)
    except (OverflowError, ValueError, OSError):
        return None


def normalize_date(raw: Optional[str]) -> Optional[str]:
    """
    Normalize a freeform date into canonical YYYY-MM-DD.

    Args:
        raw: Whatever the user entered (may be None)

    Returns:
        The canonical date string, or None when no date could be derived.
        Input already shaped like YYYY-MM-DD is returned unchanged, even
        if it is not a real calendar day.
    """
    if raw is None:
        return None

    text = str(raw).strip()
    if not text:
        return None

    if CANONICAL_DATE_RE.match(text):
        return text

    if DIGITS_RE.match(text):
        return _digits_to_iso(text)

    return _parse_freeform(text)


def format_typed_date(raw: Any) -> str:
    """
    Shape digits into YYYY-MM-DD while the user is still typing.

    Non-digits are dropped and at most 8 digits are kept. Dashes appear
    only once the month / day digits exist:

        "2024"      -> "2024"
        "202403"    -> "2024-03"
        "20240305"  -> "2024-03-05"

    The result is not checked for calendar correctness.
    """
    digits = re.sub(r"\D", "", "" if raw is None else str(raw))[:8]
    year, month, day = digits[:4], digits[4:6], digits[6:8]

    formatted = year
    if month:
        formatted += "-" + month
    if day:
        formatted += "-" + day
    return formatted


def normalize_stored_date(value: Any) -> Optional[str]:
    """
    Canonical form of a value read back from the date column.

    Legacy rows may hold epoch milliseconds as numbers; those are
    converted directly. Anything else goes through normalize_date.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return epoch_millis_to_iso(int(value))
        except (ValueError, OverflowError):  # nan / inf
            return None
    return normalize_date(str(value))


def parse_stored_date(value: Any) -> Optional[date]:
    """
    Turn a stored date value into a calendar date for comparisons.

    Values that look canonical but name an impossible day
    ("2024-02-30") give None.
    """
    iso = normalize_stored_date(value)
    if iso is None:
        return None

    try:
        return date.fromisoformat(iso)
    except ValueError:
        return None
