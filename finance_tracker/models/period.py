"""
Month period keys.

Budgets, transactions and the dashboard are all scoped to a calendar month,
identified by a canonical "YYYY-MM" string. The backend filters on this exact
string, so it is validated before it is ever sent.
"""

import re
from datetime import date
from typing import Optional

PERIOD_PATTERN = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])$")


def current_period(today: Optional[date] = None) -> str:
    """Return the period key for the month containing `today` (default: now)."""
    today = today or date.today()
    return f"{today.year:04d}-{today.month:02d}"


def validate_period(value: str) -> str:
    """
    Check that `value` is a canonical period key.

    Raises:
        ValueError: If the value is not of the form YYYY-MM with a real month
    """
    if not isinstance(value, str) or not PERIOD_PATTERN.match(value.strip()):
        raise ValueError(f"Period must be in YYYY-MM format, got {value!r}")
    return value.strip()


def period_to_date(value: str) -> date:
    """First day of the month a period key denotes."""
    match = PERIOD_PATTERN.match(validate_period(value))
    return date(int(match.group(1)), int(match.group(2)), 1)


def month_label(value: str) -> str:
    """Render a period key as a readable month, e.g. "March 2025"."""
    return period_to_date(value).strftime("%B %Y")
