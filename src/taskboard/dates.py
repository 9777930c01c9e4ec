from __future__ import annotations

import re
from datetime import date, datetime
from typing import Optional

from taskboard import errors

DUE_DATE_FORMAT = "%d-%m-%Y"

_DUE_DATE_RE = re.compile(r"^\d{2}-\d{2}-\d{4}$")

# Layouts tried after ISO 8601 when the input is not DD-MM-YYYY.
_GENERIC_FORMATS = (
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%B %d, %Y",
    "%B %d %Y",
    "%b %d, %Y",
    "%b %d %Y",
    "%d %B %Y",
    "%d %b %Y",
)


def _parse_generic(text: str) -> Optional[date]:
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass

    for fmt in _GENERIC_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def parse_due_date(value: str, today: Optional[date] = None) -> str:
    """Validate a due date and return it as canonical DD-MM-YYYY text.

    Input matching DD-MM-YYYY is parsed with exactly that layout; anything
    else goes through a generic parse. Dates before ``today`` are rejected.
    """
    text = value.strip()

    if _DUE_DATE_RE.match(text):
        try:
            parsed = datetime.strptime(text, DUE_DATE_FORMAT).date()
        except ValueError:
            raise errors.InvalidDateFormat("Invalid due date format")
    else:
        parsed = _parse_generic(text)
        if parsed is None:
            raise errors.InvalidDateFormat("Invalid due date format")

    if parsed < (today or date.today()):
        raise errors.DateInPast("Due date must be in the future")

    return parsed.strftime(DUE_DATE_FORMAT)


def strict_due_date(value: Optional[str], today: Optional[date] = None) -> Optional[str]:
    """Return ``value`` if it is an exact, non-past DD-MM-YYYY date, else None."""
    if not value or not isinstance(value, str) or value == "null":
        return None
    if not _DUE_DATE_RE.match(value):
        return None
    try:
        parsed = datetime.strptime(value, DUE_DATE_FORMAT).date()
    except ValueError:
        return None
    if parsed < (today or date.today()):
        return None
    return value
