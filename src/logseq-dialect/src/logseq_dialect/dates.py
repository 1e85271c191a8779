"""Date parsing for journal page names and query date ranges."""

import re
from datetime import date
from typing import Optional

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

_ISO_DATE_RE = re.compile(r"^(\d{4})[-_](\d{1,2})[-_](\d{1,2})$")
_LONG_DATE_RE = re.compile(
    r"^(jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*\.?\s+"
    r"(\d{1,2})(?:st|nd|rd|th)?,?\s+(\d{4})$",
    re.IGNORECASE,
)
_MONTH_ABBREVIATIONS = [name[:3].lower() for name in MONTH_NAMES]


def parse_date(text: str) -> Optional[date]:
    """Parse a page-name style date.

    Accepted forms:
    - ``2024-01-15`` and ``2024_01_15``
    - ``Jan 15th, 2024`` / ``January 15, 2024``

    A ``journals/`` style prefix is ignored, so prefixed journal names parse
    the same as bare ones.

    Args:
        text: Candidate date string

    Returns:
        Parsed date, or None if the text is not a valid date
    """
    candidate = text.strip().rsplit("/", 1)[-1]

    if match := _ISO_DATE_RE.match(candidate):
        year, month, day = (int(part) for part in match.groups())
        return _safe_date(year, month, day)

    if match := _LONG_DATE_RE.match(candidate):
        month = _MONTH_ABBREVIATIONS.index(match.group(1).lower()) + 1
        return _safe_date(int(match.group(3)), month, int(match.group(2)))

    return None


def _safe_date(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None
