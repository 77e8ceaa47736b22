# pgn_date.py

import re
from datetime import date, datetime
from typing import Optional

from tree_errors import UnparseableDateError


UNKNOWN_PGN_DATE = "????.??.??"

# strptime accepts one- or two-digit months and days for %m/%d
_DATE_FORMATS = ("%Y.%m.%d", "%Y-%m-%d")

_YEAR_RE = re.compile(r"^\d{4}$")


def parse_pgn_date_strict(raw):
    """Parse a PGN ``Date`` tag value into a ``datetime.date``.

    PGN dates look like "2023.05.15" but may contain "??" for unknown
    parts. When only the year is known ("2023.??.??") the result is
    1 January of that year. ISO dates ("2023-05-15") are accepted too.

    Raises:
        UnparseableDateError: if nothing usable can be extracted.
    """
    if raw is None or not raw.strip():
        raise UnparseableDateError("Empty date")

    text = raw.strip()

    if "?" in text:
        year = text.split(".")[0]
        if _YEAR_RE.match(year):
            try:
                return date(int(year), 1, 1)
            except ValueError:
                pass
        raise UnparseableDateError(f"No usable year in {raw!r}")

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    raise UnparseableDateError(f"Unrecognised date {raw!r}")


def parse_pgn_date(raw) -> Optional[date]:
    """Lenient variant of parse_pgn_date_strict: returns None instead of raising."""
    try:
        return parse_pgn_date_strict(raw)
    except UnparseableDateError:
        return None


def format_pgn_date(value):
    if value is None:
        return UNKNOWN_PGN_DATE
    return value.strftime("%Y.%m.%d")


def format_date_range(start, end):
    """Human-readable date range, e.g. "2020-01-01 to 2021-06-30"."""
    if start is None and end is None:
        return "All Time"
    if start is None:
        return f"Until {end.isoformat()}"
    if end is None:
        return f"From {start.isoformat()}"
    return f"{start.isoformat()} to {end.isoformat()}"
