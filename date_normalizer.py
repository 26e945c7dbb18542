"""
Date Normalizer
===============
Parses the date labels used as pivot columns into plain calendar dates and
orders columns chronologically.

Dates of service are calendar dates, not instants: ISO timestamps are cut at
the ``T`` and read as integers, so ``2025-01-01T00:00:00Z`` is always
01/01/25 whatever the local timezone.

Supported inputs:
    MM/DD/YY, MM/DD/YYYY (one- or two-digit month and day)
    YYYY-MM-DD, optionally followed by ``T`` or a space and a time part
"""

import re
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import List, Sequence, Tuple

logger = logging.getLogger("MatrixViewer.Dates")

_US_DATE_RE = re.compile(r'^(\d{1,2})/(\d{1,2})/(\d{2}|\d{4})$')
_ISO_DATE_RE = re.compile(r'^(\d{4})-(\d{1,2})-(\d{1,2})$')


class DateParseError(ValueError):
    """Raised when a column label is not in a supported date format."""

    def __init__(self, raw, reason="unrecognized date format"):
        self.raw = raw
        self.reason = reason
        super().__init__(f"Cannot parse date {raw!r}: {reason}")


@dataclass(frozen=True)
class CanonicalDate:
    """A timezone-naive calendar date plus the label it came from."""
    year: int
    month: int
    day: int
    original: str = field(default="", compare=False)

    @property
    def key(self) -> Tuple[int, int, int]:
        return (self.year, self.month, self.day)

    def display(self) -> str:
        """MM/DD/YY, the format users expect on screen."""
        return f"{self.month:02d}/{self.day:02d}/{self.year % 100:02d}"

    def isoformat(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"


def _build(raw, year, month, day):
    try:
        date(year, month, day)
    except ValueError as e:
        raise DateParseError(raw, str(e)) from None
    return CanonicalDate(year, month, day, raw)


def normalize(raw) -> CanonicalDate:
    """Parse *raw* into a CanonicalDate or raise DateParseError."""
    if not isinstance(raw, str):
        raise DateParseError(raw, "not a string")
    s = raw.strip()
    if not s:
        raise DateParseError(raw, "empty")

    m = _US_DATE_RE.match(s)
    if m:
        month, day, year_str = int(m.group(1)), int(m.group(2)), m.group(3)
        year = int(year_str)
        if len(year_str) == 2:
            year += 2000
        return _build(raw, year, month, day)

    # Date-only prefix; whatever follows the T (time, offset, Z) is ignored
    date_part = re.split(r'[T ]', s, maxsplit=1)[0]
    m = _ISO_DATE_RE.match(date_part)
    if m:
        return _build(raw, int(m.group(1)), int(m.group(2)), int(m.group(3)))

    raise DateParseError(raw)


def compare(a: CanonicalDate, b: CanonicalDate) -> int:
    """Three-way comparison on (year, month, day): -1, 0 or 1."""
    if a.key < b.key:
        return -1
    if a.key > b.key:
        return 1
    return 0


def display_label(raw) -> str:
    """MM/DD/YY for a parseable label, the label itself otherwise."""
    try:
        return normalize(raw).display()
    except DateParseError:
        return str(raw)


def sort_columns(columns: Sequence[str]) -> Tuple[List[str], List[DateParseError]]:
    """Order *columns* chronologically.

    Parseable labels are sorted by calendar date (stable for equal dates)
    and written back into the positions parseable labels occupied.
    Unparseable labels keep their original index.

    Returns:
        (ordered_columns, failures)
    """
    parsed = []
    slots = []
    failures = []
    for idx, col in enumerate(columns):
        try:
            parsed.append((normalize(col).key, idx, col))
            slots.append(idx)
        except DateParseError as e:
            failures.append(e)
            logger.warning("Column %r kept in original position: %s", col, e.reason)

    ordered = list(columns)
    for slot, (_, _, col) in zip(slots, sorted(parsed)):
        ordered[slot] = col
    return ordered, failures
