"""Episode dates: embedded filename dates and synthetic fallbacks.

Dates are stored in the sidecars as ISO-8601 UTC instants with millisecond
precision and a ``Z`` suffix (``2023-05-14T00:00:00.000Z``).
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from dateutil.parser import isoparse

# Spacing between synthetic dates. It only has to give a strict order.
SYNTHETIC_DATE_STEP = timedelta(seconds=10)

# Year first (2023-05-14, 2023.5.4) or day first (14.05.2023, 4_5_2023).
# The separators are one to three non-digit characters.
_DATE_RE = re.compile(
    r"(?<!\d)(?:"
    r"(?P<y1>\d{4})\D{1,3}(?P<m1>\d{1,2})\D{1,3}(?P<d1>\d{1,2})"
    r"|"
    r"(?P<d2>\d{1,2})\D{1,3}(?P<m2>\d{1,2})\D{1,3}(?P<y2>\d{4})"
    r")(?!\d)"
)
_LEADING_JUNK_RE = re.compile(r"^[\W_]+")


@dataclass(frozen=True)
class ExtractedDate:
    date: datetime
    title: str

    @property
    def iso(self) -> str:
        return format_instant(self.date)


def extract_date(name: str, logger: logging.Logger | None = None) -> ExtractedDate | None:
    """Find a calendar date embedded in *name* and return it with the rest.

    Only the first match is used. The residual title is *name* with the
    matched text removed and leading punctuation and whitespace stripped.
    Impossible dates such as ``2023-13-45`` are treated as no match.

    >>> extract_date("2023-05-14 - Episode Title").title
    'Episode Title'
    >>> extract_date("NoDateHere") is None
    True
    """
    match = _DATE_RE.search(name)
    if not match:
        return None
    if match.group("y1"):
        year, month, day = match.group("y1", "m1", "d1")
    else:
        year, month, day = match.group("y2", "m2", "d2")
    try:
        date = datetime(int(year), int(month), int(day), tzinfo=timezone.utc)
    except ValueError as exc:
        if logger:
            logger.warning("Ignoring invalid date %r in %s: %s", match.group(0), name, exc)
        return None
    residual = name[: match.start()] + name[match.end() :]
    title = _LEADING_JUNK_RE.sub("", residual).strip() or name
    return ExtractedDate(date=date, title=title)


def allocate_date(
    rank_from_end: int,
    reference: str | None,
    logger: logging.Logger | None = None,
) -> str:
    """Return a synthetic publish date ``rank_from_end`` steps before *reference*.

    ``rank_from_end`` is 1 for the newest undated episode, so older episodes
    get earlier dates. An unparseable reference falls back to the current
    time.
    """
    anchor = parse_instant(reference)
    if anchor is None:
        if logger:
            logger.warning("Could not parse reference date %r; using now", reference)
        anchor = datetime.now(timezone.utc)
    return format_instant(anchor - rank_from_end * SYNTHETIC_DATE_STEP)


def parse_instant(value: object) -> datetime | None:
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = isoparse(value)
    except (ValueError, OverflowError):
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_instant(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = value.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")


def now_instant() -> str:
    return format_instant(datetime.now(timezone.utc))
