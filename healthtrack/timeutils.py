# healthtrack/timeutils.py
"""
Time-of-day helpers shared by the client watcher and the server scans.

Both sides compare reminder times as zero-padded "HH:MM" strings, so every
value that takes part in a comparison goes through `format_hhmm` or
`normalize_hhmm` first.
"""

import re
from datetime import datetime, time
from typing import Callable, Tuple

from dateutil.relativedelta import relativedelta

# Anything that returns the current local wall-clock time
Clock = Callable[[], datetime]

_HHMM_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")


def parse_hhmm(value: str) -> time:
    """
    Parses a 24-hour "HH:MM" (or "H:MM") string into a `datetime.time`.

    Raises:
        ValueError: If the value is not a valid time of day.
    """
    match = _HHMM_PATTERN.match(value.strip()) if value else None
    if not match:
        raise ValueError(f"Time must be in 24-hour HH:MM format, got {value!r}")
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise ValueError(f"Time out of range: {value!r}")
    return time(hour, minute)


def normalize_hhmm(value: str) -> str:
    """Returns the zero-padded "HH:MM" form of a time string, e.g. "8:05" -> "08:05"."""
    return parse_hhmm(value).strftime("%H:%M")


def format_hhmm(moment: datetime) -> str:
    """Formats a wall-clock moment at minute granularity as zero-padded "HH:MM"."""
    return moment.strftime("%H:%M")


def hour_prefix(moment: datetime) -> str:
    """The "HH:" prefix matching any stored time within the moment's hour."""
    return moment.strftime("%H:")


def day_marker(moment: datetime) -> str:
    """Calendar-day marker used to scope dedup keys."""
    return moment.date().isoformat()


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def day_bounds(moment: datetime) -> Tuple[datetime, datetime]:
    """Returns the half-open range [today 00:00, tomorrow 00:00) around a moment."""
    today = start_of_day(moment)
    return today, today + relativedelta(days=1)
