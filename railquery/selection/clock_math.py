"""Wall-clock arithmetic on timetable strings.

Timetables carry times of day as ``HH:MM`` or ``HH:MM:SS``. Adding a
delay wraps around midnight in both directions.

Example
-------
    >>> add_minutes("23:45", 30)
    '00:15'
    >>> add_minutes("00:15", -30)
    '23:45'
"""

from __future__ import annotations

import re
from datetime import time
from typing import Optional

from ..domain.errors import TimetableDataError

MINUTES_PER_DAY = 24 * 60

_CLOCK = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


def parse_clock(value: str, train_no: str = "") -> time:
    """Parse ``H:MM``, ``HH:MM`` or ``HH:MM:SS``.

    Raises
    ------
    TimetableDataError
        When the value is not a valid time of day.
    """
    match = _CLOCK.match(value.strip()) if isinstance(value, str) else None
    if match:
        hour, minute = int(match.group(1)), int(match.group(2))
        second = int(match.group(3) or 0)
        if hour <= 23 and minute <= 59 and second <= 59:
            return time(hour, minute, second)
    raise TimetableDataError(
        f"Malformed clock time {value!r}", train_no=train_no, value=str(value)
    )


def minutes_of_day(value: str, train_no: str = "") -> int:
    parsed = parse_clock(value, train_no)
    return parsed.hour * 60 + parsed.minute


def add_minutes(value: str, minutes: int, train_no: str = "") -> str:
    """Shift a clock time, wrapping around midnight.

    Seconds are kept when the input carries them.
    """
    parsed = parse_clock(value, train_no)
    total = (parsed.hour * 60 + parsed.minute + minutes) % MINUTES_PER_DAY
    shifted = f"{total // 60:02d}:{total % 60:02d}"
    if value.strip().count(":") == 2:
        shifted += f":{parsed.second:02d}"
    return shifted


def duration_minutes(departure: str, arrival: str, train_no: str = "") -> int:
    """Minutes from departure to arrival, rolling to the next day if needed."""
    start = minutes_of_day(departure, train_no)
    end = minutes_of_day(arrival, train_no)
    if end < start:
        end += MINUTES_PER_DAY
    return end - start


def format_clock(value: str, train_no: str = "") -> str:
    """Normalize to ``HH:MM``."""
    parsed = parse_clock(value, train_no)
    return f"{parsed.hour:02d}:{parsed.minute:02d}"


def try_parse_clock(value: Optional[str]) -> Optional[time]:
    if not value:
        return None
    try:
        return parse_clock(value)
    except TimetableDataError:
        return None
