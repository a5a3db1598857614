"""Clock adapters for the fixed civil timezone."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from zoneinfo import ZoneInfo

DEFAULT_TIMEZONE = "Asia/Taipei"


@dataclass
class SystemClock:
    """Reads the host clock and expresses it in the civil timezone.

    The host timezone is irrelevant: ``datetime.now(tz)`` converts from
    UTC.
    """

    timezone: str = DEFAULT_TIMEZONE
    _tz: tzinfo = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._tz = ZoneInfo(self.timezone)

    def now(self) -> datetime:
        return datetime.now(self._tz)


@dataclass
class FixedClock:
    """Always returns the same instant.

    Naive instants are taken to be civil time in ``timezone``.
    """

    instant: datetime
    timezone: str = DEFAULT_TIMEZONE

    def __post_init__(self) -> None:
        tz = ZoneInfo(self.timezone)
        if self.instant.tzinfo is None:
            self.instant = self.instant.replace(tzinfo=tz)
        else:
            self.instant = self.instant.astimezone(tz)

    def now(self) -> datetime:
        return self.instant
