"""Typed domain errors for railquery.

User input never raises: incomplete requests are represented by missing
fields and low confidence. These errors cover caller precondition
violations, service-level gating and data-quality problems that are
converted to warnings before they reach the caller.

All errors inherit from RailQueryError and can optionally wrap a root
cause exception for debugging.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass
class RailQueryError(Exception):
    """Base error for the railquery domain.

    Attributes:
        message: Human-readable error description
        cause: Optional underlying exception that caused this error
    """

    message: str
    cause: Optional[Exception] = field(default=None, repr=False)

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def __post_init__(self) -> None:
        super().__init__(self.message)


@dataclass
class DirectoryNotLoadedError(RailQueryError):
    """A station lookup was attempted before any directory load."""


@dataclass
class StationNotFoundError(RailQueryError):
    """No station matched a place name.

    Attributes:
        query: The place name that did not resolve
        suggestions: Close station names, best first
    """

    query: str = ""
    suggestions: Tuple[str, ...] = ()


@dataclass
class IntentTooVagueError(RailQueryError):
    """The extracted intent is below the bar to act on.

    Attributes:
        confidence: Confidence of the rejected intent
        matched_rules: Rules that fired during extraction
    """

    confidence: float = 0.0
    matched_rules: Tuple[str, ...] = ()


@dataclass
class TimetableDataError(RailQueryError):
    """A timetable row carries a value that cannot be interpreted.

    Raised internally by the selector and converted to a warning.

    Attributes:
        train_no: Train the bad value belongs to
        value: The offending raw value
    """

    train_no: str = ""
    value: str = ""


@dataclass
class DataSupplyError(RailQueryError):
    """An external data supplier failed or returned unusable data.

    Attributes:
        source: Name of the supplier (e.g. 'timetable', 'live_delay')
    """

    source: str = ""

