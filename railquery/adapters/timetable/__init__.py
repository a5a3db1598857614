"""Timetable and live delay adapters."""

from .static_source import (
    StaticLiveDelaySource,
    StaticStationSource,
    StaticTimetableSource,
    read_json,
)

__all__ = [
    "StaticLiveDelaySource",
    "StaticStationSource",
    "StaticTimetableSource",
    "read_json",
]
