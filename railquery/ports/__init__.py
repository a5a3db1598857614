"""Ports layer - Abstract interfaces (Protocols) for the application.

Ports define the contracts between the application core and the
external collaborators that supply stations, timetables, live delays,
time and caching. They enable dependency injection and keep the core
free of I/O.
"""

from .cache import CachePort
from .clock import Clock
from .data import LiveDelaySource, StationSource, TimetableSource

__all__ = [
    # Data supply
    "StationSource",
    "TimetableSource",
    "LiveDelaySource",
    # Time
    "Clock",
    # Cache
    "CachePort",
]
