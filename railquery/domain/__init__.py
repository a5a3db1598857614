"""Domain layer - Core business models and errors.

This module contains immutable domain models and typed errors
used throughout the application. No external dependencies.
"""

from .errors import (
    DataSupplyError,
    DirectoryNotLoadedError,
    IntentTooVagueError,
    RailQueryError,
    StationNotFoundError,
    TimetableDataError,
)
from .models import (
    DelayStatus,
    DepartureCandidate,
    GeoLocation,
    LiveDelay,
    ParsedIntent,
    Preferences,
    RankedResult,
    RawQuery,
    StationIndex,
    StationMatch,
    StationRecord,
    StopTime,
    TimetableRow,
    TrainLookup,
    TrainMatch,
    TrainNumberHint,
    TripPlan,
)

__all__ = [
    # Models
    "RawQuery",
    "TrainNumberHint",
    "Preferences",
    "ParsedIntent",
    "GeoLocation",
    "StationRecord",
    "StationIndex",
    "StationMatch",
    "StopTime",
    "TimetableRow",
    "LiveDelay",
    "DelayStatus",
    "DepartureCandidate",
    "RankedResult",
    "TrainMatch",
    "TrainLookup",
    "TripPlan",
    # Errors
    "RailQueryError",
    "DirectoryNotLoadedError",
    "StationNotFoundError",
    "IntentTooVagueError",
    "TimetableDataError",
    "DataSupplyError",
]
