"""Immutable domain models for railquery.

All models are frozen dataclasses with slots. They are built once per
request (or once per directory load for stations) and never mutated;
enrichment goes through ``dataclasses.replace``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum, auto
from types import MappingProxyType
from typing import Mapping, Optional, Tuple


@dataclass(frozen=True, slots=True)
class RawQuery:
    """User text plus the normalized copy used for matching.

    Attributes:
        original: Text exactly as received ('' for non-text input)
        normalized: Control-stripped, NFKC, whitespace-collapsed, length-bounded
        truncated: True if the normalized text was cut to the length bound
    """

    original: str
    normalized: str
    truncated: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.normalized


@dataclass(frozen=True, slots=True)
class TrainNumberHint:
    """A train number found in the request.

    Attributes:
        number: The digits, as written
        partial: Bare numeral of two digits or fewer
        qualified: Came with a class name, a train suffix or a status word
        kind: Which rule found it ('pure', 'class', 'suffix', 'status')
        class_hint: Class name written next to the number, if any
    """

    number: str
    partial: bool = False
    qualified: bool = False
    kind: str = "pure"
    class_hint: Optional[str] = None


@dataclass(frozen=True, slots=True)
class Preferences:
    """Travel preferences expressed in the request."""

    fastest: bool = False
    cheapest: bool = False
    direct_only: bool = False
    class_hint: Optional[str] = None
    window_hours: Optional[int] = None
    all_classes: bool = False

    @property
    def is_empty(self) -> bool:
        return self == Preferences()


@dataclass(frozen=True, slots=True)
class ParsedIntent:
    """Structured trip intent extracted from free text.

    Attributes:
        raw: The normalized query the rules ran on
        origin: Origin place name as understood (canonical script when known)
        destination: Destination place name
        date: Civil date, 'YYYY-MM-DD'
        time: 24h clock time, 'HH:MM'
        train_number: Train number hint, if any
        preferences: Preferences, if any were expressed
        confidence: Additive rule score in [0, 1]
        matched_rules: Names of the rules that fired, in order
    """

    raw: RawQuery
    origin: Optional[str] = None
    destination: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    train_number: Optional[TrainNumberHint] = None
    preferences: Optional[Preferences] = None
    confidence: float = 0.0
    matched_rules: Tuple[str, ...] = ()

    @property
    def has_place_pair(self) -> bool:
        return bool(self.origin and self.destination)

    @property
    def is_train_number_only(self) -> bool:
        return self.train_number is not None and not self.origin and not self.destination

    def is_actionable(self, min_confidence: float = 0.4) -> bool:
        """Check whether the intent is enough to search departures.

        A train-number intent is valid on its own; a route intent needs
        both places and a minimum confidence.
        """
        if self.train_number is not None:
            return True
        return self.has_place_pair and self.confidence >= min_confidence

    @property
    def prefs(self) -> Preferences:
        """Preferences, or the empty default."""
        return self.preferences or Preferences()


@dataclass(frozen=True, slots=True)
class GeoLocation:
    """GPS coordinates representing a geographic location."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        """Validate coordinate ranges."""
        if not -90 <= self.latitude <= 90:
            raise ValueError(
                f"Latitude must be between -90 and 90, got {self.latitude}"
            )
        if not -180 <= self.longitude <= 180:
            raise ValueError(
                f"Longitude must be between -180 and 180, got {self.longitude}"
            )


@dataclass(frozen=True, slots=True)
class StationRecord:
    """A station as supplied by the station directory.

    Attributes:
        station_id: Stable identifier (e.g. '1000')
        name_zh: Traditional Chinese display name (e.g. '臺北')
        name_en: English display name (e.g. 'Taipei')
        address: Postal address, if known
        location: Coordinates, if known
    """

    station_id: str
    name_zh: str
    name_en: str = ""
    address: Optional[str] = None
    location: Optional[GeoLocation] = None

    @property
    def display_name(self) -> str:
        return self.name_zh or self.name_en or self.station_id


def _frozen_map() -> Mapping[str, Tuple[StationRecord, ...]]:
    return MappingProxyType({})


@dataclass(frozen=True, slots=True)
class StationIndex:
    """Read-only lookup tables over one snapshot of the station directory.

    Built in a single pass by ``stations.index.build_index``; replaced as
    a whole when the directory changes.

    Attributes:
        exact: Folded name (either script) -> stations
        prefix: Folded 1-3 character prefix -> stations
        aliases: Folded colloquial name -> folded station name
        names: Station id -> folded names of that station
    """

    exact: Mapping[str, Tuple[StationRecord, ...]] = field(default_factory=_frozen_map)
    prefix: Mapping[str, Tuple[StationRecord, ...]] = field(default_factory=_frozen_map)
    aliases: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    names: Mapping[str, Tuple[str, ...]] = field(default_factory=lambda: MappingProxyType({}))
    size: int = 0

    @property
    def is_empty(self) -> bool:
        return self.size == 0


@dataclass(frozen=True, slots=True)
class StationMatch:
    """A candidate station for a place name.

    Attributes:
        station_id: Matched station id
        name: Chinese display name
        name_en: English display name
        confidence: 1.0 exact/alias, 0.9 prefix start, 0.7 prefix contains, 0.5 broad
        tier: Which lookup produced the best score ('exact', 'prefix', 'broad')
    """

    station_id: str
    name: str
    name_en: str = ""
    confidence: float = 0.0
    tier: str = "exact"


@dataclass(frozen=True, slots=True)
class StopTime:
    """A scheduled stop of a train at a station."""

    station_id: str
    arrival: str = ""
    departure: str = ""
    sequence: int = 0


@dataclass(frozen=True, slots=True)
class TimetableRow:
    """One train of a daily timetable, as supplied externally.

    ``stops`` may cover only the two endpoints; the intermediate stop
    count is derived from sequence numbers.
    """

    train_no: str
    train_type_code: str = ""
    train_type_name: str = ""
    stops: Tuple[StopTime, ...] = ()
    through_service: bool = True

    def stop_at(self, station_id: str) -> Optional[StopTime]:
        for stop in self.stops:
            if stop.station_id == station_id:
                return stop
        return None


@dataclass(frozen=True, slots=True)
class LiveDelay:
    """Live delay information for one train at one station."""

    train_no: str
    delay_minutes: int = 0
    status_text: Optional[str] = None


class DelayStatus(Enum):
    """Live status of a departure.

    UNKNOWN means no live data was available; it is never read as on time.
    """

    UNKNOWN = auto()
    ON_TIME = auto()
    DELAYED = auto()
    EARLY = auto()


@dataclass(frozen=True, slots=True)
class DepartureCandidate:
    """A concrete departure between the requested stations."""

    train_no: str
    train_type_code: str
    train_type_name: str
    origin_station_id: str
    destination_station_id: str
    departure_time: str
    arrival_time: str
    duration_minutes: int
    stop_count: int
    pass_eligible: bool
    service_date: date
    departure_at: datetime
    is_direct: bool = True
    minutes_until_departure: Optional[int] = None
    boarding_soon: bool = False
    has_departed: bool = False
    is_upcoming: bool = False
    delay_minutes: Optional[int] = None
    actual_departure_time: Optional[str] = None
    actual_arrival_time: Optional[str] = None
    status: DelayStatus = DelayStatus.UNKNOWN
    live_status_text: Optional[str] = None
    is_backup: bool = False

    @property
    def has_live_data(self) -> bool:
        return self.status is not DelayStatus.UNKNOWN


@dataclass(frozen=True, slots=True)
class RankedResult:
    """Selected departures.

    Attributes:
        primary: Pass-eligible (or unfiltered) in-window departures
        backup: Ineligible in-window departures padding a short primary tier
        window_start: Start of the search window
        window_end: End of the search window
        eligibility_filtered: Whether the pass-eligibility filter applied
        warnings: Data-quality warnings raised while selecting
    """

    primary: Tuple[DepartureCandidate, ...] = ()
    backup: Tuple[DepartureCandidate, ...] = ()
    window_start: Optional[datetime] = None
    window_end: Optional[datetime] = None
    eligibility_filtered: bool = True
    warnings: Tuple[str, ...] = ()

    @property
    def departures(self) -> Tuple[DepartureCandidate, ...]:
        return self.primary + self.backup

    @property
    def is_empty(self) -> bool:
        return not self.primary and not self.backup


@dataclass(frozen=True, slots=True)
class TrainMatch:
    """A train found for a train-number request.

    Attributes:
        departure: The train from its first to its last stop
        score: 1.0 exact, 0.8 prefix, 0.6 contained, fuzzy ratio otherwise
    """

    departure: DepartureCandidate
    score: float


@dataclass(frozen=True, slots=True)
class TrainLookup:
    """Trains matching a requested number on one service date.

    Attributes:
        number: The digits as requested
        strategy: Which search found the trains ('exact', 'partial', 'fuzzy', 'none')
        matches: Best match first
        service_date: Civil date searched
        warnings: Data-quality warnings raised while building the matches
    """

    number: str
    strategy: str = "none"
    matches: Tuple[TrainMatch, ...] = ()
    service_date: Optional[date] = None
    warnings: Tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.matches


@dataclass(frozen=True, slots=True)
class TripPlan:
    """Service-level answer to one request."""

    intent: ParsedIntent
    origin_matches: Tuple[StationMatch, ...] = ()
    destination_matches: Tuple[StationMatch, ...] = ()
    origin: Optional[StationMatch] = None
    destination: Optional[StationMatch] = None
    service_date: Optional[date] = None
    result: Optional[RankedResult] = None
    train_lookup: Optional[TrainLookup] = None
