"""Data-supply ports - Station directory, timetable and live delays.

The core never fetches anything: these protocols describe what the
surrounding system hands over. Remote retrieval, auth tokens, retries
and rate limiting live behind the implementations.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Mapping, Protocol, Sequence

if TYPE_CHECKING:
    from ..domain.models import LiveDelay, StationRecord, TimetableRow


class StationSource(Protocol):
    """Port for bulk station directory supply.

    Implementations:
    - adapters/stations/csv_source.py (CSVStationSource)
    - adapters/timetable/static_source.py (StaticStationSource)
    """

    def load_stations(self) -> Sequence[StationRecord]:
        """Return every station of the directory."""
        ...


class TimetableSource(Protocol):
    """Port for daily timetable supply.

    Route requests ask for the trains between two stations; train-number
    requests scan the whole day.
    """

    def rows_for(
        self,
        origin_id: str,
        destination_id: str,
        service_date: date,
    ) -> Sequence[TimetableRow]:
        """Return the trains running between two stations on a civil date.

        Args:
            origin_id: Origin station id.
            destination_id: Destination station id.
            service_date: Civil date of travel.

        Returns:
            Timetable rows, in supplier order.
        """
        ...

    def trains_on(self, service_date: date) -> Sequence[TimetableRow]:
        """Return every train of the daily timetable for a civil date."""
        ...


class LiveDelaySource(Protocol):
    """Port for live delay boards.

    The mapping may be empty or stale; callers must treat a missing
    train as 'status unknown'.
    """

    def delays_for_station(self, station_id: str) -> Mapping[str, LiveDelay]:
        """Return live delays at a station keyed by train number."""
        ...
