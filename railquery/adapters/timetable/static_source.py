"""In-memory data sources.

Serve stations, timetable rows and live delay boards that were fetched
elsewhere (or loaded from JSON files) so the service can run offline.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Mapping, Sequence

from ...domain.errors import DataSupplyError
from ...domain.models import LiveDelay, StationRecord, TimetableRow
from ..tdx.payloads import parse_live_board, parse_stations, parse_timetables


def read_json(path: Path, source: str) -> Any:
    """Decode a JSON file, wrapping failures in DataSupplyError."""
    try:
        with Path(path).open(encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise DataSupplyError(f"Failed to read {source} file {path}", source=source, cause=e)


@dataclass
class StaticStationSource:
    """StationSource over a fixed list of records."""

    records: Sequence[StationRecord] = ()

    def load_stations(self) -> Sequence[StationRecord]:
        return list(self.records)

    @classmethod
    def from_payload(cls, payload: Any) -> "StaticStationSource":
        return cls(records=parse_stations(payload))


@dataclass
class StaticTimetableSource:
    """TimetableSource over a fixed list of rows.

    Rows can be given for every date, or per service date through
    ``rows_by_date``; a date with its own rows ignores the shared list.

    Attributes:
        rows: Rows served for any date
        rows_by_date: Rows served for a specific civil date
    """

    rows: Sequence[TimetableRow] = ()
    rows_by_date: Mapping[date, Sequence[TimetableRow]] = field(default_factory=dict)

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def rows_for(
        self,
        origin_id: str,
        destination_id: str,
        service_date: date,
    ) -> Sequence[TimetableRow]:
        rows = self.rows_by_date.get(service_date, self.rows)
        matching = [
            row
            for row in rows
            if row.stop_at(origin_id) is not None and row.stop_at(destination_id) is not None
        ]
        self._logger.debug(
            "Timetable rows served",
            extra={
                "origin": origin_id,
                "destination": destination_id,
                "service_date": service_date.isoformat(),
                "rows": len(matching),
            },
        )
        return matching

    def trains_on(self, service_date: date) -> Sequence[TimetableRow]:
        return list(self.rows_by_date.get(service_date, self.rows))

    @classmethod
    def from_payload(cls, payload: Any) -> "StaticTimetableSource":
        return cls(rows=parse_timetables(payload))

    @classmethod
    def from_file(cls, path: Path) -> "StaticTimetableSource":
        return cls.from_payload(read_json(path, "timetable"))


@dataclass
class StaticLiveDelaySource:
    """LiveDelaySource over fixed live boards (station id -> train no -> delay)."""

    boards: Mapping[str, Mapping[str, LiveDelay]] = field(default_factory=dict)

    def delays_for_station(self, station_id: str) -> Mapping[str, LiveDelay]:
        return dict(self.boards.get(station_id, {}))

    @classmethod
    def from_payload(cls, payload: Any) -> "StaticLiveDelaySource":
        return cls(boards=parse_live_board(payload))

    @classmethod
    def from_file(cls, path: Path) -> "StaticLiveDelaySource":
        return cls.from_payload(read_json(path, "live_board"))
