"""TDX-shaped payload parsing.

Timetable, station and live board data supplied by the Transport Data
eXchange (TDX) API arrive as JSON documents. The pydantic models below
describe the parts of those documents railquery reads; ``parse_*``
turn a decoded document into domain models. Entries that fail
validation are skipped with a warning, a document of the wrong shape
raises DataSupplyError.

Example
-------
    >>> boards = parse_live_board([{"StationID": "1000", "TrainNo": "152", "DelayTime": 5}])
    >>> boards["1000"]["152"].delay_minutes
    5
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ...domain.errors import DataSupplyError
from ...domain.models import GeoLocation, LiveDelay, StationRecord, StopTime, TimetableRow

logger = logging.getLogger(__name__)


class _TDXModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class TDXName(_TDXModel):
    zh_tw: str = Field(default="", alias="Zh_tw")
    en: str = Field(default="", alias="En")


class TDXPosition(_TDXModel):
    lat: float = Field(alias="PositionLat")
    lon: float = Field(alias="PositionLon")


class TDXStation(_TDXModel):
    station_id: str = Field(alias="StationID", min_length=1)
    station_name: TDXName = Field(default_factory=TDXName, alias="StationName")
    station_address: Optional[str] = Field(default=None, alias="StationAddress")
    station_position: Optional[TDXPosition] = Field(default=None, alias="StationPosition")

    def to_record(self) -> StationRecord:
        location = None
        if self.station_position is not None:
            try:
                location = GeoLocation(self.station_position.lat, self.station_position.lon)
            except ValueError:
                location = None
        return StationRecord(
            station_id=self.station_id,
            name_zh=self.station_name.zh_tw,
            name_en=self.station_name.en,
            address=self.station_address or None,
            location=location,
        )


class TDXStopTime(_TDXModel):
    station_id: str = Field(alias="StationID", min_length=1)
    arrival_time: str = Field(default="", alias="ArrivalTime")
    departure_time: str = Field(default="", alias="DepartureTime")
    stop_sequence: int = Field(default=0, alias="StopSequence", ge=0)


class TDXTrainInfo(_TDXModel):
    train_no: str = Field(alias="TrainNo", min_length=1)
    train_type_code: str = Field(default="", alias="TrainTypeCode")
    train_type_name: TDXName = Field(default_factory=TDXName, alias="TrainTypeName")
    # Not part of the public TDX schema; static feeds may set it to flag transfers
    through_service: bool = Field(default=True, alias="ThroughService")


class TDXTrainTimetable(_TDXModel):
    train_info: TDXTrainInfo = Field(alias="TrainInfo")
    stop_times: List[TDXStopTime] = Field(default_factory=list, alias="StopTimes")

    def to_row(self) -> TimetableRow:
        return TimetableRow(
            train_no=self.train_info.train_no,
            train_type_code=self.train_info.train_type_code,
            train_type_name=self.train_info.train_type_name.zh_tw,
            stops=tuple(
                StopTime(
                    station_id=stop.station_id,
                    arrival=stop.arrival_time,
                    departure=stop.departure_time,
                    sequence=stop.stop_sequence,
                )
                for stop in self.stop_times
            ),
            through_service=self.train_info.through_service,
        )


class TDXLiveBoardEntry(_TDXModel):
    station_id: str = Field(alias="StationID", min_length=1)
    train_no: str = Field(alias="TrainNo", min_length=1)
    delay_time: int = Field(default=0, alias="DelayTime")
    train_status: Optional[str] = Field(default=None, alias="TrainStatus")

    def to_delay(self) -> LiveDelay:
        return LiveDelay(
            train_no=self.train_no,
            delay_minutes=self.delay_time,
            status_text=self.train_status,
        )


def _entries(payload: Any, key: str, source: str) -> Sequence[Any]:
    if isinstance(payload, dict):
        payload = payload.get(key, [])
    if not isinstance(payload, list):
        raise DataSupplyError(
            f"Expected a list of entries for {key}, got {type(payload).__name__}",
            source=source,
        )
    return payload


def _validate(model: type, entries: Sequence[Any], source: str) -> List[Any]:
    parsed = []
    for position, entry in enumerate(entries):
        try:
            parsed.append(model.model_validate(entry))
        except ValidationError as e:
            logger.warning(
                "Invalid payload entry skipped",
                extra={"source": source, "position": position, "errors": e.error_count()},
            )
    return parsed


def parse_stations(payload: Any) -> List[StationRecord]:
    """Parse a station list (bare list or ``{"Stations": [...]}``)."""
    entries = _entries(payload, "Stations", "stations")
    return [station.to_record() for station in _validate(TDXStation, entries, "stations")]


def parse_timetables(payload: Any) -> List[TimetableRow]:
    """Parse daily timetables (bare list or ``{"TrainTimetables": [...]}``)."""
    entries = _entries(payload, "TrainTimetables", "timetable")
    return [train.to_row() for train in _validate(TDXTrainTimetable, entries, "timetable")]


def parse_live_board(payload: Any) -> Dict[str, Dict[str, LiveDelay]]:
    """Parse live board entries into ``station_id -> train_no -> LiveDelay``."""
    entries = _entries(payload, "StationLiveBoards", "live_board")
    boards: Dict[str, Dict[str, LiveDelay]] = {}
    for entry in _validate(TDXLiveBoardEntry, entries, "live_board"):
        boards.setdefault(entry.station_id, {})[entry.train_no] = entry.to_delay()
    return boards
