"""Shared fixtures: a frozen clock, a small station directory and timetable rows."""

import logging
from datetime import datetime

import pytest

from railquery.adapters.clock import FixedClock
from railquery.config import reset_config
from railquery.domain.models import ParsedIntent, RawQuery, StationRecord, StopTime, TimetableRow
from railquery.stations import build_index

STATIONS = (
    StationRecord("0900", "基隆", "Keelung"),
    StationRecord("1000", "臺北", "Taipei"),
    StationRecord("1020", "板橋", "Banqiao"),
    StationRecord("1210", "新竹", "Hsinchu"),
    StationRecord("3300", "臺中", "Taichung"),
    StationRecord("3360", "彰化", "Changhua"),
    StationRecord("4220", "臺南", "Tainan"),
    StationRecord("4400", "高雄", "Kaohsiung"),
    StationRecord("6000", "臺東", "Taitung"),
)


@pytest.fixture(autouse=True)
def fresh_config(monkeypatch):
    """Every test starts from default configuration."""
    for name in ("RAILQUERY_TIMEZONE", "RAILQUERY_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def clock():
    """Saturday 2026-10-17, 09:00 in Taipei."""
    return FixedClock(datetime(2026, 10, 17, 9, 0))


@pytest.fixture
def today(clock):
    return clock.now().date()


@pytest.fixture
def station_records():
    return list(STATIONS)


@pytest.fixture
def station_index(station_records):
    return build_index(station_records)


@pytest.fixture
def make_row():
    """Build a Taipei (1000) -> Taichung (3300) timetable row."""

    def _make_row(
        train_no,
        departure,
        arrival,
        type_code="3",
        origin="1000",
        destination="3300",
        origin_seq=1,
        destination_seq=5,
        through_service=True,
    ):
        return TimetableRow(
            train_no=train_no,
            train_type_code=type_code,
            train_type_name="自強",
            stops=(
                StopTime(origin, arrival="", departure=departure, sequence=origin_seq),
                StopTime(destination, arrival=arrival, departure="", sequence=destination_seq),
            ),
            through_service=through_service,
        )

    return _make_row


@pytest.fixture
def make_intent():
    """Build a route intent without going through the extractor."""

    def _make_intent(date=None, time=None, preferences=None, origin="臺北", destination="臺中"):
        return ParsedIntent(
            raw=RawQuery(original="test", normalized="test"),
            origin=origin,
            destination=destination,
            date=date,
            time=time,
            preferences=preferences,
            confidence=0.8,
        )

    return _make_intent


@pytest.fixture
def restore_root_logger():
    """Undo configure_logging() changes to the root logger."""
    root = logging.getLogger()
    level, handlers = root.level, root.handlers[:]
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
