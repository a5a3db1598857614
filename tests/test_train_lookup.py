"""Tests for train-number lookup.

The clock reads Saturday 2026-10-17 09:00 in Taipei.
"""

from dataclasses import replace
from datetime import date

import pytest

from railquery.config import SelectorConfig
from railquery.domain.models import DelayStatus, LiveDelay, StopTime, TimetableRow, TrainNumberHint
from railquery.selection import TrainFinder, lookup_train, match_numbers

NUMBERS = ["152", "1521", "52", "153", "521"]


@pytest.fixture
def settings():
    return SelectorConfig()


@pytest.fixture
def now(clock):
    return clock.now()


@pytest.fixture
def rows(make_row):
    return [
        make_row("152", "09:30", "11:00"),
        make_row("1521", "12:00", "13:30"),
        make_row("52", "08:00", "09:30"),
        make_row("153", "09:10", "10:40"),
        make_row("521", "14:00", "15:30", type_code="1"),
    ]


def _train_nos(lookup):
    return [m.departure.train_no for m in lookup.matches]


class TestMatchNumbers:
    """Tests for scoring train numbers against a request."""

    def test_exact(self):
        """A full number matches itself only."""
        assert match_numbers(NUMBERS, TrainNumberHint("152")) == ("exact", {"152": 1.0})

    def test_partial_prefix_and_contains(self):
        """A short numeral matches prefixes at 0.8 and inner digits at 0.6."""
        strategy, scores = match_numbers(NUMBERS, TrainNumberHint("52", partial=True))
        assert strategy == "partial"
        assert scores == {"52": 1.0, "521": 0.8, "152": 0.6, "1521": 0.6}

    def test_fuzzy_when_no_exact(self):
        """An unknown number falls back to close numbers."""
        strategy, scores = match_numbers(NUMBERS, TrainNumberHint("154"))
        assert strategy == "fuzzy"
        assert set(scores) == {"152", "153"}
        assert all(0.6 <= score < 1.0 for score in scores.values())

    @pytest.mark.parametrize(
        "hint", [TrainNumberHint("999"), TrainNumberHint("7", partial=True)]
    )
    def test_nothing_close(self, hint):
        """Numbers sharing nothing with the request are not matches."""
        assert match_numbers(NUMBERS, hint) == ("none", {})

    def test_empty_timetable(self):
        """An empty day has no matches."""
        assert match_numbers([], TrainNumberHint("152")) == ("none", {})


class TestLookupTrain:
    """Tests for lookup_train()."""

    def test_exact_upcoming(self, rows, now, settings):
        """The train runs first to last stop and is flagged as upcoming."""
        lookup = lookup_train(rows, TrainNumberHint("152"), now=now, settings=settings)

        assert lookup.strategy == "exact"
        assert lookup.service_date == date(2026, 10, 17)
        (match,) = lookup.matches
        departure = match.departure
        assert match.score == 1.0
        assert (departure.origin_station_id, departure.destination_station_id) == ("1000", "3300")
        assert departure.departure_time == "09:30"
        assert departure.minutes_until_departure == 30
        assert departure.is_upcoming
        assert not departure.boarding_soon
        assert not departure.has_departed
        assert departure.status is DelayStatus.UNKNOWN

    def test_departed(self, rows, now, settings):
        """A train that already left today is kept and marked."""
        (match,) = lookup_train(rows, TrainNumberHint("52"), now=now, settings=settings).matches
        assert match.departure.has_departed
        assert match.departure.minutes_until_departure is None
        assert not match.departure.is_upcoming

    def test_boarding_soon(self, rows, now, settings):
        """A train leaving within the boarding horizon is flagged."""
        (match,) = lookup_train(rows, TrainNumberHint("153"), now=now, settings=settings).matches
        assert match.departure.boarding_soon
        assert match.departure.minutes_until_departure == 10

    def test_beyond_upcoming_horizon(self, rows, now, settings):
        """A train leaving in three hours is not upcoming."""
        (match,) = lookup_train(rows, TrainNumberHint("1521"), now=now, settings=settings).matches
        assert match.departure.minutes_until_departure == 180
        assert not match.departure.is_upcoming

    def test_partial_ordering(self, rows, now, settings):
        """Best score first, then by departure time."""
        lookup = lookup_train(rows, TrainNumberHint("52", partial=True), now=now, settings=settings)
        assert lookup.strategy == "partial"
        assert _train_nos(lookup) == ["52", "521", "152", "1521"]

    def test_limit(self, rows, now, settings):
        """The limit keeps the best matches."""
        lookup = lookup_train(
            rows, TrainNumberHint("52", partial=True), now=now, settings=settings, limit=2
        )
        assert _train_nos(lookup) == ["52", "521"]

    def test_other_day_has_no_timing(self, rows, now, settings):
        """Departed and upcoming flags only apply to today."""
        lookup = lookup_train(
            rows,
            TrainNumberHint("52"),
            now=now,
            service_date=date(2026, 10, 18),
            settings=settings,
        )
        departure = lookup.matches[0].departure
        assert departure.service_date == date(2026, 10, 18)
        assert not departure.has_departed
        assert departure.minutes_until_departure is None

    def test_live_delay_at_first_stop(self, rows, now, settings):
        """The live board of the first stop shifts the departure."""
        boards = {"1000": {"152": LiveDelay("152", delay_minutes=5)}}
        lookup = lookup_train(
            rows,
            TrainNumberHint("152"),
            now=now,
            delays_for=lambda station_id: boards.get(station_id, {}),
            settings=settings,
        )
        departure = lookup.matches[0].departure
        assert departure.status is DelayStatus.DELAYED
        assert departure.actual_departure_time == "09:35"
        assert departure.minutes_until_departure == 35

    def test_class_hint_narrows(self, make_row, now, settings):
        """A class written with the number prefers trains of that class."""
        local = replace(make_row("152", "10:30", "12:30"), train_type_name="區間")
        rows = [make_row("152", "09:30", "11:00"), local]

        hint = TrainNumberHint("152", qualified=True, kind="class", class_hint="區間")
        lookup = lookup_train(rows, hint, now=now, settings=settings)
        assert [m.departure.train_type_name for m in lookup.matches] == ["區間"]

        hint = TrainNumberHint("152", qualified=True, kind="class", class_hint="莒光")
        assert len(lookup_train(rows, hint, now=now, settings=settings).matches) == 2

    def test_endpoints_follow_sequence(self, now, settings):
        """First and last stops come from the stop sequence, not list order."""
        row = TimetableRow(
            train_no="700",
            stops=(
                StopTime("3300", arrival="11:00", sequence=5),
                StopTime("1020", arrival="09:40", departure="09:41", sequence=2),
                StopTime("1000", departure="09:30", sequence=1),
            ),
        )
        lookup = lookup_train([row], TrainNumberHint("700"), now=now, settings=settings)
        departure = lookup.matches[0].departure
        assert departure.origin_station_id == "1000"
        assert departure.destination_station_id == "3300"
        assert departure.stop_count == 3

    def test_unusable_rows(self, make_row, now, settings):
        """Single-stop trains are dropped; bad clock values become warnings."""
        rows = [
            TimetableRow(train_no="152", stops=(StopTime("1000", departure="09:30"),)),
            make_row("152", "9h30", "11:00"),
        ]
        lookup = lookup_train(rows, TrainNumberHint("152"), now=now, settings=settings)
        assert lookup.is_empty
        assert lookup.strategy == "none"
        assert len(lookup.warnings) == 1


def test_finder_uses_clock(clock, rows):
    """TrainFinder reads now from its clock."""
    finder = TrainFinder(clock=clock, settings=SelectorConfig())
    lookup = finder.find(rows, TrainNumberHint("152"))
    assert lookup.service_date == date(2026, 10, 17)
    assert lookup.matches[0].departure.minutes_until_departure == 30
