"""Tests for departure selection.

The clock reads Saturday 2026-10-17 09:00 in Taipei; "tomorrow" is
2026-10-18.
"""

from datetime import datetime, timedelta

import pytest

from railquery.config import SelectorConfig
from railquery.domain.models import DelayStatus, LiveDelay, Preferences
from railquery.selection import (
    DepartureSelector,
    apply_live_delay,
    build_candidate,
    build_window,
    select_departures,
)

TOMORROW = "2026-10-18"


@pytest.fixture
def settings():
    return SelectorConfig()


@pytest.fixture
def now(clock):
    return clock.now()


def _select(rows, intent, now, settings, live_delays=None, **kwargs):
    return select_departures(
        rows, "1000", "3300", intent, live_delays, now=now, settings=settings, **kwargs
    )


def _train_nos(departures):
    return [d.train_no for d in departures]


class TestWindow:
    """Tests for the search window."""

    def test_date_and_time(self, make_intent, now, settings):
        """Date plus time anchors on that instant, one hour back and two ahead."""
        warnings = []
        window = build_window(make_intent(date=TOMORROW, time="08:00"), now, settings, warnings)

        assert window.base == datetime(2026, 10, 18, 8, 0, tzinfo=now.tzinfo)
        assert window.start == datetime(2026, 10, 18, 7, 0, tzinfo=now.tzinfo)
        assert window.end == datetime(2026, 10, 18, 10, 0, tzinfo=now.tzinfo)
        assert warnings == []

    def test_date_only_keeps_time_of_day(self, make_intent, now, settings):
        """A date without time uses the current time of day on that date."""
        window = build_window(make_intent(date=TOMORROW), now, settings, [])
        assert window.base == datetime(2026, 10, 18, 9, 0, tzinfo=now.tzinfo)

    def test_time_only_anchors_on_now(self, make_intent, now, settings):
        """Without a date the window starts from now."""
        window = build_window(make_intent(time="15:00"), now, settings, [])
        assert window.base == now
        assert window.service_date == now.date()

    def test_malformed_date_warns(self, make_intent, now, settings):
        """A malformed date falls back to today with a warning."""
        warnings = []
        window = build_window(make_intent(date="2026-13-01"), now, settings, warnings)
        assert window.service_date == now.date()
        assert any("Malformed intent date" in w for w in warnings)

    def test_malformed_time_warns(self, make_intent, now, settings):
        """A malformed time falls back to the current time with a warning."""
        warnings = []
        window = build_window(make_intent(date=TOMORROW, time="8am"), now, settings, warnings)
        assert window.base == datetime(2026, 10, 18, 9, 0, tzinfo=now.tzinfo)
        assert any("Malformed intent time" in w for w in warnings)

    def test_requested_window_hours(self, make_intent, now, settings):
        """A 'next N hours' preference widens the window."""
        intent = make_intent(date=TOMORROW, time="08:00", preferences=Preferences(window_hours=4))
        window = build_window(intent, now, settings, [])
        assert window.end - window.base == timedelta(hours=4)

    def test_out_of_range_window_hours(self, make_intent, now, settings):
        """Windows beyond the maximum fall back to the default."""
        warnings = []
        intent = make_intent(date=TOMORROW, time="08:00", preferences=Preferences(window_hours=99))
        window = build_window(intent, now, settings, warnings)
        assert window.end - window.base == timedelta(hours=2)
        assert len(warnings) == 1

    @pytest.mark.parametrize("date,time", [("9999-12-31", "23:00"), ("0001-01-01", "00:00")])
    def test_window_off_the_calendar_anchors_on_now(self, make_intent, now, settings, date, time):
        """A window that would leave the calendar falls back to now with a warning."""
        warnings = []
        window = build_window(make_intent(date=date, time=time), now, settings, warnings)
        assert window.base == now
        assert window.service_date == now.date()
        assert window.end - window.start == timedelta(hours=3)
        assert any("out of range" in w for w in warnings)

    def test_selection_survives_calendar_limits(self, make_row, make_intent, now, settings):
        """Selection still runs, on today, for a date at the end of the calendar."""
        rows = [make_row("152", "09:30", "11:00")]
        result = _select(rows, make_intent(date="9999-12-31", time="23:00"), now, settings)
        assert _train_nos(result.primary) == ["152"]
        assert any("out of range" in w for w in result.warnings)


class TestCandidates:
    """Tests for candidate construction."""

    def test_fields(self, make_row, now):
        """A row between the stations becomes a candidate."""
        row = make_row("152", "08:10", "09:40")
        candidate = build_candidate(row, "1000", "3300", now.date(), now.tzinfo)

        assert candidate.departure_time == "08:10"
        assert candidate.arrival_time == "09:40"
        assert candidate.duration_minutes == 90
        assert candidate.stop_count == 3
        assert candidate.pass_eligible
        assert candidate.status is DelayStatus.UNKNOWN

    def test_wrong_direction(self, make_row, now):
        """A train running the other way is not a candidate."""
        row = make_row("152", "08:10", "09:40", origin_seq=5, destination_seq=1)
        assert build_candidate(row, "1000", "3300", now.date(), now.tzinfo) is None

    def test_missing_endpoint(self, make_row, now):
        """A train missing either station is not a candidate."""
        row = make_row("152", "08:10", "09:40", destination="4400")
        assert build_candidate(row, "1000", "3300", now.date(), now.tzinfo) is None

    def test_restricted_class_not_eligible(self, make_row, now):
        """Taroko and Puyuma need a separate ticket."""
        row = make_row("408", "08:10", "09:20", type_code="2")
        assert not build_candidate(row, "1000", "3300", now.date(), now.tzinfo).pass_eligible


class TestSelectDepartures:
    """Tests for select_departures()."""

    def test_tomorrow_morning_scenario(self, make_row, make_intent, now, settings):
        """Every departure inside [07:00, 10:00] comes back, ascending, status unknown."""
        rows = [
            make_row("140", "08:40", "10:10"),
            make_row("110", "07:30", "09:00"),
            make_row("150", "09:30", "11:00"),
            make_row("130", "08:10", "09:40"),
            make_row("120", "07:50", "09:20"),
        ]
        result = _select(rows, make_intent(date=TOMORROW, time="08:00"), now, settings)

        assert _train_nos(result.primary) == ["110", "120", "130", "140", "150"]
        assert [d.departure_time for d in result.primary] == [
            "07:30", "07:50", "08:10", "08:40", "09:30",
        ]
        assert all(d.status is DelayStatus.UNKNOWN for d in result.primary)
        assert all(d.minutes_until_departure is None for d in result.primary)
        assert result.backup == ()
        assert result.warnings == ()

    def test_out_of_window_dropped(self, make_row, make_intent, now, settings):
        """Departures outside the window are dropped."""
        rows = [make_row("101", "06:50", "08:20"), make_row("102", "10:30", "12:00")]
        result = _select(rows, make_intent(date=TOMORROW, time="08:00"), now, settings)
        assert result.is_empty

    def test_backup_tier_pads_short_primary(self, make_row, make_intent, now, settings):
        """Ineligible trains fill the result up to the minimum as backups."""
        rows = [
            make_row("101", "08:10", "09:40", type_code="3"),
            make_row("102", "08:20", "09:30", type_code="1"),
            make_row("103", "08:30", "09:40", type_code="2"),
            make_row("104", "08:50", "10:00", type_code="1"),
        ]
        result = _select(rows, make_intent(date=TOMORROW, time="08:00"), now, settings)

        assert _train_nos(result.primary) == ["101"]
        assert _train_nos(result.backup) == ["102", "103"]
        assert all(d.is_backup for d in result.backup)
        assert result.eligibility_filtered
        assert len(result.departures) == 3

    @pytest.mark.parametrize(
        "preferences",
        [Preferences(all_classes=True), Preferences(class_hint="普悠瑪", fastest=True)],
    )
    def test_eligibility_filter_lifted(self, make_row, make_intent, now, settings, preferences):
        """Asking for all classes or a restricted class lifts the filter."""
        rows = [
            make_row("101", "08:10", "09:40", type_code="3"),
            make_row("102", "08:20", "09:30", type_code="1"),
            make_row("103", "08:30", "09:40", type_code="2"),
        ]
        intent = make_intent(date=TOMORROW, time="08:00", preferences=preferences)
        result = _select(rows, intent, now, settings)

        assert _train_nos(result.primary) == ["101", "102", "103"]
        assert result.backup == ()
        assert not result.eligibility_filtered

    def test_direct_only(self, make_row, make_intent, now, settings):
        """direct_only drops trains that are not through services."""
        rows = [
            make_row("101", "08:10", "09:40"),
            make_row("102", "08:20", "09:50", through_service=False),
        ]
        intent = make_intent(
            date=TOMORROW, time="08:00", preferences=Preferences(direct_only=True)
        )
        result = _select(rows, intent, now, settings)
        assert _train_nos(result.primary) == ["101"]

    def test_max_results(self, make_row, make_intent, now, settings):
        """The primary tier is cut to the limit."""
        rows = [make_row(str(100 + i), f"08:{i * 10:02d}", "10:00") for i in range(5)]
        result = _select(rows, make_intent(date=TOMORROW, time="08:00"), now, settings, max_results=2)
        assert _train_nos(result.primary) == ["100", "101"]

    def test_malformed_rows_become_warnings(self, make_row, make_intent, now, settings):
        """Bad clock values and overlong trips are skipped with warnings."""
        rows = [
            make_row("101", "8h10", "09:40"),
            make_row("102", "08:00", "16:30"),
            make_row("103", "08:20", "09:50"),
        ]
        result = _select(rows, make_intent(date=TOMORROW, time="08:00"), now, settings)

        assert _train_nos(result.primary) == ["103"]
        assert len(result.warnings) == 2
        assert "101" in result.warnings[0]
        assert "102" in result.warnings[1]

    def test_today_drops_departed_and_flags_boarding(self, make_row, make_intent, now, settings):
        """Today, departed trains go and imminent ones are flagged."""
        rows = [
            make_row("201", "08:30", "10:00"),
            make_row("202", "09:10", "10:40"),
            make_row("203", "10:00", "11:30"),
            make_row("204", "11:30", "13:00"),
        ]
        result = _select(rows, make_intent(), now, settings)

        assert _train_nos(result.primary) == ["202", "203"]
        first, second = result.primary
        assert (first.minutes_until_departure, first.boarding_soon) == (10, True)
        assert (second.minutes_until_departure, second.boarding_soon) == (60, False)

    def test_delayed_train_still_catchable(self, make_row, make_intent, now, settings):
        """A train scheduled before now is kept while its delayed departure is ahead."""
        rows = [make_row("205", "08:55", "10:25")]
        live = {"205": LiveDelay("205", delay_minutes=10)}
        result = _select(rows, make_intent(), now, settings, live_delays=live)

        (departure,) = result.primary
        assert departure.status is DelayStatus.DELAYED
        assert departure.actual_departure_time == "09:05"
        assert departure.minutes_until_departure == 5

    def test_live_delay_wraps_midnight(self, make_row, make_intent, now, settings):
        """A late-evening delay rolls the actual times past midnight."""
        rows = [make_row("301", "23:45", "00:15")]
        live = {"301": LiveDelay("301", delay_minutes=30)}
        result = _select(
            rows, make_intent(date=TOMORROW, time="23:30"), now, settings, live_delays=live
        )

        (departure,) = result.primary
        assert departure.duration_minutes == 30
        assert departure.actual_departure_time == "00:15"
        assert departure.actual_arrival_time == "00:45"

    def test_live_data_only_for_listed_trains(self, make_row, make_intent, now, settings):
        """Trains missing from the live board stay UNKNOWN."""
        rows = [make_row("101", "08:10", "09:40"), make_row("102", "08:20", "09:50")]
        live = {"101": LiveDelay("101", delay_minutes=0)}
        result = _select(
            rows, make_intent(date=TOMORROW, time="08:00"), now, settings, live_delays=live
        )
        assert [d.status for d in result.primary] == [DelayStatus.ON_TIME, DelayStatus.UNKNOWN]


def test_apply_live_delay_statuses(make_row, now):
    """Delay sign decides the status; no data keeps UNKNOWN."""
    candidate = build_candidate(
        make_row("152", "08:10", "09:40"), "1000", "3300", now.date(), now.tzinfo
    )
    assert apply_live_delay(candidate, None).status is DelayStatus.UNKNOWN
    assert apply_live_delay(candidate, LiveDelay("152", 5)).status is DelayStatus.DELAYED
    assert apply_live_delay(candidate, LiveDelay("152", 0)).status is DelayStatus.ON_TIME
    early = apply_live_delay(candidate, LiveDelay("152", -2))
    assert early.status is DelayStatus.EARLY
    assert early.actual_departure_time == "08:08"


def test_selector_reads_clock(clock, make_row, make_intent):
    """DepartureSelector takes 'now' from its clock."""
    selector = DepartureSelector(clock=clock, settings=SelectorConfig(min_results=0))
    result = selector.select([make_row("202", "09:10", "10:40")], "1000", "3300", make_intent())
    assert result.primary[0].minutes_until_departure == 10
