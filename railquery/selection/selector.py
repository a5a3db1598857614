"""Departure selection and ranking.

Given the timetable rows between two stations, the parsed intent and
the live delay board, pick the departures to show:

1. build candidates (both endpoints, travel order, sane durations);
2. anchor a window on the requested instant;
3. drop out-of-window and, for today, already departed trains;
4. merge live delays;
5. sort by scheduled departure, cut to the limit and pad a short
   pass-eligible tier with ineligible backups.

Malformed values never fail the selection: they are replaced by a
conservative default and reported as warnings.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Mapping, Optional, Tuple

from ..config import SelectorConfig, get_config
from ..domain.models import (
    DelayStatus,
    DepartureCandidate,
    LiveDelay,
    ParsedIntent,
    RankedResult,
    TimetableRow,
)
from ..ports.clock import Clock
from .candidates import build_candidates
from .clock_math import add_minutes, minutes_of_day, try_parse_clock

logger = logging.getLogger(__name__)

# Class names that need a separate ticket; asking for them disables the pass filter
RESTRICTED_CLASS_NAMES = frozenset({"普悠瑪", "太魯閣"})


@dataclass(frozen=True)
class SearchWindow:
    """Departure window anchored on the requested instant."""

    service_date: date
    base: datetime
    start: datetime
    end: datetime

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant <= self.end


def _parse_intent_date(value: Optional[str], warnings: List[str]) -> Optional[date]:
    if not value:
        return None
    try:
        parsed = date.fromisoformat(value)
    except ValueError:
        parsed = None
    if parsed is None or parsed.isoformat() != value:
        warnings.append(f"Malformed intent date {value!r}, using today")
        return None
    return parsed


def _parse_intent_time(value: Optional[str], warnings: List[str]) -> Optional[time]:
    if not value:
        return None
    parsed = try_parse_clock(value)
    if parsed is None:
        warnings.append(f"Malformed intent time {value!r}, using current time")
    return parsed


def _window_hours(intent: ParsedIntent, settings: SelectorConfig, warnings: List[str]) -> float:
    requested = intent.prefs.window_hours
    if requested is None:
        return settings.default_window_hours
    if not isinstance(requested, (int, float)) or not 0 < requested <= settings.max_window_hours:
        warnings.append(
            f"Window of {requested!r} hours out of range, using {settings.default_window_hours:g}"
        )
        return settings.default_window_hours
    return float(requested)


def build_window(
    intent: ParsedIntent,
    now: datetime,
    settings: SelectorConfig,
    warnings: List[str],
) -> SearchWindow:
    """Anchor the search window.

    Date and time given: that instant. Date only: that date at the
    current time of day. Otherwise: now. A window running off the
    calendar falls back to now.
    """
    today = now.date()
    requested_date = _parse_intent_date(intent.date, warnings)
    requested_time = _parse_intent_time(intent.time, warnings)

    service_date = requested_date or today
    if requested_date is not None and requested_time is not None:
        base = datetime.combine(requested_date, requested_time, tzinfo=now.tzinfo)
    elif requested_date is not None:
        base = datetime.combine(requested_date, now.timetz())
    else:
        base = now

    hours = _window_hours(intent, settings, warnings)
    try:
        start = base - timedelta(hours=settings.lookback_hours)
        end = base + timedelta(hours=hours)
    except OverflowError:
        warnings.append(f"Window around {base.isoformat()} is out of range, using now")
        service_date, base = today, now
        start = now - timedelta(hours=settings.lookback_hours)
        end = now + timedelta(hours=hours)
    return SearchWindow(service_date=service_date, base=base, start=start, end=end)


def apply_live_delay(candidate: DepartureCandidate, delay: Optional[LiveDelay]) -> DepartureCandidate:
    """Attach live delay data; without data the status stays unknown."""
    if delay is None:
        return candidate
    minutes = int(delay.delay_minutes)
    if minutes > 0:
        status = DelayStatus.DELAYED
    elif minutes < 0:
        status = DelayStatus.EARLY
    else:
        status = DelayStatus.ON_TIME
    return replace(
        candidate,
        delay_minutes=minutes,
        actual_departure_time=add_minutes(candidate.departure_time, minutes, candidate.train_no),
        actual_arrival_time=add_minutes(candidate.arrival_time, minutes, candidate.train_no),
        status=status,
        live_status_text=delay.status_text,
    )


def flag_departure_timing(
    candidate: DepartureCandidate, now: datetime, settings: SelectorConfig
) -> DepartureCandidate:
    """Mark a same-day departure as departed, boarding soon or upcoming.

    A known live delay shifts the departure.
    """
    effective = candidate.departure_at + timedelta(minutes=candidate.delay_minutes or 0)
    if effective < now:
        return replace(candidate, has_departed=True)
    minutes_until = int((effective - now).total_seconds() // 60)
    return replace(
        candidate,
        minutes_until_departure=minutes_until,
        boarding_soon=minutes_until <= settings.boarding_soon_minutes,
        is_upcoming=minutes_until <= settings.upcoming_hours * 60,
    )


def _sort_key(candidate: DepartureCandidate) -> Tuple[int, str]:
    return minutes_of_day(candidate.departure_time), candidate.train_no


def select_departures(
    rows: Iterable[TimetableRow],
    origin_id: str,
    destination_id: str,
    intent: ParsedIntent,
    live_delays: Optional[Mapping[str, LiveDelay]] = None,
    *,
    now: datetime,
    max_results: Optional[int] = None,
    settings: Optional[SelectorConfig] = None,
) -> RankedResult:
    """Select and rank departures between two stations.

    Args:
        rows: Timetable rows for the service date
        origin_id: Origin station id
        destination_id: Destination station id
        intent: Parsed intent (date, time and preferences are used)
        live_delays: Train number -> live delay at the origin station
        now: Current instant, timezone-aware
        max_results: Size of the primary tier (config default if None)
        settings: Selector configuration (application config if None)

    Returns:
        RankedResult with primary and backup tiers plus warnings.
    """
    settings = settings or get_config().selector
    live_delays = live_delays or {}
    limit = max_results if max_results and max_results > 0 else settings.max_results
    warnings: List[str] = []

    window = build_window(intent, now, settings, warnings)
    for message in warnings:
        logger.warning(message, extra={"origin": origin_id, "destination": destination_id})
    is_today = window.service_date == now.date()

    built = build_candidates(
        rows,
        origin_id,
        destination_id,
        window.service_date,
        now.tzinfo,
        max_travel_hours=settings.max_travel_hours,
        restricted_codes=tuple(settings.restricted_train_type_codes),
    )
    warnings.extend(built.warnings)

    prefs = intent.prefs
    eligibility_filtered = not (prefs.all_classes or prefs.class_hint in RESTRICTED_CLASS_NAMES)

    in_window: List[DepartureCandidate] = []
    for candidate in built.candidates:
        if prefs.direct_only and not candidate.is_direct:
            continue
        if not window.contains(candidate.departure_at):
            continue

        candidate = apply_live_delay(candidate, live_delays.get(candidate.train_no))
        if is_today:
            candidate = flag_departure_timing(candidate, now, settings)
            if candidate.has_departed:
                continue
        in_window.append(candidate)

    in_window.sort(key=_sort_key)

    if eligibility_filtered:
        eligible = [c for c in in_window if c.pass_eligible]
        ineligible = [c for c in in_window if not c.pass_eligible]
    else:
        eligible, ineligible = in_window, []

    primary = eligible[:limit]
    backup: List[DepartureCandidate] = []
    if eligibility_filtered and len(primary) < settings.min_results:
        needed = settings.min_results - len(primary)
        backup = [replace(c, is_backup=True) for c in ineligible[:needed]]

    logger.debug(
        "Departures selected",
        extra={
            "origin": origin_id,
            "destination": destination_id,
            "window_start": window.start.isoformat(),
            "window_end": window.end.isoformat(),
            "primary": len(primary),
            "backup": len(backup),
            "skipped": built.skipped,
        },
    )

    return RankedResult(
        primary=tuple(primary),
        backup=tuple(backup),
        window_start=window.start,
        window_end=window.end,
        eligibility_filtered=eligibility_filtered,
        warnings=tuple(warnings),
    )


@dataclass
class DepartureSelector:
    """Selector bound to configuration and a clock.

    Attributes:
        clock: Source of the current instant
        settings: Selector configuration
    """

    clock: Clock
    settings: SelectorConfig = field(default_factory=lambda: get_config().selector)

    def select(
        self,
        rows: Iterable[TimetableRow],
        origin_id: str,
        destination_id: str,
        intent: ParsedIntent,
        live_delays: Optional[Mapping[str, LiveDelay]] = None,
        max_results: Optional[int] = None,
    ) -> RankedResult:
        return select_departures(
            rows,
            origin_id,
            destination_id,
            intent,
            live_delays,
            now=self.clock.now(),
            max_results=max_results,
            settings=self.settings,
        )
