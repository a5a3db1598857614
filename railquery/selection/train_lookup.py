"""Train-number lookup.

A request naming a train ("152", "自強152", "train 408 delayed") is
answered from the whole daily timetable instead of a station pair:

- exact: the number as written, for numbers of three or more digits
  and for numbers written with a class, a suffix or a status word;
- partial: trains whose number starts with (0.8) or contains (0.6) the
  digits of a bare one- or two-digit numeral;
- fuzzy: close train numbers by rapidfuzz ratio when neither finds one.

Each match covers the train from its first to its last stop and carries
the live delay at its first stop. On today's date it is also marked as
departed, boarding soon or upcoming.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, tzinfo
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from rapidfuzz import fuzz, process

from ..config import SelectorConfig, get_config
from ..domain.errors import TimetableDataError
from ..domain.models import (
    DepartureCandidate,
    LiveDelay,
    StopTime,
    TimetableRow,
    TrainLookup,
    TrainMatch,
    TrainNumberHint,
)
from ..ports.clock import Clock
from .candidates import build_candidate
from .clock_math import minutes_of_day
from .selector import apply_live_delay, flag_departure_timing

logger = logging.getLogger(__name__)

EXACT_SCORE = 1.0
PREFIX_SCORE = 0.8
CONTAINS_SCORE = 0.6

DelayBoard = Callable[[str], Mapping[str, LiveDelay]]


def match_numbers(
    numbers: Iterable[str],
    hint: TrainNumberHint,
    *,
    fuzzy_cutoff: float = 60.0,
    limit: int = 10,
) -> Tuple[str, Dict[str, float]]:
    """Score the day's train numbers against the requested one.

    Returns:
        ``(strategy, {train_no: score})``; the strategy is ``'none'``
        with an empty mapping when nothing is close enough.
    """
    wanted = hint.number
    unique = list(dict.fromkeys(numbers))

    if hint.partial:
        scores: Dict[str, float] = {}
        for number in unique:
            if number == wanted:
                scores[number] = EXACT_SCORE
            elif number.startswith(wanted):
                scores[number] = PREFIX_SCORE
            elif wanted in number:
                scores[number] = CONTAINS_SCORE
        if scores:
            return "partial", scores
    elif wanted in unique:
        return "exact", {wanted: EXACT_SCORE}

    results = process.extract(
        wanted, unique, scorer=fuzz.ratio, limit=limit, score_cutoff=fuzzy_cutoff
    )
    if results:
        return "fuzzy", {choice: round(score / 100, 4) for choice, score, _ in results}
    return "none", {}


def _endpoints(row: TimetableRow) -> Optional[Tuple[StopTime, StopTime]]:
    if len(row.stops) < 2:
        return None
    stops: Sequence[StopTime] = row.stops
    if all(stop.sequence for stop in stops):
        stops = sorted(stops, key=lambda stop: stop.sequence)
    return stops[0], stops[-1]


def whole_trip(
    row: TimetableRow,
    service_date: date,
    timezone: tzinfo,
    restricted_codes: Sequence[str] = ("1", "2"),
) -> Optional[DepartureCandidate]:
    """The train as a departure from its first stop to its last one."""
    endpoints = _endpoints(row)
    if endpoints is None:
        return None
    first, last = endpoints
    return build_candidate(
        row, first.station_id, last.station_id, service_date, timezone, restricted_codes
    )


def _prefer_class(rows: List[TimetableRow], class_hint: Optional[str]) -> List[TimetableRow]:
    # A class written next to the number narrows the matches only if some train has it
    if not class_hint:
        return rows
    preferred = [row for row in rows if class_hint in row.train_type_name]
    return preferred or rows


def lookup_train(
    rows: Iterable[TimetableRow],
    hint: TrainNumberHint,
    *,
    now: datetime,
    service_date: Optional[date] = None,
    delays_for: Optional[DelayBoard] = None,
    limit: Optional[int] = None,
    settings: Optional[SelectorConfig] = None,
) -> TrainLookup:
    """Find the trains matching a train-number request.

    Args:
        rows: Every train of the service date
        hint: The requested train number
        now: Current instant, timezone-aware
        service_date: Civil date searched (today if None)
        delays_for: Station id -> live board, called with each train's first stop
        limit: Maximum number of matches (config default if None)
        settings: Selector configuration (application config if None)

    Returns:
        TrainLookup with the matches, best score first, then by departure.
    """
    settings = settings or get_config().selector
    service_date = service_date or now.date()
    limit = limit if limit and limit > 0 else settings.train_lookup_limit
    rows = list(rows)

    strategy, scores = match_numbers(
        (row.train_no for row in rows),
        hint,
        fuzzy_cutoff=settings.train_fuzzy_cutoff,
        limit=limit,
    )
    matched = _prefer_class([row for row in rows if row.train_no in scores], hint.class_hint)

    warnings: List[str] = []
    matches: List[TrainMatch] = []
    is_today = service_date == now.date()
    for row in matched:
        try:
            candidate = whole_trip(
                row, service_date, now.tzinfo, tuple(settings.restricted_train_type_codes)
            )
        except TimetableDataError as e:
            message = f"Train {e.train_no}: malformed clock value {e.value!r}, skipped"
            logger.warning(message, extra={"train_no": e.train_no, "value": e.value})
            warnings.append(message)
            continue
        if candidate is None:
            continue

        if delays_for is not None:
            board = delays_for(candidate.origin_station_id)
            candidate = apply_live_delay(candidate, board.get(candidate.train_no))
        if is_today:
            candidate = flag_departure_timing(candidate, now, settings)
        matches.append(TrainMatch(departure=candidate, score=scores[row.train_no]))

    matches.sort(
        key=lambda m: (-m.score, minutes_of_day(m.departure.departure_time), m.departure.train_no)
    )
    matches = matches[:limit]

    logger.debug(
        "Train lookup",
        extra={
            "train_no": hint.number,
            "strategy": strategy,
            "matches": len(matches),
            "service_date": service_date.isoformat(),
        },
    )
    return TrainLookup(
        number=hint.number,
        strategy=strategy if matches else "none",
        matches=tuple(matches),
        service_date=service_date,
        warnings=tuple(warnings),
    )


@dataclass
class TrainFinder:
    """Train-number lookup bound to configuration and a clock.

    Attributes:
        clock: Source of the current instant
        settings: Selector configuration (limits, fuzzy cutoff, horizons)
    """

    clock: Clock
    settings: SelectorConfig = field(default_factory=lambda: get_config().selector)

    def find(
        self,
        rows: Iterable[TimetableRow],
        hint: TrainNumberHint,
        service_date: Optional[date] = None,
        delays_for: Optional[DelayBoard] = None,
        limit: Optional[int] = None,
    ) -> TrainLookup:
        return lookup_train(
            rows,
            hint,
            now=self.clock.now(),
            service_date=service_date,
            delays_for=delays_for,
            limit=limit,
            settings=self.settings,
        )
