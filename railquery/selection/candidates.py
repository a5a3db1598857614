"""Candidate construction from timetable rows.

A row becomes a candidate when the train stops at both requested
stations in travel order, its clock values parse and its travel time
stays under the ceiling. Rows failing the last two checks are reported
as warnings rather than errors.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, tzinfo
from typing import Iterable, List, Optional, Sequence

from ..domain.errors import TimetableDataError
from ..domain.models import DepartureCandidate, StopTime, TimetableRow
from .clock_math import duration_minutes, format_clock, parse_clock

logger = logging.getLogger(__name__)


@dataclass
class CandidateSet:
    """Candidates plus the data-quality warnings raised while building them."""

    candidates: List[DepartureCandidate] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    skipped: int = 0


def _position(row: TimetableRow, stop: StopTime) -> int:
    return row.stops.index(stop)


def _in_travel_order(row: TimetableRow, origin: StopTime, destination: StopTime) -> bool:
    if origin.sequence and destination.sequence:
        return destination.sequence > origin.sequence
    return _position(row, destination) > _position(row, origin)


def _stop_count(row: TimetableRow, origin: StopTime, destination: StopTime) -> int:
    if origin.sequence and destination.sequence:
        gap = destination.sequence - origin.sequence
    else:
        gap = _position(row, destination) - _position(row, origin)
    return max(0, gap - 1)


def build_candidate(
    row: TimetableRow,
    origin_id: str,
    destination_id: str,
    service_date: date,
    timezone: tzinfo,
    restricted_codes: Sequence[str] = ("1", "2"),
) -> Optional[DepartureCandidate]:
    """Turn one row into a candidate.

    Returns None when the train misses an endpoint or runs the other
    way. Raises TimetableDataError on unparseable clock values.
    """
    origin = row.stop_at(origin_id)
    destination = row.stop_at(destination_id)
    if origin is None or destination is None:
        return None
    if not _in_travel_order(row, origin, destination):
        return None

    raw_departure = origin.departure or origin.arrival
    raw_arrival = destination.arrival or destination.departure
    departure = format_clock(raw_departure, row.train_no)
    arrival = format_clock(raw_arrival, row.train_no)

    return DepartureCandidate(
        train_no=row.train_no,
        train_type_code=row.train_type_code,
        train_type_name=row.train_type_name,
        origin_station_id=origin_id,
        destination_station_id=destination_id,
        departure_time=departure,
        arrival_time=arrival,
        duration_minutes=duration_minutes(departure, arrival, row.train_no),
        stop_count=_stop_count(row, origin, destination),
        pass_eligible=row.train_type_code not in restricted_codes,
        service_date=service_date,
        departure_at=datetime.combine(
            service_date, parse_clock(departure, row.train_no), tzinfo=timezone
        ),
        is_direct=row.through_service,
    )


def build_candidates(
    rows: Iterable[TimetableRow],
    origin_id: str,
    destination_id: str,
    service_date: date,
    timezone: tzinfo,
    *,
    max_travel_hours: float = 8.0,
    restricted_codes: Sequence[str] = ("1", "2"),
) -> CandidateSet:
    """Build candidates for every usable row."""
    result = CandidateSet()
    ceiling = max_travel_hours * 60

    for row in rows:
        try:
            candidate = build_candidate(
                row, origin_id, destination_id, service_date, timezone, restricted_codes
            )
        except TimetableDataError as e:
            message = f"Train {e.train_no}: malformed clock value {e.value!r}, skipped"
            logger.warning(message, extra={"train_no": e.train_no, "value": e.value})
            result.warnings.append(message)
            result.skipped += 1
            continue

        if candidate is None:
            result.skipped += 1
            continue

        if candidate.duration_minutes > ceiling:
            message = (
                f"Train {candidate.train_no}: travel time {candidate.duration_minutes} min "
                f"exceeds {max_travel_hours:g}h, skipped"
            )
            logger.warning(
                message,
                extra={
                    "train_no": candidate.train_no,
                    "duration_minutes": candidate.duration_minutes,
                    "threshold_hours": max_travel_hours,
                },
            )
            result.warnings.append(message)
            result.skipped += 1
            continue

        result.candidates.append(candidate)

    return result
