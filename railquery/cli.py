"""Command-line entry point.

    railquery "明天早上8點台北到台中" --timetable timetable.json --live live.json

Prints the trip plan as JSON. Timetable and live board files hold
TDX-shaped payloads; without them the plan carries the intent and the
resolved stations and an empty departure list.
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional

from .adapters.stations import CSVStationSource
from .adapters.timetable import StaticLiveDelaySource, StaticTimetableSource
from .container import Container
from .domain.errors import DataSupplyError
from .logging_setup import configure_logging
from .ports.data import LiveDelaySource, StationSource, TimetableSource
from .services import TripQueryService


def _json_default(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    raise TypeError(f"Not JSON serializable: {type(value).__name__}")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="railquery",
        description="Resolve a free-text rail trip request into ranked departures.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    p.add_argument("text", nargs="+", help="The trip request.")
    p.add_argument("--stations", type=Path, default=None, help="Station CSV (bundled file if omitted).")
    p.add_argument("--timetable", type=Path, default=None, help="TDX daily timetable JSON.")
    p.add_argument("--live", type=Path, default=None, help="TDX live board JSON.")
    p.add_argument("--max", dest="max_results", type=int, default=None, help="Primary tier size.")
    p.add_argument("--log-level", default=None, help="Override RAILQUERY_LOG_LEVEL.")
    return p.parse_args(argv)


def build_service(args: argparse.Namespace, container: Optional[Container] = None) -> TripQueryService:
    """Wire the service, replacing default sources with the given files."""
    container = container or Container.create_default()
    if args.stations is not None:
        container.register(
            StationSource, lambda: CSVStationSource(container.config.data, path=args.stations)
        )
    if args.timetable is not None:
        timetable = StaticTimetableSource.from_file(args.timetable)
        container.register(TimetableSource, lambda: timetable)
    if args.live is not None:
        live = StaticLiveDelaySource.from_file(args.live)
        container.register(LiveDelaySource, lambda: live)
    return container.resolve(TripQueryService)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    container = Container.create_default()
    observability = container.config.observability
    if args.log_level:
        observability = observability.model_copy(update={"level": args.log_level})
    configure_logging(observability)

    try:
        service = build_service(args, container)
    except DataSupplyError as e:
        print(f"Data unavailable: {e}", file=sys.stderr)
        return 2

    plan, error = service.plan_safe(" ".join(args.text), max_results=args.max_results)
    if error is not None:
        print(error, file=sys.stderr)
        return 1

    print(json.dumps(asdict(plan), ensure_ascii=False, indent=2, default=_json_default))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
