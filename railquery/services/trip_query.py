"""Trip query service - Main orchestrator.

Runs the three stages for one request: intent extraction, place
resolution for both endpoints and departure selection over the data
handed over by the timetable and live delay sources.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple

from ..config import ResolverConfig, get_config
from ..domain.errors import (
    DataSupplyError,
    DirectoryNotLoadedError,
    IntentTooVagueError,
    StationNotFoundError,
)
from ..domain.models import LiveDelay, ParsedIntent, StationMatch, TimetableRow, TripPlan
from ..nlp.extractor import IntentExtractor
from ..ports.cache import CachePort
from ..ports.clock import Clock
from ..ports.data import LiveDelaySource, StationSource, TimetableSource
from ..selection.selector import DepartureSelector
from ..selection.train_lookup import TrainFinder
from ..stations.directory import StationDirectory


@dataclass
class TripQueryService:
    """Main service for answering free-text trip requests.

    Attributes:
        extractor: Intent extractor (confidence gate included)
        directory: Station directory used to resolve place names
        selector: Departure selector
        timetable_source: Supplies timetable rows for a route and date
        clock: Source of "today" for undated requests
        live_delay_source: Optional live delay boards
        live_delay_cache: Optional cache for live delay boards
        station_source: Loads the directory on first use when set
        resolver_config: Match limit and suggestion cutoff
        train_finder: Train-number lookup (built from the selector when None)
    """

    extractor: IntentExtractor
    directory: StationDirectory
    selector: DepartureSelector
    timetable_source: TimetableSource
    clock: Clock
    live_delay_source: Optional[LiveDelaySource] = None
    live_delay_cache: Optional[CachePort[Mapping[str, LiveDelay]]] = None
    station_source: Optional[StationSource] = None
    resolver_config: ResolverConfig = field(default_factory=lambda: get_config().resolver)
    train_finder: Optional[TrainFinder] = None

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)
        if self.train_finder is None:
            self.train_finder = TrainFinder(clock=self.clock, settings=self.selector.settings)

    def plan(self, text: Any, *, max_results: Optional[int] = None) -> TripPlan:
        """Answer a trip request.

        Args:
            text: The request as typed by the user.
            max_results: Size of the primary departure tier.

        Returns:
            TripPlan with the intent, the resolved stations and the
            selected departures. Train-number requests carry the
            matching trains in ``train_lookup`` instead.

        Raises:
            IntentTooVagueError: If the intent is below the bar to act on.
            StationNotFoundError: If a place name matches no station.
            DirectoryNotLoadedError: If no directory is loaded or loadable.
            DataSupplyError: If the timetable cannot be fetched.
        """
        intent = self.extractor.extract(text)
        self._logger.info(
            "Intent extracted",
            extra={"confidence": intent.confidence, "rules": list(intent.matched_rules)},
        )

        if not self.extractor.is_actionable(intent):
            raise IntentTooVagueError(
                "Could not understand the trip request",
                confidence=intent.confidence,
                matched_rules=intent.matched_rules,
            )

        if intent.is_train_number_only:
            return self._plan_train(intent, max_results)

        self._ensure_directory()
        origin_matches = self._resolve_place(intent.origin or "")
        destination_matches = self._resolve_place(intent.destination or "")
        origin, destination = origin_matches[0], destination_matches[0]
        self._logger.info(
            "Stations resolved",
            extra={
                "origin": origin.station_id,
                "destination": destination.station_id,
                "origin_confidence": origin.confidence,
                "destination_confidence": destination.confidence,
            },
        )

        service_date = self._service_date(intent)
        rows = self._fetch_rows(origin.station_id, destination.station_id, service_date)
        live_delays = self._fetch_live_delays(origin.station_id)

        result = self.selector.select(
            rows,
            origin.station_id,
            destination.station_id,
            intent,
            live_delays,
            max_results=max_results,
        )
        self._logger.info(
            "Departures selected",
            extra={
                "primary": len(result.primary),
                "backup": len(result.backup),
                "warnings": len(result.warnings),
            },
        )

        return TripPlan(
            intent=intent,
            origin_matches=tuple(origin_matches),
            destination_matches=tuple(destination_matches),
            origin=origin,
            destination=destination,
            service_date=service_date,
            result=result,
        )

    def plan_safe(
        self, text: Any, *, max_results: Optional[int] = None
    ) -> Tuple[Optional[TripPlan], Optional[str]]:
        """Answer a trip request, returning an error message instead of raising.

        Returns:
            Tuple of (TripPlan or None, error message or None).
        """
        try:
            return self.plan(text, max_results=max_results), None
        except IntentTooVagueError as e:
            return None, f"{e.message} (confidence {e.confidence:.2f})"
        except StationNotFoundError as e:
            if e.suggestions:
                return None, f"{e.message}. Did you mean: {', '.join(e.suggestions)}?"
            return None, e.message
        except DirectoryNotLoadedError as e:
            return None, f"Error: {e.message}"
        except DataSupplyError as e:
            return None, f"Data unavailable: {e.message}"
        except Exception as e:
            self._logger.exception("Unexpected error in trip query")
            return None, f"Error: {e}"

    def _plan_train(self, intent: ParsedIntent, max_results: Optional[int]) -> TripPlan:
        hint = intent.train_number
        assert hint is not None
        service_date = self._service_date(intent)
        rows = self._supply(lambda: self.timetable_source.trains_on(service_date))
        lookup = self.train_finder.find(  # type: ignore[union-attr]
            rows,
            hint,
            service_date=service_date,
            delays_for=self._fetch_live_delays,
            limit=max_results,
        )
        self._logger.info(
            "Train number request",
            extra={
                "train_no": hint.number,
                "strategy": lookup.strategy,
                "matches": len(lookup.matches),
            },
        )
        return TripPlan(intent=intent, service_date=service_date, train_lookup=lookup)

    def _ensure_directory(self) -> None:
        if not self.directory.is_loaded and self.station_source is not None:
            self.directory.load_from(self.station_source)

    def _resolve_place(self, name: str) -> List[StationMatch]:
        matches = self.directory.resolve(name, self.resolver_config.max_results)
        if matches:
            return matches
        suggestions = tuple(
            self.directory.suggest(name, score_cutoff=self.resolver_config.suggestion_cutoff)
        )
        self._logger.info(
            "Place name not resolved",
            extra={"query": name, "suggestions": list(suggestions)},
        )
        raise StationNotFoundError(
            f"No station matches {name!r}", query=name, suggestions=suggestions
        )

    def _service_date(self, intent: ParsedIntent) -> date:
        today = self.clock.now().date()
        if not intent.date:
            return today
        try:
            return date.fromisoformat(intent.date)
        except ValueError:
            return today

    def _fetch_rows(
        self, origin_id: str, destination_id: str, service_date: date
    ) -> Sequence[TimetableRow]:
        return self._supply(
            lambda: self.timetable_source.rows_for(origin_id, destination_id, service_date)
        )

    def _supply(self, fetch: Callable[[], Sequence[TimetableRow]]) -> Sequence[TimetableRow]:
        try:
            return fetch()
        except DataSupplyError:
            raise
        except Exception as e:
            raise DataSupplyError(
                "Timetable supply failed", source="timetable", cause=e
            )

    def _fetch_live_delays(self, station_id: str) -> Mapping[str, LiveDelay]:
        if self.live_delay_source is None:
            return {}

        source = self.live_delay_source

        def fetch() -> Mapping[str, LiveDelay]:
            return dict(source.delays_for_station(station_id))

        try:
            if self.live_delay_cache is None:
                return fetch()
            return self.live_delay_cache.get_or_compute(f"live:{station_id}", fetch)
        except Exception as e:
            # Departures are still shown, with status unknown
            self._logger.warning(
                "Live delay supply failed",
                extra={"station_id": station_id, "error": str(e)},
            )
            return {}
