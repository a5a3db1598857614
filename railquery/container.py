"""Wiring of the railquery pipeline.

A small hand-written container: each port type maps to a factory that
is called on first resolution. Production bindings read the station
CSV, keep live boards for a short TTL and use the system clock; tests
and the CLI replace individual bindings (clock, timetable, live board)
before resolving the service.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Tuple

from .config import AppConfig, get_config

Factory = Callable[[], Any]


@dataclass
class Container:
    """Port type -> factory registry with lazily built singletons.

    Usage:
        container = Container.create_default()
        container.register(TimetableSource, lambda: StaticTimetableSource(rows=rows))
        service = container.resolve(TripQueryService)

    Registering a type again replaces its factory and drops the instance
    built from the old one.

    Attributes:
        config: Application configuration
    """

    config: AppConfig = field(default_factory=get_config)

    _bindings: Dict[type, Tuple[Factory, bool]] = field(default_factory=dict, repr=False)
    _instances: Dict[type, Any] = field(default_factory=dict, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def register(self, port_type: type, factory: Factory, singleton: bool = True) -> None:
        """Bind a factory to a port type.

        Args:
            port_type: Protocol or class used as the lookup key.
            factory: Zero-argument callable building the implementation.
            singleton: Build once and share (default) or build per resolve.
        """
        with self._lock:
            self._bindings[port_type] = (factory, singleton)
            self._instances.pop(port_type, None)

    def resolve(self, port_type: type) -> Any:
        """Return the implementation bound to a port type.

        Raises:
            KeyError: If nothing is bound to the type.
        """
        with self._lock:
            try:
                factory, singleton = self._bindings[port_type]
            except KeyError:
                raise KeyError(f"Type not registered: {port_type}") from None
            if not singleton:
                return factory()
            if port_type not in self._instances:
                self._instances[port_type] = factory()
            return self._instances[port_type]

    def is_registered(self, port_type: type) -> bool:
        return port_type in self._bindings

    def clear_all(self) -> None:
        """Forget every binding and every built instance."""
        with self._lock:
            self._bindings.clear()
            self._instances.clear()

    @classmethod
    def create_default(cls, config: Optional[AppConfig] = None) -> Container:
        """Container with the production bindings.

        The timetable and live delay sources start empty; callers that
        fetch data elsewhere register their own sources (or the static
        ones built from TDX payloads) before resolving the service.
        """
        from .adapters.cache import InMemoryCache
        from .adapters.clock import SystemClock
        from .adapters.stations import CSVStationSource
        from .adapters.timetable import StaticLiveDelaySource, StaticTimetableSource
        from .nlp.extractor import IntentExtractor
        from .ports.cache import CachePort
        from .ports.clock import Clock
        from .ports.data import LiveDelaySource, StationSource, TimetableSource
        from .selection.selector import DepartureSelector
        from .selection.train_lookup import TrainFinder
        from .services import TripQueryService
        from .stations.directory import StationDirectory

        config = config or get_config()
        container = cls(config=config)

        # Live delay boards go stale quickly
        container.register(
            CachePort,
            lambda: InMemoryCache(
                name="live_delay",
                default_ttl_seconds=config.data.live_delay_ttl_seconds,
            ),
        )
        container.register(Clock, lambda: SystemClock(config.timezone))

        container.register(StationSource, lambda: CSVStationSource(config.data))
        container.register(TimetableSource, StaticTimetableSource)
        container.register(LiveDelaySource, StaticLiveDelaySource)

        container.register(
            StationDirectory,
            lambda: StationDirectory(default_limit=config.resolver.max_results),
        )
        container.register(
            IntentExtractor,
            lambda: IntentExtractor(
                config=config.extractor,
                clock=container.resolve(Clock),
                max_window_hours=config.selector.max_window_hours,
            ),
        )
        container.register(
            DepartureSelector,
            lambda: DepartureSelector(clock=container.resolve(Clock), settings=config.selector),
        )
        container.register(
            TrainFinder,
            lambda: TrainFinder(clock=container.resolve(Clock), settings=config.selector),
        )

        def trip_query() -> TripQueryService:
            return TripQueryService(
                extractor=container.resolve(IntentExtractor),
                directory=container.resolve(StationDirectory),
                selector=container.resolve(DepartureSelector),
                timetable_source=container.resolve(TimetableSource),
                clock=container.resolve(Clock),
                live_delay_source=container.resolve(LiveDelaySource),
                live_delay_cache=container.resolve(CachePort),
                station_source=container.resolve(StationSource),
                resolver_config=config.resolver,
                train_finder=container.resolve(TrainFinder),
            )

        container.register(TripQueryService, trip_query)
        return container


_default_container: Optional[Container] = None
_container_lock = threading.Lock()


def get_container() -> Container:
    """Process-wide container, built with the production bindings on first use."""
    global _default_container
    if _default_container is None:
        with _container_lock:
            if _default_container is None:
                _default_container = Container.create_default()
    return _default_container


def reset_container() -> None:
    """Drop the process-wide container (tests)."""
    global _default_container
    with _container_lock:
        if _default_container is not None:
            _default_container.clear_all()
        _default_container = None
