"""Station directory holding the current index snapshot."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Iterable, List, Mapping, Optional

from ..domain.errors import DirectoryNotLoadedError
from ..domain.models import StationIndex, StationMatch, StationRecord
from ..ports.data import StationSource
from .index import DEFAULT_ALIASES, build_index
from .resolver import resolve, suggest


@dataclass
class StationDirectory:
    """Station lookups over an atomically replaced index.

    A rebuild constructs a complete new index and then swaps the
    reference; readers always see either the old or the new snapshot
    and never take the lock.

    Attributes:
        aliases: Colloquial name table used for every rebuild
        default_limit: Match limit when the caller gives none
    """

    aliases: Mapping[str, str] = field(default_factory=lambda: DEFAULT_ALIASES)
    default_limit: int = 5

    _index: Optional[StationIndex] = field(default=None, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    @property
    def is_loaded(self) -> bool:
        return self._index is not None

    @property
    def index(self) -> StationIndex:
        """Current snapshot.

        Raises:
            DirectoryNotLoadedError: If no directory was ever loaded.
        """
        snapshot = self._index
        if snapshot is None:
            raise DirectoryNotLoadedError("Station directory has not been loaded")
        return snapshot

    def rebuild(self, records: Iterable[StationRecord]) -> StationIndex:
        """Build a new index from records and make it current."""
        records = tuple(records)
        with self._lock:
            snapshot = build_index(records, self.aliases)
            self._index = snapshot
        self._logger.info(
            "Station directory rebuilt",
            extra={"stations": snapshot.size, "records": len(records)},
        )
        return snapshot

    def load_from(self, source: StationSource) -> StationIndex:
        """Load records from a station source and rebuild."""
        return self.rebuild(source.load_stations())

    def resolve(self, query: str, limit: Optional[int] = None) -> List[StationMatch]:
        """Resolve a place name against the current snapshot.

        Raises:
            DirectoryNotLoadedError: If called before any load.
        """
        return resolve(self.index, query, limit or self.default_limit)

    def suggest(self, query: str, limit: int = 3, score_cutoff: float = 60.0) -> List[str]:
        return suggest(self.index, query, limit=limit, score_cutoff=score_cutoff)

