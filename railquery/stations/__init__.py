"""Station directory indexing and place name resolution."""

from .directory import StationDirectory
from .index import DEFAULT_ALIASES, build_index, fold_name
from .resolver import resolve, strip_station_suffix, suggest

__all__ = [
    "DEFAULT_ALIASES",
    "StationDirectory",
    "build_index",
    "fold_name",
    "resolve",
    "strip_station_suffix",
    "suggest",
]
