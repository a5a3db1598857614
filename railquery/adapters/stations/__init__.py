"""Station directory adapters."""

from .csv_source import CSVStationSource

__all__ = ["CSVStationSource"]
