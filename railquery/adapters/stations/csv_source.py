"""CSV station source adapter.

Reads the station directory from a CSV file with the columns
``station_id,name_zh,name_en,address,lat,lon``. The bundled file at
``railquery/data/stations.csv`` covers the main TRA stations.
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from ...config import DataConfig, get_config
from ...domain.errors import DataSupplyError
from ...domain.models import GeoLocation, StationRecord


def _location(lat_str: str, lon_str: str) -> Optional[GeoLocation]:
    if not lat_str or not lon_str:
        return None
    try:
        return GeoLocation(latitude=float(lat_str), longitude=float(lon_str))
    except ValueError:
        return None


@dataclass
class CSVStationSource:
    """Station source backed by a CSV file.

    Implements the StationSource protocol. Records are read once and
    cached; ``clear_cache`` forces a re-read.

    Attributes:
        config: Data configuration (directory and file name)
        path: Explicit CSV path, overriding the configured one
    """

    config: DataConfig = field(default_factory=lambda: get_config().data)
    path: Optional[Path] = None

    _records: Optional[List[StationRecord]] = field(default=None, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    @property
    def csv_path(self) -> Path:
        return Path(self.path) if self.path is not None else self.config.stations_path

    def load_stations(self) -> Sequence[StationRecord]:
        """Return every station in the file.

        Raises:
            DataSupplyError: If the file cannot be read.
        """
        if self._records is not None:
            return self._records

        self._logger.debug("Loading stations", extra={"path": str(self.csv_path)})
        try:
            records = self._read()
        except (OSError, csv.Error, UnicodeDecodeError) as e:
            raise DataSupplyError(
                f"Failed to read station file {self.csv_path}",
                source="stations_csv",
                cause=e,
            )

        self._records = records
        self._logger.info("Stations loaded", extra={"stations": len(records)})
        return records

    def _read(self) -> List[StationRecord]:
        records: List[StationRecord] = []
        with self.csv_path.open(encoding="utf-8", newline="") as f:
            reader = csv.DictReader(f)
            for row in reader:
                station_id = (row.get("station_id") or "").strip()
                name_zh = (row.get("name_zh") or "").strip()
                name_en = (row.get("name_en") or "").strip()
                if not station_id or not (name_zh or name_en):
                    continue

                location = _location(
                    (row.get("lat") or "").strip(), (row.get("lon") or "").strip()
                )
                if location is None and (row.get("lat") or row.get("lon")):
                    self._logger.warning(
                        "Invalid coordinates ignored",
                        extra={"station_id": station_id},
                    )

                records.append(
                    StationRecord(
                        station_id=station_id,
                        name_zh=name_zh,
                        name_en=name_en,
                        address=(row.get("address") or "").strip() or None,
                        location=location,
                    )
                )
        return records

    def clear_cache(self) -> None:
        """Drop cached records."""
        self._records = None
        self._logger.debug("Station cache cleared")
