"""Centralized configuration using Pydantic Settings.

This module is the single source of truth for the tunable numbers of the
pipeline: input bounds for the extractor, result caps for the resolver
and the time-window constants of the departure selector.

Configuration can be overridden via environment variables:
- RAILQUERY_EXTRACT_MAX_QUERY_LENGTH=300
- RAILQUERY_SELECT_DEFAULT_WINDOW_HOURS=3
- RAILQUERY_DATA_DATA_DIR=/path/to/data
- RAILQUERY_TIMEZONE=Asia/Taipei
- etc.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ExtractorConfig(BaseSettings):
    """Intent extraction configuration.

    Environment variables prefixed with RAILQUERY_EXTRACT_.
    """

    model_config = SettingsConfigDict(env_prefix="RAILQUERY_EXTRACT_")

    max_query_length: int = Field(default=500, gt=0)
    min_confidence: float = Field(default=0.4, ge=0.0, le=1.0)


class ResolverConfig(BaseSettings):
    """Station resolution configuration.

    Environment variables prefixed with RAILQUERY_RESOLVE_.
    """

    model_config = SettingsConfigDict(env_prefix="RAILQUERY_RESOLVE_")

    max_results: int = Field(default=5, ge=1, le=10)
    suggestion_cutoff: float = Field(default=60.0, ge=0.0, le=100.0)


class SelectorConfig(BaseSettings):
    """Departure selection configuration.

    Environment variables prefixed with RAILQUERY_SELECT_.
    """

    model_config = SettingsConfigDict(env_prefix="RAILQUERY_SELECT_")

    lookback_hours: float = Field(default=1.0, ge=0.0)
    default_window_hours: float = Field(default=2.0, gt=0.0)
    max_window_hours: int = Field(default=24, gt=0)
    min_results: int = Field(default=3, ge=0)
    max_results: int = Field(default=50, gt=0)
    max_travel_hours: float = Field(default=8.0, gt=0.0)
    boarding_soon_minutes: int = Field(default=15, ge=0)
    # Train-number lookups flag trains leaving within this horizon
    upcoming_hours: float = Field(default=2.0, ge=0.0)
    train_lookup_limit: int = Field(default=10, gt=0)
    train_fuzzy_cutoff: float = Field(default=60.0, ge=0.0, le=100.0)
    # Taroko (1) and Puyuma (2) need a separate ticket
    restricted_train_type_codes: Tuple[str, ...] = ("1", "2")


class DataConfig(BaseSettings):
    """Bundled data and data-supply configuration.

    Environment variables prefixed with RAILQUERY_DATA_.
    """

    model_config = SettingsConfigDict(env_prefix="RAILQUERY_DATA_")

    data_dir: Path = Field(
        default_factory=lambda: Path(__file__).resolve().parent / "data"
    )
    stations_file: str = "stations.csv"
    live_delay_ttl_seconds: float = 120.0

    @property
    def stations_path(self) -> Path:
        """Full path to the stations CSV file."""
        return self.data_dir / self.stations_file


class ObservabilityConfig(BaseSettings):
    """Logging configuration.

    Environment variables prefixed with RAILQUERY_LOG_.
    """

    model_config = SettingsConfigDict(env_prefix="RAILQUERY_LOG_")

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class AppConfig(BaseSettings):
    """Main application configuration aggregating all sub-configs.

    Sub-configurations can be accessed via attributes:

        config = get_config()
        print(config.selector.default_window_hours)
        print(config.data.stations_path)

    Environment variables prefixed with RAILQUERY_.
    """

    model_config = SettingsConfigDict(env_prefix="RAILQUERY_")

    timezone: str = "Asia/Taipei"

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError, OSError) as e:
            raise ValueError(f"Unknown timezone {value!r}") from e
        return value

    extractor: ExtractorConfig = Field(default_factory=ExtractorConfig)
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    selector: SelectorConfig = Field(default_factory=SelectorConfig)
    data: DataConfig = Field(default_factory=DataConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Get the singleton application configuration.

    Configuration is loaded once and cached. To reload configuration
    (e.g., in tests), use reset_config() first.

    Returns:
        The application configuration instance.
    """
    return AppConfig()


def reset_config() -> None:
    """Reset the configuration cache.

    Call this in tests to ensure a fresh configuration is loaded.
    """
    get_config.cache_clear()
