"""TDX payload models and parsers."""

from .payloads import parse_live_board, parse_stations, parse_timetables

__all__ = ["parse_live_board", "parse_stations", "parse_timetables"]
