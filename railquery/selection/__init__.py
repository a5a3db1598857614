"""Departure selection: candidates, search window, live delays, ranking and train lookup."""

from .candidates import CandidateSet, build_candidate, build_candidates
from .clock_math import add_minutes, duration_minutes, format_clock, parse_clock
from .selector import (
    DepartureSelector,
    SearchWindow,
    apply_live_delay,
    build_window,
    flag_departure_timing,
    select_departures,
)
from .train_lookup import TrainFinder, lookup_train, match_numbers, whole_trip

__all__ = [
    "CandidateSet",
    "DepartureSelector",
    "SearchWindow",
    "TrainFinder",
    "add_minutes",
    "apply_live_delay",
    "build_candidate",
    "build_candidates",
    "build_window",
    "duration_minutes",
    "flag_departure_timing",
    "format_clock",
    "lookup_train",
    "match_numbers",
    "parse_clock",
    "select_departures",
    "whole_trip",
]
