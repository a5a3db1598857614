"""Rule-based intent extraction.

Each step (train number, places, time, date, preferences) is an ordered
decision list of independent rules over the normalized request text.
"""

from .extractor import IntentExtractor, extract
from .places import extract_place_name, extract_places
from .preferences import extract_preferences
from .rules import Rule, first_match
from .temporal import extract_date, extract_time
from .text import MAX_QUERY_LENGTH, normalize_query
from .train_number import TrainNumberMatch, extract_train_number

__all__ = [
    "IntentExtractor",
    "MAX_QUERY_LENGTH",
    "Rule",
    "TrainNumberMatch",
    "extract",
    "extract_date",
    "extract_place_name",
    "extract_places",
    "extract_preferences",
    "extract_time",
    "extract_train_number",
    "first_match",
    "normalize_query",
]
