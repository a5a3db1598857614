"""Intent extraction: free text to ParsedIntent.

Runs the decision lists in a fixed order (train number, places, time,
date, preferences) and adds up the confidence of those that fired:

    place pair   0.4
    time         0.2
    date         0.2
    preferences  0.1
    completeness 0.1  (both places plus a time or a date)

A non-pure train number adds its own confidence. The total is capped
at 1.0. Extraction never raises; partial intents are normal output.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, List, Optional
from zoneinfo import ZoneInfo

from ..config import ExtractorConfig, get_config
from ..domain.models import ParsedIntent
from ..ports.clock import Clock
from .places import extract_places
from .preferences import extract_preferences
from .temporal import extract_date, extract_time
from .text import MAX_QUERY_LENGTH, normalize_query
from .train_number import extract_train_number

logger = logging.getLogger(__name__)

PLACE_PAIR_WEIGHT = 0.4
TIME_WEIGHT = 0.2
DATE_WEIGHT = 0.2
PREFERENCES_WEIGHT = 0.1
COMPLETE_BONUS = 0.1

TRUNCATED_RULE = "input_truncated"
COMPLETE_RULE = "complete_query"
PREFERENCES_RULE = "preferences"


def _today(clock: Optional[Clock]) -> date:
    if clock is not None:
        return clock.now().date()
    return datetime.now(ZoneInfo(get_config().timezone)).date()


def _score(total: float) -> float:
    return round(min(total, 1.0), 4)


def extract(
    text: Any,
    *,
    today: Optional[date] = None,
    clock: Optional[Clock] = None,
    max_length: int = MAX_QUERY_LENGTH,
    max_window_hours: int = 24,
) -> ParsedIntent:
    """Extract a trip intent from free text.

    Parameters
    ----------
    text:
        The request. Non-text input yields an empty intent.
    today:
        Civil date relative dates are resolved against. Defaults to the
        clock's date, or the current date in the service timezone.
    clock:
        Clock used when ``today`` is not given.
    max_length:
        Length bound of the normalized text. Longer input is truncated
        and scored 0.
    max_window_hours:
        Upper bound for "next N hours" windows.
    """
    raw = normalize_query(text, max_length)
    if raw.is_empty:
        return ParsedIntent(raw=raw)
    if raw.truncated:
        logger.warning(
            "Query exceeds length bound, truncated",
            extra={"max_length": max_length, "original_length": len(raw.original)},
        )
        return ParsedIntent(raw=raw, matched_rules=(TRUNCATED_RULE,))

    query = raw.normalized
    rules: List[str] = []
    confidence = 0.0

    train_number = None
    hit = extract_train_number(query)
    if hit is not None:
        rule_name, match = hit
        train_number = match.hint
        rules.append(rule_name)
        confidence += match.confidence
        if match.is_pure:
            return ParsedIntent(
                raw=raw,
                train_number=train_number,
                confidence=_score(confidence),
                matched_rules=tuple(rules),
            )

    origin = destination = None
    places = extract_places(query)
    if places is not None:
        rule_name, (origin, destination) = places
        rules.append(rule_name)
        confidence += PLACE_PAIR_WEIGHT

    time_value = None
    time_hit = extract_time(query)
    if time_hit is not None:
        rule_name, time_value = time_hit
        rules.append(rule_name)
        confidence += TIME_WEIGHT

    date_value = None
    date_hit = extract_date(query, today or _today(clock))
    if date_hit is not None:
        rule_name, date_value = date_hit
        rules.append(rule_name)
        confidence += DATE_WEIGHT

    preferences = extract_preferences(query, max_window_hours)
    if preferences is not None:
        rules.append(PREFERENCES_RULE)
        confidence += PREFERENCES_WEIGHT

    if origin and destination and (time_value or date_value):
        rules.append(COMPLETE_RULE)
        confidence += COMPLETE_BONUS

    return ParsedIntent(
        raw=raw,
        origin=origin,
        destination=destination,
        date=date_value,
        time=time_value,
        train_number=train_number,
        preferences=preferences,
        confidence=_score(confidence),
        matched_rules=tuple(rules),
    )


@dataclass
class IntentExtractor:
    """Configured extractor with an injectable clock.

    Attributes:
        config: Extractor configuration (length bound, confidence gate)
        clock: Clock giving "today"; the service timezone's current date if None
        max_window_hours: Upper bound for "next N hours" windows
    """

    config: ExtractorConfig = field(default_factory=lambda: get_config().extractor)
    clock: Optional[Clock] = None
    max_window_hours: int = field(default_factory=lambda: get_config().selector.max_window_hours)

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def extract(self, text: Any) -> ParsedIntent:
        intent = extract(
            text,
            clock=self.clock,
            max_length=self.config.max_query_length,
            max_window_hours=self.max_window_hours,
        )
        self._logger.debug(
            "Intent extracted",
            extra={
                "origin": intent.origin,
                "destination": intent.destination,
                "date": intent.date,
                "time": intent.time,
                "confidence": intent.confidence,
                "rules": list(intent.matched_rules),
            },
        )
        return intent

    def is_actionable(self, intent: ParsedIntent) -> bool:
        """Apply the configured confidence gate."""
        return intent.is_actionable(self.config.min_confidence)
