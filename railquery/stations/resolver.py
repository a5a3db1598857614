"""Place name to station resolution.

Three tiers are queried in a fixed order and their results unioned, so
lower tiers still contribute at lower confidence:

1. exact name (either script) or alias        1.0
2. shrinking 3 -> 1 character prefixes         0.9 starts-with, 0.7 contains
3. two-character prefix sweep                   0.5
   (only with fewer than 3 results and a query of 2+ characters)

Results are deduplicated by station id keeping the best confidence and
sorted by confidence desc, name asc, id asc.
"""

from __future__ import annotations

import re
from typing import Dict, List, Sequence, Tuple

from rapidfuzz import fuzz, process

from ..domain.models import StationIndex, StationMatch, StationRecord
from .index import MAX_PREFIX_LENGTH, fold_name

EXACT_CONFIDENCE = 1.0
PREFIX_START_CONFIDENCE = 0.9
PREFIX_CONTAINS_CONFIDENCE = 0.7
BROAD_CONFIDENCE = 0.5

BROAD_TIER_MIN_RESULTS = 3
MAX_LIMIT = 10

_STATION_SUFFIX = re.compile(r"(?:\s*(?:main\s+)?station|火車站|臺鐵站|車站|站)$")


def strip_station_suffix(folded: str) -> str:
    """Drop a trailing station suffix unless nothing would be left."""
    stripped = _STATION_SUFFIX.sub("", folded).strip()
    return stripped or folded


def _query_terms(index: StationIndex, query: str) -> Tuple[str, ...]:
    folded = fold_name(query)
    if not folded:
        return ()
    terms = [strip_station_suffix(folded)]
    for candidate in (folded, terms[0]):
        alias = index.aliases.get(candidate)
        if alias:
            terms.append(alias)
    return tuple(dict.fromkeys(terms))


def _keep_best(
    found: Dict[str, Tuple[StationRecord, float, str]],
    record: StationRecord,
    confidence: float,
    tier: str,
) -> None:
    current = found.get(record.station_id)
    if current is None or confidence > current[1]:
        found[record.station_id] = (record, confidence, tier)


def resolve(index: StationIndex, query: str, limit: int = 5) -> List[StationMatch]:
    """Resolve a place name to ranked station candidates.

    Args:
        index: Station index snapshot
        query: Place name as extracted from the request
        limit: Maximum number of matches, clamped to 1..10

    Returns:
        Matches sorted by confidence desc, name asc, id asc. Empty when
        the query is blank, the index is empty or nothing matches.
    """
    if not isinstance(query, str) or index.is_empty:
        return []
    terms = _query_terms(index, query)
    if not terms:
        return []

    limit = max(1, min(MAX_LIMIT, limit))
    found: Dict[str, Tuple[StationRecord, float, str]] = {}

    for term in terms:
        for record in index.exact.get(term, ()):
            _keep_best(found, record, EXACT_CONFIDENCE, "exact")

    for term in terms:
        for length in range(min(MAX_PREFIX_LENGTH, len(term)), 0, -1):
            for record in index.prefix.get(term[:length], ()):
                names = index.names.get(record.station_id, ())
                if any(name.startswith(t) for name in names for t in terms):
                    _keep_best(found, record, PREFIX_START_CONFIDENCE, "prefix")
                elif any(t in name for name in names for t in terms):
                    _keep_best(found, record, PREFIX_CONTAINS_CONFIDENCE, "prefix")

    primary = terms[0]
    if len(found) < BROAD_TIER_MIN_RESULTS and len(primary) >= 2:
        for record in index.prefix.get(primary[:2], ()):
            _keep_best(found, record, BROAD_CONFIDENCE, "broad")

    ranked = sorted(
        found.values(),
        key=lambda item: (-item[1], item[0].name_zh, item[0].station_id),
    )
    return [
        StationMatch(
            station_id=record.station_id,
            name=record.name_zh,
            name_en=record.name_en,
            confidence=confidence,
            tier=tier,
        )
        for record, confidence, tier in ranked[:limit]
    ]


def suggest(
    index: StationIndex,
    query: str,
    limit: int = 3,
    score_cutoff: float = 60.0,
) -> List[str]:
    """Suggest station names close to a misspelled query.

    Uses rapidfuzz WRatio over every indexed name (both scripts).
    Returns display names, best first, one per station.
    """
    folded = strip_station_suffix(fold_name(query)) if isinstance(query, str) else ""
    if not folded or index.is_empty:
        return []

    choices: Sequence[str] = list(index.exact.keys())
    results = process.extract(
        folded,
        choices,
        scorer=fuzz.WRatio,
        limit=max(limit * 3, limit),
        score_cutoff=score_cutoff,
    )

    suggestions: List[str] = []
    seen = set()
    for choice, _score, _position in results:
        for record in index.exact[choice]:
            if record.station_id in seen:
                continue
            seen.add(record.station_id)
            suggestions.append(record.display_name)
        if len(suggestions) >= limit:
            break
    return suggestions[:limit]
