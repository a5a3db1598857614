"""Station index construction.

The index holds three read-only tables built in a single pass over the
station records:

- exact: folded Chinese and English names -> stations
- prefix: folded 1-3 character prefixes of both names -> stations
- aliases: folded colloquial names -> folded canonical station name

Names are folded so that '台北', '臺北' and 'TAIPEI ' compare equal to
their canonical forms.
"""

from __future__ import annotations

import re
import unicodedata
from collections import defaultdict
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional

from ..domain.models import StationIndex, StationRecord

MAX_PREFIX_LENGTH = 3

DEFAULT_ALIASES: Mapping[str, str] = MappingProxyType(
    {
        "北車": "臺北",
        "台北車站": "臺北",
        "taipei main station": "臺北",
        "tpe": "臺北",
        "中車": "臺中",
        "txg": "臺中",
        "高車": "高雄",
        "khh": "高雄",
        "南車": "臺南",
    }
)

_VARIANTS = str.maketrans({"台": "臺"})
_WHITESPACE = re.compile(r"\s+")


def fold_name(text: Optional[str]) -> str:
    """Fold a name for comparison.

    NFKC, case folding, whitespace collapse and 台 -> 臺.

    >>> fold_name("  台北 ")
    '臺北'
    >>> fold_name("TaiPei")
    'taipei'
    """
    if not text:
        return ""
    folded = unicodedata.normalize("NFKC", text).casefold()
    folded = _WHITESPACE.sub(" ", folded).strip()
    return folded.translate(_VARIANTS)


def _freeze(table: Dict[str, List[StationRecord]]) -> Mapping[str, tuple]:
    # Sorted by id so lookups do not depend on record order
    return MappingProxyType(
        {
            key: tuple(sorted(records, key=lambda r: r.station_id))
            for key, records in table.items()
        }
    )


def build_index(
    records: Iterable[StationRecord],
    aliases: Mapping[str, str] = DEFAULT_ALIASES,
) -> StationIndex:
    """Build a StationIndex in one pass.

    Duplicate station ids keep the first record seen.

    Args:
        records: Station records from the directory source
        aliases: Colloquial name -> canonical station name

    Returns:
        A new, immutable StationIndex.
    """
    exact: Dict[str, List[StationRecord]] = defaultdict(list)
    prefix: Dict[str, List[StationRecord]] = defaultdict(list)
    names: Dict[str, tuple] = {}

    for record in records:
        if not record.station_id or record.station_id in names:
            continue

        folded = tuple(
            dict.fromkeys(n for n in (fold_name(record.name_zh), fold_name(record.name_en)) if n)
        )
        names[record.station_id] = folded

        for name in folded:
            exact[name].append(record)
            for length in range(1, min(MAX_PREFIX_LENGTH, len(name)) + 1):
                key = name[:length]
                if record not in prefix[key]:
                    prefix[key].append(record)

    return StationIndex(
        exact=_freeze(exact),
        prefix=_freeze(prefix),
        aliases=MappingProxyType(
            {fold_name(alias): fold_name(target) for alias, target in aliases.items()}
        ),
        names=MappingProxyType(names),
        size=len(names),
    )
