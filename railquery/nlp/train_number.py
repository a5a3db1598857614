"""Train number detection.

A request made of a bare numeral ("152") is a train-number query and
short-circuits every other rule. Numerals written next to a class name
("自強152", "Puyuma 408"), a train suffix ("152號列車", "train 152") or a
status word ("152準點嗎", "152 delayed") are recognized with lower
confidence and let the remaining rules run.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Tuple

from ..domain.models import TrainNumberHint
from .rules import Rule, first_match

PURE_CONFIDENCE = 0.9
PARTIAL_CONFIDENCE = 0.7
QUALIFIED_CONFIDENCE = 0.8
STATUS_CONFIDENCE = 0.7

ENGLISH_CLASS_NAMES = {
    "tze-chiang": "自強",
    "tzechiang": "自強",
    "chu-kuang": "莒光",
    "chukuang": "莒光",
    "fu-hsing": "復興",
    "fuhsing": "復興",
    "puyuma": "普悠瑪",
    "taroko": "太魯閣",
    "local": "區間",
}

_PURE = re.compile(r"^(\d{1,4})$")
_WITH_CLASS = re.compile(r"(自強|莒光|區間快|區間|普悠瑪|太魯閣|復興)[號車]?\s*(\d{1,4})(?!\d)")
_WITH_CLASS_EN = re.compile(
    r"\b(tze[- ]?chiang|chu[- ]?kuang|fu[- ]?hsing|puyuma|taroko|local)"
    r"\s*(?:train\s*)?(?:no\.?\s*|#\s*)?(\d{1,4})\b",
    re.IGNORECASE,
)
_WITH_SUFFIX = re.compile(r"(?<!\d)(\d{1,4})\s*[號次]?\s*(?:列車|車次)")
_WITH_SUFFIX_EN = re.compile(
    r"\btrain\s*(?:no\.?|number|#)?\s*(\d{1,4})\b(?!\s*(?::|\.\d|點|am\b|pm\b|o'?clock))",
    re.IGNORECASE,
)
_STATUS = re.compile(
    r"(?<!\d)(\d{1,4})\s*[號次]?\s*(?:列車)?\s*(?:準點|誤點|延誤|位置|狀況|時刻表|停靠站|到哪)"
)
_STATUS_EN = re.compile(
    r"\b(\d{1,4})\s+(?:delay(?:ed)?|status|on time|running late|stops|timetable)\b",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class TrainNumberMatch:
    """Result of the train-number rules.

    Attributes
    ----------
    hint:
        The train number found.
    confidence:
        Confidence contributed by the match.
    is_pure:
        True when the whole request was the numeral.
    """

    hint: TrainNumberHint
    confidence: float
    is_pure: bool = False


def _pure(text: str) -> Optional[TrainNumberMatch]:
    match = _PURE.match(text)
    if not match:
        return None
    number = match.group(1)
    partial = len(number) <= 2
    return TrainNumberMatch(
        hint=TrainNumberHint(number=number, partial=partial, kind="pure"),
        confidence=PARTIAL_CONFIDENCE if partial else PURE_CONFIDENCE,
        is_pure=True,
    )


def _english_class(name: str) -> str:
    key = re.sub(r"\s+", "-", name.lower())
    return ENGLISH_CLASS_NAMES.get(key, ENGLISH_CLASS_NAMES.get(key.replace("-", ""), name))


def _with_class(text: str) -> Optional[TrainNumberMatch]:
    match = _WITH_CLASS.search(text)
    if match:
        class_name, number = match.group(1), match.group(2)
    else:
        match = _WITH_CLASS_EN.search(text)
        if not match:
            return None
        class_name, number = _english_class(match.group(1)), match.group(2)
    return TrainNumberMatch(
        hint=TrainNumberHint(
            number=number, qualified=True, kind="class", class_hint=class_name
        ),
        confidence=QUALIFIED_CONFIDENCE,
    )


def _with_suffix(text: str) -> Optional[TrainNumberMatch]:
    match = _WITH_SUFFIX.search(text) or _WITH_SUFFIX_EN.search(text)
    if not match:
        return None
    return TrainNumberMatch(
        hint=TrainNumberHint(number=match.group(1), qualified=True, kind="suffix"),
        confidence=QUALIFIED_CONFIDENCE,
    )


def _status(text: str) -> Optional[TrainNumberMatch]:
    match = _STATUS.search(text) or _STATUS_EN.search(text)
    if not match:
        return None
    return TrainNumberMatch(
        hint=TrainNumberHint(number=match.group(1), qualified=True, kind="status"),
        confidence=STATUS_CONFIDENCE,
    )


TRAIN_NUMBER_RULES = (
    Rule("train_number.pure", _pure),
    Rule("train_number.class", _with_class),
    Rule("train_number.suffix", _with_suffix),
    Rule("train_number.status", _status),
)


def extract_train_number(text: str) -> Optional[Tuple[str, TrainNumberMatch]]:
    """Return ``(rule_name, match)`` for the first train-number rule that fires."""
    return first_match(TRAIN_NUMBER_RULES, text)
