"""Travel preference rules."""

from __future__ import annotations

import re
from typing import Optional

from ..domain.models import Preferences

# Highest priority first
CLASS_PATTERNS = (
    ("普悠瑪", re.compile(r"普悠瑪|\bpuyuma\b", re.IGNORECASE)),
    ("太魯閣", re.compile(r"太魯閣|\btaroko\b", re.IGNORECASE)),
    ("自強", re.compile(r"自強|\btze[- ]?chiang\b", re.IGNORECASE)),
    ("莒光", re.compile(r"莒光|\bchu[- ]?kuang\b", re.IGNORECASE)),
    ("復興", re.compile(r"復興|\bfu[- ]?hsing\b", re.IGNORECASE)),
    ("區間快", re.compile(r"區間快|\blocal express\b", re.IGNORECASE)),
    ("區間", re.compile(r"區間|\blocal trains?\b|\bcommuter\b", re.IGNORECASE)),
)
FAST_CLASSES = frozenset({"普悠瑪", "太魯閣", "自強"})

_FASTEST = re.compile(
    r"最快|快速|急行|特急|趕時間|\b(?:fastest|quickest|as fast as possible)\b", re.IGNORECASE
)
_CHEAPEST = re.compile(
    r"最便宜|便宜|省錢|經濟|\b(?:cheapest|cheap|lowest fare|budget)\b", re.IGNORECASE
)
_DIRECT = re.compile(
    r"直達|不換車|不轉車|\b(?:direct|non-?stop|no transfers?)\b", re.IGNORECASE
)
_ALL_CLASSES = re.compile(
    r"所有車種|全部車種|不限車種|任何車種|各種車種|\b(?:all classes|any class|all trains|any train)\b",
    re.IGNORECASE,
)
_WINDOW_ZH = re.compile(r"(?:接下來|未來|之後)\s*([\d一二兩三四五六七八九十]{1,2})\s*個?\s*小時")
_WINDOW_EN = re.compile(r"\b(?:next|within|in the next)\s+(\d{1,2})\s+hours?\b", re.IGNORECASE)

_CJK_DIGITS = {
    "一": 1, "二": 2, "兩": 2, "三": 3, "四": 4, "五": 5,
    "六": 6, "七": 7, "八": 8, "九": 9,
}


def _parse_count(token: str) -> Optional[int]:
    """Arabic digits, or a CJK count up to 99 (五, 十, 十二, 二十)."""
    if token.isdigit():
        return int(token)
    if token == "十":
        return 10
    if len(token) == 1:
        return _CJK_DIGITS.get(token)
    if token[0] == "十" and token[1] in _CJK_DIGITS:
        return 10 + _CJK_DIGITS[token[1]]
    if token[1] == "十" and token[0] in _CJK_DIGITS:
        return _CJK_DIGITS[token[0]] * 10
    return None


def _window_hours(text: str, max_hours: int) -> Optional[int]:
    match = _WINDOW_ZH.search(text) or _WINDOW_EN.search(text)
    if not match:
        return None
    hours = _parse_count(match.group(1))
    if hours is None or not 0 < hours <= max_hours:
        return None
    return hours


def extract_preferences(text: str, max_window_hours: int = 24) -> Optional[Preferences]:
    """Collect preferences, or ``None`` when none were expressed.

    Fastest and cheapest are mutually exclusive and fastest wins.
    Mentioning a fast class (普悠瑪, 太魯閣, 自強) counts as asking
    for the fastest train.
    """
    class_hint = next(
        (name for name, pattern in CLASS_PATTERNS if pattern.search(text)), None
    )
    fastest = bool(_FASTEST.search(text)) or class_hint in FAST_CLASSES
    cheapest = not fastest and bool(_CHEAPEST.search(text))

    preferences = Preferences(
        fastest=fastest,
        cheapest=cheapest,
        direct_only=bool(_DIRECT.search(text)),
        class_hint=class_hint,
        window_hours=_window_hours(text, max_window_hours),
        all_classes=bool(_ALL_CLASSES.search(text)),
    )
    return None if preferences.is_empty else preferences
