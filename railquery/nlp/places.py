"""Origin/destination extraction.

Two strategies, tried in order:

1. ``places.separator``: split on a route separator (到, 去, 往, 至, →,
   ->, 前往, to). For every occurrence of each separator, the rightmost
   plausible name before it and the leftmost one after it form a pair;
   the first usable pair wins.
2. ``places.template``: the 從X到Y / 由X到Y / "from X to Y" /
   "between X and Y" forms.

A plausible name is found by a second decision list run over the
segment once temporal words, fillers and station suffixes are removed.
"""

from __future__ import annotations

import re
from typing import Dict, Optional, Pattern, Tuple

from .rules import Rule, first_match

PlacePair = Tuple[str, str]

SEPARATORS = ("到", "去", "往", "至", "→", "->", "前往", "to")

# Canonical station names for common transliterations
ENGLISH_STATION_NAMES: Dict[str, str] = {
    "taipei": "臺北",
    "taichung": "臺中",
    "tainan": "臺南",
    "taitung": "臺東",
    "kaohsiung": "高雄",
    "taoyuan": "桃園",
    "hsinchu": "新竹",
    "keelung": "基隆",
    "chiayi": "嘉義",
    "hualien": "花蓮",
    "yilan": "宜蘭",
    "banqiao": "板橋",
    "zhongli": "中壢",
    "zhunan": "竹南",
    "miaoli": "苗栗",
    "fengyuan": "豐原",
    "changhua": "彰化",
    "yuanlin": "員林",
    "douliu": "斗六",
    "huwei": "虎尾",
    "xinying": "新營",
    "yongkang": "永康",
    "gangshan": "岡山",
    "pingtung": "屏東",
    "nangang": "南港",
    "songshan": "松山",
    "wanhua": "萬華",
}

STOP_WORDS = frozenset(
    """
    a about after all am an and any are around at be before between book by
    can check class classes day depart departing departs direct do does each
    evening express fastest cheapest quickest find for from get go going help
    hour hours how i in is it leave leaving like me midnight morning my need
    next night noon nonstop of on only or please pm quickest route search show
    station main take the there this ticket tickets to today tomorrow tonight
    train trains travel trip want wanna we what when which within would
    yesterday you afternoon monday tuesday wednesday thursday friday saturday
    sunday week o'clock clock
    """.split()
)

_TO_WORD = re.compile(r"(?<![A-Za-z])to(?![A-Za-z])", re.IGNORECASE)

_TEMPLATES = (
    re.compile(r"從\s*(.+?)\s*(?:到|去|往|至|前往)\s*(.+)"),
    re.compile(r"由\s*(.+?)\s*(?:到|去|往|至|前往)\s*(.+)"),
    re.compile(r"\bfrom\s+(.+?)\s+to\s+(.+)", re.IGNORECASE),
    re.compile(r"\bbetween\s+(.+?)\s+and\s+(.+)", re.IGNORECASE),
)

_WINDOW_PHRASE = re.compile(r"(?:接下來|未來|之後)\s*[\d一二兩三四五六七八九十]{1,2}\s*個?\s*小時")
_TEMPORAL_CJK = re.compile(
    r"大後天|後天|明天|今天|昨天|今日|明日|早上|上午|中午|下午|傍晚|晚上|夜晚|深夜|凌晨"
    r"|[這下上本]?\s*(?:週|周|星期|禮拜)\s*[一二三四五六日天]"
)
_NUMERIC = re.compile(
    r"\d+(?:\s*[:./-]\s*\d+)*\s*(?:點半|點|時|分|號|日|月|年|am\b|pm\b|a\.m\.|p\.m\.|st\b|nd\b|rd\b|th\b)?",
    re.IGNORECASE,
)
_PREFERENCE_WORDS = re.compile(
    r"最快|最便宜|便宜|省錢|經濟|直達|不換車|不轉車|快速|急行|特急"
    r"|所有車種|全部車種|不限車種|任何車種|車種"
    r"|自強號?|莒光號?|復興號?|區間快車?|區間車?|普悠瑪號?|太魯閣號?"
)
_FILLERS = re.compile(
    r"我想|我要|想要|請問|幫我|查詢|搭乘|出發|抵達|車票|火車|列車|班次|哪些|什麼|幾點"
    r"|[從由坐搭的嗎呢吧要有]"
)
_STATION_SUFFIX = re.compile(r"火車站|台鐵站|臺鐵站|車站|\bmain\s+station\b|\bstation\b", re.IGNORECASE)
_BARE_STATION_SUFFIX = re.compile(r"(?<=[一-鿿])站")
_PUNCTUATION = re.compile(r"[,.!?;，。！？、；~()\[\]\"'「」]")
_WHITESPACE = re.compile(r"\s+")

_MAJOR = re.compile(r"[台臺][北中南東]|高雄|桃園|新竹|基隆|嘉義|花蓮|宜蘭")
_SECONDARY = re.compile(
    r"板橋|中壢|竹南|苗栗|豐原|彰化|員林|斗六|斗南|虎尾|新營|永康|岡山|屏東"
    r"|南港|松山|萬華|樹林|鶯歌|新烏日|瑞芳|羅東|蘇澳|知本|玉里|池上"
)
_ENGLISH = re.compile(
    r"\b(" + "|".join(sorted(ENGLISH_STATION_NAMES, key=len, reverse=True)) + r")\b",
    re.IGNORECASE,
)
_CJK_RUN = re.compile(r"[一-鿿]{2,4}")
_LATIN_WORD = re.compile(r"[A-Za-z][A-Za-z'-]+")


def _clean_segment(text: str) -> str:
    """Remove everything around a place name that is not part of it."""
    cleaned = _WINDOW_PHRASE.sub(" ", text)
    cleaned = _TEMPORAL_CJK.sub(" ", cleaned)
    cleaned = _NUMERIC.sub(" ", cleaned)
    cleaned = _PREFERENCE_WORDS.sub(" ", cleaned)
    cleaned = _STATION_SUFFIX.sub(" ", cleaned)
    cleaned = _BARE_STATION_SUFFIX.sub(" ", cleaned)
    cleaned = _FILLERS.sub(" ", cleaned)
    cleaned = _PUNCTUATION.sub(" ", cleaned)
    words = [
        word for word in _WHITESPACE.split(cleaned)
        if word and word.lower() not in STOP_WORDS
    ]
    return " ".join(words)


def _pick(pattern: Pattern[str], text: str, position: str) -> Optional[str]:
    matches = list(pattern.finditer(text))
    if not matches:
        return None
    match = matches[-1] if position == "end" else matches[0]
    return match.group(0)


def _canonical(name: str) -> str:
    """Map a transliterated name to Chinese; collapse CJK whitespace."""
    name = name.strip().replace("的", "")
    key = _WHITESPACE.sub("", name.lower())
    if key in ENGLISH_STATION_NAMES:
        return ENGLISH_STATION_NAMES[key]
    if re.search(r"[一-鿿]", name):
        name = _WHITESPACE.sub("", name)
    return name


def _latin_word(text: str, position: str) -> Optional[str]:
    words = [w for w in _LATIN_WORD.findall(text) if w.lower() not in STOP_WORDS]
    if not words:
        return None
    return words[-1] if position == "end" else words[0]


def _fallback(text: str) -> Optional[str]:
    remainder = _canonical(text)
    return remainder if 2 <= len(remainder) <= 4 else None


def _name_rules(position: str) -> Tuple[Rule[str], ...]:
    return (
        Rule("name.major", lambda t: _pick(_MAJOR, t, position)),
        Rule("name.secondary", lambda t: _pick(_SECONDARY, t, position)),
        Rule("name.transliterated", lambda t: _pick(_ENGLISH, t, position)),
        Rule("name.cjk", lambda t: _pick(_CJK_RUN, t, position)),
        Rule("name.latin", lambda t: _latin_word(t, position)),
        Rule("name.fallback", _fallback),
    )


_NAME_RULES = {"end": _name_rules("end"), "start": _name_rules("start")}


def extract_place_name(segment: str, position: str = "start") -> Optional[str]:
    """Find the plausible place name in a segment.

    Parameters
    ----------
    segment:
        Text on one side of a separator.
    position:
        ``"end"`` takes the rightmost candidate (origin side),
        ``"start"`` the leftmost (destination side).
    """
    cleaned = _clean_segment(segment)
    if not cleaned:
        return None
    hit = first_match(_NAME_RULES[position], cleaned)
    if hit is None:
        return None
    name = _canonical(hit[1])
    return name or None


def _separator_positions(text: str, separator: str):
    if separator == "to":
        for match in _TO_WORD.finditer(text):
            yield match.start(), match.end()
        return
    start = text.find(separator)
    while start != -1:
        yield start, start + len(separator)
        start = text.find(separator, start + 1)


def _by_separator(text: str) -> Optional[PlacePair]:
    for separator in SEPARATORS:
        for start, end in _separator_positions(text, separator):
            if start == 0:
                continue
            origin = extract_place_name(text[:start], "end")
            if not origin:
                continue
            destination = extract_place_name(text[end:], "start")
            if destination:
                return origin, destination
    return None


def _by_template(text: str) -> Optional[PlacePair]:
    for template in _TEMPLATES:
        match = template.search(text)
        if not match:
            continue
        origin = extract_place_name(match.group(1), "end")
        destination = extract_place_name(match.group(2), "start")
        if origin and destination:
            return origin, destination
    return None


PLACE_RULES = (
    Rule("places.separator", _by_separator),
    Rule("places.template", _by_template),
)


def extract_places(text: str) -> Optional[Tuple[str, PlacePair]]:
    """Return ``(rule_name, (origin, destination))`` or ``None``."""
    return first_match(PLACE_RULES, text)
