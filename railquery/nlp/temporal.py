"""Time and date rules.

Times come out as ``HH:MM`` (24h) and dates as ``YYYY-MM-DD``. Date
rules are relative to ``today``, the civil date in the service
timezone, which the caller supplies so the rules stay pure.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from functools import partial
from typing import Optional, Tuple

import dateparser

from .rules import Rule, first_match

PERIOD_DEFAULTS = (
    ("早上", "08:00"),
    ("上午", "10:00"),
    ("中午", "12:00"),
    ("下午", "14:00"),
    ("晚上", "18:00"),
    ("夜晚", "20:00"),
    ("深夜", "22:00"),
    ("凌晨", "04:00"),
)

ENGLISH_PERIOD_DEFAULTS = (
    ("late night", "22:00"),
    ("morning", "08:00"),
    ("afternoon", "14:00"),
    ("evening", "18:00"),
    ("tonight", "20:00"),
    ("night", "20:00"),
)

# Explicit years outside this range are not travel dates
MIN_YEAR = 1900
MAX_YEAR = 2199

RELATIVE_DAYS = (
    ("大後天", 3),
    ("後天", 2),
    ("明天", 1),
    ("明日", 1),
    ("今天", 0),
    ("今日", 0),
    ("昨天", -1),
    ("day after tomorrow", 2),
    ("tomorrow", 1),
    ("today", 0),
    ("tonight", 0),
    ("yesterday", -1),
)

WEEKDAYS_ZH = {"一": 0, "二": 1, "三": 2, "四": 3, "五": 4, "六": 5, "日": 6, "天": 6}
WEEKDAYS_EN = {
    "monday": 0,
    "tuesday": 1,
    "wednesday": 2,
    "thursday": 3,
    "friday": 4,
    "saturday": 5,
    "sunday": 6,
}

_AFTERNOON_PERIODS = ("下午", "晚上", "傍晚")

_PERIOD_12H = re.compile(
    r"(上午|下午|早上|晚上|傍晚|中午|凌晨)\s*(\d{1,2})\s*(?:[:點時]\s*(半|\d{1,2})?\s*分?)?(?!\d)"
)
_AM_PM = re.compile(
    r"(?<![\d:])(\d{1,2})(?::(\d{2}))?\s*(a\.?m\.?|p\.?m\.?)(?![a-z])", re.IGNORECASE
)
_NOON_MIDNIGHT = re.compile(r"\b(noon|midday|midnight)\b", re.IGNORECASE)
_CLOCK = re.compile(
    r"(?<![\d/.-])(\d{1,2})\s*(?::\s*(\d{2})|\.(\d{2})(?![\d.])|[點時]\s*(半|\d{1,2})?\s*分?)(?!\d)"
)
_OCLOCK = re.compile(r"\b(\d{1,2})\s*o'?clock\b", re.IGNORECASE)

_WEEKDAY_ZH = re.compile(r"(下|這|本)?\s*(?:週|周|星期|禮拜)\s*([一二三四五六日天])")
_WEEKDAY_EN = re.compile(
    r"\b(next|this|coming)?\s*(" + "|".join(WEEKDAYS_EN) + r")\b", re.IGNORECASE
)
_FULL_DATE = re.compile(
    r"(?<!\d)(\d{4})\s*[-/年.]\s*(\d{1,2})\s*[-/月.]\s*(\d{1,2})\s*[日號]?(?!\d)"
)
_MONTH_DAY_ZH = re.compile(r"(?<![\d年])(\d{1,2})\s*月\s*(\d{1,2})\s*[日號]")
_MONTH_DAY_SLASH = re.compile(r"(?<![\d/])(\d{1,2})/(\d{1,2})(?![\d/])")
_MONTHS = (
    r"jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|aug(?:ust)?"
    r"|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?"
)
_MONTH_NAME = re.compile(
    r"\b(?:(?:" + _MONTHS + r")\.?\s+\d{1,2}(?:st|nd|rd|th)?(?:,?\s*\d{4})?"
    r"|\d{1,2}(?:st|nd|rd|th)?\s+(?:" + _MONTHS + r")\.?(?:,?\s*\d{4})?)\b",
    re.IGNORECASE,
)
_HAS_YEAR = re.compile(r"\d{4}")


def format_clock(hour: int, minute: int) -> Optional[str]:
    """``HH:MM`` or ``None`` when out of range."""
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        return None
    return f"{hour:02d}:{minute:02d}"


def _minutes(token: Optional[str]) -> int:
    if not token:
        return 0
    if token == "半":
        return 30
    return int(token)


# Time rules


def _period_12h(text: str) -> Optional[str]:
    match = _PERIOD_12H.search(text)
    if match:
        period, hour, minute = match.group(1), int(match.group(2)), _minutes(match.group(3))
        if period == "中午":
            hour = 12
        elif period in _AFTERNOON_PERIODS and hour < 12:
            hour += 12
        elif period == "凌晨" and hour == 12:
            hour = 0
        return format_clock(hour, minute)

    match = _AM_PM.search(text)
    if match:
        hour, minute = int(match.group(1)), _minutes(match.group(2))
        if not 1 <= hour <= 12:
            return None
        is_pm = match.group(3).lower().startswith("p")
        if is_pm and hour < 12:
            hour += 12
        elif not is_pm and hour == 12:
            hour = 0
        return format_clock(hour, minute)

    match = _NOON_MIDNIGHT.search(text)
    if match:
        return "00:00" if match.group(1).lower() == "midnight" else "12:00"
    return None


def _clock(text: str) -> Optional[str]:
    match = _CLOCK.search(text)
    if match:
        minute_token = match.group(2) or match.group(3) or match.group(4)
        return format_clock(int(match.group(1)), _minutes(minute_token))
    match = _OCLOCK.search(text)
    if match:
        return format_clock(int(match.group(1)), 0)
    return None


def _period_default(text: str) -> Optional[str]:
    for period, default in PERIOD_DEFAULTS:
        if period in text:
            return default
    lowered = text.lower()
    for period, default in ENGLISH_PERIOD_DEFAULTS:
        if re.search(rf"\b{period}\b", lowered):
            return default
    return None


TIME_RULES = (
    Rule("time.period_12h", _period_12h),
    Rule("time.clock", _clock),
    Rule("time.period_default", _period_default),
)


def extract_time(text: str) -> Optional[Tuple[str, str]]:
    """Return ``(rule_name, "HH:MM")`` or ``None``."""
    return first_match(TIME_RULES, text)


# Date rules


def _safe_date(year: int, month: int, day: int) -> Optional[date]:
    if not MIN_YEAR <= year <= MAX_YEAR:
        return None
    try:
        return date(year, month, day)
    except ValueError:
        return None


def roll_forward(month: int, day: int, today: date) -> Optional[date]:
    """This year's month/day, or next year's if it has already passed."""
    candidate = _safe_date(today.year, month, day)
    if candidate is not None and candidate >= today:
        return candidate
    return _safe_date(today.year + 1, month, day)


def _relative(text: str, today: date) -> Optional[str]:
    lowered = text.lower()
    for word, offset in RELATIVE_DAYS:
        if word.isascii():
            if re.search(rf"\b{word}\b", lowered):
                return (today + timedelta(days=offset)).isoformat()
        elif word in text:
            return (today + timedelta(days=offset)).isoformat()
    return None


def _weekday_offset(target: int, today: date, next_week: bool) -> int:
    diff = target - today.weekday()
    if next_week:
        return diff + 7
    return diff + 7 if diff <= 0 else diff


def _weekday(text: str, today: date) -> Optional[str]:
    match = _WEEKDAY_ZH.search(text)
    if match:
        offset = _weekday_offset(WEEKDAYS_ZH[match.group(2)], today, match.group(1) == "下")
        return (today + timedelta(days=offset)).isoformat()
    match = _WEEKDAY_EN.search(text)
    if match:
        prefix = (match.group(1) or "").lower()
        target = WEEKDAYS_EN[match.group(2).lower()]
        offset = _weekday_offset(target, today, prefix == "next")
        return (today + timedelta(days=offset)).isoformat()
    return None


def _full(text: str, today: date) -> Optional[str]:
    match = _FULL_DATE.search(text)
    if not match:
        return None
    parsed = _safe_date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    return parsed.isoformat() if parsed else None


def _month_day(text: str, today: date) -> Optional[str]:
    match = _MONTH_DAY_ZH.search(text) or _MONTH_DAY_SLASH.search(text)
    if not match:
        return None
    parsed = roll_forward(int(match.group(1)), int(match.group(2)), today)
    return parsed.isoformat() if parsed else None


def _month_name(text: str, today: date) -> Optional[str]:
    match = _MONTH_NAME.search(text)
    if not match:
        return None
    fragment = match.group(0)
    try:
        parsed = dateparser.parse(
            fragment,
            languages=["en"],
            settings={
                "RELATIVE_BASE": datetime(today.year, today.month, today.day),
                "REQUIRE_PARTS": ["day", "month"],
            },
        )
    except (ValueError, OverflowError):
        return None
    if parsed is None:
        return None
    if _HAS_YEAR.search(fragment):
        explicit = _safe_date(parsed.year, parsed.month, parsed.day)
        return explicit.isoformat() if explicit else None
    rolled = roll_forward(parsed.month, parsed.day, today)
    return rolled.isoformat() if rolled else None


def date_rules(today: date) -> Tuple[Rule[str], ...]:
    """Date decision list bound to ``today``."""
    return (
        Rule("date.relative", partial(_relative, today=today)),
        Rule("date.weekday", partial(_weekday, today=today)),
        Rule("date.full", partial(_full, today=today)),
        Rule("date.month_day", partial(_month_day, today=today)),
        Rule("date.month_name", partial(_month_name, today=today)),
    )


def extract_date(text: str, today: date) -> Optional[Tuple[str, str]]:
    """Return ``(rule_name, "YYYY-MM-DD")`` or ``None``."""
    return first_match(date_rules(today), text)
