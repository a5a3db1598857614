"""Tests for the intent extractor as a whole."""

from datetime import datetime
from unittest.mock import MagicMock

import pytest

from railquery.config import ExtractorConfig
from railquery.nlp import IntentExtractor, extract


def test_chinese_complete_query(today):
    """A full Chinese request fills every field and scores 1.0."""
    intent = extract("明天早上8點台北到台中 最快", today=today)

    assert intent.origin == "台北"
    assert intent.destination == "台中"
    assert intent.time == "08:00"
    assert intent.date == "2026-10-18"
    assert intent.preferences.fastest
    assert intent.confidence == 1.0
    assert intent.matched_rules == (
        "places.separator",
        "time.period_12h",
        "date.relative",
        "preferences",
        "complete_query",
    )


def test_english_complete_query(today):
    """The English request resolves to canonical Chinese names."""
    intent = extract("tomorrow 8am Taipei to Taichung, fastest", today=today)

    assert (intent.origin, intent.destination) == ("臺北", "臺中")
    assert intent.time == "08:00"
    assert intent.date == "2026-10-18"
    assert intent.preferences.fastest
    assert intent.confidence == 1.0


def test_place_pair_only(today):
    """A bare route scores exactly the place-pair weight."""
    intent = extract("台北到台中", today=today)
    assert intent.confidence == 0.4
    assert intent.matched_rules == ("places.separator",)
    assert intent.is_actionable()


def test_time_without_places_gets_no_bonus(today):
    """The completeness bonus needs both places."""
    intent = extract("明天下午2點", today=today)
    assert intent.confidence == 0.4
    assert "complete_query" not in intent.matched_rules
    assert not intent.is_actionable()


def test_pure_train_number_short_circuits(today):
    """A bare numeral stops extraction after the train number rule."""
    intent = extract("152", today=today)

    assert intent.train_number.number == "152"
    assert intent.matched_rules == ("train_number.pure",)
    assert intent.confidence == 0.9
    assert intent.is_train_number_only
    assert intent.is_actionable()


def test_qualified_train_number_keeps_running(today):
    """A class-qualified number lets the preference rule run too."""
    intent = extract("自強152", today=today)

    assert intent.train_number.class_hint == "自強"
    assert intent.matched_rules == ("train_number.class", "preferences")
    assert intent.confidence == 0.9


@pytest.mark.parametrize("value", ["", "   ", None, 42])
def test_empty_input(value, today):
    """Empty or non-text input yields an empty intent, never an error."""
    intent = extract(value, today=today)
    assert intent.confidence == 0.0
    assert intent.matched_rules == ()
    assert intent.origin is None


def test_truncated_input_scores_zero(today):
    """Over-length input is flagged and not trusted."""
    intent = extract("台北到台中" * 200, today=today)
    assert intent.raw.truncated
    assert intent.confidence == 0.0
    assert intent.matched_rules == ("input_truncated",)


def test_unrelated_text(today):
    """Greetings carry no intent."""
    intent = extract("你好", today=today)
    assert intent.confidence == 0.0
    assert not intent.is_actionable()


def test_confidence_is_bounded(today):
    """Confidence stays within [0, 1] even with every rule firing."""
    intent = extract("自強152 明天早上8點台北到台中 最快", today=today)
    assert 0.0 <= intent.confidence <= 1.0


def test_today_comes_from_clock(clock):
    """Without an explicit date the clock decides what 'tomorrow' means."""
    intent = extract("明天台北到台中", clock=clock)
    assert intent.date == "2026-10-18"


class TestIntentExtractor:
    """Tests for the configured extractor."""

    @pytest.fixture
    def extractor(self, clock):
        return IntentExtractor(config=ExtractorConfig(), clock=clock)

    def test_extract_uses_clock(self, extractor):
        """The injected clock anchors relative dates."""
        intent = extractor.extract("後天台北到高雄")
        assert intent.date == "2026-10-19"

    def test_confidence_gate(self, clock):
        """is_actionable applies the configured minimum."""
        strict = IntentExtractor(config=ExtractorConfig(min_confidence=0.6), clock=clock)
        intent = strict.extract("台北到台中")
        assert not strict.is_actionable(intent)
        assert strict.is_actionable(strict.extract("明天台北到台中"))

    def test_length_bound_from_config(self, clock):
        """The configured length bound applies."""
        short = IntentExtractor(config=ExtractorConfig(max_query_length=4), clock=clock)
        intent = short.extract("台北到台中")
        assert intent.raw.truncated

    def test_window_bound(self, clock):
        """Windows beyond max_window_hours are ignored."""
        extractor = IntentExtractor(config=ExtractorConfig(), clock=clock, max_window_hours=2)
        intent = extractor.extract("台北到台中 接下來3小時")
        assert intent.preferences is None

    def test_clock_is_read_per_call(self):
        """A new day on the clock moves relative dates."""
        fake_clock = MagicMock()
        extractor = IntentExtractor(config=ExtractorConfig(), clock=fake_clock)

        fake_clock.now.return_value = datetime(2026, 12, 31, 10, 0)
        assert extractor.extract("明天台北到台中").date == "2027-01-01"
        fake_clock.now.return_value = datetime(2027, 1, 1, 10, 0)
        assert extractor.extract("明天台北到台中").date == "2027-01-02"
