import pytest

from goldcast.features.market_sentiment.sentiment.lexicon import multiplier_for
from goldcast.features.market_sentiment.sentiment.sentiment_model import (
    KeywordSentimentModel,
    analyze,
)
from goldcast.schemas.sentiment import SentimentCategory


def test_war_and_rally_headline_is_bullish():
    result = analyze(["gold rally amid war fears"])
    assert result.score > 0
    assert result.adjustment_percent > 0
    assert result.category is SentimentCategory.BULLISH
    assert result.summary == "Bullish for gold: +war, +fear, +gold rally"


def test_ceasefire_and_dollar_strength_is_bearish():
    result = analyze(["ceasefire reached, dollar strength continues"])
    assert result.score == pytest.approx(-0.6)
    assert result.adjustment_percent == pytest.approx(-1.8)
    assert result.category is SentimentCategory.BEARISH
    assert result.summary.startswith("Bearish for gold: ")


def test_empty_batch_is_neutral_with_empty_summary():
    result = analyze([])
    assert result.score == 0
    assert result.confidence == 0
    assert result.summary == ""
    assert result.category is SentimentCategory.NEUTRAL


def test_short_headlines_are_discarded():
    result = analyze(["war now", "", None])
    assert result.confidence == 0
    assert result.summary == ""
    assert result.headlines == ()


def test_headline_score_is_clamped():
    scored = KeywordSentimentModel().score_headline("war attack missile strike bomb invasion")
    assert scored.score == 1.0
    assert scored.weight == 2.0


def test_high_impact_multiplier_weights_the_average():
    result = analyze(["war breaks out overnight", "stocks surge on earnings beat"])
    # (0.3 * 2.0 * 2.0 - 0.3 * 1.0) / (2.0 + 1.0)
    assert result.score == pytest.approx(0.3)


def test_balanced_triggers_are_mixed():
    result = analyze(["inflation rises again today", "stocks surge on earnings beat"])
    assert result.score == pytest.approx(0.0)
    assert result.category is SentimentCategory.MIXED
    assert result.summary == "Mixed signals - neutral stance"


def test_no_triggers_is_neutral():
    result = analyze(["Local bakery opens a new shop downtown"])
    assert result.category is SentimentCategory.NEUTRAL
    assert result.summary == "Neutral sentiment"
    assert result.confidence == 0


def test_confidence_from_trigger_density():
    result = analyze(["inflation data due this week"])
    assert result.confidence == pytest.approx(0.5)


def test_adjustment_is_bounded():
    result = analyze(["war attack missile strike bomb invasion"] * 3)
    assert result.adjustment_percent == pytest.approx(3.0)
    assert result.confidence == 1.0


def test_summary_lists_at_most_three_unique_triggers():
    result = analyze(
        [
            "war and conflict spark fear",
            "war tension and sanctions escalate",
        ]
    )
    listed = result.summary.split(": ", 1)[1].split(", ")
    assert len(listed) == 3
    assert len(set(listed)) == 3
    assert len(result.trigger_words) == len(set(result.trigger_words))


def test_analysis_is_deterministic():
    headlines = ["Fed signals rate cut as recession fears grow", "Dollar rally pressures gold"]
    first = KeywordSentimentModel(clock=lambda: None).analyze(headlines)
    second = KeywordSentimentModel(clock=lambda: None).analyze(headlines)
    assert first == second


def test_multiplier_defaults_to_one():
    assert multiplier_for("war") == 2.0
    assert multiplier_for("inflation") == 1.0
