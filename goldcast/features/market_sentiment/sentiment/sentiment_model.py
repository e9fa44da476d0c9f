# goldcast/features/market_sentiment/sentiment/sentiment_model.py
"""
Keyword Sentiment Model

Deterministic headline scorer for gold. This is a fixed-keyword heuristic,
not NLP: each lexicon hit adds a signed 0.3, scaled by the term's high-impact
multiplier, and headlines are averaged with their strongest multiplier as the
weight.

Per headline:
    score  = clamp(sum(+-0.3 * multiplier), -1, 1)
    weight = max(1, multipliers of matched terms)
Aggregate:
    score              = sum(score * weight) / sum(weight)
    adjustment_percent = score * 3                      (within [-3, 3])
    confidence         = min(1, trigger_count / (headline_count * 2))
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from goldcast.features.market_sentiment.sentiment.lexicon import (
    BEARISH_KEYWORDS,
    BULLISH_KEYWORDS,
    UNIT_CONTRIBUTION,
    multiplier_for,
)
from goldcast.schemas.sentiment import SentimentCategory, SentimentResult
from goldcast.utils.logger import get_logger

logger = get_logger("sentiment_model")

MIN_HEADLINE_LENGTH = 10
MAX_ADJUSTMENT_PERCENT = 3.0
# |score| above this gets a directional summary
SUMMARY_SCORE_THRESHOLD = 0.3
SUMMARY_TRIGGER_COUNT = 3
MAX_TRIGGER_WORDS = 10
MAX_HEADLINES_KEPT = 10


@dataclass(frozen=True)
class HeadlineScore:
    score: float
    weight: float
    triggers: Tuple[str, ...]


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _unique(items: Iterable[str]) -> List[str]:
    seen = set()
    ordered = []
    for item in items:
        if item not in seen:
            seen.add(item)
            ordered.append(item)
    return ordered


class KeywordSentimentModel:
    """
    Scores batches of headlines against the gold lexicon.

    Args:
        bullish_keywords / bearish_keywords: Override the lexicon (tests, other assets).
        clock: Source of the result timestamp.
    """

    def __init__(
        self,
        bullish_keywords: Sequence[str] = BULLISH_KEYWORDS,
        bearish_keywords: Sequence[str] = BEARISH_KEYWORDS,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.bullish_keywords = tuple(bullish_keywords)
        self.bearish_keywords = tuple(bearish_keywords)
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def score_headline(self, headline: str) -> HeadlineScore:
        lower = headline.lower()
        score = 0.0
        weight = 1.0
        triggers: List[str] = []

        for keyword in self.bullish_keywords:
            if keyword in lower:
                multiplier = multiplier_for(keyword)
                score += UNIT_CONTRIBUTION * multiplier
                weight = max(weight, multiplier)
                triggers.append(f"+{keyword}")

        for keyword in self.bearish_keywords:
            if keyword in lower:
                multiplier = multiplier_for(keyword)
                score -= UNIT_CONTRIBUTION * multiplier
                weight = max(weight, multiplier)
                triggers.append(f"-{keyword}")

        return HeadlineScore(score=_clamp(score, -1.0, 1.0), weight=weight, triggers=tuple(triggers))

    def analyze(self, headlines: Sequence[str]) -> SentimentResult:
        """
        Aggregate sentiment for a batch of headlines.

        Headlines shorter than 10 characters (or not strings) are discarded
        first. With nothing left the result is neutral, zero-confidence and
        has an empty summary.
        """
        usable = [h for h in headlines if isinstance(h, str) and len(h) >= MIN_HEADLINE_LENGTH]
        if not usable:
            return SentimentResult(timestamp=self.clock())

        total_score = 0.0
        total_weight = 0.0
        all_triggers: List[str] = []
        for headline in usable:
            scored = self.score_headline(headline)
            total_score += scored.score * scored.weight
            total_weight += scored.weight
            all_triggers.extend(scored.triggers)

        score = _clamp(total_score / total_weight if total_weight > 0 else 0.0, -1.0, 1.0)
        adjustment = _clamp(score * MAX_ADJUSTMENT_PERCENT, -MAX_ADJUSTMENT_PERCENT, MAX_ADJUSTMENT_PERCENT)
        confidence = min(1.0, len(all_triggers) / (len(usable) * 2))
        category, summary = self._summarize(score, all_triggers)

        logger.debug(
            f"Analysed {len(usable)} headlines: score={score:.3f} triggers={len(all_triggers)} "
            f"confidence={confidence:.2f}"
        )
        return SentimentResult(
            score=score,
            adjustment_percent=adjustment,
            confidence=confidence,
            trigger_words=tuple(_unique(all_triggers)[:MAX_TRIGGER_WORDS]),
            summary=summary,
            headlines=tuple(usable[:MAX_HEADLINES_KEPT]),
            category=category,
            timestamp=self.clock(),
        )

    @staticmethod
    def _summarize(score: float, triggers: List[str]) -> Tuple[SentimentCategory, str]:
        if score > SUMMARY_SCORE_THRESHOLD:
            top = [t for t in _unique(triggers) if t.startswith("+")][:SUMMARY_TRIGGER_COUNT]
            return SentimentCategory.BULLISH, f"Bullish for gold: {', '.join(top)}"
        if score < -SUMMARY_SCORE_THRESHOLD:
            top = [t for t in _unique(triggers) if t.startswith("-")][:SUMMARY_TRIGGER_COUNT]
            return SentimentCategory.BEARISH, f"Bearish for gold: {', '.join(top)}"
        if triggers:
            return SentimentCategory.MIXED, "Mixed signals - neutral stance"
        return SentimentCategory.NEUTRAL, "Neutral sentiment"


def analyze(headlines: Sequence[str]) -> SentimentResult:
    """Module-level convenience using the default lexicon."""
    return KeywordSentimentModel().analyze(headlines)
