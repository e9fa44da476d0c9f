# goldcast/schemas/sentiment.py
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Tuple


class SentimentCategory(str, Enum):
    """Direction of the aggregate news sentiment for the asset."""
    BULLISH = "bullish"
    BEARISH = "bearish"
    MIXED = "mixed"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class SentimentResult:
    """
    Aggregate keyword sentiment over a batch of headlines.

    Attributes:
        score (float): -1.0 to +1.0; positive = bullish for the asset.
        adjustment_percent (float): Suggested price adjustment, -3 to +3.
        confidence (float): 0 to 1, from trigger density.
        trigger_words (Tuple[str, ...]): Signed triggers, e.g. "+war", "-rate hike".
        summary (str): Short explanation; empty when there is nothing to show.
        headlines (Tuple[str, ...]): Headlines that were analysed (first 10).
        category (SentimentCategory): Closed classification of the result.
        timestamp (datetime): When the result was produced.
    """
    score: float = 0.0
    adjustment_percent: float = 0.0
    confidence: float = 0.0
    trigger_words: Tuple[str, ...] = ()
    summary: str = ""
    headlines: Tuple[str, ...] = ()
    category: SentimentCategory = SentimentCategory.NEUTRAL
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def neutral(cls) -> "SentimentResult":
        """Zero-confidence neutral result with an empty summary."""
        return cls()
