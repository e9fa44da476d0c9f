# goldcast/schemas/prediction.py
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Tuple


class Trend(str, Enum):
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


def classify_trend(change_percent: float, threshold: float) -> Trend:
    """Bullish above +threshold, bearish below -threshold, neutral in between."""
    if change_percent > threshold:
        return Trend.BULLISH
    if change_percent < -threshold:
        return Trend.BEARISH
    return Trend.NEUTRAL


@dataclass(frozen=True)
class PredictionPoint:
    timestamp: datetime
    value: float


@dataclass(frozen=True)
class PredictionResult:
    """
    Short-horizon projection. ``points[0]`` is always the last historical
    point (the anchor), followed by one point per projection step.
    """
    points: Tuple[PredictionPoint, ...]
    slope: float
    trend: Trend
    confidence: float
    sentiment_adjustment: float = 0.0
    sentiment_summary: str = ""

    @property
    def anchor(self) -> PredictionPoint:
        return self.points[0]

    @property
    def total_change_percent(self) -> float:
        anchor, last = self.points[0], self.points[-1]
        return (last.value - anchor.value) / anchor.value * 100


@dataclass(frozen=True)
class QuickStats:
    """Realized statistics over the long reference window."""
    current_price: float
    change_24h: float
    change_percent_24h: float
    weekly_high: float
    weekly_low: float
    trend: Trend
