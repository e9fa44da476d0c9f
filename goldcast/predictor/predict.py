# goldcast/predictor/predict.py
"""
Prediction Assembler

Turns {series, blended slope, local regression, cached sentiment} into a short
projection anchored on the last historical close.

With confident sentiment (>= 0.3) two adjustments apply, in this order:
  1) the slope is nudged by (anchor * adjustment% / 100) / k, spreading the
     sentiment move over the k projection steps;
  2) every projected value is scaled by (1 + adjustment% / 100).
"""

from typing import Optional

from goldcast.config.timeframes import Timeframe, get_timeframe_spec
from goldcast.features.market_sentiment.sentiment.sentiment_service import (
    SENTIMENT_CONFIDENCE_THRESHOLD,
    adjust_with_sentiment,
)
from goldcast.models.regression import RegressionResult, linear_regression
from goldcast.schemas.prediction import PredictionPoint, PredictionResult, classify_trend
from goldcast.schemas.price import TimeSeries
from goldcast.schemas.sentiment import SentimentResult
from goldcast.utils.logger import get_logger

logger = get_logger(__name__)

MIN_PREDICTION_POINTS = 10
# Total projected change (in %) beyond which the projection is directional.
PREDICTION_TREND_THRESHOLD = 0.05


def local_regression(series: TimeSeries, timeframe: Timeframe) -> RegressionResult:
    """OLS over the most recent ``lookback`` closes for the timeframe."""
    lookback = get_timeframe_spec(timeframe).lookback
    return linear_regression(series.closes()[-lookback:])


class PredictionAssembler:
    """
    Args:
        min_points (int): Shortest series that gets a prediction.
    """

    def __init__(self, min_points: int = MIN_PREDICTION_POINTS):
        self.min_points = min_points

    def assemble(
        self,
        series: TimeSeries,
        blended_slope: float,
        local: RegressionResult,
        sentiment: Optional[SentimentResult],
        timeframe: Timeframe,
    ) -> Optional[PredictionResult]:
        """
        Returns:
            PredictionResult, or None when the series is shorter than ``min_points``.
        """
        if len(series) < self.min_points:
            logger.info(
                f"Prediction skipped: {len(series)} points < {self.min_points} required"
            )
            return None

        spec = get_timeframe_spec(timeframe)
        steps = spec.projection_points
        anchor = series.last

        slope = blended_slope
        sentiment_adjustment = 0.0
        sentiment_summary = ""
        confident = sentiment is not None and sentiment.confidence >= SENTIMENT_CONFIDENCE_THRESHOLD
        if confident:
            price_adjustment = anchor.close * (sentiment.adjustment_percent / 100)
            slope += price_adjustment / steps
            sentiment_adjustment = sentiment.adjustment_percent
            sentiment_summary = sentiment.summary
            logger.debug(
                f"Sentiment adjustment applied: {sentiment.adjustment_percent:+.2f}% ({sentiment.summary})"
            )

        points = [PredictionPoint(timestamp=anchor.timestamp, value=anchor.close)]
        for i in range(1, steps + 1):
            value = anchor.close + slope * i
            if confident:
                value = adjust_with_sentiment(value, sentiment)
            points.append(
                PredictionPoint(timestamp=anchor.timestamp + spec.interval * i, value=value)
            )

        total_change_percent = (points[-1].value - anchor.close) / anchor.close * 100
        return PredictionResult(
            points=tuple(points),
            slope=slope,
            trend=classify_trend(total_change_percent, PREDICTION_TREND_THRESHOLD),
            confidence=min(1.0, max(0.0, local.r_squared)),
            sentiment_adjustment=sentiment_adjustment,
            sentiment_summary=sentiment_summary,
        )


def assemble_prediction(
    series: TimeSeries,
    blended_slope: float,
    local: RegressionResult,
    sentiment: Optional[SentimentResult],
    timeframe: Timeframe,
) -> Optional[PredictionResult]:
    return PredictionAssembler().assemble(series, blended_slope, local, sentiment, timeframe)
