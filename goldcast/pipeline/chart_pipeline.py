# goldcast/pipeline/chart_pipeline.py
"""
One refresh cycle for a chart.

    active series ─┬─> local regression ─┐
                   │                     ├─> blended slope ─┐
    7d reference ──┼─> global regression ┘                  ├─> prediction
                   └─> quick stats           cached sentiment ┘

The active and reference series are fetched concurrently. Sentiment is read
from the sentiment service's cache and never awaited here.
"""

import asyncio
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from goldcast.config.timeframes import REFERENCE_TIMEFRAME, Timeframe
from goldcast.data.errors import NoDataAvailableError
from goldcast.data.orchestrator import QuoteSourceOrchestrator
from goldcast.features.market_sentiment.sentiment.sentiment_service import SentimentService
from goldcast.models.regression import RegressionResult, linear_regression
from goldcast.models.slope_blender import SlopeBlender
from goldcast.predictor.predict import PredictionAssembler, local_regression
from goldcast.predictor.quick_stats import compute_quick_stats
from goldcast.schemas.prediction import PredictionResult, QuickStats
from goldcast.schemas.price import DataSource, TimeSeries
from goldcast.schemas.sentiment import SentimentResult
from goldcast.utils.logger import get_logger

logger = get_logger(__name__)

MIN_GLOBAL_POINTS = 20


@dataclass(frozen=True)
class RefreshResult:
    """Everything the presentation layer needs after one refresh."""
    timeframe: Timeframe
    series: Optional[TimeSeries] = None
    prediction: Optional[PredictionResult] = None
    quick_stats: Optional[QuickStats] = None
    sentiment: SentimentResult = field(default_factory=SentimentResult.neutral)
    global_slope: float = 0.0
    current_price: Optional[float] = None
    change: Optional[float] = None
    change_percent: Optional[float] = None
    error: Optional[str] = None
    retryable: bool = False
    refreshed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def data_source(self) -> Optional[DataSource]:
        return self.series.source if self.series is not None else None

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly view; the raw series is reduced to its size and origin."""
        prediction = None
        if self.prediction is not None:
            prediction = {
                "trend": self.prediction.trend.value,
                "slope": self.prediction.slope,
                "confidence": self.prediction.confidence,
                "total_change_percent": self.prediction.total_change_percent,
                "sentiment_adjustment": self.prediction.sentiment_adjustment,
                "sentiment_summary": self.prediction.sentiment_summary,
                "points": [
                    {"timestamp": p.timestamp.isoformat(), "value": p.value}
                    for p in self.prediction.points
                ],
            }
        quick_stats = None
        if self.quick_stats is not None:
            quick_stats = asdict(self.quick_stats)
            quick_stats["trend"] = self.quick_stats.trend.value
        return {
            "timeframe": self.timeframe.value,
            "source": self.data_source.value if self.data_source else None,
            "from_cache": bool(self.series and self.series.from_cache),
            "points": len(self.series) if self.series is not None else 0,
            "current_price": self.current_price,
            "change": self.change,
            "change_percent": self.change_percent,
            "global_slope": self.global_slope,
            "prediction": prediction,
            "quick_stats": quick_stats,
            "sentiment": {
                "score": self.sentiment.score,
                "adjustment_percent": self.sentiment.adjustment_percent,
                "confidence": self.sentiment.confidence,
                "category": self.sentiment.category.value,
                "summary": self.sentiment.summary,
                "trigger_words": list(self.sentiment.trigger_words),
            },
            "error": self.error,
            "retryable": self.retryable,
            "refreshed_at": self.refreshed_at.isoformat(),
        }


class ChartPipeline:
    """
    Attributes:
        orchestrator (QuoteSourceOrchestrator): Series source with fallback.
        sentiment_service (SentimentService): Read-only here (``latest``).
        symbol (str): Series identifier.
        global_regression (RegressionResult): Last good 7d reference fit; starts flat.
    """

    def __init__(
        self,
        orchestrator: QuoteSourceOrchestrator,
        sentiment_service: SentimentService,
        symbol: str = "XAU",
        blender: Optional[SlopeBlender] = None,
        assembler: Optional[PredictionAssembler] = None,
        min_global_points: int = MIN_GLOBAL_POINTS,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.orchestrator = orchestrator
        self.sentiment_service = sentiment_service
        self.symbol = symbol
        self.blender = blender or SlopeBlender()
        self.assembler = assembler or PredictionAssembler()
        self.min_global_points = min_global_points
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.global_regression = RegressionResult(slope=0.0, intercept=0.0, r_squared=0.0)

    async def refresh(self, timeframe: Timeframe) -> RefreshResult:
        """
        Run one cycle for ``timeframe``. Never raises for data problems: an
        exhausted orchestrator becomes ``RefreshResult(error=..., retryable=True)``.
        """
        timeframe = Timeframe(timeframe)
        if timeframe is REFERENCE_TIMEFRAME:
            active = reference = await self._fetch(timeframe)
        else:
            # Only the active fetch reports to the breaker: one outcome per cycle
            active, reference = await asyncio.gather(
                self._fetch(timeframe), self._fetch(REFERENCE_TIMEFRAME, record_outcome=False)
            )

        quick_stats = None
        if isinstance(reference, TimeSeries):
            self._update_global(reference)
            quick_stats = compute_quick_stats(reference, now=self.clock())
        else:
            logger.warning(f"Reference window unavailable, keeping previous global slope: {reference}")

        sentiment = self.sentiment_service.latest()
        if not isinstance(active, TimeSeries):
            return RefreshResult(
                timeframe=timeframe,
                quick_stats=quick_stats,
                sentiment=sentiment,
                global_slope=self.global_regression.slope,
                error=str(active),
                retryable=getattr(active, "retryable", False),
                refreshed_at=self.clock(),
            )

        local = local_regression(active, timeframe)
        blended = self.blender.blend(local, self.global_regression, timeframe)
        prediction = self.assembler.assemble(active, blended.slope, local, sentiment, timeframe)

        first, last = active.first, active.last
        base = first.open if first.open > 0 else first.close
        change = last.close - base

        logger.info(
            f"Refreshed {self.symbol} {timeframe.value}: {len(active)} points from {active.source.value}"
            f"{' (cached)' if active.from_cache else ''}, "
            f"trend={prediction.trend.value if prediction else 'n/a'}"
        )
        return RefreshResult(
            timeframe=timeframe,
            series=active,
            prediction=prediction,
            quick_stats=quick_stats,
            sentiment=sentiment,
            global_slope=self.global_regression.slope,
            current_price=last.close,
            change=change,
            change_percent=change / base * 100,
            refreshed_at=self.clock(),
        )

    async def _fetch(self, timeframe: Timeframe, record_outcome: bool = True):
        """Series, or the NoDataAvailableError describing why there is none."""
        try:
            return await self.orchestrator.fetch_series(self.symbol, timeframe, record_outcome=record_outcome)
        except NoDataAvailableError as exc:
            return exc

    def _update_global(self, reference: TimeSeries) -> None:
        closes = reference.closes()
        if len(closes) < self.min_global_points:
            logger.info(
                f"Reference window has {len(closes)} points (< {self.min_global_points}); "
                "keeping previous global slope"
            )
            return
        self.global_regression = linear_regression(closes)
