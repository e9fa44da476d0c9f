# goldcast/pipeline/session.py
"""
A live chart: two independent refresh loops over one pipeline.

Prices refresh every minute for the active timeframe; sentiment refreshes on
its own five-minute cycle. Switching timeframe triggers an immediate price
refresh for the new window.
"""

import inspect
from typing import Any, Callable, Optional

from goldcast.config.timeframes import Timeframe
from goldcast.features.market_sentiment.sentiment.sentiment_service import SentimentService
from goldcast.pipeline.chart_pipeline import ChartPipeline, RefreshResult
from goldcast.pipeline.scheduler import RefreshScheduler
from goldcast.utils.logger import get_logger

logger = get_logger(__name__)


class ChartSession:
    def __init__(
        self,
        pipeline: ChartPipeline,
        sentiment_service: SentimentService,
        timeframe: Timeframe = Timeframe.ONE_HOUR,
        price_period: float = 60.0,
        sentiment_period: float = 300.0,
        on_result: Optional[Callable[[RefreshResult], Any]] = None,
    ):
        self.pipeline = pipeline
        self.sentiment_service = sentiment_service
        self.timeframe = Timeframe(timeframe)
        self.on_result = on_result
        self.latest: Optional[RefreshResult] = None

        self.price_scheduler = RefreshScheduler(self._refresh_prices, price_period, name="prices")
        self.sentiment_scheduler = RefreshScheduler(
            self.sentiment_service.refresh, sentiment_period, name="sentiment"
        )

    async def start(self) -> None:
        self.sentiment_scheduler.start()
        self.price_scheduler.start()
        logger.info(f"Chart session started on {self.timeframe.value}")

    def switch_timeframe(self, timeframe: Timeframe) -> None:
        timeframe = Timeframe(timeframe)
        if timeframe is self.timeframe:
            return
        logger.info(f"Switching timeframe {self.timeframe.value} -> {timeframe.value}")
        self.timeframe = timeframe
        self.price_scheduler.trigger()

    async def refresh_now(self) -> Optional[RefreshResult]:
        """Run (or join) a price refresh and return the newest result."""
        await self.price_scheduler.run_once()
        return self.latest

    async def _refresh_prices(self) -> None:
        result = await self.pipeline.refresh(self.timeframe)
        self.latest = result
        if self.on_result is not None:
            outcome = self.on_result(result)
            if inspect.isawaitable(outcome):
                await outcome

    async def stop(self) -> None:
        await self.price_scheduler.stop()
        await self.sentiment_scheduler.stop()
        logger.info("Chart session stopped")

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.stop()
