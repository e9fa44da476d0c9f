# goldcast/pipeline/factory.py
"""
Wires the object graph from an ``AppConfig``.

The last-good series cache and the sentiment cache are the two pieces of
process-wide state; pass existing instances to share them between charts.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional

from goldcast.config.timeframes import Timeframe
from goldcast.data.circuit_breaker import CircuitBreaker
from goldcast.data.fetcher import Fetcher, HttpxFetcher
from goldcast.data.orchestrator import QuoteSourceOrchestrator
from goldcast.data.providers.intraday_chart import IntradayChartProvider
from goldcast.data.providers.market_chart import MarketChartProvider
from goldcast.features.market_sentiment.feeds.news_feed import NewsFeed
from goldcast.features.market_sentiment.sentiment.sentiment_service import SentimentService
from goldcast.monitoring.error_logging import ErrorComponent, create_component_logger
from goldcast.models.slope_blender import SlopeBlender
from goldcast.pipeline.chart_pipeline import ChartPipeline, RefreshResult
from goldcast.pipeline.session import ChartSession
from goldcast.predictor.predict import PredictionAssembler
from goldcast.utils.cache_manager import TTLCache
from goldcast.utils.config_loader import AppConfig
from goldcast.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class Components:
    fetcher: Fetcher
    orchestrator: QuoteSourceOrchestrator
    sentiment_service: SentimentService
    pipeline: ChartPipeline

    async def aclose(self) -> None:
        close = getattr(self.fetcher, "aclose", None)
        if close is not None:
            await close()


def build_components(
    config: Optional[AppConfig] = None,
    fetcher: Optional[Fetcher] = None,
    last_good: Optional[TTLCache] = None,
    sentiment_cache: Optional[TTLCache] = None,
) -> Components:
    """Creates every collaborator of one chart pipeline from typed config."""
    config = config or AppConfig()
    fetcher = fetcher or HttpxFetcher()
    timeout = config.http.timeout_seconds
    error_log_path = config.error_log.path

    providers = [
        MarketChartProvider(
            fetcher, config.sources.market_chart_url, coin_id=config.sources.coin_id, timeout=timeout
        ),
        IntradayChartProvider(
            fetcher, config.sources.intraday_chart_url, ticker=config.sources.ticker, timeout=timeout
        ),
    ]
    orchestrator = QuoteSourceOrchestrator(
        providers,
        last_good=last_good
        if last_good is not None
        else TTLCache(
            "last_good_series",
            ttl=config.cache.last_good_ttl_seconds,
            max_items=config.cache.max_items,
        ),
        breaker=CircuitBreaker(
            failure_threshold=config.circuit_breaker.failure_threshold,
            cooldown_seconds=config.circuit_breaker.cooldown_seconds,
        ),
        timeout=timeout,
        error_logger=create_component_logger(ErrorComponent.ORCHESTRATOR, error_log_path),
    )

    feed = NewsFeed(
        fetcher,
        config.sources.news_url,
        query=config.sources.news_query,
        max_records=config.sources.max_records,
        timeout=config.sentiment.timeout_seconds,
    )
    sentiment_service = SentimentService(
        feed,
        cache=sentiment_cache
        if sentiment_cache is not None
        else TTLCache("sentiment", ttl=config.sentiment.ttl_seconds, max_items=1),
        timeout=config.sentiment.timeout_seconds,
        error_logger=create_component_logger(ErrorComponent.SENTIMENT_SERVICE, error_log_path),
    )

    pipeline = ChartPipeline(
        orchestrator,
        sentiment_service,
        symbol=config.pipeline.symbol,
        blender=SlopeBlender(),
        assembler=PredictionAssembler(min_points=config.pipeline.min_prediction_points),
        min_global_points=config.pipeline.min_global_points,
    )
    logger.info(
        f"Pipeline for {config.pipeline.symbol} wired; caches: "
        f"{orchestrator.last_good.backend_info()} | {sentiment_service.cache.backend_info()}"
    )
    return Components(
        fetcher=fetcher,
        orchestrator=orchestrator,
        sentiment_service=sentiment_service,
        pipeline=pipeline,
    )


def build_session(
    components: Components,
    config: Optional[AppConfig] = None,
    timeframe: Optional[Timeframe] = None,
    on_result: Optional[Callable[[RefreshResult], Any]] = None,
) -> ChartSession:
    config = config or AppConfig()
    return ChartSession(
        components.pipeline,
        components.sentiment_service,
        timeframe=timeframe or config.pipeline.default_timeframe,
        price_period=config.scheduler.price_refresh_seconds,
        sentiment_period=config.scheduler.sentiment_refresh_seconds,
        on_result=on_result,
    )
