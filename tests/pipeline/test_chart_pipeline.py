import json
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from goldcast.config.timeframes import Timeframe
from goldcast.data.circuit_breaker import BreakerStatus, CircuitBreaker
from goldcast.data.errors import NetworkFailureError, NoDataAvailableError
from goldcast.data.orchestrator import QuoteSourceOrchestrator
from goldcast.features.market_sentiment.sentiment.sentiment_service import SentimentService
from goldcast.pipeline.chart_pipeline import ChartPipeline
from goldcast.schemas.sentiment import SentimentResult
from goldcast.utils.cache_manager import TTLCache
from tests.mocks.fakes import START, FakeFeed, FakeProvider, make_series

REFERENCE = make_series([2000.0 + 6 * i for i in range(50)], step=timedelta(hours=1))
ACTIVE = make_series(
    [2300.0 + i for i in range(12)], opens=[2299.0] + [2300.0 + i for i in range(11)]
)
NOW = START + timedelta(hours=49)


def _orchestrator(by_timeframe):
    async def fetch_series(symbol, timeframe, symbols=None, record_outcome=True):
        outcome = by_timeframe[Timeframe(timeframe)]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    orchestrator = MagicMock()
    orchestrator.fetch_series = AsyncMock(side_effect=fetch_series)
    return orchestrator


def _sentiment(result=None):
    service = MagicMock()
    service.latest.return_value = result or SentimentResult.neutral()
    service.refresh = AsyncMock()
    return service


def _pipeline(by_timeframe, sentiment=None):
    return ChartPipeline(_orchestrator(by_timeframe), _sentiment(sentiment), clock=lambda: NOW)


@pytest.mark.asyncio
async def test_refresh_blends_local_with_reference_slope():
    pipeline = _pipeline({Timeframe.ONE_HOUR: ACTIVE, Timeframe.SEVEN_DAYS: REFERENCE})

    result = await pipeline.refresh(Timeframe.ONE_HOUR)

    assert result.ok
    assert result.global_slope == pytest.approx(6.0)
    # local 1.0/pt; global 6.0/h rescaled to 2 min = 0.2; 30% local
    assert result.prediction.slope == pytest.approx(0.3 * 1.0 + 0.7 * 0.2)
    assert result.prediction.anchor.value == ACTIVE.last.close
    assert result.quick_stats.change_24h == pytest.approx(6 * 24)
    called = {call.args[1] for call in pipeline.orchestrator.fetch_series.await_args_list}
    assert called == {Timeframe.ONE_HOUR, Timeframe.SEVEN_DAYS}


@pytest.mark.asyncio
async def test_price_summary_against_first_open():
    pipeline = _pipeline({Timeframe.ONE_HOUR: ACTIVE, Timeframe.SEVEN_DAYS: REFERENCE})
    result = await pipeline.refresh("1h")
    assert result.current_price == 2311.0
    assert result.change == pytest.approx(12.0)
    assert result.change_percent == pytest.approx(12.0 / 2299.0 * 100)


@pytest.mark.asyncio
async def test_seven_day_refresh_fetches_once():
    pipeline = _pipeline({Timeframe.SEVEN_DAYS: REFERENCE})
    result = await pipeline.refresh(Timeframe.SEVEN_DAYS)
    assert pipeline.orchestrator.fetch_series.await_count == 1
    assert result.prediction.slope == pytest.approx(6.0)


@pytest.mark.asyncio
async def test_reference_failure_keeps_previous_global_slope():
    by_timeframe = {Timeframe.ONE_HOUR: ACTIVE, Timeframe.SEVEN_DAYS: REFERENCE}
    pipeline = _pipeline(by_timeframe)
    await pipeline.refresh(Timeframe.ONE_HOUR)

    by_timeframe[Timeframe.SEVEN_DAYS] = NoDataAvailableError("XAU", "7d")
    result = await pipeline.refresh(Timeframe.ONE_HOUR)

    assert result.ok
    assert result.global_slope == pytest.approx(6.0)
    assert result.quick_stats is None
    assert result.prediction is not None


@pytest.mark.asyncio
async def test_short_reference_does_not_replace_global_slope():
    short_reference = make_series([3000.0 - 10 * i for i in range(15)], step=timedelta(hours=1))
    pipeline = _pipeline({Timeframe.ONE_HOUR: ACTIVE, Timeframe.SEVEN_DAYS: short_reference})
    result = await pipeline.refresh(Timeframe.ONE_HOUR)
    assert result.global_slope == 0.0


@pytest.mark.asyncio
async def test_active_failure_becomes_retryable_error_result():
    pipeline = _pipeline(
        {Timeframe.ONE_HOUR: NoDataAvailableError("XAU", "1h"), Timeframe.SEVEN_DAYS: REFERENCE}
    )

    result = await pipeline.refresh(Timeframe.ONE_HOUR)

    assert not result.ok
    assert result.retryable
    assert result.series is None
    assert result.prediction is None
    assert result.quick_stats is not None
    assert "retry" in result.error


@pytest.mark.asyncio
async def test_short_active_series_omits_prediction():
    pipeline = _pipeline(
        {Timeframe.ONE_HOUR: make_series([2300.0] * 9), Timeframe.SEVEN_DAYS: REFERENCE}
    )
    result = await pipeline.refresh(Timeframe.ONE_HOUR)
    assert result.ok
    assert result.prediction is None


@pytest.mark.asyncio
async def test_cached_sentiment_is_read_not_refreshed():
    sentiment = SentimentResult(adjustment_percent=1.5, confidence=0.8, summary="Bullish for gold: +war")
    pipeline = _pipeline({Timeframe.ONE_HOUR: ACTIVE, Timeframe.SEVEN_DAYS: REFERENCE}, sentiment)

    result = await pipeline.refresh(Timeframe.ONE_HOUR)

    assert result.sentiment is sentiment
    assert result.prediction.sentiment_adjustment == 1.5
    pipeline.sentiment_service.refresh.assert_not_awaited()


@pytest.mark.asyncio
async def test_to_dict_is_json_serializable():
    pipeline = _pipeline({Timeframe.ONE_HOUR: ACTIVE, Timeframe.SEVEN_DAYS: REFERENCE})
    payload = (await pipeline.refresh(Timeframe.ONE_HOUR)).to_dict()

    decoded = json.loads(json.dumps(payload))
    assert decoded["timeframe"] == "1h"
    assert decoded["source"] == "market_chart"
    assert len(decoded["prediction"]["points"]) == 4
    assert decoded["quick_stats"]["trend"] in {"bullish", "bearish", "neutral"}


@pytest.mark.asyncio
async def test_prediction_after_failed_sentiment_refresh_uses_half_confidence(clock):
    feed = FakeFeed(["gold rally continues this week"])
    service = SentimentService(feed, cache=TTLCache("sentiment", ttl=300, max_items=1, clock=clock))
    pipeline = ChartPipeline(
        _orchestrator({Timeframe.ONE_HOUR: ACTIVE, Timeframe.SEVEN_DAYS: REFERENCE}),
        service,
        clock=lambda: NOW,
    )

    await service.refresh()
    confident = await pipeline.refresh(Timeframe.ONE_HOUR)
    assert confident.prediction.sentiment_adjustment > 0

    clock.advance(301)
    feed.error = NetworkFailureError("NewsFeed")
    await service.refresh()
    degraded = await pipeline.refresh(Timeframe.ONE_HOUR)

    # 0.5 halved to 0.25 falls under the 0.3 gate
    assert degraded.sentiment.confidence == pytest.approx(0.25)
    assert degraded.prediction.sentiment_adjustment == 0.0
    assert degraded.prediction.points[-1].value < confident.prediction.points[-1].value


def _failing_orchestrator(clock, providers=None):
    return QuoteSourceOrchestrator(
        providers or [FakeProvider("market_chart", [NetworkFailureError("market_chart")])],
        last_good=TTLCache("last_good_series", clock=clock),
        breaker=CircuitBreaker(failure_threshold=2, cooldown_seconds=300, clock=clock),
    )


@pytest.mark.asyncio
async def test_one_failed_cycle_counts_once_toward_breaker(clock):
    orchestrator = _failing_orchestrator(clock)
    pipeline = ChartPipeline(orchestrator, _sentiment(), clock=lambda: NOW)

    first = await pipeline.refresh(Timeframe.ONE_HOUR)
    state = orchestrator.breaker.state("XAU")
    assert not first.ok
    assert state.status is BreakerStatus.CLOSED
    assert state.consecutive_failures == 1

    await pipeline.refresh(Timeframe.ONE_HOUR)
    assert orchestrator.breaker.state("XAU").status is BreakerStatus.OPEN


class _ByTimeframeProvider:
    source_name = "market_chart"

    def __init__(self, outcomes):
        self.outcomes = outcomes

    async def fetch(self, symbol, timeframe):
        outcome = self.outcomes[Timeframe(timeframe)]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.mark.asyncio
async def test_reference_success_does_not_mask_failing_active_window(clock):
    provider = _ByTimeframeProvider(
        {Timeframe.ONE_HOUR: NetworkFailureError("market_chart"), Timeframe.SEVEN_DAYS: REFERENCE}
    )
    orchestrator = _failing_orchestrator(clock, providers=[provider])
    pipeline = ChartPipeline(orchestrator, _sentiment(), clock=lambda: NOW)

    await pipeline.refresh(Timeframe.ONE_HOUR)
    result = await pipeline.refresh(Timeframe.ONE_HOUR)

    assert result.quick_stats is not None
    assert orchestrator.breaker.state("XAU").status is BreakerStatus.OPEN
