# goldcast/features/market_sentiment/sentiment/sentiment_service.py
"""
Sentiment Service

Owns the process-wide sentiment result and refreshes it on its own cycle,
independently of price data. It never raises: on any fetch problem it serves
the last cached result at half confidence, or a neutral zero-confidence
result when nothing was ever cached.
"""

import asyncio
from dataclasses import replace
from typing import Optional

from goldcast.data.errors import DataSourceError, SourceTimeoutError
from goldcast.features.market_sentiment.feeds.base_feed import BaseFeed
from goldcast.features.market_sentiment.sentiment.sentiment_model import KeywordSentimentModel
from goldcast.monitoring.error_logging import (
    ErrorComponent,
    ErrorLogger,
    FallbackReason,
    reason_for,
)
from goldcast.schemas.sentiment import SentimentResult
from goldcast.utils.cache_manager import TTLCache
from goldcast.utils.logger import get_logger

logger = get_logger("sentiment_service")

SENTIMENT_TTL_SECONDS = 5 * 60
# Below this confidence the sentiment does not touch predictions.
SENTIMENT_CONFIDENCE_THRESHOLD = 0.3
STALE_CONFIDENCE_FACTOR = 0.5
CACHE_KEY = "sentiment"


def adjust_with_sentiment(value: float, sentiment: Optional[SentimentResult]) -> float:
    """Scale ``value`` by (1 + adjustment%/100) when sentiment is confident enough."""
    if sentiment is None or sentiment.confidence < SENTIMENT_CONFIDENCE_THRESHOLD:
        return value
    return value * (1 + sentiment.adjustment_percent / 100)


class SentimentService:
    """
    Attributes:
        feed (BaseFeed): Headline source.
        model (KeywordSentimentModel): Scorer.
        cache (TTLCache): Shared single-entry cache; pass the same instance to
            every chart that should see the same sentiment.
        timeout (float): Upper bound for one headline fetch.
    """

    def __init__(
        self,
        feed: BaseFeed,
        model: Optional[KeywordSentimentModel] = None,
        cache: Optional[TTLCache] = None,
        timeout: float = 10.0,
        error_logger: Optional[ErrorLogger] = None,
    ):
        self.feed = feed
        self.model = model or KeywordSentimentModel()
        self.cache = cache if cache is not None else TTLCache("sentiment", ttl=SENTIMENT_TTL_SECONDS, max_items=1)
        self.timeout = timeout
        self.error_logger = error_logger or ErrorLogger(ErrorComponent.SENTIMENT_SERVICE)
        self._refresh_lock: Optional[asyncio.Lock] = None

    async def refresh(self) -> SentimentResult:
        """
        Return the cached result while fresh, otherwise fetch and analyse.
        Concurrent callers share one in-flight fetch.
        """
        cached = self.cache.get(CACHE_KEY)
        if cached is not None:
            return cached

        if self._refresh_lock is None:
            self._refresh_lock = asyncio.Lock()
        async with self._refresh_lock:
            # Another caller may have refreshed while we waited
            cached = self.cache.get(CACHE_KEY)
            if cached is not None:
                return cached
            return await self._fetch_and_analyze()

    async def _fetch_and_analyze(self) -> SentimentResult:
        try:
            headlines = await asyncio.wait_for(self.feed.fetch_data(), timeout=self.timeout)
        except asyncio.TimeoutError:
            return self._fallback(FallbackReason.TIMEOUT, SourceTimeoutError(self.feed.source_name, self.timeout))
        except DataSourceError as exc:
            return self._fallback(reason_for(exc), exc)
        except Exception as exc:
            return self._fallback(FallbackReason.UNKNOWN, exc)

        if not self.feed.validate_data(headlines):
            return self._fallback(FallbackReason.EMPTY_PAYLOAD)

        result = self.model.analyze(headlines)
        if not result.headlines:
            return self._fallback(FallbackReason.EMPTY_PAYLOAD)

        self.cache.set(CACHE_KEY, result)
        logger.info(
            f"Sentiment refreshed: score={result.score:.3f} adj={result.adjustment_percent:+.2f}% "
            f"confidence={result.confidence:.2f} ({result.category.value})"
        )
        return result

    def _fallback(self, reason: FallbackReason, exception: Optional[Exception] = None) -> SentimentResult:
        if self.cache.peek(CACHE_KEY) is not None:
            self.error_logger.log_fallback(
                reason=reason,
                exception=exception,
                context={"feed": self.feed.source_name},
                fallback_action="Serving last sentiment at half confidence",
            )
            return self._degraded()

        self.error_logger.log_fallback(
            reason=reason,
            exception=exception,
            context={"feed": self.feed.source_name},
            fallback_action="Serving neutral zero-confidence sentiment",
        )
        return SentimentResult.neutral()

    def latest(self) -> SentimentResult:
        """
        Current sentiment without I/O: the fresh result, an expired one at half
        confidence, or neutral when nothing is cached.
        """
        fresh = self.cache.get(CACHE_KEY)
        if fresh is not None:
            return fresh
        return self._degraded()

    def _degraded(self) -> SentimentResult:
        stale = self.cache.peek(CACHE_KEY)
        if stale is None:
            return SentimentResult.neutral()
        return replace(stale, confidence=stale.confidence * STALE_CONFIDENCE_FACTOR)

    def clear(self) -> None:
        """Drop the cached result so the next refresh fetches."""
        self.cache.invalidate(CACHE_KEY)
