# goldcast/data/orchestrator.py
"""
Quote Source Orchestrator

Resolves "give me the series for this symbol and timeframe" against an
ordered list of sources:

    1) primary source (24/7 market chart), bounded by a timeout
    2) secondary source (intraday futures chart), same contract
    3) last known-good series for the exact (timeframe, symbol set) key
    4) NoDataAvailableError

A source counts only if it yields more than five valid points. Per-key
circuit breaking skips steps 1-2 entirely after repeated failures so a dead
upstream does not get hammered every refresh.
"""

import asyncio
from typing import Iterable, Optional, Sequence

from goldcast.config.timeframes import Timeframe
from goldcast.data.circuit_breaker import CircuitBreaker
from goldcast.data.errors import DataSourceError, NoDataAvailableError, SourceTimeoutError
from goldcast.data.providers.base_provider import BaseQuoteProvider
from goldcast.monitoring.error_logging import (
    ErrorComponent,
    ErrorLogger,
    FallbackReason,
    reason_for,
)
from goldcast.schemas.price import TimeSeries
from goldcast.utils.cache_manager import TTLCache
from goldcast.utils.logger import get_logger

logger = get_logger(__name__)


def request_key(symbols: Iterable[str]) -> str:
    """Sorted, de-duplicated, comma-joined symbol set."""
    return ",".join(sorted(set(symbols)))


class QuoteSourceOrchestrator:
    """
    Attributes:
        providers (Sequence[BaseQuoteProvider]): Sources in priority order.
        last_good (TTLCache): Shared last-known-good series per (timeframe, key).
        breaker (CircuitBreaker): Per-key failure tracking.
        timeout (float): Upper bound in seconds for each source call.
    """

    def __init__(
        self,
        providers: Sequence[BaseQuoteProvider],
        last_good: Optional[TTLCache] = None,
        breaker: Optional[CircuitBreaker] = None,
        timeout: float = 10.0,
        error_logger: Optional[ErrorLogger] = None,
    ):
        if not providers:
            raise ValueError("At least one quote provider is required")
        self.providers = list(providers)
        self.last_good = last_good if last_good is not None else TTLCache("last_good_series")
        self.breaker = breaker or CircuitBreaker()
        self.timeout = timeout
        self.error_logger = error_logger or ErrorLogger(ErrorComponent.ORCHESTRATOR)

    @staticmethod
    def cache_key(timeframe: Timeframe, key: str) -> str:
        return f"{Timeframe(timeframe).value}|{key}"

    async def fetch_series(
        self,
        symbol: str,
        timeframe: Timeframe,
        symbols: Optional[Iterable[str]] = None,
        record_outcome: bool = True,
    ) -> TimeSeries:
        """
        Return the freshest series available for ``symbol`` at ``timeframe``.

        Args:
            symbol (str): Series identifier stamped on the result.
            timeframe (Timeframe): Display timeframe.
            symbols (Iterable[str], optional): Full requested symbol set used for
                the breaker/cache key; defaults to ``[symbol]``.
            record_outcome (bool): Whether this call counts toward the breaker.
                A refresh cycle that fetches several windows for the same key
                reports through one call only, so the breaker counts cycles.

        Raises:
            NoDataAvailableError: All sources failed and nothing is cached.
        """
        timeframe = Timeframe(timeframe)
        key = request_key(symbols or [symbol])
        context = {"key": key, "timeframe": timeframe.value}

        if not self.breaker.allow_request(key, claim_trial=record_outcome):
            self.error_logger.log_fallback(
                reason=FallbackReason.CIRCUIT_OPEN,
                context=context,
                fallback_action="Skipping network, serving last known-good series",
            )
            return self._from_cache(timeframe, key)

        try:
            series = await self._first_valid(symbol, timeframe, context)
        except asyncio.CancelledError:
            if record_outcome:
                self.breaker.release_trial(key)
            raise

        if series is None:
            if record_outcome:
                self.breaker.record_failure(key)
            return self._from_cache(timeframe, key)

        self.last_good.set(self.cache_key(timeframe, key), series)
        if record_outcome:
            self.breaker.record_success(key)
        logger.info(
            f"Series for '{key}' ({timeframe.value}) from {series.source.value}: {len(series)} points"
        )
        return series

    async def _first_valid(self, symbol: str, timeframe: Timeframe, context: dict) -> Optional[TimeSeries]:
        """First provider result that passes validation, or None when all fail."""
        for provider in self.providers:
            try:
                return await self._fetch_with_timeout(provider, symbol, timeframe)
            except DataSourceError as exc:
                self.error_logger.log_fallback(
                    reason=reason_for(exc),
                    exception=exc,
                    context={**context, "source": provider.source_name},
                    fallback_action="Trying next source",
                )
            except Exception as exc:
                self.error_logger.log_fallback(
                    reason=FallbackReason.UNKNOWN,
                    exception=exc,
                    context={**context, "source": provider.source_name},
                    fallback_action="Trying next source",
                )
        return None

    async def _fetch_with_timeout(
        self, provider: BaseQuoteProvider, symbol: str, timeframe: Timeframe
    ) -> TimeSeries:
        try:
            return await asyncio.wait_for(provider.fetch(symbol, timeframe), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            raise SourceTimeoutError(provider.source_name, self.timeout) from exc

    def _from_cache(self, timeframe: Timeframe, key: str) -> TimeSeries:
        cached = self.last_good.get(self.cache_key(timeframe, key))
        context = {"key": key, "timeframe": timeframe.value}
        if cached is None:
            self.error_logger.log_fallback(
                reason=FallbackReason.NO_DATA,
                context=context,
                fallback_action="Surfacing no-data error",
            )
            raise NoDataAvailableError(key, timeframe.value)

        self.error_logger.log_fallback(
            reason=FallbackReason.CACHE_SERVED,
            context={**context, "source": cached.source.value, "points": len(cached)},
            fallback_action="Serving last known-good series",
        )
        return cached.mark_cached()
