# goldcast/data/providers/intraday_chart.py
"""
Secondary source: futures/FX intraday chart (market hours only, so gaps).

Payload shape::

    {"timestamp": [epoch_s, ...],
     "indicators": {"quote": [{"open": [...], "high": [...], "low": [...],
                               "close": [...], "volume": [...]}]}}

optionally wrapped in the provider envelope ``{"chart": {"result": [ ... ]}}``.
"""

from datetime import datetime, timezone
from typing import Any, List, Optional, Sequence

from goldcast.config.timeframes import Timeframe, get_timeframe_spec
from goldcast.data.errors import EmptyPayloadError, MalformedPayloadError
from goldcast.data.providers.base_provider import BaseQuoteProvider
from goldcast.schemas.price import DataSource, PricePoint, is_valid_close


def _value_at(values: Optional[Sequence[Any]], index: int) -> float:
    if not values or index >= len(values) or values[index] is None:
        return 0.0
    return float(values[index])


class IntradayChartProvider(BaseQuoteProvider):

    source = DataSource.INTRADAY_CHART

    def __init__(self, fetcher, base_url: str, ticker: str = "GC=F", **kwargs):
        super().__init__(fetcher, base_url, **kwargs)
        self.ticker = ticker

    async def fetch_payload(self, timeframe: Timeframe) -> Any:
        spec = get_timeframe_spec(timeframe)
        url = f"{self.base_url}/{self.ticker}"
        params = {"interval": spec.secondary_interval, "range": spec.secondary_range}
        return await self.fetcher.get_json(url, params=params, timeout=self.timeout)

    def _unwrap(self, payload: Any) -> dict:
        if isinstance(payload, dict) and "chart" in payload:
            results = (payload.get("chart") or {}).get("result") or []
            if not results:
                raise EmptyPayloadError(self.source_name, "Chart envelope has no result")
            payload = results[0]
        if not isinstance(payload, dict):
            raise MalformedPayloadError(self.source_name, "Chart payload is not an object")
        return payload

    def parse_payload(self, payload: Any) -> List[PricePoint]:
        result = self._unwrap(payload)
        timestamps = result.get("timestamp")
        quotes = (result.get("indicators") or {}).get("quote")
        if not isinstance(timestamps, list) or not isinstance(quotes, list) or not quotes:
            raise MalformedPayloadError(self.source_name, "Missing 'timestamp' or 'indicators.quote'")

        quote = quotes[0] or {}
        closes = quote.get("close")
        if not isinstance(closes, list):
            raise MalformedPayloadError(self.source_name, "Missing 'close' column")

        points: List[PricePoint] = []
        for i, ts in enumerate(timestamps):
            try:
                close = _value_at(closes, i)
                if ts is None or not is_valid_close(close):
                    continue
                point = PricePoint(
                    timestamp=datetime.fromtimestamp(float(ts), tz=timezone.utc),
                    open=_value_at(quote.get("open"), i),
                    high=_value_at(quote.get("high"), i),
                    low=_value_at(quote.get("low"), i),
                    close=close,
                    volume=_value_at(quote.get("volume"), i),
                )
            except (TypeError, ValueError) as exc:
                raise MalformedPayloadError(self.source_name, f"Bad row at index {i}") from exc
            points.append(point)
        return points
