# goldcast/data/providers/market_chart.py
"""
Primary source: 24/7 asset market chart.

Payload shape: ``{"prices": [[timestamp_ms, price], ...], ...}``. Only the
price column is used; every point gets open=high=low=close=price, volume 0.
"""

from datetime import datetime, timezone
from typing import Any, List

from goldcast.config.timeframes import Timeframe, get_timeframe_spec
from goldcast.data.errors import MalformedPayloadError
from goldcast.data.providers.base_provider import BaseQuoteProvider
from goldcast.schemas.price import DataSource, PricePoint, is_valid_close


class MarketChartProvider(BaseQuoteProvider):

    source = DataSource.MARKET_CHART

    def __init__(self, fetcher, base_url: str, coin_id: str = "tether-gold", vs_currency: str = "usd", **kwargs):
        super().__init__(fetcher, base_url, **kwargs)
        self.coin_id = coin_id
        self.vs_currency = vs_currency

    async def fetch_payload(self, timeframe: Timeframe) -> Any:
        spec = get_timeframe_spec(timeframe)
        url = f"{self.base_url}/coins/{self.coin_id}/market_chart"
        params = {"vs_currency": self.vs_currency, "days": str(spec.primary_days)}
        return await self.fetcher.get_json(url, params=params, timeout=self.timeout)

    def parse_payload(self, payload: Any) -> List[PricePoint]:
        if not isinstance(payload, dict) or not isinstance(payload.get("prices"), list):
            raise MalformedPayloadError(self.source_name, "Missing 'prices' array")

        points: List[PricePoint] = []
        for row in payload["prices"]:
            if not isinstance(row, (list, tuple)) or len(row) < 2:
                raise MalformedPayloadError(self.source_name, f"Bad price row: {row!r}")
            timestamp_ms, price = row[0], row[1]
            if timestamp_ms is None or price is None:
                continue
            try:
                price = float(price)
                timestamp = datetime.fromtimestamp(float(timestamp_ms) / 1000.0, tz=timezone.utc)
            except (TypeError, ValueError) as exc:
                raise MalformedPayloadError(self.source_name, f"Bad price row: {row!r}") from exc
            if not is_valid_close(price):
                continue
            points.append(
                PricePoint(timestamp=timestamp, open=price, high=price, low=price, close=price, volume=0.0)
            )
        return points
