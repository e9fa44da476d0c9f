# goldcast/features/market_sentiment/feeds/news_feed.py
"""
Headline search feed.

Payload shape: ``{"articles": [{"title": "...", ...}, ...]}``. Titles shorter
than 10 characters are dropped, at most ``max_records`` are kept.
"""

from typing import Any, List

from goldcast.data.errors import MalformedPayloadError
from goldcast.data.fetcher import Fetcher
from goldcast.features.market_sentiment.feeds.base_feed import BaseFeed
from goldcast.features.market_sentiment.sentiment.sentiment_model import MIN_HEADLINE_LENGTH

DEFAULT_QUERY = 'gold OR XAUUSD OR "gold price" OR geopolitical OR "Federal Reserve" OR inflation'


class NewsFeed(BaseFeed):
    """
    Fetches recent headlines relevant to gold from a news search endpoint.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        news_url: str,
        query: str = DEFAULT_QUERY,
        max_records: int = 30,
        timeout: float = 10.0,
    ) -> None:
        super().__init__(source_name="NewsFeed")
        self.fetcher = fetcher
        self.news_url = news_url
        self.query = query
        self.max_records = max_records
        self.timeout = timeout

    async def fetch_data(self) -> List[str]:
        params = {
            "query": self.query,
            "mode": "artlist",
            "maxrecords": str(self.max_records),
            "format": "json",
        }
        payload = await self.fetcher.get_json(self.news_url, params=params, timeout=self.timeout)
        headlines = self.parse_payload(payload)
        self.log_fetch(len(headlines))
        return headlines

    def parse_payload(self, payload: Any) -> List[str]:
        if not isinstance(payload, dict):
            raise MalformedPayloadError(self.source_name, "News payload is not an object")
        articles = payload.get("articles") or []
        if not isinstance(articles, list):
            raise MalformedPayloadError(self.source_name, "'articles' is not a list")

        headlines = [
            article.get("title")
            for article in articles
            if isinstance(article, dict)
            and isinstance(article.get("title"), str)
            and len(article["title"]) >= MIN_HEADLINE_LENGTH
        ]
        return headlines[: self.max_records]
