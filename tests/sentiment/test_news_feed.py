import pytest

from goldcast.data.errors import MalformedPayloadError
from goldcast.features.market_sentiment.feeds.news_feed import NewsFeed
from tests.mocks.fakes import FakeFetcher

NEWS_URL = "https://news.test/api/v2/doc/doc"


@pytest.mark.asyncio
async def test_fetch_data_returns_titles_and_sends_query():
    payload = {
        "articles": [
            {"title": "Gold rally extends as dollar weakens", "url": "a"},
            {"title": "Too short"},
            {"url": "no title"},
            {"title": "Fed pause expected next month"},
        ]
    }
    fetcher = FakeFetcher({"news.test": payload})
    feed = NewsFeed(fetcher, NEWS_URL, query="gold", max_records=5)

    headlines = await feed.fetch_data()

    assert headlines == ["Gold rally extends as dollar weakens", "Fed pause expected next month"]
    params = fetcher.calls[0]["params"]
    assert params == {"query": "gold", "mode": "artlist", "maxrecords": "5", "format": "json"}


def test_parse_caps_at_max_records():
    feed = NewsFeed(FakeFetcher(), NEWS_URL, max_records=2)
    payload = {"articles": [{"title": f"Headline number {i}"} for i in range(5)]}
    assert len(feed.parse_payload(payload)) == 2


def test_missing_articles_is_empty():
    feed = NewsFeed(FakeFetcher(), NEWS_URL)
    assert feed.parse_payload({}) == []
    assert not feed.validate_data([])


@pytest.mark.parametrize("payload", [[], "text", {"articles": "nope"}])
def test_malformed_payloads(payload):
    feed = NewsFeed(FakeFetcher(), NEWS_URL)
    with pytest.raises(MalformedPayloadError):
        feed.parse_payload(payload)
