# goldcast/features/market_sentiment/feeds/base_feed.py
import abc
from typing import List

from goldcast.utils.logger import get_logger

logger = get_logger("feeds")


class BaseFeed(abc.ABC):
    """
    Abstract base class for headline feeds.
    Defines the common interface for fetching and validating headlines.
    """

    def __init__(self, source_name: str):
        """
        Args:
            source_name (str): Name of the data source
        """
        self.source_name = source_name

    @abc.abstractmethod
    async def fetch_data(self) -> List[str]:
        """
        Fetch headlines from the source.
        Returns:
            List[str]: Headline titles
        Raises:
            DataSourceError: On timeout, transport or payload problems.
        """
        pass

    def validate_data(self, data: List[str]) -> bool:
        """
        True when at least one headline came back.
        """
        if not data:
            logger.warning(f"{self.source_name}: no headlines fetched.")
            return False
        return True

    def log_fetch(self, count: int):
        logger.info(f"{self.source_name}: Fetched {count} items")
