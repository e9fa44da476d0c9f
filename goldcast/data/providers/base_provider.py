# goldcast/data/providers/base_provider.py
import abc
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, List, Optional

from goldcast.config.timeframes import Timeframe, get_timeframe_spec
from goldcast.data.errors import EmptyPayloadError, InsufficientHistoryError
from goldcast.data.fetcher import Fetcher
from goldcast.schemas.price import DataSource, PricePoint, TimeSeries
from goldcast.utils.logger import get_logger

logger = get_logger("providers")

# A source must yield more than this many valid points to be accepted.
MIN_VALID_POINTS = 5
# Points kept when the display window is empty (stale or market-closed data).
STALE_TAIL_POINTS = 60


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def trim_to_window(
    points: List[PricePoint],
    window: timedelta,
    now: datetime,
    fallback_tail: int = STALE_TAIL_POINTS,
) -> List[PricePoint]:
    """
    Keep points inside ``[now - window, now]``-ish (anything newer than the cutoff).
    If nothing falls in the window, keep the most recent ``fallback_tail`` points.
    """
    cutoff = now - window
    recent = [p for p in points if p.timestamp >= cutoff]
    return recent if recent else points[-fallback_tail:]


class BaseQuoteProvider(abc.ABC):
    """
    Abstract base class for all price sources.
    Subclasses build the request and parse the payload; the base class handles
    normalization, window trimming and the minimum-points contract.
    """

    source: DataSource

    def __init__(
        self,
        fetcher: Fetcher,
        base_url: str,
        timeout: float = 10.0,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Args:
            fetcher (Fetcher): Caller-supplied transport.
            base_url (str): Root URL of the source.
            timeout (float): Per-request timeout in seconds.
            clock (Callable[[], datetime]): "now" for window trimming; UTC wall clock by default.
        """
        self.fetcher = fetcher
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.clock = clock or utc_now

    @property
    def source_name(self) -> str:
        return self.source.value

    @abc.abstractmethod
    async def fetch_payload(self, timeframe: Timeframe) -> Any:
        """
        Fetch the raw JSON payload for a timeframe.
        """
        pass

    @abc.abstractmethod
    def parse_payload(self, payload: Any) -> List[PricePoint]:
        """
        Convert a raw payload to price points.
        Raises:
            MalformedPayloadError: Expected fields missing.
        """
        pass

    async def fetch(self, symbol: str, timeframe: Timeframe) -> TimeSeries:
        """
        Fetch, normalize and validate a series for ``timeframe``.

        Raises:
            DataSourceError: Any subclass; the caller decides on fallback.
        """
        timeframe = Timeframe(timeframe)
        payload = await self.fetch_payload(timeframe)
        raw_points = self.parse_payload(payload)
        if not raw_points:
            raise EmptyPayloadError(self.source_name, f"No prices from {self.source_name}")

        series = TimeSeries.from_points(raw_points, source=self.source, symbol=symbol)
        if len(series) == 0:
            raise EmptyPayloadError(self.source_name, f"No valid prices from {self.source_name}")

        window = get_timeframe_spec(timeframe).window
        trimmed = trim_to_window(list(series.points), window, self.clock())
        series = TimeSeries(symbol=symbol, source=self.source, points=tuple(trimmed))
        self.validate(series)
        self.log_fetch(len(series), timeframe)
        return series

    def validate(self, series: TimeSeries) -> None:
        if len(series) <= MIN_VALID_POINTS:
            raise InsufficientHistoryError(self.source_name, len(series), MIN_VALID_POINTS)

    def log_fetch(self, count: int, timeframe: Timeframe):
        logger.info(f"{self.source_name}: fetched {count} points ({timeframe.value})")
