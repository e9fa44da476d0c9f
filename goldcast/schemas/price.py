# goldcast/schemas/price.py
import math
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Iterable, List, Optional, Tuple

import pandas as pd


def is_valid_close(value: Optional[float]) -> bool:
    """Finite and strictly positive. NaN and infinity are rejected."""
    return value is not None and math.isfinite(value) and value > 0


class DataSource(str, Enum):
    """Where a series came from."""
    MARKET_CHART = "market_chart"      # 24/7 asset market chart (primary)
    INTRADAY_CHART = "intraday_chart"  # futures/FX intraday chart (fallback, market hours)


@dataclass(frozen=True)
class PricePoint:
    """
    One OHLCV sample.

    Attributes:
        timestamp (datetime): Timezone-aware sample time (UTC).
        open, high, low, close (float): Prices; ``close`` must be finite and > 0 to enter a series.
        volume (float): Traded volume, 0 when the source has none.
    """
    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0


@dataclass(frozen=True)
class TimeSeries:
    """
    Ordered, de-duplicated price history for one symbol from one source.

    Built through ``from_points`` which sorts, drops duplicate timestamps (last
    one wins) and rejects non-positive or non-finite closes. A series is always replaced whole
    on refresh, never merged into.
    """
    symbol: str
    source: DataSource
    points: Tuple[PricePoint, ...] = field(default_factory=tuple)
    from_cache: bool = False

    def __post_init__(self):
        previous = None
        for point in self.points:
            if not is_valid_close(point.close):
                raise ValueError(f"Non-positive or non-finite close in series at {point.timestamp}")
            if previous is not None and point.timestamp <= previous.timestamp:
                raise ValueError("Series timestamps must be strictly ascending")
            previous = point

    @classmethod
    def from_points(
        cls, points: Iterable[PricePoint], source: DataSource, symbol: str
    ) -> "TimeSeries":
        by_timestamp = {}
        for point in points:
            if not is_valid_close(point.close):
                continue
            by_timestamp[point.timestamp] = point
        ordered = tuple(by_timestamp[ts] for ts in sorted(by_timestamp))
        return cls(symbol=symbol, source=source, points=ordered)

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self):
        return iter(self.points)

    @property
    def first(self) -> Optional[PricePoint]:
        return self.points[0] if self.points else None

    @property
    def last(self) -> Optional[PricePoint]:
        return self.points[-1] if self.points else None

    def closes(self) -> List[float]:
        return [p.close for p in self.points]

    def mark_cached(self) -> "TimeSeries":
        return replace(self, from_cache=True)

    def to_frame(self) -> pd.DataFrame:
        """DataFrame indexed by timestamp with open/high/low/close/volume columns."""
        columns = ["open", "high", "low", "close", "volume"]
        if not self.points:
            return pd.DataFrame(columns=columns, index=pd.DatetimeIndex([], tz="UTC", name="timestamp"))
        df = pd.DataFrame(
            [(p.timestamp, p.open, p.high, p.low, p.close, p.volume) for p in self.points],
            columns=["timestamp"] + columns,
        )
        df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True)
        return df.set_index("timestamp")
