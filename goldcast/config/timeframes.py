# goldcast/config/timeframes.py
"""
Display timeframes and their fixed prediction parameters.

Every number in ``TIMEFRAME_TABLE`` is configuration data carried over for
behavioural compatibility. The blend weights in particular were hand-tuned and
have no derivation; change them only deliberately.

Columns:
    lookback           Most recent closes used for the local regression.
    projection_points  Future points emitted after the anchor.
    interval           Point-to-point spacing of the series (and projections).
    window             Display window trimmed back from "now".
    local_weight       Share of the local slope kept when blending with the
                       rescaled global slope (1.0 = global reference itself).
    primary_days       ``days`` query parameter for the market-chart source.
    secondary_interval / secondary_range
                       ``interval`` / ``range`` for the intraday-chart source.
"""

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Dict


class Timeframe(str, Enum):
    """Closed set of chart display timeframes."""
    ONE_HOUR = "1h"
    SIX_HOURS = "6h"
    ONE_DAY = "24h"
    SEVEN_DAYS = "7d"


@dataclass(frozen=True)
class TimeframeSpec:
    lookback: int
    projection_points: int
    interval: timedelta
    window: timedelta
    local_weight: float
    primary_days: int
    secondary_interval: str
    secondary_range: str


TIMEFRAME_TABLE: Dict[Timeframe, TimeframeSpec] = {
    # 3 x 2min = 6min ahead, 30% local / 70% global
    Timeframe.ONE_HOUR: TimeframeSpec(
        lookback=30,
        projection_points=3,
        interval=timedelta(minutes=2),
        window=timedelta(hours=1),
        local_weight=0.3,
        primary_days=1,
        secondary_interval="2m",
        secondary_range="1d",
    ),
    # 3 x 5min = 15min ahead, 50% / 50%
    Timeframe.SIX_HOURS: TimeframeSpec(
        lookback=40,
        projection_points=3,
        interval=timedelta(minutes=5),
        window=timedelta(hours=6),
        local_weight=0.5,
        primary_days=1,
        secondary_interval="5m",
        secondary_range="1d",
    ),
    # 3 x 15min = 45min ahead, 70% / 30%
    Timeframe.ONE_DAY: TimeframeSpec(
        lookback=48,
        projection_points=3,
        interval=timedelta(minutes=15),
        window=timedelta(hours=24),
        local_weight=0.7,
        primary_days=1,
        secondary_interval="15m",
        secondary_range="1d",
    ),
    # 3 x 1hr = 3hr ahead, this IS the global reference
    Timeframe.SEVEN_DAYS: TimeframeSpec(
        lookback=50,
        projection_points=3,
        interval=timedelta(hours=1),
        window=timedelta(days=7),
        local_weight=1.0,
        primary_days=7,
        secondary_interval="1h",
        secondary_range="5d",
    ),
}

# Longest window; its regression is the global reference slope.
REFERENCE_TIMEFRAME = Timeframe.SEVEN_DAYS


def get_timeframe_spec(timeframe: Timeframe) -> TimeframeSpec:
    """Look up the parameter row for a timeframe (accepts the raw string too)."""
    return TIMEFRAME_TABLE[Timeframe(timeframe)]
