# goldcast/predictor/quick_stats.py
"""
Quick-Stats Aggregator

Realized 24h / weekly statistics from the long reference window. The window is
fetched independently of the chart's active timeframe so the numbers do not
jump when the user switches zoom.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import pandas as pd

from goldcast.schemas.prediction import QuickStats, classify_trend
from goldcast.schemas.price import TimeSeries
from goldcast.utils.logger import get_logger

logger = get_logger(__name__)

# Realized movement; coarser than the projection threshold.
QUICK_STATS_TREND_THRESHOLD = 0.3
WEEK = timedelta(days=7)
DAY = timedelta(hours=24)


def compute_quick_stats(series: Optional[TimeSeries], now: Optional[datetime] = None) -> Optional[QuickStats]:
    """
    Args:
        series (TimeSeries): Long reference window (trailing 7 days).
        now (datetime, optional): Reference time for the 24h / 7d cut-offs.
            Defaults to the current UTC time.

    Returns:
        QuickStats, or None when the window is empty.
    """
    if series is None or len(series) == 0:
        return None

    now = pd.Timestamp(now or datetime.now(timezone.utc))
    if now.tzinfo is None:
        now = now.tz_localize("UTC")
    df = series.to_frame()
    current_price = float(df["close"].iloc[-1])

    weekly = df[df.index >= now - WEEK]
    highs = weekly["high"][weekly["high"] > 0]
    lows = weekly["low"][weekly["low"] > 0]
    weekly_high = float(highs.max()) if not highs.empty else current_price
    weekly_low = float(lows.min()) if not lows.empty else current_price

    last_day = df[df.index >= now - DAY]
    change_24h = 0.0
    change_percent_24h = 0.0
    if not last_day.empty:
        first_close = float(last_day["close"].iloc[0])
        current_price = float(last_day["close"].iloc[-1])
        change_24h = current_price - first_close
        change_percent_24h = change_24h / first_close * 100
    else:
        logger.info("No 24h slice in reference window; reporting latest price with zero change")

    return QuickStats(
        current_price=current_price,
        change_24h=change_24h,
        change_percent_24h=change_percent_24h,
        weekly_high=weekly_high,
        weekly_low=weekly_low,
        trend=classify_trend(change_percent_24h, QUICK_STATS_TREND_THRESHOLD),
    )
