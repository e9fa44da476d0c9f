# goldcast/models/slope_blender.py
"""
Blends the short-window ("local") regression slope with the long-window
("global") reference slope.

The global slope is measured per global sample (1 hour for the 7d reference),
so it is first rescaled to the active timeframe's point spacing:

    rescaled_global = global_slope * (active_interval / global_interval)
    blended         = local * w + rescaled_global * (1 - w)

where ``w`` is the timeframe's local weight from the timeframe table.
"""

from dataclasses import dataclass
from datetime import timedelta

from goldcast.config.timeframes import (
    REFERENCE_TIMEFRAME,
    Timeframe,
    get_timeframe_spec,
)
from goldcast.models.regression import RegressionResult
from goldcast.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class BlendedSlope:
    slope: float
    local_slope: float
    rescaled_global_slope: float
    local_weight: float


def rescale_slope(slope: float, from_interval: timedelta, to_interval: timedelta) -> float:
    """Convert a per-``from_interval`` slope into a per-``to_interval`` slope."""
    if from_interval.total_seconds() <= 0:
        raise ValueError("from_interval must be positive")
    return slope * (to_interval.total_seconds() / from_interval.total_seconds())


def blend_slopes(local_slope: float, rescaled_global_slope: float, local_weight: float) -> float:
    """Weighted mix; exact at the endpoints (w=1 -> local, w=0 -> global)."""
    if not 0.0 <= local_weight <= 1.0:
        raise ValueError(f"local_weight must be within [0, 1], got {local_weight}")
    if local_weight == 1.0:
        return local_slope
    if local_weight == 0.0:
        return rescaled_global_slope
    return local_slope * local_weight + rescaled_global_slope * (1.0 - local_weight)


class SlopeBlender:
    """
    Applies the per-timeframe blend using the timeframe table.

    Args:
        global_interval (timedelta): Sampling interval of the global regression.
            Defaults to the reference timeframe's interval.
    """

    def __init__(self, global_interval: timedelta = None):
        self.global_interval = global_interval or get_timeframe_spec(REFERENCE_TIMEFRAME).interval

    def blend(
        self,
        local: RegressionResult,
        global_reference: RegressionResult,
        timeframe: Timeframe,
    ) -> BlendedSlope:
        spec = get_timeframe_spec(timeframe)
        rescaled = rescale_slope(global_reference.slope, self.global_interval, spec.interval)
        slope = blend_slopes(local.slope, rescaled, spec.local_weight)
        logger.debug(
            f"Blend {Timeframe(timeframe).value}: local={local.slope:.5f} "
            f"global(rescaled)={rescaled:.5f} w={spec.local_weight} -> {slope:.5f}"
        )
        return BlendedSlope(
            slope=slope,
            local_slope=local.slope,
            rescaled_global_slope=rescaled,
            local_weight=spec.local_weight,
        )
