from datetime import timedelta

import pytest

from goldcast.config.timeframes import Timeframe
from goldcast.models.regression import RegressionResult
from goldcast.models.slope_blender import SlopeBlender, blend_slopes, rescale_slope


def _fit(slope: float) -> RegressionResult:
    return RegressionResult(slope=slope, intercept=0.0, r_squared=0.5)


def test_endpoints_are_exact():
    assert blend_slopes(0.123456789, 9.87654321, 1.0) == 0.123456789
    assert blend_slopes(0.123456789, 9.87654321, 0.0) == 9.87654321


def test_midpoint_mix():
    assert blend_slopes(1.0, 3.0, 0.5) == pytest.approx(2.0)


@pytest.mark.parametrize("weight", [-0.1, 1.1])
def test_weight_out_of_range(weight):
    with pytest.raises(ValueError):
        blend_slopes(1.0, 1.0, weight)


def test_rescale_hourly_slope_to_two_minutes():
    assert rescale_slope(6.0, timedelta(hours=1), timedelta(minutes=2)) == pytest.approx(0.2)


def test_rescale_rejects_zero_interval():
    with pytest.raises(ValueError):
        rescale_slope(1.0, timedelta(0), timedelta(minutes=2))


def test_one_hour_blend_uses_thirty_percent_local():
    blended = SlopeBlender().blend(_fit(1.0), _fit(6.0), Timeframe.ONE_HOUR)
    assert blended.local_weight == 0.3
    assert blended.rescaled_global_slope == pytest.approx(0.2)
    assert blended.slope == pytest.approx(0.3 * 1.0 + 0.7 * 0.2)


def test_one_day_blend():
    blended = SlopeBlender().blend(_fit(2.0), _fit(4.0), Timeframe.ONE_DAY)
    assert blended.slope == pytest.approx(0.7 * 2.0 + 0.3 * 1.0)


def test_seven_day_blend_returns_local_slope():
    blended = SlopeBlender().blend(_fit(0.75), _fit(-3.0), Timeframe.SEVEN_DAYS)
    assert blended.slope == 0.75
