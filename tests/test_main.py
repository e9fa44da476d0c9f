import json
import sys
from unittest.mock import AsyncMock, patch

import pytest

import main
from goldcast.config.timeframes import Timeframe
from goldcast.pipeline.chart_pipeline import RefreshResult
from goldcast.pipeline.factory import build_components
from tests.mocks.fakes import FakeFetcher, intraday_chart_payload, market_chart_payload


@pytest.fixture(autouse=True)
def reset_sys_argv():
    """Reset sys.argv after each test to avoid bleed-over."""
    old_argv = sys.argv.copy()
    yield
    sys.argv = old_argv


def _fake_components(config):
    fetcher = FakeFetcher(
        {
            "market_chart": market_chart_payload([2300.0 + i for i in range(30)]),
            "GC=F": intraday_chart_payload([2300.0] * 30),
            "gdelt": {"articles": [{"title": "Dollar rally and rate hike pressure gold"}]},
        }
    )
    return build_components(config, fetcher=fetcher)


def test_validate_config_path_file_not_found(tmp_path):
    with pytest.raises(FileNotFoundError):
        main.validate_config_path(str(tmp_path / "missing.yaml"))


def test_snapshot_missing_config_is_fatal(tmp_path):
    sys.argv = ["main.py", "snapshot", "--config", str(tmp_path / "missing.yaml")]
    with pytest.raises(FileNotFoundError):
        main.main()


@patch("main.run_snapshot", new_callable=AsyncMock)
def test_snapshot_prints_json(mock_snapshot, tmp_path):
    config_file = tmp_path / "goldcast.yaml"
    config_file.write_text("pipeline:\n  default_timeframe: 6h\n")
    mock_snapshot.return_value = RefreshResult(
        timeframe=Timeframe.SIX_HOURS, error="No price data available", retryable=True
    )
    sys.argv = ["main.py", "snapshot", "--config", str(config_file)]

    with patch("builtins.print") as mock_print:
        main.main()

    config, timeframe = mock_snapshot.await_args.args
    assert timeframe is Timeframe.SIX_HOURS
    assert config.pipeline.default_timeframe is Timeframe.SIX_HOURS
    printed = json.loads(mock_print.call_args.args[0])
    assert printed["timeframe"] == "6h"
    assert printed["retryable"] is True


@patch("main.run_watch", new_callable=AsyncMock)
def test_watch_dispatches_with_cycles(mock_watch):
    sys.argv = ["main.py", "watch", "--timeframe", "7d", "--cycles", "2"]
    main.main()
    args, kwargs = mock_watch.await_args
    assert args[1] is Timeframe.SEVEN_DAYS
    assert kwargs == {"cycles": 2}


@pytest.mark.asyncio
async def test_run_snapshot_end_to_end():
    config = main.AppConfig()
    with patch("main.build_components", side_effect=_fake_components):
        result = await main.run_snapshot(config, Timeframe.ONE_HOUR)

    assert result.ok
    assert result.sentiment.summary.startswith("Bearish for gold")
    assert "market_chart" in main.format_result(result)


@pytest.mark.asyncio
async def test_run_watch_stops_after_cycles():
    config = main.AppConfig()
    with patch("main.build_components", side_effect=_fake_components):
        seen = await main.run_watch(config, Timeframe.ONE_HOUR, cycles=1)
    assert seen == 1


def test_format_result_for_error():
    line = main.format_result(RefreshResult(timeframe=Timeframe.ONE_HOUR, error="down", retryable=True))
    assert "no data" in line and "retryable=True" in line
