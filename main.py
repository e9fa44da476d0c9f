"""
Central CLI entrypoint for goldcast.

Usage:
    python main.py <command> [--timeframe TF] [--config CONFIG_PATH]

Supported commands:
    snapshot        Run one refresh cycle (sentiment + prices) and print JSON
    watch           Keep a live chart session running and log every refresh

Examples:
    python main.py snapshot --timeframe 1h
    python main.py snapshot --timeframe 7d --config config/goldcast.yaml
    python main.py watch --timeframe 24h --cycles 5
"""

import argparse
import asyncio
import json
import os
from typing import Optional

from goldcast.config.timeframes import Timeframe
from goldcast.pipeline.chart_pipeline import RefreshResult
from goldcast.pipeline.factory import build_components, build_session
from goldcast.utils.config_loader import AppConfig, load_typed_config
from goldcast.utils.logger import configure_logging, get_logger

logger = get_logger(__name__)


def validate_config_path(config_path: str) -> None:
    """
    Validates whether the given config path exists and is a file.

    Args:
        config_path (str): Path to the config file.

    Raises:
        FileNotFoundError: If the config file does not exist.
    """
    if not os.path.isfile(config_path):
        logger.error(f"Config file not found: {config_path}")
        raise FileNotFoundError(f"Config file not found: {config_path}")


def format_result(result: RefreshResult) -> str:
    """One log line per refresh."""
    if not result.ok:
        return f"[{result.timeframe.value}] no data: {result.error} (retryable={result.retryable})"
    trend = result.prediction.trend.value if result.prediction else "n/a"
    cached = " cached" if result.series.from_cache else ""
    return (
        f"[{result.timeframe.value}] {result.current_price:.2f} "
        f"({result.change_percent:+.2f}%) via {result.data_source.value}{cached}, "
        f"trend={trend}, sentiment={result.sentiment.category.value}"
    )


async def run_snapshot(config: AppConfig, timeframe: Timeframe) -> RefreshResult:
    components = build_components(config)
    try:
        await components.sentiment_service.refresh()
        return await components.pipeline.refresh(timeframe)
    finally:
        await components.aclose()


async def run_watch(config: AppConfig, timeframe: Timeframe, cycles: Optional[int] = None) -> int:
    """Run a live session until ``cycles`` results arrived (forever when None)."""
    components = build_components(config)
    done = asyncio.Event()
    seen = 0

    def on_result(result: RefreshResult) -> None:
        nonlocal seen
        seen += 1
        logger.info(format_result(result))
        if cycles is not None and seen >= cycles:
            done.set()

    session = build_session(components, config, timeframe=timeframe, on_result=on_result)
    try:
        async with session:
            await done.wait()
    finally:
        await components.aclose()
    return seen


def main():
    """
    Parse CLI arguments and dispatch commands.
    """
    parser = argparse.ArgumentParser(description="goldcast gold price chart CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)
    timeframes = [tf.value for tf in Timeframe]

    # --- Snapshot ---
    snapshot_parser = subparsers.add_parser("snapshot", help="Run one refresh cycle and print JSON")
    snapshot_parser.add_argument("--timeframe", "-t", choices=timeframes, default=None, help="Chart timeframe")
    snapshot_parser.add_argument("--config", "-c", default=None, help="Path to goldcast config YAML")

    # --- Watch ---
    watch_parser = subparsers.add_parser("watch", help="Run a live chart session")
    watch_parser.add_argument("--timeframe", "-t", choices=timeframes, default=None, help="Chart timeframe")
    watch_parser.add_argument("--cycles", "-n", type=int, default=None, help="Stop after N price refreshes")
    watch_parser.add_argument("--config", "-c", default=None, help="Path to goldcast config YAML")

    args = parser.parse_args()

    try:
        if args.config is not None:
            validate_config_path(args.config)
        config = load_typed_config(args.config)
        configure_logging(config.logging.level, config.logging.file)
        timeframe = Timeframe(args.timeframe) if args.timeframe else config.pipeline.default_timeframe

        if args.command == "snapshot":
            result = asyncio.run(run_snapshot(config, timeframe))
            print(json.dumps(result.to_dict(), indent=2))

        elif args.command == "watch":
            logger.info(f"Watching {config.pipeline.symbol} on {timeframe.value}")
            asyncio.run(run_watch(config, timeframe, cycles=args.cycles))

    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    except Exception as e:
        logger.exception(f"Fatal error during execution: {e}")
        raise


if __name__ == "__main__":
    main()
