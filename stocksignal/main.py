"""StockSignal — CLI entry point.

Fetches daily prices from Stooq (or reads a local CSV export), runs the
analysis pipeline and prints a report per symbol.
"""

import argparse
import asyncio
import logging
import sys
from dataclasses import replace
from typing import Optional, Sequence

from stocksignal.cli.report import format_report
from stocksignal.config import Config, load_config
from stocksignal.data.parser import load_csv_file
from stocksignal.data.stooq_client import AVAILABLE_SYMBOLS
from stocksignal.engine import AnalysisEngine, AnalysisResult, analyze
from stocksignal.errors import EmptySeriesError

logger = logging.getLogger("stocksignal")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Technical indicators and trading recommendation for daily prices",
    )
    parser.add_argument(
        "--symbol",
        nargs="+",
        help=(
            "Stooq symbol(s) to analyse (default from DEFAULT_SYMBOLS). "
            f"Known: {', '.join(AVAILABLE_SYMBOLS)}"
        ),
    )
    parser.add_argument("--csv", help="Analyse a local Stooq CSV export instead of fetching")
    parser.add_argument(
        "--lookback",
        type=int,
        help="Bars scanned for support/resistance (default from SR_LOOKBACK)",
    )
    return parser


def _analyse_csv(path: str, lookback: int) -> int:
    bars = load_csv_file(path)
    if not bars:
        logger.error("No valid bars in %s", path)
        return 1
    format_report(path, analyze(bars, lookback=lookback))
    return 0


async def _analyse_symbols(config: Config, symbols: Sequence[str]) -> int:
    engine = AnalysisEngine(config)
    results = await engine.run_all(symbols)
    failures = 0
    for symbol, outcome in results.items():
        if isinstance(outcome, AnalysisResult):
            format_report(symbol, outcome)
        else:
            failures += 1
    return 1 if failures else 0


def run_cli(argv: Optional[Sequence[str]] = None) -> int:
    """Parse CLI arguments and dispatch to offline or online analysis."""
    args = build_parser().parse_args(argv)

    config = load_config()
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    lookback = args.lookback if args.lookback is not None else config.sr_lookback
    if lookback < 1:
        logger.error("--lookback must be positive, got %d", lookback)
        return 2

    if args.csv:
        try:
            return _analyse_csv(args.csv, lookback)
        except (OSError, UnicodeDecodeError, EmptySeriesError) as exc:
            logger.error("Failed to analyse %s: %s", args.csv, exc)
            return 1

    if args.lookback is not None:
        config = replace(config, sr_lookback=lookback)
    symbols = args.symbol or list(config.default_symbols)
    logger.info("Analysing %d symbol(s): %s", len(symbols), ", ".join(symbols))
    return asyncio.run(_analyse_symbols(config, symbols))


if __name__ == "__main__":
    sys.exit(run_cli())
