"""Analysis pipeline — bars in, indicators, levels and a recommendation out.

``analyze`` is the synchronous, side-effect-free core.  ``AnalysisEngine``
wraps it with the Stooq client and runs several symbols concurrently.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from stocksignal.analysis.levels import find_support_resistance
from stocksignal.analysis.models import Bar, IndicatorSnapshot, SupportResistance
from stocksignal.analysis.snapshots import build_snapshots
from stocksignal.analysis.summary import InstrumentSummary, summarize
from stocksignal.config import Config
from stocksignal.data.stooq_client import StooqClient
from stocksignal.errors import EmptySeriesError
from stocksignal.strategy.models import Recommendation
from stocksignal.strategy.recommendation import generate_recommendation

logger = logging.getLogger("stocksignal.engine")


@dataclass(frozen=True)
class AnalysisResult:
    """Output of one computation pass over a price series."""

    bars: tuple[Bar, ...]
    snapshots: tuple[IndicatorSnapshot, ...]
    levels: SupportResistance
    recommendation: Recommendation
    summary: InstrumentSummary

    @property
    def latest(self) -> IndicatorSnapshot:
        return self.snapshots[-1]

    def to_dict(self) -> dict:
        """Presentation form with placeholders for unavailable indicators."""
        return {
            "indicators": [s.as_dict() for s in self.snapshots],
            "support_resistance": self.levels.as_dict(),
            "recommendation": self.recommendation.as_dict(),
            "summary": self.summary.as_dict(),
        }


def analyze(bars: Sequence[Bar], lookback: int = 30) -> AnalysisResult:
    """Compute per-bar indicators, levels, a summary and a recommendation.

    Args:
        bars: Chronologically ordered bars (oldest first), already filtered.
        lookback: Number of recent bars scanned for support/resistance.

    Raises:
        EmptySeriesError: If *bars* is empty.
    """
    if not bars:
        raise EmptySeriesError("Cannot analyse an empty price series")

    snapshots = build_snapshots(bars)
    levels = find_support_resistance(bars, lookback=lookback)
    recommendation = generate_recommendation(bars, snapshots[-1], levels)
    return AnalysisResult(
        bars=tuple(bars),
        snapshots=tuple(snapshots),
        levels=levels,
        recommendation=recommendation,
        summary=summarize(bars),
    )


SymbolOutcome = Union[AnalysisResult, Exception]


class AnalysisEngine:
    """Fetches and analyses one or many symbols.

    Args:
        config: Global ``Config`` loaded from ``.env``.
        client: Optional ``StooqClient``; built from *config* if omitted.
    """

    def __init__(self, config: Config, client: Optional[StooqClient] = None) -> None:
        self._config = config
        self._client = client or StooqClient(config)

    async def run(self, symbol: str) -> AnalysisResult:
        """Fetch *symbol* and analyse it."""
        bars = await self._client.fetch_bars(symbol)
        result = analyze(bars, lookback=self._config.sr_lookback)
        rec = result.recommendation
        logger.info(
            "%s: %s (confidence %.0f%%, R:R %.2f)",
            symbol, rec.action, rec.confidence, rec.risk_reward,
        )
        return result

    async def run_all(self, symbols: Sequence[str]) -> dict[str, SymbolOutcome]:
        """Analyse all *symbols* concurrently.

        A failing symbol does not affect the others; its entry in the
        returned map holds the exception instead of a result.
        """
        tasks = {
            symbol: asyncio.create_task(self.run(symbol))
            for symbol in symbols
        }

        results: dict[str, SymbolOutcome] = {}
        for symbol, task in tasks.items():
            try:
                results[symbol] = await task
            except Exception as exc:
                logger.error("Analysis of '%s' failed: %s", symbol, exc)
                results[symbol] = exc
        return results
