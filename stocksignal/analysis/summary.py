"""Instrument summary — day change, relative volume and 52-week range."""

from dataclasses import dataclass
from typing import Optional, Sequence

from stocksignal.analysis.indicators import TRADING_DAYS_PER_YEAR
from stocksignal.analysis.models import Bar
from stocksignal.errors import EmptySeriesError

VOLUME_AVERAGE_PERIOD = 20


@dataclass(frozen=True)
class InstrumentSummary:
    """Headline statistics for the latest bar.

    Percentages are expressed in percent (``2.5`` means 2.5 %).  Fields that
    cannot be computed from the series are ``None``.
    """

    close: float
    change: Optional[float]
    change_pct: Optional[float]
    volume: float
    avg_volume: float
    volume_ratio: Optional[float]
    high_52w: float
    low_52w: float
    pct_from_high: Optional[float]
    pct_from_low: Optional[float]

    def as_dict(self) -> dict:
        return {
            "close": self.close,
            "change": self.change,
            "change_pct": self.change_pct,
            "volume": self.volume,
            "avg_volume": self.avg_volume,
            "volume_ratio": self.volume_ratio,
            "high_52w": self.high_52w,
            "low_52w": self.low_52w,
            "pct_from_high": self.pct_from_high,
            "pct_from_low": self.pct_from_low,
        }


def _pct_distance(price: float, reference: float) -> Optional[float]:
    if reference <= 0:
        return None
    return (price - reference) / reference * 100


def summarize(
    bars: Sequence[Bar],
    volume_period: int = VOLUME_AVERAGE_PERIOD,
    range_period: int = TRADING_DAYS_PER_YEAR,
) -> InstrumentSummary:
    """Summarise the latest bar against its recent history.

    Args:
        bars: Chronologically ordered bars (oldest first).
        volume_period: Bars averaged for the relative-volume comparison.
        range_period: Bars spanned by the 52-week high/low.

    Series shorter than either period use all available bars.  The day
    change needs at least two bars and is ``None`` otherwise.

    Raises:
        EmptySeriesError: If *bars* is empty.
    """
    if not bars:
        raise EmptySeriesError("Cannot summarise an empty price series")

    last = bars[-1]

    change: Optional[float] = None
    change_pct: Optional[float] = None
    if len(bars) >= 2:
        previous = bars[-2].close
        change = last.close - previous
        change_pct = _pct_distance(last.close, previous)

    recent_volumes = [b.volume for b in bars[-volume_period:]]
    avg_volume = sum(recent_volumes) / len(recent_volumes)
    volume_ratio = last.volume / avg_volume if avg_volume > 0 else None

    year = bars[-range_period:]
    high_52w = max(b.high for b in year)
    low_52w = min(b.low for b in year)

    return InstrumentSummary(
        close=last.close,
        change=change,
        change_pct=change_pct,
        volume=last.volume,
        avg_volume=avg_volume,
        volume_ratio=volume_ratio,
        high_52w=high_52w,
        low_52w=low_52w,
        pct_from_high=_pct_distance(last.close, high_52w),
        pct_from_low=_pct_distance(last.close, low_52w),
    )
