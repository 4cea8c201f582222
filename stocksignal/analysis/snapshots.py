"""Per-bar indicator snapshots.

``build_snapshots`` folds the series once through an ``IndicatorAccumulator``
that carries running EMA(12), EMA(26), the EMA(9) of MACD, and Wilder RSI
averages, so the full array costs O(n).

``snapshot_at`` recomputes a single index from its prefix.  It shares no
state with other calls and can be distributed across workers.
"""

from collections import deque
from typing import Sequence

from stocksignal.analysis.indicators import (
    MACD_FAST,
    MACD_SIGNAL,
    MACD_SLOW,
    RunningEMA,
    RunningRSI,
    calculate_bollinger,
    calculate_ema,
    calculate_macd,
    calculate_rsi,
    calculate_sma,
)
from stocksignal.analysis.models import Bar, IndicatorSnapshot
from stocksignal.errors import EmptySeriesError

SMA_SHORT = 20
SMA_LONG = 50
RSI_PERIOD = 14
BOLLINGER_PERIOD = 20


class IndicatorAccumulator:
    """Running indicator state, advanced one close at a time."""

    def __init__(self) -> None:
        self._window: deque[float] = deque(maxlen=SMA_LONG)
        self._ema_fast = RunningEMA(MACD_FAST)
        self._ema_slow = RunningEMA(MACD_SLOW)
        self._macd_signal = RunningEMA(MACD_SIGNAL)
        self._rsi = RunningRSI(RSI_PERIOD)
        self._count = 0

    @property
    def count(self) -> int:
        """Number of closes consumed so far."""
        return self._count

    def update(self, close: float) -> IndicatorSnapshot:
        """Consume the next close and return the snapshot at that index."""
        self._count += 1
        self._window.append(close)
        window = list(self._window)

        ema12 = self._ema_fast.update(close)
        ema26 = self._ema_slow.update(close)
        rsi = self._rsi.update(close)

        macd = signal = histogram = None
        if ema12 is not None and ema26 is not None:
            macd = ema12 - ema26
            signal = self._macd_signal.update(macd)
            if signal is not None:
                histogram = macd - signal

        return IndicatorSnapshot(
            sma20=calculate_sma(window, SMA_SHORT),
            sma50=calculate_sma(window, SMA_LONG),
            ema12=ema12,
            ema26=ema26,
            rsi=rsi,
            macd=macd,
            macd_signal=signal,
            macd_histogram=histogram,
            bollinger=calculate_bollinger(window, BOLLINGER_PERIOD),
        )


def build_snapshots(bars: Sequence[Bar]) -> list[IndicatorSnapshot]:
    """Return one ``IndicatorSnapshot`` per bar, index-aligned with *bars*.

    Raises ``EmptySeriesError`` for an empty series.
    """
    if not bars:
        raise EmptySeriesError("Cannot compute indicators for an empty series")
    acc = IndicatorAccumulator()
    return [acc.update(bar.close) for bar in bars]


def snapshot_at(bars: Sequence[Bar], index: int) -> IndicatorSnapshot:
    """Recompute the snapshot at *index* from the prefix ``bars[:index + 1]``."""
    if not bars:
        raise EmptySeriesError("Cannot compute indicators for an empty series")
    if not 0 <= index < len(bars):
        raise IndexError(f"index {index} out of range for {len(bars)} bars")

    closes = [b.close for b in bars[: index + 1]]
    macd = calculate_macd(closes)
    return IndicatorSnapshot(
        sma20=calculate_sma(closes, SMA_SHORT),
        sma50=calculate_sma(closes, SMA_LONG),
        ema12=calculate_ema(closes, MACD_FAST),
        ema26=calculate_ema(closes, MACD_SLOW),
        rsi=calculate_rsi(closes, RSI_PERIOD),
        macd=macd.macd if macd else None,
        macd_signal=macd.signal if macd else None,
        macd_histogram=macd.histogram if macd else None,
        bollinger=calculate_bollinger(closes, BOLLINGER_PERIOD),
    )
