"""Support/Resistance level detection from daily bars — pure functions."""

from typing import Sequence

from stocksignal.analysis.models import Bar, SupportResistance

MAX_LEVELS = 3


def _find_swing_highs(bars: Sequence[Bar], window: int = 2) -> list[float]:
    """Identify swing high prices.

    A swing high is a bar whose high is strictly higher than the highs of
    the *window* bars on each side.
    """
    highs: list[float] = []
    for i in range(window, len(bars) - window):
        high = bars[i].high
        is_swing = True
        for j in range(1, window + 1):
            if bars[i - j].high >= high or bars[i + j].high >= high:
                is_swing = False
                break
        if is_swing:
            highs.append(high)
    return highs


def _find_swing_lows(bars: Sequence[Bar], window: int = 2) -> list[float]:
    """Identify swing low prices.

    A swing low is a bar whose low is strictly lower than the lows of the
    *window* bars on each side.
    """
    lows: list[float] = []
    for i in range(window, len(bars) - window):
        low = bars[i].low
        is_swing = True
        for j in range(1, window + 1):
            if bars[i - j].low <= low or bars[i + j].low <= low:
                is_swing = False
                break
        if is_swing:
            lows.append(low)
    return lows


def find_support_resistance(
    bars: Sequence[Bar],
    lookback: int = 30,
    swing_window: int = 2,
) -> SupportResistance:
    """Detect support and resistance levels from the most recent bars.

    Bars near either end of the window cannot qualify, so levels close to
    the window boundaries may be missed.

    Args:
        bars: Daily bars, oldest first.
        lookback: Number of most-recent bars to analyse.
        swing_window: Bars compared on each side of a candidate.

    Returns:
        ``SupportResistance`` with up to three of the lowest swing lows
        (ascending) and three of the highest swing highs (descending).
    """
    if lookback < 1:
        raise ValueError(f"lookback must be a positive integer, got {lookback}")

    recent = bars[-lookback:] if len(bars) > lookback else bars

    resistance = sorted(set(_find_swing_highs(recent, swing_window)), reverse=True)
    support = sorted(set(_find_swing_lows(recent, swing_window)))

    return SupportResistance(
        support=tuple(support[:MAX_LEVELS]),
        resistance=tuple(resistance[:MAX_LEVELS]),
    )
