"""Multi-horizon momentum — pure function, no I/O."""

from typing import Sequence

DEFAULT_HORIZONS = (5, 10, 20)


def calculate_momentum(
    closes: Sequence[float],
    horizons: Sequence[int] = DEFAULT_HORIZONS,
) -> float:
    """Average fractional price change across look-back *horizons*.

    For each horizon ``p`` the change is measured from ``closes[-p]`` to
    ``closes[-1]``.  Horizons longer than the series are skipped and the
    average is taken over the horizons actually used.  Returns ``0.0`` when
    none fit.
    """
    if not closes:
        return 0.0

    current = closes[-1]
    changes: list[float] = []
    for period in horizons:
        if period < 1:
            raise ValueError(f"horizon must be a positive integer, got {period}")
        if len(closes) >= period:
            past = closes[-period]
            changes.append((current - past) / past)

    if not changes:
        return 0.0
    return sum(changes) / len(changes)
