"""Technical indicators — SMA, EMA, RSI, MACD, Bollinger Bands, volatility.

Pure functions over a sequence of closes, no I/O.  A windowed statistic
requested over fewer values than its period returns ``None`` instead of
raising, so early history degrades to "not yet available".
"""

import math
from typing import Optional, Sequence

from stocksignal.analysis.models import BollingerBands, MACDResult

MACD_FAST = 12
MACD_SLOW = 26
MACD_SIGNAL = 9

TRADING_DAYS_PER_YEAR = 252
DEFAULT_VOLATILITY = 0.02


def _check_period(period: int) -> None:
    if period < 1:
        raise ValueError(f"period must be a positive integer, got {period}")


# ── Running accumulators ─────────────────────────────────────────────────


class RunningEMA:
    """Exponential moving average updated one value at a time.

    The first *period* values are buffered and their SMA becomes the seed.
    After that each value applies ``ema = value × k + ema × (1 - k)`` with
    ``k = 2 / (period + 1)``.
    """

    def __init__(self, period: int) -> None:
        _check_period(period)
        self._period = period
        self._k = 2.0 / (period + 1)
        self._seed: list[float] = []
        self._value: Optional[float] = None

    @property
    def value(self) -> Optional[float]:
        """Current EMA, or ``None`` before *period* values were seen."""
        return self._value

    def update(self, value: float) -> Optional[float]:
        if self._value is None:
            self._seed.append(value)
            if len(self._seed) == self._period:
                self._value = sum(self._seed) / self._period
                self._seed = []
        else:
            self._value = value * self._k + self._value * (1 - self._k)
        return self._value


class RunningRSI:
    """Wilder-smoothed RSI updated one close at a time."""

    def __init__(self, period: int = 14) -> None:
        _check_period(period)
        self._period = period
        self._prev_close: Optional[float] = None
        self._seed_gains: list[float] = []
        self._seed_losses: list[float] = []
        self._avg_gain: Optional[float] = None
        self._avg_loss: Optional[float] = None

    @property
    def value(self) -> Optional[float]:
        if self._avg_gain is None or self._avg_loss is None:
            return None
        return rsi_from_averages(self._avg_gain, self._avg_loss)

    def update(self, close: float) -> Optional[float]:
        if self._prev_close is None:
            self._prev_close = close
            return None

        delta = close - self._prev_close
        self._prev_close = close
        gain = delta if delta > 0 else 0.0
        loss = -delta if delta < 0 else 0.0

        if self._avg_gain is None:
            self._seed_gains.append(gain)
            self._seed_losses.append(loss)
            if len(self._seed_gains) == self._period:
                self._avg_gain = sum(self._seed_gains) / self._period
                self._avg_loss = sum(self._seed_losses) / self._period
                self._seed_gains = []
                self._seed_losses = []
        else:
            p = self._period
            self._avg_gain = (self._avg_gain * (p - 1) + gain) / p
            self._avg_loss = (self._avg_loss * (p - 1) + loss) / p

        return self.value


# ── Moving averages ──────────────────────────────────────────────────────


def calculate_sma(values: Sequence[float], period: int) -> Optional[float]:
    """Mean of the last *period* values, or ``None`` with fewer values."""
    _check_period(period)
    if len(values) < period:
        return None
    return sum(values[-period:]) / period


def ema_series(values: Sequence[float], period: int) -> list[Optional[float]]:
    """Running EMA aligned with *values*; entries before the seed are ``None``."""
    ema = RunningEMA(period)
    return [ema.update(v) for v in values]


def calculate_ema(values: Sequence[float], period: int) -> Optional[float]:
    """Latest EMA of *values*, seeded with the SMA of the first *period* values.

    Returns ``None`` if fewer than *period* values are provided.
    """
    _check_period(period)
    if len(values) < period:
        return None
    ema = RunningEMA(period)
    for v in values:
        ema.update(v)
    return ema.value


# ── RSI ──────────────────────────────────────────────────────────────────


def rsi_from_averages(avg_gain: float, avg_loss: float) -> float:
    """Convert smoothed averages to an RSI value in [0, 100].

    A zero ``avg_loss`` would divide by zero:
        * gains only  → 100.0
        * no movement → 50.0
    """
    if avg_loss == 0:
        return 100.0 if avg_gain > 0 else 50.0
    rs = avg_gain / avg_loss
    return 100.0 - 100.0 / (1.0 + rs)


def calculate_rsi(closes: Sequence[float], period: int = 14) -> Optional[float]:
    """Calculate Wilder's Relative Strength Index of the latest close.

    Algorithm:
        1. delta = close[i] - close[i-1]
        2. Seed average gain/loss = simple mean of the first *period* deltas.
        3. Subsequent: avg = (prev_avg × (period-1) + current) / period
        4. RSI = 100 - 100 / (1 + avg_gain / avg_loss)

    Requires at least ``period + 1`` closes, otherwise returns ``None``.
    """
    _check_period(period)
    if len(closes) < period + 1:
        return None
    rsi = RunningRSI(period)
    for c in closes:
        rsi.update(c)
    return rsi.value


# ── MACD ─────────────────────────────────────────────────────────────────


def macd_series(closes: Sequence[float]) -> list[float]:
    """MACD line for every prefix of *closes* with at least 26 values.

    Uses running EMA(12) and EMA(26), so the whole series is O(n).  Entry
    ``j`` equals ``EMA12(closes[:26+j]) - EMA26(closes[:26+j])``.
    """
    fast = RunningEMA(MACD_FAST)
    slow = RunningEMA(MACD_SLOW)
    values: list[float] = []
    for c in closes:
        f = fast.update(c)
        s = slow.update(c)
        if f is not None and s is not None:
            values.append(f - s)
    return values


def calculate_macd(closes: Sequence[float]) -> Optional[MACDResult]:
    """MACD(12, 26) with a 9-period signal line over the MACD history.

    Returns ``None`` under 26 closes.  The signal and histogram are ``None``
    until nine MACD values exist (34 closes).
    """
    history = macd_series(closes)
    if not history:
        return None
    macd = history[-1]
    signal = calculate_ema(history, MACD_SIGNAL)
    if signal is None:
        return MACDResult(macd=macd)
    return MACDResult(macd=macd, signal=signal, histogram=macd - signal)


# ── Bollinger Bands ──────────────────────────────────────────────────────


def calculate_bollinger(
    closes: Sequence[float],
    period: int = 20,
    std_dev: float = 2.0,
) -> Optional[BollingerBands]:
    """Calculate Bollinger Bands over the last *period* closes.

    Middle = SMA(close, *period*)
    Upper  = middle + *std_dev* × σ
    Lower  = middle − *std_dev* × σ

    σ is the population standard deviation.  Returns ``None`` with fewer
    than *period* closes.
    """
    middle = calculate_sma(closes, period)
    if middle is None:
        return None
    window = closes[-period:]
    variance = sum((x - middle) ** 2 for x in window) / period
    sigma = math.sqrt(variance)
    return BollingerBands(
        upper=middle + std_dev * sigma,
        middle=middle,
        lower=middle - std_dev * sigma,
    )


# ── Volatility ───────────────────────────────────────────────────────────


def calculate_volatility(closes: Sequence[float], period: int = 20) -> float:
    """Annualised volatility of daily simple returns.

    Uses the returns between consecutive closes of the trailing *period*
    closes (``period - 1`` returns), population standard deviation, scaled
    by ``sqrt(252)``.

    Returns ``DEFAULT_VOLATILITY`` (2 %) when fewer than *period* closes
    are available.
    """
    _check_period(period)
    if len(closes) < period or period < 2:
        return DEFAULT_VOLATILITY

    window = closes[-period:]
    returns = [
        (window[i + 1] - window[i]) / window[i]
        for i in range(len(window) - 1)
    ]
    mean = sum(returns) / len(returns)
    variance = sum((r - mean) ** 2 for r in returns) / len(returns)
    return math.sqrt(variance * TRADING_DAYS_PER_YEAR)
