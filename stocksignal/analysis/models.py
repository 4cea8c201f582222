"""Analysis data models — typed representations of bars and indicator outputs.

Indicator fields use ``None`` as the explicit "not yet available" marker.
Presentation code should go through ``as_dict()``, which substitutes the
documented placeholders.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Bar:
    """A single daily OHLCV bar."""

    date: str
    open: float
    high: float
    low: float
    close: float
    volume: float


@dataclass(frozen=True)
class BollingerBands:
    """Bollinger envelope around a simple moving average."""

    upper: float
    middle: float
    lower: float

    @property
    def width(self) -> float:
        """Band width relative to the middle line (0.0 if middle is zero)."""
        if self.middle == 0:
            return 0.0
        return (self.upper - self.lower) / self.middle


@dataclass(frozen=True)
class MACDResult:
    """MACD line with its signal line and histogram.

    ``signal`` and ``histogram`` stay ``None`` until nine MACD values exist.
    """

    macd: float
    signal: Optional[float] = None
    histogram: Optional[float] = None


# ── Presentation placeholders ────────────────────────────────────────────

PLACEHOLDER_VALUE = 0.0
NEUTRAL_RSI = 50.0


@dataclass(frozen=True)
class IndicatorSnapshot:
    """All indicators for one index of a price series."""

    sma20: Optional[float] = None
    sma50: Optional[float] = None
    ema12: Optional[float] = None
    ema26: Optional[float] = None
    rsi: Optional[float] = None
    macd: Optional[float] = None
    macd_signal: Optional[float] = None
    macd_histogram: Optional[float] = None
    bollinger: Optional[BollingerBands] = None

    def as_dict(self) -> dict:
        """Render with placeholders: ``0.0`` for averages/MACD/bands, ``50.0`` for RSI."""

        def _v(value: Optional[float]) -> float:
            return PLACEHOLDER_VALUE if value is None else value

        bands = self.bollinger
        return {
            "sma20": _v(self.sma20),
            "sma50": _v(self.sma50),
            "ema12": _v(self.ema12),
            "ema26": _v(self.ema26),
            "rsi": NEUTRAL_RSI if self.rsi is None else self.rsi,
            "macd": _v(self.macd),
            "macd_signal": _v(self.macd_signal),
            "macd_histogram": _v(self.macd_histogram),
            "bollinger": {
                "upper": bands.upper if bands else PLACEHOLDER_VALUE,
                "middle": bands.middle if bands else PLACEHOLDER_VALUE,
                "lower": bands.lower if bands else PLACEHOLDER_VALUE,
            },
        }


@dataclass(frozen=True)
class SupportResistance:
    """Detected price levels: support ascending, resistance descending."""

    support: tuple[float, ...] = ()
    resistance: tuple[float, ...] = ()

    def as_dict(self) -> dict:
        return {
            "support": list(self.support),
            "resistance": list(self.resistance),
        }
