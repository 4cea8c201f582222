"""Directional signal rules — pure functions, no I/O.

Each rule inspects a ``SignalContext`` and returns a ``SignalVote`` when it
triggers, else ``None``.  Rules are evaluated in the fixed order of
``SIGNAL_RULES`` and their notes keep that order in the reasoning.

A rule whose indicator is not yet available never triggers.
"""

import logging
from typing import Callable, Optional

from stocksignal.strategy.models import SignalContext, SignalTally, SignalVote

logger = logging.getLogger("stocksignal.signals")

# ── Thresholds ───────────────────────────────────────────────────────────

RSI_STRONG_OVERSOLD = 25.0
RSI_OVERSOLD = 35.0
RSI_STRONG_OVERBOUGHT = 75.0
RSI_OVERBOUGHT = 65.0

MACD_STRONG_HISTOGRAM = 0.5
SQUEEZE_VOLATILITY_FRACTION = 0.5
LEVEL_PROXIMITY_PCT = 0.03
MOMENTUM_THRESHOLD = 0.05


def rsi_rule(ctx: SignalContext) -> Optional[SignalVote]:
    """Oversold/overbought RSI: 2 points beyond 25/75, 1 point beyond 35/65."""
    rsi = ctx.snapshot.rsi
    if rsi is None:
        return None
    if rsi < RSI_STRONG_OVERSOLD:
        return SignalVote(bullish=2, strength=2,
                          note="RSI severely oversold (<25) - strong buy signal")
    if rsi < RSI_OVERSOLD:
        return SignalVote(bullish=1, strength=1,
                          note="RSI oversold - buy opportunity")
    if rsi > RSI_STRONG_OVERBOUGHT:
        return SignalVote(bearish=2, strength=2,
                          note="RSI severely overbought (>75) - strong sell signal")
    if rsi > RSI_OVERBOUGHT:
        return SignalVote(bearish=1, strength=1,
                          note="RSI overbought - sell opportunity")
    return None


def moving_average_rule(ctx: SignalContext) -> Optional[SignalVote]:
    """Price position against SMA20/SMA50 and their alignment."""
    sma20 = ctx.snapshot.sma20
    sma50 = ctx.snapshot.sma50
    if sma20 is None or sma50 is None:
        return None

    price = ctx.price
    if sma20 > sma50:
        if price > sma20 and price > sma50:
            return SignalVote(bullish=2, strength=2,
                              note="Strong bullish trend - price above SMA20 and SMA50")
        if price > sma20:
            return SignalVote(bullish=1, strength=1,
                              note="Bullish momentum - price above SMA20")
    elif sma20 < sma50:
        if price < sma20 and price < sma50:
            return SignalVote(bearish=2, strength=2,
                              note="Strong bearish trend - price below SMA20 and SMA50")
        if price < sma20:
            return SignalVote(bearish=1, strength=1,
                              note="Bearish momentum - price below SMA20")
    return None


def macd_rule(ctx: SignalContext) -> Optional[SignalVote]:
    """MACD crossover; a histogram beyond ±0.5 doubles the weight."""
    snap = ctx.snapshot
    if snap.macd is None or snap.macd_signal is None or snap.macd_histogram is None:
        return None

    histogram = snap.macd_histogram
    if snap.macd > snap.macd_signal and histogram > 0:
        if histogram > MACD_STRONG_HISTOGRAM:
            return SignalVote(bullish=2, strength=2,
                              note="MACD strong bullish divergence")
        return SignalVote(bullish=1, strength=1, note="MACD bullish crossover")
    if snap.macd < snap.macd_signal and histogram < 0:
        if histogram < -MACD_STRONG_HISTOGRAM:
            return SignalVote(bearish=2, strength=2,
                              note="MACD strong bearish divergence")
        return SignalVote(bearish=1, strength=1, note="MACD bearish crossover")
    return None


def bollinger_rule(ctx: SignalContext) -> Optional[SignalVote]:
    """Price outside the Bollinger envelope."""
    bands = ctx.snapshot.bollinger
    if bands is None:
        return None
    if ctx.price < bands.lower:
        return SignalVote(bullish=1, strength=1,
                          note="Price below lower Bollinger Band - oversold bounce expected")
    if ctx.price > bands.upper:
        return SignalVote(bearish=1, strength=1,
                          note="Price above upper Bollinger Band - overbought pullback likely")
    return None


def squeeze_rule(ctx: SignalContext) -> Optional[SignalVote]:
    """Band width under half the volatility.  Adds strength but no direction."""
    bands = ctx.snapshot.bollinger
    if bands is None or bands.middle == 0:
        return None
    if bands.width < ctx.volatility * SQUEEZE_VOLATILITY_FRACTION:
        return SignalVote(strength=1,
                          note="Volatility squeeze detected - breakout imminent")
    return None


def support_rule(ctx: SignalContext) -> Optional[SignalVote]:
    """A nearby support level confirmed by positive momentum."""
    if ctx.nearest_support is not None and ctx.momentum > 0:
        return SignalVote(
            bullish=1,
            note=f"Strong support at {ctx.nearest_support:.2f} with positive momentum",
        )
    return None


def resistance_rule(ctx: SignalContext) -> Optional[SignalVote]:
    """A nearby resistance level confirmed by negative momentum."""
    if ctx.nearest_resistance is not None and ctx.momentum < 0:
        return SignalVote(
            bearish=1,
            note=f"Strong resistance at {ctx.nearest_resistance:.2f} with negative momentum",
        )
    return None


def momentum_rule(ctx: SignalContext) -> Optional[SignalVote]:
    """Averaged multi-horizon momentum beyond ±5 %."""
    if ctx.momentum > MOMENTUM_THRESHOLD:
        return SignalVote(bullish=1,
                          note="Strong positive momentum across timeframes")
    if ctx.momentum < -MOMENTUM_THRESHOLD:
        return SignalVote(bearish=1,
                          note="Strong negative momentum across timeframes")
    return None


SignalRule = Callable[[SignalContext], Optional[SignalVote]]

SIGNAL_RULES: tuple[tuple[str, SignalRule], ...] = (
    ("rsi", rsi_rule),
    ("moving_average", moving_average_rule),
    ("macd", macd_rule),
    ("bollinger", bollinger_rule),
    ("squeeze", squeeze_rule),
    ("support", support_rule),
    ("resistance", resistance_rule),
    ("momentum", momentum_rule),
)


def find_nearest_level(
    levels: tuple[float, ...],
    price: float,
    proximity_pct: float = LEVEL_PROXIMITY_PCT,
) -> Optional[float]:
    """First level (in list order) within *proximity_pct* of *price*."""
    for level in levels:
        if abs(price - level) / price < proximity_pct:
            return level
    return None


def evaluate_signals(ctx: SignalContext) -> SignalTally:
    """Run every rule in order and tally the votes."""
    tally = SignalTally()
    for name, rule in SIGNAL_RULES:
        vote = rule(ctx)
        if vote is None:
            continue
        logger.debug(
            "Rule %s fired: +%d bullish, +%d bearish, +%d strength",
            name, vote.bullish, vote.bearish, vote.strength,
        )
        tally = tally.add(vote)
    return tally
