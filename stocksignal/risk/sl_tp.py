"""Action, stop-loss and take-profit decision table — pure math, no I/O.

The table is an ordered tuple of ``DecisionRule`` objects evaluated
top-to-bottom; the first rule whose guard matches the signal tally wins.
The final HOLD rule always matches.

Strong tiers anchor stops and targets to the nearest detected level when
one is within reach; moderate tiers use volatility-scaled bands only.
"""

from dataclasses import dataclass
from typing import Callable

from stocksignal.errors import DegenerateRatioError
from stocksignal.strategy.models import (
    BUY,
    HOLD,
    SELL,
    Action,
    SignalContext,
    SignalTally,
)

MODERATE_CONFIDENCE_CAP = 75.0


@dataclass(frozen=True)
class RiskLevels:
    """Computed stop-loss and take-profit for a recommendation."""

    stop_loss: float
    take_profit: float


@dataclass(frozen=True)
class DecisionRule:
    """One row of the decision table."""

    name: str
    action: Action
    headline: str
    matches: Callable[[SignalTally], bool]
    confidence: Callable[[SignalTally], float]
    levels: Callable[[SignalContext], RiskLevels]
    closing_note: str = ""


# ── Level calculators ────────────────────────────────────────────────────


def _strong_buy_levels(ctx: SignalContext) -> RiskLevels:
    price, vol = ctx.price, ctx.volatility
    volatility_stop = price * (1 - max(0.03, vol * 0.3))
    if ctx.nearest_support is not None:
        support_stop = ctx.nearest_support * 0.98
    else:
        support_stop = price * 0.95
    if ctx.nearest_resistance is not None:
        resistance_target = ctx.nearest_resistance * 0.98
    else:
        resistance_target = price * 1.15
    volatility_target = price * (1 + max(0.08, vol * 0.5))
    return RiskLevels(
        stop_loss=max(volatility_stop, support_stop),
        take_profit=min(resistance_target, volatility_target),
    )


def _strong_sell_levels(ctx: SignalContext) -> RiskLevels:
    price, vol = ctx.price, ctx.volatility
    volatility_stop = price * (1 + max(0.03, vol * 0.3))
    if ctx.nearest_resistance is not None:
        resistance_stop = ctx.nearest_resistance * 1.02
    else:
        resistance_stop = price * 1.05
    if ctx.nearest_support is not None:
        support_target = ctx.nearest_support * 1.02
    else:
        support_target = price * 0.85
    volatility_target = price * (1 - max(0.08, vol * 0.5))
    return RiskLevels(
        stop_loss=min(volatility_stop, resistance_stop),
        take_profit=max(support_target, volatility_target),
    )


def _moderate_buy_levels(ctx: SignalContext) -> RiskLevels:
    price, vol = ctx.price, ctx.volatility
    return RiskLevels(
        stop_loss=price * (1 - max(0.05, vol * 0.4)),
        take_profit=price * (1 + max(0.06, vol * 0.3)),
    )


def _moderate_sell_levels(ctx: SignalContext) -> RiskLevels:
    price, vol = ctx.price, ctx.volatility
    return RiskLevels(
        stop_loss=price * (1 + max(0.05, vol * 0.4)),
        take_profit=price * (1 - max(0.06, vol * 0.3)),
    )


def _hold_levels(ctx: SignalContext) -> RiskLevels:
    return RiskLevels(stop_loss=ctx.price * 0.95, take_profit=ctx.price * 1.05)


# ── Decision table ───────────────────────────────────────────────────────

DECISION_TABLE: tuple[DecisionRule, ...] = (
    DecisionRule(
        name="strong_buy",
        action=BUY,
        headline="STRONG BUY - multiple bullish confluences detected",
        matches=lambda t: t.net >= 3 and t.strength >= 4,
        confidence=lambda t: t.base_confidence,
        levels=_strong_buy_levels,
    ),
    DecisionRule(
        name="strong_sell",
        action=SELL,
        headline="STRONG SELL - multiple bearish confluences detected",
        matches=lambda t: t.net <= -3 and t.strength >= 4,
        confidence=lambda t: t.base_confidence,
        levels=_strong_sell_levels,
    ),
    DecisionRule(
        name="moderate_buy",
        action=BUY,
        headline="BUY - moderate bullish signals present",
        matches=lambda t: t.net >= 1 and t.strength >= 2,
        confidence=lambda t: min(MODERATE_CONFIDENCE_CAP, t.base_confidence),
        levels=_moderate_buy_levels,
    ),
    DecisionRule(
        name="moderate_sell",
        action=SELL,
        headline="SELL - moderate bearish signals present",
        matches=lambda t: t.net <= -1 and t.strength >= 2,
        confidence=lambda t: min(MODERATE_CONFIDENCE_CAP, t.base_confidence),
        levels=_moderate_sell_levels,
    ),
    DecisionRule(
        name="hold",
        action=HOLD,
        headline="HOLD - insufficient signal strength or conflicting indicators",
        matches=lambda t: True,
        confidence=lambda t: float(min(100, 30 + t.strength * 5)),
        levels=_hold_levels,
        closing_note="Wait for clearer market direction or stronger confluences",
    ),
)


def select_rule(
    tally: SignalTally,
    table: tuple[DecisionRule, ...] = DECISION_TABLE,
) -> DecisionRule:
    """Return the first rule in *table* whose guard matches *tally*."""
    for rule in table:
        if rule.matches(tally):
            return rule
    raise ValueError("Decision table has no matching rule; the last rule must match all")


# ── Risk/reward ──────────────────────────────────────────────────────────


def calculate_risk_reward(price: float, stop_loss: float, take_profit: float) -> float:
    """Return ``|take_profit - price| / |price - stop_loss|``.

    Raises ``DegenerateRatioError`` when the stop-loss sits exactly at
    *price*.
    """
    risk = abs(price - stop_loss)
    if risk == 0:
        raise DegenerateRatioError(
            f"stop_loss {stop_loss} equals price {price}; risk/reward undefined"
        )
    return abs(take_profit - price) / risk
