"""Recommendation engine — turns indicators and levels into a BUY/SELL/HOLD call.

Stateless: the same bars, snapshot and levels always produce the same
recommendation.
"""

import logging
from typing import Sequence

from stocksignal.analysis.indicators import calculate_volatility
from stocksignal.analysis.models import Bar, IndicatorSnapshot, SupportResistance
from stocksignal.analysis.momentum import calculate_momentum
from stocksignal.errors import DegenerateRatioError, EmptySeriesError
from stocksignal.risk.sl_tp import (
    DECISION_TABLE,
    DecisionRule,
    calculate_risk_reward,
    select_rule,
)
from stocksignal.strategy.models import Recommendation, SignalContext
from stocksignal.strategy.signals import evaluate_signals, find_nearest_level

logger = logging.getLogger("stocksignal.recommendation")

LOW_RISK_REWARD = 1.5
HIGH_RISK_REWARD = 3.0
HIGH_VOLATILITY = 0.4
LOW_VOLATILITY = 0.15


def build_context(
    bars: Sequence[Bar],
    snapshot: IndicatorSnapshot,
    levels: SupportResistance,
) -> SignalContext:
    """Derive price, momentum, volatility and nearby levels for the last bar."""
    closes = [b.close for b in bars]
    price = closes[-1]
    return SignalContext(
        price=price,
        snapshot=snapshot,
        levels=levels,
        momentum=calculate_momentum(closes),
        volatility=calculate_volatility(closes),
        nearest_support=find_nearest_level(levels.support, price),
        nearest_resistance=find_nearest_level(levels.resistance, price),
    )


def _risk_notes(risk_reward: float, volatility: float) -> list[str]:
    notes: list[str] = []
    if risk_reward < LOW_RISK_REWARD:
        notes.append("Risk/reward ratio below 1.5 - consider a smaller position size")
    elif risk_reward > HIGH_RISK_REWARD:
        notes.append("Excellent risk/reward ratio - good trade setup")

    if volatility > HIGH_VOLATILITY:
        notes.append("High volatility - use smaller position sizes")
    elif volatility < LOW_VOLATILITY:
        notes.append("Low volatility - larger positions acceptable")
    return notes


def generate_recommendation(
    bars: Sequence[Bar],
    snapshot: IndicatorSnapshot,
    levels: SupportResistance,
    decision_table: tuple[DecisionRule, ...] = DECISION_TABLE,
) -> Recommendation:
    """Score the latest bar and pick an action from the decision table.

    Args:
        bars: Full price series, oldest first (at least one bar).
        snapshot: Indicator snapshot for the last bar.
        levels: Support/resistance detected over the series.
        decision_table: Ordered decision rules (first match wins).

    Returns:
        A ``Recommendation``.  If a rule places the stop-loss exactly at the
        current price, the risk/reward ratio is reported as ``0.0`` with a
        reasoning note rather than raising.

    Raises:
        EmptySeriesError: If *bars* is empty.
    """
    if not bars:
        raise EmptySeriesError("Cannot generate a recommendation for an empty series")

    ctx = build_context(bars, snapshot, levels)
    tally = evaluate_signals(ctx)
    rule = select_rule(tally, decision_table)
    risk = rule.levels(ctx)

    logger.debug(
        "Decision %s: net=%d strength=%d price=%.4f",
        rule.name, tally.net, tally.strength, ctx.price,
    )

    reasoning = [rule.headline, *tally.notes]
    if rule.closing_note:
        reasoning.append(rule.closing_note)

    try:
        risk_reward = calculate_risk_reward(ctx.price, risk.stop_loss, risk.take_profit)
    except DegenerateRatioError as exc:
        logger.warning("Risk/reward guard triggered for rule %s: %s", rule.name, exc)
        risk_reward = 0.0
        reasoning.append(
            "Stop-loss equals current price - risk/reward undefined, reported as 0"
        )

    reasoning.extend(_risk_notes(risk_reward, ctx.volatility))

    return Recommendation(
        action=rule.action,
        confidence=rule.confidence(tally),
        stop_loss=risk.stop_loss,
        take_profit=risk.take_profit,
        risk_reward=risk_reward,
        reasoning=tuple(reasoning),
    )
