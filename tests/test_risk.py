"""Tests for the decision table and the risk/reward guard."""

import pytest

from stocksignal.analysis.models import IndicatorSnapshot, SupportResistance
from stocksignal.errors import DegenerateRatioError
from stocksignal.risk.sl_tp import (
    DECISION_TABLE,
    calculate_risk_reward,
    select_rule,
)
from stocksignal.strategy.models import BUY, HOLD, SELL, SignalContext, SignalTally


def _make_ctx(
    price: float = 100.0,
    volatility: float = 0.2,
    support: float | None = None,
    resistance: float | None = None,
) -> SignalContext:
    return SignalContext(
        price=price,
        snapshot=IndicatorSnapshot(),
        levels=SupportResistance(),
        momentum=0.0,
        volatility=volatility,
        nearest_support=support,
        nearest_resistance=resistance,
    )


def _tally(net: int, strength: int) -> SignalTally:
    if net >= 0:
        return SignalTally(bullish=net, bearish=0, strength=strength)
    return SignalTally(bullish=0, bearish=-net, strength=strength)


# ── Rule selection ───────────────────────────────────────────────────────


class TestSelectRule:
    @pytest.mark.parametrize(
        "net, strength, expected",
        [
            (3, 4, "strong_buy"),
            (5, 6, "strong_buy"),
            (-3, 4, "strong_sell"),
            (3, 3, "moderate_buy"),
            (1, 2, "moderate_buy"),
            (-1, 2, "moderate_sell"),
            (-4, 3, "moderate_sell"),
            (0, 8, "hold"),
            (5, 1, "hold"),
            (-5, 1, "hold"),
        ],
    )
    def test_first_match(self, net, strength, expected):
        assert select_rule(_tally(net, strength)).name == expected

    def test_hold_when_weak_or_balanced(self):
        """HOLD whenever |net| < 1 or strength < 2."""
        for net in range(-6, 7):
            for strength in range(0, 10):
                rule = select_rule(_tally(net, strength))
                if abs(net) < 1 or strength < 2:
                    assert rule.action == HOLD

    def test_last_rule_catches_all(self):
        assert DECISION_TABLE[-1].action == HOLD
        assert DECISION_TABLE[-1].matches(SignalTally())

    def test_empty_table_raises(self):
        with pytest.raises(ValueError, match="no matching rule"):
            select_rule(SignalTally(), table=())


# ── Confidence ───────────────────────────────────────────────────────────


class TestConfidence:
    def test_strong_uses_base_confidence(self):
        rule = select_rule(_tally(3, 6))
        assert rule.confidence(_tally(3, 6)) == 95.0

    def test_moderate_capped_at_75(self):
        t = _tally(2, 6)
        assert select_rule(t).confidence(t) == 75.0
        t = _tally(1, 2)
        assert select_rule(t).confidence(t) == 66.0

    def test_hold_confidence(self):
        t = _tally(0, 8)
        assert select_rule(t).confidence(t) == 70.0
        t = _tally(0, 0)
        assert select_rule(t).confidence(t) == 30.0


# ── Stop-loss / take-profit ──────────────────────────────────────────────


class TestLevels:
    def _levels(self, name: str, ctx: SignalContext):
        rule = next(r for r in DECISION_TABLE if r.name == name)
        return rule.levels(ctx)

    def test_strong_buy_without_levels(self):
        risk = self._levels("strong_buy", _make_ctx())
        assert risk.stop_loss == pytest.approx(95.0)  # max(94, 95)
        assert risk.take_profit == pytest.approx(110.0)  # min(115, 110)

    def test_strong_buy_anchored_to_support(self):
        risk = self._levels("strong_buy", _make_ctx(support=98.0))
        assert risk.stop_loss == pytest.approx(96.04)

    def test_strong_buy_target_capped_by_resistance(self):
        risk = self._levels("strong_buy", _make_ctx(resistance=105.0))
        assert risk.take_profit == pytest.approx(102.9)

    def test_strong_sell_without_levels(self):
        risk = self._levels("strong_sell", _make_ctx())
        assert risk.stop_loss == pytest.approx(105.0)  # min(106, 105)
        assert risk.take_profit == pytest.approx(90.0)  # max(85, 90)

    def test_strong_sell_anchored_to_levels(self):
        risk = self._levels("strong_sell", _make_ctx(support=96.0, resistance=102.0))
        assert risk.stop_loss == pytest.approx(104.04)
        assert risk.take_profit == pytest.approx(97.92)

    def test_moderate_levels(self):
        buy = self._levels("moderate_buy", _make_ctx())
        assert buy.stop_loss == pytest.approx(92.0)
        assert buy.take_profit == pytest.approx(106.0)

        sell = self._levels("moderate_sell", _make_ctx())
        assert sell.stop_loss == pytest.approx(108.0)
        assert sell.take_profit == pytest.approx(94.0)

    def test_low_volatility_uses_floors(self):
        buy = self._levels("moderate_buy", _make_ctx(volatility=0.0))
        assert buy.stop_loss == pytest.approx(95.0)
        assert buy.take_profit == pytest.approx(106.0)

    def test_hold_band(self):
        risk = self._levels("hold", _make_ctx())
        assert risk.stop_loss == pytest.approx(95.0)
        assert risk.take_profit == pytest.approx(105.0)

    def test_actions(self):
        actions = {r.name: r.action for r in DECISION_TABLE}
        assert actions == {
            "strong_buy": BUY,
            "strong_sell": SELL,
            "moderate_buy": BUY,
            "moderate_sell": SELL,
            "hold": HOLD,
        }


# ── Risk/reward ──────────────────────────────────────────────────────────


class TestRiskReward:
    def test_ratio(self):
        assert calculate_risk_reward(100.0, 95.0, 110.0) == pytest.approx(2.0)

    def test_short_side(self):
        assert calculate_risk_reward(100.0, 104.0, 94.0) == pytest.approx(1.5)

    def test_zero_denominator_raises(self):
        with pytest.raises(DegenerateRatioError, match="stop_loss"):
            calculate_risk_reward(100.0, 100.0, 105.0)
