"""End-to-end tests for the recommendation engine on synthetic price series."""

import logging

import pytest

from stocksignal.analysis.levels import find_support_resistance
from stocksignal.analysis.models import Bar, SupportResistance
from stocksignal.analysis.snapshots import build_snapshots
from stocksignal.errors import EmptySeriesError
from stocksignal.risk.sl_tp import DecisionRule, RiskLevels
from stocksignal.strategy.models import BUY, HOLD, SELL
from stocksignal.strategy.recommendation import generate_recommendation


# ── Series fixtures ──────────────────────────────────────────────────────


def _make_bars(closes: list[float]) -> list[Bar]:
    return [
        Bar(
            date=f"2024-03-{i + 1:03d}",
            open=c,
            high=c * 1.01,
            low=c * 0.99,
            close=c,
            volume=10_000.0,
        )
        for i, c in enumerate(closes)
    ]


def _rising_bars(n: int = 60) -> list[Bar]:
    """Strictly increasing closes, +2 % per bar."""
    return _make_bars([100.0 * 1.02 ** i for i in range(n)])


def _falling_bars(n: int = 60) -> list[Bar]:
    """Strictly decreasing closes with an accelerating decline."""
    return _make_bars([200.0 - 0.04 * i ** 2 for i in range(n)])


def _flat_bars(n: int = 60) -> list[Bar]:
    return [
        Bar(date=f"2024-04-{i + 1:03d}", open=100.0, high=101.0, low=99.0,
            close=100.0, volume=10_000.0)
        for i in range(n)
    ]


def _recommend(bars: list[Bar]):
    snapshots = build_snapshots(bars)
    levels = find_support_resistance(bars)
    return snapshots[-1], levels, generate_recommendation(bars, snapshots[-1], levels)


def _assert_risk_reward_exact(bars, rec):
    price = bars[-1].close
    expected = abs(rec.take_profit - price) / abs(price - rec.stop_loss)
    assert rec.risk_reward == expected


# ── Scenarios ────────────────────────────────────────────────────────────


class TestRisingSeries:
    def test_strong_buy(self):
        bars = _rising_bars()
        snap, levels, rec = _recommend(bars)

        assert snap.rsi == 100.0
        assert snap.sma20 > snap.sma50
        assert snap.macd > 0
        assert snap.macd_histogram > 0.5
        assert levels.resistance == ()

        assert rec.action == BUY
        assert rec.confidence == 95.0
        assert rec.reasoning[0].startswith("STRONG BUY")

    def test_levels_and_ratio(self):
        bars = _rising_bars()
        _, _, rec = _recommend(bars)
        price = bars[-1].close

        assert rec.stop_loss == pytest.approx(price * 0.97)
        assert rec.take_profit == pytest.approx(price * 1.08)
        assert rec.risk_reward == pytest.approx(0.08 / 0.03)
        _assert_risk_reward_exact(bars, rec)


class TestFallingSeries:
    def test_sell(self):
        bars = _falling_bars()
        snap, _, rec = _recommend(bars)

        assert snap.rsi == pytest.approx(0.0)
        assert snap.sma20 < snap.sma50
        assert snap.macd < 0
        assert rec.action == SELL
        assert rec.stop_loss > bars[-1].close > rec.take_profit
        _assert_risk_reward_exact(bars, rec)


class TestFlatSeries:
    def test_hold(self):
        bars = _flat_bars()
        snap, levels, rec = _recommend(bars)

        assert snap.rsi == 50.0
        assert snap.bollinger.upper == snap.bollinger.lower
        assert levels == SupportResistance()

        assert rec.action == HOLD
        assert rec.stop_loss == pytest.approx(95.0)
        assert rec.take_profit == pytest.approx(105.0)
        assert rec.risk_reward == pytest.approx(1.0)
        assert rec.reasoning[0].startswith("HOLD")
        assert any("Wait for clearer" in r for r in rec.reasoning)
        assert any("Low volatility" in r for r in rec.reasoning)
        _assert_risk_reward_exact(bars, rec)


class TestShortSeries:
    def test_five_bars_hold_with_unavailable_indicators(self):
        bars = _make_bars([100.0, 101.0, 102.0, 101.0, 103.0])
        snap, levels, rec = _recommend(bars)

        assert snap.sma20 is None
        assert snap.sma50 is None
        assert snap.ema12 is None
        assert snap.ema26 is None
        assert snap.rsi is None
        assert snap.macd is None
        assert snap.macd_signal is None
        assert snap.macd_histogram is None
        assert snap.bollinger is None

        rendered = snap.as_dict()
        assert rendered["rsi"] == 50.0
        assert rendered["sma20"] == 0.0

        assert rec.action == HOLD
        assert rec.confidence == 30.0
        assert 0.0 <= rec.risk_reward
        _assert_risk_reward_exact(bars, rec)

    def test_single_bar(self):
        bars = _make_bars([50.0])
        _, _, rec = _recommend(bars)
        assert rec.action == HOLD

    def test_empty_series_raises(self):
        snap = build_snapshots(_make_bars([1.0]))[-1]
        with pytest.raises(EmptySeriesError):
            generate_recommendation([], snap, SupportResistance())


class TestReasoningNotes:
    def test_high_volatility_note(self):
        closes = [100.0 if i % 2 == 0 else 115.0 for i in range(30)]
        bars = _make_bars(closes)
        _, _, rec = _recommend(bars)
        assert any("High volatility" in r for r in rec.reasoning)

    def test_deterministic(self):
        bars = _rising_bars()
        assert _recommend(bars)[2] == _recommend(bars)[2]


class TestDegenerateRiskReward:
    def test_stop_at_price_is_reported_not_fatal(self, caplog):
        broken = DecisionRule(
            name="broken",
            action=HOLD,
            headline="HOLD - misconfigured",
            matches=lambda t: True,
            confidence=lambda t: 30.0,
            levels=lambda ctx: RiskLevels(stop_loss=ctx.price, take_profit=ctx.price * 1.05),
        )
        bars = _flat_bars()
        snap = build_snapshots(bars)[-1]

        with caplog.at_level(logging.WARNING, logger="stocksignal"):
            rec = generate_recommendation(
                bars, snap, SupportResistance(), decision_table=(broken,),
            )

        assert rec.risk_reward == 0.0
        assert any("risk/reward undefined" in r for r in rec.reasoning)
        assert "Risk/reward guard" in caplog.text
