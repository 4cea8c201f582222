"""Strategy data models — signal votes, evaluation context and recommendations."""

from dataclasses import dataclass
from typing import Literal, Optional

from stocksignal.analysis.models import IndicatorSnapshot, SupportResistance

Action = Literal["BUY", "SELL", "HOLD"]

BUY: Action = "BUY"
SELL: Action = "SELL"
HOLD: Action = "HOLD"


@dataclass(frozen=True)
class SignalContext:
    """Everything a signal rule may look at for the latest bar."""

    price: float
    snapshot: IndicatorSnapshot
    levels: SupportResistance
    momentum: float
    volatility: float
    nearest_support: Optional[float] = None
    nearest_resistance: Optional[float] = None


@dataclass(frozen=True)
class SignalVote:
    """Points contributed by one triggered rule."""

    bullish: int = 0
    bearish: int = 0
    strength: int = 0  # directional conviction plus non-directional notes
    note: str = ""


@dataclass(frozen=True)
class SignalTally:
    """Accumulated votes across all signal rules."""

    bullish: int = 0
    bearish: int = 0
    strength: int = 0
    notes: tuple[str, ...] = ()

    @property
    def net(self) -> int:
        return self.bullish - self.bearish

    @property
    def base_confidence(self) -> float:
        """``min(95, 50 + strength × 8)``."""
        return float(min(95, 50 + self.strength * 8))

    def add(self, vote: SignalVote) -> "SignalTally":
        notes = self.notes + (vote.note,) if vote.note else self.notes
        return SignalTally(
            bullish=self.bullish + vote.bullish,
            bearish=self.bearish + vote.bearish,
            strength=self.strength + vote.strength,
            notes=notes,
        )


@dataclass(frozen=True)
class Recommendation:
    """A single trading recommendation for the latest bar."""

    action: Action
    confidence: float
    stop_loss: float
    take_profit: float
    risk_reward: float
    reasoning: tuple[str, ...]

    def as_dict(self) -> dict:
        return {
            "action": self.action,
            "confidence": self.confidence,
            "stop_loss": self.stop_loss,
            "take_profit": self.take_profit,
            "risk_reward": self.risk_reward,
            "reasoning": list(self.reasoning),
        }
