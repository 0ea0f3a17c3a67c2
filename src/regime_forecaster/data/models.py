from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from regime_forecaster.errors import InvalidInputError


class Regime(str, Enum):
    LOW_VOLATILITY = "Low Volatility"
    NORMAL = "Normal"
    HIGH_VOLATILITY = "High Volatility"
    CRASH = "Crash"
    # Reserved: no classifier rule produces it yet.
    EUPHORIUM = "Euphorium"


class Horizon(str, Enum):
    ONE_DAY = "1D"
    ONE_WEEK = "1W"
    ONE_MONTH = "1M"
    SIX_MONTHS = "6M"
    ONE_YEAR = "1Y"

    @classmethod
    def parse(cls, value: "Horizon | str") -> "Horizon":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidInputError(f"Unknown forecast horizon: {value!r}") from None


class Decision(str, Enum):
    STRONG_BUY = "STRONG BUY"
    BUY = "BUY"
    HOLD = "HOLD"
    SELL = "SELL"
    STRONG_SELL = "STRONG SELL"


class Polarity(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"

    @classmethod
    def of(cls, value: float) -> "Polarity":
        return cls.NEGATIVE if value < 0 else cls.POSITIVE


@dataclass(frozen=True, slots=True)
class Observation:
    date: date
    price: float
    rsi: float  # not clamped, synthetic bias can push it past [0, 100]
    macd: float
    atr: float
    atr_pct: float

    @classmethod
    def from_values(
        cls, day: date, price: float, rsi: float, macd: float, atr: float
    ) -> "Observation":
        """Build an observation, deriving ATR% from ATR and price."""
        if not price > 0:
            raise InvalidInputError(f"Observation price must be positive, got {price!r}")
        return cls(
            date=day,
            price=price,
            rsi=rsi,
            macd=macd,
            atr=atr,
            atr_pct=atr / price * 100,
        )

    def validate(self) -> None:
        if not (math.isfinite(self.price) and self.price > 0):
            raise InvalidInputError(f"Malformed observation on {self.date}: price={self.price!r}")
        if not (math.isfinite(self.atr) and self.atr >= 0):
            raise InvalidInputError(f"Malformed observation on {self.date}: atr={self.atr!r}")
        for name in ("rsi", "macd", "atr_pct"):
            if not math.isfinite(getattr(self, name)):
                raise InvalidInputError(
                    f"Malformed observation on {self.date}: {name}={getattr(self, name)!r}"
                )
        if not math.isclose(self.atr_pct, self.atr / self.price * 100, rel_tol=1e-9, abs_tol=1e-9):
            raise InvalidInputError(
                f"Malformed observation on {self.date}: atr_pct={self.atr_pct!r} does not match "
                f"atr/price ({self.atr / self.price * 100!r})"
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "price": self.price,
            "rsi": self.rsi,
            "macd": self.macd,
            "atr": self.atr,
            "atrPct": self.atr_pct,
        }


@dataclass(frozen=True, slots=True)
class Candle:
    day: date
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0


@dataclass(frozen=True, slots=True)
class LookbackDecision:
    window: int
    regime: Regime


@dataclass(frozen=True, slots=True)
class FeatureContribution:
    name: str
    value: float
    polarity: Polarity

    @classmethod
    def signed(cls, name: str, value: float) -> "FeatureContribution":
        return cls(name=name, value=value, polarity=Polarity.of(value))

    def __post_init__(self) -> None:
        if self.polarity is not Polarity.of(self.value):
            raise InvalidInputError(
                f"Driver {self.name!r} polarity {self.polarity.value} contradicts value {self.value}"
            )

    def to_dict(self) -> Dict[str, Any]:
        return {"feature": self.name, "value": self.value, "type": self.polarity.value}


@dataclass(frozen=True, slots=True)
class YieldPoint:
    period: str
    roi: float
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return {"period": self.period, "roi": self.roi, "confidence": self.confidence}


@dataclass(frozen=True, slots=True)
class ModelMetrics:
    rmse: float
    mape: float
    sharpe: float

    def to_dict(self) -> Dict[str, float]:
        return {"rmse": self.rmse, "mape": self.mape, "sharpe": self.sharpe}


@dataclass(frozen=True, slots=True)
class ForecastResult:
    """Immutable outcome of a single forecast request."""

    instrument: str
    horizon: Horizon
    current_price: float
    predicted_price: float
    predicted_change_pct: float
    lookback_window: int
    regime: Regime
    decision: Decision
    conviction: float
    drivers: Sequence[FeatureContribution]
    history: Sequence[Observation]
    yield_curve: Sequence[YieldPoint]
    metrics: ModelMetrics
    as_of: Optional[date] = None

    def top_drivers(self, k: int) -> List[FeatureContribution]:
        return list(self.drivers[:k])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ticker": self.instrument,
            "horizon": self.horizon.value,
            "asOf": self.as_of.isoformat() if self.as_of else None,
            "currentPrice": self.current_price,
            "predictedPrice": self.predicted_price,
            "predictedChangePct": self.predicted_change_pct,
            "lookbackWindow": self.lookback_window,
            "regime": self.regime.value,
            "decision": self.decision.value,
            "conviction": self.conviction,
            "drivers": [d.to_dict() for d in self.drivers],
            "history": [o.to_dict() for o in self.history],
            "yieldCurve": [p.to_dict() for p in self.yield_curve],
            "metrics": self.metrics.to_dict(),
        }

