"""Configuration models for the forecast engine and its collaborators."""

from __future__ import annotations

from typing import Dict, List, Literal

from pydantic import BaseModel, Field, field_validator, model_validator


class RegimeConfig(BaseModel):
    low_volatility_below: float = 0.8
    crash_above: float = 3.5
    high_volatility_above: float = 2.5
    low_volatility_window: int = 90
    normal_window: int = 45
    high_volatility_window: int = 20
    crash_window: int = 10

    @model_validator(mode="after")
    def _ordered_thresholds(self) -> "RegimeConfig":
        if not self.low_volatility_below <= self.high_volatility_above <= self.crash_above:
            raise ValueError("regime thresholds must satisfy low <= high volatility <= crash")
        return self


class ProjectionConfig(BaseModel):
    horizon_multipliers: Dict[str, float] = Field(
        default_factory=lambda: {"1D": 1.0, "1W": 2.5, "1M": 5.0, "6M": 12.0, "1Y": 20.0}
    )
    base_drift: float = 0.01
    rsi_neutral: float = 50.0
    rsi_sensitivity: float = 0.05

    @field_validator("horizon_multipliers")
    @classmethod
    def _positive_multipliers(cls, value: Dict[str, float]) -> Dict[str, float]:
        for label, mult in value.items():
            if mult <= 0:
                raise ValueError(f"horizon multiplier for {label} must be positive")
        return value


class YieldTier(BaseModel):
    period: str
    scalar: float
    confidence: float


class YieldCurveConfig(BaseModel):
    ladder: List[YieldTier] = Field(
        default_factory=lambda: [
            YieldTier(period="1W", scalar=0.2, confidence=0.90),
            YieldTier(period="1M", scalar=0.8, confidence=0.85),
            YieldTier(period="3M", scalar=1.5, confidence=0.75),
            YieldTier(period="6M", scalar=2.2, confidence=0.60),
            YieldTier(period="1Y", scalar=3.5, confidence=0.45),
        ]
    )

    @field_validator("ladder")
    @classmethod
    def _decreasing_confidence(cls, value: List[YieldTier]) -> List[YieldTier]:
        if not value:
            raise ValueError("yield ladder must not be empty")
        previous = None
        for tier in value:
            if not 0 < tier.confidence <= 1:
                raise ValueError(f"confidence for {tier.period} must lie in (0, 1]")
            if previous is not None and tier.confidence >= previous:
                raise ValueError("yield ladder confidences must strictly decrease")
            previous = tier.confidence
        return value


DriverMode = Literal["directional", "centered", "constant", "directional_constant"]


class DriverSpec(BaseModel):
    """How one attribution driver draws its signed magnitude.

    ``directional`` draws ``direction * U[0,1) * scale``; ``centered`` draws
    ``(U[0,1) - 0.5) * scale`` regardless of direction; ``constant`` is a fixed
    exogenous value; ``directional_constant`` is ``direction * scale``.
    """

    name: str
    mode: DriverMode = "directional"
    scale: float = 1.0
    horizon_scaled: bool = False


class AttributionConfig(BaseModel):
    drivers: List[DriverSpec] = Field(
        default_factory=lambda: [
            DriverSpec(name="RSI divergence", mode="directional", scale=5.0, horizon_scaled=True),
            DriverSpec(name="MACD divergence", mode="directional", scale=3.0),
            DriverSpec(name="Aggregate large-order flow", mode="directional", scale=4.0),
            DriverSpec(name="Benchmark-index correlation", mode="centered", scale=2.0),
            DriverSpec(name="Policy rate", mode="constant", scale=-1.5),
            DriverSpec(name="Commodity price", mode="directional_constant", scale=2.0),
        ]
    )
    top_k: int = 4
    neutral_conviction: float = 0.5


class DecisionConfig(BaseModel):
    default_threshold: float = 1.0
    horizon_thresholds: Dict[str, float] = Field(default_factory=lambda: {"1Y": 15.0})
    strong_multiple: float = 2.0
    weak_multiple: float = 0.5
    strong_buy_conviction: float = 0.7
    strong_sell_conviction: float = 0.3


class MetricsConfig(BaseModel):
    rmse_base: float = 0.85
    rmse_spread: float = 0.5
    mape_base: float = 1.2
    mape_spread: float = 0.8
    sharpe_base: float = 1.8
    sharpe_spread: float = 0.4


class HistoryConfig(BaseModel):
    lookback_days: int = 90
    default_base_price: float = 95.0
    base_prices: Dict[str, float] = Field(
        default_factory=lambda: {"LUCK.KA": 850.0, "ENGRO.KA": 320.0, "SYS.KA": 450.0}
    )
    base_url: str | None = None
    timeout_seconds: float = 10.0
    retry_attempts: int = 3
    rsi_period: int = 14
    atr_period: int = 14
    macd_fast: int = 12
    macd_slow: int = 26


class ReportConfig(BaseModel):
    api_url: str = "https://api.deepseek.com/v1/chat/completions"
    api_key: str | None = None
    model: str = "deepseek-chat"
    timeout_seconds: float = 30.0
    retry_attempts: int = 2
    top_drivers: int = 3
    fallback_text: str = "AI Analyst is currently offline."


class AppConfig(BaseModel):
    regime: RegimeConfig = Field(default_factory=RegimeConfig)
    projection: ProjectionConfig = Field(default_factory=ProjectionConfig)
    yield_curve: YieldCurveConfig = Field(default_factory=YieldCurveConfig)
    attribution: AttributionConfig = Field(default_factory=AttributionConfig)
    decision: DecisionConfig = Field(default_factory=DecisionConfig)
    metrics: MetricsConfig = Field(default_factory=MetricsConfig)
    history: HistoryConfig = Field(default_factory=HistoryConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)
    metadata: Dict[str, str] = Field(default_factory=dict)


def default_config() -> AppConfig:
    return AppConfig()
