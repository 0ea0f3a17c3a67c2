"""Five-way trading recommendation from a projected move and conviction."""

from __future__ import annotations

from regime_forecaster.config.models import DecisionConfig
from regime_forecaster.data.models import Decision, Horizon


def decision_threshold(horizon: Horizon | str, config: DecisionConfig | None = None) -> float:
    cfg = config or DecisionConfig()
    parsed = Horizon.parse(horizon)
    return cfg.horizon_thresholds.get(parsed.value, cfg.default_threshold)


def classify_decision(
    change_pct: float,
    horizon: Horizon | str,
    conviction: float,
    config: DecisionConfig | None = None,
) -> Decision:
    cfg = config or DecisionConfig()
    threshold = decision_threshold(horizon, cfg)

    if change_pct > threshold * cfg.strong_multiple and conviction > cfg.strong_buy_conviction:
        return Decision.STRONG_BUY
    if change_pct > threshold * cfg.weak_multiple:
        return Decision.BUY
    if change_pct < -threshold * cfg.strong_multiple and conviction < cfg.strong_sell_conviction:
        return Decision.STRONG_SELL
    if change_pct < -threshold * cfg.weak_multiple:
        return Decision.SELL
    return Decision.HOLD
