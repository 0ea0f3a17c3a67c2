"""Volatility regime classification and lookback window selection."""

from __future__ import annotations

import math

from regime_forecaster.config.models import RegimeConfig
from regime_forecaster.data.models import LookbackDecision, Observation, Regime
from regime_forecaster.errors import InvalidInputError


def classify_regime(atr_pct: float, config: RegimeConfig | None = None) -> LookbackDecision:
    """Map the current ATR% to a regime and its lookback window.

    Rules are checked in a fixed order and the first match wins, so the crash
    rule shadows the high-volatility rule above its threshold.
    """
    cfg = config or RegimeConfig()
    if not isinstance(atr_pct, (int, float)) or math.isnan(atr_pct) or atr_pct < 0:
        raise InvalidInputError(f"ATR% must be a non-negative number, got {atr_pct!r}")

    if atr_pct < cfg.low_volatility_below:
        return LookbackDecision(window=cfg.low_volatility_window, regime=Regime.LOW_VOLATILITY)
    if atr_pct > cfg.crash_above:
        return LookbackDecision(window=cfg.crash_window, regime=Regime.CRASH)
    if atr_pct > cfg.high_volatility_above:
        return LookbackDecision(window=cfg.high_volatility_window, regime=Regime.HIGH_VOLATILITY)
    return LookbackDecision(window=cfg.normal_window, regime=Regime.NORMAL)


def determine_lookback(current: Observation, config: RegimeConfig | None = None) -> LookbackDecision:
    return classify_regime(current.atr_pct, config)
