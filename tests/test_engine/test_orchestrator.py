"""
Tests for regime_forecaster/engine/orchestrator.py.

What we test
------------
compute_forecast():
  - Neutral RSI, 1D, price 100 -> 101.00 / +1.00% with Normal regime.
  - Rounding to two decimals happens at assembly; the yield curve uses the raw figure.
  - Empty, malformed and unordered histories raise InvalidInputError, including
    an ATR% that disagrees with atr / price.
  - The random source is a required argument.
  - Unknown horizon raises InvalidInputError.
  - as_of truncates the history and is echoed on the result.
  - Same seed -> identical result; the result is immutable.
  - to_dict() exposes the serialization field set.
"""

from __future__ import annotations

import dataclasses
import json
import random
from datetime import date, timedelta

import pytest

from regime_forecaster import ForecastOrchestrator, compute_forecast
from regime_forecaster.config.models import AppConfig, AttributionConfig, RegimeConfig
from regime_forecaster.data.models import Decision, Horizon, Observation, Regime
from regime_forecaster.errors import InvalidInputError

END_DATE = date(2024, 6, 28)


def test_reference_scenario(make_history, rng) -> None:
    history = make_history(price=100.0, rsi=50.0, atr_pct=1.5)
    result = compute_forecast("LUCK.KA", "1D", history, rng)

    assert result.instrument == "LUCK.KA"
    assert result.horizon is Horizon.ONE_DAY
    assert result.current_price == 100.0
    assert result.predicted_price == 101.00
    assert result.predicted_change_pct == 1.00
    assert result.regime is Regime.NORMAL
    assert result.lookback_window == 45
    assert result.decision is Decision.BUY
    assert 0.0 <= result.conviction <= 1.0
    assert len(result.drivers) == 6
    assert len(result.yield_curve) == 5
    assert result.history == tuple(history)


def test_rounding_only_at_assembly(make_history, rng) -> None:
    history = make_history(price=333.33, rsi=47.3)
    result = compute_forecast("SYS.KA", "1W", history, rng)
    raw_change = (0.01 + 0.027 * 0.05) * 2.5 * 100
    assert result.predicted_change_pct == round(raw_change, 2)
    assert result.yield_curve[0].roi == pytest.approx(raw_change * 0.2)
    assert result.predicted_price == round(333.33 * (1 + raw_change / 100), 2)


def test_low_volatility_regime_selected(make_history, rng) -> None:
    result = compute_forecast("MCB.KA", "1M", make_history(atr_pct=0.5), rng)
    assert result.regime is Regime.LOW_VOLATILITY
    assert result.lookback_window == 90


def test_crash_regime_and_sell_signal(make_history, rng) -> None:
    result = compute_forecast("TRG.KA", "1M", make_history(rsi=90.0, atr_pct=4.2), rng)
    assert result.regime is Regime.CRASH
    assert result.lookback_window == 10
    assert result.predicted_change_pct == -5.0
    assert result.decision in {Decision.SELL, Decision.STRONG_SELL}


def test_empty_history_rejected(rng) -> None:
    with pytest.raises(InvalidInputError):
        compute_forecast("LUCK.KA", "1D", [], rng)


def test_unknown_horizon_rejected(make_history, rng) -> None:
    with pytest.raises(InvalidInputError):
        compute_forecast("LUCK.KA", "2W", make_history(), rng)


def test_malformed_observation_rejected(make_history, rng) -> None:
    history = make_history()
    history[-1] = dataclasses.replace(history[-1], atr=-1.0)
    with pytest.raises(InvalidInputError):
        compute_forecast("LUCK.KA", "1D", history, rng)


def test_inconsistent_atr_pct_rejected(rng) -> None:
    # atr / price puts this bar at 5% ATR, a Crash regime, not 0.1%
    bad = Observation(date=END_DATE, price=100.0, rsi=50.0, macd=0.0, atr=5.0, atr_pct=0.1)
    with pytest.raises(InvalidInputError):
        compute_forecast("LUCK.KA", "1D", [bad], rng)


def test_rng_is_required(make_history) -> None:
    with pytest.raises(TypeError):
        compute_forecast("LUCK.KA", "1D", make_history())  # type: ignore[call-arg]
    with pytest.raises(InvalidInputError):
        ForecastOrchestrator().compute("LUCK.KA", "1D", make_history(), None)  # type: ignore[arg-type]


def test_top_drivers_follow_configured_top_k(make_history, rng) -> None:
    config = AppConfig(attribution=AttributionConfig(top_k=2))
    result = compute_forecast("LUCK.KA", "1W", make_history(), rng, config=config)
    assert result.top_drivers(config.attribution.top_k) == list(result.drivers[:2])


def test_nan_rsi_rejected(make_history, rng) -> None:
    history = make_history()
    history[-1] = dataclasses.replace(history[-1], rsi=float("nan"))
    with pytest.raises(InvalidInputError):
        compute_forecast("LUCK.KA", "1D", history, rng)


def test_unordered_history_rejected(make_history, rng) -> None:
    history = list(reversed(make_history(days=5)))
    with pytest.raises(InvalidInputError):
        compute_forecast("LUCK.KA", "1D", history, rng)


def test_as_of_truncates_history(make_history, rng) -> None:
    history = make_history(days=30)
    cutoff = END_DATE - timedelta(days=10)
    result = compute_forecast("LUCK.KA", "1W", history, rng, as_of=cutoff)
    assert result.as_of == cutoff
    assert result.history[-1].date == cutoff
    assert len(result.history) == 20
    assert result.current_price == history[19].price


def test_as_of_before_history_rejected(make_history, rng) -> None:
    with pytest.raises(InvalidInputError):
        compute_forecast("LUCK.KA", "1W", make_history(), rng, as_of=date(2000, 1, 1))


def test_seeded_runs_identical(make_history) -> None:
    history = make_history()
    first = compute_forecast("ENGRO.KA", "6M", history, random.Random(5))
    second = compute_forecast("ENGRO.KA", "6M", history, random.Random(5))
    assert first == second


def test_result_is_immutable(make_history, rng) -> None:
    result = compute_forecast("LUCK.KA", "1D", make_history(), rng)
    with pytest.raises(dataclasses.FrozenInstanceError):
        result.decision = Decision.HOLD  # type: ignore[misc]


def test_orchestrator_uses_injected_config(make_history, rng) -> None:
    config = AppConfig(regime=RegimeConfig(low_volatility_below=2.0, high_volatility_above=2.0))
    result = ForecastOrchestrator(config).compute("LUCK.KA", Horizon.ONE_DAY, make_history(atr_pct=1.5), rng)
    assert result.regime is Regime.LOW_VOLATILITY


def test_metrics_within_ranges(make_history, rng) -> None:
    metrics = compute_forecast("LUCK.KA", "1D", make_history(), rng).metrics
    assert 0.85 <= metrics.rmse < 1.35
    assert 1.2 <= metrics.mape < 2.0
    assert 1.8 <= metrics.sharpe < 2.2


def test_to_dict_is_json_serializable(make_history, rng) -> None:
    payload = compute_forecast("LUCK.KA", "1Y", make_history(), rng).to_dict()
    assert set(payload) == {
        "ticker",
        "horizon",
        "asOf",
        "currentPrice",
        "predictedPrice",
        "predictedChangePct",
        "lookbackWindow",
        "regime",
        "decision",
        "conviction",
        "drivers",
        "history",
        "yieldCurve",
        "metrics",
    }
    assert payload["drivers"][0].keys() == {"feature", "value", "type"}
    assert payload["history"][-1]["date"] == END_DATE.isoformat()
    json.dumps(payload)


def test_single_observation_history(make_observation, rng) -> None:
    single = [make_observation(price=50.0, rsi=50.0)]
    result = compute_forecast("X", "1D", single, rng)
    assert result.history == (single[0],)
    assert isinstance(result.history[0], Observation)
