"""Sequence regime, projection, attribution and decision into one result."""

from __future__ import annotations

import logging
import random
from datetime import date
from typing import Sequence

from regime_forecaster.config.models import AppConfig, default_config
from regime_forecaster.data.models import ForecastResult, Horizon, Observation
from regime_forecaster.engine.attribution import AttributionEngine
from regime_forecaster.engine.decision import classify_decision
from regime_forecaster.engine.metrics import sample_backtest_metrics
from regime_forecaster.engine.projector import PriceProjector
from regime_forecaster.engine.regime import determine_lookback
from regime_forecaster.engine.yield_curve import build_yield_curve
from regime_forecaster.errors import InvalidInputError

logger = logging.getLogger(__name__)


class ForecastOrchestrator:
    """Build an immutable ``ForecastResult`` for a single request.

    The orchestrator holds configuration only; every call is independent and
    reproducible given the same history and a random source seeded the same way.
    """

    def __init__(self, config: AppConfig | None = None) -> None:
        self._config = config or default_config()
        self._projector = PriceProjector(self._config.projection)
        self._attribution = AttributionEngine(self._config.attribution)

    @property
    def config(self) -> AppConfig:
        return self._config

    def compute(
        self,
        instrument: str,
        horizon: Horizon | str,
        history: Sequence[Observation],
        rng: random.Random,
        as_of: date | None = None,
    ) -> ForecastResult:
        if rng is None:
            raise InvalidInputError("A random source is required; pass a seeded random.Random")
        parsed_horizon = Horizon.parse(horizon)
        series = _prepare_history(history, as_of)

        current = series[-1]
        lookback = determine_lookback(current, self._config.regime)
        projection = self._projector.project(current.price, current.rsi, parsed_horizon)
        yield_curve = build_yield_curve(projection.change_pct, self._config.yield_curve)
        attribution = self._attribution.attribute(
            projection.change_pct, projection.horizon_multiplier, rng
        )
        decision = classify_decision(
            projection.change_pct, parsed_horizon, attribution.conviction, self._config.decision
        )
        metrics = sample_backtest_metrics(rng, self._config.metrics)

        result = ForecastResult(
            instrument=instrument,
            horizon=parsed_horizon,
            current_price=current.price,
            predicted_price=round(projection.predicted_price, 2),
            predicted_change_pct=round(projection.change_pct, 2),
            lookback_window=lookback.window,
            regime=lookback.regime,
            decision=decision,
            conviction=attribution.conviction,
            drivers=attribution.drivers,
            history=series,
            yield_curve=yield_curve,
            metrics=metrics,
            as_of=as_of,
        )
        logger.info(
            "Forecast %s %s: %.2f -> %.2f (%+.2f%%) regime=%s decision=%s conviction=%.2f",
            instrument,
            parsed_horizon.value,
            result.current_price,
            result.predicted_price,
            result.predicted_change_pct,
            result.regime.value,
            result.decision.value,
            result.conviction,
        )
        return result


def compute_forecast(
    instrument: str,
    horizon: Horizon | str,
    history: Sequence[Observation],
    rng: random.Random,
    *,
    as_of: date | None = None,
    config: AppConfig | None = None,
) -> ForecastResult:
    return ForecastOrchestrator(config).compute(instrument, horizon, history, rng, as_of=as_of)


def _prepare_history(history: Sequence[Observation], as_of: date | None) -> tuple[Observation, ...]:
    if not history:
        raise InvalidInputError("History is empty; cannot forecast without a current observation")
    previous: date | None = None
    for obs in history:
        obs.validate()
        if previous is not None and obs.date < previous:
            raise InvalidInputError(f"History is not in ascending date order at {obs.date}")
        previous = obs.date
    series = tuple(history)
    if as_of is not None:
        series = tuple(obs for obs in series if obs.date <= as_of)
        if not series:
            raise InvalidInputError(f"No observations on or before {as_of.isoformat()}")
    return series
