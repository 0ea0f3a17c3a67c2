from __future__ import annotations

import random

from regime_forecaster.config.models import MetricsConfig
from regime_forecaster.data.models import ModelMetrics


def sample_backtest_metrics(rng: random.Random, config: MetricsConfig | None = None) -> ModelMetrics:
    """Draw simulated backtest error and risk-adjusted return figures."""
    cfg = config or MetricsConfig()
    return ModelMetrics(
        rmse=cfg.rmse_base + rng.random() * cfg.rmse_spread,
        mape=cfg.mape_base + rng.random() * cfg.mape_spread,
        sharpe=cfg.sharpe_base + rng.random() * cfg.sharpe_spread,
    )
