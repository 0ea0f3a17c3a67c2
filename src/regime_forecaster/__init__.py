"""Regime-adaptive equity forecast and decision engine."""

from regime_forecaster.engine.orchestrator import ForecastOrchestrator, compute_forecast

__all__ = [
    "config",
    "data",
    "indicators",
    "engine",
    "ai",
    "scheduler",
    "monitoring",
    "ForecastOrchestrator",
    "compute_forecast",
]
