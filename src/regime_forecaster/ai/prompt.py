"""Prompt assembly and fault-tolerant report generation."""

from __future__ import annotations

import logging

from regime_forecaster.ai.base import ReportGenerator
from regime_forecaster.config.models import ReportConfig
from regime_forecaster.data.models import ForecastResult

logger = logging.getLogger(__name__)


def build_report_prompt(result: ForecastResult, top_drivers: int = 3) -> str:
    curve = ", ".join(f"{p.period}:{p.roi:.1f}%" for p in result.yield_curve)
    drivers = ", ".join(d.name for d in result.top_drivers(top_drivers))
    lines = [
        "Act as a Senior Portfolio Manager for the Pakistan Stock Exchange.",
        f"Provide a strategic recommendation for {result.instrument} based on the following:",
        "",
        f"- Horizon: {result.horizon.value}",
        (
            f"- Forecast: Price moving from {result.current_price} to {result.predicted_price} "
            f"({result.predicted_change_pct}%)"
        ),
        f"- Signal: {result.decision.value} (Confidence: {result.conviction * 100:.0f}%)",
        f"- Regime: {result.regime.value} (lookback {result.lookback_window} days)",
        f"- Yield Curve: {curve}",
        f"- Drivers: {drivers}",
        "",
        "Output Format:",
        "1. **Verdict**: [Strong Buy/Buy/Hold/Sell]",
        "2. **Rationale**: 2 sentences linking technicals (RSI/MACD) to macro (Interest Rates/Oil).",
        "3. **Strategy**: Should the user hold for 1 month or 1 year? Refer to the yield curve.",
    ]
    return "\n".join(lines)


async def generate_report(
    generator: ReportGenerator,
    result: ForecastResult,
    config: ReportConfig | None = None,
) -> str:
    """Ask the generator for an analyst note, degrading to the fallback text on failure."""
    cfg = config or ReportConfig()
    prompt = build_report_prompt(result, top_drivers=cfg.top_drivers)
    try:
        text = await generator.summarize(prompt)
    except Exception as exc:
        logger.warning("Report generation failed for %s: %s", result.instrument, exc)
        return cfg.fallback_text
    return text or cfg.fallback_text
