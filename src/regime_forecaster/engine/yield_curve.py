"""Holding-period ROI ladder derived from a single horizon projection."""

from __future__ import annotations

from typing import Sequence

from regime_forecaster.config.models import YieldCurveConfig
from regime_forecaster.data.models import YieldPoint


def build_yield_curve(change_pct: float, config: YieldCurveConfig | None = None) -> tuple[YieldPoint, ...]:
    # Each entry rescales the same horizon figure; none is modeled on its own.
    cfg = config or YieldCurveConfig()
    return tuple(
        YieldPoint(period=tier.period, roi=change_pct * tier.scalar, confidence=tier.confidence)
        for tier in cfg.ladder
    )


def optimal_hold(curve: Sequence[YieldPoint]) -> YieldPoint:
    """Return the period with the highest ROI, earliest period on ties."""
    if not curve:
        raise ValueError("yield curve is empty")
    best = curve[0]
    for point in curve[1:]:
        if point.roi > best.roi:
            best = point
    return best


def max_projected_roi(curve: Sequence[YieldPoint]) -> float:
    return optimal_hold(curve).roi
