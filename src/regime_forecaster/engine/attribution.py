"""Driver attribution and conviction scoring."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Sequence

from regime_forecaster.config.models import AttributionConfig, DriverSpec
from regime_forecaster.data.models import FeatureContribution


@dataclass(frozen=True, slots=True)
class Attribution:
    drivers: tuple[FeatureContribution, ...]
    conviction: float


def compute_conviction(drivers: Sequence[FeatureContribution], neutral: float = 0.5) -> float:
    """Share of total absolute force pushing the price up."""
    positive = sum(d.value for d in drivers if d.value > 0)
    total = sum(abs(d.value) for d in drivers)
    if total == 0:
        return neutral
    return positive / total


def rank_drivers(drivers: Sequence[FeatureContribution]) -> tuple[FeatureContribution, ...]:
    # sorted() is stable, so equal magnitudes keep their configured order
    return tuple(sorted(drivers, key=lambda d: abs(d.value), reverse=True))


class AttributionEngine:
    def __init__(self, config: AttributionConfig | None = None) -> None:
        self._cfg = config or AttributionConfig()

    def attribute(
        self, change_pct: float, horizon_multiplier: float, rng: random.Random
    ) -> Attribution:
        direction = 1 if change_pct >= 0 else -1
        drivers = [
            FeatureContribution.signed(spec.name, self._draw(spec, direction, horizon_multiplier, rng))
            for spec in self._cfg.drivers
        ]
        return Attribution(
            drivers=rank_drivers(drivers),
            conviction=compute_conviction(drivers, neutral=self._cfg.neutral_conviction),
        )

    @staticmethod
    def _draw(spec: DriverSpec, direction: int, horizon_multiplier: float, rng: random.Random) -> float:
        scale = spec.scale * (horizon_multiplier if spec.horizon_scaled else 1.0)
        if spec.mode == "directional":
            return direction * rng.random() * scale
        if spec.mode == "centered":
            return (rng.random() - 0.5) * scale
        if spec.mode == "directional_constant":
            return direction * scale
        return scale
