"""RSI-biased price projection over a forecast horizon."""

from __future__ import annotations

from dataclasses import dataclass

from regime_forecaster.config.models import ProjectionConfig
from regime_forecaster.data.models import Horizon
from regime_forecaster.errors import InvalidInputError


@dataclass(frozen=True, slots=True)
class Projection:
    horizon: Horizon
    horizon_multiplier: float
    rsi_bias: float
    move: float
    predicted_price: float
    change_pct: float

    @property
    def direction(self) -> int:
        return 1 if self.change_pct >= 0 else -1


class PriceProjector:
    """Project a target price from the latest price, RSI and horizon.

    Values are left unrounded; rounding happens once when the forecast result
    is assembled.
    """

    def __init__(self, config: ProjectionConfig | None = None) -> None:
        self._cfg = config or ProjectionConfig()

    def horizon_multiplier(self, horizon: Horizon | str) -> float:
        parsed = Horizon.parse(horizon)
        try:
            return self._cfg.horizon_multipliers[parsed.value]
        except KeyError:
            raise InvalidInputError(f"No multiplier configured for horizon {parsed.value}") from None

    def project(self, price: float, rsi: float, horizon: Horizon | str) -> Projection:
        if not price > 0:
            raise InvalidInputError(f"Price must be positive, got {price!r}")
        parsed = Horizon.parse(horizon)
        multiplier = self.horizon_multiplier(parsed)
        rsi_bias = (self._cfg.rsi_neutral - rsi) / 100
        move = price * (self._cfg.base_drift + rsi_bias * self._cfg.rsi_sensitivity) * multiplier
        return Projection(
            horizon=parsed,
            horizon_multiplier=multiplier,
            rsi_bias=rsi_bias,
            move=move,
            predicted_price=price + move,
            change_pct=move / price * 100,
        )
