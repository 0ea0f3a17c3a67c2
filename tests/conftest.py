"""
Shared pytest fixtures for the regime forecaster test suite.

Provides:
  - ``make_observation``: factory for a single ``Observation`` with a chosen
    price, RSI and ATR%.
  - ``make_history``: factory for an ascending daily series ending on a given
    date, with the last observation's price/RSI/ATR% controlled.
  - ``rng``: a seeded ``random.Random`` so stochastic steps are reproducible.
"""

from __future__ import annotations

import random
from datetime import date, timedelta
from typing import Callable, List

import pytest

from regime_forecaster.data.models import Observation

END_DATE = date(2024, 6, 28)


def _observation(
    day: date = END_DATE,
    price: float = 100.0,
    rsi: float = 50.0,
    atr_pct: float = 1.5,
    macd: float = 0.0,
) -> Observation:
    return Observation.from_values(day=day, price=price, rsi=rsi, macd=macd, atr=price * atr_pct / 100)


@pytest.fixture
def make_observation() -> Callable[..., Observation]:
    return _observation


@pytest.fixture
def make_history() -> Callable[..., List[Observation]]:
    def _build(
        days: int = 30,
        price: float = 100.0,
        rsi: float = 50.0,
        atr_pct: float = 1.5,
        end: date = END_DATE,
    ) -> List[Observation]:
        series = [
            _observation(day=end - timedelta(days=days - 1 - i), price=price - (days - 1 - i) * 0.1)
            for i in range(days - 1)
        ]
        series.append(_observation(day=end, price=price, rsi=rsi, atr_pct=atr_pct))
        return series

    return _build


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)
