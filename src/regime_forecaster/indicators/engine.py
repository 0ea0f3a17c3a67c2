from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

import pandas as pd

from regime_forecaster.data.models import Candle, Observation


@dataclass(slots=True)
class IndicatorEngine:
    rsi_period: int = 14
    atr_period: int = 14
    macd_fast: int = 12
    macd_slow: int = 26

    @property
    def warmup(self) -> int:
        return max(self.rsi_period, self.atr_period) + 1

    def build_observations(self, candles: Sequence[Candle]) -> List[Observation]:
        """Derive RSI, MACD and ATR per day; rows still warming up are dropped."""
        if not candles:
            return []
        df = pd.DataFrame(
            [
                {
                    "day": candle.day,
                    "high": candle.high,
                    "low": candle.low,
                    "close": candle.close,
                }
                for candle in candles
            ]
        ).set_index("day").sort_index()

        ema_fast = df["close"].ewm(span=self.macd_fast, adjust=False).mean()
        ema_slow = df["close"].ewm(span=self.macd_slow, adjust=False).mean()
        df["macd"] = ema_fast - ema_slow
        df["rsi"] = self._rsi(df["close"], self.rsi_period)
        df["atr"] = self._atr(df, self.atr_period)
        df = df.dropna(subset=["rsi", "atr"])

        return [
            Observation.from_values(
                day=day,
                price=float(row.close),
                rsi=float(row.rsi),
                macd=float(row.macd),
                atr=float(row.atr),
            )
            for day, row in zip(df.index, df.itertuples(index=False))
        ]

    @staticmethod
    def _rsi(series: pd.Series, period: int) -> pd.Series:
        delta = series.diff()
        gain = delta.clip(lower=0)
        loss = -delta.clip(upper=0)
        avg_gain = gain.ewm(alpha=1 / period, min_periods=period, adjust=False).mean()
        avg_loss = loss.ewm(alpha=1 / period, min_periods=period, adjust=False).mean()
        rs = avg_gain / (avg_loss + 1e-9)
        return 100 - (100 / (1 + rs))

    @staticmethod
    def _atr(df: pd.DataFrame, period: int) -> pd.Series:
        prev_close = df["close"].shift(1)
        true_range = pd.concat(
            [
                df["high"] - df["low"],
                (df["high"] - prev_close).abs(),
                (df["low"] - prev_close).abs(),
            ],
            axis=1,
        ).max(axis=1)
        return true_range.ewm(alpha=1 / period, min_periods=period, adjust=False).mean()
