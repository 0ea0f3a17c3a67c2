from __future__ import annotations

import logging
import random
from datetime import date, datetime, timedelta
from typing import Any, Mapping, Sequence

import httpx
from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_exponential

from regime_forecaster.config.models import HistoryConfig
from regime_forecaster.errors import ExternalUnavailableError, HistoryNotFoundError
from regime_forecaster.indicators.engine import IndicatorEngine

from .models import Candle, Observation
from .provider_base import HistorySource, TimeProvider

logger = logging.getLogger(__name__)


class SystemTimeProvider(TimeProvider):
    def now(self) -> datetime:
        return datetime.now()


class FixedTimeProvider(TimeProvider):
    def __init__(self, moment: datetime) -> None:
        self._moment = moment

    def now(self) -> datetime:
        return self._moment


class SyntheticHistorySource(HistorySource):
    """Random-walk daily history with indicator noise, for demos and tests."""

    def __init__(
        self,
        config: HistoryConfig | None = None,
        *,
        rng: random.Random,
        time_provider: TimeProvider | None = None,
    ) -> None:
        self._cfg = config or HistoryConfig()
        self._rng = rng
        self._time = time_provider or SystemTimeProvider()

    async def fetch(self, instrument: str, lookback_days: int) -> Sequence[Observation]:
        today = self._time.today()
        rng = self._rng
        price = self._cfg.base_prices.get(instrument, self._cfg.default_base_price)
        observations: list[Observation] = []
        for i in range(lookback_days):
            move = (rng.random() - 0.48) * (price * 0.02)
            price += move
            rsi = 30 + rng.random() * 40 + (10 if move > 0 else -10)
            macd = (rng.random() - 0.5) * 2
            atr = price * (0.01 + rng.random() * 0.02)
            observations.append(
                Observation.from_values(
                    day=today - timedelta(days=lookback_days - i),
                    price=round(price, 2),
                    rsi=rsi,
                    macd=macd,
                    atr=atr,
                )
            )
        return observations


class CandleHistorySource(HistorySource):
    """Serve observations derived from in-memory daily candles."""

    def __init__(
        self,
        candles: Mapping[str, Sequence[Candle]],
        engine: IndicatorEngine | None = None,
    ) -> None:
        self._candles = candles
        self._engine = engine or IndicatorEngine()

    async def fetch(self, instrument: str, lookback_days: int) -> Sequence[Observation]:
        if instrument not in self._candles:
            raise HistoryNotFoundError(instrument)
        observations = self._engine.build_observations(self._candles[instrument])
        return observations[-lookback_days:] if lookback_days > 0 else []


class RestHistorySource(HistorySource):
    """Fetch daily candles over HTTP and derive indicators locally.

    Expects ``GET {base_url}/history/{instrument}?days=N`` to return a JSON list
    of ``{date, open, high, low, close, volume}`` rows.
    """

    def __init__(
        self,
        config: HistoryConfig,
        engine: IndicatorEngine | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if not config.base_url:
            raise ValueError("history.base_url is required for the REST history source")
        self._cfg = config
        self._engine = engine or IndicatorEngine(
            rsi_period=config.rsi_period,
            atr_period=config.atr_period,
            macd_fast=config.macd_fast,
            macd_slow=config.macd_slow,
        )
        self._client = client or httpx.AsyncClient(
            base_url=config.base_url, timeout=config.timeout_seconds
        )

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
            stop=stop_after_attempt(self._cfg.retry_attempts),
            retry=retry_if_exception(_is_transient),
            reraise=True,
        )

    async def fetch(self, instrument: str, lookback_days: int) -> Sequence[Observation]:
        params = {"days": lookback_days + max(self._engine.warmup, self._engine.macd_slow)}
        try:
            async for attempt in self._retrying():
                with attempt:
                    response = await self._client.get(f"/history/{instrument}", params=params)
                    response.raise_for_status()
                    rows = response.json()
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code == 404:
                raise HistoryNotFoundError(instrument) from exc
            raise ExternalUnavailableError(
                f"History service returned {exc.response.status_code} for {instrument}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ExternalUnavailableError(f"History service unreachable: {exc}") from exc
        except ValueError as exc:
            raise ExternalUnavailableError(f"History service sent a non-JSON body for {instrument}") from exc

        try:
            candles = [self._parse_row(row) for row in rows]
        except (KeyError, TypeError, ValueError) as exc:
            raise ExternalUnavailableError(f"Malformed history payload for {instrument}: {exc}") from exc
        observations = self._engine.build_observations(candles)
        logger.debug("Fetched %d candles for %s", len(candles), instrument)
        return observations[-lookback_days:] if lookback_days > 0 else []

    @staticmethod
    def _parse_row(row: Mapping[str, Any]) -> Candle:
        return Candle(
            day=date.fromisoformat(str(row["date"])[:10]),
            open=float(row["open"]),
            high=float(row["high"]),
            low=float(row["low"]),
            close=float(row["close"]),
            volume=float(row.get("volume", 0.0)),
        )

    async def aclose(self) -> None:
        await self._client.aclose()


def _is_transient(exc: BaseException) -> bool:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code >= 500
    return isinstance(exc, httpx.TransportError)
