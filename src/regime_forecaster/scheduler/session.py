from __future__ import annotations

import asyncio
import logging
import random
from datetime import date
from typing import Any, Coroutine, TypeVar

from regime_forecaster.ai.base import ReportGenerator
from regime_forecaster.ai.prompt import generate_report
from regime_forecaster.config.models import AppConfig, default_config
from regime_forecaster.data.models import ForecastResult, Horizon
from regime_forecaster.data.provider_base import HistorySource
from regime_forecaster.engine.orchestrator import ForecastOrchestrator

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ForecastSession:
    """One dashboard session: at most one forecast or report request in flight.

    Starting a request cancels whatever the session was still waiting on; the
    superseded caller sees ``asyncio.CancelledError``. ``latest`` only ever
    holds a fully assembled result.
    """

    def __init__(
        self,
        history_source: HistorySource,
        report_generator: ReportGenerator | None = None,
        config: AppConfig | None = None,
        *,
        rng: random.Random,
    ) -> None:
        self._config = config or default_config()
        self._history = history_source
        self._reporter = report_generator
        self._orchestrator = ForecastOrchestrator(self._config)
        self._rng = rng
        self._task: asyncio.Task | None = None
        self._latest: ForecastResult | None = None

    @property
    def latest(self) -> ForecastResult | None:
        return self._latest

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run(
        self, instrument: str, horizon: Horizon | str, as_of: date | None = None
    ) -> ForecastResult:
        parsed = Horizon.parse(horizon)
        return await self._exclusive(
            self._forecast(instrument, parsed, as_of), name=f"forecast-{instrument}-{parsed.value}"
        )

    async def report(self, result: ForecastResult | None = None) -> str:
        target = result or self._latest
        cfg = self._config.report
        if target is None or self._reporter is None:
            return cfg.fallback_text
        return await self._exclusive(
            generate_report(self._reporter, target, cfg), name=f"report-{target.instrument}"
        )

    def cancel(self) -> bool:
        if not self.in_flight:
            return False
        assert self._task
        logger.info("Cancelling in-flight request %s", self._task.get_name())
        self._task.cancel()
        return True

    async def _forecast(self, instrument: str, horizon: Horizon, as_of: date | None) -> ForecastResult:
        history = await self._history.fetch(instrument, self._config.history.lookback_days)
        result = self._orchestrator.compute(instrument, horizon, history, self._rng, as_of=as_of)
        self._latest = result
        return result

    async def _exclusive(self, coro: Coroutine[Any, Any, T], name: str) -> T:
        if self.in_flight:
            assert self._task
            logger.info("Superseding %s with %s", self._task.get_name(), name)
            self._task.cancel()
        task = asyncio.create_task(coro, name=name)
        self._task = task
        try:
            return await task
        finally:
            if self._task is task:
                self._task = None
