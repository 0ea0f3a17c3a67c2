from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Sequence

from .models import Observation


class HistorySource(ABC):
    @abstractmethod
    async def fetch(self, instrument: str, lookback_days: int) -> Sequence[Observation]:
        """Return daily observations in ascending date order.

        Raises ``HistoryNotFoundError`` for unknown instruments and
        ``ExternalUnavailableError`` when the backing service fails.
        """
        raise NotImplementedError


class TimeProvider(ABC):
    @abstractmethod
    def now(self) -> datetime:
        raise NotImplementedError

    def today(self) -> date:
        return self.now().date()
