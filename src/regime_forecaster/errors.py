"""Error taxonomy shared by the engine and its collaborators."""

from __future__ import annotations


class ForecastError(Exception):
    """Base class for every failure raised by the forecaster."""


class InvalidInputError(ForecastError, ValueError):
    """Empty or malformed history, unknown horizon, or malformed volatility input."""


class ExternalUnavailableError(ForecastError):
    """A collaborator (history source, report generator) could not serve the request."""


class HistoryNotFoundError(ExternalUnavailableError):
    def __init__(self, instrument: str) -> None:
        super().__init__(f"No history available for instrument {instrument!r}")
        self.instrument = instrument
