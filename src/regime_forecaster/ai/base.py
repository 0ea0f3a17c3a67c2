from __future__ import annotations

from abc import ABC, abstractmethod


class ReportGenerator(ABC):
    @abstractmethod
    async def summarize(self, prompt: str) -> str:
        raise NotImplementedError
