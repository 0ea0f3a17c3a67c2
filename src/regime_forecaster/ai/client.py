"""Chat-completion backed analyst report generator."""

from __future__ import annotations

from typing import Any, Dict

import httpx
from tenacity import AsyncRetrying, stop_after_attempt, wait_fixed

from regime_forecaster.ai.base import ReportGenerator
from regime_forecaster.config.models import ReportConfig
from regime_forecaster.errors import ExternalUnavailableError


class ChatCompletionReportGenerator(ReportGenerator):
    """Send the structured forecast summary to an OpenAI-compatible chat endpoint."""

    def __init__(self, config: ReportConfig, client: httpx.AsyncClient | None = None) -> None:
        self._cfg = config
        self._client = client or httpx.AsyncClient(timeout=config.timeout_seconds)

    async def summarize(self, prompt: str) -> str:
        headers = {"Authorization": f"Bearer {self._cfg.api_key}"} if self._cfg.api_key else {}
        request_body: Dict[str, Any] = {
            "model": self._cfg.model,
            "messages": [
                {
                    "role": "system",
                    "content": (
                        "You are a senior equity portfolio manager. Answer in the requested "
                        "output format and ground every statement in the supplied forecast."
                    ),
                },
                {"role": "user", "content": prompt},
            ],
        }

        async for attempt in self._retrying():
            with attempt:
                response = await self._client.post(self._cfg.api_url, headers=headers, json=request_body)
                response.raise_for_status()
                data = response.json()
                try:
                    content = data["choices"][0]["message"]["content"]
                except (KeyError, IndexError, TypeError) as exc:
                    raise ExternalUnavailableError("Report service returned no content") from exc
                return str(content).strip()
        raise ExternalUnavailableError("Report generation retries exhausted")

    async def aclose(self) -> None:
        await self._client.aclose()

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            wait=wait_fixed(1),
            stop=stop_after_attempt(self._cfg.retry_attempts),
            reraise=True,
        )
