from __future__ import annotations

from regime_forecaster.ai.base import ReportGenerator


class TemplateReportGenerator(ReportGenerator):
    """Offline stand-in that echoes the key prompt lines as a report."""

    async def summarize(self, prompt: str) -> str:
        facts = [line.strip()[2:] for line in prompt.splitlines() if line.strip().startswith("- ")]
        if not facts:
            return "No forecast details supplied."
        return "Synthetic analyst note:\n" + "\n".join(facts)
