"""Console rendering of forecasts using Rich."""

from __future__ import annotations

from typing import Any, Mapping

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from regime_forecaster.data.models import Decision, ForecastResult
from regime_forecaster.engine.yield_curve import max_projected_roi, optimal_hold


class ForecastLogger:
    _LEVEL_STYLES = {
        "info": "cyan",
        "success": "green",
        "warning": "yellow",
        "error": "red",
    }
    _DECISION_STYLES = {
        Decision.STRONG_BUY: "bold green",
        Decision.BUY: "green",
        Decision.HOLD: "yellow",
        Decision.SELL: "red",
        Decision.STRONG_SELL: "bold red",
    }

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console()

    def log_event(
        self,
        message: str,
        *,
        level: str = "info",
        details: Mapping[str, Any] | None = None,
    ) -> None:
        style = self._LEVEL_STYLES.get(level, "white")
        if details:
            table = Table.grid(expand=True)
            table.add_column(justify="right", style="bold")
            table.add_column(ratio=1)
            for key, value in details.items():
                table.add_row(str(key), str(value))
            self._console.print(Panel(table, title=f"[bold]{message}", border_style=style))
            return
        self._console.print(f"[bold {style}]{message}[/bold {style}]")

    def info(self, message: str, *, details: Mapping[str, Any] | None = None) -> None:
        self.log_event(message, level="info", details=details)

    def error(self, message: str, *, details: Mapping[str, Any] | None = None) -> None:
        self.log_event(message, level="error", details=details)

    def log_forecast(self, result: ForecastResult, top_k: int) -> None:
        style = self._DECISION_STYLES.get(result.decision, "white")
        summary = Table(title=f"Forecast {result.instrument} ({result.horizon.value})", show_lines=True)
        summary.add_column("Field")
        summary.add_column("Value")
        summary.add_row("Current", f"{result.current_price:.2f}")
        summary.add_row("Predicted", f"{result.predicted_price:.2f} ({result.predicted_change_pct:+.2f}%)")
        summary.add_row("Regime", f"{result.regime.value} / {result.lookback_window}d lookback")
        summary.add_row("Decision", f"[{style}]{result.decision.value}[/{style}]")
        summary.add_row("Conviction", f"{result.conviction * 100:.0f}%")
        summary.add_row(
            "Backtest",
            f"RMSE {result.metrics.rmse:.2f} | MAPE {result.metrics.mape:.2f}% | Sharpe {result.metrics.sharpe:.2f}",
        )
        if result.as_of:
            summary.add_row("As of", result.as_of.isoformat())
        self._console.print(summary)
        self.log_drivers(result, top_k=top_k)
        self.log_yield_curve(result)

    def log_drivers(self, result: ForecastResult, top_k: int) -> None:
        table = Table(title="Top drivers")
        table.add_column("Feature")
        table.add_column("Impact", justify="right")
        for driver in result.top_drivers(top_k):
            colour = "green" if driver.value >= 0 else "red"
            table.add_row(driver.name, f"[{colour}]{driver.value:+.2f}[/{colour}]")
        self._console.print(table)

    def log_yield_curve(self, result: ForecastResult) -> None:
        table = Table(title="Holding-period yield curve")
        table.add_column("Period")
        table.add_column("ROI", justify="right")
        table.add_column("Confidence", justify="right")
        for point in result.yield_curve:
            table.add_row(point.period, f"{point.roi:+.1f}%", f"{point.confidence:.0%}")
        self._console.print(table)
        best = optimal_hold(result.yield_curve)
        self._console.print(
            f"Optimal hold: [bold]{best.period}[/bold]  max projected ROI: "
            f"[bold]{max_projected_roi(result.yield_curve):.1f}%[/bold]"
        )

    def log_report(self, text: str) -> None:
        self._console.print(Panel(text, title="[bold]Analyst report", border_style="magenta"))
