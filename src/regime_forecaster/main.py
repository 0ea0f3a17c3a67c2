"""Command-line entry point for one-off forecasts."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import random
from contextlib import suppress
from datetime import date

from regime_forecaster.ai.base import ReportGenerator
from regime_forecaster.ai.client import ChatCompletionReportGenerator
from regime_forecaster.ai.stub import TemplateReportGenerator
from regime_forecaster.config.loader import load_config
from regime_forecaster.config.models import AppConfig
from regime_forecaster.data.models import Horizon
from regime_forecaster.data.provider_base import HistorySource
from regime_forecaster.data.providers import RestHistorySource, SyntheticHistorySource
from regime_forecaster.errors import ForecastError
from regime_forecaster.monitoring.logger import ForecastLogger
from regime_forecaster.scheduler.session import ForecastSession


def build_history_source(config: AppConfig, rng: random.Random) -> HistorySource:
    if config.history.base_url:
        return RestHistorySource(config.history)
    return SyntheticHistorySource(config.history, rng=rng)


def build_report_generator(config: AppConfig) -> ReportGenerator:
    if config.report.api_key:
        return ChatCompletionReportGenerator(config.report)
    return TemplateReportGenerator()


async def run_app(config: AppConfig, args: argparse.Namespace) -> int:
    rng = random.Random(args.seed)
    console = ForecastLogger()
    history = build_history_source(config, rng)
    reporter = build_report_generator(config)
    session = ForecastSession(
        history_source=history,
        report_generator=reporter,
        config=config,
        rng=rng,
    )
    try:
        try:
            result = await session.run(args.ticker, args.horizon, as_of=args.as_of)
        except ForecastError as exc:
            console.error(f"Forecast failed: {exc}")
            return 1

        if args.json:
            print(json.dumps(result.to_dict(), indent=2))
        else:
            console.log_forecast(result, top_k=config.attribution.top_k)
        if args.report:
            console.log_report(await session.report(result))
        return 0
    finally:
        for resource in (history, reporter):
            closer = getattr(resource, "aclose", None)
            if closer is not None:
                with suppress(Exception):
                    await closer()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Regime-adaptive equity forecast")
    parser.add_argument("--ticker", type=str, default="LUCK.KA")
    parser.add_argument(
        "--horizon", type=str, default="1W", choices=[h.value for h in Horizon]
    )
    parser.add_argument(
        "--as-of",
        type=date.fromisoformat,
        default=None,
        help="Backtest date (YYYY-MM-DD); later observations are ignored",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible runs")
    parser.add_argument("--config", type=str, default=None, help="Path to YAML/TOML/JSON config")
    parser.add_argument("--report", action="store_true", help="Request an analyst report")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    args = parse_args(argv)
    config = load_config(args.config)
    return asyncio.run(run_app(config, args))


if __name__ == "__main__":
    raise SystemExit(main())
