from __future__ import annotations

import json
import os
import tomllib
from pathlib import Path
from typing import Any, Mapping

import yaml

from regime_forecaster.config.models import AppConfig, default_config

CONFIG_ENV_PREFIX = "FORECAST_"


def load_config(path: str | Path | None = None, env_prefix: str = CONFIG_ENV_PREFIX) -> AppConfig:
    config = default_config()
    if path:
        payload = _read_file(Path(path))
        merged = _deep_merge(config.model_dump(), payload)
        config = AppConfig.model_validate(merged)
    return _apply_env_overrides(config, env_prefix=env_prefix)


def _read_file(path: Path) -> Mapping[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        return yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if suffix in {".toml", ".tml"}:
        with path.open("rb") as fh:
            return tomllib.load(fh)
    if suffix == ".json":
        with path.open("r", encoding="utf-8") as fh:
            return json.load(fh)
    raise ValueError(f"Unsupported config format: {path.suffix}")


def _deep_merge(base: dict[str, Any], payload: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in payload.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _apply_env_overrides(config: AppConfig, env_prefix: str) -> AppConfig:
    api_key = os.getenv(f"{env_prefix}REPORT_API_KEY")
    model = os.getenv(f"{env_prefix}REPORT_MODEL")
    base_url = os.getenv(f"{env_prefix}HISTORY_BASE_URL")
    lookback = _get_env_int(f"{env_prefix}HISTORY_LOOKBACK_DAYS")
    top_k = _get_env_int(f"{env_prefix}ATTRIBUTION_TOP_K")

    report_updates: dict[str, Any] = {}
    if api_key:
        report_updates["api_key"] = api_key
    if model:
        report_updates["model"] = model

    history_updates: dict[str, Any] = {}
    if base_url:
        history_updates["base_url"] = base_url
    if lookback is not None:
        history_updates["lookback_days"] = lookback

    updates: dict[str, Any] = {}
    if report_updates:
        updates["report"] = config.report.model_copy(update=report_updates)
    if history_updates:
        updates["history"] = config.history.model_copy(update=history_updates)
    if top_k is not None:
        updates["attribution"] = config.attribution.model_copy(update={"top_k": top_k})
    return config.model_copy(update=updates) if updates else config


def _get_env_int(key: str) -> int | None:
    raw = os.getenv(key)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None
