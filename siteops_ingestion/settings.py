"""
Runtime settings for the import pipeline.

Values come from an optional YAML file, then ``SITEOPS_*`` environment
variables override them. Unknown YAML keys are ignored.

    database_url:        SITEOPS_DATABASE_URL
    batch_size:          SITEOPS_BATCH_SIZE         (default 50)
    max_error_details:   SITEOPS_MAX_ERROR_DETAILS  (default 100)
    api_base_url:        SITEOPS_API_BASE_URL
    http_timeout:        SITEOPS_HTTP_TIMEOUT       (seconds, default 30)
    log_level:           SITEOPS_LOG_LEVEL          (default INFO)
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml

ENV_PREFIX = "SITEOPS_"


@dataclass(frozen=True)
class IngestionSettings:
    database_url: str = "sqlite+pysqlite:///:memory:"
    batch_size: int = 50
    max_error_details: int = 100
    api_base_url: str = "http://localhost:3000/api"
    http_timeout: float = 30.0
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {self.batch_size}")
        if self.max_error_details < 0:
            raise ValueError(
                f"max_error_details must not be negative, got {self.max_error_details}"
            )


def _coerce(name: str, value: Any) -> Any:
    if name in ("batch_size", "max_error_details"):
        return int(value)
    if name == "http_timeout":
        return float(value)
    return str(value)


def load_settings(
    path: Path | str | None = None,
    env: Mapping[str, str] | None = None,
) -> IngestionSettings:
    """
    Build settings from YAML (optional) plus environment overrides.

    Raises:
        FileNotFoundError: ``path`` given but missing.
        ValueError: a numeric setting is not a number or out of range.
    """
    env = os.environ if env is None else env
    known = {f.name for f in fields(IngestionSettings)}

    values: dict[str, Any] = {}
    if path is not None:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        values.update({k: _coerce(k, v) for k, v in data.items() if k in known})

    for name in known:
        raw = env.get(f"{ENV_PREFIX}{name.upper()}")
        if raw is not None and raw != "":
            values[name] = _coerce(name, raw)

    return replace(IngestionSettings(), **values)
