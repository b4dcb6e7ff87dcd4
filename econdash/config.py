from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional


DATA_DIR = Path(__file__).resolve().parents[1]
DEFAULT_CSV_NAME = "Global Economy Indicators.csv"
FALLBACK_METRIC = "Value"

ENV_CSV = "ECONDASH_CSV"
ENV_METRIC_BUTTONS = "ECONDASH_METRIC_BUTTONS"
ENV_LOG_LEVEL = "ECONDASH_LOG_LEVEL"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class DashboardSettings:
    csv_path: Path = DATA_DIR / DEFAULT_CSV_NAME
    metric_button_limit: Optional[int] = None
    fallback_metric: str = FALLBACK_METRIC
    log_level: str = "INFO"


def _as_int(value: object, default: Optional[int]) -> Optional[int]:
    if value is None or value == "":
        return default
    try:
        return int(value)  # type: ignore[arg-type]
    except Exception:
        return default


def load_settings(raw: Optional[Mapping[str, object]] = None, *, env: Optional[Mapping[str, str]] = None) -> DashboardSettings:
    """Build settings from an explicit mapping, falling back to environment variables."""
    raw = dict(raw or {})
    env = os.environ if env is None else env

    csv_path = raw.get("csv_path") or env.get(ENV_CSV) or DATA_DIR / DEFAULT_CSV_NAME
    limit = _as_int(raw.get("metric_button_limit", env.get(ENV_METRIC_BUTTONS)), None)
    if limit is not None and limit < 1:
        limit = None

    fallback_metric = str(raw.get("fallback_metric") or FALLBACK_METRIC)
    log_level = str(raw.get("log_level") or env.get(ENV_LOG_LEVEL) or "INFO").upper()

    return DashboardSettings(
        csv_path=Path(str(csv_path)),
        metric_button_limit=limit,
        fallback_metric=fallback_metric,
        log_level=log_level,
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
