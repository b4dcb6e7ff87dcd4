"""Heuristic detection of column roles (country, year, metrics)."""

from __future__ import annotations

import math
import numbers
import re
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from econdash.data import Dataset


COUNTRY = "country"
YEAR = "year"

# Evaluated top to bottom; the first column matching a role's pattern wins that role.
ROLE_RULES: Tuple[Tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"country|nation|location", re.IGNORECASE), COUNTRY),
    (re.compile(r"year|date|time", re.IGNORECASE), YEAR),
)


@dataclass(frozen=True)
class Schema:
    country_field: Optional[str] = None
    year_field: Optional[str] = None
    metric_fields: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def has_metrics(self) -> bool:
        return bool(self.metric_fields)

    def to_dict(self) -> dict:
        return {
            "country_field": self.country_field,
            "year_field": self.year_field,
            "metric_fields": list(self.metric_fields),
        }


def is_number(value: Any) -> bool:
    """True for real numbers; bools and NaN do not count."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return not math.isnan(value)


def match_role(columns: Sequence[str], role: str, rules: Sequence[Tuple[re.Pattern[str], str]] = ROLE_RULES) -> Optional[str]:
    for pattern, rule_role in rules:
        if rule_role != role:
            continue
        for col in columns:
            if pattern.search(col):
                return col
    return None


def infer_schema(columns: Sequence[str], sample_row: Mapping[str, Any]) -> Schema:
    columns = [str(c) for c in columns]
    country_field = match_role(columns, COUNTRY) or (columns[0] if columns else None)
    year_field = match_role(columns, YEAR)
    metric_fields: List[str] = [
        col for col in columns if col != year_field and is_number(sample_row.get(col))
    ]
    return Schema(country_field=country_field, year_field=year_field, metric_fields=tuple(metric_fields))


def infer_dataset_schema(dataset: Dataset) -> Schema:
    return infer_schema(dataset.columns, dataset.first_row())
