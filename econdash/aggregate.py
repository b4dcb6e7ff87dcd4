from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Hashable, Iterable, List, Mapping, Optional

import pandas as pd

from econdash.schema import is_number


RATE_LIKE_RE = re.compile(r"rate|inflation|percent|index", re.IGNORECASE)
YEAR_LABEL_DEFAULT = "year"


@dataclass(frozen=True)
class AggregatedPoint:
    year: Any
    value: float

    def as_record(self, year_field: Optional[str], metric: str) -> Dict[str, Any]:
        return {year_field or YEAR_LABEL_DEFAULT: self.year, metric: self.value}


def is_rate_like(metric: str) -> bool:
    """Ratios and percentages are averaged per year; everything else is summed."""
    return bool(RATE_LIKE_RE.search(metric or ""))


def distinct_years(rows: Iterable[Mapping[str, Any]], year_field: Optional[str]) -> List[Hashable]:
    """Distinct year keys: numeric ones ascending, then any others in first-seen order."""
    seen: Dict[Hashable, None] = {}
    for row in rows:
        key = row.get(year_field) if year_field is not None else None
        seen.setdefault(key, None)
    numeric = sorted(k for k in seen if is_number(k))
    other = [k for k in seen if not is_number(k)]
    return numeric + other


def aggregate(rows: Iterable[Mapping[str, Any]], year_field: Optional[str], metric: str) -> List[AggregatedPoint]:
    rows = list(rows)
    years = distinct_years(rows, year_field)
    averaged = is_rate_like(metric)

    totals: Dict[Hashable, float] = {y: 0 for y in years}
    counts: Dict[Hashable, int] = {y: 0 for y in years}
    for row in rows:
        value = row.get(metric)
        if not is_number(value):
            continue
        key = row.get(year_field) if year_field is not None else None
        totals[key] += value
        counts[key] += 1

    points: List[AggregatedPoint] = []
    for year in years:
        total = totals[year]
        value = total / max(counts[year], 1) if averaged else total
        points.append(AggregatedPoint(year=year, value=value))
    return points


def points_to_records(points: Iterable[AggregatedPoint], year_field: Optional[str], metric: str) -> List[Dict[str, Any]]:
    return [p.as_record(year_field, metric) for p in points]


def points_to_frame(points: Iterable[AggregatedPoint], year_field: Optional[str], metric: str) -> pd.DataFrame:
    year_col = year_field or YEAR_LABEL_DEFAULT
    records = points_to_records(points, year_field, metric)
    if not records:
        return pd.DataFrame(columns=[year_col, metric])
    return pd.DataFrame.from_records(records, columns=[year_col, metric])
