from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from econdash.aggregate import AggregatedPoint, aggregate, distinct_years, is_rate_like, points_to_records
from econdash.charts import ACCENT, SUCCESS, ChartSpec, SeriesSpec, chart_to_vega
from econdash.data import Dataset
from econdash.schema import Schema, is_number


TOP_N = 5
MOUNTS = ("trend", "distribution", "growth")


@dataclass(frozen=True)
class SeriesView:
    metric: Optional[str]
    year_field: Optional[str]
    points: Tuple[AggregatedPoint, ...] = ()

    @property
    def labels(self) -> List[Any]:
        return [p.year for p in self.points]

    @property
    def values(self) -> List[float]:
        return [p.value for p in self.points]

    def records(self) -> List[Dict[str, Any]]:
        if self.metric is None:
            return []
        return points_to_records(self.points, self.year_field, self.metric)


@dataclass(frozen=True)
class DistributionEntry:
    label: Any
    value: Any

    def as_record(self, country_field: Optional[str], metric: str) -> Dict[str, Any]:
        return {country_field or "label": self.label, metric: self.value}


@dataclass(frozen=True)
class DistributionView:
    metric: str
    year: Any = None
    country_field: Optional[str] = None
    entries: Tuple[DistributionEntry, ...] = ()

    def records(self) -> List[Dict[str, Any]]:
        return [e.as_record(self.country_field, self.metric) for e in self.entries]


@dataclass(frozen=True)
class DashboardViews:
    selection: str
    trend: SeriesView
    distribution: DistributionView
    growth: SeriesView
    charts: Dict[str, ChartSpec] = field(default_factory=dict)


def latest_year(dataset: Dataset, year_field: Optional[str]) -> Any:
    if year_field is None:
        return None
    years = [y for y in distinct_years(dataset.rows, year_field) if is_number(y)]
    return years[-1] if years else None


def growth_metric(schema: Schema) -> Optional[str]:
    """Second metric when there is one, else the first, else nothing."""
    if len(schema.metric_fields) > 1:
        return schema.metric_fields[1]
    return schema.metric_fields[0] if schema.metric_fields else None


def trend_view(dataset: Dataset, schema: Schema, metric: str) -> SeriesView:
    points = aggregate(dataset.rows, schema.year_field, metric)
    return SeriesView(metric=metric, year_field=schema.year_field, points=tuple(points))


def growth_view(dataset: Dataset, schema: Schema) -> SeriesView:
    metric = growth_metric(schema)
    if metric is None:
        return SeriesView(metric=None, year_field=schema.year_field)
    points = aggregate(dataset.rows, schema.year_field, metric)
    return SeriesView(metric=metric, year_field=schema.year_field, points=tuple(points))


def distribution_view(dataset: Dataset, schema: Schema, metric: str) -> DistributionView:
    """Top five rows of the latest year, ranked by `metric`; rows without a number rank last."""
    year = latest_year(dataset, schema.year_field)
    if year is None or dataset.empty:
        return DistributionView(metric=metric, year=year, country_field=schema.country_field)

    frame = dataset.to_frame()
    latest = frame[frame[schema.year_field].map(lambda v: is_number(v) and v == year).astype(bool)]
    if metric in latest.columns:
        rank_key = pd.to_numeric(latest[metric].map(lambda v: v if is_number(v) else None), errors="coerce")
    else:
        rank_key = pd.Series(float("nan"), index=latest.index)
    ranked = (
        latest.assign(_rank_key=rank_key)
        .sort_values("_rank_key", ascending=False, na_position="last", kind="mergesort")
        .head(TOP_N)
    )

    entries = []
    for _, row in ranked.iterrows():
        label = row[schema.country_field] if schema.country_field in ranked.columns else None
        value = row[metric] if metric in ranked.columns else None
        entries.append(DistributionEntry(label=label, value=value))
    return DistributionView(metric=metric, year=year, country_field=schema.country_field, entries=tuple(entries))


def trend_chart(view: SeriesView) -> ChartSpec:
    series = (SeriesSpec(name=view.metric, values=tuple(view.values), color=ACCENT, fill_style="gradient"),) if view.metric else ()
    return ChartSpec(kind="line", labels=tuple(view.labels), series=series)


def distribution_chart(view: DistributionView) -> ChartSpec:
    name = f"Top {TOP_N} ({view.year})" if view.year is not None else f"Top {TOP_N}"
    values = tuple(e.value if is_number(e.value) else None for e in view.entries)
    return ChartSpec(
        kind="bar",
        labels=tuple(e.label for e in view.entries),
        series=(SeriesSpec(name=name, values=values, color=ACCENT, fill_style="solid"),),
    )


def growth_chart(view: SeriesView) -> ChartSpec:
    if view.metric is None:
        return ChartSpec(kind="line")
    return ChartSpec(
        kind="line",
        labels=tuple(view.labels),
        series=(SeriesSpec(name=view.metric, values=tuple(view.values), color=SUCCESS, fill_style="translucent"),),
        title=view.metric,
    )


def compose_views(dataset: Dataset, schema: Schema, selection: str) -> DashboardViews:
    trend = trend_view(dataset, schema, selection)
    distribution = distribution_view(dataset, schema, selection)
    growth = growth_view(dataset, schema)
    return DashboardViews(
        selection=selection,
        trend=trend,
        distribution=distribution,
        growth=growth,
        charts={
            "trend": trend_chart(trend),
            "distribution": distribution_chart(distribution),
            "growth": growth_chart(growth),
        },
    )


def compute_overview(views: DashboardViews) -> Dict[str, Any]:
    """JSON-serializable overview payload, charts included as Vega-Lite specs."""
    return {
        "selection": views.selection,
        "trend": {"metric": views.trend.metric, "points": views.trend.records()},
        "distribution": {
            "metric": views.distribution.metric,
            "year": views.distribution.year,
            "entries": views.distribution.records(),
        },
        "growth": {"metric": views.growth.metric, "points": views.growth.records()},
        "chart_specs": {name: spec.to_dict() for name, spec in views.charts.items()},
        "charts": {name: chart_to_vega(spec) for name, spec in views.charts.items()},
    }


# ---------------- Report view ----------------
def format_value(value: object) -> str:
    if value is None or not is_number(value):
        return "--"
    v = float(value)  # type: ignore[arg-type]
    if v >= 1e9:
        return f"{v / 1e9:.1f}B"
    if v >= 1e6:
        return f"{v / 1e6:.1f}M"
    if v >= 1e3:
        return f"{v / 1e3:.1f}K"
    return f"{v:.2f}"


def _sorted_distinct(values: List[Any]) -> List[Any]:
    distinct = list(dict.fromkeys(v for v in values if v is not None))
    return sorted(distinct, key=lambda v: (not is_number(v), v if is_number(v) else str(v)))


def compute_report(dataset: Dataset, schema: Schema) -> Dict[str, Any]:
    countries = _sorted_distinct([r.get(schema.country_field) for r in dataset.rows]) if schema.country_field else []
    years = [y for y in distinct_years(dataset.rows, schema.year_field) if is_number(y)] if schema.year_field else []

    metrics: List[Dict[str, Any]] = []
    for metric in schema.metric_fields:
        points = [p for p in aggregate(dataset.rows, schema.year_field, metric) if is_number(p.year)]
        first = points[0] if points else None
        last = points[-1] if points else None
        change = (last.value - first.value) if first is not None and last is not None else None
        metrics.append(
            {
                "metric": metric,
                "aggregation": "mean" if is_rate_like(metric) else "sum",
                "first_year": first.year if first else None,
                "latest_year": last.year if last else None,
                "first_value": first.value if first else None,
                "latest_value": last.value if last else None,
                "change": change,
                "first_display": format_value(first.value if first else None),
                "latest_display": format_value(last.value if last else None),
                "change_display": format_value(change),
            }
        )

    return {
        "summary": {
            "rows": len(dataset),
            "columns": len(dataset.columns),
            "countries": countries,
            "country_count": len(countries),
            "years": years,
        },
        "schema": schema.to_dict(),
        "metrics": metrics,
    }
