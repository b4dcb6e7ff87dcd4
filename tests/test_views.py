from __future__ import annotations

import pytest

from econdash.data import Dataset, parse_csv_text
from econdash.schema import Schema, infer_dataset_schema
from econdash.views import (
    compose_views,
    compute_overview,
    compute_report,
    distribution_view,
    format_value,
    growth_metric,
    latest_year,
)


def test_end_to_end_distribution(sample_dataset):
    schema = infer_dataset_schema(sample_dataset)
    rows = [r for r in sample_dataset.rows if r["Year"] == 2000]
    only_2000 = Dataset.from_records(rows, sample_dataset.columns)
    view = distribution_view(only_2000, schema, "GDP")
    assert view.year == 2000
    assert view.records() == [{"Country": "B", "GDP": 300}, {"Country": "A", "GDP": 100}]


def test_distribution_uses_latest_year_only(sample_dataset):
    schema = infer_dataset_schema(sample_dataset)
    view = distribution_view(sample_dataset, schema, "GDP")
    assert view.year == 2001
    assert view.records() == [{"Country": "A", "GDP": 150}]


def test_distribution_caps_at_five():
    rows = [{"Country": f"C{i}", "Year": 2020, "GDP": i} for i in range(8)]
    rows.append({"Country": "Old", "Year": 2019, "GDP": 1000})
    ds = Dataset.from_records(rows, ["Country", "Year", "GDP"])
    view = distribution_view(ds, infer_dataset_schema(ds), "GDP")
    assert [e.label for e in view.entries] == ["C7", "C6", "C5", "C4", "C3"]


def test_compose_views_distribution_has_five_entries():
    rows = [{"Country": f"C{i}", "Year": 2020, "GDP": i * 10} for i in range(12)]
    ds = Dataset.from_records(rows, ["Country", "Year", "GDP"])
    schema = Schema(country_field="Country", year_field="Year", metric_fields=("GDP",))
    views = compose_views(ds, schema, "GDP")
    assert len(views.distribution.entries) == 5
    assert views.charts["distribution"].series[0].name == "Top 5 (2020)"
    assert len(views.charts["distribution"].labels) == 5


def test_distribution_ranks_missing_values_last():
    rows = [
        {"Country": "A", "Year": 2020, "GDP": None},
        {"Country": "B", "Year": 2020, "GDP": 2},
        {"Country": "C", "Year": 2020, "GDP": 7},
    ]
    ds = Dataset.from_records(rows, ["Country", "Year", "GDP"])
    schema = Schema(country_field="Country", year_field="Year", metric_fields=("GDP",))
    assert [e.label for e in distribution_view(ds, schema, "GDP").entries] == ["C", "B", "A"]


def test_distribution_without_year_field_is_empty(sample_dataset):
    schema = Schema(country_field="Country", year_field=None, metric_fields=("GDP",))
    view = distribution_view(sample_dataset, schema, "GDP")
    assert view.entries == ()
    assert latest_year(sample_dataset, None) is None


def test_growth_metric_choice():
    assert growth_metric(Schema(metric_fields=("GDP", "Exports", "Imports"))) == "Exports"
    assert growth_metric(Schema(metric_fields=("GDP",))) == "GDP"
    assert growth_metric(Schema()) is None


def test_compose_views_growth_is_independent_of_selection(csv_path):
    ds = parse_csv_text(csv_path.read_text())
    schema = infer_dataset_schema(ds)
    assert schema.metric_fields == ("GDP", "Inflation Rate", "Population")

    views = compose_views(ds, schema, "Population")
    assert views.growth.metric == "Inflation Rate"
    assert views.growth.records() == [
        {"Year": 2000, "Inflation Rate": 3.0},
        {"Year": 2001, "Inflation Rate": 4.0},
    ]
    assert views.trend.records() == [{"Year": 2000, "Population": 30}, {"Year": 2001, "Population": 37}]
    assert set(views.charts) == {"trend", "distribution", "growth"}
    assert views.charts["trend"].kind == "line"
    assert views.charts["distribution"].kind == "bar"
    assert views.charts["growth"].series[0].color == "#10b981"


def test_compose_views_with_unknown_selection(sample_dataset):
    views = compose_views(sample_dataset, infer_dataset_schema(sample_dataset), "Nope")
    assert [p.value for p in views.trend.points] == [0, 0]
    assert [e.value for e in views.distribution.entries] == [None]
    payload = compute_overview(views)
    assert payload["selection"] == "Nope"
    assert "trend" in payload["charts"]


def test_compute_overview_contains_vega_specs(sample_dataset):
    views = compose_views(sample_dataset, infer_dataset_schema(sample_dataset), "GDP")
    payload = compute_overview(views)
    assert payload["trend"]["points"] == [{"Year": 2000, "GDP": 400}, {"Year": 2001, "GDP": 150}]
    assert payload["distribution"]["year"] == 2001
    assert payload["chart_specs"]["trend"]["series"][0]["fill_style"] == "gradient"
    assert "$schema" in payload["charts"]["trend"]


@pytest.mark.parametrize(
    "value, expected",
    [
        (2_500_000_000, "2.5B"),
        (3_400_000, "3.4M"),
        (1_250, "1.2K"),
        (12.5, "12.50"),
        (None, "--"),
        ("x", "--"),
    ],
)
def test_format_value(value, expected):
    assert format_value(value) == expected


def test_compute_report(csv_path):
    ds = parse_csv_text(csv_path.read_text())
    report = compute_report(ds, infer_dataset_schema(ds))
    assert report["summary"]["rows"] == 5
    assert report["summary"]["countries"] == ["A", "B", "C"]
    assert report["summary"]["years"] == [2000, 2001]
    gdp = report["metrics"][0]
    assert gdp["metric"] == "GDP"
    assert gdp["aggregation"] == "sum"
    assert gdp["first_value"] == 400
    assert gdp["latest_value"] == 200
    assert gdp["change"] == -200
    assert report["metrics"][1]["aggregation"] == "mean"


def test_compute_report_on_empty_dataset():
    report = compute_report(Dataset(), Schema())
    assert report["summary"]["rows"] == 0
    assert report["metrics"] == []
