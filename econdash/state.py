from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Literal, Mapping, Optional, Sequence, Union

from econdash.charts import ChartRegistry
from econdash.config import FALLBACK_METRIC
from econdash.data import CsvSource, Dataset, DatasetLoadError, load_dataset, read_dataset
from econdash.schema import Schema, infer_dataset_schema
from econdash.views import MOUNTS, DashboardViews, compose_views, compute_report


logger = logging.getLogger(__name__)

View = Literal["overview", "report"]
VIEWS = ("overview", "report")


class DashboardState:
    """The one live dashboard: dataset, inferred schema, selected metric, active view.

    All mutation goes through `load`, `select_metric` and `navigate`. When a
    `ChartRegistry` is attached, every recompute rebinds the trend,
    distribution and growth mounts.
    """

    def __init__(
        self,
        *,
        renderer: Optional[ChartRegistry] = None,
        fallback_metric: str = FALLBACK_METRIC,
    ) -> None:
        self.dataset = Dataset()
        self.schema = Schema()
        self.selection = ""
        self.view: View = "overview"
        self.views: Optional[DashboardViews] = None
        self.report: Optional[Dict[str, Any]] = None
        self.renderer = renderer
        self.fallback_metric = fallback_metric

    @property
    def loaded(self) -> bool:
        return self.views is not None

    def load(self, rows: Iterable[Mapping[str, Any]], columns: Sequence[str]) -> DashboardViews:
        return self.load_dataset(Dataset.from_records(rows, columns))

    def load_dataset(self, dataset: Dataset) -> DashboardViews:
        self.dataset = dataset
        self.schema = infer_dataset_schema(dataset)
        self.selection = self.schema.metric_fields[0] if self.schema.metric_fields else self.fallback_metric
        logger.info(
            "Dataset loaded: %d rows, metrics=%s, selection=%s",
            len(dataset),
            list(self.schema.metric_fields),
            self.selection,
        )
        self.report = compute_report(self.dataset, self.schema)
        return self.recompute()

    def load_csv(self, source: Union[CsvSource, Path]) -> Optional[DashboardViews]:
        """Load a CSV path or buffer; on failure log it and keep the current state."""
        try:
            if isinstance(source, (str, Path)):
                dataset = load_dataset(source)
            else:
                dataset = read_dataset(source)
        except DatasetLoadError as exc:
            logger.warning("Dataset load failed: %s", exc)
            return None
        return self.load_dataset(dataset)

    def select_metric(self, name: str) -> DashboardViews:
        self.selection = name
        return self.recompute()

    def navigate(self, view: str) -> View:
        if view not in VIEWS:
            raise ValueError(f"Unknown view {view!r}; expected one of {VIEWS}")
        self.view = view  # type: ignore[assignment]
        return self.view

    def metric_options(self, limit: Optional[int] = None) -> List[str]:
        options = list(self.schema.metric_fields)
        return options[:limit] if limit else options

    def recompute(self) -> DashboardViews:
        self.views = compose_views(self.dataset, self.schema, self.selection)
        self.render()
        return self.views

    def render(self) -> None:
        if self.renderer is None or self.views is None:
            return
        for mount in MOUNTS:
            self.renderer.bind(mount, self.views.charts[mount])