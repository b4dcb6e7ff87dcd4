from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, List, Literal, Optional, Sequence, Tuple

import altair as alt
import pandas as pd

alt.data_transformers.disable_max_rows()

ChartKind = Literal["line", "bar"]
FillStyle = Literal["gradient", "translucent", "solid", "none"]

ACCENT = "#6366f1"
SUCCESS = "#10b981"
CHART_HEIGHT = 260


@dataclass(frozen=True)
class SeriesSpec:
    name: str
    values: Tuple[Any, ...]
    color: str = ACCENT
    fill_style: FillStyle = "none"


@dataclass(frozen=True)
class ChartSpec:
    kind: ChartKind
    labels: Tuple[Any, ...] = ()
    series: Tuple[SeriesSpec, ...] = ()
    title: Optional[str] = None

    @property
    def empty(self) -> bool:
        return not self.series or not any(s.values for s in self.series)

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["labels"] = list(self.labels)
        out["series"] = [{**asdict(s), "values": list(s.values)} for s in self.series]
        return out


def to_vega_spec(chart: alt.TopLevelMixin) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def hex_to_rgba(color: str, alpha: float) -> str:
    h = color.lstrip("#")
    if len(h) == 3:
        h = "".join(ch * 2 for ch in h)
    r, g, b = (int(h[i : i + 2], 16) for i in (0, 2, 4))
    return f"rgba({r}, {g}, {b}, {alpha})"


def _area_color(series: SeriesSpec) -> Any:
    if series.fill_style == "gradient":
        return alt.Gradient(
            gradient="linear",
            stops=[
                alt.GradientStop(color=hex_to_rgba(series.color, 0.0), offset=0),
                alt.GradientStop(color=hex_to_rgba(series.color, 0.5), offset=1),
            ],
            x1=1,
            x2=1,
            y1=1,
            y2=0,
        )
    if series.fill_style == "translucent":
        return hex_to_rgba(series.color, 0.1)
    return series.color


def _series_frame(labels: Sequence[Any], series: SeriesSpec) -> pd.DataFrame:
    n = min(len(labels), len(series.values))
    return pd.DataFrame(
        {
            "label": pd.Series(list(labels[:n]), dtype=object),
            "value": pd.to_numeric(pd.Series(list(series.values[:n]), dtype=object), errors="coerce"),
            "series": series.name,
        }
    )


def build_chart(spec: ChartSpec) -> alt.TopLevelMixin:
    """Altair rendering of a ChartSpec: one layer per series, plus an area layer for filled lines."""
    x_type = "O" if spec.kind == "line" else "N"
    layers: List[alt.Chart] = []
    for series in spec.series:
        base = alt.Chart(_series_frame(spec.labels, series)).encode(
            x=alt.X(f"label:{x_type}", title=None, sort=None, axis=alt.Axis(grid=False, labelAngle=0)),
            y=alt.Y("value:Q", title=None, axis=alt.Axis(format="~s", gridDash=[4, 4], domain=False, ticks=False)),
            tooltip=[
                alt.Tooltip("label:N", title="Label"),
                alt.Tooltip("value:Q", title=series.name, format=",.2f"),
            ],
        )
        if spec.kind == "bar":
            layers.append(base.mark_bar(color=series.color, cornerRadiusTopLeft=4, cornerRadiusTopRight=4))
            continue
        if series.fill_style != "none":
            layers.append(base.mark_area(color=_area_color(series), interpolate="monotone"))
        layers.append(base.mark_line(color=series.color, interpolate="monotone", point={"filled": True, "size": 40}))

    if not layers:
        empty = alt.Chart(pd.DataFrame({"label": [], "value": []}))
        chart: alt.TopLevelMixin = empty.mark_bar() if spec.kind == "bar" else empty.mark_line()
    elif len(layers) == 1:
        chart = layers[0]
    else:
        chart = alt.layer(*layers)

    if spec.title:
        return chart.properties(title=spec.title, height=CHART_HEIGHT)
    return chart.properties(height=CHART_HEIGHT)


def chart_to_vega(spec: ChartSpec) -> Dict[str, Any]:
    return to_vega_spec(build_chart(spec))


class ChartRegistry:
    """Chart handles bound to named mount points.

    A mount holds at most one handle. Binding a new spec always disposes the
    old handle first, so a failed acquire leaves the mount empty rather than
    holding a stale chart.
    """

    def __init__(
        self,
        acquire: Callable[[str, ChartSpec], Any],
        dispose: Optional[Callable[[str, Any], None]] = None,
    ) -> None:
        self._acquire = acquire
        self._dispose = dispose
        self._handles: Dict[str, Any] = {}

    def __contains__(self, mount: str) -> bool:
        return mount in self._handles

    def __enter__(self) -> "ChartRegistry":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release_all()

    @property
    def mounts(self) -> List[str]:
        return list(self._handles)

    def handle(self, mount: str) -> Any:
        return self._handles.get(mount)

    def bind(self, mount: str, spec: ChartSpec) -> Any:
        self.release(mount)
        handle = self._acquire(mount, spec)
        self._handles[mount] = handle
        return handle

    def release(self, mount: str) -> None:
        handle = self._handles.pop(mount, None)
        if handle is not None and self._dispose is not None:
            self._dispose(mount, handle)

    def release_all(self) -> None:
        for mount in list(self._handles):
            self.release(mount)
