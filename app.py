from contextlib import contextmanager
from typing import Any, Dict, Optional

import pandas as pd
import streamlit as st

from econdash.charts import ChartRegistry, ChartSpec, chart_to_vega
from econdash.config import configure_logging, load_settings
from econdash.state import DashboardState
from econdash.views import TOP_N


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .breadcrumb {color: #94a3b8;font-size: 0.9rem;margin-bottom: 2px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #111827;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;margin-bottom: 6px;}
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin-top: 6px;}
        .chip {background: #f3f4f6;border: 1px solid #e5e7eb;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #374151;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container(border=True)
    container.markdown(f"<div class='card-title'>{title}</div>", unsafe_allow_html=True)
    with container:
        yield container


def render_page_header(title: str, breadcrumb: str, chips: list):
    st.markdown(
        f"<div class='app-top-bar'><div class='breadcrumb'>{breadcrumb}</div><div class='page-title'>{title}</div></div>",
        unsafe_allow_html=True,
    )
    st.markdown(
        "<div class='chip-row'>" + "".join(f"<span class='chip'>{c}</span>" for c in chips) + "</div>",
        unsafe_allow_html=True,
    )


@contextmanager
def attached(state: DashboardState, registry: ChartRegistry):
    """Bind placeholders for this script run only; callbacks on the next run must not touch them."""
    state.renderer = registry
    try:
        yield state
    finally:
        state.renderer = None


def make_registry(slots: Dict[str, Any]) -> ChartRegistry:
    def acquire(mount: str, spec: ChartSpec):
        slot = slots[mount]
        slot.vega_lite_chart(chart_to_vega(spec), use_container_width=True)
        return slot

    def dispose(mount: str, slot: Any) -> None:
        slot.empty()

    return ChartRegistry(acquire, dispose)


def get_state() -> DashboardState:
    if "dashboard" not in st.session_state:
        state = DashboardState(fallback_metric=settings.fallback_metric)
        state.load_csv(settings.csv_path)
        st.session_state["dashboard"] = state
    return st.session_state["dashboard"]


def on_metric_click(metric: str):
    st.session_state["dashboard"].select_metric(metric)


# ---------- UI setup ----------
settings = load_settings()
configure_logging(settings.log_level)

st.set_page_config(page_title="Global Economy Dashboard", layout="wide")
inject_base_styles()

state = get_state()

with st.sidebar:
    st.markdown("### Navigate")
    nav_choice = st.radio("Navigate", ["Overview", "Report"], index=0 if state.view == "overview" else 1)
    state.navigate(nav_choice.lower())

    st.markdown("---")
    st.markdown("### Dataset")
    uploaded = st.file_uploader("Replace dataset (CSV)", type=["csv"])
    if uploaded is not None:
        upload_key = (uploaded.name, uploaded.size)
        if st.session_state.get("_upload_key") != upload_key:
            st.session_state["_upload_key"] = upload_key
            state.load_csv(uploaded)
    st.caption(f"Source: {settings.csv_path.name}")

if not state.loaded:
    st.title("Global Economy Dashboard")
    st.info(f"No dataset loaded. Place `{settings.csv_path.name}` next to app.py or upload a CSV.")
    st.stop()


def render_overview():
    chips = [
        f"Rows: {len(state.dataset):,}",
        f"Metric: {state.selection}",
        f"Year column: {state.schema.year_field or 'none'}",
    ]
    render_page_header("Overview", "Dashboard / Overview", chips)

    options = state.metric_options(settings.metric_button_limit)
    if options:
        btn_cols = st.columns(len(options))
        for col, metric in zip(btn_cols, options):
            col.button(
                metric,
                key=f"metric_{metric}",
                type="primary" if metric == state.selection else "secondary",
                on_click=on_metric_click,
                args=(metric,),
                use_container_width=True,
            )

    slots: Dict[str, Any] = {}
    with card(f"Global trend: {state.selection}"):
        slots["trend"] = st.empty()
    left, right = st.columns(2)
    with left:
        latest = state.views.distribution.year if state.views else None
        with card(f"Top {TOP_N} ({latest if latest is not None else 'n/a'})"):
            slots["distribution"] = st.empty()
    with right:
        growth_metric = state.views.growth.metric if state.views else None
        with card(f"Growth: {growth_metric or 'n/a'}"):
            slots["growth"] = st.empty()

    with attached(state, make_registry(slots)):
        state.render()

    if not state.schema.has_metrics:
        st.caption("No numeric metric columns were detected in the first data row.")


def render_report():
    report: Optional[dict] = state.report or {}
    summary = report.get("summary", {})
    render_page_header("Report", "Dashboard / Report", [f"Countries: {summary.get('country_count', 0)}"])

    cols = st.columns(3)
    cols[0].metric("Rows", f"{summary.get('rows', 0):,}")
    cols[1].metric("Columns", f"{summary.get('columns', 0):,}")
    years = summary.get("years") or []
    cols[2].metric("Years", f"{years[0]}–{years[-1]}" if years else "N/A")

    with card("Metric summary"):
        metrics_df = pd.DataFrame(report.get("metrics", []))
        if metrics_df.empty:
            st.info("No metrics detected.")
        else:
            display = metrics_df[["metric", "aggregation", "first_year", "first_display", "latest_year", "latest_display", "change_display"]]
            st.dataframe(display, hide_index=True, use_container_width=True)
            st.download_button(
                "Export CSV",
                data=metrics_df.to_csv(index=False).encode("utf-8"),
                file_name="report.csv",
                mime="text/csv",
            )

    with st.expander("Countries"):
        st.write(", ".join(str(c) for c in summary.get("countries", [])))


if state.view == "overview":
    render_overview()
else:
    render_report()
