"""Core (UI-agnostic) dashboard logic.

This package contains:
- data loading (CSV -> Dataset of typed rows)
- schema inference (country / year / metric columns)
- per-year aggregation
- view composition (trend, distribution, growth, report payloads)
- chart helpers (ChartSpec -> Altair -> Vega-Lite spec dict)
- dashboard state (load / select_metric / navigate)
"""
