"""Core (UI-agnostic) county GDP dashboard logic.

This package contains:
- data loading (bundled CSV -> pandas -> immutable records)
- filter/sort normalization
- the transform layer (growth rate, formatting, sort, filter, statistics)
- page compute functions (JSON-serializable payloads)
- chart helpers (Altair -> Vega-Lite spec dict)
"""
