from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional, Tuple, get_args

SortKey = Literal["gdp2023", "gdp2022", "growthRate", "perCapitaGDP"]
SortDirection = Literal["asc", "desc"]

SORT_KEYS: Tuple[str, ...] = get_args(SortKey)
SORT_DIRECTIONS: Tuple[str, ...] = get_args(SortDirection)

ALL_PREFECTURES = "All Prefectures"


@dataclass(frozen=True)
class DashboardSettings:
    top_n: int = 10
    default_sort_by: SortKey = "gdp2023"
    default_direction: SortDirection = "desc"


@dataclass(frozen=True)
class FilterOptions:
    prefecture: Optional[str] = None
    growth_rate_min: Optional[float] = None
    growth_rate_max: Optional[float] = None
    gdp_min: Optional[float] = None

    def is_empty(self) -> bool:
        return (
            not self.prefecture
            and self.growth_rate_min is None
            and self.growth_rate_max is None
            and self.gdp_min is None
        )


def _as_optional_float(value: object) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        out = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if out != out:  # NaN
        return None
    return out


def normalize_filter_options(raw: Optional[dict]) -> FilterOptions:
    raw = raw or {}
    prefecture = raw.get("prefecture")
    prefecture = str(prefecture).strip() if prefecture is not None else ""
    if prefecture == ALL_PREFECTURES:
        prefecture = ""
    return FilterOptions(
        prefecture=prefecture or None,
        growth_rate_min=_as_optional_float(raw.get("growth_rate_min")),
        growth_rate_max=_as_optional_float(raw.get("growth_rate_max")),
        gdp_min=_as_optional_float(raw.get("gdp_min")),
    )


def normalize_sort(raw: Optional[dict], *, settings: Optional[DashboardSettings] = None) -> Tuple[SortKey, SortDirection]:
    raw = raw or {}
    settings = settings or DashboardSettings()
    sort_by = raw.get("sort_by") or settings.default_sort_by
    if sort_by not in SORT_KEYS:
        sort_by = settings.default_sort_by
    direction = str(raw.get("direction") or settings.default_direction).lower()
    if direction not in SORT_DIRECTIONS:
        direction = settings.default_direction
    return sort_by, direction  # type: ignore[return-value]


def normalize_settings(raw: Optional[dict]) -> DashboardSettings:
    raw = raw or {}
    top_n = raw.get("top_n", 10)
    try:
        top_n = int(top_n)
    except (TypeError, ValueError):
        top_n = 10
    top_n = max(1, min(50, top_n))
    sort_by, direction = normalize_sort(
        {"sort_by": raw.get("default_sort_by"), "direction": raw.get("default_direction")}
    )
    return DashboardSettings(top_n=top_n, default_sort_by=sort_by, default_direction=direction)
