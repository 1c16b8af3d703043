from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Optional, Sequence

from core.charts import growth_pie, to_vega_spec, top_gdp_bar
from core.data import counties_frame
from core.filters import DashboardSettings, FilterOptions, SortDirection, SortKey
from core.gdp import (
    FormattedCounty,
    apply_view,
    get_statistics,
    growth_distribution,
    top_counties,
)


def compute_overview(
    filters: FilterOptions,
    counties: Sequence[FormattedCounty],
    *,
    sort_by: SortKey = "gdp2023",
    direction: SortDirection = "desc",
    settings: Optional[DashboardSettings] = None,
) -> Dict[str, Any]:
    settings = settings or DashboardSettings()
    visible = apply_view(counties, filters, sort_by, direction)
    distribution = growth_distribution(visible)
    top = top_counties(visible, settings.top_n)

    return {
        "filters": asdict(filters),
        "sort": {"sort_by": sort_by, "direction": direction},
        "statistics": asdict(get_statistics(visible)),
        "rows": counties_frame(visible).to_dict(orient="records"),
        "growth_distribution": distribution,
        "charts": {
            "top_gdp": to_vega_spec(top_gdp_bar(top)),
            "growth_distribution": to_vega_spec(growth_pie(distribution)),
        },
    }
