from __future__ import annotations

from typing import Any, Dict, List, Sequence

import json

import altair as alt
import pandas as pd

from core.data import counties_frame

alt.data_transformers.disable_max_rows()

GROWTH_BAND_COLORS = ["#dc2626", "#f59e0b", "#10b981", "#2563eb"]


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def top_gdp_bar(counties: Sequence[object]) -> alt.Chart:
    """Horizontal bar chart of 2023 GDP, one bar per county, in the given order."""
    df = counties_frame(counties)
    order: List[str] = df["code"].tolist() if not df.empty else []
    names = dict(zip(df["code"], df["name"])) if not df.empty else {}
    hover = alt.selection_point(fields=["code"], on="mouseover", empty="all")
    return (
        alt.Chart(df)
        .mark_bar()
        .encode(
            x=alt.X("gdp_2023:Q", title="2023 GDP (亿元)", axis=alt.Axis(format=",.0f", gridDash=[4, 4], domain=False, ticks=False)),
            y=alt.Y(
                "code:N",
                title=None,
                sort=order,
                axis=alt.Axis(grid=False, labelExpr=f"{json.dumps(names, ensure_ascii=False)}[datum.value] || datum.value"),
            ),
            color=alt.value("#2563eb"),
            opacity=alt.condition(hover, alt.value(1), alt.value(0.6)),
            tooltip=[
                alt.Tooltip("name:N", title="County"),
                alt.Tooltip("region_rank:N", title="Region rank"),
                alt.Tooltip("gdp_2023:Q", title="2023 GDP", format=",.2f"),
                alt.Tooltip("growth_rate_formatted:N", title="Growth"),
            ],
        )
        .add_params(hover)
        .properties(height=max(120, 28 * len(order)))
    )


def growth_pie(distribution: Sequence[Dict[str, object]]) -> alt.Chart:
    df = pd.DataFrame(list(distribution), columns=["band", "count"])
    bands = df["band"].tolist()
    return (
        alt.Chart(df)
        .mark_arc(innerRadius=40)
        .encode(
            theta=alt.Theta("count:Q", stack=True),
            color=alt.Color(
                "band:N",
                title="Growth",
                sort=bands,
                scale=alt.Scale(domain=bands, range=GROWTH_BAND_COLORS[: len(bands)]),
            ),
            tooltip=[alt.Tooltip("band:N", title="Growth band"), alt.Tooltip("count:Q", title="Counties")],
        )
        .properties(height=260)
    )
