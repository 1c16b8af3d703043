import logging
import os
from typing import Dict, List, Optional

import altair as alt
import pandas as pd
import streamlit as st

from core.charts import growth_pie, top_gdp_bar
from core.data import counties_frame, format_gdp, format_percent
from core.filters import (
    ALL_PREFECTURES,
    SORT_KEYS,
    normalize_filter_options,
    normalize_settings,
    normalize_sort,
)
from core.gdp import (
    Statistics,
    apply_view,
    get_all_formatted_counties,
    get_all_prefectures,
    get_statistics,
    growth_distribution,
    top_counties,
)

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

alt.data_transformers.disable_max_rows()

SORT_LABELS = {
    "gdp2023": "2023 GDP",
    "gdp2022": "2022 GDP",
    "growthRate": "Growth rate",
    "perCapitaGDP": "Per-capita GDP",
}

TABLE_COLUMNS = {
    "name": "County",
    "region_rank": "Region rank",
    "gdp_2023": "2023 GDP (亿元)",
    "gdp_2022": "2022 GDP (亿元)",
    "growth_rate_formatted": "Growth",
    "per_capita_gdp": "Per-capita GDP (元)",
}


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .breadcrumb {color: #6b7280;font-size: 0.9rem;margin-bottom: 2px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #111827;}
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin-top: 6px;}
        .chip {background: #f3f4f6;border: 1px solid #e5e7eb;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #374151;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


def format_filter_summary(prefecture_name: Optional[str], growth_min: Optional[float], growth_max: Optional[float], gdp_min: Optional[float]) -> str:
    pref_chip = f"Prefecture: {prefecture_name}" if prefecture_name else "Prefecture: All"
    if growth_min is None and growth_max is None:
        growth_chip = "Growth: Any"
    else:
        lo = format_percent(growth_min) if growth_min is not None else "−∞"
        hi = format_percent(growth_max) if growth_max is not None else "+∞"
        growth_chip = f"Growth: {lo} – {hi}"
    gdp_chip = f"GDP ≥ {format_gdp(gdp_min, 0)}" if gdp_min is not None else "GDP: Any"
    return "".join([f"<span class='chip'>{txt}</span>" for txt in [pref_chip, growth_chip, gdp_chip]])


def render_page_header(title: str, breadcrumb: str, filter_summary_html: str, export_df: Optional[pd.DataFrame] = None, export_name: str = "counties.csv"):
    inject_base_styles()
    c1, c2 = st.columns([8, 2])
    with c1:
        st.markdown(
            f"<div class='app-top-bar'><div class='breadcrumb'>{breadcrumb}</div><div class='page-title'>{title}</div></div>",
            unsafe_allow_html=True,
        )
    with c2:
        if export_df is not None and not export_df.empty:
            st.download_button(
                "Export CSV",
                data=export_df.to_csv(index=False).encode("utf-8-sig"),
                file_name=export_name,
                mime="text/csv",
            )
    st.markdown(f"<div class='chip-row'>{filter_summary_html}</div>", unsafe_allow_html=True)


def render_statistics(stats: Statistics):
    if stats.is_empty:
        st.info("No counties match the current filters.")
        return
    cols = st.columns(4)
    cols[0].metric(
        "Total GDP 2023",
        format_gdp(stats.total_gdp_2023),
        delta=f"{format_percent(stats.overall_growth_rate)} YoY",
        help="Sum of 2023 GDP over the visible counties. YoY compares against the 2022 sum.",
    )
    cols[1].metric("Total GDP 2022", format_gdp(stats.total_gdp_2022))
    cols[2].metric("Avg per-capita GDP", f"{stats.avg_per_capita_gdp:,.0f} 元")
    cols[3].metric(
        "Counties",
        f"{stats.total_count}",
        help=f"{stats.positive_growth_count} growing, {stats.negative_growth_count} shrinking.",
    )


def render_table(rows: pd.DataFrame):
    if rows.empty:
        return
    display = rows[list(TABLE_COLUMNS)].rename(columns=TABLE_COLUMNS)
    st.dataframe(
        display,
        use_container_width=True,
        hide_index=True,
        column_config={
            TABLE_COLUMNS["gdp_2023"]: st.column_config.NumberColumn(format="%.2f"),
            TABLE_COLUMNS["gdp_2022"]: st.column_config.NumberColumn(format="%.2f"),
            TABLE_COLUMNS["per_capita_gdp"]: st.column_config.NumberColumn(format="%d"),
        },
    )


# ---------- UI setup ----------
st.set_page_config(page_title="County GDP Dashboard", layout="wide")
inject_base_styles()

try:
    counties = get_all_formatted_counties()
    prefectures: List[Dict[str, str]] = get_all_prefectures()
except FileNotFoundError as exc:
    logger.exception("loading bundled dataset failed")
    st.error(f"Could not load the county dataset: {exc}")
    st.stop()

if not counties:
    st.error("The county dataset is empty. Check data/counties.csv.")
    st.stop()

prefecture_names = {p["code"]: p["name"] for p in prefectures}

# ----- Sidebar: filters + sort -----
with st.sidebar:
    st.markdown("### Filters")
    prefecture_options = [ALL_PREFECTURES] + [p["code"] for p in prefectures]
    selected_prefecture = st.selectbox(
        "Prefecture",
        options=prefecture_options,
        index=0,
        format_func=lambda code: prefecture_names.get(code, code),
    )
    growth_min_raw = st.text_input("Min growth rate (%)", "")
    growth_max_raw = st.text_input("Max growth rate (%)", "")
    gdp_min_raw = st.text_input("Min 2023 GDP (亿元)", "")

    st.markdown("---")
    st.markdown("### Sort")
    sort_by_raw = st.selectbox("Sort by", options=list(SORT_KEYS), format_func=lambda k: SORT_LABELS[k])
    direction_raw = st.radio("Direction", ["desc", "asc"], horizontal=True, format_func=lambda d: "Descending" if d == "desc" else "Ascending")

    with st.expander("Advanced settings", expanded=False):
        top_n_raw = st.slider("Top N counties in bar chart", min_value=5, max_value=30, value=10, step=1)

settings = normalize_settings({"top_n": top_n_raw})
filters = normalize_filter_options(
    {
        "prefecture": selected_prefecture,
        "growth_rate_min": growth_min_raw,
        "growth_rate_max": growth_max_raw,
        "gdp_min": gdp_min_raw,
    }
)
sort_by, direction = normalize_sort({"sort_by": sort_by_raw, "direction": direction_raw}, settings=settings)

visible = apply_view(counties, filters, sort_by, direction)
stats = get_statistics(visible)
rows = counties_frame(visible)

render_page_header(
    "County GDP Dashboard",
    "Jiangsu › Counties",
    format_filter_summary(
        prefecture_names.get(filters.prefecture) if filters.prefecture else None,
        filters.growth_rate_min,
        filters.growth_rate_max,
        filters.gdp_min,
    ),
    export_df=rows,
)

render_statistics(stats)

chart_cols = st.columns([3, 2])
with chart_cols[0]:
    st.subheader(f"Top {settings.top_n} counties by 2023 GDP")
    top = top_counties(visible, settings.top_n)
    if top:
        st.altair_chart(top_gdp_bar(top), use_container_width=True)
    else:
        st.caption("Nothing to chart.")
with chart_cols[1]:
    st.subheader("Growth distribution")
    if not stats.is_empty:
        st.altair_chart(growth_pie(growth_distribution(visible)), use_container_width=True)
    else:
        st.caption("Nothing to chart.")

st.subheader("Counties")
render_table(rows)
