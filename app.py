import pandas as pd
import streamlit as st
from contextlib import contextmanager
from html import escape
from typing import Dict, List, Optional

from ev_core.charts import build_charts
from ev_core.data import export_csv, export_filename, load_dashboard_data
from ev_core.exceptions import DataLoadError
from ev_core.filters import FILTER_KEYS, FilterCriteria
from ev_core.metrics_overview import compute_overview
from ev_core.session import DashboardSession

FILTER_LABELS = {
    "state": "State",
    "county": "County",
    "city": "City",
    "make": "Make",
    "model": "Model",
    "year": "Model Year",
    "ev_type": "EV Type",
    "cafv_eligibility": "CAFV Eligibility",
}
ALL_OPTION = "All"


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
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;}
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin-top: 6px;}
        .chip {background: #f3f4f6;border: 1px solid #e5e7eb;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #374151;}
        .insight {background: linear-gradient(90deg, #ecfdf5, #f3e8ff);border-radius: 10px;padding: 8px 14px;margin: 6px 0 12px;}
        .insight .value {font-weight: 700;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(f"<div class='card-title'>{escape(title)}</div>", unsafe_allow_html=True)
    body = container.container()
    with body:
        yield body


def format_filter_summary(criteria: FilterCriteria) -> str:
    chips = []
    if criteria.search:
        chips.append(f"Search: {criteria.search}")
    for key, label in FILTER_LABELS.items():
        value = getattr(criteria, key)
        if value:
            chips.append(f"{label}: {value}")
    if not chips:
        chips.append("All vehicles")
    return "".join([f"<span class='chip'>{txt}</span>" for txt in map(escape, chips)])


def render_page_header(title: str, breadcrumb: str, filter_summary_html: str, export_df: Optional[pd.DataFrame] = None):
    inject_base_styles()
    c1, c2 = st.columns([8, 2])
    with c1:
        st.markdown(
            f"<div class='app-top-bar'><div class='breadcrumb'>{escape(breadcrumb)}</div><div class='page-title'>{escape(title)}</div></div>",
            unsafe_allow_html=True,
        )
    with c2:
        if export_df is not None and not export_df.empty:
            st.download_button(
                "Export CSV",
                data=export_csv(export_df),
                file_name=export_filename(),
                mime="text/csv",
            )
    st.markdown(f"<div class='chip-row'>{filter_summary_html}</div>", unsafe_allow_html=True)


def get_session(data_ctx: Dict[str, object]) -> DashboardSession:
    # One session per browser tab; rebuilt when the cached dataset is reloaded.
    session = st.session_state.get("dashboard_session")
    if session is None or st.session_state.get("dashboard_records") is not data_ctx["records"]:
        session = DashboardSession(data_ctx["records"])
        st.session_state["dashboard_session"] = session
        st.session_state["dashboard_records"] = data_ctx["records"]
    return session


def on_filter_change(key: str) -> None:
    value = st.session_state.get(f"filter_{key}", "")
    if value == ALL_OPTION:
        value = ""
    st.session_state["dashboard_session"].update_filter(key, value)


def on_clear_filters() -> None:
    st.session_state["dashboard_session"].clear_filters()
    for key in FILTER_KEYS:
        st.session_state.pop(f"filter_{key}", None)


def render_insight_banner(session: DashboardSession, insights: List[Dict[str, str]]):
    if not insights:
        return
    insight = insights[session.active_insight % len(insights)]
    c1, c2 = st.columns([9, 1])
    c1.markdown(
        f"<div class='insight'><span class='value'>{escape(insight['value'])}</span> {escape(insight['description'])}</div>",
        unsafe_allow_html=True,
    )
    if c2.button("Next", key="next_insight"):
        session.advance_insight()
        st.rerun()


# ---------- UI setup ----------
st.set_page_config(page_title="EV Analytics Dashboard", layout="wide")
inject_base_styles()

try:
    data_ctx = load_dashboard_data()
except DataLoadError as exc:
    st.error(f"Failed to load data: {exc}")
    st.stop()

session = get_session(data_ctx)
options: Dict[str, List[str]] = session.options
criteria = session.criteria

# ----- Sidebar: filters -----
with st.sidebar:
    st.markdown("### Filters")
    st.text_input("Search all fields", value=criteria.search, key="filter_search", on_change=on_filter_change, args=("search",))
    for key, label in FILTER_LABELS.items():
        choices = [ALL_OPTION] + options.get(key, [])
        current = getattr(criteria, key)
        st.selectbox(
            label,
            options=choices,
            index=choices.index(current) if current in choices else 0,
            key=f"filter_{key}",
            on_change=on_filter_change,
            args=(key,),
        )
    st.button("Clear all filters", key="clear_filters", on_click=on_clear_filters)

ctx = session.context()
filtered = ctx["filtered_records"]
payload = compute_overview(criteria, ctx)

render_page_header(
    "EV Analytics Dashboard",
    f"Electric Vehicle Population / {data_ctx.get('source', '')}",
    format_filter_summary(criteria),
    export_df=filtered,
)
render_insight_banner(session, payload["insights"])

# ----- Summary cards -----
cards = payload["summary_cards"]
cols = st.columns(4)
cols[0].metric("Total Vehicles", f"{cards['total_vehicles']:,}")
cols[1].metric("Unique States", cards["unique_states"])
cols[2].metric("Top Manufacturers", cards["top_manufacturers"])
cols[3].metric("Cities Covered", cards["cities_covered"])

perf = payload["performance"]
cols = st.columns(3)
cols[0].metric("Market Penetration", f"{perf['market_penetration_pct']:.1f}%", help="Share of the total EV population analyzed.")
cols[1].metric("Data Coverage", perf["data_coverage"], help="States with EV registrations.")
cols[2].metric("Brand Diversity", perf["brand_diversity"], help="Manufacturers represented in the top list.")

# ----- Charts -----
if filtered.empty:
    st.info("No vehicles match the current filters.")
else:
    charts = build_charts(payload["chart_data"])
    left, right = st.columns(2)
    with left:
        with card("Adoption trend"):
            st.altair_chart(charts["year_trend"], use_container_width=True)
        with card("Manufacturers"):
            st.altair_chart(charts["make_share"], use_container_width=True)
        with card("EV types"):
            st.altair_chart(charts["ev_types"], use_container_width=True)
    with right:
        with card("Cities"):
            st.altair_chart(charts["top_cities"], use_container_width=True)
        with card("States"):
            st.altair_chart(charts["states"], use_container_width=True)
        with card("CAFV eligibility"):
            st.altair_chart(charts["cafv"], use_container_width=True)

# ----- Executive summary -----
summary = payload["executive_summary"]
with card(f"Executive Summary ({payload['totals']['filtered']:,} records analyzed)"):
    cols = st.columns(4)
    cols[0].metric("Latest Technology", summary["latest_model_year"] or "N/A")
    cols[1].metric("Popular Category", summary["popular_category"] or "N/A")
    cols[2].metric("Leading Market", summary["leading_market"] or "N/A")
    cols[3].metric("Regional Leader", summary["regional_leader"] or "N/A")
