from __future__ import annotations

from typing import Any, Dict, List

import altair as alt
import pandas as pd

alt.data_transformers.disable_max_rows()


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def _frame(entries: List[Dict[str, Any]], columns: List[str]) -> pd.DataFrame:
    return pd.DataFrame(entries, columns=columns)


def bar_chart(entries: List[Dict[str, Any]], *, title: str, horizontal: bool = False) -> alt.Chart:
    df = _frame(entries, ["name", "value"])
    # Keep the order the summary already has instead of Vega's alphabetical default.
    order = df["name"].tolist()
    if horizontal:
        x = alt.X("value:Q", title="Vehicles", axis=alt.Axis(format="~s"))
        y = alt.Y("name:N", title=None, sort=order)
    else:
        x = alt.X("name:N", title=None, sort=order)
        y = alt.Y("value:Q", title="Vehicles", axis=alt.Axis(format="~s"))
    return (
        alt.Chart(df)
        .mark_bar(cornerRadiusEnd=4)
        .encode(
            x=x,
            y=y,
            tooltip=[alt.Tooltip("name:N", title="Name"), alt.Tooltip("value:Q", title="Vehicles", format=",")],
        )
        .properties(title=title, height=280)
    )


def donut_chart(entries: List[Dict[str, Any]], *, title: str) -> alt.Chart:
    df = _frame(entries, ["name", "value"])
    return (
        alt.Chart(df)
        .mark_arc(innerRadius=60)
        .encode(
            theta=alt.Theta("value:Q"),
            color=alt.Color("name:N", title=None, sort=df["name"].tolist()),
            tooltip=[alt.Tooltip("name:N", title="Name"), alt.Tooltip("value:Q", title="Vehicles", format=",")],
        )
        .properties(title=title, height=280)
    )


def year_trend_chart(entries: List[Dict[str, Any]], *, title: str) -> alt.Chart:
    df = _frame(entries, ["year", "count"])
    return (
        alt.Chart(df)
        .mark_area(line=True, point=True, opacity=0.4)
        .encode(
            x=alt.X("year:O", title="Model Year", sort=df["year"].tolist()),
            y=alt.Y("count:Q", title="Registrations", axis=alt.Axis(format="~s")),
            tooltip=[alt.Tooltip("year:O", title="Year"), alt.Tooltip("count:Q", title="Registrations", format=",")],
        )
        .properties(title=title, height=280)
    )


def build_charts(chart_data: Dict[str, List[Dict[str, Any]]]) -> Dict[str, alt.Chart]:
    return {
        "year_trend": year_trend_chart(chart_data.get("year_data", []), title="EV Adoption by Model Year"),
        "top_cities": bar_chart(chart_data.get("top_cities", []), title="Top 10 Cities", horizontal=True),
        "make_share": donut_chart(chart_data.get("make_data", []), title="Top Manufacturers"),
        "states": bar_chart(chart_data.get("state_data", []), title="Registrations by State"),
        "ev_types": donut_chart(chart_data.get("ev_type_data", []), title="Electric Vehicle Types"),
        "cafv": bar_chart(chart_data.get("cafv_data", []), title="CAFV Eligibility"),
    }


def build_chart_specs(chart_data: Dict[str, List[Dict[str, Any]]]) -> Dict[str, Dict[str, Any]]:
    return {key: to_vega_spec(chart) for key, chart in build_charts(chart_data).items()}
