from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List, Optional

import pandas as pd

from ev_core.charts import build_chart_specs
from ev_core.filters import FilterCriteria
from ev_core.metrics_insights import compute_insights, parse_model_year, round_half_up
from ev_core.records import MODEL_YEAR


def _first_name(entries: List[Dict[str, Any]]) -> Optional[str]:
    return entries[0]["name"] if entries else None


def latest_model_year(filtered: pd.DataFrame) -> Optional[int]:
    if filtered.empty or MODEL_YEAR not in filtered.columns:
        return None
    years = [y for y in filtered[MODEL_YEAR].map(parse_model_year) if y is not None]
    latest = max(years, default=0)
    return latest if latest > 0 else None


def compute_overview(filters: FilterCriteria, ctx: Dict[str, Any]) -> Dict[str, Any]:
    records: pd.DataFrame = ctx.get("records", pd.DataFrame())
    filtered: pd.DataFrame = ctx.get("filtered_records", pd.DataFrame())
    chart_data: Dict[str, List[Dict[str, Any]]] = ctx.get("chart_data") or {}

    total = int(len(records))
    shown = int(len(filtered))
    state_data = chart_data.get("state_data", [])
    make_data = chart_data.get("make_data", [])
    top_cities = chart_data.get("top_cities", [])

    return {
        "filters": asdict(filters),
        "totals": {"records": total, "filtered": shown},
        "summary_cards": {
            "total_vehicles": shown,
            "unique_states": len(state_data),
            "top_manufacturers": len(make_data),
            "cities_covered": len(top_cities),
        },
        "performance": {
            "market_penetration_pct": float(round_half_up(shown / max(total, 1) * 100, 1)),
            "data_coverage": len(state_data),
            "brand_diversity": len(make_data),
        },
        "executive_summary": {
            "latest_model_year": latest_model_year(filtered),
            "popular_category": _first_name(chart_data.get("ev_type_data", [])),
            "leading_market": _first_name(top_cities),
            "regional_leader": _first_name(state_data),
        },
        "chart_data": chart_data,
        "insights": compute_insights(filtered, chart_data),
    }


def compute_charts(filters: FilterCriteria, ctx: Dict[str, Any]) -> Dict[str, Any]:
    return {"filters": asdict(filters), "charts": build_chart_specs(ctx.get("chart_data") or {})}
